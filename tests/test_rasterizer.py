import asyncio
import random
from pathlib import Path

from pdf_toolkit import config
from pdf_toolkit.services import rasterizer


class TestPageOrdering:

    def test_page_number(self):
        assert rasterizer.page_number("page-7.jpg") == 7
        assert rasterizer.page_number(Path("/tmp/x/page-012.jpg")) == 12
        assert rasterizer.page_number("page-3.jpeg") == 3
        assert rasterizer.page_number("staged.pdf") is None
        assert rasterizer.page_number("page-.jpg") is None

    def test_numeric_not_lexicographic(self):
        names = [f"page-{n}.jpg" for n in range(1, 13)]
        shuffled = names[:]
        random.Random(4).shuffle(shuffled)
        ordered = rasterizer.sort_page_images(shuffled)
        assert [p.name for p in ordered] == names
        # lexicographic order would put page-10 right after page-1
        assert sorted(names)[1] == "page-10.jpg"

    def test_zero_padded_names(self):
        ordered = rasterizer.sort_page_images(["page-10.jpg", "page-02.jpg", "page-09.jpg"])
        assert [rasterizer.page_number(p) for p in ordered] == [2, 9, 10]

    def test_ignores_unrelated_files(self):
        ordered = rasterizer.sort_page_images(["notes.txt", "page-2.jpg", "page-1.jpg", "cover.jpg"])
        assert [p.name for p in ordered] == ["page-1.jpg", "page-2.jpg"]


class TestRasterize:

    def test_invokes_pdftoppm_and_sorts_output(self, tmp_path, fake_process):
        def write_pages(binary, args):
            prefix = Path(args[-1])
            for n in (10, 2, 1):
                Path(f"{prefix}-{n:02d}.jpg").write_bytes(b"jpeg")

        fake_process.handler = write_pages
        pdf_path = tmp_path / "staged.pdf"
        out_dir = tmp_path / "pages"

        images = asyncio.run(rasterizer.rasterize("/usr/bin/pdftoppm", pdf_path, out_dir))

        assert [p.name for p in images] == ["page-01.jpg", "page-02.jpg", "page-10.jpg"]
        binary, args = fake_process.calls[0]
        assert binary == "/usr/bin/pdftoppm"
        assert args == ["-jpeg", "-r", "220", str(pdf_path), str(out_dir / "page")]

    def test_dpi_from_config(self, tmp_path, fake_process, monkeypatch):
        monkeypatch.setattr(config, "RASTER_DPI", 150)
        images = asyncio.run(rasterizer.rasterize("pdftoppm", tmp_path / "in.pdf", tmp_path / "out"))
        assert images == []
        assert fake_process.calls[0][1][:3] == ["-jpeg", "-r", "150"]

    def test_collect_page_images(self, tmp_path):
        for name in ("page-2.jpg", "page-1.jpg", "page.ppm"):
            (tmp_path / name).write_bytes(b"jpeg")
        assert [p.name for p in rasterizer.collect_page_images(tmp_path)] == ["page-1.jpg", "page-2.jpg"]
