import re
from pathlib import Path
from typing import Iterable, List, Optional

from fastapi.concurrency import run_in_threadpool

from pdf_toolkit import config
from pdf_toolkit.utils import process

PAGE_PREFIX = "page"
# pdftoppm writes page-1.jpg or page-01.jpg depending on the page count
_PAGE_FILE = re.compile(rf"^{PAGE_PREFIX}-(\d+)\.jpe?g$", re.IGNORECASE)


def page_number(path) -> Optional[int]:
    match = _PAGE_FILE.match(Path(path).name)
    return int(match.group(1)) if match else None


def sort_page_images(paths: Iterable) -> List[Path]:
    numbered = [(page_number(p), Path(p)) for p in paths]
    return [path for number, path in sorted(item for item in numbered if item[0] is not None)]


def collect_page_images(output_dir: Path) -> List[Path]:
    return sort_page_images(output_dir.iterdir())


async def rasterize(binary: str, pdf_path: Path, output_dir: Path, dpi: Optional[int] = None) -> List[Path]:
    """Render every page of ``pdf_path`` to a JPEG and return them in page order."""
    dpi = dpi or config.RASTER_DPI
    await run_in_threadpool(output_dir.mkdir, parents=True, exist_ok=True)
    await process.run_binary(
        binary,
        ["-jpeg", "-r", str(dpi), str(pdf_path), str(output_dir / PAGE_PREFIX)],
    )
    return await run_in_threadpool(collect_page_images, output_dir)
