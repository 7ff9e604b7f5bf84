"""
Shared fixtures: in-memory PDFs, a TestClient with binary resolvers
overridden, and fake external processes standing in for pdftoppm, qpdf and
soffice.
"""

import asyncio
from pathlib import Path

import fitz
import pytest
from fastapi.testclient import TestClient
from loguru import logger
from PIL import Image

from pdf_toolkit import config
from pdf_toolkit.main import app
from pdf_toolkit.utils import process
from pdf_toolkit.utils.binaries import resolve_libreoffice, resolve_pdftoppm, resolve_qpdf

FAKE_RASTER_DPI = 36


def make_pdf(texts, size=(612, 792)) -> bytes:
    """One page per entry in ``texts``, each with that text near the top."""
    doc = fitz.open()
    for text in texts:
        page = doc.new_page(width=size[0], height=size[1])
        if text:
            page.insert_text((72, 72), text, fontsize=14)
    data = doc.tobytes()
    doc.close()
    return data


def fake_pdftoppm_output(args):
    """Render like ``pdftoppm -jpeg -r <dpi> <pdf> <prefix>`` does, at low resolution."""
    pdf_path, prefix = Path(args[-2]), Path(args[-1])
    doc = fitz.open(str(pdf_path))
    try:
        digits = len(str(len(doc)))
        for index, page in enumerate(doc, start=1):
            pix = page.get_pixmap(dpi=FAKE_RASTER_DPI)
            image = Image.frombytes("RGB", (pix.width, pix.height), pix.samples)
            image.save(f"{prefix}-{index:0{digits}d}.jpg", "JPEG")
    finally:
        doc.close()


class FakeProcess:
    """Records every invocation; ``handler(binary, args)`` produces the side effects."""

    def __init__(self, handler=None):
        self.calls = []
        self.handler = handler

    async def __call__(self, binary, args, timeout=None, ok_returncodes=(0,), secrets=()):
        args = [str(arg) for arg in args]
        self.calls.append((binary, args))
        await asyncio.sleep(0)
        if self.handler:
            self.handler(binary, args)
        return ""


@pytest.fixture
def pdf_factory():
    return make_pdf


@pytest.fixture
def workspace_root(tmp_path, monkeypatch):
    root = tmp_path / "workspaces"
    root.mkdir()
    monkeypatch.setattr(config, "TEMP_ROOT", str(root))
    return root


@pytest.fixture
def fake_process(monkeypatch):
    fake = FakeProcess()
    monkeypatch.setattr(process, "run_binary", fake)
    return fake


@pytest.fixture
def fake_pdftoppm(fake_process):
    fake_process.handler = lambda binary, args: fake_pdftoppm_output(args)
    return fake_process


@pytest.fixture
def binaries():
    """Resolver outcomes; set an entry to None to simulate a missing binary."""
    found = {
        "qpdf": "/fake/bin/qpdf",
        "libreoffice": "/fake/bin/soffice",
        "pdftoppm": "/fake/bin/pdftoppm",
    }
    app.dependency_overrides[resolve_qpdf] = lambda: found["qpdf"]
    app.dependency_overrides[resolve_libreoffice] = lambda: found["libreoffice"]
    app.dependency_overrides[resolve_pdftoppm] = lambda: found["pdftoppm"]
    yield found
    app.dependency_overrides.clear()


@pytest.fixture
def client(binaries, workspace_root):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def log_messages():
    """Everything loguru emits at DEBUG and above while the test runs."""
    messages = []
    handler_id = logger.add(messages.append, level="DEBUG", format="{message}")
    yield messages
    logger.remove(handler_id)
