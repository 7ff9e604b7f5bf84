import io
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, Sequence

import fitz
from loguru import logger
from PIL import Image

from pdf_toolkit.exceptions import ProcessingError
from pdf_toolkit.models import RedactionRule

BLACK = (0, 0, 0)


@dataclass(frozen=True)
class CoverBox:
    """Cover rectangle in PDF user space (origin at the bottom-left corner)."""

    x: float
    y: float
    width: float
    height: float


def compute_cover_box(rule: RedactionRule, page_width: float, page_height: float) -> CoverBox:
    rect_x = rule.x * page_width
    rect_width = min(page_width - rect_x, rule.width * page_width)
    rect_height = min(page_height, rule.height * page_height)
    rect_y = max(0.0, page_height - rule.y * page_height - rect_height)
    return CoverBox(
        x=rect_x,
        y=rect_y,
        width=max(1.0, rect_width),
        height=max(1.0, rect_height),
    )


def cover_rect(box: CoverBox, page: fitz.Page) -> fitz.Rect:
    """Map a bottom-left-origin box on the visible page to PyMuPDF drawing space."""
    top = page.rect.height - box.y - box.height
    rect = fitz.Rect(box.x, top, box.x + box.width, top + box.height)
    if page.rotation:
        rect = (rect * page.derotation_matrix).normalize()
    return rect


def open_pdf(pdf_bytes: bytes) -> fitz.Document:
    try:
        doc = fitz.open(stream=pdf_bytes, filetype="pdf")
    except Exception as e:
        raise ProcessingError(f"Could not read PDF: {e}") from e
    if doc.needs_pass:
        doc.close()
        raise ProcessingError("PDF is password protected; unlock it first")
    if len(doc) == 0:
        doc.close()
        raise ProcessingError("PDF has no pages")
    return doc


def stage_redactions(pdf_bytes: bytes, rules: Iterable[RedactionRule]) -> bytes:
    """Draw an opaque black rectangle over every rule's region."""
    doc = open_pdf(pdf_bytes)
    try:
        page_count = len(doc)
        for rule in rules:
            if rule.page > page_count:
                logger.debug(f"Skipping rule for page {rule.page}: PDF has {page_count} page(s)")
                continue
            page = doc[rule.page - 1]
            box = compute_cover_box(rule, page.rect.width, page.rect.height)
            shape = page.new_shape()
            shape.draw_rect(cover_rect(box, page))
            shape.finish(color=BLACK, fill=BLACK)
            shape.commit()

        out = io.BytesIO()
        doc.save(out, garbage=3, deflate=True)
        return out.getvalue()
    finally:
        doc.close()


def build_from_rasters(image_paths: Sequence[Path]) -> bytes:
    """New PDF with one page per image, each page sized to the image's pixels."""
    doc = fitz.open()
    try:
        for path in image_paths:
            with Image.open(path) as img:
                width, height = img.size
            page = doc.new_page(width=width, height=height)
            page.insert_image(page.rect, filename=str(path))

        out = io.BytesIO()
        doc.save(out, garbage=3, deflate=True)
        return out.getvalue()
    finally:
        doc.close()


def count_pages(pdf_bytes: bytes) -> int:
    doc = open_pdf(pdf_bytes)
    try:
        return len(doc)
    finally:
        doc.close()


def extract_text(pdf_bytes: bytes) -> str:
    doc = open_pdf(pdf_bytes)
    try:
        return "\n\n".join(page.get_text() for page in doc)
    finally:
        doc.close()


def iter_page_images(pdf_bytes: bytes, dpi: int) -> Iterator[Image.Image]:
    """Render pages to Pillow images one at a time, for OCR."""
    doc = open_pdf(pdf_bytes)
    try:
        for page in doc:
            pix = page.get_pixmap(dpi=dpi)
            yield Image.open(io.BytesIO(pix.tobytes("png")))
    finally:
        doc.close()
