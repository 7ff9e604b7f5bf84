import io
from typing import Iterator, Optional

import pytesseract
from fastapi.concurrency import run_in_threadpool
from loguru import logger
from PIL import Image, UnidentifiedImageError

from pdf_toolkit import config
from pdf_toolkit.exceptions import MissingDependencyError, MissingInputError, ProcessingError
from pdf_toolkit.services import pdf_processor

OCR_RENDER_DPI = 300


def is_pdf(data: bytes) -> bool:
    return data.lstrip()[:5] == b"%PDF-"


async def pdf_to_text(data: Optional[bytes]) -> str:
    if not data:
        raise MissingInputError("Missing file")
    return await run_in_threadpool(pdf_processor.extract_text, data)


def _iter_images(data: bytes) -> Iterator[Image.Image]:
    if is_pdf(data):
        return pdf_processor.iter_page_images(data, OCR_RENDER_DPI)
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, OSError) as e:
        raise ProcessingError(f"Unsupported image: {e}") from e
    return iter([image])


def _recognize(data: bytes, lang: str) -> str:
    images = _iter_images(data)
    texts = []
    try:
        # one page image in memory at a time
        for image in images:
            with image:
                texts.append(pytesseract.image_to_string(image, lang=lang))
    except pytesseract.TesseractNotFoundError as e:
        raise MissingDependencyError("tesseract") from e
    except pytesseract.TesseractError as e:
        raise ProcessingError(f"OCR failed: {e}") from e
    finally:
        close = getattr(images, "close", None)
        if close is not None:
            close()
    return "\n\n".join(texts)


async def ocr_text(data: Optional[bytes]) -> str:
    """OCR an image, or every page of a PDF."""
    if not data:
        raise MissingInputError("Missing file")
    logger.info(f"Running OCR (lang={config.OCR_LANG})")
    return await run_in_threadpool(_recognize, data, config.OCR_LANG)
