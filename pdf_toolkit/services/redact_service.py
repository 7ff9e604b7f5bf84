from typing import List, Optional

from fastapi.concurrency import run_in_threadpool
from loguru import logger

from pdf_toolkit.exceptions import (
    MissingDependencyError,
    MissingInputError,
    NoValidWorkError,
    ProcessingError,
)
from pdf_toolkit.models import RedactionRule
from pdf_toolkit.services import rasterizer
from pdf_toolkit.services.pdf_processor import build_from_rasters, stage_redactions
from pdf_toolkit.utils.workspace import temp_workspace


async def handle_redact_pdf(
    pdf_bytes: Optional[bytes],
    rules: List[RedactionRule],
    pdftoppm: Optional[str],
) -> bytes:
    """
    Cover every rule's region, rasterize the result and rebuild the PDF from
    the page images only, so nothing under the covers can be extracted.
    """
    if not pdf_bytes:
        raise MissingInputError("Missing file")
    if not rules:
        raise NoValidWorkError("No valid redactions provided")
    if not pdftoppm:
        raise MissingDependencyError("pdftoppm", "PDFTOPPM_PATH")

    with temp_workspace() as workdir:
        staged = await run_in_threadpool(stage_redactions, pdf_bytes, rules)
        staged_path = workdir / "staged.pdf"
        try:
            await run_in_threadpool(staged_path.write_bytes, staged)
        except OSError as e:
            raise ProcessingError(f"Could not write staged PDF: {e}") from e
        logger.debug(f"Staged {len(rules)} redaction(s) into {staged_path}")

        images = await rasterizer.rasterize(pdftoppm, staged_path, workdir / "pages")
        if not images:
            raise ProcessingError("Rasterizer produced no page images")
        logger.debug(f"Rasterized {len(images)} page(s)")

        result = await run_in_threadpool(build_from_rasters, images)

    logger.info(f"Redacted PDF rebuilt from {len(images)} page image(s)")
    return result
