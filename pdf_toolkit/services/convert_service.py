import re
from pathlib import Path
from typing import Optional, Tuple

from fastapi.concurrency import run_in_threadpool
from loguru import logger

from pdf_toolkit.exceptions import MissingDependencyError, MissingInputError, ProcessingError
from pdf_toolkit.utils import process
from pdf_toolkit.utils.workspace import sanitize_basename, temp_workspace

_EXTENSION = re.compile(r"^[a-z0-9]+$")


def parse_target(target: Optional[str]) -> Tuple[str, str]:
    """Split ``docx`` or ``pdf:writer_pdf_Export`` into (target, extension)."""
    raw = (target or "").strip()
    extension, sep, export_filter = raw.partition(":")
    extension = extension.lower()
    if not _EXTENSION.match(extension):
        raise MissingInputError(f"Unsupported target format: {raw!r}")
    # LibreOffice filter names are case sensitive
    return f"{extension}{sep}{export_filter}", extension


async def convert_document(
    soffice: Optional[str],
    data: Optional[bytes],
    filename: Optional[str],
    target: Optional[str],
) -> Tuple[bytes, str]:
    """Convert with LibreOffice; returns the output bytes and its file name."""
    if not data or not (target or "").strip():
        raise MissingInputError("file and target are required")
    target, extension = parse_target(target)
    if not soffice:
        raise MissingDependencyError("LibreOffice", "LIBREOFFICE_PATH")

    with temp_workspace() as workdir:
        input_name = sanitize_basename(filename, "input.bin")
        input_path = workdir / input_name
        output_dir = workdir / "out"
        await run_in_threadpool(output_dir.mkdir)
        await run_in_threadpool(input_path.write_bytes, data)

        logger.info(f"Converting {input_name} to {target}")
        await process.run_binary(soffice, [
            # private profile so parallel conversions do not fight over one
            f"-env:UserInstallation={(workdir / 'profile').as_uri()}",
            "--headless",
            "--convert-to", target,
            "--outdir", str(output_dir),
            str(input_path),
        ])

        output_name = f"{Path(input_name).stem}.{extension}"
        try:
            return await run_in_threadpool((output_dir / output_name).read_bytes), output_name
        except OSError as e:
            raise ProcessingError(f"Conversion produced no {extension} output") from e
