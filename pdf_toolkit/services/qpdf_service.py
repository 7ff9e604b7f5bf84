from typing import Optional

from fastapi.concurrency import run_in_threadpool
from loguru import logger

from pdf_toolkit.exceptions import MissingDependencyError, MissingInputError, ProcessingError
from pdf_toolkit.utils import process
from pdf_toolkit.utils.workspace import sanitize_basename, temp_workspace

# qpdf exits with 3 when it succeeded but printed warnings
QPDF_OK_RETURNCODES = (0, 3)


def _require_qpdf(qpdf: Optional[str]) -> str:
    if not qpdf:
        raise MissingDependencyError("qpdf", "QPDF_PATH")
    return qpdf


async def _run_qpdf(qpdf: str, data: bytes, filename: Optional[str], output_name: str, args, password: Optional[str] = None) -> bytes:
    with temp_workspace() as workdir:
        input_dir = workdir / "in"
        await run_in_threadpool(input_dir.mkdir)
        input_path = input_dir / sanitize_basename(filename, "input.pdf")
        output_path = workdir / output_name
        await run_in_threadpool(input_path.write_bytes, data)

        await process.run_binary(
            qpdf, args(input_path, output_path),
            ok_returncodes=QPDF_OK_RETURNCODES,
            secrets=(password,) if password else (),
        )

        try:
            return await run_in_threadpool(output_path.read_bytes)
        except OSError as e:
            raise ProcessingError(f"qpdf produced no output: {e}") from e


async def protect_pdf(qpdf: Optional[str], data: Optional[bytes], filename: Optional[str], password: Optional[str]) -> bytes:
    if not data or not password:
        raise MissingInputError("file and password are required")
    qpdf = _require_qpdf(qpdf)
    logger.info("Encrypting PDF with AES-256")
    return await _run_qpdf(
        qpdf, data, filename, "protected.pdf",
        lambda src, dst: ["--encrypt", password, password, "256", "--", src, dst],
        password=password,
    )


async def unlock_pdf(qpdf: Optional[str], data: Optional[bytes], filename: Optional[str], password: Optional[str] = None) -> bytes:
    if not data:
        raise MissingInputError("file is required")
    qpdf = _require_qpdf(qpdf)

    def args(src, dst):
        if password:
            return [f"--password={password}", "--decrypt", src, dst]
        return ["--decrypt", src, dst]

    logger.info("Decrypting PDF")
    return await _run_qpdf(qpdf, data, filename, "unlocked.pdf", args, password=password)


async def repair_pdf(qpdf: Optional[str], data: Optional[bytes], filename: Optional[str]) -> bytes:
    if not data:
        raise MissingInputError("file is required")
    qpdf = _require_qpdf(qpdf)
    logger.info("Rewriting PDF with qpdf --linearize")
    return await _run_qpdf(
        qpdf, data, filename, "repaired.pdf",
        lambda src, dst: ["--linearize", src, dst],
    )
