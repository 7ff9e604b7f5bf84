import io
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import StreamingResponse

from pdf_toolkit.models import HealthBinaries, HealthResponse, TextResponse, parse_redaction_rules
from pdf_toolkit.services import convert_service, qpdf_service, text_service
from pdf_toolkit.services.redact_service import handle_redact_pdf
from pdf_toolkit.utils.binaries import resolve_libreoffice, resolve_pdftoppm, resolve_qpdf

router = APIRouter(prefix="/api")


async def _read(file: Optional[UploadFile]) -> Optional[bytes]:
    if file is None:
        return None
    return await file.read()


def _attachment(content: bytes, filename: str, media_type: str = "application/pdf") -> StreamingResponse:
    return StreamingResponse(
        io.BytesIO(content),
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/health", response_model=HealthResponse)
def health(
    qpdf: Optional[str] = Depends(resolve_qpdf),
    soffice: Optional[str] = Depends(resolve_libreoffice),
    pdftoppm: Optional[str] = Depends(resolve_pdftoppm),
):
    return HealthResponse(
        ok=True,
        binaries=HealthBinaries(
            qpdf=bool(qpdf),
            libreoffice=bool(soffice),
            pdftoppm=bool(pdftoppm),
        ),
    )


@router.post("/redact-pdf")
async def redact_pdf(
    file: Optional[UploadFile] = File(None),
    redactions: Optional[str] = Form(None),
    pdftoppm: Optional[str] = Depends(resolve_pdftoppm),
):
    rules = parse_redaction_rules(redactions)
    result = await handle_redact_pdf(await _read(file), rules, pdftoppm)
    return _attachment(result, "redacted.pdf")


@router.post("/protect-pdf")
async def protect_pdf(
    file: Optional[UploadFile] = File(None),
    password: Optional[str] = Form(None),
    qpdf: Optional[str] = Depends(resolve_qpdf),
):
    filename = file.filename if file else None
    result = await qpdf_service.protect_pdf(qpdf, await _read(file), filename, password)
    return _attachment(result, "protected.pdf")


@router.post("/unlock-pdf")
async def unlock_pdf(
    file: Optional[UploadFile] = File(None),
    password: Optional[str] = Form(None),
    qpdf: Optional[str] = Depends(resolve_qpdf),
):
    filename = file.filename if file else None
    result = await qpdf_service.unlock_pdf(qpdf, await _read(file), filename, password)
    return _attachment(result, "unlocked.pdf")


@router.post("/repair-pdf")
async def repair_pdf(
    file: Optional[UploadFile] = File(None),
    qpdf: Optional[str] = Depends(resolve_qpdf),
):
    filename = file.filename if file else None
    result = await qpdf_service.repair_pdf(qpdf, await _read(file), filename)
    return _attachment(result, "repaired.pdf")


@router.post("/convert")
async def convert(
    file: Optional[UploadFile] = File(None),
    target: Optional[str] = Form(None),
    soffice: Optional[str] = Depends(resolve_libreoffice),
):
    filename = file.filename if file else None
    result, output_name = await convert_service.convert_document(soffice, await _read(file), filename, target)
    return _attachment(result, output_name, "application/octet-stream")


@router.post("/pdf-to-text", response_model=TextResponse)
async def pdf_to_text(file: Optional[UploadFile] = File(None)):
    text = await text_service.pdf_to_text(await _read(file))
    return TextResponse(text=text or "")


@router.post("/ocr", response_model=TextResponse)
async def ocr(file: Optional[UploadFile] = File(None)):
    text = await text_service.ocr_text(await _read(file))
    return TextResponse(text=text or "")
