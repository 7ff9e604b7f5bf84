import os


def _optional_float(value: str):
    value = (value or "").strip()
    return float(value) if value else None


# External binaries (explicit overrides, tried before PATH lookup)
QPDF_PATH = os.getenv("QPDF_PATH", "")
LIBREOFFICE_PATH = os.getenv("LIBREOFFICE_PATH", "")
PDFTOPPM_PATH = os.getenv("PDFTOPPM_PATH", "")

# CORS allow-list, empty means every origin is allowed
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("FRONTEND_ORIGIN", "").split(",")
    if origin.strip()
]

# Redaction
RASTER_DPI = int(os.getenv("RASTER_DPI", "220"))

# OCR
OCR_LANG = os.getenv("OCR_LANG", "eng")

# Per-request workspaces, None uses the system temp dir
TEMP_ROOT = os.getenv("PDF_TOOLKIT_TMPDIR") or None
TEMP_PREFIX = "pdf-toolkit-"

# Seconds; unset means external processes may run indefinitely
PROCESS_TIMEOUT = _optional_float(os.getenv("PROCESS_TIMEOUT", ""))

# Server
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8787"))
