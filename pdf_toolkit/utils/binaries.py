import os
import shutil
from typing import Callable, Iterable, List, Optional

from pdf_toolkit import config

QPDF_FALLBACKS = [
    "C:/Program Files/qpdf/bin/qpdf.exe",
    "C:/Program Files (x86)/qpdf/bin/qpdf.exe",
    "/usr/bin/qpdf",
    "/usr/local/bin/qpdf",
    "/opt/homebrew/bin/qpdf",
]

LIBREOFFICE_FALLBACKS = [
    "C:/Program Files/LibreOffice/program/soffice.exe",
    "C:/Program Files (x86)/LibreOffice/program/soffice.exe",
    "/Applications/LibreOffice.app/Contents/MacOS/soffice",
    "/usr/bin/soffice",
]

PDFTOPPM_FALLBACKS = [
    "/usr/bin/pdftoppm",
    "/usr/local/bin/pdftoppm",
    "/opt/homebrew/bin/pdftoppm",
    "C:/Program Files/poppler/Library/bin/pdftoppm.exe",
]


def _is_executable(path: str) -> bool:
    return os.path.isfile(path) and os.access(path, os.X_OK)


def _has_directory(candidate: str) -> bool:
    return "/" in candidate or "\\" in candidate


def find_binary(
    candidates: Iterable[Optional[str]],
    which: Callable[[str], Optional[str]] = shutil.which,
    is_executable: Callable[[str], bool] = _is_executable,
) -> Optional[str]:
    """Return the first usable candidate, or None.

    Paths are checked directly; bare command names go through the search path.
    """
    for candidate in candidates:
        if not candidate:
            continue
        if _has_directory(candidate):
            if is_executable(candidate):
                return candidate
            continue
        found = which(candidate)
        if found:
            return found
    return None


def qpdf_candidates() -> List[str]:
    return [config.QPDF_PATH, "qpdf", *QPDF_FALLBACKS]


def libreoffice_candidates() -> List[str]:
    return [config.LIBREOFFICE_PATH, "soffice", "libreoffice", *LIBREOFFICE_FALLBACKS]


def pdftoppm_candidates() -> List[str]:
    return [config.PDFTOPPM_PATH, "pdftoppm", *PDFTOPPM_FALLBACKS]


# FastAPI dependencies; tests swap these out through app.dependency_overrides
def resolve_qpdf() -> Optional[str]:
    return find_binary(qpdf_candidates())


def resolve_libreoffice() -> Optional[str]:
    return find_binary(libreoffice_candidates())


def resolve_pdftoppm() -> Optional[str]:
    return find_binary(pdftoppm_candidates())
