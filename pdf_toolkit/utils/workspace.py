import re
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path

from loguru import logger

from pdf_toolkit import config

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9._-]")
# well under the 255-byte name limit of common filesystems
MAX_BASENAME = 100
MAX_EXTENSION = 16


def sanitize_basename(name, default: str = "file") -> str:
    cleaned = _UNSAFE_CHARS.sub("_", str(name or ""))
    # names made only of dots would resolve outside the workspace
    if not cleaned.strip("."):
        return default
    if len(cleaned) > MAX_BASENAME:
        stem, dot, extension = cleaned.rpartition(".")
        if stem and len(extension) <= MAX_EXTENSION:
            cleaned = f"{stem[:MAX_BASENAME - len(extension) - 1]}.{extension}"
        else:
            cleaned = cleaned[:MAX_BASENAME]
    return cleaned


@contextmanager
def temp_workspace():
    """Yield a fresh per-request directory and remove it on every exit path."""
    path = Path(tempfile.mkdtemp(prefix=config.TEMP_PREFIX, dir=config.TEMP_ROOT))
    logger.debug(f"Created workspace {path}")
    try:
        yield path
    finally:
        shutil.rmtree(path, ignore_errors=True)
        logger.debug(f"Removed workspace {path}")
