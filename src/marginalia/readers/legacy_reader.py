import logging
import re
from pathlib import Path

from .base import DocumentContent

logger = logging.getLogger(__name__)

_LEGACY_MIMES = {
    ".doc": "application/msword",
    ".rtf": "application/rtf",
}

# Anything outside printable ASCII plus common whitespace
_NON_PRINTABLE = re.compile(r"[^\x20-\x7E\n\r\t]")


def read_legacy(path: Path) -> DocumentContent:
    """Best-effort text for .doc and .rtf: keep the printable characters of the raw bytes.

    Formatting control words survive in the output. Convert to .docx or .txt for clean text.
    """
    ext = path.suffix.lower()
    logger.warning(
        "%s: no structured reader for %s files, using basic printable-text extraction",
        path.name,
        ext,
    )
    raw = path.read_bytes().decode("utf-8", errors="ignore")
    text = _NON_PRINTABLE.sub("", raw)

    return DocumentContent(
        parts=[text],
        mimetype=_LEGACY_MIMES.get(ext, "application/octet-stream"),
    )
