import logging
from pathlib import Path

from .base import DocumentContent

logger = logging.getLogger(__name__)


def read_txt(path: Path) -> DocumentContent:
    """Read a plain text file, trying UTF-8 first then latin-1.

    Line endings are normalized to "\\n" so offsets match what a viewer displays.
    """
    raw = path.read_bytes()
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError:
        logger.warning("%s: not valid UTF-8, falling back to latin-1 encoding", path.name)
        text = raw.decode("latin-1")
    text = text.replace("\r\n", "\n").replace("\r", "\n")

    return DocumentContent(parts=[text], mimetype="text/plain")
