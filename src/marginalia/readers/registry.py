import logging
from pathlib import Path

try:
    import magic

    _HAS_MAGIC = True
except ImportError:
    _HAS_MAGIC = False

from .base import DocumentContent

logger = logging.getLogger(__name__)

TEXT_EXTENSIONS = {".txt", ".md"}
LEGACY_EXTENSIONS = {".doc", ".rtf"}
SUPPORTED_EXTENSIONS = TEXT_EXTENSIONS | LEGACY_EXTENSIONS | {".docx", ".pdf"}

# Expected MIME types for each extension, as reported by libmagic.
_EXPECTED_MIMES: dict[str, set[str]] = {
    ".txt": {"text/plain"},
    ".md": {"text/plain", "text/markdown"},
    ".docx": {"application/zip", "application/vnd.openxmlformats-officedocument.wordprocessingml.document"},
    ".doc": {"application/msword", "application/x-ole-storage", "application/CDFV2"},
    ".rtf": {"text/rtf", "application/rtf"},
    ".pdf": {"application/pdf"},
}


def _check_mime(path: Path, ext: str) -> None:
    """Warn if the file's MIME type is inconsistent with its extension."""
    if not _HAS_MAGIC:
        return

    expected = _EXPECTED_MIMES.get(ext)
    if expected is None:
        return

    try:
        detected = magic.from_file(str(path), mime=True)
    except Exception:
        return

    if detected in expected:
        return

    logger.warning(
        "%s: file extension is '%s' but content looks like '%s'; the file may be misnamed or corrupted",
        path.name,
        ext,
        detected,
    )


def read_document(path: Path) -> DocumentContent | None:
    """Extract text from a file using the reader for its extension.

    Returns None if the format is unsupported.
    """
    ext = path.suffix.lower()

    if ext not in SUPPORTED_EXTENSIONS:
        logger.debug("Skipping unsupported file: %s", path.name)
        return None

    _check_mime(path, ext)

    if ext in TEXT_EXTENSIONS:
        from .txt_reader import read_txt

        return read_txt(path)
    if ext == ".docx":
        from .docx_reader import read_docx

        return read_docx(path)
    if ext == ".pdf":
        from .pdf_reader import read_pdf

        return read_pdf(path)
    from .legacy_reader import read_legacy

    return read_legacy(path)


def list_supported_files(path: Path) -> list[Path]:
    """List all supported files in a directory (non-recursive) or return [path] if it's a file."""
    if path.is_file():
        return [path] if path.suffix.lower() in SUPPORTED_EXTENSIONS else []

    return [item for item in sorted(path.iterdir()) if item.is_file() and item.suffix.lower() in SUPPORTED_EXTENSIONS]
