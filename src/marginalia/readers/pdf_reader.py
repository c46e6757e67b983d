import logging
from pathlib import Path

import fitz  # PyMuPDF

from .base import DocumentContent

logger = logging.getLogger(__name__)

PDF_MIMETYPE = "application/pdf"


def page_text(page: "fitz.Page") -> str:
    """Join a page's text spans, one line per space-separated run."""
    lines: list[str] = []
    for block in page.get_text("dict")["blocks"]:
        if block["type"] != 0:  # Skip image blocks
            continue
        for line in block["lines"]:
            text = "".join(span["text"] for span in line["spans"])
            if text.strip():
                lines.append(text)
    return " ".join(lines)


def read_pdf(path: Path) -> DocumentContent:
    """Read a PDF file using PyMuPDF, one part per page."""
    doc = fitz.open(str(path))
    try:
        parts = [page_text(doc[page_idx]) + "\n" for page_idx in range(len(doc))]
    finally:
        doc.close()

    content = DocumentContent(parts=parts, mimetype=PDF_MIMETYPE, paginated=True)
    if not content.raw_text.strip():
        logger.warning(
            "PDF '%s' contains no extractable text; it may be a scanned document without a text layer.",
            path.name,
        )
    return content
