from pathlib import Path

from docx import Document

from .base import DocumentContent

DOCX_MIMETYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def read_docx(path: Path) -> DocumentContent:
    """Read a .docx file paragraph by paragraph, then table cells."""
    doc = Document(str(path))
    parts = [para.text + "\n" for para in doc.paragraphs]

    for table in doc.tables:
        for row in table.rows:
            parts.extend(cell.text + "\n" for cell in row.cells if cell.text)

    return DocumentContent(parts=parts, mimetype=DOCX_MIMETYPE)
