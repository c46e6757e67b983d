from pathlib import Path

import fitz  # PyMuPDF
import pytest

from marginalia.annotations.models import Document
from marginalia.annotations.store import AnnotationStore
from marginalia.pagination import PageSegmenter
from marginalia.storage.repository import DocumentRepository

PDF_PAGES = [
    "First page about education grants.",
    "Second page about health programs.",
    "Third page with the budget summary.",
]


@pytest.fixture
def repository(tmp_path: Path) -> DocumentRepository:
    return DocumentRepository(tmp_path / "documents")


@pytest.fixture
def store(repository: DocumentRepository) -> AnnotationStore:
    return AnnotationStore(repository, PageSegmenter(chars_per_page=2000))


@pytest.fixture
def make_document(repository: DocumentRepository):
    """Store a document record and return it."""

    def _make(text: str = "The quick brown fox", mimetype: str = "text/plain", path: str = "") -> Document:
        document = Document(
            id=repository.new_id(),
            filename="sample.txt",
            mimetype=mimetype,
            extracted_text=text,
            path=path,
            size=len(text),
        )
        repository.save(document)
        return document

    return _make


@pytest.fixture
def sample_pdf(tmp_path: Path) -> Path:
    path = tmp_path / "sample.pdf"
    doc = fitz.open()
    for text in PDF_PAGES:
        page = doc.new_page()
        page.insert_text((72, 72), text)
    doc.save(str(path))
    doc.close()
    return path
