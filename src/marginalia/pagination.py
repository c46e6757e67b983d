"""Map a document's extracted text to page-local content.

When the source file is a readable PDF, pages come straight from PyMuPDF. Otherwise the
extracted text is cut into equal character windows based on an estimated page count.
"""

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Protocol, runtime_checkable

import fitz  # PyMuPDF

from .annotations.models import Document
from .errors import ExtractionUnavailable, InvalidRange
from .readers.pdf_reader import PDF_MIMETYPE, page_text

logger = logging.getLogger(__name__)

PAGINATED_MIMETYPES = {PDF_MIMETYPE}


@runtime_checkable
class PageSource(Protocol):
    """Page-aware text extraction for a single document."""

    @property
    def total_pages(self) -> int: ...

    def get_page_text(self, page_number: int) -> str:
        """Return the text of a 1-based page, or "" past the last page."""
        ...


class PdfPageSource:
    """Reads exact per-page text from a PDF file with PyMuPDF."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._pages: list[str] | None = None

    def _load(self) -> list[str]:
        if self._pages is None:
            try:
                doc = fitz.open(str(self.path))
            except Exception as exc:
                raise ExtractionUnavailable(f"Cannot open {self.path}: {exc}") from exc
            try:
                self._pages = [page_text(doc[i]) for i in range(len(doc))]
            finally:
                doc.close()
        return self._pages

    @property
    def total_pages(self) -> int:
        return len(self._load())

    def get_page_text(self, page_number: int) -> str:
        pages = self._load()
        if page_number > len(pages):
            return ""
        return pages[page_number - 1]


def default_page_source(document: Document) -> PageSource:
    """Return the page-aware source for a document, or raise ExtractionUnavailable."""
    if document.mimetype not in PAGINATED_MIMETYPES:
        raise ExtractionUnavailable(f"{document.mimetype} is not a paginated format")
    if not document.path or not Path(document.path).is_file():
        raise ExtractionUnavailable(f"Source file for document {document.id} is not available")
    return PdfPageSource(Path(document.path))


def estimate_total_pages(document: Document, chars_per_page: int) -> int:
    if document.mimetype not in PAGINATED_MIMETYPES:
        return 1
    return max(1, len(document.extracted_text) // chars_per_page)


def estimated_window(text: str, page_number: int, total_pages: int) -> str:
    """Slice ``text`` into ``total_pages`` equal windows and return the one for ``page_number``.

    Characters left over by the integer division are not assigned to any page.
    """
    length = len(text)
    if length == 0 or page_number > total_pages:
        return ""
    window = max(1, length // total_pages)
    start = (page_number - 1) * window
    end = min(page_number * window, length)
    return text[start:end]


class PageSegmenter:
    def __init__(
        self,
        chars_per_page: int = 2000,
        page_source_factory: Callable[[Document], PageSource] = default_page_source,
    ) -> None:
        self.chars_per_page = chars_per_page
        self.page_source_factory = page_source_factory

    def _page_source(self, document: Document) -> PageSource | None:
        try:
            return self.page_source_factory(document)
        except ExtractionUnavailable as exc:
            logger.debug("Using estimated pagination for %s: %s", document.id, exc)
            return None

    def total_pages(self, document: Document) -> tuple[int, bool]:
        """Return (page count, is_estimated).

        The page count recorded at ingestion is used while the source file is still available.
        """
        source = self._page_source(document)
        if source is not None:
            if document.page_count > 0:
                return document.page_count, False
            try:
                return source.total_pages, False
            except ExtractionUnavailable as exc:
                logger.debug("Page count unavailable for %s: %s", document.id, exc)
        return estimate_total_pages(document, self.chars_per_page), True

    def resolve_page_content(self, document: Document, page_number: int) -> tuple[str, bool]:
        """Return (content, is_estimated) for a 1-based page number.

        Pages past the end resolve to empty content rather than an error.
        """
        if page_number < 1:
            raise InvalidRange(f"page number must be 1 or greater, got {page_number}")

        source = self._page_source(document)
        if source is not None:
            try:
                return source.get_page_text(page_number), False
            except ExtractionUnavailable as exc:
                logger.debug("Page text unavailable for %s: %s", document.id, exc)

        total = estimate_total_pages(document, self.chars_per_page)
        return estimated_window(document.extracted_text, page_number, total), True
