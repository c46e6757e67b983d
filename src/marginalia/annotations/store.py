import logging

from rich.color import Color, ColorParseError

from ..config import DEFAULT_COLOR
from ..errors import InvalidAnnotation, NotFound
from ..pagination import PageSegmenter
from ..storage.repository import DocumentRepository
from .anchor import substring
from .models import Annotation, AnnotationInput, Document, Page, Position

logger = logging.getLogger(__name__)


class AnnotationStore:
    """Annotations of stored documents, grouped by page.

    Every mutation loads the whole document record, changes it and saves it back.
    There is no locking: two concurrent adds to the same document can lose one of them.
    """

    def __init__(
        self,
        repository: DocumentRepository,
        segmenter: PageSegmenter | None = None,
        default_color: str = DEFAULT_COLOR,
    ) -> None:
        self.repository = repository
        self.segmenter = segmenter or PageSegmenter()
        self.default_color = default_color

    def ensure_page(self, document: Document, page_number: int) -> tuple[Page, bool]:
        """Look up a page, or create it with content frozen from the segmenter."""
        return document.ensure_page(
            page_number,
            lambda: self.segmenter.resolve_page_content(document, page_number),
        )

    def page_content(self, document_id: str, page_number: int) -> tuple[str, bool]:
        """Return the content annotation offsets on this page refer to, and whether it is estimated.

        Existing pages return their frozen content and the flag recorded when they were created.
        """
        document = self.repository.get(document_id)
        page = document.find_page(page_number)
        if page is not None:
            return page.content, page.is_estimated
        return self.segmenter.resolve_page_content(document, page_number)

    def add_annotation(self, document_id: str, page_number: int, annotation_input: AnnotationInput) -> Annotation:
        document = self.repository.get(document_id)
        if not isinstance(annotation_input.text, str) or not annotation_input.text:
            raise InvalidAnnotation("annotation text must be a non-empty string")
        color = annotation_input.color or self.default_color
        if not isinstance(color, str):
            raise InvalidAnnotation("color must be a string")
        try:
            Color.parse(color)
        except ColorParseError as exc:
            raise InvalidAnnotation(f"invalid color {color!r}") from exc

        page, created = self.ensure_page(document, page_number)
        # Nothing is saved on failure, so a page created above is discarded too
        annotation_input.anchor.validate(len(page.content))

        covered = substring(page.content, annotation_input.anchor)
        if covered != annotation_input.text:
            logger.warning(
                "Annotation text %r differs from page %d content %r at %d..%d",
                annotation_input.text,
                page_number,
                covered,
                annotation_input.anchor.start_index,
                annotation_input.anchor.end_index,
            )

        annotation = Annotation(
            text=annotation_input.text,
            note=annotation_input.note,
            position=Position(
                start_index=annotation_input.anchor.start_index,
                end_index=annotation_input.anchor.end_index,
                page=page_number,
            ),
            color=color,
            tags=list(annotation_input.tags),
        )
        page.annotations.append(annotation)
        self.repository.save(document)

        if created:
            logger.info("Created page %d of %s", page_number, document_id)
        logger.info("Added annotation %s to %s page %d", annotation.id, document_id, page_number)
        return annotation

    def get_annotations_for_page(self, document_id: str, page_number: int) -> list[Annotation]:
        """Annotations of one page in insertion order; empty for a page that was never annotated."""
        document = self.repository.get(document_id)
        page = document.find_page(page_number)
        return list(page.annotations) if page is not None else []

    def get_all_annotations(self, document_id: str) -> list[Annotation]:
        """Every annotation of the document, by ascending page then insertion order."""
        document = self.repository.get(document_id)
        result: list[Annotation] = []
        for page in sorted(document.pages, key=lambda p: p.page_number):
            result.extend(page.annotations)
        return result

    def delete_annotation(self, document_id: str, annotation_id: str) -> None:
        document = self.repository.get(document_id)
        for page in document.pages:
            idx = page.find(annotation_id)
            if idx != -1:
                del page.annotations[idx]
                self.repository.save(document)
                logger.info("Deleted annotation %s from %s page %d", annotation_id, document_id, page.page_number)
                return
        raise NotFound(f"Annotation not found: {annotation_id}")
