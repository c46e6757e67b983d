import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from ..config import DEFAULT_COLOR
from ..errors import InvalidAnnotation
from .anchor import Anchor


def new_id() -> str:
    return uuid.uuid4().hex


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_time(value: str | None) -> datetime:
    return datetime.fromisoformat(value) if value else _now()


@dataclass
class Position:
    """Where an annotation sits: an anchor into its page's content, plus the page number."""

    start_index: int
    end_index: int
    page: int

    @property
    def anchor(self) -> Anchor:
        return Anchor(self.start_index, self.end_index)

    def to_dict(self) -> dict[str, int]:
        return {"startIndex": self.start_index, "endIndex": self.end_index, "page": self.page}

    @classmethod
    def from_dict(cls, data: dict[str, Any], page: int) -> "Position":
        return cls(
            start_index=data.get("startIndex"),
            end_index=data.get("endIndex"),
            page=page,
        )


@dataclass
class Annotation:
    text: str
    position: Position
    note: str = ""
    color: str = DEFAULT_COLOR
    tags: list[str] = field(default_factory=list)
    id: str = field(default_factory=new_id)
    created_at: datetime = field(default_factory=_now)
    # Never advanced after creation: annotations have no update operation
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        if self.updated_at is None:
            self.updated_at = self.created_at

    @property
    def anchor(self) -> Anchor:
        return self.position.anchor

    @property
    def page_number(self) -> int:
        return self.position.page

    def to_dict(self) -> dict[str, Any]:
        return {
            "_id": self.id,
            "text": self.text,
            "note": self.note,
            "position": self.position.to_dict(),
            "color": self.color,
            "tags": list(self.tags),
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], page: int) -> "Annotation":
        created_at = _parse_time(data.get("createdAt"))
        return cls(
            id=data["_id"],
            text=data["text"],
            note=data.get("note") or "",
            position=Position.from_dict(data.get("position") or {}, page),
            color=data.get("color") or DEFAULT_COLOR,
            tags=list(data.get("tags") or []),
            created_at=created_at,
            updated_at=_parse_time(data.get("updatedAt")) if data.get("updatedAt") else None,
        )


@dataclass
class AnnotationInput:
    """Caller-supplied fields for a new annotation, before id and timestamps exist."""

    text: str
    anchor: Anchor
    note: str = ""
    color: str | None = None
    tags: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AnnotationInput":
        """Parse an API payload: ``{text, note?, position: {startIndex, endIndex}, color?, tags?}``."""
        text = data.get("text")
        if not isinstance(text, str) or not text:
            raise InvalidAnnotation("text must be a non-empty string")
        note = data.get("note") or ""
        if not isinstance(note, str):
            raise InvalidAnnotation("note must be a string")
        color = data.get("color")
        if color is not None and not isinstance(color, str):
            raise InvalidAnnotation("color must be a string")
        position = data.get("position")
        if not isinstance(position, dict) or "startIndex" not in position or "endIndex" not in position:
            raise InvalidAnnotation("position with startIndex and endIndex is required")
        tags = data.get("tags") or []
        if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
            raise InvalidAnnotation("tags must be a list of strings")
        return cls(
            text=text,
            anchor=Anchor(position["startIndex"], position["endIndex"]),
            note=note,
            color=color,
            tags=tags,
        )


@dataclass
class Page:
    page_number: int
    # Frozen when the page is created; all offsets on this page refer to it
    content: str = ""
    annotations: list[Annotation] = field(default_factory=list)
    # Whether content came from an estimated character window
    is_estimated: bool = False

    def find(self, annotation_id: str) -> int:
        """Return the index of the annotation with this id, or -1."""
        for idx, annotation in enumerate(self.annotations):
            if annotation.id == annotation_id:
                return idx
        return -1

    def to_dict(self) -> dict[str, Any]:
        return {
            "pageNumber": self.page_number,
            "content": self.content,
            "isEstimated": self.is_estimated,
            "annotations": [a.to_dict() for a in self.annotations],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Page":
        page_number = data["pageNumber"]
        return cls(
            page_number=page_number,
            content=data.get("content") or "",
            annotations=[Annotation.from_dict(a, page_number) for a in data.get("annotations") or []],
            is_estimated=bool(data.get("isEstimated", False)),
        )


@dataclass
class Document:
    """A stored document record with its embedded pages and annotations."""

    id: str
    filename: str
    mimetype: str
    extracted_text: str = ""
    path: str = ""
    size: int = 0
    # True page count recorded at ingestion; 0 when the format has no pages
    page_count: int = 0
    pages: list[Page] = field(default_factory=list)
    uploaded_at: datetime = field(default_factory=_now)

    def find_page(self, page_number: int) -> Page | None:
        for page in self.pages:
            if page.page_number == page_number:
                return page
        return None

    def ensure_page(self, page_number: int, content_factory: Callable[[], tuple[str, bool]]) -> tuple[Page, bool]:
        """Return the page with this number, creating it if unseen.

        ``content_factory`` returns the new page's (content, is_estimated). The second
        element of the result tells whether the page was created by this call.
        """
        page = self.find_page(page_number)
        if page is not None:
            return page, False
        content, is_estimated = content_factory()
        page = Page(page_number=page_number, content=content, is_estimated=is_estimated)
        self.pages.append(page)
        return page, True

    def to_dict(self) -> dict[str, Any]:
        return {
            "_id": self.id,
            "filename": self.filename,
            "mimetype": self.mimetype,
            "path": self.path,
            "size": self.size,
            "pageCount": self.page_count,
            "extractedText": self.extracted_text,
            "pages": [p.to_dict() for p in self.pages],
            "uploadedAt": self.uploaded_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Document":
        return cls(
            id=data["_id"],
            filename=data["filename"],
            mimetype=data["mimetype"],
            path=data.get("path") or "",
            size=data.get("size") or 0,
            page_count=data.get("pageCount") or 0,
            extracted_text=data.get("extractedText") or "",
            pages=[Page.from_dict(p) for p in data.get("pages") or []],
            uploaded_at=_parse_time(data.get("uploadedAt")),
        )
