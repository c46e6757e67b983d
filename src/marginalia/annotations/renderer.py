from collections.abc import Iterable
from dataclasses import dataclass

from rich.text import Text

from .models import Annotation


@dataclass
class Segment:
    """A run of page content, either plain or covered by one annotation."""

    text: str
    is_highlighted: bool = False
    annotation_id: str | None = None
    color: str | None = None
    note: str | None = None


def render(page_content: str, annotations: Iterable[Annotation]) -> list[Segment]:
    """Partition ``page_content`` into plain and highlighted segments.

    Annotations whose offsets do not fit the content are skipped. Where annotations
    overlap, the one starting first (or, on the same start, ending first) keeps the
    overlapping characters; the later one is clamped to start where the earlier ended.
    Joining the segment texts always gives back ``page_content``.
    """
    length = len(page_content)
    valid = [a for a in annotations if a.anchor.is_valid(length)]
    valid.sort(key=lambda a: (a.position.start_index, a.position.end_index))

    segments: list[Segment] = []
    cursor = 0
    for annotation in valid:
        start = max(annotation.position.start_index, cursor)
        end = annotation.position.end_index
        if start >= end:
            # Fully covered by earlier annotations
            continue
        if start > cursor:
            segments.append(Segment(text=page_content[cursor:start]))
        segments.append(
            Segment(
                text=page_content[start:end],
                is_highlighted=True,
                annotation_id=annotation.id,
                color=annotation.color,
                note=annotation.note,
            )
        )
        cursor = end

    if cursor < length:
        segments.append(Segment(text=page_content[cursor:]))
    return segments


def to_rich_text(segments: Iterable[Segment]) -> Text:
    """Build a rich Text with each highlighted segment on its annotation's color."""
    text = Text()
    for segment in segments:
        if segment.is_highlighted:
            text.append(segment.text, style=f"black on {segment.color}" if segment.color else "reverse")
        else:
            text.append(segment.text)
    return text
