from collections.abc import Sequence
from dataclasses import dataclass

from ..errors import SelectionNotFound
from .anchor import Anchor
from .renderer import Segment


@dataclass
class Selection:
    """A text selection as the presentation layer sees it.

    ``node_index`` is the rendered segment the selection starts in and ``node_offset`` the
    character offset inside that segment. ``text`` is the raw selected string, which may
    carry leading or trailing whitespace.
    """

    node_index: int
    node_offset: int
    text: str


def resolve_selection(segments: Sequence[Segment], selection: Selection, page_content: str) -> Anchor:
    """Turn a selection over rendered segments into offsets into ``page_content``.

    The start is the total length of the segments before the selection's node plus the
    offset inside it, so repeated substrings resolve to the occurrence actually selected.
    """
    if "".join(s.text for s in segments) != page_content:
        raise SelectionNotFound("rendered segments do not match the page content")
    if not 0 <= selection.node_index < len(segments):
        raise SelectionNotFound(f"selection starts outside the page (node {selection.node_index})")

    node = segments[selection.node_index]
    if not 0 <= selection.node_offset <= len(node.text):
        raise SelectionNotFound(f"offset {selection.node_offset} is outside node {selection.node_index}")

    trimmed = selection.text.strip()
    if not trimmed:
        raise SelectionNotFound("selection is empty")
    leading = len(selection.text) - len(selection.text.lstrip())

    start = sum(len(s.text) for s in segments[: selection.node_index]) + selection.node_offset + leading
    anchor = Anchor(start, start + len(trimmed))
    if not anchor.is_valid(len(page_content)) or page_content[anchor.start_index : anchor.end_index] != trimmed:
        raise SelectionNotFound(f"selection {trimmed!r} does not match the page content at offset {start}")
    return anchor
