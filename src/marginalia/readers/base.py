from dataclasses import dataclass


@dataclass
class DocumentContent:
    """Text extracted from an uploaded file.

    Paginated formats hold one entry per page in ``parts``; other formats hold their
    text in reading order with no page meaning.
    """

    parts: list[str]
    mimetype: str
    paginated: bool = False

    @property
    def raw_text(self) -> str:
        return "".join(self.parts)

    @property
    def page_count(self) -> int:
        """True page count, or 0 when the format has no pages."""
        return len(self.parts) if self.paginated else 0
