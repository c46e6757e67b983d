from dataclasses import dataclass

from ..errors import InvalidRange


def _is_offset(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class Anchor:
    """A half-open character span [start_index, end_index) within a page's content."""

    start_index: int
    end_index: int

    def is_valid(self, length: int) -> bool:
        if not (_is_offset(self.start_index) and _is_offset(self.end_index)):
            return False
        return 0 <= self.start_index < self.end_index <= length

    def validate(self, length: int) -> None:
        """Raise InvalidRange unless the span fits a reference string of ``length`` characters."""
        if not (_is_offset(self.start_index) and _is_offset(self.end_index)):
            raise InvalidRange(f"offsets must be integers, got {self.start_index!r}..{self.end_index!r}")
        if self.start_index < 0:
            raise InvalidRange(f"start_index {self.start_index} is negative")
        if self.end_index > length:
            raise InvalidRange(f"end_index {self.end_index} exceeds content length {length}")
        if self.start_index >= self.end_index:
            raise InvalidRange(f"start_index {self.start_index} must be before end_index {self.end_index}")


def substring(text: str, anchor: Anchor) -> str:
    return text[anchor.start_index : anchor.end_index]
