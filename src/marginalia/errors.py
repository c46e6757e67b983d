class MarginaliaError(Exception):
    """Base class for errors surfaced to callers of the annotation core."""


class NotFound(MarginaliaError):
    """A referenced document or annotation id does not exist."""


class InvalidAnnotation(MarginaliaError):
    """Annotation input is malformed."""


class InvalidRange(InvalidAnnotation):
    """Offsets violate 0 <= start_index < end_index <= length."""


class SelectionNotFound(MarginaliaError):
    """A user selection could not be mapped to offsets in the page content."""


class ExtractionUnavailable(MarginaliaError):
    """Page-aware extraction is absent or failed."""


class StorageError(MarginaliaError):
    """The document repository could not read or write a record."""
