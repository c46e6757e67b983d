from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_COLOR = "#ffeb3b"


@dataclass
class Config:
    data_dir: Path = field(default_factory=lambda: Path("data"))
    # Estimated pagination window used when true page boundaries are unavailable
    chars_per_page: int = 2000
    # Extracted text is truncated to this many characters at ingestion
    max_text_length: int = 10_000
    default_color: str = DEFAULT_COLOR

    @property
    def documents_dir(self) -> Path:
        return self.data_dir / "documents"
