import logging
from pathlib import Path

from rich.console import Console
from rich.table import Table

from .annotations.models import Annotation, Document
from .config import Config
from .readers.registry import read_document
from .storage.repository import DocumentRepository

logger = logging.getLogger(__name__)


def ingest_file(file_path: Path, config: Config, repository: DocumentRepository) -> Document | None:
    """Extract a file's text and store it as a new document.

    Returns None if the format is unsupported.
    """
    logger.info("Reading: %s", file_path.name)

    content = read_document(file_path)
    if content is None:
        return None

    text = content.raw_text
    if len(text) > config.max_text_length:
        logger.info("  Truncating %s from %d to %d characters", file_path.name, len(text), config.max_text_length)
        text = text[: config.max_text_length]
    if not text.strip():
        logger.info("  No text content in %s", file_path.name)

    document = Document(
        id=repository.new_id(),
        filename=file_path.name,
        mimetype=content.mimetype,
        extracted_text=text,
        path=str(file_path.resolve()),
        size=file_path.stat().st_size,
        page_count=content.page_count,
    )
    repository.save(document)
    logger.info("  Stored: %s as %s", file_path.name, document.id)
    return document


def display_annotations(title: str, annotations: list[Annotation], console: Console) -> None:
    """Display annotations in a rich table."""
    if not annotations:
        console.print(f"  [dim]{title}: no annotations[/dim]")
        return

    table = Table(title=title, show_lines=False, padding=(0, 1))
    table.add_column("Id", style="dim", no_wrap=True)
    table.add_column("Page", style="cyan", width=5)
    table.add_column("Range", style="cyan", width=11)
    table.add_column("Text", style="yellow")
    table.add_column("Note")
    table.add_column("Tags", style="green")

    for annotation in annotations:
        # Truncate long texts for display
        display_text = annotation.text if len(annotation.text) <= 60 else annotation.text[:57] + "..."
        table.add_row(
            annotation.id,
            str(annotation.page_number),
            f"{annotation.position.start_index}-{annotation.position.end_index}",
            display_text,
            annotation.note,
            ", ".join(annotation.tags),
        )

    console.print(table)
