import functools
import logging
from importlib.metadata import version
from pathlib import Path

import click
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

from .annotations.anchor import Anchor, substring
from .annotations.models import AnnotationInput
from .annotations.renderer import render, to_rich_text
from .annotations.selection import Selection, resolve_selection
from .annotations.store import AnnotationStore
from .config import DEFAULT_COLOR, Config
from .errors import InvalidAnnotation, MarginaliaError, NotFound, SelectionNotFound
from .pagination import PageSegmenter
from .pipeline import display_annotations, ingest_file
from .readers.registry import list_supported_files
from .storage.repository import DocumentRepository

logger = logging.getLogger(__name__)

console = Console()

EXIT_CODES: list[tuple[type[MarginaliaError], int]] = [
    (NotFound, 4),
    (InvalidAnnotation, 2),
    (SelectionNotFound, 2),
    (MarginaliaError, 1),
]


def _handle_errors(func):
    """Report core errors as a red message and a non-zero exit code."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except MarginaliaError as exc:
            console.print(f"[red]{exc}[/red]")
            logger.debug("Command failed", exc_info=True)
            code = next(code for cls, code in EXIT_CODES if isinstance(exc, cls))
            raise SystemExit(code) from exc

    return wrapper


def _store(ctx: click.Context) -> AnnotationStore:
    return ctx.obj["store"]


@click.group()
@click.option(
    "-d",
    "--data-dir",
    type=click.Path(path_type=Path),
    default="data",
    envvar="MARGINALIA_DATA_DIR",
    show_default=True,
    help="Directory holding document records.",
)
@click.option(
    "--chars-per-page",
    type=click.IntRange(min=1),
    default=2000,
    show_default=True,
    help="Characters per page when page boundaries must be estimated.",
)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Verbose logging.")
@click.version_option(version=version("marginalia"))
@click.pass_context
def main(ctx: click.Context, data_dir: Path, chars_per_page: int, verbose: bool) -> None:
    """Annotate extracted document text with highlights and notes."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
    )

    config = Config(data_dir=data_dir, chars_per_page=chars_per_page)
    repository = DocumentRepository(config.documents_dir)
    ctx.obj = {
        "config": config,
        "repository": repository,
        "store": AnnotationStore(repository, PageSegmenter(chars_per_page=config.chars_per_page), config.default_color),
    }


@main.command()
@click.argument("input_path", type=click.Path(exists=True, path_type=Path))
@click.pass_context
@_handle_errors
def ingest(ctx: click.Context, input_path: Path) -> None:
    """Extract text from a file or a directory of files and store it.

    Supported formats: .txt, .md, .pdf, .docx, .doc, .rtf
    """
    files = list_supported_files(input_path)
    if not files:
        console.print("[red]No supported files found.[/red]")
        raise SystemExit(1)

    console.print(f"Found {len(files)} file(s) to ingest")

    stored = 0
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task("Ingesting...", total=len(files))
        for file_path in files:
            progress.update(task, description=f"Ingesting {file_path.name}...")
            try:
                document = ingest_file(file_path, ctx.obj["config"], ctx.obj["repository"])
            except MarginaliaError:
                raise
            except Exception:
                console.print(f"  [red]Error reading {file_path.name}[/red]")
                logger.debug("Failed to read %s", file_path.name, exc_info=True)
            else:
                if document is not None:
                    stored += 1
                    console.print(f"  {file_path.name} -> [bold]{document.id}[/bold]")
            progress.advance(task)

    console.print()
    console.print(f"[bold green]Done.[/bold green] {stored} document(s) stored.")


@main.command()
@click.pass_context
@_handle_errors
def documents(ctx: click.Context) -> None:
    """List stored documents."""
    for document in ctx.obj["repository"].list():
        console.print(f"{document.id}  {document.filename}  [dim]{document.mimetype}[/dim]")


@main.command()
@click.argument("document_id")
@click.argument("page_number", type=click.IntRange(min=1))
@click.pass_context
@_handle_errors
def show(ctx: click.Context, document_id: str, page_number: int) -> None:
    """Print a page with its annotations highlighted."""
    store = _store(ctx)
    content, is_estimated = store.page_content(document_id, page_number)
    total, _ = store.segmenter.total_pages(ctx.obj["repository"].get(document_id))
    console.print(f"[bold]Page {page_number} of {total}[/bold]")
    if is_estimated:
        console.print("[yellow]Using estimated page boundaries.[/yellow]")
    if not content:
        console.print("[dim]No content on this page.[/dim]")
        return

    annotations = store.get_annotations_for_page(document_id, page_number)
    console.print(to_rich_text(render(content, annotations)))


@main.command()
@click.argument("document_id")
@click.argument("page_number", type=click.IntRange(min=1))
@click.argument("start_index", type=int)
@click.argument("end_index", type=int)
@click.option("--text", default=None, help="Covered text (defaults to the page content in the range).")
@click.option("-n", "--note", default="", help="Note attached to the highlight.")
@click.option("--color", default=DEFAULT_COLOR, show_default=True, help="Highlight color.")
@click.option("-t", "--tag", "tags", multiple=True, help="Tag (repeatable).")
@click.pass_context
@_handle_errors
def add(
    ctx: click.Context,
    document_id: str,
    page_number: int,
    start_index: int,
    end_index: int,
    text: str | None,
    note: str,
    color: str,
    tags: tuple[str, ...],
) -> None:
    """Highlight characters START_INDEX to END_INDEX (exclusive) of a page."""
    store = _store(ctx)
    anchor = Anchor(start_index, end_index)
    if text is None:
        content, _ = store.page_content(document_id, page_number)
        anchor.validate(len(content))
        text = substring(content, anchor)

    annotation = store.add_annotation(
        document_id,
        page_number,
        AnnotationInput(text=text, anchor=anchor, note=note, color=color, tags=list(tags)),
    )
    console.print(f"[green]Added[/green] {annotation.id}")


@main.command()
@click.argument("document_id")
@click.argument("page_number", type=click.IntRange(min=1))
@click.argument("text")
@click.option("--node", "node_index", type=int, default=0, show_default=True, help="Rendered segment the selection starts in.")
@click.option("--offset", "node_offset", type=int, default=0, show_default=True, help="Offset inside that segment.")
@click.option("-n", "--note", default="", help="Note attached to the highlight.")
@click.option("-t", "--tag", "tags", multiple=True, help="Tag (repeatable).")
@click.pass_context
@_handle_errors
def select(
    ctx: click.Context,
    document_id: str,
    page_number: int,
    text: str,
    node_index: int,
    node_offset: int,
    note: str,
    tags: tuple[str, ...],
) -> None:
    """Highlight a selection made on the rendered page.

    The selection is located by rendered segment (see `show`) and offset, so
    repeated text resolves to the occurrence that was selected.
    """
    store = _store(ctx)
    content, _ = store.page_content(document_id, page_number)
    segments = render(content, store.get_annotations_for_page(document_id, page_number))
    anchor = resolve_selection(segments, Selection(node_index, node_offset, text), content)

    annotation = store.add_annotation(
        document_id,
        page_number,
        AnnotationInput(text=text.strip(), anchor=anchor, note=note, tags=list(tags)),
    )
    console.print(f"[green]Added[/green] {annotation.id} at {anchor.start_index}-{anchor.end_index}")


@main.command(name="list")
@click.argument("document_id")
@click.option("-p", "--page", "page_number", type=click.IntRange(min=1), default=None, help="Only this page.")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print JSON instead of a table.")
@click.pass_context
@_handle_errors
def list_annotations(ctx: click.Context, document_id: str, page_number: int | None, as_json: bool) -> None:
    """List the annotations of a document, or of one page."""
    store = _store(ctx)
    if page_number is None:
        annotations = store.get_all_annotations(document_id)
        title = document_id
    else:
        annotations = store.get_annotations_for_page(document_id, page_number)
        title = f"{document_id} page {page_number}"

    if as_json:
        console.print_json(data=[{**a.to_dict(), "pageNumber": a.page_number} for a in annotations])
    else:
        display_annotations(title, annotations, console)


@main.command()
@click.argument("document_id")
@click.argument("annotation_id")
@click.pass_context
@_handle_errors
def delete(ctx: click.Context, document_id: str, annotation_id: str) -> None:
    """Delete an annotation."""
    _store(ctx).delete_annotation(document_id, annotation_id)
    console.print("Annotation deleted successfully")
