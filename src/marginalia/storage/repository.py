import contextlib
import json
import logging
import os
import re
import tempfile
import uuid
from pathlib import Path

from ..annotations.models import Document
from ..errors import NotFound, StorageError

logger = logging.getLogger(__name__)

_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


class DocumentRepository:
    """Document records stored as one JSON file each under ``root``.

    Every save rewrites the whole record. Writes go through a temporary file and
    ``os.replace`` so a reader never sees a partially written record, but two
    writers of the same document still race: the last save wins.
    """

    def __init__(self, root: Path) -> None:
        self.root = root

    def new_id(self) -> str:
        return uuid.uuid4().hex

    def _path(self, document_id: str) -> Path:
        if not _ID_PATTERN.match(document_id):
            raise NotFound(f"Document not found: {document_id}")
        return self.root / f"{document_id}.json"

    def get(self, document_id: str) -> Document:
        path = self._path(document_id)
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            raise NotFound(f"Document not found: {document_id}") from None
        except (OSError, json.JSONDecodeError) as exc:
            raise StorageError(f"Could not read document {document_id}: {exc}") from exc

        try:
            return Document.from_dict(data)
        except (KeyError, TypeError, ValueError) as exc:
            raise StorageError(f"Malformed document record {document_id}: {exc}") from exc

    def save(self, document: Document) -> None:
        path = self._path(document.id)
        tmp_name = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{document.id}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document.to_dict(), f, ensure_ascii=False, indent=2)
            os.replace(tmp_name, path)
        except OSError as exc:
            if tmp_name is not None:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_name)
            raise StorageError(f"Could not write document {document.id}: {exc}") from exc
        logger.debug("Saved document %s", document.id)

    def list(self) -> list[Document]:
        """Return every stored document, oldest upload first."""
        if not self.root.is_dir():
            return []
        documents = [self.get(path.stem) for path in sorted(self.root.glob("*.json"))]
        documents.sort(key=lambda d: d.uploaded_at)
        return documents
