from marginalia.storage.repository import DocumentRepository

__all__ = ["DocumentRepository"]
