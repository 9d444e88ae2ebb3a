"""Services package."""

from finance_server.services.storage import (
    DocumentStorageInterface,
    JsonFileDocumentStorage,
    ParseError,
    StorageError,
)

__all__ = [
    "DocumentStorageInterface",
    "JsonFileDocumentStorage",
    "ParseError",
    "StorageError",
]
