"""
Storage Services Package

Provides the abstract document storage interface and the JSON file
implementation used by the server.
"""

from finance_server.services.storage.interface import (
    DocumentStorageInterface,
    ParseError,
    StorageError,
)
from finance_server.services.storage.json_file import JsonFileDocumentStorage

__all__ = [
    # Interfaces
    "DocumentStorageInterface",
    # Exceptions
    "ParseError",
    "StorageError",
    # JSON file implementation
    "JsonFileDocumentStorage",
]
