"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for document storage.
This allows us to:
1. Keep operations decoupled from where the document lives
2. Swap the JSON file for another backend later
3. Put the load -> mutate -> save cycle in one place

The unit of storage is the whole Document. There is no partial read or
write and no caching between calls: every operation loads a fresh copy.
"""

import asyncio
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import AsyncIterator

from finance_server.errors import FinanceError
from finance_server.models.entities import Document


class DocumentStorageInterface(ABC):
    """
    Abstract interface for whole-document storage.
    
    Implementations provide ensure/load/save; the transaction helper
    serializes mutating cycles within one process.
    """
    
    def __init__(self):
        self._write_lock = asyncio.Lock()
    
    @abstractmethod
    async def ensure_store(self) -> None:
        """
        Create an empty document if the store does not exist yet.
        
        Idempotent.
        """
        pass
    
    @abstractmethod
    async def load_document(self) -> Document:
        """
        Load the full document (creating an empty one on first use).
        
        Raises:
            ParseError: If the stored data is not a well-formed Document
        """
        pass
    
    @abstractmethod
    async def save_document(self, document: Document) -> None:
        """
        Overwrite the stored document with the given one.
        
        Raises:
            StorageError: If the write fails
        """
        pass
    
    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[Document]:
        """
        Load the document for mutation and save it on clean exit.
        
        The lock is held for the whole load -> mutate -> save cycle so two
        concurrent callers cannot overwrite each other's changes. If the
        body raises, nothing is saved and the in-memory copy is discarded.
        
        Usage:
            async with storage.transaction() as document:
                document.users.append(user)
        """
        async with self._write_lock:
            document = await self.load_document()
            yield document
            await self.save_document(document)


class StorageError(FinanceError):
    """Base exception for storage operations."""
    
    kind = "StorageError"


class ParseError(StorageError):
    """Stored data is not a well-formed Document."""
    
    kind = "ParseError"
