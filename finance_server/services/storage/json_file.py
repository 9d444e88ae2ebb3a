"""
JSON File Storage Implementation

DESIGN DECISION: The whole store is one pretty-printed JSON file, read fully
on every load and rewritten fully on every save.

TRADEOFFS:
- Not suitable for large data sets (fine for personal bookkeeping)
- No atomic rename: an interrupted write can leave a truncated file,
  which then fails every load with a ParseError
- No locking across processes (the in-process lock lives in the interface)
"""

from pathlib import Path
from typing import Optional, Union

import pydantic
import structlog

from finance_server.config import get_settings
from finance_server.models.entities import Document
from finance_server.services.storage.interface import (
    DocumentStorageInterface,
    ParseError,
    StorageError,
)


logger = structlog.get_logger(__name__)


class JsonFileDocumentStorage(DocumentStorageInterface):
    """Document storage backed by a single JSON file."""
    
    def __init__(
        self,
        path: Optional[Union[str, Path]] = None,
        indent: Optional[int] = None,
    ):
        """
        Initialize the file store.
        
        Args:
            path: Location of the JSON file. Defaults to the DB_PATH setting.
            indent: Pretty-print indentation. Defaults to the json_indent setting.
        """
        super().__init__()
        settings = get_settings()
        self._path = Path(path) if path is not None else settings.resolved_db_path
        self._indent = indent if indent is not None else settings.json_indent
    
    @property
    def path(self) -> Path:
        return self._path
    
    def _serialize(self, document: Document) -> str:
        return document.model_dump_json(
            by_alias=True,
            exclude_none=True,
            indent=self._indent or None,
        )
    
    def _write(self, text: str) -> None:
        try:
            self._path.write_text(text, encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Could not write store {self._path}: {e}") from e
    
    async def ensure_store(self) -> None:
        if self._path.exists():
            return
        
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._write(self._serialize(Document()))
        logger.info("store_created", path=str(self._path))
    
    async def load_document(self) -> Document:
        await self.ensure_store()
        
        try:
            text = self._path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            logger.error("store_parse_failed", path=str(self._path), error=str(e))
            raise ParseError(f"Store {self._path} is not valid UTF-8: {e}") from e
        except OSError as e:
            raise StorageError(f"Could not read store {self._path}: {e}") from e
        
        try:
            return Document.model_validate_json(text)
        except pydantic.ValidationError as e:
            logger.error(
                "store_parse_failed",
                path=str(self._path),
                error_count=e.error_count(),
            )
            raise ParseError(
                f"Store {self._path} is not a valid finance document: "
                f"{e.error_count()} problem(s), first: {e.errors()[0]['msg']}"
            ) from e
    
    async def save_document(self, document: Document) -> None:
        self._write(self._serialize(document))
        logger.debug(
            "store_saved",
            path=str(self._path),
            users=len(document.users),
            categories=len(document.categories),
            entries=len(document.entries),
        )
