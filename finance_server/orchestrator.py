"""
Operation Dispatcher for the Finance Server

This module ties together all the components and is the single seam the
transport talks to:

    {operation name, raw input} -> validate -> execute -> result

DESIGN DECISION: Dispatch goes through a static table built once at startup,
and the table is checked against the published catalog right away. A
catalog name without a handler is a programming error and fails fast,
not on the first call that happens to use it.

The dispatcher knows nothing about the wire: a direct call from a test and
a call from the stdio server behave identically.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional
from uuid import UUID

from finance_server.audit import AuditLogger, create_correlation_id
from finance_server.errors import FinanceError, UnknownOperationError
from finance_server.ledger import LedgerService
from finance_server.queries import BalanceQueryExecutor
from finance_server.services.storage import (
    DocumentStorageInterface,
    JsonFileDocumentStorage,
)
from finance_server.validation import InputValidator
from finance_server.validation.schemas import (
    BalancePeriod,
    BalanceTotal,
    CategoryCreate,
    CategoryList,
    CategoryUpdate,
    EmptyInput,
    EntryCreate,
    EntryList,
    EntryUpdate,
    OperationInput,
    RecordId,
    UserCreate,
    UserUpdate,
)


# Public surface: names are stable and must all be routable
OPERATION_CATALOG = (
    "user.list",
    "user.add",
    "user.update",
    "user.delete",
    "category.list",
    "category.add",
    "category.update",
    "category.delete",
    "entry.list",
    "entry.add",
    "entry.update",
    "entry.delete",
    "balance.category.total",
    "balance.category.period",
)


Handler = Callable[[Any, Optional[UUID]], Awaitable[dict]]


@dataclass(frozen=True)
class Operation:
    """One routable operation: its input contract and its handler."""
    name: str
    schema: type[OperationInput]
    handler: Handler
    description: str


class OperationDispatcher:
    """
    Routes operation names to validate -> execute pipelines.
    
    Flow:
    1. Look up the operation (UnknownOperationError if absent)
    2. Validate the raw input (ValidationError, store untouched)
    3. Run the handler (loads, and saves if it mutates)
    4. Return the result dict
    
    Every failure is audited with the dispatch's correlation id.
    """
    
    def __init__(
        self,
        storage: DocumentStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        validator: Optional[InputValidator] = None,
    ):
        self._storage = storage
        self._audit_logger = audit_logger
        self._validator = validator or InputValidator()
        self._ledger = LedgerService(storage, audit_logger)
        self._balances = BalanceQueryExecutor(storage, audit_logger)
        self._operations = self._build_registry()
        self._check_registry()
    
    def _build_registry(self) -> dict[str, Operation]:
        ledger = self._ledger
        balances = self._balances
        table = [
            # Users
            ("user.list", EmptyInput, ledger.list_users,
             "List all users"),
            ("user.add", UserCreate, ledger.add_user,
             "Add a user"),
            ("user.update", UserUpdate, ledger.update_user,
             "Change a user's name or email"),
            ("user.delete", RecordId, ledger.delete_user,
             "Delete a user with all of their categories and entries"),
            # Categories
            ("category.list", CategoryList, ledger.list_categories,
             "List a user's categories"),
            ("category.add", CategoryCreate, ledger.add_category,
             "Add a category for a user"),
            ("category.update", CategoryUpdate, ledger.update_category,
             "Rename a category"),
            ("category.delete", RecordId, ledger.delete_category,
             "Delete a category; its entries become uncategorized"),
            # Entries
            ("entry.list", EntryList, ledger.list_entries,
             "List a user's entries, newest first"),
            ("entry.add", EntryCreate, ledger.add_entry,
             "Add an income or expense entry"),
            ("entry.update", EntryUpdate, ledger.update_entry,
             "Change an entry"),
            ("entry.delete", RecordId, ledger.delete_entry,
             "Delete an entry"),
            # Balances
            ("balance.category.total", BalanceTotal, balances.category_total,
             "Balance of a category over all time"),
            ("balance.category.period", BalancePeriod, balances.category_period,
             "Balance of a category over [start, end)"),
        ]
        return {
            name: Operation(name, schema, handler, description)
            for name, schema, handler, description in table
        }
    
    def _check_registry(self) -> None:
        missing = [name for name in OPERATION_CATALOG if name not in self._operations]
        extra = [name for name in self._operations if name not in OPERATION_CATALOG]
        if missing or extra:
            raise RuntimeError(
                f"Operation registry out of sync with catalog "
                f"(missing: {missing}, unexpected: {extra})"
            )
    
    @property
    def storage(self) -> DocumentStorageInterface:
        return self._storage
    
    @property
    def operation_names(self) -> list[str]:
        return list(self._operations)
    
    def describe(self) -> list[dict]:
        """
        Describe every operation for a transport that lists its tools.
        
        Returns [{name, description, inputSchema}] with JSON schemas
        using the camelCase wire names.
        """
        return [
            {
                "name": op.name,
                "description": op.description,
                "inputSchema": op.schema.model_json_schema(by_alias=True),
            }
            for op in self._operations.values()
        ]
    
    async def dispatch(
        self,
        operation: str,
        raw_input: Any = None,
        correlation_id: Optional[UUID] = None,
    ) -> dict:
        """
        Run one operation.
        
        Returns:
            The operation's result
            
        Raises:
            FinanceError: Any taxonomy failure (after it has been audited)
        """
        correlation_id = correlation_id or create_correlation_id()
        
        try:
            op = self._operations.get(operation)
            if op is None:
                raise UnknownOperationError(operation)
            
            payload = self._validator.validate(op.schema, raw_input, operation)
            return await op.handler(payload, correlation_id)
        except FinanceError as e:
            if self._audit_logger:
                await self._audit_logger.log_operation_failed(
                    operation=operation,
                    error_kind=e.kind,
                    error_message=e.message,
                    correlation_id=correlation_id,
                )
            raise
    
    async def handle(
        self,
        operation: str,
        raw_input: Any = None,
    ) -> dict:
        """
        Transport-facing entry point.
        
        Returns {"result": ...} on success or {"error": {kind, message}}
        on any taxonomy failure. Anything else is a bug and propagates.
        """
        try:
            result = await self.dispatch(operation, raw_input)
        except FinanceError as e:
            return {"error": e.to_dict()}
        return {"result": result}


def create_app_components(
    db_path: Optional[str] = None,
) -> OperationDispatcher:
    """
    Factory function to create all application components.
    
    Args:
        db_path: Store location. Defaults to the DB_PATH setting.
                    
    Returns:
        A ready dispatcher over a JSON file store
    """
    storage = JsonFileDocumentStorage(db_path)
    audit_logger = AuditLogger()
    return OperationDispatcher(storage=storage, audit_logger=audit_logger)
