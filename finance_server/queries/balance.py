"""
Balance Query Execution

DESIGN DECISION: Balances are computed on demand from the stored entries.
Nothing is cached or pre-aggregated, so a balance always reflects the
document as it is on disk right now.

balance = sum(income amounts) - sum(expense amounts) over the selected
entries; count = number of selected entries. Period bounds are half-open:
start <= timestamp < end.
"""

from datetime import datetime
from typing import Iterable, Optional
from uuid import UUID

from finance_server.audit import AuditLogger
from finance_server.models.entities import Entry
from finance_server.services.storage import DocumentStorageInterface
from finance_server.validation import format_timestamp, parse_timestamp
from finance_server.validation.schemas import BalancePeriod, BalanceTotal


def select_entries(
    entries: Iterable[Entry],
    user_id: str,
    category_id: Optional[str] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> list[Entry]:
    """
    Filter entries by owner, category and a half-open time window.
    
    Each entry's timestamp is parsed independently, so a hand-edited value
    in a different ISO-8601 spelling still compares by instant.
    """
    selected = []
    for entry in entries:
        if entry.user_id != user_id:
            continue
        if category_id is not None and entry.category_id != category_id:
            continue
        if start is not None or end is not None:
            moment = parse_timestamp(entry.timestamp)
            if start is not None and moment < start:
                continue
            if end is not None and moment >= end:
                continue
        selected.append(entry)
    return selected


def sum_balance(entries: Iterable[Entry]) -> float:
    """Income counts positive, expense negative."""
    return sum((entry.signed_amount for entry in entries), 0.0)


class BalanceQueryExecutor:
    """
    Executes the read-only balance queries.
    
    GUARANTEES:
    - Only reads; never saves the document
    - An unknown user or category simply yields balance 0, count 0
    """
    
    def __init__(
        self,
        storage: DocumentStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._audit_logger = audit_logger
    
    async def _audit(
        self,
        operation: str,
        user_id: str,
        category_id: str,
        count: int,
        correlation_id: Optional[UUID],
    ) -> None:
        if self._audit_logger:
            await self._audit_logger.log_balance_computed(
                operation=operation,
                user_id=user_id,
                category_id=category_id,
                count=count,
                correlation_id=correlation_id,
            )
    
    async def category_total(
        self,
        query: BalanceTotal,
        correlation_id: Optional[UUID] = None,
    ) -> dict:
        """All-time balance of one user's category."""
        document = await self._storage.load_document()
        items = select_entries(document.entries, query.user_id, query.category_id)
        
        await self._audit(
            "balance.category.total", query.user_id, query.category_id,
            len(items), correlation_id,
        )
        
        return {
            "userId": query.user_id,
            "categoryId": query.category_id,
            "balance": sum_balance(items),
            "count": len(items),
        }
    
    async def category_period(
        self,
        query: BalancePeriod,
        correlation_id: Optional[UUID] = None,
    ) -> dict:
        """
        Balance of one user's category over [start, end).
        
        Raises:
            DateParseError: If start or end is not a valid ISO-8601 string
        """
        # Bounds are parsed before the load so bad dates never touch the store
        start = parse_timestamp(query.start)
        end = parse_timestamp(query.end)
        
        document = await self._storage.load_document()
        items = select_entries(
            document.entries,
            query.user_id,
            query.category_id,
            start=start,
            end=end,
        )
        
        await self._audit(
            "balance.category.period", query.user_id, query.category_id,
            len(items), correlation_id,
        )
        
        return {
            "userId": query.user_id,
            "categoryId": query.category_id,
            "start": format_timestamp(start),
            "end": format_timestamp(end),
            "balance": sum_balance(items),
            "count": len(items),
        }
