"""Balance query package."""

from finance_server.queries.balance import (
    BalanceQueryExecutor,
    select_entries,
    sum_balance,
)

__all__ = ["BalanceQueryExecutor", "select_entries", "sum_balance"]
