"""Shared fixtures: a dispatcher over a throwaway JSON store."""

import asyncio

import pytest

from finance_server.audit import AuditLogger
from finance_server.orchestrator import OperationDispatcher
from finance_server.services.storage import JsonFileDocumentStorage


def run(coro):
    """Helper to run async functions in tests."""
    return asyncio.run(coro)


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "finance-db.json"


@pytest.fixture
def storage(db_path):
    return JsonFileDocumentStorage(db_path, indent=2)


@pytest.fixture
def dispatcher(storage):
    return OperationDispatcher(storage=storage, audit_logger=AuditLogger())


@pytest.fixture
def call(dispatcher):
    """Dispatch one operation synchronously and return its result."""
    def _call(operation, payload=None):
        return run(dispatcher.dispatch(operation, payload))
    return _call


@pytest.fixture
def user(call):
    return call("user.add", {"name": "Ann", "email": "ann@example.com"})["user"]


@pytest.fixture
def category(call, user):
    return call("category.add", {"userId": user["id"], "name": "Groceries"})["category"]
