"""Tests for the JSON file store."""

import asyncio
import json

import pytest

from finance_server.models.entities import Category, Document, Entry, EntryKind, User
from finance_server.services.storage import (
    JsonFileDocumentStorage,
    ParseError,
)


def sample_document() -> Document:
    return Document(
        users=[User(id="usr_1", name="Ann", email="ann@example.com",
                    created_at="2024-05-01T10:00:00.000Z")],
        categories=[Category(id="cat_1", user_id="usr_1", name="Rent",
                             created_at="2024-05-01T10:00:00.000Z")],
        entries=[Entry(id="ent_1", user_id="usr_1", category_id="cat_1",
                       kind=EntryKind.EXPENSE, amount=950.0, currency="EUR",
                       timestamp="2024-05-02T00:00:00.000Z", note="May",
                       created_at="2024-05-01T10:00:00.000Z",
                       updated_at="2024-05-03T09:00:00.000Z")],
    )


class TestJsonFileDocumentStorage:
    """Tests for ensure/load/save against a real file."""
    
    def test_ensure_store_creates_empty_document(self, db_path):
        storage = JsonFileDocumentStorage(db_path, indent=2)
        asyncio.run(storage.ensure_store())
        
        text = db_path.read_text(encoding="utf-8")
        assert json.loads(text) == {"users": [], "categories": [], "entries": []}
        assert "\n  " in text  # pretty-printed
    
    def test_ensure_store_is_idempotent(self, db_path):
        storage = JsonFileDocumentStorage(db_path)
        asyncio.run(storage.save_document(sample_document()))
        asyncio.run(storage.ensure_store())
        
        assert len(json.loads(db_path.read_text())["users"]) == 1
    
    def test_load_creates_missing_store(self, db_path):
        storage = JsonFileDocumentStorage(db_path)
        document = asyncio.run(storage.load_document())
        assert document == Document()
        assert db_path.exists()
    
    def test_round_trip(self, db_path):
        """Test that save then load yields an equal document."""
        storage = JsonFileDocumentStorage(db_path)
        original = sample_document()
        asyncio.run(storage.save_document(original))
        assert asyncio.run(storage.load_document()) == original
    
    def test_stored_form_is_camel_case(self, db_path):
        storage = JsonFileDocumentStorage(db_path)
        asyncio.run(storage.save_document(sample_document()))
        raw = json.loads(db_path.read_text())
        assert raw["entries"][0]["userId"] == "usr_1"
        assert raw["entries"][0]["updatedAt"] == "2024-05-03T09:00:00.000Z"
    
    @pytest.mark.parametrize("content", [
        "{not json",
        "[]",
        '{"users": [{"name": "no id"}]}',
        '{"users": [], "categories": [], "entries": [{"id": "ent_1"}]}',
    ])
    def test_corrupted_store_raises_parse_error(self, db_path, content):
        db_path.write_text(content, encoding="utf-8")
        storage = JsonFileDocumentStorage(db_path)
        with pytest.raises(ParseError) as exc_info:
            asyncio.run(storage.load_document())
        assert exc_info.value.kind == "ParseError"
    
    def test_store_not_utf8_raises_parse_error(self, db_path):
        db_path.write_bytes(b'{"users": [\xff\xfe]}')
        storage = JsonFileDocumentStorage(db_path)
        with pytest.raises(ParseError, match="not valid UTF-8"):
            asyncio.run(storage.load_document())
    
    def test_transaction_saves_on_success(self, db_path):
        storage = JsonFileDocumentStorage(db_path)
        
        async def add_user():
            async with storage.transaction() as document:
                document.users.append(User(id="usr_2", name="Bob",
                                           created_at="2024-05-01T10:00:00.000Z"))
        
        asyncio.run(add_user())
        assert [u.id for u in asyncio.run(storage.load_document()).users] == ["usr_2"]
    
    def test_transaction_discards_on_failure(self, db_path):
        """Test that a failed cycle leaves the store as it was."""
        storage = JsonFileDocumentStorage(db_path)
        asyncio.run(storage.save_document(sample_document()))
        before = db_path.read_text()
        
        async def fail_midway():
            async with storage.transaction() as document:
                document.users.clear()
                raise RuntimeError("boom")
        
        with pytest.raises(RuntimeError):
            asyncio.run(fail_midway())
        assert db_path.read_text() == before
    
    def test_concurrent_transactions_do_not_lose_updates(self, db_path):
        storage = JsonFileDocumentStorage(db_path)
        
        async def append(n):
            async with storage.transaction() as document:
                await asyncio.sleep(0)
                document.users.append(User(id=f"usr_{n}", name=f"User {n}",
                                           created_at="2024-05-01T10:00:00.000Z"))
        
        async def main():
            await asyncio.gather(*(append(n) for n in range(10)))
        
        asyncio.run(main())
        assert len(asyncio.run(storage.load_document()).users) == 10
