"""
Ledger Operations

The CRUD side of the catalog: users, categories and entries.

Every mutating operation runs inside storage.transaction(), which loads a
fresh document, lets us change it, and saves it only if we return normally.
Raising inside the block (NotFoundError, DateParseError) discards the
in-memory change, so a failed operation never persists anything.

Referential rules:
- user.delete cascades: the user's categories and entries go with it
- category.delete orphans: entries keep existing, their categoryId is cleared
- references are checked when the referencing record is written, not later
"""

from typing import Optional
from uuid import UUID, uuid4

from finance_server.audit import AuditLogger
from finance_server.errors import NotFoundError
from finance_server.models.entities import (
    UNCATEGORIZED,
    Category,
    Document,
    Entry,
    User,
)
from finance_server.queries import select_entries
from finance_server.services.storage import DocumentStorageInterface
from finance_server.validation import normalize_timestamp, parse_timestamp, utc_now
from finance_server.validation.schemas import (
    CategoryCreate,
    CategoryList,
    CategoryUpdate,
    EmptyInput,
    EntryCreate,
    EntryList,
    EntryUpdate,
    RecordId,
    UserCreate,
    UserUpdate,
)


def new_id(prefix: str) -> str:
    """Opaque record id: type prefix plus 128 random bits."""
    return f"{prefix}_{uuid4().hex}"


class LedgerService:
    """
    Users, categories and entries over a document store.
    
    Handlers take a validated input model and return the wire-shaped result.
    """
    
    def __init__(
        self,
        storage: DocumentStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._audit_logger = audit_logger
    
    # -------------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------------
    
    async def list_users(
        self,
        payload: EmptyInput,
        correlation_id: Optional[UUID] = None,
    ) -> dict:
        document = await self._storage.load_document()
        return {"users": [user.to_wire() for user in document.users]}
    
    async def add_user(
        self,
        payload: UserCreate,
        correlation_id: Optional[UUID] = None,
    ) -> dict:
        user = User(
            id=new_id("usr"),
            name=payload.name,
            email=payload.email,
            created_at=utc_now(),
        )
        async with self._storage.transaction() as document:
            document.users.append(user)
        
        if self._audit_logger:
            await self._audit_logger.log_record_created(
                operation="user.add",
                entity_type="user",
                entity_id=user.id,
                correlation_id=correlation_id,
            )
        return {"user": user.to_wire()}
    
    async def update_user(
        self,
        payload: UserUpdate,
        correlation_id: Optional[UUID] = None,
    ) -> dict:
        changes = payload.model_dump(exclude={"id"}, exclude_none=True)
        
        async with self._storage.transaction() as document:
            user = document.find_user(payload.id)
            if user is None:
                raise NotFoundError("User not found")
            for field, value in changes.items():
                setattr(user, field, value)
        
        if self._audit_logger:
            await self._audit_logger.log_record_updated(
                operation="user.update",
                entity_type="user",
                entity_id=user.id,
                fields=sorted(changes),
                correlation_id=correlation_id,
            )
        return {"user": user.to_wire()}
    
    async def delete_user(
        self,
        payload: RecordId,
        correlation_id: Optional[UUID] = None,
    ) -> dict:
        """Delete a user and everything it owns."""
        async with self._storage.transaction() as document:
            before = len(document.users)
            category_count = len(document.categories)
            entry_count = len(document.entries)
            
            document.users = [u for u in document.users if u.id != payload.id]
            document.categories = [
                c for c in document.categories if c.user_id != payload.id
            ]
            document.entries = [
                e for e in document.entries if e.user_id != payload.id
            ]
            
            deleted = len(document.users) != before
            cascade = {
                "categories_removed": category_count - len(document.categories),
                "entries_removed": entry_count - len(document.entries),
            }
        
        if self._audit_logger:
            await self._audit_logger.log_record_deleted(
                operation="user.delete",
                entity_type="user",
                entity_id=payload.id,
                deleted=deleted,
                correlation_id=correlation_id,
                details=cascade,
            )
        return {"deleted": deleted}
    
    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------
    
    async def list_categories(
        self,
        payload: CategoryList,
        correlation_id: Optional[UUID] = None,
    ) -> dict:
        document = await self._storage.load_document()
        return {
            "categories": [
                category.to_wire()
                for category in document.categories
                if category.user_id == payload.user_id
            ]
        }
    
    async def add_category(
        self,
        payload: CategoryCreate,
        correlation_id: Optional[UUID] = None,
    ) -> dict:
        async with self._storage.transaction() as document:
            if document.find_user(payload.user_id) is None:
                raise NotFoundError("User not found")
            category = Category(
                id=new_id("cat"),
                user_id=payload.user_id,
                name=payload.name,
                created_at=utc_now(),
            )
            document.categories.append(category)
        
        if self._audit_logger:
            await self._audit_logger.log_record_created(
                operation="category.add",
                entity_type="category",
                entity_id=category.id,
                correlation_id=correlation_id,
                details={"user_id": category.user_id},
            )
        return {"category": category.to_wire()}
    
    async def update_category(
        self,
        payload: CategoryUpdate,
        correlation_id: Optional[UUID] = None,
    ) -> dict:
        async with self._storage.transaction() as document:
            category = document.find_category(payload.id)
            if category is None:
                raise NotFoundError("Category not found")
            category.name = payload.name
        
        if self._audit_logger:
            await self._audit_logger.log_record_updated(
                operation="category.update",
                entity_type="category",
                entity_id=category.id,
                fields=["name"],
                correlation_id=correlation_id,
            )
        return {"category": category.to_wire()}
    
    async def delete_category(
        self,
        payload: RecordId,
        correlation_id: Optional[UUID] = None,
    ) -> dict:
        """Delete a category; its entries stay, uncategorized."""
        async with self._storage.transaction() as document:
            before = len(document.categories)
            document.categories = [
                c for c in document.categories if c.id != payload.id
            ]
            
            orphaned = 0
            for entry in document.entries:
                if entry.category_id == payload.id:
                    entry.category_id = UNCATEGORIZED
                    orphaned += 1
            
            deleted = len(document.categories) != before
        
        if self._audit_logger:
            await self._audit_logger.log_record_deleted(
                operation="category.delete",
                entity_type="category",
                entity_id=payload.id,
                deleted=deleted,
                correlation_id=correlation_id,
                details={"entries_orphaned": orphaned},
            )
        return {"deleted": deleted}
    
    # -------------------------------------------------------------------------
    # Entries
    # -------------------------------------------------------------------------
    
    async def list_entries(
        self,
        payload: EntryList,
        correlation_id: Optional[UUID] = None,
    ) -> dict:
        """
        A user's entries, newest first.
        
        An empty categoryId means "any category", same as leaving it out.
        """
        start = parse_timestamp(payload.start) if payload.start else None
        end = parse_timestamp(payload.end) if payload.end else None
        
        document = await self._storage.load_document()
        items = select_entries(
            document.entries,
            payload.user_id,
            category_id=payload.category_id or None,
            start=start,
            end=end,
        )
        items.sort(key=lambda e: parse_timestamp(e.timestamp), reverse=True)
        return {"entries": [entry.to_wire() for entry in items]}
    
    def _check_references(
        self,
        document: Document,
        user_id: str,
        category_id: Optional[str],
    ) -> None:
        if document.find_user(user_id) is None:
            raise NotFoundError("User not found")
        if category_id and document.find_category(category_id, user_id=user_id) is None:
            raise NotFoundError("Category not found for this user")
    
    async def add_entry(
        self,
        payload: EntryCreate,
        correlation_id: Optional[UUID] = None,
    ) -> dict:
        now = utc_now()
        timestamp = normalize_timestamp(payload.timestamp) if payload.timestamp else now
        
        async with self._storage.transaction() as document:
            self._check_references(document, payload.user_id, payload.category_id)
            entry = Entry(
                id=new_id("ent"),
                user_id=payload.user_id,
                category_id=payload.category_id or UNCATEGORIZED,
                kind=payload.kind,
                amount=payload.amount,
                currency=payload.currency,
                timestamp=timestamp,
                note=payload.note,
                created_at=now,
            )
            document.entries.append(entry)
        
        if self._audit_logger:
            await self._audit_logger.log_record_created(
                operation="entry.add",
                entity_type="entry",
                entity_id=entry.id,
                correlation_id=correlation_id,
                details={
                    "user_id": entry.user_id,
                    "category_id": entry.category_id,
                    "kind": entry.kind.value,
                    "amount": entry.amount,
                },
            )
        return {"entry": entry.to_wire()}
    
    async def update_entry(
        self,
        payload: EntryUpdate,
        correlation_id: Optional[UUID] = None,
    ) -> dict:
        changes = payload.model_dump(exclude={"id"}, exclude_none=True)
        if "timestamp" in changes:
            changes["timestamp"] = normalize_timestamp(changes["timestamp"])
        
        async with self._storage.transaction() as document:
            entry = document.find_entry(payload.id)
            if entry is None:
                raise NotFoundError("Entry not found")
            
            if "user_id" in changes or "category_id" in changes:
                self._check_references(
                    document,
                    changes.get("user_id", entry.user_id),
                    changes.get("category_id", entry.category_id),
                )
            
            for field, value in changes.items():
                setattr(entry, field, value)
            entry.updated_at = utc_now()
        
        if self._audit_logger:
            await self._audit_logger.log_record_updated(
                operation="entry.update",
                entity_type="entry",
                entity_id=entry.id,
                fields=sorted(changes),
                correlation_id=correlation_id,
            )
        return {"entry": entry.to_wire()}
    
    async def delete_entry(
        self,
        payload: RecordId,
        correlation_id: Optional[UUID] = None,
    ) -> dict:
        async with self._storage.transaction() as document:
            before = len(document.entries)
            document.entries = [e for e in document.entries if e.id != payload.id]
            deleted = len(document.entries) != before
        
        if self._audit_logger:
            await self._audit_logger.log_record_deleted(
                operation="entry.delete",
                entity_type="entry",
                entity_id=payload.id,
                deleted=deleted,
                correlation_id=correlation_id,
            )
        return {"deleted": deleted}
