"""
Core Data Models for the Finance Server

These models define the records held in the JSON store:
- User: a person keeping books
- Category: a user-owned bucket for entries
- Entry: a single income or expense transaction
- Document: the whole store (three ordered collections)

DESIGN DECISION: Field names are snake_case in Python and camelCase on the
wire and on disk. Unset optional fields are left out of the serialized form
rather than written as null, so a stored file reads exactly like the records
the operations return.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class EntryKind(str, Enum):
    """Direction of money for an entry."""
    INCOME = "income"
    EXPENSE = "expense"


# Marker stored in Entry.category_id when the entry has no category
# (never set, or its category was deleted).
UNCATEGORIZED = ""


class CamelModel(BaseModel):
    """Base for every record that crosses the store or the transport."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )
    
    def to_wire(self) -> dict:
        """Serialize with camelCase keys, omitting unset optional fields."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# =============================================================================
# RECORDS
# =============================================================================

class User(CamelModel):
    """A person whose categories and entries are tracked."""
    
    id: str
    name: str = Field(..., min_length=1)
    email: Optional[str] = None
    created_at: str = Field(
        ...,
        description="Canonical ISO-8601 creation timestamp"
    )


class Category(CamelModel):
    """A named bucket owned by exactly one user."""
    
    id: str
    user_id: str
    name: str = Field(..., min_length=1)
    created_at: str


class Entry(CamelModel):
    """
    A single income or expense transaction.
    
    The amount is always positive; the kind carries the sign.
    category_id is UNCATEGORIZED when the entry has no category.
    """
    
    id: str
    user_id: str
    category_id: str = UNCATEGORIZED
    kind: EntryKind
    amount: float = Field(..., gt=0)
    currency: Optional[str] = None
    timestamp: str = Field(
        ...,
        description="When the transaction happened (canonical ISO-8601)"
    )
    note: Optional[str] = None
    created_at: str
    updated_at: Optional[str] = Field(
        default=None,
        description="Set on every update, absent until the first one"
    )
    
    @property
    def signed_amount(self) -> float:
        """Amount with income positive and expense negative."""
        return self.amount if self.kind == EntryKind.INCOME else -self.amount


class Document(CamelModel):
    """
    The complete persisted state.
    
    Insertion order is preserved within each collection.
    """
    
    users: list[User] = Field(default_factory=list)
    categories: list[Category] = Field(default_factory=list)
    entries: list[Entry] = Field(default_factory=list)
    
    def find_user(self, user_id: str) -> Optional[User]:
        return next((u for u in self.users if u.id == user_id), None)
    
    def find_category(
        self,
        category_id: str,
        user_id: Optional[str] = None,
    ) -> Optional[Category]:
        """Find a category, optionally requiring a specific owner."""
        for category in self.categories:
            if category.id != category_id:
                continue
            if user_id is not None and category.user_id != user_id:
                continue
            return category
        return None
    
    def find_entry(self, entry_id: str) -> Optional[Entry]:
        return next((e for e in self.entries if e.id == entry_id), None)
