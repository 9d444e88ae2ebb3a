"""
Data Models Package

This package contains the Pydantic models for the stored records and the
audit trail. All data read from or written to the store conforms to these.
"""

from finance_server.models.entities import (
    UNCATEGORIZED,
    Category,
    Document,
    Entry,
    EntryKind,
    User,
)
from finance_server.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Records
    "UNCATEGORIZED",
    "Category",
    "Document",
    "Entry",
    "EntryKind",
    "User",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
