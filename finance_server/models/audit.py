"""
Audit Models for the Finance Server

Every mutation, every balance query and every failed operation is logged.
This provides:
1. Traceability of who changed what, and what a delete took with it
2. Debugging information when a store goes bad
3. Ability to reconstruct history from the logs

DESIGN DECISION: Audit events are logged, never stored in the finance
document itself. The document stays exactly the shape clients expect.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Record lifecycle
    RECORD_CREATED = "record_created"
    RECORD_UPDATED = "record_updated"
    RECORD_DELETED = "record_deleted"
    
    # Queries
    BALANCE_COMPUTED = "balance_computed"
    
    # Failures
    OPERATION_FAILED = "operation_failed"
    STORE_CORRUPTED = "store_corrupted"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.
    
    This is the core unit of our audit trail.
    """
    
    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )
    
    # Event classification
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO
    
    # Context - what record is this about?
    operation: Optional[str] = Field(
        default=None,
        description="Catalog name of the operation (e.g., 'entry.add')"
    )
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of record ('user', 'category', 'entry')"
    )
    entity_id: Optional[str] = None
    
    # Correlation - all events emitted by one dispatch share this
    correlation_id: Optional[UUID] = None
    
    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)
    
    # Error information (if applicable)
    error_kind: Optional[str] = None
    error_message: Optional[str] = None
    
    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "operation": self.operation,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_kind": self.error_kind,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.
    
    Usage:
        event = AuditEventBuilder.record_created("user.add", "user", user.id)
    """
    
    @staticmethod
    def record_created(
        operation: str,
        entity_type: str,
        entity_id: str,
        correlation_id: Optional[UUID] = None,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_CREATED,
            operation=operation,
            entity_type=entity_type,
            entity_id=entity_id,
            correlation_id=correlation_id,
            description=f"{entity_type.capitalize()} created: {entity_id}",
            details=details or {},
        )
    
    @staticmethod
    def record_updated(
        operation: str,
        entity_type: str,
        entity_id: str,
        fields: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_UPDATED,
            operation=operation,
            entity_type=entity_type,
            entity_id=entity_id,
            correlation_id=correlation_id,
            description=f"{entity_type.capitalize()} updated: {entity_id}",
            details={"fields": fields},
        )
    
    @staticmethod
    def record_deleted(
        operation: str,
        entity_type: str,
        entity_id: str,
        deleted: bool,
        correlation_id: Optional[UUID] = None,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        outcome = "deleted" if deleted else "already absent"
        return AuditEvent(
            event_type=AuditEventType.RECORD_DELETED,
            operation=operation,
            entity_type=entity_type,
            entity_id=entity_id,
            correlation_id=correlation_id,
            description=f"{entity_type.capitalize()} {entity_id} {outcome}",
            details={"deleted": deleted, **(details or {})},
        )
    
    @staticmethod
    def balance_computed(
        operation: str,
        user_id: str,
        category_id: str,
        count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BALANCE_COMPUTED,
            severity=AuditSeverity.DEBUG,
            operation=operation,
            entity_type="category",
            entity_id=category_id,
            correlation_id=correlation_id,
            description=f"Balance computed over {count} entries",
            details={"user_id": user_id, "count": count},
        )
    
    @staticmethod
    def operation_failed(
        operation: str,
        error_kind: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        # A corrupted store is our problem, everything else is the caller's
        if error_kind == "ParseError":
            event_type = AuditEventType.STORE_CORRUPTED
            severity = AuditSeverity.ERROR
        else:
            event_type = AuditEventType.OPERATION_FAILED
            severity = AuditSeverity.WARNING
        return AuditEvent(
            event_type=event_type,
            severity=severity,
            operation=operation,
            correlation_id=correlation_id,
            description=f"Operation {operation} failed: {error_kind}",
            error_kind=error_kind,
            error_message=error_message,
        )
