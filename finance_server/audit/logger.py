"""
Audit Logger

DESIGN DECISION: Every significant action in the system is logged.
This provides:
1. Complete traceability of mutations
2. Debugging capability when a store goes bad
3. A record of what cascading deletes removed

The audit logger:
- Logs to stderr through structlog (stdout may be the transport channel)
- Never fails the operation that emitted the event
- Supports correlation IDs to trace the events of one dispatch
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from finance_server.models.audit import AuditEvent, AuditEventBuilder


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """Central audit logging service."""
    
    def __init__(self):
        self._logger = structlog.get_logger("finance_server.audit")
    
    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.
        
        Returns False if the event could not be logged.
        """
        log_dict = event.to_log_dict()
        
        try:
            if event.severity.value == "error":
                self._logger.error("audit_event", **log_dict)
            elif event.severity.value == "warning":
                self._logger.warning("audit_event", **log_dict)
            elif event.severity.value == "debug":
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except (TypeError, ValueError, OSError):
            # Unserializable details or a closed stream must not fail the operation
            return False
        
        return True
    
    async def log_record_created(
        self,
        operation: str,
        entity_type: str,
        entity_id: str,
        correlation_id: Optional[UUID] = None,
        details: Optional[dict] = None,
    ) -> None:
        """Log record creation."""
        event = AuditEventBuilder.record_created(
            operation=operation,
            entity_type=entity_type,
            entity_id=entity_id,
            correlation_id=correlation_id,
            details=details,
        )
        await self.log(event)
    
    async def log_record_updated(
        self,
        operation: str,
        entity_type: str,
        entity_id: str,
        fields: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log record update."""
        event = AuditEventBuilder.record_updated(
            operation=operation,
            entity_type=entity_type,
            entity_id=entity_id,
            fields=fields,
            correlation_id=correlation_id,
        )
        await self.log(event)
    
    async def log_record_deleted(
        self,
        operation: str,
        entity_type: str,
        entity_id: str,
        deleted: bool,
        correlation_id: Optional[UUID] = None,
        details: Optional[dict] = None,
    ) -> None:
        """Log record deletion, including what a cascade or orphaning touched."""
        event = AuditEventBuilder.record_deleted(
            operation=operation,
            entity_type=entity_type,
            entity_id=entity_id,
            deleted=deleted,
            correlation_id=correlation_id,
            details=details,
        )
        await self.log(event)
    
    async def log_balance_computed(
        self,
        operation: str,
        user_id: str,
        category_id: str,
        count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.balance_computed(
            operation=operation,
            user_id=user_id,
            category_id=category_id,
            count=count,
            correlation_id=correlation_id,
        )
        await self.log(event)
    
    async def log_operation_failed(
        self,
        operation: str,
        error_kind: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a failed operation."""
        event = AuditEventBuilder.operation_failed(
            operation=operation,
            error_kind=error_kind,
            error_message=error_message,
            correlation_id=correlation_id,
        )
        await self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.
    
    The dispatcher creates one per operation call and passes it through.
    """
    return uuid4()
