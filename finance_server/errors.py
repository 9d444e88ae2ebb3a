"""
Error Taxonomy

Every failure an operation can report to its caller is one of these kinds.
The transport receives {kind, message} (plus field issues for validation
failures) and never an unstructured traceback.

Deletes are the one place where a missing id is not an error: they report
{"deleted": false} instead.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ValidationIssue(BaseModel):
    """A single field-level violation found in operation input."""
    
    field: str = Field(
        ...,
        description="Dotted path of the offending field ('' for the whole input)"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'string_too_short', 'value_error')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )


class FinanceError(Exception):
    """Base exception for all caller-visible failures."""
    
    kind = "FinanceError"
    
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
    
    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": self.message}


class ValidationError(FinanceError):
    """Operation input is malformed or missing required fields."""
    
    kind = "ValidationError"
    
    def __init__(
        self,
        message: str,
        issues: Optional[list[ValidationIssue]] = None,
    ):
        super().__init__(message)
        self.issues = issues or []
    
    def to_dict(self) -> dict:
        data = super().to_dict()
        data["issues"] = [issue.model_dump() for issue in self.issues]
        return data


class NotFoundError(FinanceError):
    """A referenced user, category or entry does not exist."""
    
    kind = "NotFoundError"


class DateParseError(FinanceError):
    """A timestamp string could not be parsed as ISO-8601."""
    
    kind = "DateParseError"
    
    def __init__(self, value: str):
        super().__init__(f"Bad ISO date: {value}")
        self.value = value


class UnknownOperationError(FinanceError):
    """The operation name is not part of the catalog."""
    
    kind = "UnknownOperationError"
    
    def __init__(self, operation: str):
        super().__init__(f"Unknown operation: {operation}")
        self.operation = operation
