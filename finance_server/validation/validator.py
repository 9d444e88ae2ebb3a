"""
Input Validation

DESIGN DECISION: Validation happens before the store is loaded.
A payload either becomes a well-typed input model or the operation fails
with a ValidationError listing every field-level issue. No partial state
is touched and no business logic runs on unvalidated input.

IMPORTANT: Validation NEVER silently fixes issues.
It reports them.
"""

from typing import Any, TypeVar

import pydantic

from finance_server.errors import ValidationError, ValidationIssue
from finance_server.validation.schemas import OperationInput


InputT = TypeVar("InputT", bound=OperationInput)


class InputValidator:
    """Validates raw transport payloads against operation input contracts."""
    
    def _to_issues(
        self,
        error: pydantic.ValidationError,
    ) -> list[ValidationIssue]:
        """Flatten pydantic's error list into ValidationIssue records."""
        issues = []
        for detail in error.errors():
            location = ".".join(str(part) for part in detail.get("loc", ()))
            issues.append(ValidationIssue(
                field=location,
                issue_type=detail.get("type", "invalid"),
                message=detail.get("msg", "Invalid value"),
            ))
        return issues
    
    def validate(
        self,
        schema: type[InputT],
        raw_input: Any,
        operation: str = "",
    ) -> InputT:
        """
        Validate a raw payload.
        
        Args:
            schema: The operation's input model
            raw_input: Untyped structured value from the transport
                       (None is treated as an empty object)
            operation: Operation name, used in the error message
            
        Returns:
            The validated input model
            
        Raises:
            ValidationError: If the payload does not match the schema
        """
        if raw_input is None:
            raw_input = {}
        
        if not isinstance(raw_input, dict):
            raise ValidationError(
                f"Invalid input for {operation or schema.__name__}: expected an object",
                issues=[ValidationIssue(
                    field="",
                    issue_type="object_type",
                    message=f"Expected an object, got {type(raw_input).__name__}",
                )],
            )
        
        try:
            return schema.model_validate(raw_input)
        except pydantic.ValidationError as e:
            issues = self._to_issues(e)
            summary = "; ".join(
                f"{issue.field or 'input'}: {issue.message}" for issue in issues
            )
            raise ValidationError(
                f"Invalid input for {operation or schema.__name__}: {summary}",
                issues=issues,
            ) from None
