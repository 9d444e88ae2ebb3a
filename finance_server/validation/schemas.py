"""
Operation Input Contracts

One model per operation input. The dispatcher validates the raw transport
payload against these before any handler runs, so handlers only ever see
well-typed values.

Strings are strict (a number is not silently turned into an id), amounts
must be real numbers greater than zero, emails must be well-formed and
are kept exactly as entered.
Unknown keys are ignored. Timestamps stay plain strings here: they are
parsed by the operations so a bad date surfaces as a DateParseError.
"""

from typing import Annotated, Optional

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    StrictStr,
)
from pydantic.alias_generators import to_camel
from pydantic.networks import validate_email

from finance_server.models.entities import EntryKind


NonEmptyStr = Annotated[StrictStr, Field(min_length=1)]
PositiveAmount = Annotated[float, Field(strict=True, gt=0, allow_inf_nan=False)]


def _check_email(value: str) -> str:
    """Reject malformed addresses but keep what the caller typed."""
    validate_email(value)
    return value


EmailAddress = Annotated[
    StrictStr,
    AfterValidator(_check_email),
    Field(json_schema_extra={"format": "email"}),
]


class OperationInput(BaseModel):
    """Base for all operation inputs (camelCase keys on the wire)."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class EmptyInput(OperationInput):
    """Operations that take no arguments."""


class RecordId(OperationInput):
    id: StrictStr


# Users

class UserCreate(OperationInput):
    name: NonEmptyStr
    email: Optional[EmailAddress] = None


class UserUpdate(OperationInput):
    id: StrictStr
    name: Optional[NonEmptyStr] = None
    email: Optional[EmailAddress] = None


# Categories

class CategoryList(OperationInput):
    user_id: StrictStr


class CategoryCreate(OperationInput):
    user_id: StrictStr
    name: NonEmptyStr


class CategoryUpdate(OperationInput):
    id: StrictStr
    name: NonEmptyStr


# Entries

class EntryList(OperationInput):
    user_id: StrictStr
    category_id: Optional[StrictStr] = None
    start: Optional[StrictStr] = None
    end: Optional[StrictStr] = None


class EntryCreate(OperationInput):
    user_id: StrictStr
    category_id: Optional[StrictStr] = Field(
        default=None,
        description="Category owned by the same user; omit or pass \"\" for none"
    )
    kind: EntryKind
    amount: PositiveAmount
    currency: Optional[StrictStr] = None
    timestamp: Optional[StrictStr] = Field(
        default=None,
        description="ISO-8601 date/time; defaults to now"
    )
    note: Optional[StrictStr] = None


class EntryUpdate(OperationInput):
    id: StrictStr
    user_id: Optional[StrictStr] = None
    category_id: Optional[StrictStr] = None
    kind: Optional[EntryKind] = None
    amount: Optional[PositiveAmount] = None
    currency: Optional[StrictStr] = None
    timestamp: Optional[StrictStr] = None
    note: Optional[StrictStr] = None


# Balances

class BalanceTotal(OperationInput):
    user_id: StrictStr
    category_id: StrictStr


class BalancePeriod(OperationInput):
    user_id: StrictStr
    category_id: StrictStr
    start: StrictStr = Field(..., description="Inclusive lower bound (ISO-8601)")
    end: StrictStr = Field(..., description="Exclusive upper bound (ISO-8601)")
