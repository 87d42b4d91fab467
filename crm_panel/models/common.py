"""Shared pydantic base model and helpers for CRM panel entities."""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, field_validator

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def utcnow() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def utctoday() -> date:
    return utcnow().date()


def _create_id() -> str:
    """Generate a UUID4 string for entity identifiers."""
    return str(uuid4())


def _validate_uuid(field_name: str, value: Optional[str]) -> Optional[str]:
    """Validate that the supplied value is a UUID string, preserving None."""
    if value is None:
        return value
    try:
        UUID(str(value))
    except ValueError as exc:
        raise ValueError(f"{field_name} must be a valid UUID string.") from exc
    return str(value)


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def _to_decimal(field_name: str, value: Any) -> Decimal:
    """Coerce ``value`` to Decimal, raising ValueError for non-numeric input."""
    try:
        result = Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"{field_name} must be a number, got {value!r}.") from exc
    if not result.is_finite():
        raise ValueError(f"{field_name} must be a finite number, got {value!r}.")
    return result


def _whole_days(delta: timedelta) -> int:
    """Whole days in ``delta``, truncated toward zero."""
    return int(delta.total_seconds() / 86400)


def _percentage(part: Any, whole: Any) -> Decimal:
    """``part / whole * 100`` as a Decimal, or zero when ``whole`` is zero."""
    whole = Decimal(whole)
    if whole == 0:
        return ZERO
    return Decimal(part) / whole * HUNDRED


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and value.strip() == "":
        return None
    return value


class CRMBaseModel(BaseModel):
    """Shared configuration for all CRM entities."""

    model_config = ConfigDict(
        populate_by_name=True,
        validate_assignment=True,
        use_enum_values=True,
        validate_default=True,
        extra="forbid",
    )

    @field_validator("*", mode="before", check_fields=False)
    @classmethod
    def strip_strings(cls, value: Any) -> Any:
        """Normalize string inputs by trimming whitespace."""
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("*", mode="after", check_fields=False)
    @classmethod
    def assume_utc(cls, value: Any) -> Any:
        """Treat naive datetimes as UTC so comparisons with ``utcnow()`` work."""
        if isinstance(value, datetime) and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class Address(CRMBaseModel):
    street: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""
    country: str = ""

    @property
    def full_address(self) -> str:
        return f"{self.street}, {self.city}, {self.state} {self.postal_code}, {self.country}".strip(" ,")
