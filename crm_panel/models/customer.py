from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, List, Optional

from pydantic import EmailStr, Field, field_validator

from .common import Address, CRMBaseModel, _blank_to_none, _create_id, _validate_uuid, utcnow


class CustomerStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    PROSPECT = "Prospect"
    LEAD = "Lead"
    ARCHIVED = "Archived"


class CustomerType(str, Enum):
    INDIVIDUAL = "Individual"
    BUSINESS = "Business"
    ENTERPRISE = "Enterprise"
    GOVERNMENT = "Government"
    NON_PROFIT = "NonProfit"


class Customer(CRMBaseModel):
    """Individual or business client of the company."""

    id: str = Field(default_factory=_create_id)
    first_name: str = ""
    last_name: str = ""
    email: Optional[EmailStr] = None
    phone: str = ""
    company: str = ""
    job_title: str = ""
    address: Address = Field(default_factory=Address)
    status: CustomerStatus = CustomerStatus.ACTIVE
    type: CustomerType = CustomerType.INDIVIDUAL
    notes: str = ""
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    created_by: str = ""
    updated_by: str = ""
    tags: List[str] = Field(default_factory=list)
    total_revenue: Decimal = Decimal("0")
    project_count: int = 0
    last_contact_date: Optional[datetime] = None

    @field_validator("id", mode="before")
    @classmethod
    def validate_id(cls, value: Optional[str]) -> Optional[str]:
        return _validate_uuid("id", value)

    @field_validator("email", mode="before")
    @classmethod
    def blank_email(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def display_name(self) -> str:
        """Company-first label used in lists and reports."""
        if self.company:
            return f"{self.company} ({self.full_name})"
        return self.full_name
