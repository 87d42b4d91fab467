"""Estimates, invoices and payments."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import Field, field_validator

from .common import ZERO, CRMBaseModel, _create_id, _validate_uuid, _whole_days, utcnow
from .customer import Customer


class EstimateStatus(str, Enum):
    DRAFT = "Draft"
    SENT = "Sent"
    ACCEPTED = "Accepted"
    REJECTED = "Rejected"
    EXPIRED = "Expired"
    CONVERTED = "Converted"


class InvoiceStatus(str, Enum):
    DRAFT = "Draft"
    SENT = "Sent"
    PAID = "Paid"
    OVERDUE = "Overdue"
    CANCELLED = "Cancelled"
    PARTIALLY_PAID = "PartiallyPaid"


class PaymentMethod(str, Enum):
    CASH = "Cash"
    CHECK = "Check"
    BANK_TRANSFER = "BankTransfer"
    CREDIT_CARD = "CreditCard"
    DEBIT_CARD = "DebitCard"
    PAYPAL = "PayPal"
    STRIPE = "Stripe"
    OTHER = "Other"


class LineItem(CRMBaseModel):
    id: str = Field(default_factory=_create_id)
    description: str = ""
    quantity: Decimal = Decimal("1")
    unit_price: Decimal = ZERO
    unit: str = "each"
    sort_order: int = 0

    @property
    def total(self) -> Decimal:
        return self.quantity * self.unit_price


class EstimateItem(LineItem):
    pass


class InvoiceItem(LineItem):
    pass


class _BillingDocument(CRMBaseModel):
    """Fields and totals shared by estimates and invoices."""

    id: str = Field(default_factory=_create_id)
    customer_id: str
    customer: Optional[Customer] = Field(default=None, exclude=True)
    title: str = ""
    description: str = ""
    created_date: datetime = Field(default_factory=utcnow)
    sent_date: Optional[datetime] = None
    tax_rate: Decimal = Decimal("0.10")
    notes: str = ""
    terms: str = ""
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    created_by: str = ""
    updated_by: str = ""

    @field_validator("id", "customer_id", mode="before")
    @classmethod
    def validate_ids(cls, value: Optional[str]) -> Optional[str]:
        return _validate_uuid("id", value)

    @property
    def sub_total(self) -> Decimal:
        return sum((item.total for item in self.items), ZERO)

    @property
    def tax_amount(self) -> Decimal:
        return self.sub_total * self.tax_rate

    @property
    def total(self) -> Decimal:
        return self.sub_total + self.tax_amount


class Estimate(_BillingDocument):
    estimate_number: str = ""
    status: EstimateStatus = EstimateStatus.DRAFT
    accepted_date: Optional[datetime] = None
    rejected_date: Optional[datetime] = None
    expiry_date: Optional[datetime] = None
    items: List[EstimateItem] = Field(default_factory=list)

    @property
    def display_number(self) -> str:
        return self.estimate_number or f"EST-{self.id[:8]}"

    @property
    def is_expired(self) -> bool:
        return self.expiry_date is not None and self.expiry_date < utcnow()

    @property
    def can_be_converted(self) -> bool:
        return self.status == EstimateStatus.ACCEPTED and not self.is_expired


class Invoice(_BillingDocument):
    invoice_number: str = ""
    estimate_id: Optional[str] = None
    status: InvoiceStatus = InvoiceStatus.DRAFT
    due_date: Optional[datetime] = None
    paid_date: Optional[datetime] = None
    amount_paid: Decimal = ZERO
    items: List[InvoiceItem] = Field(default_factory=list)

    @field_validator("estimate_id", mode="before")
    @classmethod
    def validate_estimate_id(cls, value: Optional[str]) -> Optional[str]:
        return _validate_uuid("estimate_id", value)

    @property
    def amount_due(self) -> Decimal:
        return self.total - self.amount_paid

    @property
    def display_number(self) -> str:
        return self.invoice_number or f"INV-{self.id[:8]}"

    @property
    def is_overdue(self) -> bool:
        return self.due_date is not None and self.due_date < utcnow() and self.status != InvoiceStatus.PAID

    @property
    def is_partially_paid(self) -> bool:
        return ZERO < self.amount_paid < self.total

    @property
    def days_overdue(self) -> int:
        if not self.is_overdue:
            return 0
        return _whole_days(utcnow() - self.due_date)


class Payment(CRMBaseModel):
    id: str = Field(default_factory=_create_id)
    invoice_id: str
    amount: Decimal = ZERO
    payment_date: datetime = Field(default_factory=utcnow)
    method: PaymentMethod = PaymentMethod.BANK_TRANSFER
    reference: str = ""
    notes: str = ""
    created_at: datetime = Field(default_factory=utcnow)
    created_by: str = ""

    @field_validator("id", "invoice_id", mode="before")
    @classmethod
    def validate_ids(cls, value: Optional[str]) -> Optional[str]:
        return _validate_uuid("id", value)


class FinancialDefaults:
    DEFAULT_TERMS = (
        "Payment is due within 30 days of invoice date.\n"
        "Late payments may be subject to a 1.5% monthly service charge.\n"
        "Please include invoice number with payment."
    )
    DEFAULT_ESTIMATE_TERMS = (
        "This estimate is valid for 30 days from the date issued.\n"
        "Prices are subject to change without notice.\n"
        "A 50% deposit may be required to begin work."
    )
    COMMON_DESCRIPTIONS = [
        "Web Development Services",
        "Mobile App Development",
        "UI/UX Design",
        "Database Design & Implementation",
        "System Integration",
        "Technical Consulting",
        "Project Management",
        "Quality Assurance Testing",
        "Maintenance & Support",
        "Training Services",
    ]
    COMMON_UNITS = ["each", "hour", "day", "week", "month", "project", "page", "feature", "license", "user"]
