"""Sales leads, their follow-up activities and conversion records."""

from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import EmailStr, Field, field_validator

from .common import CRMBaseModel, _blank_to_none, _create_id, _validate_uuid, _whole_days, utcnow
from .customer import Customer
from .staff import Staff


class LeadStatus(str, Enum):
    NEW = "New"
    CONTACTED = "Contacted"
    QUALIFIED = "Qualified"
    PROPOSAL = "Proposal"
    NEGOTIATION = "Negotiation"
    CONVERTED = "Converted"
    LOST = "Lost"
    UNQUALIFIED = "Unqualified"


class LeadSource(str, Enum):
    WEBSITE = "Website"
    REFERRAL = "Referral"
    SOCIAL_MEDIA = "SocialMedia"
    EMAIL_MARKETING = "EmailMarketing"
    COLD_CALL = "ColdCall"
    TRADE_SHOW = "TradeShow"
    ADVERTISEMENT = "Advertisement"
    PARTNER_REFERRAL = "PartnerReferral"
    DIRECT_MAIL = "DirectMail"
    OTHER = "Other"


class LeadPriority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class LeadActivityType(str, Enum):
    CALL = "Call"
    EMAIL = "Email"
    MEETING = "Meeting"
    DEMO = "Demo"
    PROPOSAL = "Proposal"
    FOLLOW_UP = "FollowUp"
    NOTE = "Note"
    TASK = "Task"
    APPOINTMENT = "Appointment"


# Statuses that take a lead out of the active pipeline.
CLOSED_LEAD_STATUSES = {LeadStatus.CONVERTED.value, LeadStatus.LOST.value}


def _default_close_date() -> datetime:
    return utcnow() + timedelta(days=30)


class LeadActivity(CRMBaseModel):
    id: str = Field(default_factory=_create_id)
    lead_id: str
    type: LeadActivityType = LeadActivityType.CALL
    subject: str = ""
    description: str = ""
    activity_date: datetime = Field(default_factory=utcnow)
    scheduled_date: Optional[datetime] = None
    is_completed: bool = False
    completed_date: Optional[datetime] = None
    assigned_to_staff_id: Optional[str] = None
    assigned_to_staff: Optional[Staff] = Field(default=None, exclude=True)
    outcome: str = ""
    created_at: datetime = Field(default_factory=utcnow)
    created_by: str = ""

    @field_validator("id", "lead_id", "assigned_to_staff_id", mode="before")
    @classmethod
    def validate_ids(cls, value: Optional[str]) -> Optional[str]:
        return _validate_uuid("id", value)

    @property
    def is_overdue(self) -> bool:
        return self.scheduled_date is not None and self.scheduled_date < utcnow() and not self.is_completed

    @property
    def status_display(self) -> str:
        if self.is_completed:
            return "Completed"
        return "Overdue" if self.is_overdue else "Pending"


class Lead(CRMBaseModel):
    id: str = Field(default_factory=_create_id)
    first_name: str = ""
    last_name: str = ""
    email: Optional[EmailStr] = None
    phone: str = ""
    company: str = ""
    job_title: str = ""
    status: LeadStatus = LeadStatus.NEW
    source: LeadSource = LeadSource.WEBSITE
    priority: LeadPriority = LeadPriority.MEDIUM
    estimated_value: Decimal = Decimal("0")
    expected_close_date: datetime = Field(default_factory=_default_close_date)
    project_description: str = ""
    requirements: str = ""
    budget: str = ""
    timeline: str = ""
    notes: str = ""
    tags: List[str] = Field(default_factory=list)
    activities: List[LeadActivity] = Field(default_factory=list, exclude=True)
    assigned_to_staff_id: Optional[str] = None
    assigned_to_staff: Optional[Staff] = Field(default=None, exclude=True)
    converted_customer_id: Optional[str] = None
    converted_customer: Optional[Customer] = Field(default=None, exclude=True)
    converted_date: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    last_contact_date: Optional[datetime] = None
    next_follow_up_date: Optional[datetime] = None
    created_by: str = ""
    updated_by: str = ""

    @field_validator("id", "assigned_to_staff_id", "converted_customer_id", mode="before")
    @classmethod
    def validate_ids(cls, value: Optional[str]) -> Optional[str]:
        return _validate_uuid("id", _blank_to_none(value))

    @field_validator("email", mode="before")
    @classmethod
    def blank_email(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def display_name(self) -> str:
        if self.company:
            return f"{self.company} ({self.full_name})"
        return self.full_name

    @property
    def is_converted(self) -> bool:
        return self.status == LeadStatus.CONVERTED and self.converted_customer_id is not None

    @property
    def is_closed(self) -> bool:
        return self.status in CLOSED_LEAD_STATUSES

    @property
    def is_overdue(self) -> bool:
        return (
            self.next_follow_up_date is not None
            and self.next_follow_up_date < utcnow()
            and not self.is_closed
        )

    @property
    def days_until_follow_up(self) -> int:
        if self.next_follow_up_date is None:
            return 0
        return _whole_days(self.next_follow_up_date - utcnow())

    @property
    def days_since_created(self) -> int:
        return _whole_days(utcnow() - self.created_at)

    @property
    def days_since_last_contact(self) -> int:
        if self.last_contact_date is None:
            return self.days_since_created
        return _whole_days(utcnow() - self.last_contact_date)


class LeadConversion(CRMBaseModel):
    id: str = Field(default_factory=_create_id)
    lead_id: str
    customer_id: str
    conversion_date: datetime = Field(default_factory=utcnow)
    conversion_value: Decimal = Decimal("0")
    conversion_notes: str = ""
    first_project_id: Optional[str] = None
    first_estimate_id: Optional[str] = None
    converted_by: str = ""
    created_at: datetime = Field(default_factory=utcnow)

    @field_validator("id", "lead_id", "customer_id", "first_project_id", "first_estimate_id", mode="before")
    @classmethod
    def validate_ids(cls, value: Optional[str]) -> Optional[str]:
        return _validate_uuid("id", value)


class LeadStatistics(CRMBaseModel):
    total_leads: int = 0
    new_leads: int = 0
    qualified_leads: int = 0
    converted_leads: int = 0
    lost_leads: int = 0
    conversion_rate: Decimal = Decimal("0")
    average_lead_value: Decimal = Decimal("0")
    total_pipeline_value: Decimal = Decimal("0")
    overdue_follow_ups: int = 0
    leads_by_source: Dict[str, int] = Field(default_factory=dict)
    leads_by_status: Dict[str, int] = Field(default_factory=dict)


class LeadDefaults:
    STATUS_DESCRIPTIONS: Dict[str, str] = {
        LeadStatus.NEW.value: "New lead, not yet contacted",
        LeadStatus.CONTACTED.value: "Initial contact made",
        LeadStatus.QUALIFIED.value: "Lead has been qualified as potential customer",
        LeadStatus.PROPOSAL.value: "Proposal or quote has been sent",
        LeadStatus.NEGOTIATION.value: "In negotiation phase",
        LeadStatus.CONVERTED.value: "Successfully converted to customer",
        LeadStatus.LOST.value: "Lead was lost to competitor or declined",
        LeadStatus.UNQUALIFIED.value: "Lead does not meet qualification criteria",
    }
    SOURCE_DESCRIPTIONS: Dict[str, str] = {
        LeadSource.WEBSITE.value: "Came through website contact form",
        LeadSource.REFERRAL.value: "Referred by existing customer",
        LeadSource.SOCIAL_MEDIA.value: "Found through social media channels",
        LeadSource.EMAIL_MARKETING.value: "Responded to email campaign",
        LeadSource.COLD_CALL.value: "Generated through cold calling",
        LeadSource.TRADE_SHOW.value: "Met at trade show or event",
        LeadSource.ADVERTISEMENT.value: "Responded to advertisement",
        LeadSource.PARTNER_REFERRAL.value: "Referred by business partner",
        LeadSource.DIRECT_MAIL.value: "Responded to direct mail campaign",
        LeadSource.OTHER.value: "Other source",
    }
    COMMON_TAGS = [
        "Hot Lead",
        "Enterprise",
        "Small Business",
        "Web Development",
        "Mobile App",
        "E-commerce",
        "Consulting",
        "Maintenance",
        "Urgent",
        "Budget Conscious",
        "High Value",
        "Repeat Business",
    ]
    COMMON_BUDGET_RANGES = [
        "Under $5,000",
        "$5,000 - $10,000",
        "$10,000 - $25,000",
        "$25,000 - $50,000",
        "$50,000 - $100,000",
        "Over $100,000",
        "Budget not disclosed",
    ]
    COMMON_TIMELINES = [
        "ASAP",
        "Within 1 month",
        "1-3 months",
        "3-6 months",
        "6-12 months",
        "Over 1 year",
        "Flexible timeline",
    ]
