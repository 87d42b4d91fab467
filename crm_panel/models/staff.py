"""Staff members, roles and the permission catalogue."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, List, Optional

from pydantic import EmailStr, Field, field_validator

from .common import Address, CRMBaseModel, _blank_to_none, _create_id, _validate_uuid, utcnow


class StaffStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    ON_LEAVE = "OnLeave"
    TERMINATED = "Terminated"
    SUSPENDED = "Suspended"


class EmploymentType(str, Enum):
    FULL_TIME = "FullTime"
    PART_TIME = "PartTime"
    CONTRACT = "Contract"
    INTERN = "Intern"
    CONSULTANT = "Consultant"


class Staff(CRMBaseModel):
    id: str = Field(default_factory=_create_id)
    first_name: str = ""
    last_name: str = ""
    email: Optional[EmailStr] = None
    phone: str = ""
    job_title: str = ""
    department: str = ""
    status: StaffStatus = StaffStatus.ACTIVE
    hire_date: datetime = Field(default_factory=utcnow)
    termination_date: Optional[datetime] = None
    salary: Decimal = Decimal("0")
    employment_type: EmploymentType = EmploymentType.FULL_TIME
    address: Address = Field(default_factory=Address)
    notes: str = ""
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    created_by: str = ""
    updated_by: str = ""
    role_ids: List[str] = Field(default_factory=list)
    skills: List[str] = Field(default_factory=list)
    profile_image_url: str = ""
    emergency_contact_name: str = ""
    emergency_contact_phone: str = ""
    vacation_days_used: int = 0
    vacation_days_total: int = 20

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
        if self.job_title:
            return f"{self.full_name} - {self.job_title}"
        return self.full_name

    @property
    def vacation_days_remaining(self) -> int:
        return max(0, self.vacation_days_total - self.vacation_days_used)

    @property
    def is_active(self) -> bool:
        return self.status == StaffStatus.ACTIVE


class Permission(CRMBaseModel):
    module: str = ""
    action: str = ""
    resource: str = ""

    @property
    def display_name(self) -> str:
        return f"{self.module} - {self.action} {self.resource}"


class Role(CRMBaseModel):
    id: str = Field(default_factory=_create_id)
    name: str = ""
    description: str = ""
    permissions: List[Permission] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    is_system_role: bool = False

    @field_validator("id", mode="before")
    @classmethod
    def validate_id(cls, value: Optional[str]) -> Optional[str]:
        return _validate_uuid("id", value)

    def has_permission(self, module: str, action: str, resource: str) -> bool:
        return any(
            p.module == module and p.action == action and p.resource == resource for p in self.permissions
        )


class StaffRole(CRMBaseModel):
    """Flattened role summary with permission labels and member count."""

    id: str = Field(default_factory=_create_id)
    name: str = ""
    description: str = ""
    permissions: List[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    is_system_role: bool = False
    staff_count: int = 0

    @classmethod
    def from_role(cls, role: Role, staff_count: int = 0) -> "StaffRole":
        return cls(
            id=role.id,
            name=role.name,
            description=role.description,
            permissions=[p.display_name for p in role.permissions],
            created_at=role.created_at,
            updated_at=role.updated_at,
            is_system_role=role.is_system_role,
            staff_count=staff_count,
        )


_PERMISSION_TABLE = [
    ("Customers", "View", "List"),
    ("Customers", "Create", "Customer"),
    ("Customers", "Edit", "Customer"),
    ("Customers", "Delete", "Customer"),
    ("Staff", "View", "List"),
    ("Staff", "Create", "Staff"),
    ("Staff", "Edit", "Staff"),
    ("Staff", "Delete", "Staff"),
    ("Staff", "Manage", "Roles"),
    ("Projects", "View", "List"),
    ("Projects", "Create", "Project"),
    ("Projects", "Edit", "Project"),
    ("Projects", "Delete", "Project"),
    ("Projects", "Manage", "Tasks"),
    ("Finance", "View", "Estimates"),
    ("Finance", "Create", "Estimate"),
    ("Finance", "Edit", "Estimate"),
    ("Finance", "Delete", "Estimate"),
    ("Finance", "View", "Invoices"),
    ("Finance", "Create", "Invoice"),
    ("Finance", "Edit", "Invoice"),
    ("Finance", "Delete", "Invoice"),
    ("Finance", "View", "Expenses"),
    ("Finance", "Create", "Expense"),
    ("Finance", "Edit", "Expense"),
    ("Finance", "Delete", "Expense"),
    ("Leads", "View", "List"),
    ("Leads", "Create", "Lead"),
    ("Leads", "Edit", "Lead"),
    ("Leads", "Delete", "Lead"),
    ("Leads", "Convert", "Lead"),
    ("System", "View", "Settings"),
    ("System", "Edit", "Settings"),
    ("System", "View", "Logs"),
    ("System", "Backup", "Data"),
    ("System", "Restore", "Data"),
]

_DEFAULT_ROLE_RULES: List[tuple] = [
    ("Administrator", "Full system access with all permissions", lambda p: True),
    (
        "Manager",
        "Management level access to most features",
        lambda p: p.module != "System" or p.action == "View",
    ),
    (
        "Sales Representative",
        "Access to customer and lead management",
        lambda p: p.module in ("Customers", "Leads")
        or (p.module == "Finance" and p.resource in ("Estimates", "Invoices")),
    ),
    (
        "Project Manager",
        "Access to project and task management",
        lambda p: p.module == "Projects" or (p.module == "Customers" and p.action == "View"),
    ),
    (
        "Employee",
        "Basic access to view information",
        lambda p: p.action == "View" and p.module not in ("System", "Staff"),
    ),
]


class SystemPermissions:
    """Catalogue of every permission and the built-in roles derived from it."""

    @staticmethod
    def all_permissions() -> List[Permission]:
        return [Permission(module=m, action=a, resource=r) for m, a, r in _PERMISSION_TABLE]

    @staticmethod
    def default_roles() -> List[Role]:
        permissions = SystemPermissions.all_permissions()
        roles = []
        for name, description, rule in _DEFAULT_ROLE_RULES:
            roles.append(
                Role(
                    name=name,
                    description=description,
                    is_system_role=True,
                    permissions=[p.model_copy() for p in permissions if rule(p)],
                )
            )
        return roles
