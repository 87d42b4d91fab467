"""Projects with their tasks, milestones, documents and time entries."""

from datetime import date as Date, datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional

from pydantic import Field, field_validator

from .common import HUNDRED, ZERO, CRMBaseModel, _create_id, _percentage, _validate_uuid, _whole_days, utcnow, utctoday
from .customer import Customer
from .staff import Staff


class ProjectStatus(str, Enum):
    PLANNING = "Planning"
    IN_PROGRESS = "InProgress"
    ON_HOLD = "OnHold"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"
    ARCHIVED = "Archived"


class ProjectPriority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class ProjectType(str, Enum):
    DEVELOPMENT = "Development"
    DESIGN = "Design"
    CONSULTING = "Consulting"
    MAINTENANCE = "Maintenance"
    RESEARCH = "Research"
    MARKETING = "Marketing"
    OTHER = "Other"


class TaskStatus(str, Enum):
    NOT_STARTED = "NotStarted"
    IN_PROGRESS = "InProgress"
    ON_HOLD = "OnHold"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class TaskPriority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"


class DocumentCategory(str, Enum):
    GENERAL = "General"
    REQUIREMENTS = "Requirements"
    DESIGN = "Design"
    TECHNICAL = "Technical"
    TESTING = "Testing"
    DEPLOYMENT = "Deployment"
    LEGAL = "Legal"
    FINANCIAL = "Financial"


ACTIVE_PROJECT_STATUSES = {ProjectStatus.IN_PROGRESS.value, ProjectStatus.PLANNING.value}
FINISHED_PROJECT_STATUSES = {ProjectStatus.COMPLETED.value, ProjectStatus.CANCELLED.value}


class TaskComment(CRMBaseModel):
    id: str = Field(default_factory=_create_id)
    task_id: str
    comment: str = ""
    author_id: str
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = None


class TaskAttachment(CRMBaseModel):
    id: str = Field(default_factory=_create_id)
    task_id: str
    name: str = ""
    file_name: str = ""
    file_type: str = ""
    file_size: int = 0
    file_path: str = ""
    uploaded_at: datetime = Field(default_factory=utcnow)
    uploaded_by: str = ""


class ProjectTask(CRMBaseModel):
    id: str = Field(default_factory=_create_id)
    project_id: Optional[str] = None
    title: str = ""
    description: str = ""
    status: TaskStatus = TaskStatus.NOT_STARTED
    priority: TaskPriority = TaskPriority.MEDIUM
    assigned_to_id: Optional[str] = None
    assigned_to: Optional[Staff] = Field(default=None, exclude=True)
    start_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    completed_date: Optional[datetime] = None
    estimated_hours: int = 0
    actual_hours: int = 0
    progress_percentage: Decimal = ZERO
    dependent_task_ids: List[str] = Field(default_factory=list)
    comments: List[TaskComment] = Field(default_factory=list)
    attachments: List[TaskAttachment] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    created_by: str = ""
    updated_by: str = ""

    @field_validator("id", "project_id", "assigned_to_id", mode="before")
    @classmethod
    def validate_ids(cls, value: Optional[str]) -> Optional[str]:
        return _validate_uuid("id", value)

    @property
    def is_completed(self) -> bool:
        return self.status == TaskStatus.COMPLETED

    @property
    def is_overdue(self) -> bool:
        return self.due_date is not None and self.due_date < utcnow() and not self.is_completed

    @property
    def is_active(self) -> bool:
        return self.status == TaskStatus.IN_PROGRESS

    @property
    def days_remaining(self) -> int:
        if self.due_date is None:
            return 0
        return max(0, _whole_days(self.due_date - utcnow()))

    @property
    def hours_variance(self) -> int:
        return self.actual_hours - self.estimated_hours

    @property
    def hours_variance_percentage(self) -> Decimal:
        return _percentage(self.hours_variance, self.estimated_hours)


class ProjectMilestone(CRMBaseModel):
    id: str = Field(default_factory=_create_id)
    project_id: Optional[str] = None
    name: str = ""
    description: str = ""
    due_date: datetime
    completed_date: Optional[datetime] = None
    is_completed: bool = False
    required_task_ids: List[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)

    @property
    def is_overdue(self) -> bool:
        return not self.is_completed and self.due_date < utcnow()

    @property
    def days_remaining(self) -> int:
        return max(0, _whole_days(self.due_date - utcnow()))


class ProjectDocument(CRMBaseModel):
    id: str = Field(default_factory=_create_id)
    project_id: Optional[str] = None
    name: str = ""
    description: str = ""
    file_name: str = ""
    file_type: str = ""
    file_size: int = 0
    file_path: str = ""
    category: DocumentCategory = DocumentCategory.GENERAL
    uploaded_at: datetime = Field(default_factory=utcnow)
    uploaded_by: str = ""


class Project(CRMBaseModel):
    """Customer engagement with budget, schedule and a task list.

    ``tasks``, ``customer``, ``project_manager`` and ``team_members`` are
    navigation fields filled in by the project service; only the ids are
    persisted.
    """

    id: str = Field(default_factory=_create_id)
    name: str = ""
    description: str = ""
    project_code: str = ""
    status: ProjectStatus = ProjectStatus.PLANNING
    priority: ProjectPriority = ProjectPriority.MEDIUM
    type: ProjectType = ProjectType.DEVELOPMENT
    customer_id: Optional[str] = None
    customer: Optional[Customer] = Field(default=None, exclude=True)
    project_manager_id: Optional[str] = None
    project_manager: Optional[Staff] = Field(default=None, exclude=True)
    team_member_ids: List[str] = Field(default_factory=list)
    team_members: List[Staff] = Field(default_factory=list, exclude=True)
    start_date: datetime = Field(default_factory=utcnow)
    end_date: Optional[datetime] = None
    actual_start_date: Optional[datetime] = None
    actual_end_date: Optional[datetime] = None
    budget: Decimal = ZERO
    actual_cost: Decimal = ZERO
    estimated_hours: int = 0
    actual_hours: int = 0
    progress_percentage: Decimal = ZERO
    tasks: List[ProjectTask] = Field(default_factory=list, exclude=True)
    milestones: List[ProjectMilestone] = Field(default_factory=list)
    documents: List[ProjectDocument] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    notes: str = ""
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    created_by: str = ""
    updated_by: str = ""

    @field_validator("id", "customer_id", "project_manager_id", mode="before")
    @classmethod
    def validate_ids(cls, value: Optional[str]) -> Optional[str]:
        return _validate_uuid("id", value)

    @property
    def is_overdue(self) -> bool:
        return (
            self.end_date is not None
            and self.end_date < utcnow()
            and self.status not in FINISHED_PROJECT_STATUSES
        )

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_PROJECT_STATUSES

    @property
    def days_remaining(self) -> int:
        if self.end_date is None:
            return 0
        return max(0, _whole_days(self.end_date - utcnow()))

    @property
    def duration_days(self) -> int:
        if self.end_date is None:
            return 0
        return _whole_days(self.end_date - self.start_date)

    @property
    def budget_variance(self) -> Decimal:
        return self.actual_cost - self.budget

    @property
    def budget_variance_percentage(self) -> Decimal:
        if self.budget <= 0:
            return ZERO
        return self.budget_variance / self.budget * HUNDRED

    @property
    def hours_variance(self) -> int:
        return self.actual_hours - self.estimated_hours

    @property
    def hours_variance_percentage(self) -> Decimal:
        return _percentage(self.hours_variance, self.estimated_hours)

    @property
    def completed_tasks_count(self) -> int:
        return sum(1 for task in self.tasks if task.is_completed)

    @property
    def total_tasks_count(self) -> int:
        return len(self.tasks)

    @property
    def task_completion_percentage(self) -> Decimal:
        return _percentage(self.completed_tasks_count, self.total_tasks_count)


class TimeEntry(CRMBaseModel):
    """Hours logged against a project; start and end are offsets within ``date``."""

    id: str = Field(default_factory=_create_id)
    project_id: str
    task_id: Optional[str] = None
    staff_id: str
    date: Date = Field(default_factory=utctoday)
    start_time: timedelta = timedelta(0)
    end_time: timedelta = timedelta(0)
    description: str = ""
    is_billable: bool = True
    hourly_rate: Decimal = ZERO
    created_at: datetime = Field(default_factory=utcnow)
    created_by: str = ""

    @field_validator("id", "project_id", "task_id", "staff_id", mode="before")
    @classmethod
    def validate_ids(cls, value: Optional[str]) -> Optional[str]:
        return _validate_uuid("id", value)

    @property
    def duration(self) -> timedelta:
        return self.end_time - self.start_time

    @property
    def hours(self) -> Decimal:
        return Decimal(str(self.duration.total_seconds())) / Decimal(3600)

    @property
    def amount(self) -> Decimal:
        return self.hours * self.hourly_rate


class ProjectStatistics(CRMBaseModel):
    total_projects: int = 0
    active_projects: int = 0
    completed_projects: int = 0
    overdue_projects: int = 0
    total_budget: Decimal = ZERO
    total_actual_cost: Decimal = ZERO
    budget_variance: Decimal = ZERO
    total_tasks: int = 0
    completed_tasks: int = 0
    overdue_tasks: int = 0
    average_progress: Decimal = ZERO
    projects_by_status: Dict[str, int] = Field(default_factory=dict)
    projects_by_type: Dict[str, int] = Field(default_factory=dict)


class ProjectDefaults:
    STATUS_DESCRIPTIONS: Dict[str, str] = {
        ProjectStatus.PLANNING.value: "Project is in planning phase",
        ProjectStatus.IN_PROGRESS.value: "Project is actively being worked on",
        ProjectStatus.ON_HOLD.value: "Project is temporarily paused",
        ProjectStatus.COMPLETED.value: "Project has been completed successfully",
        ProjectStatus.CANCELLED.value: "Project has been cancelled",
        ProjectStatus.ARCHIVED.value: "Project has been archived",
    }
    COMMON_TAGS = [
        "Web Development",
        "Mobile App",
        "E-commerce",
        "API Integration",
        "Database",
        "UI/UX Design",
        "Testing",
        "Deployment",
        "Maintenance",
        "Bug Fix",
        "Feature Enhancement",
        "Performance Optimization",
    ]
    DEFAULT_MILESTONES = [
        "Project Kickoff",
        "Requirements Gathering",
        "Design Approval",
        "Development Phase 1",
        "Testing Phase",
        "User Acceptance Testing",
        "Deployment",
        "Project Completion",
    ]
