"""Pydantic entities for the CRM panel."""

from .analytics import (
    AnalyticsDefaults,
    ChartData,
    ComparisonData,
    CustomerAnalytics,
    CustomerTrend,
    DashboardAnalytics,
    FinancialAnalytics,
    KPITrend,
    LeadAnalytics,
    LeadTrend,
    MonthlyRevenue,
    PaymentTrend,
    PerformanceMetrics,
    ProjectAnalytics,
    ProjectPerformance,
    ProjectTrend,
    ReportFormat,
    ReportRequest,
    ReportResult,
    ReportStatus,
    ReportType,
    SourcePerformance,
    StaffAnalytics,
    StaffPerformance,
    StaffWorkload,
    TimeSeriesData,
    TopCustomer,
    Trend,
    WorkloadStatus,
)
from .common import Address, CRMBaseModel, utcnow
from .customer import Customer, CustomerStatus, CustomerType
from .financial import (
    Estimate,
    EstimateItem,
    EstimateStatus,
    FinancialDefaults,
    Invoice,
    InvoiceItem,
    InvoiceStatus,
    Payment,
    PaymentMethod,
)
from .lead import (
    Lead,
    LeadActivity,
    LeadActivityType,
    LeadConversion,
    LeadDefaults,
    LeadPriority,
    LeadSource,
    LeadStatistics,
    LeadStatus,
)
from .project import (
    DocumentCategory,
    Project,
    ProjectDefaults,
    ProjectDocument,
    ProjectMilestone,
    ProjectPriority,
    ProjectStatistics,
    ProjectStatus,
    ProjectTask,
    ProjectType,
    TaskAttachment,
    TaskComment,
    TaskPriority,
    TaskStatus,
    TimeEntry,
)
from .settings import AccessLog, UISettings
from .staff import EmploymentType, Permission, Role, Staff, StaffRole, StaffStatus, SystemPermissions

__all__ = [
    "AccessLog",
    "Address",
    "AnalyticsDefaults",
    "ChartData",
    "ComparisonData",
    "CRMBaseModel",
    "Customer",
    "CustomerAnalytics",
    "CustomerStatus",
    "CustomerTrend",
    "CustomerType",
    "DashboardAnalytics",
    "DocumentCategory",
    "EmploymentType",
    "Estimate",
    "EstimateItem",
    "EstimateStatus",
    "FinancialAnalytics",
    "FinancialDefaults",
    "Invoice",
    "InvoiceItem",
    "InvoiceStatus",
    "KPITrend",
    "Lead",
    "LeadActivity",
    "LeadActivityType",
    "LeadAnalytics",
    "LeadConversion",
    "LeadDefaults",
    "LeadPriority",
    "LeadSource",
    "LeadStatistics",
    "LeadStatus",
    "LeadTrend",
    "MonthlyRevenue",
    "Payment",
    "PaymentMethod",
    "PaymentTrend",
    "PerformanceMetrics",
    "Permission",
    "Project",
    "ProjectAnalytics",
    "ProjectDefaults",
    "ProjectDocument",
    "ProjectMilestone",
    "ProjectPerformance",
    "ProjectPriority",
    "ProjectStatistics",
    "ProjectStatus",
    "ProjectTask",
    "ProjectTrend",
    "ProjectType",
    "ReportFormat",
    "ReportRequest",
    "ReportResult",
    "ReportStatus",
    "ReportType",
    "Role",
    "SourcePerformance",
    "Staff",
    "StaffAnalytics",
    "StaffPerformance",
    "StaffRole",
    "StaffStatus",
    "StaffWorkload",
    "SystemPermissions",
    "TaskAttachment",
    "TaskComment",
    "TaskPriority",
    "TaskStatus",
    "TimeEntry",
    "TimeSeriesData",
    "TopCustomer",
    "Trend",
    "UISettings",
    "WorkloadStatus",
    "utcnow",
]
