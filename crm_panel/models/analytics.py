"""Aggregated analytics views, chart payloads and report records."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import ConfigDict, Field, field_validator

from .common import ZERO, CRMBaseModel, _create_id, _validate_uuid, utcnow


class ReportType(str, Enum):
    CUSTOMER_REPORT = "CustomerReport"
    LEAD_REPORT = "LeadReport"
    PROJECT_REPORT = "ProjectReport"
    FINANCIAL_REPORT = "FinancialReport"
    STAFF_PERFORMANCE_REPORT = "StaffPerformanceReport"
    EXECUTIVE_SUMMARY = "ExecutiveSummary"
    CUSTOM_REPORT = "CustomReport"


class ReportFormat(str, Enum):
    PDF = "PDF"
    EXCEL = "Excel"
    CSV = "CSV"
    JSON = "JSON"


class ReportStatus(str, Enum):
    GENERATING = "Generating"
    GENERATED = "Generated"
    FAILED = "Failed"
    EXPIRED = "Expired"


class WorkloadStatus(str, Enum):
    LOW = "Low"
    NORMAL = "Normal"
    HIGH = "High"
    OVERLOADED = "Overloaded"


class Trend(str, Enum):
    UP = "Up"
    DOWN = "Down"
    STABLE = "Stable"


# ----------------------------------------------------------------------
# Trend and performance rows
# ----------------------------------------------------------------------


class CustomerTrend(CRMBaseModel):
    month: date
    new_customers: int = 0
    total_customers: int = 0
    revenue: Decimal = ZERO


class LeadTrend(CRMBaseModel):
    month: date
    new_leads: int = 0
    converted_leads: int = 0
    conversion_rate: Decimal = ZERO
    pipeline_value: Decimal = ZERO


class ProjectTrend(CRMBaseModel):
    month: date
    new_projects: int = 0
    completed_projects: int = 0
    total_budget: Decimal = ZERO
    completion_rate: Decimal = ZERO


class MonthlyRevenue(CRMBaseModel):
    month: date
    revenue: Decimal = ZERO
    expenses: Decimal = ZERO
    profit: Decimal = ZERO
    profit_margin: Decimal = ZERO


class PaymentTrend(CRMBaseModel):
    month: date
    total_invoiced: Decimal = ZERO
    total_paid: Decimal = ZERO
    outstanding: Decimal = ZERO
    collection_rate: Decimal = ZERO


class TopCustomer(CRMBaseModel):
    customer_id: str
    customer_name: str = ""
    total_revenue: Decimal = ZERO
    project_count: int = 0
    last_activity: Optional[datetime] = None


class SourcePerformance(CRMBaseModel):
    source: str
    total_leads: int = 0
    converted_leads: int = 0
    conversion_rate: Decimal = ZERO
    average_value: Decimal = ZERO
    roi: Decimal = ZERO


class ProjectPerformance(CRMBaseModel):
    project_id: str
    project_name: str = ""
    budget_variance: Decimal = ZERO
    time_variance: Decimal = ZERO
    completion_percentage: Decimal = ZERO
    is_on_time: bool = True
    is_on_budget: bool = True


class StaffPerformance(CRMBaseModel):
    staff_id: str
    staff_name: str = ""
    projects_managed: int = 0
    leads_assigned: int = 0
    tasks_completed: int = 0
    average_project_completion: Decimal = ZERO
    lead_conversion_rate: Decimal = ZERO
    productivity_score: Decimal = ZERO


class StaffWorkload(CRMBaseModel):
    staff_id: str
    staff_name: str = ""
    active_projects: int = 0
    active_tasks: int = 0
    active_leads: int = 0
    workload_score: Decimal = ZERO
    workload_status: WorkloadStatus = WorkloadStatus.LOW


class KPITrend(CRMBaseModel):
    kpi_name: str
    month: date
    value: Decimal = ZERO
    target: Decimal = ZERO
    variance_percentage: Decimal = ZERO


# ----------------------------------------------------------------------
# Section analytics
# ----------------------------------------------------------------------


class CustomerAnalytics(CRMBaseModel):
    total_customers: int = 0
    active_customers: int = 0
    new_customers_this_month: int = 0
    new_customers_last_month: int = 0
    customer_growth_rate: Decimal = ZERO
    average_customer_value: Decimal = ZERO
    customers_by_type: Dict[str, int] = Field(default_factory=dict)
    customers_by_status: Dict[str, int] = Field(default_factory=dict)
    monthly_trends: List[CustomerTrend] = Field(default_factory=list)
    top_customers: List[TopCustomer] = Field(default_factory=list)


class LeadAnalytics(CRMBaseModel):
    total_leads: int = 0
    active_leads: int = 0
    converted_leads: int = 0
    new_leads_this_month: int = 0
    conversion_rate: Decimal = ZERO
    average_lead_value: Decimal = ZERO
    total_pipeline_value: Decimal = ZERO
    overdue_follow_ups: int = 0
    leads_by_status: Dict[str, int] = Field(default_factory=dict)
    leads_by_source: Dict[str, int] = Field(default_factory=dict)
    leads_by_priority: Dict[str, int] = Field(default_factory=dict)
    monthly_trends: List[LeadTrend] = Field(default_factory=list)
    source_performance: List[SourcePerformance] = Field(default_factory=list)


class ProjectAnalytics(CRMBaseModel):
    total_projects: int = 0
    active_projects: int = 0
    completed_projects: int = 0
    overdue_projects: int = 0
    total_budget: Decimal = ZERO
    total_actual_cost: Decimal = ZERO
    budget_variance: Decimal = ZERO
    average_project_completion: Decimal = ZERO
    total_tasks: int = 0
    completed_tasks: int = 0
    overdue_tasks: int = 0
    task_completion_rate: Decimal = ZERO
    projects_by_status: Dict[str, int] = Field(default_factory=dict)
    projects_by_type: Dict[str, int] = Field(default_factory=dict)
    monthly_trends: List[ProjectTrend] = Field(default_factory=list)
    project_performance: List[ProjectPerformance] = Field(default_factory=list)


class FinancialAnalytics(CRMBaseModel):
    total_revenue: Decimal = ZERO
    revenue_this_month: Decimal = ZERO
    revenue_last_month: Decimal = ZERO
    revenue_growth_rate: Decimal = ZERO
    total_estimate_value: Decimal = ZERO
    total_invoice_value: Decimal = ZERO
    total_paid_amount: Decimal = ZERO
    total_outstanding: Decimal = ZERO
    average_invoice_value: Decimal = ZERO
    total_estimates: int = 0
    total_invoices: int = 0
    paid_invoices: int = 0
    overdue_invoices: int = 0
    payment_collection_rate: Decimal = ZERO
    monthly_revenue: List[MonthlyRevenue] = Field(default_factory=list)
    payment_trends: List[PaymentTrend] = Field(default_factory=list)
    revenue_by_customer: Dict[str, Decimal] = Field(default_factory=dict)


class StaffAnalytics(CRMBaseModel):
    total_staff: int = 0
    active_staff: int = 0
    average_projects_per_staff: Decimal = ZERO
    average_leads_per_staff: Decimal = ZERO
    staff_by_role: Dict[str, int] = Field(default_factory=dict)
    staff_performance: List[StaffPerformance] = Field(default_factory=list)
    staff_workload: List[StaffWorkload] = Field(default_factory=list)


class PerformanceMetrics(CRMBaseModel):
    customer_satisfaction_score: Decimal = ZERO
    project_delivery_rate: Decimal = ZERO
    lead_response_time: Decimal = ZERO
    average_project_duration: Decimal = ZERO
    resource_utilization: Decimal = ZERO
    profit_margin: Decimal = ZERO
    kpi_trends: List[KPITrend] = Field(default_factory=list)


class DashboardAnalytics(CRMBaseModel):
    customers: CustomerAnalytics = Field(default_factory=CustomerAnalytics)
    leads: LeadAnalytics = Field(default_factory=LeadAnalytics)
    projects: ProjectAnalytics = Field(default_factory=ProjectAnalytics)
    financial: FinancialAnalytics = Field(default_factory=FinancialAnalytics)
    staff: StaffAnalytics = Field(default_factory=StaffAnalytics)
    performance: PerformanceMetrics = Field(default_factory=PerformanceMetrics)
    generated_at: datetime = Field(default_factory=utcnow)


# ----------------------------------------------------------------------
# Charts and comparisons
# ----------------------------------------------------------------------


class ChartData(CRMBaseModel):
    label: str
    value: Decimal = ZERO
    color: str = ""
    metadata: Dict[str, Any] = Field(default_factory=dict)


class TimeSeriesData(CRMBaseModel):
    date: datetime
    value: Decimal = ZERO
    series: str = ""
    metadata: Dict[str, Any] = Field(default_factory=dict)


class ComparisonData(CRMBaseModel):
    category: str
    current_value: Decimal = ZERO
    previous_value: Decimal = ZERO
    change_percentage: Decimal = ZERO
    trend: Trend = Trend.STABLE


# ----------------------------------------------------------------------
# Reports
# ----------------------------------------------------------------------


class ReportRequest(CRMBaseModel):
    type: ReportType
    start_date: datetime
    end_date: datetime
    customer_ids: List[str] = Field(default_factory=list)
    staff_ids: List[str] = Field(default_factory=list)
    project_ids: List[str] = Field(default_factory=list)
    format: ReportFormat = ReportFormat.PDF
    include_charts: bool = True
    include_details: bool = True


class ReportResult(CRMBaseModel):
    """A generated report; ``data`` holds the rendered file."""

    model_config = ConfigDict(ser_json_bytes="base64", val_json_bytes="base64")

    id: str = Field(default_factory=_create_id)
    title: str = ""
    type: ReportType
    generated_at: datetime = Field(default_factory=utcnow)
    generated_by: str = ""
    format: ReportFormat
    data: bytes = b""
    file_name: str = ""
    file_size: int = 0
    status: ReportStatus = ReportStatus.GENERATED
    error_message: str = ""

    @field_validator("id", mode="before")
    @classmethod
    def validate_id(cls, value: Optional[str]) -> Optional[str]:
        return _validate_uuid("id", value)


class AnalyticsDefaults:
    CHART_COLORS: Dict[str, str] = {
        "Primary": "#594AE2",
        "Secondary": "#FF6B6B",
        "Success": "#51CF66",
        "Warning": "#FFD43B",
        "Error": "#FF6B6B",
        "Info": "#339AF0",
        "Dark": "#495057",
        "Light": "#F8F9FA",
    }
    MONTH_NAMES = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
    DEFAULT_TARGETS: Dict[str, Decimal] = {
        "LeadConversionRate": Decimal("25.0"),
        "CustomerSatisfaction": Decimal("85.0"),
        "ProjectDeliveryRate": Decimal("90.0"),
        "PaymentCollectionRate": Decimal("95.0"),
        "ProfitMargin": Decimal("20.0"),
    }
