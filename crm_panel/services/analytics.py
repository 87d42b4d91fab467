"""Dashboard analytics, chart feeds and report generation.

Every method re-reads the underlying collections, so results always reflect
the current store. Headline counts cover all records. Monthly trend rows are
limited to the requested window, which defaults to the twelve months up to
now.
"""

from __future__ import annotations

import calendar
import logging
from collections import defaultdict
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from pydantic import TypeAdapter, ValidationError

from .. import reports
from ..models.analytics import (
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
from ..models.common import ZERO, _aware, _percentage, _whole_days, utcnow
from ..models.customer import CustomerStatus
from ..models.financial import Invoice, InvoiceStatus
from ..models.lead import CLOSED_LEAD_STATUSES, LeadStatus
from ..models.project import Project, ProjectStatus, TaskStatus
from ..storage import KeyValueStore
from .base import count_by
from .customers import CustomerService
from .estimates import EstimateService
from .invoices import InvoiceService
from .leads import LeadService
from .projects import ProjectService, TaskService
from .staff import StaffService

logger = logging.getLogger(__name__)

ANALYTICS_REPORTS_KEY = "analytics_reports"

_REPORTS_ADAPTER = TypeAdapter(List[ReportResult])

_FILE_EXTENSIONS = {
    ReportFormat.PDF.value: "pdf",
    ReportFormat.EXCEL.value: "xlsx",
    ReportFormat.CSV.value: "csv",
    ReportFormat.JSON.value: "json",
}

_CUSTOMER_STATUS_COLORS = {
    CustomerStatus.ACTIVE.value: "Success",
    CustomerStatus.INACTIVE.value: "Error",
    CustomerStatus.PROSPECT.value: "Warning",
}
_LEAD_SOURCE_COLORS = {
    "Website": "Primary",
    "Referral": "Success",
    "SocialMedia": "Info",
    "EmailMarketing": "Warning",
}
_PROJECT_STATUS_COLORS = {
    ProjectStatus.PLANNING.value: "Info",
    ProjectStatus.IN_PROGRESS.value: "Primary",
    ProjectStatus.COMPLETED.value: "Success",
    ProjectStatus.ON_HOLD.value: "Warning",
    ProjectStatus.CANCELLED.value: "Error",
}

_OPEN_TASK_STATUSES = {TaskStatus.NOT_STARTED.value, TaskStatus.IN_PROGRESS.value}

# Workload score ceilings; anything at or above the last is Overloaded.
_WORKLOAD_BANDS = (
    (Decimal("5"), WorkloadStatus.LOW),
    (Decimal("10"), WorkloadStatus.NORMAL),
    (Decimal("15"), WorkloadStatus.HIGH),
)


# ----------------------------------------------------------------------
# Date helpers
# ----------------------------------------------------------------------


def _add_months(value: datetime, months: int) -> datetime:
    index = value.month - 1 + months
    year, month = value.year + index // 12, index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def _month_of(value: Optional[datetime]) -> Optional[date]:
    if value is None:
        return None
    return date(value.year, value.month, 1)


def _previous_month(month: date) -> date:
    if month.month == 1:
        return date(month.year - 1, 12, 1)
    return date(month.year, month.month - 1, 1)


def _months_between(start: datetime, end: datetime) -> List[date]:
    """First day of every calendar month touched by ``[start, end]``, oldest first."""
    months: List[date] = []
    current, last = _month_of(start), _month_of(end)
    while current <= last:
        months.append(current)
        current = date(current.year + current.month // 12, current.month % 12 + 1, 1)
    return months


def _resolve_window(start_date: Optional[datetime], end_date: Optional[datetime]) -> Tuple[datetime, datetime]:
    end = _aware(end_date) if end_date is not None else utcnow()
    start = _aware(start_date) if start_date is not None else _add_months(end, -12)
    return start, end


def _growth(current: Any, previous: Any) -> Decimal:
    previous = Decimal(previous)
    if previous == 0:
        return ZERO
    return (Decimal(current) - previous) / previous * Decimal(100)


def _mean(values: Iterable[Any]) -> Decimal:
    values = [Decimal(value) for value in values]
    if not values:
        return ZERO
    return sum(values, ZERO) / len(values)


def _trend(current: Decimal, previous: Decimal) -> Trend:
    if current > previous:
        return Trend.UP
    if current < previous:
        return Trend.DOWN
    return Trend.STABLE


def _color(mapping: Dict[str, str], key: str, fallback: str) -> str:
    return AnalyticsDefaults.CHART_COLORS[mapping.get(key, fallback)]


def _paid(invoices: Iterable[Invoice]) -> List[Invoice]:
    return [invoice for invoice in invoices if invoice.status == InvoiceStatus.PAID]


def _sum_totals(invoices: Iterable[Invoice]) -> Decimal:
    return sum((invoice.total for invoice in invoices), ZERO)


def _delivered_on_time(project: Project) -> bool:
    return (
        project.actual_end_date is not None
        and project.end_date is not None
        and project.actual_end_date <= project.end_date
    )


def _workload_status(score: Decimal) -> WorkloadStatus:
    for ceiling, status in _WORKLOAD_BANDS:
        if score < ceiling:
            return status
    return WorkloadStatus.OVERLOADED


class AnalyticsService:
    def __init__(
        self,
        store: KeyValueStore,
        customer_service: CustomerService,
        lead_service: LeadService,
        project_service: ProjectService,
        task_service: TaskService,
        estimate_service: EstimateService,
        invoice_service: InvoiceService,
        staff_service: StaffService,
        *,
        report_history_limit: int = 50,
    ) -> None:
        self._store = store
        self._customers = customer_service
        self._leads = lead_service
        self._projects = project_service
        self._tasks = task_service
        self._estimates = estimate_service
        self._invoices = invoice_service
        self._staff = staff_service
        self._report_history_limit = report_history_limit

    # ------------------------------------------------------------------
    # Dashboard sections
    # ------------------------------------------------------------------

    def get_dashboard_analytics(
        self, start_date: Optional[datetime] = None, end_date: Optional[datetime] = None
    ) -> DashboardAnalytics:
        return DashboardAnalytics(
            customers=self.get_customer_analytics(start_date, end_date),
            leads=self.get_lead_analytics(start_date, end_date),
            projects=self.get_project_analytics(start_date, end_date),
            financial=self.get_financial_analytics(start_date, end_date),
            staff=self.get_staff_analytics(start_date, end_date),
            performance=self.get_performance_metrics(start_date, end_date),
            generated_at=utcnow(),
        )

    def get_customer_analytics(
        self, start_date: Optional[datetime] = None, end_date: Optional[datetime] = None
    ) -> CustomerAnalytics:
        start, end = _resolve_window(start_date, end_date)
        customers = self._customers.get_all_customers()
        paid = _paid(self._invoices.get_all_invoices())
        projects = self._projects.get_all_projects()

        this_month = _month_of(utcnow())
        last_month = _previous_month(this_month)
        new_this_month = sum(1 for c in customers if _month_of(c.created_at) == this_month)
        new_last_month = sum(1 for c in customers if _month_of(c.created_at) == last_month)

        revenue: Dict[str, Decimal] = defaultdict(lambda: ZERO)
        last_paid: Dict[str, datetime] = {}
        for invoice in paid:
            revenue[invoice.customer_id] += invoice.total
            if invoice.paid_date is not None:
                previous = last_paid.get(invoice.customer_id)
                last_paid[invoice.customer_id] = max(previous, invoice.paid_date) if previous else invoice.paid_date

        trends = []
        for month in _months_between(start, end):
            trends.append(
                CustomerTrend(
                    month=month,
                    new_customers=sum(1 for c in customers if _month_of(c.created_at) == month),
                    total_customers=sum(1 for c in customers if _month_of(c.created_at) <= month),
                    revenue=_sum_totals(i for i in paid if _month_of(i.paid_date) == month),
                )
            )

        by_id = {customer.id: customer for customer in customers}
        top_customers = []
        for customer_id, total in sorted(revenue.items(), key=lambda item: item[1], reverse=True)[:5]:
            customer = by_id.get(customer_id)
            activity = [d for d in (last_paid.get(customer_id), customer.last_contact_date if customer else None) if d]
            top_customers.append(
                TopCustomer(
                    customer_id=customer_id,
                    customer_name=customer.display_name if customer else "Unknown",
                    total_revenue=total,
                    project_count=sum(1 for p in projects if p.customer_id == customer_id),
                    last_activity=max(activity) if activity else None,
                )
            )

        return CustomerAnalytics(
            total_customers=len(customers),
            active_customers=sum(1 for c in customers if c.status == CustomerStatus.ACTIVE),
            new_customers_this_month=new_this_month,
            new_customers_last_month=new_last_month,
            customer_growth_rate=_growth(new_this_month, new_last_month),
            average_customer_value=_mean(revenue.values()),
            customers_by_type=count_by(customers, lambda c: c.type),
            customers_by_status=count_by(customers, lambda c: c.status),
            monthly_trends=trends,
            top_customers=top_customers,
        )

    def get_lead_analytics(
        self, start_date: Optional[datetime] = None, end_date: Optional[datetime] = None
    ) -> LeadAnalytics:
        start, end = _resolve_window(start_date, end_date)
        leads = self._leads.get_all_leads()
        statistics = self._leads.get_lead_statistics()
        this_month = _month_of(utcnow())

        trends = []
        for month in _months_between(start, end):
            created = [lead for lead in leads if _month_of(lead.created_at) == month]
            converted = sum(1 for lead in leads if _month_of(lead.converted_date) == month)
            trends.append(
                LeadTrend(
                    month=month,
                    new_leads=len(created),
                    converted_leads=converted,
                    conversion_rate=_percentage(converted, len(created)),
                    pipeline_value=sum((lead.estimated_value for lead in created), ZERO),
                )
            )

        by_source: Dict[str, List[Any]] = defaultdict(list)
        for lead in leads:
            by_source[lead.source].append(lead)
        source_performance = []
        for source, members in by_source.items():
            converted = [lead for lead in members if lead.status == LeadStatus.CONVERTED]
            total_value = sum((lead.estimated_value for lead in members), ZERO)
            converted_value = sum((lead.estimated_value for lead in converted), ZERO)
            source_performance.append(
                SourcePerformance(
                    source=source,
                    total_leads=len(members),
                    converted_leads=len(converted),
                    conversion_rate=_percentage(len(converted), len(members)),
                    average_value=_mean(lead.estimated_value for lead in members),
                    roi=_percentage(converted_value, total_value),
                )
            )

        return LeadAnalytics(
            total_leads=statistics.total_leads,
            active_leads=sum(
                1 for lead in leads if lead.status not in (LeadStatus.CONVERTED.value, LeadStatus.LOST.value)
            ),
            converted_leads=statistics.converted_leads,
            new_leads_this_month=sum(1 for lead in leads if _month_of(lead.created_at) == this_month),
            conversion_rate=statistics.conversion_rate,
            average_lead_value=statistics.average_lead_value,
            total_pipeline_value=statistics.total_pipeline_value,
            overdue_follow_ups=statistics.overdue_follow_ups,
            leads_by_status=count_by(leads, lambda lead: lead.status),
            leads_by_source=count_by(leads, lambda lead: lead.source),
            leads_by_priority=count_by(leads, lambda lead: lead.priority),
            monthly_trends=trends,
            source_performance=source_performance,
        )

    def get_project_analytics(
        self, start_date: Optional[datetime] = None, end_date: Optional[datetime] = None
    ) -> ProjectAnalytics:
        start, end = _resolve_window(start_date, end_date)
        projects = self._projects.get_all_projects()
        statistics = self._projects.get_project_statistics()

        trends = []
        for month in _months_between(start, end):
            created = [p for p in projects if _month_of(p.created_at) == month]
            completed = sum(
                1
                for p in projects
                if p.status == ProjectStatus.COMPLETED and _month_of(p.actual_end_date) == month
            )
            trends.append(
                ProjectTrend(
                    month=month,
                    new_projects=len(created),
                    completed_projects=completed,
                    total_budget=sum((p.budget for p in created), ZERO),
                    completion_rate=_percentage(completed, len(created)),
                )
            )

        performance = [
            ProjectPerformance(
                project_id=project.id,
                project_name=project.name,
                budget_variance=project.budget_variance_percentage,
                time_variance=project.hours_variance_percentage,
                completion_percentage=project.progress_percentage,
                is_on_time=not project.is_overdue
                and (project.actual_end_date is None or project.end_date is None or _delivered_on_time(project)),
                is_on_budget=project.actual_cost <= project.budget,
            )
            for project in projects
        ]

        return ProjectAnalytics(
            total_projects=statistics.total_projects,
            active_projects=statistics.active_projects,
            completed_projects=statistics.completed_projects,
            overdue_projects=statistics.overdue_projects,
            total_budget=statistics.total_budget,
            total_actual_cost=statistics.total_actual_cost,
            budget_variance=statistics.budget_variance,
            average_project_completion=statistics.average_progress,
            total_tasks=statistics.total_tasks,
            completed_tasks=statistics.completed_tasks,
            overdue_tasks=statistics.overdue_tasks,
            task_completion_rate=_percentage(statistics.completed_tasks, statistics.total_tasks),
            projects_by_status=statistics.projects_by_status,
            projects_by_type=statistics.projects_by_type,
            monthly_trends=trends,
            project_performance=performance,
        )

    def _monthly_revenue(self, months: List[date], paid: List[Invoice], projects: List[Project]) -> List[MonthlyRevenue]:
        rows = []
        for month in months:
            revenue = _sum_totals(i for i in paid if _month_of(i.paid_date) == month)
            expenses = sum((p.actual_cost for p in projects if _month_of(p.actual_end_date) == month), ZERO)
            profit = revenue - expenses
            rows.append(
                MonthlyRevenue(
                    month=month,
                    revenue=revenue,
                    expenses=expenses,
                    profit=profit,
                    profit_margin=_percentage(profit, revenue),
                )
            )
        return rows

    @staticmethod
    def _payment_trends(months: List[date], invoices: List[Invoice]) -> List[PaymentTrend]:
        rows = []
        for month in months:
            issued = [i for i in invoices if _month_of(i.created_date) == month]
            invoiced = _sum_totals(issued)
            collected = sum((i.amount_paid for i in issued), ZERO)
            rows.append(
                PaymentTrend(
                    month=month,
                    total_invoiced=invoiced,
                    total_paid=collected,
                    outstanding=invoiced - collected,
                    collection_rate=_percentage(collected, invoiced),
                )
            )
        return rows

    def get_financial_analytics(
        self, start_date: Optional[datetime] = None, end_date: Optional[datetime] = None
    ) -> FinancialAnalytics:
        start, end = _resolve_window(start_date, end_date)
        invoices = self._invoices.get_all_invoices()
        estimates = self._estimates.get_all_estimates()
        projects = self._projects.get_all_projects()
        paid = _paid(invoices)

        this_month = _month_of(utcnow())
        last_month = _previous_month(this_month)
        revenue_this_month = _sum_totals(i for i in paid if _month_of(i.paid_date) == this_month)
        revenue_last_month = _sum_totals(i for i in paid if _month_of(i.paid_date) == last_month)

        revenue_by_customer: Dict[str, Decimal] = defaultdict(lambda: ZERO)
        for invoice in paid:
            name = invoice.customer.display_name if invoice.customer is not None else "Unknown"
            revenue_by_customer[name] += invoice.total

        months = _months_between(start, end)
        total_revenue = _sum_totals(paid)
        return FinancialAnalytics(
            total_revenue=total_revenue,
            revenue_this_month=revenue_this_month,
            revenue_last_month=revenue_last_month,
            revenue_growth_rate=_growth(revenue_this_month, revenue_last_month),
            total_estimate_value=sum((e.total for e in estimates), ZERO),
            total_invoice_value=_sum_totals(invoices),
            total_paid_amount=total_revenue,
            total_outstanding=_sum_totals(i for i in invoices if i.status != InvoiceStatus.PAID),
            average_invoice_value=_mean(i.total for i in invoices),
            total_estimates=len(estimates),
            total_invoices=len(invoices),
            paid_invoices=len(paid),
            overdue_invoices=sum(1 for i in invoices if i.is_overdue),
            payment_collection_rate=_percentage(len(paid), len(invoices)),
            monthly_revenue=self._monthly_revenue(months, paid, projects),
            payment_trends=self._payment_trends(months, invoices),
            revenue_by_customer=dict(revenue_by_customer),
        )

    def get_staff_analytics(
        self, start_date: Optional[datetime] = None, end_date: Optional[datetime] = None
    ) -> StaffAnalytics:
        """Headcount, performance and workload for every staff member.

        Staff figures describe the current roster and open work, so the window
        is accepted for a uniform signature but does not filter anything.
        """
        staff = self._staff.get_all_staff()
        projects = self._projects.get_all_projects()
        leads = self._leads.get_all_leads()
        tasks = self._tasks.get_all_tasks()

        performance = []
        workload = []
        for member in staff:
            managed = [p for p in projects if p.project_manager_id == member.id]
            assigned = [lead for lead in leads if lead.assigned_to_staff_id == member.id]
            converted = sum(1 for lead in assigned if lead.status == LeadStatus.CONVERTED)
            member_tasks = [t for t in tasks if t.assigned_to_id == member.id]
            average_completion = _mean(p.progress_percentage for p in managed)
            conversion_rate = _percentage(converted, len(assigned))
            performance.append(
                StaffPerformance(
                    staff_id=member.id,
                    staff_name=member.full_name,
                    projects_managed=len(managed),
                    leads_assigned=len(assigned),
                    tasks_completed=sum(1 for t in member_tasks if t.is_completed),
                    average_project_completion=average_completion,
                    lead_conversion_rate=conversion_rate,
                    productivity_score=(average_completion + conversion_rate) / 2,
                )
            )

            active_projects = sum(
                1
                for p in projects
                if p.is_active and (p.project_manager_id == member.id or member.id in p.team_member_ids)
            )
            active_tasks = sum(1 for t in member_tasks if t.status in _OPEN_TASK_STATUSES)
            active_leads = sum(1 for lead in assigned if lead.status not in CLOSED_LEAD_STATUSES)
            score = Decimal(active_projects * 3 + active_tasks + active_leads * 2)
            workload.append(
                StaffWorkload(
                    staff_id=member.id,
                    staff_name=member.full_name,
                    active_projects=active_projects,
                    active_tasks=active_tasks,
                    active_leads=active_leads,
                    workload_score=score,
                    workload_status=_workload_status(score),
                )
            )

        headcount = len(staff)
        return StaffAnalytics(
            total_staff=headcount,
            active_staff=sum(1 for member in staff if member.is_active),
            average_projects_per_staff=Decimal(len(projects)) / headcount if headcount else ZERO,
            average_leads_per_staff=Decimal(len(leads)) / headcount if headcount else ZERO,
            staff_by_role=count_by(staff, lambda member: member.job_title),
            staff_performance=performance,
            staff_workload=workload,
        )

    def get_performance_metrics(
        self, start_date: Optional[datetime] = None, end_date: Optional[datetime] = None
    ) -> PerformanceMetrics:
        start, end = _resolve_window(start_date, end_date)
        projects = self._projects.get_all_projects()
        leads = self._leads.get_all_leads()
        invoices = self._invoices.get_all_invoices()
        staff = self._staff.get_all_staff()
        paid = _paid(invoices)
        now = utcnow()

        completed = [p for p in projects if p.status == ProjectStatus.COMPLETED]
        response_hours = [
            Decimal(str((lead.last_contact_date - lead.created_at).total_seconds())) / Decimal(3600)
            for lead in leads
            if lead.last_contact_date is not None and lead.last_contact_date >= lead.created_at
        ]
        durations = [
            _whole_days((p.actual_end_date or p.end_date or now) - (p.actual_start_date or p.start_date))
            for p in completed
        ]

        active_staff = [member for member in staff if member.is_active]
        busy = sum(
            1
            for member in active_staff
            if any(
                p.is_active and (p.project_manager_id == member.id or member.id in p.team_member_ids)
                for p in projects
            )
        )

        revenue = _sum_totals(paid)
        costs = sum((p.actual_cost for p in projects), ZERO)

        return PerformanceMetrics(
            customer_satisfaction_score=AnalyticsDefaults.DEFAULT_TARGETS["CustomerSatisfaction"],
            project_delivery_rate=_percentage(sum(1 for p in completed if _delivered_on_time(p)), len(completed)),
            lead_response_time=_mean(response_hours),
            average_project_duration=_mean(durations),
            resource_utilization=_percentage(busy, len(active_staff)),
            profit_margin=_percentage(revenue - costs, revenue),
            kpi_trends=self._kpi_trends(_months_between(start, end), leads, projects, invoices),
        )

    def _kpi_trends(self, months: List[date], leads, projects: List[Project], invoices: List[Invoice]) -> List[KPITrend]:
        paid = _paid(invoices)
        revenue_rows = {row.month: row for row in self._monthly_revenue(months, paid, projects)}
        payment_rows = {row.month: row for row in self._payment_trends(months, invoices)}
        targets = AnalyticsDefaults.DEFAULT_TARGETS

        rows = []
        for month in months:
            created = sum(1 for lead in leads if _month_of(lead.created_at) == month)
            converted = sum(1 for lead in leads if _month_of(lead.converted_date) == month)
            finished = [
                p for p in projects if p.status == ProjectStatus.COMPLETED and _month_of(p.actual_end_date) == month
            ]
            values = {
                "LeadConversionRate": _percentage(converted, created),
                "ProjectDeliveryRate": _percentage(sum(1 for p in finished if _delivered_on_time(p)), len(finished)),
                "PaymentCollectionRate": payment_rows[month].collection_rate,
                "ProfitMargin": revenue_rows[month].profit_margin,
            }
            for name, value in values.items():
                target = targets[name]
                rows.append(
                    KPITrend(
                        kpi_name=name,
                        month=month,
                        value=value,
                        target=target,
                        variance_percentage=_percentage(value - target, target),
                    )
                )
        return rows

    # ------------------------------------------------------------------
    # Charts, series and comparisons
    # ------------------------------------------------------------------

    def get_chart_data(
        self, chart_type: str, start_date: Optional[datetime] = None, end_date: Optional[datetime] = None
    ) -> List[ChartData]:
        kind = (chart_type or "").strip().lower()
        if kind == "customer-status":
            counts = count_by(self._customers.get_all_customers(), lambda c: c.status)
            return [
                ChartData(label=label, value=Decimal(count), color=_color(_CUSTOMER_STATUS_COLORS, label, "Primary"))
                for label, count in counts.items()
            ]
        if kind == "lead-source":
            counts = count_by(self._leads.get_all_leads(), lambda lead: lead.source)
            return [
                ChartData(label=label, value=Decimal(count), color=_color(_LEAD_SOURCE_COLORS, label, "Secondary"))
                for label, count in counts.items()
            ]
        if kind == "project-status":
            counts = count_by(self._projects.get_all_projects(), lambda p: p.status)
            return [
                ChartData(label=label, value=Decimal(count), color=_color(_PROJECT_STATUS_COLORS, label, "Dark"))
                for label, count in counts.items()
            ]
        if kind == "revenue-by-month":
            return self._revenue_by_month(start_date, end_date)
        return []

    def _revenue_by_month(self, start_date: Optional[datetime], end_date: Optional[datetime]) -> List[ChartData]:
        totals: Dict[date, Decimal] = defaultdict(lambda: ZERO)
        for invoice in _paid(self._invoices.get_all_invoices()):
            if invoice.paid_date is None:
                continue
            if start_date is not None and invoice.paid_date < _aware(start_date):
                continue
            if end_date is not None and invoice.paid_date > _aware(end_date):
                continue
            totals[_month_of(invoice.paid_date)] += invoice.total
        return [
            ChartData(label=f"{month:%Y-%m}", value=value, color=AnalyticsDefaults.CHART_COLORS["Primary"])
            for month, value in sorted(totals.items())
        ]

    def get_time_series_data(
        self, metric: str, start_date: Optional[datetime] = None, end_date: Optional[datetime] = None
    ) -> List[TimeSeriesData]:
        start, end = _resolve_window(start_date, end_date)
        kind = (metric or "").strip().lower()
        if kind == "revenue":
            points = [
                (invoice.paid_date, invoice.total)
                for invoice in _paid(self._invoices.get_all_invoices())
                if invoice.paid_date is not None
            ]
            series = "Revenue"
        elif kind == "leads":
            points = [(lead.created_at, Decimal(1)) for lead in self._leads.get_all_leads()]
            series = "New Leads"
        elif kind == "projects":
            points = [(project.created_at, Decimal(1)) for project in self._projects.get_all_projects()]
            series = "New Projects"
        else:
            return []

        per_day: Dict[date, Decimal] = defaultdict(lambda: ZERO)
        for moment, value in points:
            if start <= moment <= end:
                per_day[moment.date()] += value
        return [
            TimeSeriesData(date=datetime.combine(day, time.min, tzinfo=timezone.utc), value=value, series=series)
            for day, value in sorted(per_day.items())
        ]

    def get_comparison_data(self, category: str) -> List[ComparisonData]:
        kind = (category or "").strip().lower()
        this_month = _month_of(utcnow())
        last_month = _previous_month(this_month)

        def compare(label: str, measure: Callable[[date], Any]) -> ComparisonData:
            current, previous = Decimal(measure(this_month)), Decimal(measure(last_month))
            return ComparisonData(
                category=label,
                current_value=current,
                previous_value=previous,
                change_percentage=_growth(current, previous),
                trend=_trend(current, previous),
            )

        if kind == "monthly-performance":
            paid = _paid(self._invoices.get_all_invoices())
            customers = self._customers.get_all_customers()
            leads = self._leads.get_all_leads()
            projects = self._projects.get_all_projects()
            tasks = self._tasks.get_all_tasks()
            return [
                compare("Revenue", lambda m: _sum_totals(i for i in paid if _month_of(i.paid_date) == m)),
                compare("New Customers", lambda m: sum(1 for c in customers if _month_of(c.created_at) == m)),
                compare("New Leads", lambda m: sum(1 for lead in leads if _month_of(lead.created_at) == m)),
                compare("New Projects", lambda m: sum(1 for p in projects if _month_of(p.created_at) == m)),
                compare(
                    "Completed Tasks",
                    lambda m: sum(1 for t in tasks if t.is_completed and _month_of(t.completed_date) == m),
                ),
            ]
        if kind == "staff-performance":
            tasks = self._tasks.get_all_tasks()
            return [
                compare(
                    member.full_name,
                    lambda m, staff_id=member.id: sum(
                        1
                        for t in tasks
                        if t.assigned_to_id == staff_id and t.is_completed and _month_of(t.completed_date) == m
                    ),
                )
                for member in self._staff.get_all_staff()
            ]
        return []

    # ------------------------------------------------------------------
    # Reports
    # ------------------------------------------------------------------

    def _report_payload(self, request: ReportRequest) -> Dict[str, Any]:
        start, end = _aware(request.start_date), _aware(request.end_date)
        envelope = {"generated_at": utcnow(), "period": f"{start:%b %d, %Y} - {end:%b %d, %Y}"}
        report_type = request.type

        if report_type == ReportType.CUSTOMER_REPORT:
            customers = self._customers.get_all_customers()
            return {
                "summary": self.get_customer_analytics(start, end),
                "customers": [c for c in customers if not request.customer_ids or c.id in request.customer_ids],
                **envelope,
            }
        if report_type == ReportType.LEAD_REPORT:
            leads = self._leads.get_all_leads()
            return {
                "summary": self.get_lead_analytics(start, end),
                "leads": [lead for lead in leads if start <= lead.created_at <= end],
                **envelope,
            }
        if report_type == ReportType.PROJECT_REPORT:
            projects = self._projects.get_all_projects()
            return {
                "summary": self.get_project_analytics(start, end),
                "projects": [p for p in projects if not request.project_ids or p.id in request.project_ids],
                **envelope,
            }
        if report_type == ReportType.FINANCIAL_REPORT:
            return {
                "summary": self.get_financial_analytics(start, end),
                "invoices": [i for i in self._invoices.get_all_invoices() if start <= i.created_at <= end],
                "estimates": [e for e in self._estimates.get_all_estimates() if start <= e.created_at <= end],
                **envelope,
            }
        if report_type == ReportType.STAFF_PERFORMANCE_REPORT:
            staff = self._staff.get_all_staff()
            return {
                "summary": self.get_staff_analytics(start, end),
                "staff": [s for s in staff if not request.staff_ids or s.id in request.staff_ids],
                **envelope,
            }
        if report_type == ReportType.EXECUTIVE_SUMMARY:
            return {"executive_summary": self.get_dashboard_analytics(start, end), **envelope}
        return {"message": "Report type not supported"}

    @staticmethod
    def _render(payload: Dict[str, Any], report_format: str, report_type: str, title: str) -> bytes:
        if report_format == ReportFormat.PDF.value:
            return reports.to_pdf(payload, title=title)
        if report_format == ReportFormat.EXCEL.value:
            return reports.to_excel(payload, sheet_name=report_type)
        if report_format == ReportFormat.CSV.value:
            return reports.to_csv(payload)
        return reports.to_json(payload)

    def generate_report(self, request: ReportRequest, *, generated_by: str = "System") -> ReportResult:
        report = ReportResult(
            type=request.type,
            format=request.format,
            generated_by=generated_by,
            status=ReportStatus.GENERATING,
        )
        try:
            payload = self._report_payload(request)
            now = utcnow()
            report.title = f"{request.type} Report - {now:%b %d, %Y}"
            report.data = self._render(payload, request.format, request.type, report.title)
            report.file_name = f"{request.type}_{now:%Y%m%d_%H%M%S}.{_FILE_EXTENSIONS[request.format]}"
            report.file_size = len(report.data)
            report.generated_at = now
            report.status = ReportStatus.GENERATED
            self._save_report(report)
        except Exception as exc:
            logger.exception("Failed to generate %s report.", request.type)
            report.status = ReportStatus.FAILED
            report.error_message = str(exc)
            return report
        logger.info("Generated report %s (%d bytes).", report.file_name, report.file_size)
        return report

    def _save_report(self, report: ReportResult) -> None:
        history = self.get_report_history()
        history.append(report)
        if len(history) > self._report_history_limit:
            history = sorted(history, key=lambda r: r.generated_at, reverse=True)[: self._report_history_limit]
        self._store.set_item(ANALYTICS_REPORTS_KEY, history, _REPORTS_ADAPTER)

    def get_report_history(self) -> List[ReportResult]:
        try:
            history = self._store.get_item(ANALYTICS_REPORTS_KEY, _REPORTS_ADAPTER)
        except ValidationError:
            logger.warning("Stored report history is unreadable; returning an empty history.")
            return []
        return history or []

    def get_report_data(self, report_id: str) -> bytes:
        for report in self.get_report_history():
            if report.id == report_id:
                return report.data
        return b""
