"""Projects, their task lists and the time logged against them."""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date as Date, datetime, timedelta
from decimal import Decimal
from typing import Dict, List, Optional, Union

from ..models.common import HUNDRED, ZERO, _to_decimal, utcnow
from ..models.project import (
    Project,
    ProjectStatistics,
    ProjectStatus,
    ProjectTask,
    TaskStatus,
    TimeEntry,
)
from .base import CollectionService, count_by, year_sequence_number
from .customers import CustomerService
from .sample_data import sample_projects
from .staff import StaffService

logger = logging.getLogger(__name__)

PROJECTS_KEY = "projects"
PROJECT_TASKS_KEY = "project_tasks"
TIME_ENTRIES_KEY = "time_entries"

DateLike = Union[Date, datetime]


def _as_date(value: DateLike) -> Date:
    return value.date() if isinstance(value, datetime) else value


# ----------------------------------------------------------------------
# Tasks
# ----------------------------------------------------------------------


class TaskService(CollectionService[ProjectTask]):
    storage_key = PROJECT_TASKS_KEY
    model = ProjectTask
    entity_label = "Task"

    def __init__(self, store, staff_service: StaffService, *, seed_sample_data: bool = True) -> None:
        super().__init__(store, seed_sample_data=seed_sample_data)
        self._staff_service = staff_service

    def _hydrate(self, tasks: List[ProjectTask]) -> List[ProjectTask]:
        staff = {member.id: member for member in self._staff_service.get_all_staff()}
        for task in tasks:
            if task.assigned_to_id:
                task.assigned_to = staff.get(task.assigned_to_id)
        return tasks

    def seed_tasks(self, tasks: List[ProjectTask]) -> None:
        """Store sample tasks that belong to freshly seeded projects."""
        existing = self._load()
        self._save(existing + list(tasks))

    def get_all_tasks(self) -> List[ProjectTask]:
        return self._hydrate(self._load())

    def get_tasks_by_project(self, project_id: str) -> List[ProjectTask]:
        tasks = [task for task in self._load() if task.project_id == project_id]
        return self._hydrate(sorted(tasks, key=lambda task: task.created_at))

    def get_task_by_id(self, task_id: str) -> Optional[ProjectTask]:
        task = self._find(task_id)
        return self._hydrate([task])[0] if task is not None else None

    def create_task(self, task: ProjectTask) -> ProjectTask:
        return self._insert(task)

    def update_task(self, task: ProjectTask) -> ProjectTask:
        return self._replace(task)

    def delete_task(self, task_id: str) -> bool:
        return self._remove(task_id)

    def delete_tasks_for_project(self, project_id: str) -> int:
        return self._remove_where(lambda task: task.project_id == project_id)

    def get_tasks_by_assignee(self, staff_id: str) -> List[ProjectTask]:
        return self._hydrate([task for task in self._load() if task.assigned_to_id == staff_id])

    def get_tasks_by_status(self, status: TaskStatus | str) -> List[ProjectTask]:
        return self._hydrate(self._filter(self._load(), "status", status))

    def get_overdue_tasks(self) -> List[ProjectTask]:
        return self._hydrate([task for task in self._load() if task.is_overdue])

    def get_tasks_due_soon(self, days: int = 7) -> List[ProjectTask]:
        """Unfinished tasks due within ``days`` from now, overdue ones included."""
        horizon = utcnow() + timedelta(days=days)
        due = [
            task
            for task in self._load()
            if task.due_date is not None and task.due_date <= horizon and not task.is_completed
        ]
        return self._hydrate(sorted(due, key=lambda task: task.due_date))

    def update_task_progress(self, task_id: str, progress: Decimal | int | float) -> ProjectTask:
        task = self._require(task_id)
        clamped = min(max(_to_decimal("Progress", progress), ZERO), HUNDRED)
        task.progress_percentage = clamped
        if clamped >= HUNDRED:
            task.status = TaskStatus.COMPLETED
            task.completed_date = utcnow()
        return self._replace(task)

    def complete_task(self, task_id: str) -> ProjectTask:
        task = self._require(task_id)
        task.status = TaskStatus.COMPLETED
        task.progress_percentage = HUNDRED
        task.completed_date = utcnow()
        return self._replace(task)


# ----------------------------------------------------------------------
# Projects
# ----------------------------------------------------------------------


class ProjectService(CollectionService[Project]):
    """Project repository; tasks live in their own collection and are joined on read."""

    storage_key = PROJECTS_KEY
    model = Project
    entity_label = "Project"

    def __init__(
        self,
        store,
        customer_service: CustomerService,
        staff_service: StaffService,
        task_service: TaskService,
        *,
        seed_sample_data: bool = True,
    ) -> None:
        super().__init__(store, seed_sample_data=seed_sample_data)
        self._customer_service = customer_service
        self._staff_service = staff_service
        self._task_service = task_service
        self._sample_tasks: List[ProjectTask] = []

    def _sample_data(self) -> List[Project]:
        projects, self._sample_tasks = sample_projects(
            self._customer_service.get_all_customers(), self._staff_service.get_all_staff()
        )
        return projects

    def _after_seed(self, items: List[Project]) -> None:
        if self._sample_tasks:
            self._task_service.seed_tasks(self._sample_tasks)
            self._sample_tasks = []

    def _hydrate(self, projects: List[Project]) -> List[Project]:
        customers = {customer.id: customer for customer in self._customer_service.get_all_customers()}
        staff = {member.id: member for member in self._staff_service.get_all_staff()}
        tasks_by_project: Dict[str, List[ProjectTask]] = defaultdict(list)
        for task in sorted(self._task_service.get_all_tasks(), key=lambda task: task.created_at):
            tasks_by_project[task.project_id].append(task)
        for project in projects:
            project.customer = customers.get(project.customer_id) if project.customer_id else None
            project.project_manager = staff.get(project.project_manager_id) if project.project_manager_id else None
            project.team_members = [staff[member_id] for member_id in project.team_member_ids if member_id in staff]
            project.tasks = tasks_by_project.get(project.id, [])
        return projects

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def get_all_projects(self) -> List[Project]:
        projects = sorted(self._load(), key=lambda project: project.created_at, reverse=True)
        return self._hydrate(projects)

    def get_project_by_id(self, project_id: str) -> Optional[Project]:
        project = self._find(project_id)
        return self._hydrate([project])[0] if project is not None else None

    def create_project(self, project: Project) -> Project:
        if not project.project_code:
            project.project_code = self.generate_project_code()
        pending_tasks = list(project.tasks)
        created = self._insert(project)
        for task in pending_tasks:
            task.project_id = created.id
            self._task_service.create_task(task)
        if pending_tasks:
            logger.info("Created project %s with %d tasks.", created.project_code, len(pending_tasks))
        return self._hydrate([created])[0]

    def update_project(self, project: Project) -> Project:
        return self._replace(project)

    def delete_project(self, project_id: str) -> bool:
        removed = self._remove(project_id)
        if removed:
            self._task_service.delete_tasks_for_project(project_id)
        return removed

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_projects_by_customer(self, customer_id: str) -> List[Project]:
        return [project for project in self.get_all_projects() if project.customer_id == customer_id]

    def get_projects_by_status(self, status: ProjectStatus | str) -> List[Project]:
        return self._filter(self.get_all_projects(), "status", status)

    def get_projects_by_manager(self, manager_id: str) -> List[Project]:
        return [project for project in self.get_all_projects() if project.project_manager_id == manager_id]

    def get_projects_by_team_member(self, staff_id: str) -> List[Project]:
        return [
            project
            for project in self.get_all_projects()
            if staff_id in project.team_member_ids or project.project_manager_id == staff_id
        ]

    def search_projects(self, search_term: str) -> List[Project]:
        projects = self.get_all_projects()
        matches = self._search(projects, search_term, ("name", "description", "project_code"))
        if not search_term or not search_term.strip():
            return matches
        matched_ids = {project.id for project in matches}
        needle = search_term.strip().lower()
        return [
            project
            for project in projects
            if project.id in matched_ids
            or (project.customer is not None and needle in project.customer.display_name.lower())
        ]

    def get_overdue_projects(self) -> List[Project]:
        return [project for project in self.get_all_projects() if project.is_overdue]

    def get_active_projects(self) -> List[Project]:
        return [project for project in self.get_all_projects() if project.is_active]

    def generate_project_code(self) -> str:
        return year_sequence_number("PRJ", (project.created_at for project in self._load()))

    def get_project_statistics(self) -> ProjectStatistics:
        projects = self._load()
        tasks = self._task_service.get_all_tasks()
        total_budget = sum((project.budget for project in projects), ZERO)
        total_cost = sum((project.actual_cost for project in projects), ZERO)
        progress = sum((project.progress_percentage for project in projects), ZERO)
        return ProjectStatistics(
            total_projects=len(projects),
            active_projects=sum(1 for project in projects if project.is_active),
            completed_projects=sum(1 for project in projects if project.status == ProjectStatus.COMPLETED),
            overdue_projects=sum(1 for project in projects if project.is_overdue),
            total_budget=total_budget,
            total_actual_cost=total_cost,
            budget_variance=total_cost - total_budget,
            total_tasks=len(tasks),
            completed_tasks=sum(1 for task in tasks if task.is_completed),
            overdue_tasks=sum(1 for task in tasks if task.is_overdue),
            average_progress=progress / len(projects) if projects else ZERO,
            projects_by_status=count_by(projects, lambda project: project.status),
            projects_by_type=count_by(projects, lambda project: project.type),
        )


# ----------------------------------------------------------------------
# Time tracking
# ----------------------------------------------------------------------


class TimeTrackingService(CollectionService[TimeEntry]):
    storage_key = TIME_ENTRIES_KEY
    model = TimeEntry
    entity_label = "Time entry"

    @staticmethod
    def _check_span(entry: TimeEntry) -> None:
        if entry.end_time <= entry.start_time:
            raise ValueError("Time entry end time must be after its start time.")

    @staticmethod
    def _newest_first(entries: List[TimeEntry]) -> List[TimeEntry]:
        return sorted(entries, key=lambda entry: (entry.date, entry.start_time), reverse=True)

    def get_all_time_entries(self) -> List[TimeEntry]:
        return self._newest_first(self._load())

    def get_time_entries_by_project(self, project_id: str) -> List[TimeEntry]:
        return self._newest_first([entry for entry in self._load() if entry.project_id == project_id])

    def get_time_entries_by_staff(self, staff_id: str) -> List[TimeEntry]:
        return self._newest_first([entry for entry in self._load() if entry.staff_id == staff_id])

    def get_time_entries_by_date_range(self, start_date: DateLike, end_date: DateLike) -> List[TimeEntry]:
        start, end = _as_date(start_date), _as_date(end_date)
        return self._newest_first([entry for entry in self._load() if start <= entry.date <= end])

    def get_time_entry_by_id(self, entry_id: str) -> Optional[TimeEntry]:
        return self._find(entry_id)

    def create_time_entry(self, entry: TimeEntry) -> TimeEntry:
        self._check_span(entry)
        return self._insert(entry, stamp=("created_at",))

    def update_time_entry(self, entry: TimeEntry) -> TimeEntry:
        self._check_span(entry)
        return self._replace(entry, touch=False)

    def delete_time_entry(self, entry_id: str) -> bool:
        return self._remove(entry_id)

    def get_total_hours_by_project(self, project_id: str) -> Decimal:
        return sum((entry.hours for entry in self._load() if entry.project_id == project_id), ZERO)

    def get_total_hours_by_staff(
        self,
        staff_id: str,
        start_date: Optional[DateLike] = None,
        end_date: Optional[DateLike] = None,
    ) -> Decimal:
        start = _as_date(start_date) if start_date is not None else None
        end = _as_date(end_date) if end_date is not None else None
        total = ZERO
        for entry in self._load():
            if entry.staff_id != staff_id:
                continue
            if start is not None and entry.date < start:
                continue
            if end is not None and entry.date > end:
                continue
            total += entry.hours
        return total

    def get_total_billable_amount(self, project_id: str) -> Decimal:
        return sum(
            (entry.amount for entry in self._load() if entry.project_id == project_id and entry.is_billable),
            ZERO,
        )
