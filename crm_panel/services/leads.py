"""Lead pipeline: CRUD, follow-ups, conversion and activity tracking."""

from __future__ import annotations

import logging
from datetime import timedelta
from decimal import Decimal
from typing import List, Optional

from ..models.common import ZERO, _percentage, utcnow, utctoday
from ..models.customer import Customer
from ..models.lead import (
    Lead,
    LeadActivity,
    LeadConversion,
    LeadPriority,
    LeadSource,
    LeadStatistics,
    LeadStatus,
)
from .base import CollectionService, count_by
from .customers import CustomerService
from .sample_data import sample_leads
from .staff import StaffService

logger = logging.getLogger(__name__)

LEADS_KEY = "leads"
LEAD_ACTIVITIES_KEY = "lead_activities"
LEAD_CONVERSIONS_KEY = "lead_conversions"

_FOLLOW_UP_WINDOW_DAYS = 7


class LeadConversionLog(CollectionService[LeadConversion]):
    storage_key = LEAD_CONVERSIONS_KEY
    model = LeadConversion
    entity_label = "Lead conversion"

    def record(self, conversion: LeadConversion) -> LeadConversion:
        return self._insert(conversion, stamp=("conversion_date", "created_at"))

    def get_all(self) -> List[LeadConversion]:
        return sorted(self._load(), key=lambda c: c.conversion_date, reverse=True)


class LeadActivityService(CollectionService[LeadActivity]):
    storage_key = LEAD_ACTIVITIES_KEY
    model = LeadActivity
    entity_label = "Lead activity"

    def __init__(self, store, staff_service: StaffService, *, seed_sample_data: bool = True) -> None:
        super().__init__(store, seed_sample_data=seed_sample_data)
        self._staff_service = staff_service

    def _all_activities(self) -> List[LeadActivity]:
        activities = self._load()
        staff = {member.id: member for member in self._staff_service.get_all_staff()}
        for activity in activities:
            if activity.assigned_to_staff_id:
                activity.assigned_to_staff = staff.get(activity.assigned_to_staff_id)
        return activities

    def get_activities_by_lead(self, lead_id: str) -> List[LeadActivity]:
        activities = [a for a in self._all_activities() if a.lead_id == lead_id]
        return sorted(activities, key=lambda a: a.activity_date, reverse=True)

    def get_activity_by_id(self, activity_id: str) -> Optional[LeadActivity]:
        return self._find(activity_id)

    def create_activity(self, activity: LeadActivity) -> LeadActivity:
        return self._insert(activity, stamp=("created_at",))

    def update_activity(self, activity: LeadActivity) -> LeadActivity:
        return self._replace(activity, touch=False)

    def delete_activity(self, activity_id: str) -> bool:
        return self._remove(activity_id)

    def delete_activities_for_lead(self, lead_id: str) -> int:
        return self._remove_where(lambda a: a.lead_id == lead_id)

    def complete_activity(self, activity_id: str, outcome: str) -> LeadActivity:
        activity = self._require(activity_id)
        activity.is_completed = True
        activity.completed_date = utcnow()
        activity.outcome = outcome
        return self._replace(activity, touch=False)

    def get_upcoming_activities(self) -> List[LeadActivity]:
        """Open activities scheduled for today or later, soonest first."""
        today = utctoday()
        upcoming = [
            a
            for a in self._all_activities()
            if a.scheduled_date is not None and a.scheduled_date.date() >= today and not a.is_completed
        ]
        return sorted(upcoming, key=lambda a: a.scheduled_date)

    def get_overdue_activities(self) -> List[LeadActivity]:
        return [a for a in self._all_activities() if a.is_overdue]


class LeadService(CollectionService[Lead]):
    """Lead repository with pipeline statistics and lead-to-customer conversion."""

    storage_key = LEADS_KEY
    model = Lead
    entity_label = "Lead"

    def __init__(
        self,
        store,
        customer_service: CustomerService,
        staff_service: StaffService,
        *,
        activity_service: Optional[LeadActivityService] = None,
        seed_sample_data: bool = True,
    ) -> None:
        super().__init__(store, seed_sample_data=seed_sample_data)
        self._customer_service = customer_service
        self._staff_service = staff_service
        self._activity_service = activity_service
        self._conversions = LeadConversionLog(store, seed_sample_data=False)

    def _sample_data(self) -> List[Lead]:
        return sample_leads(self._staff_service.get_all_staff())

    def _load_related(self, leads: List[Lead]) -> List[Lead]:
        staff = {member.id: member for member in self._staff_service.get_all_staff()}
        customers = {customer.id: customer for customer in self._customer_service.get_all_customers()}
        for lead in leads:
            if lead.assigned_to_staff_id:
                lead.assigned_to_staff = staff.get(lead.assigned_to_staff_id)
            if lead.converted_customer_id:
                lead.converted_customer = customers.get(lead.converted_customer_id)
        return leads

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def get_all_leads(self) -> List[Lead]:
        leads = sorted(self._load(), key=lambda lead: lead.created_at, reverse=True)
        return self._load_related(leads)

    def get_lead_by_id(self, lead_id: str) -> Optional[Lead]:
        lead = self._find(lead_id)
        if lead is None:
            return None
        self._load_related([lead])
        if self._activity_service is not None:
            lead.activities = self._activity_service.get_activities_by_lead(lead_id)
        return lead

    def create_lead(self, lead: Lead) -> Lead:
        return self._insert(lead)

    def update_lead(self, lead: Lead) -> Lead:
        return self._replace(lead)

    def delete_lead(self, lead_id: str) -> bool:
        removed = self._remove(lead_id)
        if removed and self._activity_service is not None:
            self._activity_service.delete_activities_for_lead(lead_id)
        return removed

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_leads_by_status(self, status: LeadStatus | str) -> List[Lead]:
        return self._filter(self.get_all_leads(), "status", status)

    def get_leads_by_source(self, source: LeadSource | str) -> List[Lead]:
        return self._filter(self.get_all_leads(), "source", source)

    def get_leads_by_priority(self, priority: LeadPriority | str) -> List[Lead]:
        return self._filter(self.get_all_leads(), "priority", priority)

    def get_leads_by_assigned_staff(self, staff_id: str) -> List[Lead]:
        return [lead for lead in self.get_all_leads() if lead.assigned_to_staff_id == staff_id]

    def search_leads(self, search_term: str) -> List[Lead]:
        return self._search(
            self.get_all_leads(),
            search_term,
            ("first_name", "last_name", "email", "company", "phone", "project_description"),
        )

    def get_overdue_leads(self) -> List[Lead]:
        return [lead for lead in self.get_all_leads() if lead.is_overdue]

    def get_leads_requiring_follow_up(self) -> List[Lead]:
        """Open leads whose next follow-up falls within the coming week (or earlier)."""
        horizon = utctoday() + timedelta(days=_FOLLOW_UP_WINDOW_DAYS)
        return [
            lead
            for lead in self.get_all_leads()
            if lead.next_follow_up_date is not None
            and lead.next_follow_up_date.date() <= horizon
            and not lead.is_closed
        ]

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def convert_lead_to_customer(self, lead_id: str, customer: Customer, *, converted_by: str = "", notes: str = "") -> Lead:
        lead = self._find(lead_id)
        if lead is None:
            raise ValueError("Lead not found")
        if lead.status == LeadStatus.CONVERTED:
            raise ValueError(f"Lead '{lead_id}' has already been converted.")

        created = self._customer_service.create_customer(customer)
        lead.status = LeadStatus.CONVERTED
        lead.converted_customer_id = created.id
        lead.converted_date = utcnow()
        self._replace(lead)
        lead.converted_customer = created

        self._conversions.record(
            LeadConversion(
                lead_id=lead.id,
                customer_id=created.id,
                conversion_value=lead.estimated_value,
                conversion_notes=notes,
                converted_by=converted_by,
            )
        )
        logger.info("Converted lead %s into customer %s.", lead.id, created.id)
        return lead

    def get_lead_conversions(self) -> List[LeadConversion]:
        return self._conversions.get_all()

    def update_lead_status(self, lead_id: str, status: LeadStatus | str) -> Lead:
        lead = self._require(lead_id)
        lead.status = status
        return self._replace(lead)

    def assign_lead_to_staff(self, lead_id: str, staff_id: str) -> Lead:
        lead = self._require(lead_id)
        lead.assigned_to_staff_id = staff_id
        self._replace(lead)
        lead.assigned_to_staff = self._staff_service.get_staff_by_id(staff_id)
        return lead

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def get_lead_statistics(self) -> LeadStatistics:
        leads = self._load()
        total = len(leads)
        converted = sum(1 for lead in leads if lead.status == LeadStatus.CONVERTED)
        average = (sum((lead.estimated_value for lead in leads), ZERO) / total) if total else ZERO
        pipeline = sum((lead.estimated_value for lead in leads if not lead.is_closed), ZERO)
        return LeadStatistics(
            total_leads=total,
            new_leads=sum(1 for lead in leads if lead.status == LeadStatus.NEW),
            qualified_leads=sum(1 for lead in leads if lead.status == LeadStatus.QUALIFIED),
            converted_leads=converted,
            lost_leads=sum(1 for lead in leads if lead.status == LeadStatus.LOST),
            conversion_rate=_percentage(converted, total),
            average_lead_value=Decimal(average),
            total_pipeline_value=pipeline,
            overdue_follow_ups=sum(1 for lead in leads if lead.is_overdue),
            leads_by_source=count_by(leads, lambda lead: lead.source),
            leads_by_status=count_by(leads, lambda lead: lead.status),
        )
