"""Lead pipeline, conversion and activity tracking."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

import pytest

from crm_panel.app import ControlPanel
from crm_panel.models import Customer, Lead, LeadActivity, Staff, utcnow
from crm_panel.models.common import _create_id


@pytest.fixture
def lead(panel: ControlPanel, staff_member: Staff) -> Lead:
    """Seed an open, assigned lead."""
    return panel.leads.create_lead(
        Lead(
            first_name="Sam",
            last_name="Rivera",
            email="sam@startup.example",
            company="Startup Labs",
            status="Qualified",
            source="Referral",
            priority="High",
            estimated_value=Decimal("12000"),
            project_description="Customer portal rebuild",
            assigned_to_staff_id=staff_member.id,
        )
    )


# ------------------------------------------------------------------------------
# CRUD and queries
# ------------------------------------------------------------------------------


def test_leads_are_hydrated_with_assigned_staff(panel: ControlPanel, lead: Lead, staff_member: Staff) -> None:
    loaded = panel.leads.get_lead_by_id(lead.id)

    assert loaded is not None
    assert loaded.assigned_to_staff is not None
    assert loaded.assigned_to_staff.id == staff_member.id
    assert panel.leads.get_lead_by_id(_create_id()) is None


def test_all_leads_are_newest_first(panel: ControlPanel, lead: Lead) -> None:
    later = panel.leads.create_lead(Lead(first_name="Later"))
    assert [item.id for item in panel.leads.get_all_leads()] == [later.id, lead.id]


def test_filters_and_search(panel: ControlPanel, lead: Lead, staff_member: Staff) -> None:
    panel.leads.create_lead(Lead(first_name="Other", source="Website", priority="Low"))

    assert [item.id for item in panel.leads.get_leads_by_status("Qualified")] == [lead.id]
    assert [item.id for item in panel.leads.get_leads_by_source("Referral")] == [lead.id]
    assert [item.id for item in panel.leads.get_leads_by_priority("High")] == [lead.id]
    assert [item.id for item in panel.leads.get_leads_by_assigned_staff(staff_member.id)] == [lead.id]
    assert [item.id for item in panel.leads.search_leads("portal")] == [lead.id]


def test_follow_up_queries_ignore_closed_leads(panel: ControlPanel) -> None:
    now = utcnow()
    overdue = panel.leads.create_lead(Lead(first_name="Late", next_follow_up_date=now - timedelta(days=1)))
    soon = panel.leads.create_lead(Lead(first_name="Soon", next_follow_up_date=now + timedelta(days=3)))
    panel.leads.create_lead(Lead(first_name="Far", next_follow_up_date=now + timedelta(days=30)))
    panel.leads.create_lead(Lead(first_name="Lost", status="Lost", next_follow_up_date=now - timedelta(days=1)))

    assert [item.id for item in panel.leads.get_overdue_leads()] == [overdue.id]
    assert {item.id for item in panel.leads.get_leads_requiring_follow_up()} == {overdue.id, soon.id}


def test_status_and_assignment_updates(panel: ControlPanel, lead: Lead) -> None:
    other = panel.staff.create_staff(Staff(first_name="Katherine", last_name="Johnson"))

    assert panel.leads.update_lead_status(lead.id, "Negotiation").status == "Negotiation"
    reassigned = panel.leads.assign_lead_to_staff(lead.id, other.id)

    assert reassigned.assigned_to_staff_id == other.id
    assert reassigned.assigned_to_staff.first_name == "Katherine"
    with pytest.raises(ValueError, match="Lead not found with ID"):
        panel.leads.update_lead_status(_create_id(), "Lost")


# ------------------------------------------------------------------------------
# Conversion
# ------------------------------------------------------------------------------


def test_convert_lead_creates_customer_and_logs_conversion(panel: ControlPanel, lead: Lead) -> None:
    converted = panel.leads.convert_lead_to_customer(
        lead.id,
        Customer(first_name="Sam", last_name="Rivera", company="Startup Labs"),
        converted_by="grace",
        notes="Signed after demo",
    )

    assert converted.status == "Converted"
    assert converted.converted_date is not None
    customer = panel.customers.get_customer_by_id(converted.converted_customer_id)
    assert customer is not None and customer.company == "Startup Labs"

    conversions = panel.leads.get_lead_conversions()
    assert len(conversions) == 1
    assert conversions[0].conversion_value == Decimal("12000")
    assert conversions[0].converted_by == "grace"


def test_convert_rejects_unknown_and_repeated_conversions(panel: ControlPanel, lead: Lead) -> None:
    with pytest.raises(ValueError, match="Lead not found"):
        panel.leads.convert_lead_to_customer(_create_id(), Customer(first_name="X"))

    panel.leads.convert_lead_to_customer(lead.id, Customer(first_name="Sam"))
    with pytest.raises(ValueError, match="already been converted"):
        panel.leads.convert_lead_to_customer(lead.id, Customer(first_name="Sam"))
    assert len(panel.customers.get_all_customers()) == 1


# ------------------------------------------------------------------------------
# Statistics
# ------------------------------------------------------------------------------


def test_statistics_over_sample_pipeline(seeded_panel: ControlPanel) -> None:
    stats = seeded_panel.leads.get_lead_statistics()
    leads = seeded_panel.leads.get_all_leads()

    assert stats.total_leads == 5
    assert stats.lost_leads == 1
    assert stats.qualified_leads == 1
    assert stats.leads_by_source["EmailMarketing"] == 1
    assert sum(stats.leads_by_status.values()) == 5
    open_value = sum((item.estimated_value for item in leads if item.status not in {"Converted", "Lost"}), Decimal("0"))
    assert stats.total_pipeline_value == open_value


def test_statistics_on_empty_pipeline(panel: ControlPanel) -> None:
    stats = panel.leads.get_lead_statistics()
    assert stats.total_leads == 0
    assert stats.conversion_rate == Decimal("0")
    assert stats.average_lead_value == Decimal("0")


# ------------------------------------------------------------------------------
# Activities
# ------------------------------------------------------------------------------


def test_activities_attach_to_lead_and_cascade_on_delete(panel: ControlPanel, lead: Lead) -> None:
    now = utcnow()
    older = panel.lead_activities.create_activity(
        LeadActivity(lead_id=lead.id, subject="Intro call", activity_date=now - timedelta(days=2))
    )
    newer = panel.lead_activities.create_activity(
        LeadActivity(lead_id=lead.id, type="Meeting", subject="Scoping", activity_date=now)
    )

    loaded = panel.leads.get_lead_by_id(lead.id)
    assert [a.id for a in loaded.activities] == [newer.id, older.id]

    assert panel.leads.delete_lead(lead.id) is True
    assert panel.lead_activities.get_activities_by_lead(lead.id) == []


def test_complete_activity_and_schedule_views(panel: ControlPanel, lead: Lead) -> None:
    now = utcnow()
    late = panel.lead_activities.create_activity(
        LeadActivity(lead_id=lead.id, subject="Send proposal", scheduled_date=now - timedelta(days=1))
    )
    upcoming = panel.lead_activities.create_activity(
        LeadActivity(lead_id=lead.id, subject="Demo", scheduled_date=now + timedelta(days=2))
    )

    assert [a.id for a in panel.lead_activities.get_overdue_activities()] == [late.id]
    assert upcoming.id in [a.id for a in panel.lead_activities.get_upcoming_activities()]

    done = panel.lead_activities.complete_activity(late.id, "Proposal sent")
    assert done.is_completed and done.completed_date is not None
    assert done.outcome == "Proposal sent"
    assert panel.lead_activities.get_overdue_activities() == []

    with pytest.raises(ValueError, match="Lead activity not found"):
        panel.lead_activities.complete_activity(_create_id(), "n/a")
