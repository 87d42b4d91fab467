"""Validation rules and computed properties on the entity models."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import List

import pytest
from pydantic import TypeAdapter, ValidationError

from crm_panel.models import (
    Address,
    Customer,
    Estimate,
    EstimateItem,
    Invoice,
    InvoiceItem,
    Lead,
    Project,
    ProjectTask,
    ReportResult,
    Role,
    Staff,
    SystemPermissions,
    TimeEntry,
    UISettings,
    utcnow,
)
from crm_panel.models.common import _create_id


# ------------------------------------------------------------------------------
# Base model behaviour
# ------------------------------------------------------------------------------


def test_strings_are_stripped_and_enums_stored_as_values() -> None:
    customer = Customer(first_name="  Ada ", last_name="Lovelace ", status="Prospect")

    assert customer.first_name == "Ada"
    assert customer.full_name == "Ada Lovelace"
    assert customer.status == "Prospect"


def test_unknown_fields_and_bad_ids_are_rejected() -> None:
    with pytest.raises(ValidationError):
        Customer(first_name="Ada", nickname="Countess")
    with pytest.raises(ValidationError):
        Customer(id="not-a-uuid")


def test_blank_email_becomes_none_and_invalid_email_fails() -> None:
    assert Customer(email="  ").email is None
    with pytest.raises(ValidationError):
        Customer(email="not-an-email")


def test_naive_datetimes_are_treated_as_utc() -> None:
    lead = Lead(created_at=datetime(2024, 3, 1, 12, 0))
    assert lead.created_at.tzinfo is timezone.utc


def test_navigation_fields_are_not_serialized() -> None:
    staff = Staff(first_name="Grace", last_name="Hopper")
    lead = Lead(first_name="Sam", assigned_to_staff_id=staff.id, assigned_to_staff=staff)

    dumped = lead.model_dump()

    assert "assigned_to_staff" not in dumped
    assert dumped["assigned_to_staff_id"] == staff.id


# ------------------------------------------------------------------------------
# Customers and staff
# ------------------------------------------------------------------------------


def test_customer_display_name_includes_company() -> None:
    assert Customer(first_name="Ada", last_name="Lovelace").display_name == "Ada Lovelace"
    assert (
        Customer(first_name="Ada", last_name="Lovelace", company="Engines").display_name
        == "Engines (Ada Lovelace)"
    )


def test_address_full_address_trims_empty_parts() -> None:
    assert Address().full_address == ""
    assert Address(street="1 Main St", city="Springfield").full_address.startswith("1 Main St, Springfield")


def test_staff_vacation_and_activity() -> None:
    staff = Staff(first_name="Grace", job_title="Admiral", vacation_days_used=25, status="OnLeave")

    assert staff.vacation_days_remaining == 0
    assert staff.is_active is False
    assert staff.display_name == "Grace - Admiral"


def test_default_roles_cover_the_permission_catalogue() -> None:
    roles = {role.name: role for role in SystemPermissions.default_roles()}

    assert len(SystemPermissions.all_permissions()) == 36
    assert len(roles["Administrator"].permissions) == 36
    assert roles["Manager"].has_permission("System", "View", "Settings")
    assert not roles["Manager"].has_permission("System", "Backup", "Data")
    assert roles["Employee"].has_permission("Customers", "View", "List")
    assert not roles["Employee"].has_permission("Staff", "View", "List")
    assert all(role.is_system_role for role in roles.values())


def test_role_permissions_round_trip_through_json() -> None:
    roles = SystemPermissions.default_roles()
    adapter = TypeAdapter(List[Role])

    restored = adapter.validate_json(adapter.dump_json(roles))

    assert [role.name for role in restored] == [role.name for role in roles]


# ------------------------------------------------------------------------------
# Leads and projects
# ------------------------------------------------------------------------------


def test_lead_overdue_only_while_open() -> None:
    past = utcnow() - timedelta(days=2)

    assert Lead(next_follow_up_date=past).is_overdue
    assert not Lead(next_follow_up_date=past, status="Converted").is_overdue
    assert not Lead(next_follow_up_date=past, status="Lost").is_overdue


def test_project_variances_and_task_completion() -> None:
    project = Project(
        budget=Decimal("1000"),
        actual_cost=Decimal("1200"),
        estimated_hours=100,
        actual_hours=80,
        tasks=[ProjectTask(status="Completed"), ProjectTask(), ProjectTask(), ProjectTask(status="Completed")],
    )

    assert project.budget_variance == Decimal("200")
    assert project.budget_variance_percentage == Decimal("20")
    assert project.hours_variance == -20
    assert project.hours_variance_percentage == Decimal("-20")
    assert project.task_completion_percentage == Decimal("50")


def test_project_without_budget_reports_zero_variance_percentage() -> None:
    assert Project(actual_cost=Decimal("10")).budget_variance_percentage == Decimal("0")


def test_finished_projects_are_never_overdue() -> None:
    past = utcnow() - timedelta(days=1)
    assert Project(end_date=past, status="InProgress").is_overdue
    assert not Project(end_date=past, status="Completed").is_overdue
    assert not Project(end_date=past, status="Cancelled").is_overdue


def test_time_entry_hours_and_amount() -> None:
    entry = TimeEntry(
        project_id=_create_id(),
        staff_id=_create_id(),
        date=date(2024, 5, 1),
        start_time=timedelta(hours=9),
        end_time=timedelta(hours=11, minutes=30),
        hourly_rate=Decimal("80"),
    )

    assert entry.hours == Decimal("2.5")
    assert entry.amount == Decimal("200.0")


# ------------------------------------------------------------------------------
# Financial documents
# ------------------------------------------------------------------------------


def test_estimate_totals_and_conversion_rules() -> None:
    estimate = Estimate(
        customer_id=_create_id(),
        tax_rate=Decimal("0.10"),
        items=[
            EstimateItem(description="Design", quantity=Decimal("10"), unit_price=Decimal("100")),
            EstimateItem(description="Build", quantity=Decimal("5"), unit_price=Decimal("200")),
        ],
    )

    assert estimate.sub_total == Decimal("2000")
    assert estimate.tax_amount == Decimal("200.00")
    assert estimate.total == Decimal("2200.00")
    assert not estimate.can_be_converted

    estimate.status = "Accepted"
    assert estimate.can_be_converted
    estimate.expiry_date = utcnow() - timedelta(days=1)
    assert estimate.is_expired
    assert not estimate.can_be_converted


def test_invoice_amount_due_and_overdue_days() -> None:
    invoice = Invoice(
        customer_id=_create_id(),
        tax_rate=Decimal("0"),
        due_date=utcnow() - timedelta(days=3, hours=1),
        items=[InvoiceItem(quantity=Decimal("2"), unit_price=Decimal("50"))],
        amount_paid=Decimal("40"),
    )

    assert invoice.amount_due == Decimal("60")
    assert invoice.is_partially_paid
    assert invoice.is_overdue
    assert invoice.days_overdue == 3

    invoice.status = "Paid"
    assert not invoice.is_overdue
    assert invoice.days_overdue == 0


def test_display_numbers_fall_back_to_id_prefix() -> None:
    invoice = Invoice(customer_id=_create_id())
    assert invoice.display_number == f"INV-{invoice.id[:8]}"
    assert Invoice(customer_id=_create_id(), invoice_number="INV-2024-0007").display_number == "INV-2024-0007"


# ------------------------------------------------------------------------------
# Settings and reports
# ------------------------------------------------------------------------------


def test_ui_settings_defaults_and_sidebar_validation() -> None:
    settings = UISettings()
    assert (settings.theme, settings.primary_color, settings.language, settings.sidebar_width) == (
        "light",
        "blue",
        "en",
        240,
    )
    with pytest.raises(ValidationError):
        UISettings(sidebar_width=0)


def test_report_result_bytes_survive_json() -> None:
    report = ReportResult(type="CustomerReport", format="CSV", data=b"\x00binary,data")
    adapter = TypeAdapter(List[ReportResult])

    restored = adapter.validate_json(adapter.dump_json([report]))

    assert restored[0].data == b"\x00binary,data"
