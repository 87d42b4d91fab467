"""Estimate lifecycle, invoicing and payments."""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

import pytest

from crm_panel.app import ControlPanel
from crm_panel.models import Customer, Estimate, EstimateItem, Invoice, InvoiceItem, utcnow
from crm_panel.models.common import _create_id
from crm_panel.models.financial import FinancialDefaults


@pytest.fixture
def estimate(panel: ControlPanel, customer: Customer) -> Estimate:
    """Seed a draft estimate worth 2,200 including tax."""
    return panel.estimates.create_estimate(
        Estimate(
            customer_id=customer.id,
            title="Portal Rebuild",
            tax_rate=Decimal("0.10"),
            items=[
                EstimateItem(description="Design", quantity=Decimal("10"), unit_price=Decimal("100"), unit="hour"),
                EstimateItem(description="Build", quantity=Decimal("5"), unit_price=Decimal("200"), unit="day"),
            ],
        )
    )


@pytest.fixture
def invoice(panel: ControlPanel, customer: Customer) -> Invoice:
    """Seed a sent invoice worth 1,000 with no tax."""
    created = panel.invoices.create_invoice(
        Invoice(
            customer_id=customer.id,
            title="Retainer",
            tax_rate=Decimal("0"),
            items=[InvoiceItem(description="Support", quantity=Decimal("1"), unit_price=Decimal("1000"))],
        )
    )
    return panel.invoices.send_invoice(created.id)


# ------------------------------------------------------------------------------
# Estimates
# ------------------------------------------------------------------------------


def test_create_estimate_numbers_and_hydrates(panel: ControlPanel, estimate: Estimate, customer: Customer) -> None:
    assert estimate.estimate_number == f"EST-{utcnow().year}-0001"
    assert estimate.status == "Draft"

    loaded = panel.estimates.get_estimate_by_id(estimate.id)
    assert loaded.customer.id == customer.id
    assert loaded.total == Decimal("2200.00")
    assert [e.id for e in panel.estimates.get_estimates_by_customer(customer.id)] == [estimate.id]


def test_send_sets_expiry_from_validity_window(panel: ControlPanel, estimate: Estimate) -> None:
    sent = panel.estimates.send_estimate(estimate.id)

    assert sent.status == "Sent"
    assert sent.expiry_date - sent.sent_date == timedelta(days=panel.settings.estimate_validity_days)


def test_accept_and_reject(panel: ControlPanel, estimate: Estimate, customer: Customer) -> None:
    accepted = panel.estimates.accept_estimate(estimate.id)
    assert accepted.status == "Accepted"
    assert accepted.accepted_date is not None

    other = panel.estimates.create_estimate(Estimate(customer_id=customer.id, title="Audit"))
    rejected = panel.estimates.reject_estimate(other.id)
    assert rejected.status == "Rejected"
    assert [e.id for e in panel.estimates.get_estimates_by_status("Rejected")] == [other.id]


def test_unknown_estimate_raises(panel: ControlPanel) -> None:
    with pytest.raises(ValueError, match="Estimate not found with ID"):
        panel.estimates.send_estimate(_create_id())
    assert panel.estimates.get_estimate_by_id(_create_id()) is None
    assert panel.estimates.delete_estimate(_create_id()) is False


def test_convert_leaves_unaccepted_estimates_alone(panel: ControlPanel, estimate: Estimate) -> None:
    result = panel.estimates.convert_to_invoice(estimate.id)
    assert result.status == "Draft"


# ------------------------------------------------------------------------------
# Invoicing from estimates
# ------------------------------------------------------------------------------


def test_create_from_accepted_estimate(panel: ControlPanel, estimate: Estimate) -> None:
    panel.estimates.accept_estimate(estimate.id)

    created = panel.invoices.create_from_estimate(estimate.id)

    assert created.estimate_id == estimate.id
    assert created.invoice_number == f"INV-{utcnow().year}-0001"
    assert created.terms == FinancialDefaults.DEFAULT_TERMS
    assert [(item.description, item.unit) for item in created.items] == [("Design", "hour"), ("Build", "day")]
    assert created.total == Decimal("2200.00")
    payment_window = timedelta(days=panel.settings.invoice_payment_days)
    assert payment_window - timedelta(minutes=1) < created.due_date - created.created_date <= payment_window
    assert panel.estimates.get_estimate_by_id(estimate.id).status == "Converted"


def test_converted_estimate_is_locked(panel: ControlPanel, estimate: Estimate) -> None:
    panel.estimates.accept_estimate(estimate.id)
    panel.invoices.create_from_estimate(estimate.id)

    with pytest.raises(ValueError, match="Estimate cannot be converted"):
        panel.invoices.create_from_estimate(estimate.id)
    with pytest.raises(ValueError, match="already been converted"):
        panel.estimates.send_estimate(estimate.id)


def test_draft_and_expired_estimates_cannot_be_invoiced(panel: ControlPanel, estimate: Estimate) -> None:
    with pytest.raises(ValueError, match="Estimate cannot be converted"):
        panel.invoices.create_from_estimate(estimate.id)

    accepted = panel.estimates.accept_estimate(estimate.id)
    accepted.expiry_date = utcnow() - timedelta(days=1)
    panel.estimates.update_estimate(accepted)
    with pytest.raises(ValueError, match="Estimate cannot be converted"):
        panel.invoices.create_from_estimate(estimate.id)
    with pytest.raises(ValueError, match="Estimate cannot be converted"):
        panel.invoices.create_from_estimate(_create_id())
    assert panel.invoices.get_all_invoices() == []


# ------------------------------------------------------------------------------
# Payments
# ------------------------------------------------------------------------------


def test_partial_then_full_payment(panel: ControlPanel, invoice: Invoice) -> None:
    partial = panel.invoices.mark_as_paid(invoice.id, Decimal("400"), method="CreditCard", reference="ch_1")
    assert partial.status == "PartiallyPaid"
    assert partial.amount_due == Decimal("600")

    paid = panel.invoices.mark_as_paid(invoice.id, "600")
    assert paid.status == "Paid"
    assert paid.paid_date is not None

    payments = panel.payments.get_payments_by_invoice(invoice.id)
    assert sorted(p.amount for p in payments) == [Decimal("400"), Decimal("600")]
    assert {p.method for p in payments} == {"CreditCard", "BankTransfer"}


@pytest.mark.parametrize("amount", [0, -10, "0.00"])
def test_non_positive_payments_are_rejected(panel: ControlPanel, invoice: Invoice, amount) -> None:
    with pytest.raises(ValueError, match="greater than zero"):
        panel.invoices.mark_as_paid(invoice.id, amount)
    assert panel.payments.get_all_payments() == []


@pytest.mark.parametrize("amount", ["abc", "", "NaN"])
def test_non_numeric_payments_raise_value_error(panel: ControlPanel, invoice: Invoice, amount: str) -> None:
    with pytest.raises(ValueError, match="Payment amount must be"):
        panel.invoices.mark_as_paid(invoice.id, amount)
    assert panel.payments.get_all_payments() == []


def test_cancelled_invoice_cannot_be_paid(panel: ControlPanel, invoice: Invoice) -> None:
    invoice.status = "Cancelled"
    panel.invoices.update_invoice(invoice)

    with pytest.raises(ValueError, match="cancelled"):
        panel.invoices.mark_as_paid(invoice.id, 100)


def test_unknown_invoice_payment_raises(panel: ControlPanel) -> None:
    with pytest.raises(ValueError, match="Invoice not found with ID"):
        panel.invoices.mark_as_paid(_create_id(), 100)


def test_total_payments_window(panel: ControlPanel, invoice: Invoice) -> None:
    panel.invoices.mark_as_paid(invoice.id, 250)
    now = utcnow()

    assert panel.payments.get_total_payments(now - timedelta(days=1), now + timedelta(days=1)) == Decimal("250")
    assert panel.payments.get_total_payments(now - timedelta(days=10), now - timedelta(days=5)) == Decimal("0")


def test_total_payments_bounds_are_optional_and_may_be_naive(panel: ControlPanel, invoice: Invoice) -> None:
    panel.invoices.mark_as_paid(invoice.id, 250)
    panel.invoices.mark_as_paid(invoice.id, 100)
    naive_now = utcnow().replace(tzinfo=None)

    assert panel.payments.get_total_payments() == Decimal("350")
    assert panel.payments.get_total_payments(naive_now - timedelta(days=1), naive_now + timedelta(days=1)) == Decimal("350")
    assert panel.payments.get_total_payments(from_date=naive_now + timedelta(days=1)) == Decimal("0")
    assert panel.payments.get_total_payments(to_date=naive_now - timedelta(days=1)) == Decimal("0")
    assert panel.payments.get_total_payments(to_date=naive_now + timedelta(days=1)) == Decimal("350")


# ------------------------------------------------------------------------------
# Receivables
# ------------------------------------------------------------------------------


def test_outstanding_skips_paid_and_cancelled(panel: ControlPanel, invoice: Invoice, customer: Customer) -> None:
    cancelled = panel.invoices.create_invoice(
        Invoice(customer_id=customer.id, tax_rate=Decimal("0"), items=[InvoiceItem(unit_price=Decimal("500"))])
    )
    cancelled.status = "Cancelled"
    panel.invoices.update_invoice(cancelled)

    assert panel.invoices.get_total_outstanding() == Decimal("1000")
    panel.invoices.mark_as_paid(invoice.id, 300)
    assert panel.invoices.get_total_outstanding() == Decimal("700")
    panel.invoices.mark_as_paid(invoice.id, 700)
    assert panel.invoices.get_total_outstanding() == Decimal("0")


def test_overdue_invoices(panel: ControlPanel, invoice: Invoice) -> None:
    invoice.due_date = utcnow() - timedelta(days=2)
    panel.invoices.update_invoice(invoice)

    overdue = panel.invoices.get_overdue_invoices()
    assert [i.id for i in overdue] == [invoice.id]
    assert overdue[0].days_overdue >= 1

    panel.invoices.mark_as_paid(invoice.id, 1000)
    assert panel.invoices.get_overdue_invoices() == []


def test_send_invoice_defaults_due_date(panel: ControlPanel, invoice: Invoice) -> None:
    assert invoice.status == "Sent"
    assert invoice.sent_date is not None
    assert invoice.due_date > invoice.sent_date
