"""Invoices, payments and receivables."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from decimal import Decimal
from typing import List, Optional

from ..models.common import ZERO, _aware, _to_decimal, utcnow
from ..models.financial import (
    FinancialDefaults,
    Invoice,
    InvoiceItem,
    InvoiceStatus,
    Payment,
    PaymentMethod,
)
from .base import CollectionService, year_sequence_number
from .customers import CustomerService
from .estimates import EstimateService
from .sample_data import sample_invoices

logger = logging.getLogger(__name__)

INVOICES_KEY = "invoices"
PAYMENTS_KEY = "payments"

_SETTLED_STATUSES = {InvoiceStatus.PAID.value, InvoiceStatus.CANCELLED.value}


class PaymentService(CollectionService[Payment]):
    storage_key = PAYMENTS_KEY
    model = Payment
    entity_label = "Payment"

    def get_all_payments(self) -> List[Payment]:
        return sorted(self._load(), key=lambda payment: payment.payment_date, reverse=True)

    def get_payments_by_invoice(self, invoice_id: str) -> List[Payment]:
        return [payment for payment in self.get_all_payments() if payment.invoice_id == invoice_id]

    def create_payment(self, payment: Payment) -> Payment:
        if payment.amount <= 0:
            raise ValueError("Payment amount must be greater than zero.")
        return self._insert(payment, stamp=("created_at",))

    def get_total_payments(
        self, from_date: Optional[datetime] = None, to_date: Optional[datetime] = None
    ) -> Decimal:
        """Sum of payments dated within the given bounds; a missing bound is open."""
        payments = self._load()
        if from_date is not None:
            start = _aware(from_date)
            payments = [payment for payment in payments if payment.payment_date >= start]
        if to_date is not None:
            end = _aware(to_date)
            payments = [payment for payment in payments if payment.payment_date <= end]
        return sum((payment.amount for payment in payments), ZERO)


class InvoiceService(CollectionService[Invoice]):
    storage_key = INVOICES_KEY
    model = Invoice
    entity_label = "Invoice"

    def __init__(
        self,
        store,
        customer_service: CustomerService,
        estimate_service: EstimateService,
        payment_service: PaymentService,
        *,
        payment_days: int = 30,
        seed_sample_data: bool = True,
    ) -> None:
        super().__init__(store, seed_sample_data=seed_sample_data)
        self._customer_service = customer_service
        self._estimate_service = estimate_service
        self._payment_service = payment_service
        self._payment_days = payment_days

    def _sample_data(self) -> List[Invoice]:
        return sample_invoices(self._customer_service.get_all_customers())

    def _hydrate(self, invoices: List[Invoice]) -> List[Invoice]:
        customers = {customer.id: customer for customer in self._customer_service.get_all_customers()}
        for invoice in invoices:
            invoice.customer = customers.get(invoice.customer_id)
        return invoices

    def _default_due_date(self) -> datetime:
        return utcnow() + timedelta(days=self._payment_days)

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def get_all_invoices(self) -> List[Invoice]:
        invoices = sorted(self._load(), key=lambda invoice: invoice.created_date, reverse=True)
        return self._hydrate(invoices)

    def get_invoice_by_id(self, invoice_id: str) -> Optional[Invoice]:
        invoice = self._find(invoice_id)
        return self._hydrate([invoice])[0] if invoice is not None else None

    def create_invoice(self, invoice: Invoice) -> Invoice:
        if not invoice.invoice_number:
            invoice.invoice_number = self.generate_invoice_number()
        return self._insert(invoice, stamp=("created_date", "created_at", "updated_at"))

    def update_invoice(self, invoice: Invoice) -> Invoice:
        return self._replace(invoice)

    def delete_invoice(self, invoice_id: str) -> bool:
        return self._remove(invoice_id)

    def get_invoices_by_customer(self, customer_id: str) -> List[Invoice]:
        return [invoice for invoice in self.get_all_invoices() if invoice.customer_id == customer_id]

    def get_invoices_by_status(self, status: InvoiceStatus | str) -> List[Invoice]:
        return self._filter(self.get_all_invoices(), "status", status)

    def generate_invoice_number(self) -> str:
        return year_sequence_number("INV", (invoice.created_date for invoice in self._load()))

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def create_from_estimate(self, estimate_id: str) -> Invoice:
        estimate = self._estimate_service.get_estimate_by_id(estimate_id)
        if estimate is None or not estimate.can_be_converted:
            raise ValueError("Estimate cannot be converted to invoice")

        invoice = Invoice(
            customer_id=estimate.customer_id,
            estimate_id=estimate.id,
            title=estimate.title,
            description=estimate.description,
            tax_rate=estimate.tax_rate,
            notes=estimate.notes,
            terms=FinancialDefaults.DEFAULT_TERMS,
            due_date=self._default_due_date(),
            items=[
                InvoiceItem(
                    description=item.description,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    unit=item.unit,
                    sort_order=item.sort_order,
                )
                for item in estimate.items
            ],
        )
        created = self.create_invoice(invoice)
        created.customer = estimate.customer
        self._estimate_service.convert_to_invoice(estimate_id)
        logger.info("Created invoice %s from estimate %s.", created.display_number, estimate.display_number)
        return created

    def send_invoice(self, invoice_id: str) -> Invoice:
        invoice = self._require(invoice_id)
        invoice.status = InvoiceStatus.SENT
        invoice.sent_date = utcnow()
        if invoice.due_date is None:
            invoice.due_date = self._default_due_date()
        return self._replace(invoice)

    def mark_as_paid(
        self,
        invoice_id: str,
        amount: Decimal | int | str,
        method: PaymentMethod | str = PaymentMethod.BANK_TRANSFER,
        reference: str = "",
    ) -> Invoice:
        """Apply a payment; the invoice becomes Paid once it is fully covered."""
        amount = _to_decimal("Payment amount", amount)
        if amount <= 0:
            raise ValueError("Payment amount must be greater than zero.")
        invoice = self._require(invoice_id)
        if invoice.status == InvoiceStatus.CANCELLED:
            raise ValueError(f"Invoice '{invoice.display_number}' is cancelled and cannot be paid.")

        now = utcnow()
        invoice.amount_paid += amount
        invoice.paid_date = now
        if invoice.amount_paid >= invoice.total:
            invoice.status = InvoiceStatus.PAID
        else:
            invoice.status = InvoiceStatus.PARTIALLY_PAID
        self._replace(invoice)

        self._payment_service.create_payment(
            Payment(invoice_id=invoice.id, amount=amount, payment_date=now, method=method, reference=reference)
        )
        logger.info("Recorded payment of %s against invoice %s.", amount, invoice.display_number)
        return invoice

    def get_overdue_invoices(self) -> List[Invoice]:
        return [invoice for invoice in self.get_all_invoices() if invoice.is_overdue]

    def get_total_outstanding(self) -> Decimal:
        return sum(
            (invoice.amount_due for invoice in self._load() if invoice.status not in _SETTLED_STATUSES),
            ZERO,
        )
