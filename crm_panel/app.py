"""Composition root that wires every service over a single store."""

from __future__ import annotations

import logging
from typing import Optional

from .config import Settings
from .storage import KeyValueStore, create_store
from .services.analytics import AnalyticsService
from .services.customers import CustomerService
from .services.estimates import EstimateService
from .services.invoices import InvoiceService, PaymentService
from .services.leads import LeadActivityService, LeadService
from .services.personalization import UIPersonalizationService
from .services.projects import ProjectService, TaskService, TimeTrackingService
from .services.staff import RoleService, StaffService

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(level: str | int = "INFO") -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)


class ControlPanel:
    """All CRM services sharing one key-value store.

    With no arguments the panel runs on an in-memory store seeded with the
    sample data. Pass ``settings`` to pick a backend and tune limits, or pass
    ``store`` directly to reuse an existing one.
    """

    def __init__(self, store: Optional[KeyValueStore] = None, settings: Optional[Settings] = None) -> None:
        self.settings = settings or Settings()
        self.store = store if store is not None else create_store(self.settings)
        seed = self.settings.seed_sample_data

        self.customers = CustomerService(self.store, seed_sample_data=seed)
        self.staff = StaffService(self.store, seed_sample_data=seed)
        self.roles = RoleService(self.store, seed_sample_data=seed)
        self.lead_activities = LeadActivityService(self.store, self.staff, seed_sample_data=seed)
        self.leads = LeadService(
            self.store,
            self.customers,
            self.staff,
            activity_service=self.lead_activities,
            seed_sample_data=seed,
        )
        self.tasks = TaskService(self.store, self.staff, seed_sample_data=seed)
        self.projects = ProjectService(self.store, self.customers, self.staff, self.tasks, seed_sample_data=seed)
        self.time_tracking = TimeTrackingService(self.store, seed_sample_data=seed)
        self.estimates = EstimateService(
            self.store,
            self.customers,
            validity_days=self.settings.estimate_validity_days,
            seed_sample_data=seed,
        )
        self.payments = PaymentService(self.store, seed_sample_data=seed)
        self.invoices = InvoiceService(
            self.store,
            self.customers,
            self.estimates,
            self.payments,
            payment_days=self.settings.invoice_payment_days,
            seed_sample_data=seed,
        )
        self.personalization = UIPersonalizationService(
            self.store, access_log_limit=self.settings.access_log_limit
        )
        self.analytics = AnalyticsService(
            self.store,
            self.customers,
            self.leads,
            self.projects,
            self.tasks,
            self.estimates,
            self.invoices,
            self.staff,
            report_history_limit=self.settings.report_history_limit,
        )
        if seed:
            # Sample tasks are written alongside the sample projects.
            self.projects.get_all_projects()
        logger.debug("Control panel ready on %s.", type(self.store).__name__)
