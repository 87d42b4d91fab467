"""Repositories and business rules over the key-value store."""

from .analytics import AnalyticsService  # noqa: F401
from .customers import CustomerService  # noqa: F401
from .estimates import EstimateService  # noqa: F401
from .invoices import InvoiceService, PaymentService  # noqa: F401
from .leads import LeadActivityService, LeadService  # noqa: F401
from .personalization import UIPersonalizationService  # noqa: F401
from .projects import ProjectService, TaskService, TimeTrackingService  # noqa: F401
from .staff import RoleService, StaffService  # noqa: F401
