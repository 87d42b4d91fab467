import logging
from datetime import timedelta
from typing import List, Optional

from ..models.common import utcnow
from ..models.financial import Estimate, EstimateStatus
from .base import CollectionService, year_sequence_number
from .customers import CustomerService
from .sample_data import sample_estimates

logger = logging.getLogger(__name__)

ESTIMATES_KEY = "estimates"


class EstimateService(CollectionService[Estimate]):
    """Estimates and their Draft -> Sent -> Accepted/Rejected -> Converted lifecycle."""

    storage_key = ESTIMATES_KEY
    model = Estimate
    entity_label = "Estimate"

    def __init__(
        self,
        store,
        customer_service: CustomerService,
        *,
        validity_days: int = 30,
        seed_sample_data: bool = True,
    ) -> None:
        super().__init__(store, seed_sample_data=seed_sample_data)
        self._customer_service = customer_service
        self._validity_days = validity_days

    def _sample_data(self) -> List[Estimate]:
        return sample_estimates(self._customer_service.get_all_customers())

    def _hydrate(self, estimates: List[Estimate]) -> List[Estimate]:
        customers = {customer.id: customer for customer in self._customer_service.get_all_customers()}
        for estimate in estimates:
            estimate.customer = customers.get(estimate.customer_id)
        return estimates

    def _require_open(self, estimate_id: str) -> Estimate:
        estimate = self._require(estimate_id)
        if estimate.status == EstimateStatus.CONVERTED:
            raise ValueError(f"Estimate '{estimate.display_number}' has already been converted.")
        return estimate

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def get_all_estimates(self) -> List[Estimate]:
        estimates = sorted(self._load(), key=lambda estimate: estimate.created_date, reverse=True)
        return self._hydrate(estimates)

    def get_estimate_by_id(self, estimate_id: str) -> Optional[Estimate]:
        estimate = self._find(estimate_id)
        return self._hydrate([estimate])[0] if estimate is not None else None

    def create_estimate(self, estimate: Estimate) -> Estimate:
        if not estimate.estimate_number:
            estimate.estimate_number = self.generate_estimate_number()
        return self._insert(estimate, stamp=("created_date", "created_at", "updated_at"))

    def update_estimate(self, estimate: Estimate) -> Estimate:
        return self._replace(estimate)

    def delete_estimate(self, estimate_id: str) -> bool:
        return self._remove(estimate_id)

    def get_estimates_by_customer(self, customer_id: str) -> List[Estimate]:
        return [estimate for estimate in self.get_all_estimates() if estimate.customer_id == customer_id]

    def get_estimates_by_status(self, status: EstimateStatus | str) -> List[Estimate]:
        return self._filter(self.get_all_estimates(), "status", status)

    def generate_estimate_number(self) -> str:
        return year_sequence_number("EST", (estimate.created_date for estimate in self._load()))

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def send_estimate(self, estimate_id: str) -> Estimate:
        estimate = self._require_open(estimate_id)
        now = utcnow()
        estimate.status = EstimateStatus.SENT
        estimate.sent_date = now
        estimate.expiry_date = now + timedelta(days=self._validity_days)
        logger.info("Sent estimate %s.", estimate.display_number)
        return self._replace(estimate)

    def accept_estimate(self, estimate_id: str) -> Estimate:
        estimate = self._require_open(estimate_id)
        estimate.status = EstimateStatus.ACCEPTED
        estimate.accepted_date = utcnow()
        return self._replace(estimate)

    def reject_estimate(self, estimate_id: str) -> Estimate:
        estimate = self._require_open(estimate_id)
        estimate.status = EstimateStatus.REJECTED
        estimate.rejected_date = utcnow()
        return self._replace(estimate)

    def convert_to_invoice(self, estimate_id: str) -> Estimate:
        """Mark an accepted, unexpired estimate Converted; anything else comes back unchanged."""
        estimate = self._require(estimate_id)
        if not estimate.can_be_converted:
            return estimate
        estimate.status = EstimateStatus.CONVERTED
        return self._replace(estimate)
