from typing import List, Optional

from ..models.customer import Customer, CustomerStatus, CustomerType
from .base import CollectionService
from .sample_data import sample_customers

CUSTOMERS_KEY = "customers"


class CustomerService(CollectionService[Customer]):
    """CRUD and search over the ``customers`` collection."""

    storage_key = CUSTOMERS_KEY
    model = Customer
    entity_label = "Customer"

    def _sample_data(self) -> List[Customer]:
        return sample_customers()

    def get_all_customers(self) -> List[Customer]:
        return self._load()

    def get_customer_by_id(self, customer_id: str) -> Optional[Customer]:
        return self._find(customer_id)

    def create_customer(self, customer: Customer) -> Customer:
        return self._insert(customer)

    def update_customer(self, customer: Customer) -> Customer:
        return self._replace(customer)

    def delete_customer(self, customer_id: str) -> bool:
        return self._remove(customer_id)

    def search_customers(self, search_term: str) -> List[Customer]:
        return self._search(
            self._load(), search_term, ("first_name", "last_name", "email", "company", "phone")
        )

    def get_customers_by_status(self, status: CustomerStatus | str) -> List[Customer]:
        return self._filter(self._load(), "status", status)

    def get_customers_by_type(self, customer_type: CustomerType | str) -> List[Customer]:
        return self._filter(self._load(), "type", customer_type)
