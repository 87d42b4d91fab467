import logging
from typing import List, Optional

from ..models.staff import Permission, Role, Staff, StaffRole, StaffStatus, SystemPermissions
from .base import CollectionService
from .sample_data import sample_staff

logger = logging.getLogger(__name__)

STAFF_KEY = "staff"
ROLES_KEY = "roles"


class StaffService(CollectionService[Staff]):
    storage_key = STAFF_KEY
    model = Staff
    entity_label = "Staff member"

    def _sample_data(self) -> List[Staff]:
        return sample_staff()

    def get_all_staff(self) -> List[Staff]:
        return self._load()

    def get_staff_by_id(self, staff_id: str) -> Optional[Staff]:
        return self._find(staff_id)

    def create_staff(self, staff: Staff) -> Staff:
        return self._insert(staff)

    def update_staff(self, staff: Staff) -> Staff:
        return self._replace(staff)

    def delete_staff(self, staff_id: str) -> bool:
        return self._remove(staff_id)

    def search_staff(self, search_term: str) -> List[Staff]:
        return self._search(
            self._load(),
            search_term,
            ("first_name", "last_name", "email", "job_title", "department", "phone"),
        )

    def get_staff_by_status(self, status: StaffStatus | str) -> List[Staff]:
        return self._filter(self._load(), "status", status)

    def get_staff_by_department(self, department: str) -> List[Staff]:
        wanted = department.strip().lower()
        return [member for member in self._load() if member.department.lower() == wanted]

    def get_departments(self) -> List[str]:
        """Distinct non-empty department names, sorted."""
        return sorted({member.department for member in self._load() if member.department})


class RoleService(CollectionService[Role]):
    """Role catalogue; the built-in system roles are created on first access."""

    storage_key = ROLES_KEY
    model = Role
    entity_label = "Role"

    def _sample_data(self) -> List[Role]:
        return SystemPermissions.default_roles()

    def _load(self) -> List[Role]:
        roles = super()._load()
        if not roles and not self._seed_sample_data:
            # System roles exist even when sample data is disabled.
            roles = self.initialize_default_roles()
        return roles

    def initialize_default_roles(self) -> List[Role]:
        roles = SystemPermissions.default_roles()
        self._save(roles)
        logger.info("Initialized %d default roles.", len(roles))
        return roles

    def get_all_roles(self) -> List[Role]:
        return self._load()

    def get_role_by_id(self, role_id: str) -> Optional[Role]:
        return self._find(role_id)

    def create_role(self, role: Role) -> Role:
        return self._insert(role)

    def update_role(self, role: Role) -> Role:
        return self._replace(role)

    def delete_role(self, role_id: str) -> bool:
        """Remove a custom role; system roles are never deleted."""
        role = self._find(role_id)
        if role is None or role.is_system_role:
            return False
        return self._remove(role_id)

    def get_all_permissions(self) -> List[Permission]:
        return SystemPermissions.all_permissions()

    def get_staff_roles(self, staff: List[Staff]) -> List[StaffRole]:
        """Role summaries with the number of staff members holding each role."""
        return [
            StaffRole.from_role(role, staff_count=sum(1 for member in staff if role.id in member.role_ids))
            for role in self._load()
        ]
