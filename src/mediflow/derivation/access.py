"""Role-based menu and order-tab visibility.

These tables only decide what a role is shown. They are not an
authorization layer.
"""

from dataclasses import dataclass
from typing import Optional

from mediflow.models.staff import Role

_ALL = None


@dataclass(frozen=True)
class MenuItem:
    id: str
    label: str
    roles: Optional[frozenset[Role]] = _ALL

    def visible_to(self, role: Role) -> bool:
        return self.roles is None or role in self.roles


MENU_ITEMS = (
    MenuItem("dashboard", "Dashboard"),
    MenuItem("patients", "Patients"),
    MenuItem(
        "visits",
        "Visits",
        frozenset({Role.DOCTOR, Role.NURSE, Role.RECEPTIONIST, Role.ADMIN}),
    ),
    MenuItem("appointments", "Appointments"),
    MenuItem(
        "orders",
        "Orders",
        frozenset(
            {
                Role.DOCTOR,
                Role.NURSE,
                Role.LAB_TECH,
                Role.PHARMACIST,
                Role.RADIOLOGIST,
                Role.ADMIN,
            }
        ),
    ),
    MenuItem("vitals", "Vitals", frozenset({Role.DOCTOR, Role.NURSE, Role.ADMIN})),
    MenuItem("reports", "Reports", frozenset({Role.DOCTOR, Role.ADMIN})),
    MenuItem("billing", "Billing", frozenset({Role.RECEPTIONIST, Role.ADMIN})),
    MenuItem("settings", "Settings", frozenset({Role.ADMIN})),
)

ORDER_TYPES_BY_ROLE = {
    Role.LAB_TECH: ("lab",),
    Role.PHARMACIST: ("medication",),
    Role.RADIOLOGIST: ("radiology",),
    Role.DOCTOR: ("all", "lab", "medication", "radiology"),
    Role.NURSE: ("all", "lab", "medication", "radiology"),
    Role.ADMIN: ("all", "lab", "medication", "radiology"),
}


def visible_menu_items(role: Role) -> list[MenuItem]:
    """Sidebar items shown to ``role``, in menu order."""
    return [item for item in MENU_ITEMS if item.visible_to(role)]


def visible_order_types(role: Role) -> list[str]:
    """Order tabs shown to ``role``. Roles without a table entry see "all" only."""
    return list(ORDER_TYPES_BY_ROLE.get(role, ("all",)))
