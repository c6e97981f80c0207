"""Hospital staff data model."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Role(Enum):
    """Staff role. Determines which menus and order types are shown."""

    ADMIN = "ADMIN"
    DOCTOR = "DOCTOR"
    NURSE = "NURSE"
    LAB_TECH = "LAB_TECH"
    RADIOLOGIST = "RADIOLOGIST"
    PHARMACIST = "PHARMACIST"
    RECEPTIONIST = "RECEPTIONIST"

    @property
    def label(self) -> str:
        return ROLE_LABELS[self]


ROLE_LABELS = {
    Role.ADMIN: "Administrator",
    Role.DOCTOR: "Doctor",
    Role.NURSE: "Nurse",
    Role.LAB_TECH: "Lab Technician",
    Role.RADIOLOGIST: "Radiologist",
    Role.PHARMACIST: "Pharmacist",
    Role.RECEPTIONIST: "Receptionist",
}


@dataclass
class StaffMember:
    """Staff user account.

    Attributes:
        id: Unique staff identifier
        first_name: Given name
        last_name: Family name
        role: Staff role
        license_number: Professional license number (optional)
        specialization: Clinical specialization (optional)
        is_active: Whether the account is active
    """

    id: str
    first_name: str
    last_name: str
    role: Role
    email: Optional[str] = None
    phone: Optional[str] = None
    license_number: Optional[str] = None
    specialization: Optional[str] = None
    is_active: bool = True

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def ref(self) -> "StaffRef":
        return StaffRef(id=self.id, name=self.full_name)


@dataclass(frozen=True)
class StaffRef:
    """Reference to a staff member assigned to a visit.

    The display name is optional; rosters fall back to a role-based label.
    """

    id: str
    name: Optional[str] = None
