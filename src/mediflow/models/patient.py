"""Patient demographics data model.

This module defines the Patient dataclass used throughout the application
for representing registered patients, plus the denormalised PatientSummary
that visits and appointments carry for display and search.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional


class Gender(Enum):
    """Administrative gender as captured at registration."""

    MALE = "M"
    FEMALE = "F"
    OTHER = "O"

    @property
    def label(self) -> str:
        return {"M": "Male", "F": "Female", "O": "Other"}[self.value]


@dataclass
class EmergencyContact:
    """Emergency contact person for a patient."""

    id: str
    name: str
    relationship: str
    phone: str
    alternate_phone: Optional[str] = None


@dataclass
class PatientSummary:
    """Patient details embedded in visits and appointments.

    Attributes:
        id: Patient identifier
        mrn: Medical record number (MR-<year>-<6 digits>)
        first_name: Patient's first name
        last_name: Patient's last name
        gender: Administrative gender
        phone: Contact phone number (optional)
    """

    id: str
    mrn: str
    first_name: str
    last_name: str
    gender: Optional[Gender] = None
    phone: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@dataclass
class Patient:
    """Registered patient.

    Patients are never physically deleted. Deactivation clears ``is_active``
    and keeps the record for audit history.

    Attributes:
        id: Unique patient identifier
        mrn: Medical record number, globally unique (MR-<year>-<6 digits>)
        first_name: Patient's first name
        last_name: Patient's last name
        date_of_birth: Date of birth
        gender: Administrative gender (M, F, O)
        blood_group: ABO/Rh blood group (optional)
        phone: Contact phone number
        email: Contact email (optional)
        address: Street address
        allergies: Free-text allergy list (optional)
        medical_history: Free-text medical history (optional)
        current_medications: Free-text current medications (optional)
        is_active: Soft-delete flag
        created_by: Staff id of the registering user
    """

    id: str
    mrn: str
    first_name: str
    last_name: str
    date_of_birth: date
    gender: Gender
    phone: str = ""
    blood_group: Optional[str] = None
    email: Optional[str] = None
    address: str = ""
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    allergies: Optional[str] = None
    medical_history: Optional[str] = None
    current_medications: Optional[str] = None
    insurance_provider: Optional[str] = None
    insurance_number: Optional[str] = None
    emergency_contacts: list[EmergencyContact] = field(default_factory=list)
    is_active: bool = True
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def age_on(self, day: date) -> int:
        """Completed years of age on the given day."""
        years = day.year - self.date_of_birth.year
        if (day.month, day.day) < (self.date_of_birth.month, self.date_of_birth.day):
            years -= 1
        return years

    @property
    def age(self) -> int:
        return self.age_on(date.today())

    def summary(self) -> PatientSummary:
        """Build the denormalised summary embedded in visits and appointments."""
        return PatientSummary(
            id=self.id,
            mrn=self.mrn,
            first_name=self.first_name,
            last_name=self.last_name,
            gender=self.gender,
            phone=self.phone or None,
        )
