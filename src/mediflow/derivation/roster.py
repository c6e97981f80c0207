"""Attending staff roster built from a patient's visit history."""

from dataclasses import dataclass, field
from typing import Iterable

from mediflow.models.staff import Role
from mediflow.models.visit import Visit


@dataclass
class RosterEntry:
    """One staff member on the roster.

    Attributes:
        person_id: Staff identifier
        name: Display name (first name seen, or a role-based fallback)
        role: DOCTOR or NURSE
        visit_count: Number of assignments across the visits
        visit_numbers: Visit numbers in the order encountered
    """

    person_id: str
    name: str
    role: Role
    visit_count: int = 0
    visit_numbers: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "person_id": self.person_id,
            "name": self.name,
            "role": self.role.value,
            "visit_count": self.visit_count,
            "visit_numbers": list(self.visit_numbers),
        }


@dataclass
class StaffRoster:
    entries: list[RosterEntry] = field(default_factory=list)

    @property
    def doctors(self) -> list[RosterEntry]:
        return [entry for entry in self.entries if entry.role is Role.DOCTOR]

    @property
    def nurses(self) -> list[RosterEntry]:
        return [entry for entry in self.entries if entry.role is Role.NURSE]

    @property
    def total_assignments(self) -> int:
        return sum(entry.visit_count for entry in self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)


_FALLBACK_LABELS = {Role.DOCTOR: "Doctor", Role.NURSE: "Nurse"}


def build_staff_roster(visits: Iterable[Visit]) -> StaffRoster:
    """Deduplicate doctor and nurse assignments across visits.

    Entries are keyed by (role, person id), so the same id under both roles
    yields two entries. Entries appear in first-seen order; each assignment
    increments the count and appends the visit number.

    Args:
        visits: A patient's visits, in display order

    Returns:
        StaffRoster (empty for a patient with no visits)
    """
    entries: dict[tuple[Role, str], RosterEntry] = {}

    for visit in visits:
        assignments = [(Role.DOCTOR, ref) for ref in visit.assigned_doctors] + [
            (Role.NURSE, ref) for ref in visit.assigned_nurses
        ]
        for role, ref in assignments:
            key = (role, ref.id)
            entry = entries.get(key)
            if entry is None:
                entry = RosterEntry(
                    person_id=ref.id,
                    name=ref.name or f"{_FALLBACK_LABELS[role]} {ref.id}",
                    role=role,
                )
                entries[key] = entry
            entry.visit_count += 1
            entry.visit_numbers.append(visit.visit_number)

    return StaffRoster(entries=list(entries.values()))
