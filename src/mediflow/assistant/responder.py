"""Patient question answering.

A Responder turns a free-text question about one patient into a reply. The
bundled KeywordResponder matches keywords against the question and fills a
template from the patient's records; another strategy (for example a
language-model client) can be swapped in behind the same interface.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from mediflow.derivation.vitals import latest_reading_across
from mediflow.models.patient import Patient
from mediflow.models.visit import Visit

RECENT_VISIT_LIMIT = 3


@dataclass
class AssistantContext:
    """What the assistant knows when answering.

    Attributes:
        patient: Patient being discussed
        visits: The patient's visits, newest first
        now: Reference time for age calculation (defaults to the current time)
    """

    patient: Patient
    visits: list[Visit] = field(default_factory=list)
    now: Optional[datetime] = None

    @property
    def reference_time(self) -> datetime:
        return self.now or datetime.now()


class Responder(ABC):
    """Strategy answering questions about a patient."""

    @abstractmethod
    def respond(self, query: str, context: AssistantContext) -> str:
        """Return the reply to ``query``."""

    def greeting(self, context: AssistantContext) -> str:
        patient = context.patient
        return (
            f"Hello! I can help you with information about {patient.full_name} "
            f"(MRN: {patient.mrn}). Ask about medical history, current medications, "
            f"recent vitals, lab results, or any other aspect of their care."
        )


def _join(lines: list[Optional[str]]) -> str:
    return "\n".join(line for line in lines if line is not None).strip()


def _history(context: AssistantContext) -> str:
    patient = context.patient
    return _join(
        [
            "Based on the medical records:",
            "",
            "Medical History:",
            patient.medical_history or "No significant medical history recorded.",
            "",
            f"Allergies: {patient.allergies}" if patient.allergies else None,
            "" if patient.allergies else None,
            "Current Medications:",
            patient.current_medications or "No current medications recorded.",
            "",
            f"The patient has had {len(context.visits)} visit(s) in total.",
        ]
    )


def _allergies(context: AssistantContext) -> str:
    patient = context.patient
    if patient.allergies:
        return _join(
            [
                "IMPORTANT ALLERGIES:",
                "",
                patient.allergies,
                "",
                "Please ensure all prescriptions and treatments avoid these allergens.",
            ]
        )
    return f"No allergies are currently recorded for {patient.full_name}."


def _medications(context: AssistantContext) -> str:
    patient = context.patient
    lines = [
        "Current Medications:",
        "",
        patient.current_medications or "No current medications recorded.",
    ]
    if patient.allergies:
        lines += [
            "",
            f"Known Allergies: {patient.allergies}",
            "",
            "Please check for interactions before prescribing new medications.",
        ]
    return _join(lines)


def _visit_line(visit: Visit) -> str:
    return "\n".join(
        [
            f"- {visit.visit_type.value} Visit ({visit.visit_number})",
            f"  Date: {visit.admission_datetime.date().isoformat()}",
            f"  Chief Complaint: {visit.chief_complaint}",
            f"  Status: {visit.status.value}",
        ]
    )


def _visits(context: AssistantContext) -> str:
    active = [visit for visit in context.visits if visit.is_active]
    if active:
        return "Active Visits:\n\n" + "\n\n".join(_visit_line(v) for v in active)
    recent = context.visits[:RECENT_VISIT_LIMIT]
    if recent:
        return "Recent Visits:\n\n" + "\n\n".join(_visit_line(v) for v in recent)
    return f"No visits recorded for {context.patient.full_name}."


def _vitals(context: AssistantContext) -> str:
    reading = latest_reading_across(context.visits)
    if reading is None:
        return "No vital signs recorded yet."

    blood_pressure = None
    if reading.systolic_bp is not None and reading.diastolic_bp is not None:
        blood_pressure = f"Blood Pressure: {reading.systolic_bp}/{reading.diastolic_bp} mmHg"

    def line(label: str, value, unit: str) -> Optional[str]:
        return f"{label}: {value}{unit}" if value is not None else None

    return _join(
        [
            "Latest Vital Signs:",
            f"Recorded: {reading.recorded_at.isoformat(sep=' ', timespec='minutes')}",
            "",
            line("Temperature", reading.temperature_celsius, "°C"),
            blood_pressure,
            line("Heart Rate", reading.heart_rate, " bpm"),
            line("Respiratory Rate", reading.respiratory_rate, " breaths/min"),
            line("SpO2", reading.oxygen_saturation, "%"),
            line("Weight", reading.weight_kg, " kg"),
            f"\nNotes: {reading.notes}" if reading.notes else None,
        ]
    )


def _labs(context: AssistantContext) -> str:
    visit = next((v for v in context.visits if v.lab_orders), None)
    if visit is None:
        return "No lab orders found."

    entries = []
    for order in visit.lab_orders:
        lines = [
            f"- {order.test_name} ({order.order_number})",
            f"  Category: {order.test_category}",
            f"  Status: {order.status.value}",
            f"  Priority: {order.priority.value}",
        ]
        if order.results:
            lines.append(f"  Results: {len(order.results)} parameter(s)")
        entries.append("\n".join(lines))
    return "Lab Orders:\n\n" + "\n\n".join(entries)


def _demographics(context: AssistantContext) -> str:
    patient = context.patient
    lines = [
        "Patient Information:",
        "",
        f"Name: {patient.full_name}",
        f"MRN: {patient.mrn}",
        f"Age: {patient.age_on(context.reference_time.date())} years",
        f"Gender: {patient.gender.label}",
        f"Blood Group: {patient.blood_group}" if patient.blood_group else None,
        "",
        "Contact:",
        f"Phone: {patient.phone}",
        f"Email: {patient.email}" if patient.email else None,
        f"Address: {patient.address}",
    ]
    if patient.insurance_provider:
        lines += [
            "",
            "Insurance:",
            f"Provider: {patient.insurance_provider}",
            f"Policy: {patient.insurance_number}",
        ]
    return _join(lines)


def _help(context: AssistantContext) -> str:
    return "\n".join(
        [
            f"I can help you with information about {context.patient.full_name}. "
            "Here are some things you can ask me:",
            "",
            '- "What is the patient\'s medical history?"',
            '- "Show me recent vital signs"',
            '- "Does the patient have any allergies?"',
            '- "What medications is the patient taking?"',
            '- "Show me recent visits"',
            '- "What are the latest lab results?"',
            '- "Give me patient demographics"',
            "",
            "What would you like to know?",
        ]
    )


Handler = Callable[[AssistantContext], str]

# First matching rule wins
KEYWORD_RULES: list[tuple[tuple[str, ...], Handler]] = [
    (("history", "past", "background"), _history),
    (("allerg",), _allergies),
    (("medic", "drug", "prescription"), _medications),
    (("visit", "admission", "recent"), _visits),
    (("vital", "bp", "temperature"), _vitals),
    (("lab", "test", "result"), _labs),
    (("age", "contact", "info"), _demographics),
]


class KeywordResponder(Responder):
    """Template replies chosen by case-insensitive keyword match.

    Rules are tried in order; a question matching none gets the help text.
    """

    def __init__(self, rules: Optional[list[tuple[tuple[str, ...], Handler]]] = None) -> None:
        self._rules = rules if rules is not None else KEYWORD_RULES

    def respond(self, query: str, context: AssistantContext) -> str:
        text = query.lower()
        for keywords, handler in self._rules:
            if any(keyword in text for keyword in keywords):
                return handler(context)
        return _help(context)
