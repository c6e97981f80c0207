"""Clinic workflow examples.

This module demonstrates loading a clinical dataset, deriving the dashboard
and reports, evaluating vital signs, booking an appointment against a
doctor's free slots and asking the patient assistant a question.

Run from the repository root:

    python examples/clinic_workflow_example.py
"""

import logging
from datetime import date, datetime, time
from pathlib import Path

from mediflow.assistant import AssistantContext, KeywordResponder
from mediflow.config import get_reference_ranges, load_config
from mediflow.data_loader import load_dataset, load_patients_csv, validate_dataset
from mediflow.derivation import (
    aggregate_orders,
    available_slots,
    compute_dashboard,
    compute_report,
    create_generator,
    evaluate,
    summarize_bill,
    summarize_patient,
    vitals_monitoring_stats,
)
from mediflow.logging_audit import configure_logging
from mediflow.models import Appointment, AppointmentType, VitalSignReading
from mediflow.store import book_appointment, record_vitals, register_patient

logger = logging.getLogger(__name__)

EXAMPLES_DIR = Path(__file__).parent
DATASET = EXAMPLES_DIR / "seed_dataset.json"
NOW = datetime(2024, 3, 15, 10, 0)


def example_1_dashboard_and_report():
    """Example 1: Validate a dataset and print dashboard and report figures."""
    print("=" * 80)
    print("EXAMPLE 1: Dashboard and Report")
    print("=" * 80)
    print()

    store = load_dataset(DATASET)
    result = validate_dataset(store, NOW)
    print(result.format_report())
    print()

    stats = compute_dashboard(store.patients, store.visits, NOW)
    for tile in stats.to_tiles():
        print(f"  {tile.label:<20} {tile.value:>4}   {tile.detail}")
    print()

    report = compute_report(store.visits, NOW, total_beds=20)
    print(f"Average length of stay: {report.average_length_of_stay} days")
    print(f"Bed occupancy: {report.bed_occupancy_rate}%")
    for diagnosis, count in report.top_diagnoses:
        print(f"  {count:>3}  {diagnosis}")
    print()

    for bill in store.bills:
        summary = summarize_bill(bill)
        print(
            f"Bill {summary.bill_number}: total {summary.total_amount}, "
            f"balance {summary.balance_amount} ({summary.payment_status.value})"
        )
    print()


def example_2_record_and_evaluate_vitals():
    """Example 2: Record a reading and evaluate it against configured ranges."""
    print("=" * 80)
    print("EXAMPLE 2: Vital Signs")
    print("=" * 80)
    print()

    config = load_config()
    ranges = get_reference_ranges(config)
    store = load_dataset(DATASET)

    reading = VitalSignReading(
        id="VT9",
        visit_id="V3",
        recorded_by="N1",
        recorded_at=datetime(2024, 3, 15, 9, 40),
        temperature_celsius=37.9,
        systolic_bp=135,
        diastolic_bp=85,
        heart_rate=104,
        respiratory_rate=24,
        oxygen_saturation=91,
        weight_kg=82,
        height_cm=178,
    )
    store = record_vitals(store, reading)

    evaluation = evaluate(reading, ranges)
    print(f"BMI: {evaluation.bmi} ({evaluation.bmi_category.value})")
    print(f"Abnormal: {', '.join(sorted(flag.value for flag in evaluation.flags))}")

    monitoring = vitals_monitoring_stats(store.visits, NOW, ranges=ranges)
    print(
        f"Active visits: {monitoring.total_active}, "
        f"with abnormal vitals: {monitoring.with_abnormal_vitals}"
    )
    print()


def example_3_book_free_slot():
    """Example 3: Find a free slot for a doctor and book it."""
    print("=" * 80)
    print("EXAMPLE 3: Appointment Booking")
    print("=" * 80)
    print()

    store = load_dataset(DATASET)
    generator = create_generator("sequential", existing=store.record_numbers(), clock=lambda: NOW)

    day = date(2024, 3, 15)
    free = available_slots("D1", day, store.appointments)
    print(f"Free slots for D1 on {day}: {' '.join(free)}")

    hour, minute = (int(part) for part in free[0].split(":"))
    appointment = Appointment(
        id="A9",
        appointment_number=generator.generate("AP"),
        patient_id="P1",
        doctor_id="D1",
        appointment_date=day,
        appointment_time=time(hour, minute),
        appointment_type=AppointmentType.FOLLOW_UP,
        reason="Repeat chest examination",
    )
    store = book_appointment(store, appointment)
    print(f"Booked {appointment.appointment_number} at {free[0]}")
    print(f"Remaining: {len(available_slots('D1', day, store.appointments))} slot(s)")
    print()


def example_4_import_and_summarize():
    """Example 4: Import patients from CSV and summarize an existing patient."""
    print("=" * 80)
    print("EXAMPLE 4: Patient Import and Summary")
    print("=" * 80)
    print()

    store = load_dataset(DATASET)
    generator = create_generator("sequential", existing=store.record_numbers(), clock=lambda: NOW)

    for patient in load_patients_csv(EXAMPLES_DIR / "patients_sample.csv", generator=generator):
        store = register_patient(store, patient)
        print(f"Registered {patient.full_name} as {patient.mrn}")
    print()

    ada = store.get_patient("P1")
    visits = store.visits_for_patient(ada.id)
    summary = summarize_patient(ada, visits, NOW)
    print(f"{ada.full_name}: alert level {summary.alert_level.value}")
    for alert in summary.alerts:
        print(f"  ! {alert}")

    orders = aggregate_orders(visits)
    print(f"Lab orders: {orders.lab.total}, abnormal results: {orders.has_abnormal_result}")

    responder = KeywordResponder()
    context = AssistantContext(patient=ada, visits=visits, now=NOW)
    print()
    print(responder.respond("Does she have any allergies?", context))
    print()


if __name__ == "__main__":
    configure_logging(level="WARNING", log_file=Path("logs/examples.log"))

    example_1_dashboard_and_report()
    example_2_record_and_evaluate_vitals()
    example_3_book_free_slot()
    example_4_import_and_summarize()
