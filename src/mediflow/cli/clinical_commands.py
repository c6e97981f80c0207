"""Dataset-driven clinical CLI commands.

Every command reads a JSON dataset and prints a derived view. ``--now``
fixes the reference time so output is reproducible.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

import click

from mediflow.assistant import AssistantContext, KeywordResponder
from mediflow.cli.common import (
    dataset_argument,
    echo_json,
    find_patient,
    get_config,
    json_option,
    now_option,
    open_dataset,
    resolve_now,
)
from mediflow.config import get_reference_ranges
from mediflow.data_loader import validate_dataset
from mediflow.derivation.dashboard import appointment_statistics, compute_dashboard
from mediflow.derivation.filters import AppointmentCriteria, DateBucket, filter_appointments
from mediflow.derivation.orders import aggregate_orders
from mediflow.derivation.patient_summary import summarize_patient
from mediflow.derivation.reports import compute_report
from mediflow.derivation.roster import build_staff_roster
from mediflow.derivation.scheduling import available_slots
from mediflow.models.appointment import AppointmentStatus

logger = logging.getLogger(__name__)


@click.group()
def data() -> None:
    """Dataset operations and validation commands."""
    pass


@data.command("validate")
@dataset_argument
@now_option
@json_option
def validate_data(dataset: Path, now: Optional[datetime], json_output: bool) -> None:
    """Validate a clinical dataset for consistency.

    Exits with code 0 for success (warnings are OK), code 1 for errors.

    Examples:

        mediflow data validate data/seed.json

        mediflow data validate data/seed.json --json
    """
    store = open_dataset(dataset)
    result = validate_dataset(store, resolve_now(now))

    if json_output:
        echo_json(result.to_dict())
    elif result.has_errors:
        click.secho(result.format_report(), fg="red", err=True)
    elif result.has_warnings:
        click.secho(result.format_report(), fg="yellow")
    else:
        click.secho(result.format_report(), fg="green")

    if result.has_errors:
        logger.error("Dataset validation failed with errors")
        raise click.exceptions.Exit(1)


@click.command()
@dataset_argument
@now_option
@json_option
def dashboard(dataset: Path, now: Optional[datetime], json_output: bool) -> None:
    """Show dashboard KPIs for a dataset."""
    store = open_dataset(dataset)
    stats = compute_dashboard(store.patients, store.visits, resolve_now(now))

    if json_output:
        echo_json(stats.to_dict())
        return

    for tile in stats.to_tiles():
        click.echo(f"{tile.label:<20} {tile.value:>6}   {tile.detail}")
    click.echo(
        f"\nVisit types: {stats.outpatient_visits} OPD, {stats.inpatient_visits} IPD, "
        f"{stats.emergency_visits} EMERGENCY"
    )


@click.group()
def appointments() -> None:
    """Appointment listing and availability commands."""
    pass


@appointments.command("list")
@dataset_argument
@click.option(
    "--status",
    type=click.Choice([s.value for s in AppointmentStatus], case_sensitive=False),
    default=None,
    help="Only appointments with this status",
)
@click.option("--doctor", "doctor_id", default=None, help="Only this doctor's appointments")
@click.option(
    "--when",
    type=click.Choice([b.value for b in DateBucket], case_sensitive=False),
    default=DateBucket.ALL.value,
    help="Date window relative to --now",
)
@click.option("--search", default=None, help="Search number, patient, MRN, doctor or reason")
@now_option
@json_option
def list_appointments(
    dataset: Path,
    status: Optional[str],
    doctor_id: Optional[str],
    when: str,
    search: Optional[str],
    now: Optional[datetime],
    json_output: bool,
) -> None:
    """List appointments in date/time order.

    Example:

        mediflow appointments list data/seed.json --when THIS_WEEK --search bello
    """
    store = open_dataset(dataset)
    reference = resolve_now(now)
    criteria = AppointmentCriteria(
        status=AppointmentStatus(status.upper()) if status else None,
        doctor_id=doctor_id,
        date_bucket=DateBucket(when.upper()),
        search=search,
    )
    matches = filter_appointments(store.appointments, criteria, reference)

    if json_output:
        echo_json(
            {
                "statistics": appointment_statistics(store.appointments, reference).to_dict(),
                "appointments": [
                    {
                        "appointment_number": a.appointment_number,
                        "date": a.appointment_date.isoformat(),
                        "time": a.appointment_time.strftime("%H:%M"),
                        "patient": a.patient.full_name if a.patient else a.patient_id,
                        "doctor": a.doctor_name or a.doctor_id,
                        "status": a.status.value,
                        "reason": a.reason,
                    }
                    for a in matches
                ],
            }
        )
        return

    if not matches:
        click.echo("No appointments found matching your filters.")
        return
    for a in matches:
        patient = a.patient.full_name if a.patient else a.patient_id
        click.echo(
            f"{a.appointment_date.isoformat()} {a.appointment_time.strftime('%H:%M')}  "
            f"{a.appointment_number}  {patient:<24} {a.doctor_name or a.doctor_id:<20} "
            f"{a.status.value}"
        )
    click.echo(f"\n{len(matches)} of {len(store.appointments)} appointments")


@appointments.command("slots")
@dataset_argument
@click.option("--doctor", "doctor_id", required=True, help="Doctor id")
@click.option("--date", "day", type=click.DateTime(formats=["%Y-%m-%d"]), required=True)
@click.pass_context
def list_slots(ctx: click.Context, dataset: Path, doctor_id: str, day: datetime) -> None:
    """Show a doctor's free appointment slots on a day."""
    store = open_dataset(dataset)
    scheduling = get_config(ctx).scheduling
    free = available_slots(
        doctor_id,
        day.date(),
        store.appointments,
        day_start=scheduling.day_start,
        day_end=scheduling.day_end,
        slot_minutes=scheduling.slot_minutes,
    )
    click.echo(" ".join(free) if free else "No free slots")


@click.group()
def orders() -> None:
    """Order statistics commands."""
    pass


@orders.command("summary")
@dataset_argument
@click.argument("patient_ref")
@json_option
def order_summary(dataset: Path, patient_ref: str, json_output: bool) -> None:
    """Summarise a patient's lab, medication and radiology orders.

    PATIENT_REF is a patient id or MRN.
    """
    store = open_dataset(dataset)
    patient = find_patient(store, patient_ref)
    aggregate = aggregate_orders(store.visits_for_patient(patient.id))

    if json_output:
        echo_json(aggregate.to_dict())
        return

    click.echo(f"Orders for {patient.full_name} ({patient.mrn})")
    for label, counts in (
        ("Lab", aggregate.lab),
        ("Medication", aggregate.medication),
        ("Radiology", aggregate.radiology),
    ):
        click.echo(
            f"  {label:<11} total={counts.total} pending={counts.pending} "
            f"in_progress={counts.in_progress} completed={counts.completed} "
            f"cancelled={counts.cancelled}"
        )
    if aggregate.has_abnormal_result:
        click.secho("  Abnormal lab results present", fg="red")


@click.group()
def patient() -> None:
    """Patient summary commands."""
    pass


@patient.command("summary")
@dataset_argument
@click.argument("patient_ref")
@now_option
@json_option
@click.pass_context
def patient_summary(
    ctx: click.Context,
    dataset: Path,
    patient_ref: str,
    now: Optional[datetime],
    json_output: bool,
) -> None:
    """Show a patient's clinical summary and alerts."""
    store = open_dataset(dataset)
    found = find_patient(store, patient_ref)
    summary = summarize_patient(
        found,
        store.visits_for_patient(found.id),
        resolve_now(now),
        get_reference_ranges(get_config(ctx)),
    )

    if json_output:
        echo_json(summary.to_dict())
        return

    details = summary.to_dict()
    click.echo(f"{found.full_name} ({found.mrn})  alert level: {summary.alert_level.value}")
    for alert in summary.alerts:
        click.echo(f"  ! {alert}")
    click.echo(f"Latest vitals: {summary.latest_vitals_age}")
    if details["latest_vitals_abnormal"]:
        click.secho(f"  Abnormal: {', '.join(details['latest_vitals_abnormal'])}", fg="red")
    click.echo(f"Active medications: {', '.join(details['active_medications']) or 'none'}")
    click.echo(f"Pending labs: {', '.join(details['pending_labs']) or 'none'}")


@patient.command("roster")
@dataset_argument
@click.argument("patient_ref")
@json_option
def patient_roster(dataset: Path, patient_ref: str, json_output: bool) -> None:
    """List doctors and nurses who attended a patient."""
    store = open_dataset(dataset)
    found = find_patient(store, patient_ref)
    roster = build_staff_roster(store.visits_for_patient(found.id))

    if json_output:
        echo_json([entry.to_dict() for entry in roster])
        return

    if not len(roster):
        click.echo("No attending staff recorded.")
        return
    for entry in roster:
        click.echo(
            f"{entry.role.label:<7} {entry.name:<24} {entry.visit_count} visit(s): "
            f"{', '.join(entry.visit_numbers)}"
        )


@click.command()
@dataset_argument
@now_option
@json_option
@click.pass_context
def report(
    ctx: click.Context, dataset: Path, now: Optional[datetime], json_output: bool
) -> None:
    """Show hospital report figures."""
    store = open_dataset(dataset)
    reports_config = get_config(ctx).reports
    result = compute_report(
        store.visits,
        resolve_now(now),
        total_beds=reports_config.total_beds,
        trend_days=reports_config.trend_days,
    )

    if json_output:
        echo_json(result.to_dict())
        return

    click.echo(f"Average length of stay: {result.average_length_of_stay} days")
    click.echo(
        f"Bed occupancy: {result.bed_occupancy_rate}% "
        f"({result.occupied_beds}/{result.total_beds})"
    )
    click.echo(
        f"Lab orders: {result.completed_lab_orders} completed, "
        f"{result.pending_lab_orders} pending"
    )
    click.echo(f"Active medications: {result.active_medications}")
    click.echo("Visit trend:")
    for entry in result.daily_trend:
        click.echo(f"  {entry.day.isoformat()}  {entry.total}")
    if result.top_diagnoses:
        click.echo("Top diagnoses:")
        for diagnosis, count in result.top_diagnoses:
            click.echo(f"  {count:>3}  {diagnosis}")


@click.group()
def assistant() -> None:
    """Patient question-answering commands."""
    pass


@assistant.command("ask")
@dataset_argument
@click.argument("patient_ref")
@click.argument("question")
@now_option
def ask(dataset: Path, patient_ref: str, question: str, now: Optional[datetime]) -> None:
    """Ask a question about a patient.

    Example:

        mediflow assistant ask data/seed.json MR-2024-000001 "any allergies?"
    """
    store = open_dataset(dataset)
    found = find_patient(store, patient_ref)
    context = AssistantContext(
        patient=found, visits=store.visits_for_patient(found.id), now=resolve_now(now)
    )
    click.echo(KeywordResponder().respond(question, context))
