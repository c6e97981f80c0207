"""Shared helpers for MediFlow CLI commands."""

import json as json_lib
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, NoReturn, Optional

import click

from mediflow.config import Config, load_config
from mediflow.data_loader import load_dataset
from mediflow.models.patient import Patient
from mediflow.store import ClinicalStore
from mediflow.utils.exceptions import MediflowError

logger = logging.getLogger(__name__)

NOW_FORMATS = ["%Y-%m-%dT%H:%M:%S", "%Y-%m-%dT%H:%M", "%Y-%m-%d %H:%M", "%Y-%m-%d"]

dataset_argument = click.argument("dataset", type=click.Path(exists=True, path_type=Path))

now_option = click.option(
    "--now",
    "now",
    type=click.DateTime(formats=NOW_FORMATS),
    default=None,
    help="Reference time (default: current time), e.g. 2024-03-15T10:30",
)

json_option = click.option("--json", "json_output", is_flag=True, help="Output results as JSON")


def resolve_now(now: Optional[datetime]) -> datetime:
    return now or datetime.now()


def get_config(ctx: click.Context) -> Config:
    """Configuration loaded by the root group, or defaults when run standalone."""
    obj = ctx.find_root().obj or {}
    return obj.get("config") or load_config()


def echo_json(data: Any) -> None:
    click.echo(json_lib.dumps(data, indent=2, default=str))


def fail(message: str) -> NoReturn:
    click.secho(message, fg="red", err=True)
    logger.error(message)
    sys.exit(1)


def open_dataset(dataset: Path) -> ClinicalStore:
    """Load a dataset, exiting with code 1 on any loading error."""
    try:
        return load_dataset(dataset)
    except FileNotFoundError as e:
        fail(f"File not found: {e}")
    except MediflowError as e:
        fail(f"Dataset Error: {e}")


def find_patient(store: ClinicalStore, reference: str) -> Patient:
    """Look a patient up by id or MRN, exiting with code 1 if unknown."""
    patient = store.find_patient(reference) or store.find_patient_by_mrn(reference)
    if patient is None:
        fail(f"Patient not found: {reference}")
    return patient
