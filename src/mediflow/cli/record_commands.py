"""Record-number and vital-sign CLI commands."""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

import click

from mediflow.cli.common import echo_json, fail, get_config, json_option, open_dataset
from mediflow.config import get_reference_ranges
from mediflow.derivation.identifiers import create_generator
from mediflow.derivation.vitals import evaluate
from mediflow.models.visit import VitalSignReading
from mediflow.utils.exceptions import IdentifierError

logger = logging.getLogger(__name__)


@click.group()
def ids() -> None:
    """Record number generation commands."""
    pass


@ids.command("generate")
@click.argument("prefix")
@click.option("--count", type=click.IntRange(min=1), default=1, help="How many numbers to generate")
@click.option(
    "--strategy",
    type=click.Choice(["random", "checked", "sequential"]),
    default=None,
    help="Generation strategy (default: from configuration)",
)
@click.option("--seed", type=int, default=None, help="Random seed for reproducible output")
@click.option(
    "--dataset",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Dataset whose record numbers must not be reissued",
)
@click.pass_context
def generate_ids(
    ctx: click.Context,
    prefix: str,
    count: int,
    strategy: Optional[str],
    seed: Optional[int],
    dataset: Optional[Path],
) -> None:
    """Generate record numbers such as MR-2024-004821.

    Examples:

        # Five new medical record numbers
        mediflow ids generate MR --count 5

        # Sequential visit numbers continuing from a dataset
        mediflow ids generate VS --strategy sequential --dataset data/seed.json
    """
    identifier_config = get_config(ctx).identifiers
    existing = list(open_dataset(dataset).record_numbers()) if dataset else []

    try:
        generator = create_generator(
            strategy or identifier_config.strategy,
            seed=seed if seed is not None else identifier_config.seed,
            existing=existing,
        )
        for _ in range(count):
            click.echo(generator.generate(prefix.upper()))
    except (ValueError, IdentifierError) as e:
        fail(f"Identifier Error: {e}")


@click.group()
def vitals() -> None:
    """Vital sign commands."""
    pass


@vitals.command("evaluate")
@click.option("--temperature", type=float, default=None, help="Temperature (°C)")
@click.option("--systolic", type=int, default=None, help="Systolic BP (mmHg)")
@click.option("--diastolic", type=int, default=None, help="Diastolic BP (mmHg)")
@click.option("--heart-rate", type=int, default=None, help="Heart rate (bpm)")
@click.option("--respiratory-rate", type=int, default=None, help="Respiratory rate (/min)")
@click.option("--spo2", type=int, default=None, help="Oxygen saturation (%)")
@click.option("--weight", type=float, default=None, help="Weight (kg)")
@click.option("--height", type=float, default=None, help="Height (cm)")
@json_option
@click.pass_context
def evaluate_vitals(
    ctx: click.Context,
    temperature: Optional[float],
    systolic: Optional[int],
    diastolic: Optional[int],
    heart_rate: Optional[int],
    respiratory_rate: Optional[int],
    spo2: Optional[int],
    weight: Optional[float],
    height: Optional[float],
    json_output: bool,
) -> None:
    """Compute BMI and flag abnormal vital signs.

    Example:

        mediflow vitals evaluate --weight 70 --height 175 --systolic 150
    """
    reading = VitalSignReading(
        id="cli",
        visit_id="cli",
        recorded_by="cli",
        recorded_at=datetime.now(),
        temperature_celsius=temperature,
        systolic_bp=systolic,
        diastolic_bp=diastolic,
        heart_rate=heart_rate,
        respiratory_rate=respiratory_rate,
        oxygen_saturation=spo2,
        weight_kg=weight,
        height_cm=height,
    )
    result = evaluate(reading, get_reference_ranges(get_config(ctx)))
    flags = sorted(flag.value for flag in result.flags)

    if json_output:
        echo_json(
            {
                "bmi": result.bmi,
                "bmi_category": result.bmi_category.value if result.bmi_category else None,
                "abnormal": flags,
            }
        )
        return

    if result.bmi is not None:
        click.echo(f"BMI: {result.bmi} ({result.bmi_category.value})")
    else:
        click.echo("BMI: not available (weight and height required)")
    if flags:
        click.secho(f"Abnormal: {', '.join(flags)}", fg="red")
    else:
        click.secho("All recorded values within normal range", fg="green")
