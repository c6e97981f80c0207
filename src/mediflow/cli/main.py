"""Main CLI entry point for MediFlow.

This module provides the main Click command group for the mediflow CLI.
"""

from pathlib import Path
from typing import Optional

import click

from mediflow import __version__
from mediflow.cli.clinical_commands import (
    appointments,
    assistant,
    dashboard,
    data,
    orders,
    patient,
    report,
)
from mediflow.cli.record_commands import ids, vitals
from mediflow.config import load_config
from mediflow.logging_audit import configure_logging, configure_operation_logging_from_config
from mediflow.utils.exceptions import ConfigurationError


@click.group()
@click.version_option(version=__version__, prog_name="mediflow")
@click.option(
    "--config",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (default: ./config/config.json)",
)
@click.option("--verbose", is_flag=True, help="Enable verbose logging (DEBUG level)")
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to log file (overrides config file)",
)
@click.option(
    "--redact-pii",
    is_flag=True,
    help="Redact PII (patient names, MRNs, phone numbers) from logs",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[Path],
    verbose: bool,
    log_file: Optional[Path],
    redact_pii: bool,
) -> None:
    """MediFlow - clinical record derivation toolkit.

    Derives dashboards, order statistics, vital sign alerts, appointment
    availability and patient summaries from hospital record datasets.

    Common usage:

        # Validate a dataset
        mediflow data validate data/seed.json

        # Dashboard KPIs as of a fixed time
        mediflow dashboard data/seed.json --now 2024-03-15T10:00

        # Use custom configuration file
        mediflow --config custom/config.json report data/seed.json

    Use --help with any command for more information.
    """
    ctx.ensure_object(dict)

    try:
        config_obj = load_config(config)
        ctx.obj["config"] = config_obj
    except ConfigurationError as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        ctx.exit(1)

    ctx.obj["verbose"] = verbose
    ctx.obj["redact_pii"] = redact_pii
    ctx.obj["log_file"] = log_file

    # Precedence: CLI flags > config file > defaults
    log_level = "DEBUG" if verbose else config_obj.logging.level
    log_file_path = log_file if log_file else config_obj.logging.log_file
    redact_pii_setting = redact_pii if redact_pii else config_obj.logging.redact_pii

    configure_logging(
        level=log_level, log_file=log_file_path, redact_pii=redact_pii_setting
    )
    configure_operation_logging_from_config(config_obj.operation_logging)


cli.add_command(ids)
cli.add_command(vitals)
cli.add_command(data)
cli.add_command(dashboard)
cli.add_command(appointments)
cli.add_command(orders)
cli.add_command(patient)
cli.add_command(report)
cli.add_command(assistant)


@cli.group()
def config() -> None:
    """Configuration management commands."""
    pass


@config.command()
@click.argument("config_file", type=click.Path(exists=True, path_type=Path))
def validate(config_file: Path) -> None:
    """Validate a configuration file.

    Example:
        mediflow config validate config/config.json
    """
    try:
        config_obj = load_config(config_file)

        click.echo(click.style("✓", fg="green", bold=True) + " Configuration is valid")
        click.echo(f"\nConfiguration file: {config_file}")
        click.echo(f"Hospital: {config_obj.hospital_name}")

        ranges = config_obj.reference_ranges
        click.echo("\nReference ranges:")
        for name in (
            "temperature_celsius",
            "systolic_bp",
            "diastolic_bp",
            "heart_rate",
            "respiratory_rate",
            "oxygen_saturation",
        ):
            bounds = getattr(ranges, name)
            low = bounds.low if bounds.low is not None else "-"
            high = bounds.high if bounds.high is not None else "-"
            click.echo(f"  {name:<20} {low} - {high}")

        click.echo("\nIdentifiers:")
        click.echo(f"  Strategy:    {config_obj.identifiers.strategy}")
        click.echo(f"  Seed:        {config_obj.identifiers.seed or 'Not set'}")

        click.echo("\nScheduling:")
        click.echo(
            f"  Day:         {config_obj.scheduling.day_start} - {config_obj.scheduling.day_end}"
        )
        click.echo(f"  Slot:        {config_obj.scheduling.slot_minutes} minutes")

        click.echo("\nReports:")
        click.echo(f"  Total beds:  {config_obj.reports.total_beds}")
        click.echo(f"  Trend days:  {config_obj.reports.trend_days}")

        click.echo("\nLogging:")
        click.echo(f"  Level:       {config_obj.logging.level}")
        click.echo(f"  Log file:    {config_obj.logging.log_file}")
        click.echo(f"  Redact PII:  {config_obj.logging.redact_pii}")

    except ConfigurationError as e:
        click.echo(click.style("✗", fg="red", bold=True) + " Configuration validation failed")
        click.echo(f"\n{e}", err=True)
        raise click.exceptions.Exit(1)


cli.add_command(config)


@cli.command()
def version() -> None:
    """Display version information."""
    click.echo(f"mediflow version {__version__}")


if __name__ == "__main__":
    cli()
