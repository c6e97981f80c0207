"""Integration test fixtures and configuration.

This module provides fixtures for integration tests, including:
- A sequential identifier generator pinned to the fixture year
- CLI runner fixtures with logging kept inside tmp_path
"""

import logging
from datetime import datetime
from pathlib import Path

import pytest
from click.testing import CliRunner

from mediflow.derivation.identifiers import IdentifierGenerator, create_generator
from mediflow.store import ClinicalStore


# Configure logging for integration tests
logger = logging.getLogger(__name__)


def pytest_collection_modifyitems(items):
    """Mark every test in this directory as an integration test."""
    for item in items:
        if "integration" in Path(str(item.fspath)).parts:
            item.add_marker(pytest.mark.integration)


@pytest.fixture
def sequential_ids(store: ClinicalStore, now: datetime) -> IdentifierGenerator:
    """
    Sequential generator continuing after the fixture's record numbers.

    Args:
        store: Loaded clinic dataset.
        now: Reference time; fixes the year component.

    Returns:
        IdentifierGenerator: Generator that never reissues a fixture number.
    """
    return create_generator(
        "sequential", existing=store.record_numbers(), clock=lambda: now
    )


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def cli_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """
    Run CLI commands from tmp_path with console logging at WARNING.

    Returns:
        Path: Log file that global ``--log-file`` options should point to.
    """
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("MEDIFLOW_LOG_LEVEL", "WARNING")
    return tmp_path / "logs" / "mediflow.log"
