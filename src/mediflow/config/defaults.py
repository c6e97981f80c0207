"""Default configuration values.

This module defines the default configuration values used when no configuration
file is provided or when configuration values are not specified.
"""

from typing import Any

# Used as a fallback when no configuration file is present
DEFAULT_CONFIG: dict[str, Any] = {
    "reference_ranges": {
        "temperature_celsius": {"low": 36.1, "high": 37.2},
        # Monitoring-screen bound; the registration screen used 120
        "systolic_bp": {"low": 90, "high": 140},
        "diastolic_bp": {"low": 60, "high": 90},
        "heart_rate": {"low": 60, "high": 100},
        "respiratory_rate": {"low": 12, "high": 20},
        "oxygen_saturation": {"low": 95, "high": None},
    },
    "identifiers": {
        # Random suffix with no uniqueness check
        "strategy": "random",
        "seed": None,
    },
    "scheduling": {
        "day_start": "08:00",
        "day_end": "17:00",
        "slot_minutes": 30,
    },
    "reports": {
        "total_beds": 50,
        "trend_days": 7,
        "recent_vitals_hours": 4,
    },
    "logging": {
        "level": "INFO",
        "log_file": "logs/mediflow.log",
        # Do not redact PII by default (user must opt-in for privacy)
        "redact_pii": False,
    },
}

DEFAULT_CONFIG_PATH = "config/config.json"
