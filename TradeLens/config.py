"""
config.py
---------
AnalyticsConfig is the single source of truth for every tunable number the
analytics use (starting capital, risk-free rate, annualisation factor,
histogram resolution) plus the timezone and logging knobs.

Defaults live in ``default_config.yaml`` next to this module.  A user file
only needs the keys it wants to override.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional, Union

import pytz
import yaml

from errors import ConfigError

DEFAULTS_PATH = Path(__file__).resolve().parent / "default_config.yaml"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("console", "json")


@dataclass(frozen=True)
class AnalyticsConfig:
    """All user-configurable analytics parameters."""

    # Capital / return model
    initial_capital: float = 10000.0
    risk_free_rate: float = 0.02      # annual, as a decimal
    trading_days_per_year: int = 252

    # Histogram
    distribution_bins: int = 10

    # Wall-clock zone used for day / hour bucketing
    timezone: str = "UTC"

    # Logging
    log_level: str = "INFO"
    log_format: str = "console"

    # ---------------------------------------------------------------------------
    # Validation
    # ---------------------------------------------------------------------------

    def __post_init__(self) -> None:  # noqa: D105
        if self.initial_capital <= 0:
            raise ConfigError("initial_capital must be > 0")
        if not (0 <= self.risk_free_rate < 1):
            raise ConfigError("risk_free_rate must be in [0, 1)")
        if self.trading_days_per_year < 1:
            raise ConfigError("trading_days_per_year must be >= 1")
        if self.distribution_bins < 1:
            raise ConfigError("distribution_bins must be >= 1")
        if self.timezone not in pytz.all_timezones_set:
            raise ConfigError(f"timezone '{self.timezone}' is not a known tz name")
        if self.log_level not in LOG_LEVELS:
            raise ConfigError(f"log_level must be one of {LOG_LEVELS}")
        if self.log_format not in LOG_FORMATS:
            raise ConfigError(f"log_format must be one of {LOG_FORMATS}")

    # ---------------------------------------------------------------------------
    # Construction helpers
    # ---------------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AnalyticsConfig":
        """Build a config from a plain mapping, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"Unknown config keys: {sorted(unknown)}")
        return cls(**data)


def _read_yaml(path: Path) -> dict[str, Any]:
    with open(path) as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping, got {type(data).__name__}")
    return data


def load_config(path: Optional[Union[str, Path]] = None) -> AnalyticsConfig:
    """Load the bundled defaults, then overlay *path* if given.

    Raises
    ------
    ConfigError
        If the file is not a mapping, has unknown keys or fails validation.
    """
    # The dataclass defaults mirror the bundled file
    data = _read_yaml(DEFAULTS_PATH) if DEFAULTS_PATH.exists() else {}
    if path is not None:
        data.update(_read_yaml(Path(path)))
    return AnalyticsConfig.from_dict(data)
