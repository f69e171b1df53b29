"""
errors.py
---------
Exception hierarchy.  Validation failures subclass ``ValueError`` so callers
that already catch ``ValueError`` around config and ingestion keep working.
"""

from __future__ import annotations


class TradeLensError(Exception):
    """Base class for every error raised by this package."""


class ConfigError(TradeLensError, ValueError):
    """An AnalyticsConfig value or config file is invalid."""


class TradeDataError(TradeLensError, ValueError):
    """A trade record cannot be turned into a ``Trade``."""


class MetricsCalculationError(TradeLensError):
    """Raised by the strict summary path when computation fails unexpectedly."""
