"""
export.py
---------
ExportEngine produces downloadable artefacts.

Outputs
-------
* ``config.json`` / ``config.yaml`` -- AnalyticsConfig as a flat object
* ``trades.csv``   -- the trade list
* ``metrics.csv``  -- PerformanceMetrics as a single-row CSV
* ``<section>.csv`` -- any breakdown or equity-curve list
* ``report.json``  -- the whole AnalyticsReport

All methods return ``str`` so a caller can write or serve them directly.
Non-finite floats (an ``inf`` profit factor) become ``null`` in JSON; CSV
keeps pandas' ``inf``.
"""

from __future__ import annotations

import json
import math
from dataclasses import asdict, fields, is_dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Sequence

import pandas as pd
import yaml

from config import AnalyticsConfig
from models import AnalyticsReport, PerformanceMetrics, Trade


class ExportEngine:
    """Stateless export utility."""

    # ---------------------------------------------------------------------------
    # Configuration exports
    # ---------------------------------------------------------------------------

    @staticmethod
    def config_to_json(config: AnalyticsConfig) -> str:
        """Serialise AnalyticsConfig to a pretty-printed JSON string."""
        return json.dumps(asdict(config), indent=2)

    @staticmethod
    def config_to_yaml(config: AnalyticsConfig) -> str:
        """Serialise AnalyticsConfig to YAML that ``load_config`` reads back."""
        return yaml.dump(asdict(config), default_flow_style=False, sort_keys=False)

    # ---------------------------------------------------------------------------
    # CSV exports
    # ---------------------------------------------------------------------------

    @staticmethod
    def trades_to_csv(trades: Sequence[Trade]) -> str:
        """Convert trades to a CSV string."""
        if not trades:
            return "No trades to export.\n"
        return ExportEngine._trades_df(trades).to_csv(index=False)

    @staticmethod
    def metrics_to_csv(metrics: PerformanceMetrics) -> str:
        """Export the metrics snapshot as a one-row CSV."""
        df = pd.DataFrame([ExportEngine._plain(metrics)])
        return df.to_csv(index=False)

    @staticmethod
    def section_to_csv(rows: Sequence[Any]) -> str:
        """Export a list of report rows (breakdowns, equity curve) as CSV."""
        if not rows:
            return "No data to export.\n"
        df = pd.DataFrame([ExportEngine._plain(r) for r in rows])
        return df.to_csv(index=False)

    # ---------------------------------------------------------------------------
    # JSON exports
    # ---------------------------------------------------------------------------

    @staticmethod
    def to_json(data: Any) -> str:
        """Pretty JSON for a dataclass, a list of them, or plain values."""
        return json.dumps(_jsonable(data), indent=2, allow_nan=False)

    @staticmethod
    def report_to_json(report: AnalyticsReport) -> str:
        return ExportEngine.to_json(report)

    # ---------------------------------------------------------------------------
    # Internal DataFrame builders
    # ---------------------------------------------------------------------------

    @staticmethod
    def _trades_df(trades: Sequence[Trade]) -> pd.DataFrame:
        rows = []
        for t in trades:
            rows.append(
                {
                    "trade_id": t.trade_id,
                    "user_id": t.user_id,
                    "symbol": t.symbol,
                    "type": t.type.value,
                    "entry_time": t.entry_time.isoformat(),
                    "exit_time": t.exit_time.isoformat() if t.exit_time else None,
                    "entry_price": t.entry_price,
                    "exit_price": t.exit_price,
                    "quantity": t.quantity,
                    "profit_loss": t.profit_loss,
                    "strategy": t.strategy,
                    "tags": ";".join(t.tags),
                    "emotional_state": t.emotional_state,
                    "notes": t.notes,
                    "risk": t.risk,
                    "r_multiple": t.r_multiple,
                }
            )
        return pd.DataFrame(rows)

    @staticmethod
    def _plain(row: Any) -> dict[str, Any]:
        """Shallow dataclass -> dict with enums and dates flattened for CSV."""
        out = {}
        for f in fields(row):
            value = getattr(row, f.name)
            if isinstance(value, Enum):
                value = value.value
            elif isinstance(value, (date, datetime)):
                value = value.isoformat()
            out[f.name] = value
        return out


def _jsonable(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: _jsonable(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, (list, tuple, frozenset, set)):
        return [_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value
