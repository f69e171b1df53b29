"""
loader.py
---------
TradeLoader turns raw journal rows into immutable ``Trade`` objects.

Responsibilities
----------------
1. Accept rows as handed over by persistence (a list of mappings) or as CSV
   text from an export.
2. Validate that every required field is present and typed correctly.
3. Normalise all timestamps to one wall-clock timezone.
4. Return trades in input order; analytics sort where they need to.

Timezone policy
---------------
Naive timestamps are *assumed* to already be in the target zone and are
localised.  Timestamps carrying a UTC offset are converted.  Day and hour
bucketing downstream always uses the wall-clock time in that zone.
"""

from __future__ import annotations

import math
from datetime import datetime
from io import StringIO
from typing import Any, Iterable, Mapping, Optional, Union

import pandas as pd
import pytz
import structlog

from errors import TradeDataError
from models import Trade, TradeType

logger = structlog.get_logger(__name__)

REQUIRED_TRADE_FIELDS = ("symbol", "type", "entry_time", "profit_loss")

NUMERIC_FIELDS = ("entry_price", "exit_price", "quantity", "profit_loss", "risk", "r_multiple")

# CSV header aliases -> canonical field name
COLUMN_ALIASES = {
    "id": "trade_id",
    "pnl": "profit_loss",
    "p&l": "profit_loss",
    "side": "type",
    "direction": "type",
}


class TradeLoader:
    """Stateless trade ingestion + validation."""

    # ---------------------------------------------------------------------------
    # Records (persistence rows)
    # ---------------------------------------------------------------------------

    @staticmethod
    def from_records(records: Iterable[Mapping[str, Any]], tz: str = "UTC") -> list[Trade]:
        """Build trades from mappings shaped like the journal's trade table.

        Parameters
        ----------
        records : iterable of mappings
            Timestamps may be ISO 8601 strings or ``datetime`` objects.
        tz : str
            Target timezone name.

        Raises
        ------
        TradeDataError
            If a required field is missing or a value cannot be coerced.
        """
        zone = _zone(tz)
        trades = [
            TradeLoader._to_trade(row, zone, index) for index, row in enumerate(records)
        ]
        logger.debug("loader.trades_loaded", count=len(trades), tz=tz)
        return trades

    # ---------------------------------------------------------------------------
    # CSV
    # ---------------------------------------------------------------------------

    @staticmethod
    def from_csv(raw: Union[str, StringIO], tz: str = "UTC") -> list[Trade]:
        """Read a trades CSV (header row required).

        Column names are matched case-insensitively, surrounding whitespace is
        ignored and a few common aliases (``pnl``, ``side`` ...) are accepted.
        Empty cells become missing values.
        """
        df = pd.read_csv(raw if isinstance(raw, StringIO) else StringIO(raw), dtype=str)

        rename_map = {}
        for col in df.columns:
            key = col.strip().lower()
            rename_map[col] = COLUMN_ALIASES.get(key, key)
        df = df.rename(columns=rename_map)

        missing = set(REQUIRED_TRADE_FIELDS) - set(df.columns)
        if missing:
            raise TradeDataError(
                f"Trades CSV is missing required columns: {sorted(missing)}. "
                f"Found: {sorted(df.columns)}"
            )

        df = df.astype(object).where(df.notna(), None)
        return TradeLoader.from_records(df.to_dict(orient="records"), tz=tz)

    # ---------------------------------------------------------------------------
    # Private helpers
    # ---------------------------------------------------------------------------

    @staticmethod
    def _to_trade(row: Mapping[str, Any], zone: Any, index: int) -> Trade:
        missing = [f for f in REQUIRED_TRADE_FIELDS if _blank(row.get(f))]
        if missing:
            raise TradeDataError(f"Trade #{index} is missing required fields: {missing}")

        numbers: dict[str, Optional[float]] = {}
        for name in NUMERIC_FIELDS:
            value = row.get(name)
            numbers[name] = None if _blank(value) else _number(value, name, index)

        # Persistence rows name the identity column "id"
        trade_id = row.get("trade_id", row.get("id"))
        exit_raw = row.get("exit_time")
        return Trade(
            trade_id="" if _blank(trade_id) else str(trade_id),
            user_id="" if _blank(row.get("user_id")) else str(row["user_id"]),
            symbol=str(row["symbol"]).strip(),
            type=_trade_type(row["type"], index),
            entry_time=_timestamp(row["entry_time"], zone, "entry_time", index),
            exit_time=None if _blank(exit_raw) else _timestamp(exit_raw, zone, "exit_time", index),
            entry_price=numbers["entry_price"] or 0.0,
            exit_price=numbers["exit_price"] or 0.0,
            quantity=numbers["quantity"] or 0.0,
            profit_loss=numbers["profit_loss"],
            strategy=None if _blank(row.get("strategy")) else str(row["strategy"]),
            tags=_tags(row.get("tags")),
            emotional_state=None if _blank(row.get("emotional_state")) else str(row["emotional_state"]),
            notes=None if _blank(row.get("notes")) else str(row["notes"]),
            risk=numbers["risk"],
            r_multiple=numbers["r_multiple"],
        )


def _zone(tz: str) -> Any:
    try:
        return pytz.timezone(tz)
    except pytz.UnknownTimeZoneError as exc:
        raise TradeDataError(f"Unknown timezone '{tz}'") from exc


def _blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and pd.isna(value):
        return True
    return isinstance(value, str) and not value.strip()


def _number(value: Any, name: str, index: int) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise TradeDataError(f"Trade #{index}: {name}={value!r} is not a number") from exc
    if not math.isfinite(number):
        raise TradeDataError(f"Trade #{index}: {name}={value!r} must be finite")
    return number


def _trade_type(value: Any, index: int) -> TradeType:
    if isinstance(value, TradeType):
        return value
    text = str(value).strip().lower()
    for tt in TradeType:
        if tt.value.lower() == text:
            return tt
    raise TradeDataError(f"Trade #{index}: type={value!r} must be 'Long' or 'Short'")


def _timestamp(value: Any, zone: Any, name: str, index: int) -> datetime:
    """Parse *value* and express it as wall-clock time in *zone*."""
    ts = pd.to_datetime(value, errors="coerce")
    if pd.isna(ts):
        raise TradeDataError(f"Trade #{index}: {name}={value!r} is not a valid timestamp")

    ts = ts.to_pydatetime()
    if ts.tzinfo is None:
        return zone.localize(ts)
    return ts.astimezone(zone)


def _tags(value: Any) -> tuple[str, ...]:
    if _blank(value):
        return ()
    if isinstance(value, str):
        # CSV cells carry tags as "a;b" or "a,b"
        parts = value.replace(";", ",").split(",")
        return tuple(p.strip() for p in parts if p.strip())
    return tuple(str(v) for v in value)
