"""
models.py
---------
Immutable domain objects.  ``Trade`` is the only input shape the analytics
modules accept; every other class here is a derived value produced fresh by
a computation and never mutated afterwards.
"""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

from errors import TradeDataError


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class TradeType(Enum):
    """Direction of a position."""

    LONG = "Long"
    SHORT = "Short"


# ---------------------------------------------------------------------------
# Trade  (a single closed position, frozen once created)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Trade:
    """One closed trade as handed over by the journal's persistence layer.

    ``profit_loss`` is trusted exactly as supplied.  Nothing in the analytics
    modules recomputes it from prices and quantity.
    """

    symbol: str
    type: TradeType
    entry_time: datetime
    profit_loss: float
    exit_time: Optional[datetime] = None
    entry_price: float = 0.0
    exit_price: float = 0.0
    quantity: float = 0.0

    # Identity (opaque to the analytics)
    trade_id: str = ""
    user_id: str = ""

    # Journal metadata
    strategy: Optional[str] = None
    tags: tuple[str, ...] = ()
    emotional_state: Optional[str] = None
    notes: Optional[str] = None
    risk: Optional[float] = None
    r_multiple: Optional[float] = None

    def __post_init__(self) -> None:  # noqa: D105
        if not isinstance(self.type, TradeType):
            try:
                object.__setattr__(self, "type", TradeType(self.type))
            except ValueError as exc:
                raise TradeDataError(f"type={self.type!r} must be 'Long' or 'Short'") from exc

        object.__setattr__(self, "entry_time", _as_datetime(self.entry_time, "entry_time"))
        if self.exit_time is not None:
            object.__setattr__(self, "exit_time", _as_datetime(self.exit_time, "exit_time"))

        pnl = self.profit_loss
        if isinstance(pnl, bool) or not isinstance(pnl, numbers.Real):
            raise TradeDataError(f"profit_loss={pnl!r} must be a number")
        if not math.isfinite(pnl):
            raise TradeDataError(f"profit_loss={pnl!r} must be finite")

    @property
    def is_win(self) -> bool:
        return self.profit_loss > 0

    @property
    def is_loss(self) -> bool:
        return self.profit_loss < 0

    @property
    def is_break_even(self) -> bool:
        return self.profit_loss == 0


def _as_datetime(value: Any, name: str) -> datetime:
    """Accept a datetime as-is or parse an ISO-8601 string ("Z" means UTC)."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError as exc:
            raise TradeDataError(f"{name}={value!r} is not an ISO-8601 timestamp") from exc
    raise TradeDataError(f"{name}={value!r} must be a datetime")


# ---------------------------------------------------------------------------
# Summary values
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DrawdownResult:
    """Largest peak-to-trough decline of cumulative P&L."""

    amount: float = 0.0
    percentage: float = 0.0


@dataclass(frozen=True)
class PerformanceMetrics:
    """Flat snapshot of every scalar metric for one set of trades.

    ``max_drawdown_duration`` and ``current_drawdown`` are not computed and
    stay ``None``; a zero there would read as a real measurement.
    """

    # Counts
    total_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    break_even_trades: int = 0
    win_rate: float = 0.0
    profit_factor: float = 0.0

    # P&L
    total_pnl: float = 0.0
    gross_profit: float = 0.0
    gross_loss: float = 0.0          # positive magnitude
    average_win: float = 0.0
    average_loss: float = 0.0        # positive magnitude
    largest_win: float = 0.0
    largest_loss: float = 0.0        # most negative P&L, 0 when no losers
    risk_reward_ratio: float = 0.0

    # Drawdown
    max_drawdown: float = 0.0
    max_drawdown_percent: float = 0.0
    max_drawdown_duration: Optional[int] = None
    current_drawdown: Optional[float] = None

    # Risk-adjusted
    sharpe_ratio: float = 0.0
    sortino_ratio: float = 0.0
    expected_value: float = 0.0


@dataclass(frozen=True)
class TimeSeriesPerformance:
    """One calendar day of the equity curve."""

    date: date
    cumulative_pnl: float
    daily_pnl: float
    drawdown: float
    drawdown_percent: float
    equity: float


# ---------------------------------------------------------------------------
# Breakdown rows
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MonthlyPerformance:
    month: str                       # "Jan 2024"
    month_key: str                   # "2024-01"
    year: int
    trades: int
    win_rate: float
    pnl: float
    avg_daily_pnl: float
    trading_days: int


@dataclass(frozen=True)
class StrategyPerformance:
    strategy: str
    trades: int
    win_rate: float
    pnl: float
    average_return: float
    sharpe_ratio: float


@dataclass(frozen=True)
class SymbolPerformance:
    symbol: str
    trades: int
    win_rate: float
    pnl: float
    average_return: float
    profit_factor: float


@dataclass(frozen=True)
class TradeTypePerformance:
    type: TradeType
    trades: int
    win_rate: float
    pnl: float
    average_return: float
    profit_factor: float


@dataclass(frozen=True)
class TimeOfDayPerformance:
    time_slot: str
    trades: int
    win_rate: float
    pnl: float
    average_return: float
    profit_factor: float


@dataclass(frozen=True)
class HeatmapCell:
    """One (weekday, hour) cell.  Empty cells carry zeros."""

    day: str
    hour: str
    trades: int = 0
    win_rate: float = 0.0
    pnl: float = 0.0


@dataclass(frozen=True)
class TradeDistribution:
    """One histogram bin of the P&L distribution."""

    range: str
    range_start: float
    range_end: float
    count: int
    percentage: float


# ---------------------------------------------------------------------------
# AnalyticsReport  (top-level output bag)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AnalyticsReport:
    """Everything the analytics page renders for one filtered trade set."""

    metrics: PerformanceMetrics
    equity_curve: list[TimeSeriesPerformance] = field(default_factory=list)
    distribution: list[TradeDistribution] = field(default_factory=list)
    monthly: list[MonthlyPerformance] = field(default_factory=list)
    strategies: list[StrategyPerformance] = field(default_factory=list)
    symbols: list[SymbolPerformance] = field(default_factory=list)
    trade_types: list[TradeTypePerformance] = field(default_factory=list)
    time_of_day: list[TimeOfDayPerformance] = field(default_factory=list)
    heatmap: list[HeatmapCell] = field(default_factory=list)
