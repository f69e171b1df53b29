"""
filters.py
----------
TradeFilter narrows a trade list before analytics run, the way the
analytics page does: first a look-back period, then any advanced filters.

Filter semantics
----------------
Every active constraint must hold (logical AND).  An empty collection or
``None`` bound means "no constraint".  A trade without a strategy fails an
active strategy filter.  Tags match when the trade carries *any* of the
selected tags.  Date bounds are inclusive and compare against entry time;
when only one side of a comparison is timezone-aware, the naive side is read
as wall-clock time in the other side's zone.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Sequence

import pandas as pd
import pytz

from models import Trade, TradeType


class TimePeriod(Enum):
    """Look-back windows offered by the analytics page."""

    WEEK = "7d"
    MONTH = "30d"
    QUARTER = "90d"
    YEAR = "1y"
    ALL = "all"


_PERIOD_OFFSETS = {
    TimePeriod.WEEK: pd.DateOffset(days=7),
    TimePeriod.MONTH: pd.DateOffset(days=30),
    TimePeriod.QUARTER: pd.DateOffset(days=90),
    TimePeriod.YEAR: pd.DateOffset(years=1),
}


@dataclass(frozen=True)
class FilterOptions:
    """Advanced filter selection.  Defaults select everything."""

    symbols: frozenset[str] = frozenset()
    strategies: frozenset[str] = frozenset()
    trade_types: frozenset[TradeType] = frozenset()
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    min_pnl: Optional[float] = None
    max_pnl: Optional[float] = None
    tags: frozenset[str] = frozenset()

    def __post_init__(self) -> None:  # noqa: D105
        if self.start is not None and self.end is not None:
            if not _not_before(self.end, self.start):
                raise ValueError("start must be <= end")
        if self.min_pnl is not None and self.max_pnl is not None and self.min_pnl > self.max_pnl:
            raise ValueError("min_pnl must be <= max_pnl")


@dataclass(frozen=True)
class AvailableValues:
    """Distinct values present in a trade list, sorted, for filter pickers."""

    symbols: tuple[str, ...]
    strategies: tuple[str, ...]
    tags: tuple[str, ...]


class TradeFilter:
    """Stateless trade selection."""

    @staticmethod
    def by_time_period(
        trades: Sequence[Trade],
        period: TimePeriod,
        now: Optional[datetime] = None,
    ) -> list[Trade]:
        """Keep trades entered on or after ``now - period``.

        *now* defaults to the current time in the timezone of the first
        trade, so aware and naive timestamps are never compared.
        """
        if period is TimePeriod.ALL or not trades:
            return list(trades)

        if now is None:
            now = datetime.now(trades[0].entry_time.tzinfo)
        cutoff = (pd.Timestamp(now) - _PERIOD_OFFSETS[period]).to_pydatetime()
        return [t for t in trades if _not_before(t.entry_time, cutoff)]

    @staticmethod
    def apply(trades: Sequence[Trade], options: FilterOptions) -> list[Trade]:
        """Keep the trades that satisfy every active constraint in *options*."""
        return [t for t in trades if TradeFilter.matches(t, options)]

    @staticmethod
    def matches(trade: Trade, options: FilterOptions) -> bool:
        if options.symbols and trade.symbol not in options.symbols:
            return False
        if options.strategies and trade.strategy not in options.strategies:
            return False
        if options.trade_types and trade.type not in options.trade_types:
            return False
        if options.start is not None and not _not_before(trade.entry_time, options.start):
            return False
        if options.end is not None and not _not_before(options.end, trade.entry_time):
            return False
        if options.min_pnl is not None and trade.profit_loss < options.min_pnl:
            return False
        if options.max_pnl is not None and trade.profit_loss > options.max_pnl:
            return False
        if options.tags and options.tags.isdisjoint(trade.tags):
            return False
        return True

    @staticmethod
    def available_values(trades: Sequence[Trade]) -> AvailableValues:
        return AvailableValues(
            symbols=tuple(sorted({t.symbol for t in trades})),
            strategies=tuple(sorted({t.strategy for t in trades if t.strategy})),
            tags=tuple(sorted({tag for t in trades for tag in t.tags})),
        )


def _not_before(value: datetime, bound: datetime) -> bool:
    """``value >= bound``, reading a naive side as wall-clock time in the other's zone."""
    if value.tzinfo is None and bound.tzinfo is not None:
        value = _localize(value, bound.tzinfo)
    elif value.tzinfo is not None and bound.tzinfo is None:
        bound = _localize(bound, value.tzinfo)
    return value >= bound


def _localize(naive: datetime, tzinfo) -> datetime:
    zone = getattr(tzinfo, "zone", None)
    if zone is not None:
        return pytz.timezone(zone).localize(naive)
    return naive.replace(tzinfo=tzinfo)
