"""
breakdowns.py
-------------
BreakdownGenerator slices a trade list by a category key and summarises each
slice.

Breakdowns produced
-------------------
* by month (``YYYY-MM`` of entry), with average P&L per *trading* day
* by strategy (missing strategy -> ``"Unknown"``), with Sharpe ratio
* by symbol, with profit factor
* by trade type, ``Long`` and ``Short`` always both present
* by time-of-day slot, empty slots dropped
* weekday x hour heatmap, always the full 7 x 24 grid
* P&L histogram, equal-width bins

Ordering
--------
Category breakdowns come back most profitable first (ties keep first-seen
order).  The heatmap is in grid order (Monday 12am .. Sunday 11pm) and the
histogram in ascending bin order.

Category templates (time slots, weekday and hour labels) are module-level
tuples and are never modified; each call builds its own buckets.
"""

from __future__ import annotations

import math
from typing import Callable, Hashable, NamedTuple, Sequence, TypeVar

from models import (
    HeatmapCell,
    MonthlyPerformance,
    StrategyPerformance,
    SymbolPerformance,
    TimeOfDayPerformance,
    Trade,
    TradeDistribution,
    TradeType,
    TradeTypePerformance,
)
from ratios import DEFAULT_RISK_FREE_RATE, TRADING_DAYS_PER_YEAR, RiskRatios
from stats import TradeStatistics

K = TypeVar("K", bound=Hashable)

UNKNOWN_STRATEGY = "Unknown"

MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

# "12am", "1am", ... "11am", "12pm", "1pm", ... "11pm"
HOUR_LABELS = tuple(
    f"{12 if h % 12 == 0 else h % 12}{'am' if h < 12 else 'pm'}" for h in range(24)
)


class TimeSlot(NamedTuple):
    """Half-open decimal-hour window ``[start, end)``.

    ``end`` may exceed 24 for a window that runs past midnight; hours below
    ``end - 24`` on the next day then belong to it.
    """

    name: str
    start: float
    end: float

    def contains(self, hour: float) -> bool:
        if self.end <= 24:
            return self.start <= hour < self.end
        return hour >= self.start or hour < self.end % 24


TIME_SLOTS = (
    TimeSlot("Pre-Market (4am-9:30am)", 4.0, 9.5),
    TimeSlot("Morning (9:30am-12pm)", 9.5, 12.0),
    TimeSlot("Afternoon (12pm-4pm)", 12.0, 16.0),
    TimeSlot("Evening (4pm-8pm)", 16.0, 20.0),
    TimeSlot("Night (8pm-4am)", 20.0, 28.0),
)


class BreakdownGenerator:
    """Stateless categorical breakdowns."""

    # ---------------------------------------------------------------------------
    # By month
    # ---------------------------------------------------------------------------

    @staticmethod
    def monthly(
        trades: Sequence[Trade],
        chronological: bool = False,
    ) -> list[MonthlyPerformance]:
        """Per-month summary.

        ``avg_daily_pnl`` divides the month's P&L by the number of distinct
        days that had trades, not by the days in the calendar month.

        Parameters
        ----------
        chronological : bool
            Return months in calendar order instead of by P&L.
        """
        groups = _group(trades, lambda t: (t.entry_time.year, t.entry_time.month))

        rows: list[MonthlyPerformance] = []
        for (year, month), group in groups.items():
            pnl = TradeStatistics.total_pnl(group)
            trading_days = len({t.entry_time.date() for t in group})
            rows.append(
                MonthlyPerformance(
                    month=f"{MONTH_ABBREVIATIONS[month - 1]} {year}",
                    month_key=f"{year:04d}-{month:02d}",
                    year=year,
                    trades=len(group),
                    win_rate=TradeStatistics.win_rate(group),
                    pnl=pnl,
                    avg_daily_pnl=pnl / trading_days if trading_days else 0.0,
                    trading_days=trading_days,
                )
            )

        if chronological:
            return sorted(rows, key=lambda r: r.month_key)
        return _by_pnl(rows)

    # ---------------------------------------------------------------------------
    # By strategy / symbol
    # ---------------------------------------------------------------------------

    @staticmethod
    def by_strategy(
        trades: Sequence[Trade],
        risk_free_rate: float = DEFAULT_RISK_FREE_RATE,
        trading_days: int = TRADING_DAYS_PER_YEAR,
    ) -> list[StrategyPerformance]:
        groups = _group(trades, lambda t: t.strategy or UNKNOWN_STRATEGY)

        rows = []
        for strategy, group in groups.items():
            pnl = TradeStatistics.total_pnl(group)
            rows.append(
                StrategyPerformance(
                    strategy=strategy,
                    trades=len(group),
                    win_rate=TradeStatistics.win_rate(group),
                    pnl=pnl,
                    average_return=pnl / len(group),
                    sharpe_ratio=RiskRatios.sharpe_ratio(group, risk_free_rate, trading_days),
                )
            )
        return _by_pnl(rows)

    @staticmethod
    def by_symbol(trades: Sequence[Trade]) -> list[SymbolPerformance]:
        groups = _group(trades, lambda t: t.symbol)

        rows = []
        for symbol, group in groups.items():
            pnl = TradeStatistics.total_pnl(group)
            rows.append(
                SymbolPerformance(
                    symbol=symbol,
                    trades=len(group),
                    win_rate=TradeStatistics.win_rate(group),
                    pnl=pnl,
                    average_return=pnl / len(group),
                    profit_factor=TradeStatistics.profit_factor(group),
                )
            )
        return _by_pnl(rows)

    # ---------------------------------------------------------------------------
    # By trade type
    # ---------------------------------------------------------------------------

    @staticmethod
    def by_trade_type(trades: Sequence[Trade]) -> list[TradeTypePerformance]:
        """Long vs Short.  Both rows are always returned, zeroed when empty."""
        groups: dict[TradeType, list[Trade]] = {tt: [] for tt in TradeType}
        for t in trades:
            groups[t.type].append(t)

        rows = []
        for trade_type, group in groups.items():
            pnl = TradeStatistics.total_pnl(group)
            rows.append(
                TradeTypePerformance(
                    type=trade_type,
                    trades=len(group),
                    win_rate=TradeStatistics.win_rate(group),
                    pnl=pnl,
                    average_return=pnl / len(group) if group else 0.0,
                    profit_factor=TradeStatistics.profit_factor(group),
                )
            )
        return _by_pnl(rows)

    # ---------------------------------------------------------------------------
    # By time of day
    # ---------------------------------------------------------------------------

    @staticmethod
    def time_slot_for(trade: Trade) -> TimeSlot | None:
        """Slot containing the trade's entry wall-clock time, if any."""
        hour = trade.entry_time.hour + trade.entry_time.minute / 60
        for slot in TIME_SLOTS:
            if slot.contains(hour):
                return slot
        return None

    @staticmethod
    def by_time_of_day(trades: Sequence[Trade]) -> list[TimeOfDayPerformance]:
        """Per-session summary.  Slots without trades are omitted."""
        groups: dict[str, list[Trade]] = {slot.name: [] for slot in TIME_SLOTS}
        for t in trades:
            slot = BreakdownGenerator.time_slot_for(t)
            if slot is not None:
                groups[slot.name].append(t)

        rows = []
        for name, group in groups.items():
            if not group:
                continue
            pnl = TradeStatistics.total_pnl(group)
            rows.append(
                TimeOfDayPerformance(
                    time_slot=name,
                    trades=len(group),
                    win_rate=TradeStatistics.win_rate(group),
                    pnl=pnl,
                    average_return=pnl / len(group),
                    profit_factor=TradeStatistics.profit_factor(group),
                )
            )
        return _by_pnl(rows)

    # ---------------------------------------------------------------------------
    # Heatmap
    # ---------------------------------------------------------------------------

    @staticmethod
    def heatmap(trades: Sequence[Trade]) -> list[HeatmapCell]:
        """Weekday x hour grid of 168 cells, Monday first.

        Every cell is emitted, including for an empty trade list, so a
        consumer can render the grid without filling gaps.
        """
        grid: dict[tuple[int, int], list[Trade]] = {}
        for t in trades:
            grid.setdefault((t.entry_time.weekday(), t.entry_time.hour), []).append(t)

        cells = []
        for d, day in enumerate(WEEKDAYS):
            for h, hour in enumerate(HOUR_LABELS):
                group = grid.get((d, h))
                if not group:
                    cells.append(HeatmapCell(day=day, hour=hour))
                    continue
                cells.append(
                    HeatmapCell(
                        day=day,
                        hour=hour,
                        trades=len(group),
                        win_rate=TradeStatistics.win_rate(group),
                        pnl=TradeStatistics.total_pnl(group),
                    )
                )
        return cells

    # ---------------------------------------------------------------------------
    # P&L distribution
    # ---------------------------------------------------------------------------

    @staticmethod
    def pnl_distribution(trades: Sequence[Trade], bins: int = 10) -> list[TradeDistribution]:
        """Histogram of trade P&L over ``[min, max]`` in *bins* equal-width bins.

        When every trade has the same P&L the result is a single bin holding
        all of them.  A trade exactly at the maximum lands in the last bin.

        Raises
        ------
        ValueError
            If *bins* < 1.
        """
        if bins < 1:
            raise ValueError("bins must be >= 1")
        if not trades:
            return []

        values = [t.profit_loss for t in trades]
        low = min(values)
        high = max(values)
        total = len(values)

        if low == high:
            return [
                TradeDistribution(
                    range=f"{low:.2f}",
                    range_start=low,
                    range_end=high,
                    count=total,
                    percentage=100.0,
                )
            ]

        width = (high - low) / bins
        counts = [0] * bins
        for v in values:
            if v == high:
                idx = bins - 1
            else:
                idx = min(int(math.floor((v - low) / width)), bins - 1)
            counts[idx] += 1

        out = []
        for i, count in enumerate(counts):
            start = low + i * width
            end = start + width
            out.append(
                TradeDistribution(
                    range=f"{start:.2f} to {end:.2f}",
                    range_start=start,
                    range_end=end,
                    count=count,
                    percentage=count / total * 100,
                )
            )
        return out


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


def _group(trades: Sequence[Trade], key: Callable[[Trade], K]) -> dict[K, list[Trade]]:
    """Bucket trades by *key*, preserving first-seen key order."""
    groups: dict[K, list[Trade]] = {}
    for t in trades:
        groups.setdefault(key(t), []).append(t)
    return groups


def _by_pnl(rows: list) -> list:
    return sorted(rows, key=lambda r: r.pnl, reverse=True)
