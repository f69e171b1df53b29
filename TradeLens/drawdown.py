"""
drawdown.py
-----------
DrawdownAnalyzer walks cumulative P&L in entry-time order.

Metrics computed
----------------
* Maximum drawdown ($ and % of peak equity), one step per trade
* Equity curve: one point per calendar day between the first and the last
  entry date, days without trades included

Both start from an implicit peak of 0 cumulative P&L, so a first losing
trade is already a drawdown against the starting capital.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date, timedelta
from typing import Sequence

from models import DrawdownResult, TimeSeriesPerformance, Trade

DEFAULT_INITIAL_CAPITAL = 10000.0


class DrawdownAnalyzer:
    """Stateless drawdown and equity-curve calculator."""

    @staticmethod
    def sort_by_entry(trades: Sequence[Trade]) -> list[Trade]:
        """Copy of *trades* ordered by entry time (stable on ties)."""
        return sorted(trades, key=lambda t: t.entry_time)

    # ---------------------------------------------------------------------------
    # Max drawdown
    # ---------------------------------------------------------------------------

    @staticmethod
    def max_drawdown(
        trades: Sequence[Trade],
        initial_capital: float = DEFAULT_INITIAL_CAPITAL,
    ) -> DrawdownResult:
        """Largest peak-to-trough decline of cumulative P&L.

        The percentage is the drawdown relative to peak equity
        (``initial_capital + peak``) at the step that produced the largest
        *amount*.  It is not the largest percentage seen: both values only
        move together when the amount sets a new maximum.

        Returns ``DrawdownResult(0, 0)`` for an empty input.
        """
        if not trades:
            return DrawdownResult(0.0, 0.0)

        cumulative = 0.0
        peak = 0.0
        max_dd = 0.0
        max_dd_pct = 0.0

        for t in DrawdownAnalyzer.sort_by_entry(trades):
            cumulative += t.profit_loss
            if cumulative > peak:
                peak = cumulative

            drawdown = peak - cumulative
            if drawdown > max_dd:
                max_dd = drawdown
                max_dd_pct = _percent_of_peak(drawdown, initial_capital + peak)

        return DrawdownResult(amount=max_dd, percentage=max_dd_pct)

    # ---------------------------------------------------------------------------
    # Equity curve
    # ---------------------------------------------------------------------------

    @staticmethod
    def equity_curve(
        trades: Sequence[Trade],
        initial_capital: float = DEFAULT_INITIAL_CAPITAL,
    ) -> list[TimeSeriesPerformance]:
        """Daily equity series from the first to the last entry date, inclusive.

        Days without trades repeat the previous cumulative P&L with a
        ``daily_pnl`` of 0.  Empty input gives an empty list.
        """
        if not trades:
            return []

        daily = DrawdownAnalyzer.pnl_by_date(trades)
        start = min(daily)
        end = max(daily)

        curve: list[TimeSeriesPerformance] = []
        cumulative = 0.0
        peak = 0.0

        for day in _date_range(start, end):
            day_pnl = daily.get(day, 0.0)
            cumulative += day_pnl
            if cumulative > peak:
                peak = cumulative

            drawdown = peak - cumulative
            curve.append(
                TimeSeriesPerformance(
                    date=day,
                    cumulative_pnl=cumulative,
                    daily_pnl=day_pnl,
                    drawdown=drawdown,
                    drawdown_percent=_percent_of_peak(drawdown, initial_capital + peak),
                    equity=initial_capital + cumulative,
                )
            )

        return curve

    @staticmethod
    def pnl_by_date(trades: Sequence[Trade]) -> dict[date, float]:
        """Summed P&L keyed by entry date; only dates that had trades."""
        daily: dict[date, float] = defaultdict(float)
        for t in DrawdownAnalyzer.sort_by_entry(trades):
            daily[t.entry_time.date()] += t.profit_loss
        return dict(daily)


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


def _percent_of_peak(drawdown: float, peak_equity: float) -> float:
    # Wiped-out accounts have no meaningful percentage
    if peak_equity <= 0:
        return 0.0
    return drawdown / peak_equity * 100


def _date_range(start: date, end: date):
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)
