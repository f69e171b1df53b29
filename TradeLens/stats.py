"""
stats.py
--------
TradeStatistics: the primitive per-trade statistics every other analytics
module is built from.  Pure functions over a sequence of ``Trade``; the
input is never mutated and nothing is cached.

Classification
--------------
``profit_loss > 0`` is a win, ``< 0`` a loss and ``== 0`` break-even.  A
break-even trade counts towards the total (so it lowers the win rate) but
towards neither gross profit nor gross loss.

Zero-division policy
--------------------
Ratios never return NaN.  A zero denominator yields ``inf`` when the
numerator is positive and ``0`` otherwise.
"""

from __future__ import annotations

import math
from typing import Sequence

from models import Trade


class TradeStatistics:
    """Stateless primitive statistics."""

    # ---------------------------------------------------------------------------
    # Partitions
    # ---------------------------------------------------------------------------

    @staticmethod
    def winners(trades: Sequence[Trade]) -> list[Trade]:
        return [t for t in trades if t.profit_loss > 0]

    @staticmethod
    def losers(trades: Sequence[Trade]) -> list[Trade]:
        return [t for t in trades if t.profit_loss < 0]

    @staticmethod
    def break_even(trades: Sequence[Trade]) -> list[Trade]:
        return [t for t in trades if t.profit_loss == 0]

    # ---------------------------------------------------------------------------
    # Sums
    # ---------------------------------------------------------------------------

    @staticmethod
    def total_pnl(trades: Sequence[Trade]) -> float:
        return math.fsum(t.profit_loss for t in trades)

    @staticmethod
    def gross_profit(trades: Sequence[Trade]) -> float:
        """Sum of winning P&L (non-negative)."""
        return math.fsum(t.profit_loss for t in trades if t.profit_loss > 0)

    @staticmethod
    def gross_loss(trades: Sequence[Trade]) -> float:
        """Sum of losing P&L as a positive magnitude."""
        return math.fsum(-t.profit_loss for t in trades if t.profit_loss < 0)

    # ---------------------------------------------------------------------------
    # Rates and averages
    # ---------------------------------------------------------------------------

    @staticmethod
    def win_rate(trades: Sequence[Trade]) -> float:
        """Percentage (0-100) of trades with positive P&L.  0 when empty."""
        if not trades:
            return 0.0
        wins = sum(1 for t in trades if t.profit_loss > 0)
        return wins / len(trades) * 100

    @staticmethod
    def profit_factor(trades: Sequence[Trade]) -> float:
        """Gross profit divided by gross loss.

        A value above 1 means the set made money overall.  With no losses the
        result is ``inf`` if anything was won, else 0.
        """
        if not trades:
            return 0.0
        profit = TradeStatistics.gross_profit(trades)
        loss = TradeStatistics.gross_loss(trades)
        return safe_ratio(profit, loss)

    @staticmethod
    def average_win(trades: Sequence[Trade]) -> float:
        winners = TradeStatistics.winners(trades)
        if not winners:
            return 0.0
        return math.fsum(t.profit_loss for t in winners) / len(winners)

    @staticmethod
    def average_loss(trades: Sequence[Trade]) -> float:
        """Mean losing P&L, reported as a positive magnitude."""
        losers = TradeStatistics.losers(trades)
        if not losers:
            return 0.0
        return math.fsum(-t.profit_loss for t in losers) / len(losers)

    @staticmethod
    def risk_reward_ratio(trades: Sequence[Trade]) -> float:
        """Average win divided by average loss (same policy as profit factor)."""
        return safe_ratio(
            TradeStatistics.average_win(trades),
            TradeStatistics.average_loss(trades),
        )

    @staticmethod
    def expected_value(trades: Sequence[Trade]) -> float:
        """Theoretical edge per trade.

        EV = win_rate * average_win - (1 - win_rate) * average_loss, with the
        win rate as a decimal.
        """
        if not trades:
            return 0.0
        wr = TradeStatistics.win_rate(trades) / 100
        avg_win = TradeStatistics.average_win(trades)
        avg_loss = TradeStatistics.average_loss(trades)
        return wr * avg_win - (1 - wr) * avg_loss


def safe_ratio(numerator: float, denominator: float) -> float:
    """``numerator / denominator`` with the zero-denominator policy applied."""
    if denominator == 0:
        return math.inf if numerator > 0 else 0.0
    return numerator / denominator
