"""
ratios.py
---------
RiskRatios: annualised Sharpe and Sortino ratios over *daily* P&L.

Daily returns are the P&L summed per entry date, for dates that actually
had trades.  Unlike the equity curve, idle calendar days are not inserted as
zero returns.
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from drawdown import DrawdownAnalyzer
from models import Trade

DEFAULT_RISK_FREE_RATE = 0.02
TRADING_DAYS_PER_YEAR = 252

# Float noise on identical daily returns
_FLAT_EPSILON = 1e-12


class RiskRatios:
    """Stateless risk-adjusted return calculator."""

    @staticmethod
    def daily_returns(trades: Sequence[Trade]) -> np.ndarray:
        """Per-trading-day P&L, ordered by date."""
        daily = DrawdownAnalyzer.pnl_by_date(trades)
        return np.array([daily[d] for d in sorted(daily)], dtype=float)

    @staticmethod
    def sharpe_ratio(
        trades: Sequence[Trade],
        risk_free_rate: float = DEFAULT_RISK_FREE_RATE,
        trading_days: int = TRADING_DAYS_PER_YEAR,
    ) -> float:
        """Annualised Sharpe ratio.

        Parameters
        ----------
        trades : sequence of Trade
        risk_free_rate : float
            Annual rate as a decimal; spread evenly over *trading_days*.
        trading_days : int
            Annualisation factor (sqrt of it scales the daily ratio).

        Returns
        -------
        float
            0 with fewer than two trading days or zero volatility.
        """
        returns = RiskRatios.daily_returns(trades)
        if len(returns) < 2:
            return 0.0

        std = float(np.std(returns, ddof=1))
        if std < _FLAT_EPSILON:
            return 0.0

        excess = float(np.mean(returns)) - risk_free_rate / trading_days
        return excess / std * math.sqrt(trading_days)

    @staticmethod
    def sortino_ratio(
        trades: Sequence[Trade],
        risk_free_rate: float = DEFAULT_RISK_FREE_RATE,
        trading_days: int = TRADING_DAYS_PER_YEAR,
    ) -> float:
        """Annualised Sortino ratio.

        Downside deviation is the root mean square of the negative daily
        returns measured against a target of 0 (not the mean).  With no
        losing day there is no downside risk and the result is ``inf``.
        """
        returns = RiskRatios.daily_returns(trades)
        if len(returns) < 2:
            return 0.0

        downside = returns[returns < 0]
        if downside.size == 0:
            return math.inf

        downside_dev = math.sqrt(float(np.mean(downside**2)))
        if downside_dev == 0:
            return 0.0

        excess = float(np.mean(returns)) - risk_free_rate / trading_days
        return excess / downside_dev * math.sqrt(trading_days)
