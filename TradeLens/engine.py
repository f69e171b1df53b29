"""
engine.py  (analytics)
----------------------
AnalyticsEngine composes the primitive statistics, drawdown and ratio
calculators into one snapshot, and runs every breakdown to build the full
report an analytics page renders.  No IO, no side effects.

Entry points
------------
* ``calculate_performance_metrics`` -- fail-soft; empty input gives a
  zeroed snapshot
* ``summarise`` -- fail-fast; any unexpected failure surfaces as
  ``MetricsCalculationError``
* ``build_report`` -- ``summarise`` plus every breakdown
"""

from __future__ import annotations

from typing import Optional, Sequence

import structlog

from breakdowns import BreakdownGenerator
from config import AnalyticsConfig
from drawdown import DrawdownAnalyzer
from errors import MetricsCalculationError
from models import AnalyticsReport, PerformanceMetrics, Trade
from ratios import RiskRatios
from stats import TradeStatistics

logger = structlog.get_logger(__name__)


class AnalyticsEngine:
    """Stateless analytics calculator."""

    @staticmethod
    def calculate_performance_metrics(
        trades: Sequence[Trade],
        config: Optional[AnalyticsConfig] = None,
    ) -> PerformanceMetrics:
        """Compute the full PerformanceMetrics snapshot for *trades*.

        Parameters
        ----------
        trades : sequence of Trade
            Any order; drawdown sorts by entry time internally.
        config : AnalyticsConfig, optional
            Supplies initial capital, risk-free rate and the annualisation
            factor.  Defaults to ``AnalyticsConfig()``.

        Returns
        -------
        PerformanceMetrics
            All-zero snapshot when *trades* is empty.
        """
        cfg = config or AnalyticsConfig()

        if not trades:
            return PerformanceMetrics()

        # ------------------------------------------------------------------
        # Counts
        # ------------------------------------------------------------------
        winners = TradeStatistics.winners(trades)
        losers = TradeStatistics.losers(trades)
        break_even = TradeStatistics.break_even(trades)

        # ------------------------------------------------------------------
        # Drawdown  (initial capital drives the percentage)
        # ------------------------------------------------------------------
        drawdown = DrawdownAnalyzer.max_drawdown(trades, cfg.initial_capital)

        metrics = PerformanceMetrics(
            total_trades=len(trades),
            winning_trades=len(winners),
            losing_trades=len(losers),
            break_even_trades=len(break_even),
            win_rate=TradeStatistics.win_rate(trades),
            profit_factor=TradeStatistics.profit_factor(trades),
            total_pnl=TradeStatistics.total_pnl(trades),
            gross_profit=TradeStatistics.gross_profit(trades),
            gross_loss=TradeStatistics.gross_loss(trades),
            average_win=TradeStatistics.average_win(trades),
            average_loss=TradeStatistics.average_loss(trades),
            largest_win=max((t.profit_loss for t in winners), default=0.0),
            largest_loss=min((t.profit_loss for t in losers), default=0.0),
            risk_reward_ratio=TradeStatistics.risk_reward_ratio(trades),
            max_drawdown=drawdown.amount,
            max_drawdown_percent=drawdown.percentage,
            sharpe_ratio=RiskRatios.sharpe_ratio(
                trades, cfg.risk_free_rate, cfg.trading_days_per_year
            ),
            sortino_ratio=RiskRatios.sortino_ratio(
                trades, cfg.risk_free_rate, cfg.trading_days_per_year
            ),
            expected_value=TradeStatistics.expected_value(trades),
        )

        logger.debug(
            "analytics.metrics_computed",
            trades=metrics.total_trades,
            total_pnl=metrics.total_pnl,
        )
        return metrics

    @staticmethod
    def summarise(
        trades: Sequence[Trade],
        config: Optional[AnalyticsConfig] = None,
    ) -> PerformanceMetrics:
        """Strict variant of ``calculate_performance_metrics``.

        Raises
        ------
        MetricsCalculationError
            Wrapping whatever went wrong (malformed trades, non-numeric P&L).
        """
        try:
            return AnalyticsEngine.calculate_performance_metrics(trades, config)
        except (AttributeError, TypeError, ValueError, KeyError) as exc:
            logger.error("analytics.metrics_failed", error=str(exc), exc_info=True)
            raise MetricsCalculationError("Failed to calculate trade metrics") from exc

    @staticmethod
    def build_report(
        trades: Sequence[Trade],
        config: Optional[AnalyticsConfig] = None,
    ) -> AnalyticsReport:
        """Run the snapshot and every breakdown over the same trade list."""
        cfg = config or AnalyticsConfig()

        metrics = AnalyticsEngine.summarise(trades, cfg)

        report = AnalyticsReport(
            metrics=metrics,
            equity_curve=DrawdownAnalyzer.equity_curve(trades, cfg.initial_capital),
            distribution=BreakdownGenerator.pnl_distribution(trades, cfg.distribution_bins),
            monthly=BreakdownGenerator.monthly(trades),
            strategies=BreakdownGenerator.by_strategy(
                trades, cfg.risk_free_rate, cfg.trading_days_per_year
            ),
            symbols=BreakdownGenerator.by_symbol(trades),
            trade_types=BreakdownGenerator.by_trade_type(trades),
            time_of_day=BreakdownGenerator.by_time_of_day(trades),
            heatmap=BreakdownGenerator.heatmap(trades),
        )

        logger.info(
            "analytics.report_built",
            trades=len(trades),
            days=len(report.equity_curve),
            symbols=len(report.symbols),
        )
        return report
