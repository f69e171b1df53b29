"""
test_analytics.py
-----------------
Unit tests for AnalyticsEngine: the metrics snapshot, the strict summary
path and full report assembly.
"""

import math
from datetime import datetime

import pytest

from breakdowns import BreakdownGenerator
from config import AnalyticsConfig
from drawdown import DrawdownAnalyzer
from engine import AnalyticsEngine
from errors import MetricsCalculationError
from models import PerformanceMetrics, Trade, TradeType


def _trade(trade_id, pnl, day=None, symbol="AAPL", trade_type=TradeType.LONG, strategy=None):
    return Trade(
        trade_id=str(trade_id),
        symbol=symbol,
        type=trade_type,
        entry_time=datetime(2024, 1, day or trade_id, 10, 0),
        exit_time=datetime(2024, 1, day or trade_id, 15, 0),
        entry_price=100.0,
        exit_price=101.0,
        quantity=10,
        profit_loss=pnl,
        strategy=strategy,
    )


class TestPerformanceMetricsBasic:
    """Core snapshot computation."""

    def test_worked_example(self):
        trades = [_trade(1, 100.0), _trade(2, -50.0)]
        m = AnalyticsEngine.calculate_performance_metrics(trades)

        assert m.total_trades == 2
        assert m.winning_trades == 1
        assert m.losing_trades == 1
        assert m.break_even_trades == 0
        assert m.win_rate == 50.0
        assert m.profit_factor == 2.0
        assert m.total_pnl == 50.0
        assert m.gross_profit == 100.0
        assert m.gross_loss == 50.0
        assert m.average_win == 100.0
        assert m.average_loss == 50.0
        assert m.largest_win == 100.0
        assert m.largest_loss == -50.0
        assert m.risk_reward_ratio == 2.0
        assert m.max_drawdown == 50.0
        assert m.expected_value == pytest.approx(25.0)

    def test_mixed_with_break_even(self):
        trades = [
            _trade(1, 0.50),
            _trade(2, -2.0),
            _trade(3, 0.0),
            _trade(4, 1.50),
        ]
        m = AnalyticsEngine.calculate_performance_metrics(trades)

        assert m.total_trades == 4
        assert m.winning_trades == 2
        assert m.losing_trades == 1
        assert m.break_even_trades == 1
        assert m.win_rate == 50.0
        assert m.largest_win == 1.50
        assert m.largest_loss == -2.0
        assert m.total_pnl == pytest.approx(0.0)

    def test_all_wins(self):
        trades = [_trade(i, 0.50) for i in range(1, 6)]
        m = AnalyticsEngine.calculate_performance_metrics(trades)

        assert m.win_rate == 100.0
        assert m.profit_factor == math.inf
        assert m.sortino_ratio == math.inf
        assert m.max_drawdown == 0.0
        assert m.largest_loss == 0.0

    def test_single_break_even_trade(self):
        m = AnalyticsEngine.calculate_performance_metrics([_trade(1, 0.0)])
        assert m.win_rate == 0.0
        assert m.profit_factor == 0.0
        assert m.break_even_trades == 1

    def test_unimplemented_fields_are_not_computed(self):
        m = AnalyticsEngine.calculate_performance_metrics([_trade(1, 10.0), _trade(2, -5.0)])
        assert m.max_drawdown_duration is None
        assert m.current_drawdown is None

    def test_config_drives_drawdown_percent(self):
        trades = [_trade(1, -100.0)]
        m = AnalyticsEngine.calculate_performance_metrics(
            trades, AnalyticsConfig(initial_capital=1000.0)
        )
        assert m.max_drawdown_percent == pytest.approx(10.0)

    def test_idempotent(self):
        trades = [_trade(1, 100.0), _trade(2, -50.0), _trade(3, 20.0)]
        first = AnalyticsEngine.calculate_performance_metrics(trades)
        second = AnalyticsEngine.calculate_performance_metrics(trades)
        assert first == second


class TestGeneratorsAreIdempotent:
    """Every generator returns equal results for the same input, and leaves it alone."""

    TRADES = [
        _trade(1, 100.0, symbol="AAPL", strategy="Breakout"),
        _trade(2, -60.0, day=2, symbol="MSFT", trade_type=TradeType.SHORT),
        _trade(3, 0.0, day=5, symbol="AAPL", strategy="Fade"),
        _trade(4, 35.0, day=5, symbol="TSLA", strategy="Breakout"),
    ]

    @pytest.mark.parametrize(
        "generate",
        [
            BreakdownGenerator.monthly,
            BreakdownGenerator.by_strategy,
            BreakdownGenerator.by_symbol,
            BreakdownGenerator.by_trade_type,
            BreakdownGenerator.by_time_of_day,
            BreakdownGenerator.heatmap,
            BreakdownGenerator.pnl_distribution,
            DrawdownAnalyzer.equity_curve,
            DrawdownAnalyzer.max_drawdown,
            AnalyticsEngine.build_report,
        ],
        ids=lambda fn: fn.__qualname__,
    )
    def test_call_twice(self, generate):
        before = list(self.TRADES)
        first = generate(self.TRADES)
        second = generate(self.TRADES)
        assert first == second
        assert self.TRADES == before


class TestPerformanceMetricsEdgeCases:
    def test_zero_trades(self):
        m = AnalyticsEngine.calculate_performance_metrics([])
        assert m == PerformanceMetrics()
        assert m.total_trades == 0
        assert m.win_rate == 0.0
        assert m.sharpe_ratio == 0.0
        assert m.max_drawdown_duration is None


class TestSummarise:
    def test_matches_fail_soft_result(self):
        trades = [_trade(1, 100.0), _trade(2, -50.0)]
        assert AnalyticsEngine.summarise(trades) == AnalyticsEngine.calculate_performance_metrics(
            trades
        )

    def test_empty_is_not_an_error(self):
        assert AnalyticsEngine.summarise([]) == PerformanceMetrics()

    def test_malformed_pnl_raises(self):
        bad = _trade(1, 0.0)
        # Simulate a record corrupted after validation
        object.__setattr__(bad, "profit_loss", "oops")
        with pytest.raises(MetricsCalculationError, match="Failed to calculate trade metrics") as info:
            AnalyticsEngine.summarise([bad, _trade(2, 5.0)])
        assert isinstance(info.value.__cause__, TypeError)

    def test_wrong_shape_raises(self):
        with pytest.raises(MetricsCalculationError):
            AnalyticsEngine.summarise([{"profit_loss": 5.0}])


class TestBuildReport:
    def test_sections_populated(self):
        trades = [
            _trade(1, 100.0, symbol="AAPL", strategy="Breakout"),
            _trade(3, -50.0, symbol="MSFT", trade_type=TradeType.SHORT),
            _trade(4, 25.0, symbol="AAPL", strategy="Breakout"),
        ]
        report = AnalyticsEngine.build_report(trades)

        assert report.metrics.total_trades == 3
        assert len(report.equity_curve) == 4  # Jan 1 .. Jan 4
        assert len(report.heatmap) == 168
        assert len(report.distribution) == 10
        assert [s.symbol for s in report.symbols] == ["AAPL", "MSFT"]
        assert [s.strategy for s in report.strategies] == ["Breakout", "Unknown"]
        assert {t.type for t in report.trade_types} == {TradeType.LONG, TradeType.SHORT}
        assert report.monthly[0].month == "Jan 2024"

    def test_distribution_bins_from_config(self):
        trades = [_trade(1, -10.0), _trade(2, 10.0)]
        report = AnalyticsEngine.build_report(trades, AnalyticsConfig(distribution_bins=4))
        assert len(report.distribution) == 4

    def test_empty(self):
        report = AnalyticsEngine.build_report([])
        assert report.metrics == PerformanceMetrics()
        assert report.equity_curve == []
        assert len(report.heatmap) == 168
        assert [t.trades for t in report.trade_types] == [0, 0]
