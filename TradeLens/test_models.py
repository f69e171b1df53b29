"""
test_models.py
--------------
Unit tests for the frozen dataclass domain objects.
"""

from datetime import date, datetime, timezone

import pytest

from breakdowns import BreakdownGenerator
from errors import TradeDataError
from models import (
    AnalyticsReport,
    HeatmapCell,
    PerformanceMetrics,
    Trade,
    TradeType,
)


class TestTrade:
    """Trade immutability + classification."""

    def _make_trade(self, **kwargs):
        defaults = dict(
            symbol="AAPL",
            type=TradeType.LONG,
            entry_time=datetime(2024, 1, 15, 10, 0),
            profit_loss=12.5,
        )
        defaults.update(kwargs)
        return Trade(**defaults)

    def test_construction_defaults(self):
        t = self._make_trade()
        assert t.strategy is None
        assert t.tags == ()
        assert t.exit_time is None
        assert t.trade_id == ""

    def test_frozen(self):
        t = self._make_trade()
        with pytest.raises(AttributeError):
            t.profit_loss = 999  # type: ignore[misc]

    @pytest.mark.parametrize(
        "pnl, win, loss, flat",
        [(5.0, True, False, False), (-5.0, False, True, False), (0.0, False, False, True)],
    )
    def test_classification(self, pnl, win, loss, flat):
        t = self._make_trade(profit_loss=pnl)
        assert (t.is_win, t.is_loss, t.is_break_even) == (win, loss, flat)

    def test_type_values(self):
        assert TradeType("Long") is TradeType.LONG
        assert TradeType("Short") is TradeType.SHORT

    def test_type_string_is_coerced(self):
        t = self._make_trade(type="Short")
        assert t.type is TradeType.SHORT

    def test_unknown_type_raises(self):
        with pytest.raises(TradeDataError, match="type"):
            self._make_trade(type="Sideways")

    def test_iso_entry_time_is_parsed(self):
        t = self._make_trade(entry_time="2024-01-15T10:00:00Z", exit_time="2024-01-15T11:30:00")
        assert t.entry_time == datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc)
        assert t.exit_time == datetime(2024, 1, 15, 11, 30)

    def test_bad_entry_time_raises(self):
        with pytest.raises(TradeDataError, match="entry_time"):
            self._make_trade(entry_time="yesterday")
        with pytest.raises(TradeDataError, match="entry_time"):
            self._make_trade(entry_time=date(2024, 1, 15))

    @pytest.mark.parametrize("pnl", ["12.5", None, True, float("inf"), float("nan")])
    def test_bad_profit_loss_raises(self, pnl):
        with pytest.raises(TradeDataError, match="profit_loss"):
            self._make_trade(profit_loss=pnl)

    def test_validation_error_is_value_error(self):
        with pytest.raises(ValueError):
            self._make_trade(profit_loss="oops")

    def test_validated_trade_flows_through_breakdowns(self):
        t = self._make_trade(type="Long", entry_time="2024-01-15T10:00:00")
        rows = BreakdownGenerator.by_trade_type([t])
        assert rows[0].type is TradeType.LONG
        assert rows[0].trades == 1


class TestDerivedValues:
    def test_metrics_default_is_zeroed(self):
        m = PerformanceMetrics()
        assert m.total_trades == 0
        assert m.profit_factor == 0.0
        assert m.max_drawdown_duration is None
        assert m.current_drawdown is None

    def test_heatmap_cell_defaults(self):
        cell = HeatmapCell(day="Monday", hour="9am")
        assert (cell.trades, cell.win_rate, cell.pnl) == (0, 0.0, 0.0)

    def test_report_frozen(self):
        report = AnalyticsReport(metrics=PerformanceMetrics())
        with pytest.raises(AttributeError):
            report.metrics = PerformanceMetrics(total_trades=1)  # type: ignore[misc]
