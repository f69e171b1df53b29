"""
test_config.py
--------------
Unit tests for AnalyticsConfig validation, YAML loading and logging setup.
"""

import logging

import pytest
import structlog

from config import AnalyticsConfig, load_config
from errors import ConfigError
from log_setup import configure_from, configure_logging


class TestAnalyticsConfig:
    """Validation gate tests."""

    def test_defaults_are_valid(self):
        cfg = AnalyticsConfig()
        assert cfg.initial_capital == 10000.0
        assert cfg.risk_free_rate == 0.02
        assert cfg.trading_days_per_year == 252

    def test_non_positive_capital_raises(self):
        with pytest.raises(ConfigError, match="initial_capital"):
            AnalyticsConfig(initial_capital=0)

    def test_risk_free_rate_out_of_range_raises(self):
        with pytest.raises(ConfigError, match="risk_free_rate"):
            AnalyticsConfig(risk_free_rate=1.5)

    def test_zero_bins_raises(self):
        with pytest.raises(ConfigError, match="distribution_bins"):
            AnalyticsConfig(distribution_bins=0)

    def test_unknown_timezone_raises(self):
        with pytest.raises(ConfigError, match="timezone"):
            AnalyticsConfig(timezone="Nowhere/Special")

    def test_bad_log_format_raises(self):
        with pytest.raises(ConfigError, match="log_format"):
            AnalyticsConfig(log_format="xml")

    def test_config_error_is_value_error(self):
        with pytest.raises(ValueError):
            AnalyticsConfig(trading_days_per_year=0)

    def test_frozen(self):
        cfg = AnalyticsConfig()
        with pytest.raises(AttributeError):
            cfg.initial_capital = 1.0  # type: ignore[misc]


class TestLoadConfig:
    def test_bundled_defaults(self):
        assert load_config() == AnalyticsConfig()

    def test_override_file(self, tmp_path):
        path = tmp_path / "analytics.yaml"
        path.write_text("initial_capital: 50000\ntimezone: America/New_York\n")
        cfg = load_config(path)
        assert cfg.initial_capital == 50000
        assert cfg.timezone == "America/New_York"
        assert cfg.distribution_bins == 10

    def test_empty_file_is_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(path) == AnalyticsConfig()

    def test_unknown_key(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("initial_capitol: 5\n")
        with pytest.raises(ConfigError, match="initial_capitol"):
            load_config(path)

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(path)


class TestLogging:
    def teardown_method(self):
        structlog.reset_defaults()
        logging.getLogger().handlers.clear()

    def test_json_logging(self, capsys):
        configure_logging("INFO", "json")
        structlog.get_logger("test").info("analytics.test_event", trades=3)
        err = capsys.readouterr().err
        assert '"event": "analytics.test_event"' in err
        assert '"trades": 3' in err

    def test_level_filters(self, capsys):
        configure_from(AnalyticsConfig(log_level="WARNING"))
        assert logging.getLogger().level == logging.WARNING
        structlog.get_logger("test").info("analytics.hidden")
        assert "analytics.hidden" not in capsys.readouterr().err

    def test_bad_level(self):
        with pytest.raises(ConfigError):
            configure_logging("LOUD")
