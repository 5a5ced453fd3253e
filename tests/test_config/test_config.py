"""Tests for storefront_analytics.config — layering, env overrides, policy validation."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from storefront_analytics.config import (
    AppConfig,
    ForecastPolicy,
    LoggingConfig,
    RecommendationPolicy,
    SegmentationPolicy,
    _deep_merge,
    load_config,
)
from storefront_analytics.utils.logging import configure_logging

_ENV_VARS = (
    "STOREFRONT_ANALYTICS_DB_PATH",
    "STOREFRONT_ANALYTICS_LOG_LEVEL",
    "STOREFRONT_ANALYTICS_DEBUG",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def _write_toml(directory: Path, text: str) -> Path:
    path = directory / "config.toml"
    path.write_text(text, encoding="utf-8")
    return path


# ── Loader ────────────────────────────────────────────────────────────────────

class TestLoadConfig:
    def test_committed_defaults_load(self):
        config = load_config()
        assert config.forecast.default_window_days == 30
        assert config.forecast.stockout_sentinel_days == 999
        assert config.fleet.candidate_max_stock == 50
        assert config.recommendations.default_limit == 4
        assert config.segmentation.recency_days == [180, 90, 60, 30]

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "absent.toml")

    def test_partial_file_falls_back_to_defaults(self, tmp_path):
        path = _write_toml(tmp_path, "[forecast]\nlead_time_days = 10\n")
        config = load_config(path)
        assert config.forecast.lead_time_days == 10
        assert config.forecast.safety_stock_days == 7
        assert config.recommendations.bought_together_limit == 3

    def test_local_toml_overrides(self, tmp_path):
        path = _write_toml(tmp_path, "[fleet]\ncandidate_max_stock = 50\nlong_tail_days = 365\n")
        (tmp_path / "local.toml").write_text("[fleet]\ncandidate_max_stock = 25\n", encoding="utf-8")
        config = load_config(path)
        assert config.fleet.candidate_max_stock == 25
        assert config.fleet.long_tail_days == 365

    def test_env_overrides(self, tmp_path, monkeypatch):
        path = _write_toml(tmp_path, "[database]\ndb_path = \"a.db\"\n")
        monkeypatch.setenv("STOREFRONT_ANALYTICS_DB_PATH", "/tmp/override.db")
        monkeypatch.setenv("STOREFRONT_ANALYTICS_LOG_LEVEL", "debug")
        monkeypatch.setenv("STOREFRONT_ANALYTICS_DEBUG", "true")
        config = load_config(path)
        assert config.database.db_path == "/tmp/override.db"
        assert config.logging.level == "DEBUG"
        assert config.debug is True

    def test_invalid_values_raise_validation_error(self, tmp_path):
        path = _write_toml(tmp_path, "[segmentation]\nrecency_days = [30, 60, 90, 180]\n")
        with pytest.raises(ValidationError):
            load_config(path)


def test_deep_merge_nested() -> None:
    merged = _deep_merge({"a": {"x": 1, "y": 2}, "b": 1}, {"a": {"y": 3}, "c": 4})
    assert merged == {"a": {"x": 1, "y": 3}, "b": 1, "c": 4}


# ── Policy validation ─────────────────────────────────────────────────────────

class TestPolicyValidation:
    def test_defaults(self):
        config = AppConfig()
        assert config.forecast.increasing_order_horizon_days == 60
        assert config.segmentation.at_risk_min_orders == 2

    def test_risk_bands_must_descend(self):
        with pytest.raises(ValidationError):
            ForecastPolicy(risk_critical_days=7, risk_high_days=7, risk_medium_days=14)

    def test_window_must_be_positive(self):
        with pytest.raises(ValidationError):
            ForecastPolicy(default_window_days=0)

    def test_edges_need_four_values(self):
        with pytest.raises(ValidationError):
            SegmentationPolicy(frequency_orders=[20, 10, 5])

    def test_segment_thresholds_must_descend(self):
        with pytest.raises(ValidationError):
            SegmentationPolicy(vip_min_score=10, loyal_min_score=10)

    def test_recommendation_limits_positive(self):
        with pytest.raises(ValidationError):
            RecommendationPolicy(default_limit=0)

    def test_log_level_normalized(self):
        assert LoggingConfig(level="warning").level == "WARNING"
        with pytest.raises(ValidationError):
            LoggingConfig(level="chatty")

    def test_frozen(self):
        config = AppConfig()
        with pytest.raises(ValidationError):
            config.forecast.lead_time_days = 3


# ── Logging setup ─────────────────────────────────────────────────────────────

def test_configure_logging_json_file(tmp_path) -> None:
    log_file = tmp_path / "logs" / "analytics.log"
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    configure_logging(LoggingConfig(level="INFO", log_file=str(log_file), json_format=True))
    try:
        logging.getLogger("storefront_analytics.test").info("hello", extra={"product_id": "p1"})
        for handler in root.handlers:
            handler.flush()
        line = log_file.read_text(encoding="utf-8").strip().splitlines()[-1]
        assert '"msg": "hello"' in line
        assert '"product_id": "p1"' in line
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
