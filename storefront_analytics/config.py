"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``      — committed static defaults
  2. ``config/local.toml``        — optional local overrides (gitignored)
  3. ``.env``                     — local secrets and env overrides (gitignored)
  4. Environment variables        — ``STOREFRONT_ANALYTICS_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

Business policy (lead times, trend thresholds, RFM bucket edges, ...) lives
here rather than in the algorithms, so a policy change is a TOML edit.
Every engine component receives the relevant policy section at construction.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator, model_validator

# ── Sub-config models ─────────────────────────────────────────────────────────


def _strictly_descending(name: str, values: list) -> None:
    if any(a <= b for a, b in zip(values, values[1:])):
        raise ValueError(f"{name} must be strictly descending, got {values}.")


class DatabaseConfig(BaseModel):
    """SQLite database connection settings."""

    model_config = ConfigDict(frozen=True)

    db_path: str = "data/db/storefront.db"
    wal_mode: bool = True
    busy_timeout_ms: int = 5000


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = "data/logs/analytics.log"
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class ForecastPolicy(BaseModel):
    """Inventory forecasting policy.

    ``risk_*_days`` are inclusive upper bounds: a product with exactly
    ``risk_critical_days`` of stock left is critical.
    """

    model_config = ConfigDict(frozen=True)

    default_window_days: int = 30
    lead_time_days: int = 7
    safety_stock_days: int = 7
    order_horizon_days: int = 30
    increasing_order_horizon_days: int = 60
    trend_threshold_pct: float = 20.0
    stockout_sentinel_days: int = 999
    risk_critical_days: int = 3
    risk_high_days: int = 7
    risk_medium_days: int = 14

    @field_validator("default_window_days", "order_horizon_days", "increasing_order_horizon_days")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"Day counts must be >= 1, got {v}.")
        return v

    @model_validator(mode="after")
    def validate_risk_bands(self) -> "ForecastPolicy":
        _strictly_descending(
            "risk bands (medium, high, critical)",
            [self.risk_medium_days, self.risk_high_days, self.risk_critical_days],
        )
        if self.risk_critical_days < 0:
            raise ValueError("risk_critical_days must be non-negative.")
        return self


class FleetPolicy(BaseModel):
    """Fleet-wide scan settings."""

    model_config = ConfigDict(frozen=True)

    candidate_max_stock: int = 50   # products above this are never scanned
    long_tail_days: int = 365       # excluded from averageDaysToStockout


class RecommendationPolicy(BaseModel):
    """Recommendation strategy defaults."""

    model_config = ConfigDict(frozen=True)

    default_limit: int = 4
    bought_together_limit: int = 3
    trending_window_days: int = 30
    personalized_order_limit: int = 10

    @field_validator(
        "default_limit", "bought_together_limit",
        "trending_window_days", "personalized_order_limit",
    )
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"Recommendation settings must be >= 1, got {v}.")
        return v


class SegmentationPolicy(BaseModel):
    """RFM bucket edges and segment thresholds.

    Each edge list is ordered from the best score (5) downwards. Recency edges
    are "more than N days" boundaries scored from the worst (1) upwards.
    """

    model_config = ConfigDict(frozen=True)

    recency_days: list[int] = [180, 90, 60, 30]
    frequency_orders: list[int] = [20, 10, 5, 2]
    monetary_spent: list[float] = [1000.0, 500.0, 250.0, 100.0]
    vip_min_score: int = 13
    loyal_min_score: int = 10
    regular_min_score: int = 7
    at_risk_inactive_days: int = 90
    at_risk_min_orders: int = 2
    top_categories: int = 5
    uncategorized_label: str = "Uncategorized"

    @field_validator("recency_days", "frequency_orders", "monetary_spent")
    @classmethod
    def validate_edges(cls, v: list) -> list:
        if len(v) != 4:
            raise ValueError(f"RFM edge lists need exactly 4 values, got {len(v)}.")
        _strictly_descending("RFM edges", v)
        return v

    @model_validator(mode="after")
    def validate_segment_thresholds(self) -> "SegmentationPolicy":
        _strictly_descending(
            "segment thresholds (vip, loyal, regular)",
            [self.vip_min_score, self.loyal_min_score, self.regular_min_score],
        )
        return self


class AppConfig(BaseModel):
    """Complete application configuration — the single source of truth."""

    model_config = ConfigDict(frozen=True)

    database: DatabaseConfig = DatabaseConfig()
    logging: LoggingConfig = LoggingConfig()
    forecast: ForecastPolicy = ForecastPolicy()
    fleet: FleetPolicy = FleetPolicy()
    recommendations: RecommendationPolicy = RecommendationPolicy()
    segmentation: SegmentationPolicy = SegmentationPolicy()
    debug: bool = False


# ── Loader ────────────────────────────────────────────────────────────────────

_PROJECT_ROOT = Path(__file__).parent.parent


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (contains pyproject.toml)."""
    candidate = Path(__file__).parent
    for _ in range(5):
        if (candidate / "pyproject.toml").exists():
            return candidate
        candidate = candidate.parent
    return _PROJECT_ROOT


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load and merge application configuration.

    Args:
        config_path: Explicit path to a TOML config file. Defaults to
            ``<project_root>/config/default.toml``.

    Returns:
        Fully validated ``AppConfig`` instance.

    Raises:
        FileNotFoundError: If the specified ``config_path`` does not exist.
        pydantic.ValidationError: If merged config values fail validation.
    """
    root = _find_project_root()

    load_dotenv(dotenv_path=root / ".env", override=False)

    if config_path is None:
        config_path = root / "config" / "default.toml"

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Config file not found: {config_path}\n"
            "Create config/default.toml or pass --config."
        )

    with open(config_path, "rb") as f:
        raw: dict[str, Any] = tomllib.load(f)

    local_config_path = config_path.parent / "local.toml"
    if local_config_path.exists():
        with open(local_config_path, "rb") as f:
            local_raw: dict[str, Any] = tomllib.load(f)
        raw = _deep_merge(raw, local_raw)

    raw = _apply_env_overrides(raw)

    return _build_app_config(raw)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base``."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Apply STOREFRONT_ANALYTICS_* env vars to the raw config dict.

    Supported overrides:
      STOREFRONT_ANALYTICS_DB_PATH    → raw["database"]["db_path"]
      STOREFRONT_ANALYTICS_LOG_LEVEL  → raw["logging"]["level"]
      STOREFRONT_ANALYTICS_DEBUG      → raw["debug"]
    """
    if db_path := os.environ.get("STOREFRONT_ANALYTICS_DB_PATH"):
        raw.setdefault("database", {})["db_path"] = db_path

    if log_level := os.environ.get("STOREFRONT_ANALYTICS_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if debug := os.environ.get("STOREFRONT_ANALYTICS_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    project = raw.pop("project", {})

    return AppConfig(
        database=DatabaseConfig(**raw.get("database", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        forecast=ForecastPolicy(**raw.get("forecast", {})),
        fleet=FleetPolicy(**raw.get("fleet", {})),
        recommendations=RecommendationPolicy(**raw.get("recommendations", {})),
        segmentation=SegmentationPolicy(**raw.get("segmentation", {})),
        debug=raw.get("debug", project.get("debug", False)),
    )
