"""
Storefront Analytics — CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Validate inputs.
  4. Open the store and run one engine query (or DB setup / import).
  5. Print an ASCII report, or JSON with ``--json``.

Install and run::

    pip install -e .
    storefront-analytics --help
    storefront-analytics init-db
    storefront-analytics import-data --products products.json --orders orders.json
    storefront-analytics forecast p-123 --window 30
    storefront-analytics scan-fleet --risk critical,high --limit 20 --export out/fleet.csv
    storefront-analytics fleet-summary
    storefront-analytics recommend coPurchase --product-id p-123
    storefront-analytics segment-customer ana@example.com
"""

from __future__ import annotations

import json
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(
    name="storefront-analytics",
    help="Inventory forecasting, recommendations and customer segmentation over storefront order history.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from storefront_analytics.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from storefront_analytics.utils.logging import configure_logging
    configure_logging(config.logging)


def _open(config, db_path: Optional[str] = None):
    from storefront_analytics.db.connection import get_connection

    return get_connection(
        db_path or config.database.db_path,
        wal_mode=config.database.wal_mode,
        busy_timeout_ms=config.database.busy_timeout_ms,
    )


@contextmanager
def _query_engine(config, db_path: Optional[str] = None):
    """Yield an ``AnalyticsEngine`` over a read-only connection.

    A missing database or a failing store query becomes ``[ERROR]`` and
    exit code 1.
    """
    from storefront_analytics.db.connection import get_connection
    from storefront_analytics.engine import AnalyticsEngine
    from storefront_analytics.errors import RepositoryError

    path = db_path or config.database.db_path
    try:
        with get_connection(
            path, busy_timeout_ms=config.database.busy_timeout_ms, read_only=True
        ) as conn:
            yield AnalyticsEngine.from_connection(conn, config)
    except FileNotFoundError:
        typer.echo(
            f"[ERROR] Database not found: {path}. Run init-db or import-data first.", err=True
        )
        raise typer.Exit(code=1)
    except (RepositoryError, sqlite3.Error) as exc:
        typer.echo(f"[ERROR] Query failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _echo_json(model_or_data) -> None:
    if hasattr(model_or_data, "model_dump"):
        model_or_data = model_or_data.model_dump(mode="json", by_alias=True)
    typer.echo(json.dumps(model_or_data, indent=2, default=str))


def _not_found(message: str) -> None:
    typer.echo(f"[NOT FOUND] {message}", err=True)
    raise typer.Exit(code=1)


_CONFIG_OPTION = typer.Option(None, "--config", help="Path to TOML config file.")
_DB_OPTION = typer.Option(None, "--db-path", help="Override DB path from config.")
_JSON_OPTION = typer.Option(False, "--json", help="Print camelCase JSON instead of a table.")


# ── Setup commands ────────────────────────────────────────────────────────────

@app.command("init-db")
def init_db(
    db_path: Optional[str] = _DB_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Create the local products/orders store.

    Safe to run multiple times — all DDL uses IF NOT EXISTS.
    """
    from storefront_analytics.db.schema import ALL_TABLE_NAMES, apply_schema

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    typer.echo(f"Initializing database at: {db_path or config.database.db_path}")
    with _open(config, db_path) as conn:
        apply_schema(conn)

    typer.echo(f"  Tables: {len(ALL_TABLE_NAMES)} created/verified.")
    typer.echo("[OK] Database ready.")


@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = _CONFIG_OPTION,
    show_full: bool = typer.Option(False, "--full", help="Print full config including all fields."),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation.
    """
    config = _load_config_or_exit(config_path)

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Database path:      {config.database.db_path}")
    typer.echo(f"  Forecast window:    {config.forecast.default_window_days}d")
    typer.echo(f"  Lead + safety:      {config.forecast.lead_time_days}d + {config.forecast.safety_stock_days}d")
    typer.echo(f"  Fleet stock cutoff: {config.fleet.candidate_max_stock}")
    typer.echo(f"  Log level:          {config.logging.level}")
    typer.echo(f"  Debug mode:         {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config valid.")


@app.command("import-data")
def import_data(
    products_file: Optional[str] = typer.Option(None, "--products", help="Products export (.json)."),
    orders_file: Optional[str] = typer.Option(None, "--orders", help="Orders export (.json)."),
    db_path: Optional[str] = _DB_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Load storefront product and order exports into the local store.

    Uses UPSERT semantics — existing rows with the same id are replaced.
    """
    from storefront_analytics.db.schema import apply_schema
    from storefront_analytics.ingestion.seed_loader import seed_store

    if not products_file and not orders_file:
        typer.echo("[ERROR] Pass --products and/or --orders.", err=True)
        raise typer.Exit(code=1)

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    paths = [Path(p) if p else None for p in (products_file, orders_file)]
    for path in paths:
        if path is not None and not path.exists():
            typer.echo(f"[ERROR] File not found: {path}", err=True)
            raise typer.Exit(code=1)

    try:
        with _open(config, db_path) as conn:
            apply_schema(conn)
            n_products, n_orders = seed_store(conn, paths[0], paths[1])
    except (ValueError, json.JSONDecodeError) as exc:
        typer.echo(f"[ERROR] Import failed: {exc}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"  Upserted {n_products} product(s) and {n_orders} order(s).")
    typer.echo("[OK] Data imported.")


# ── Forecasting commands ──────────────────────────────────────────────────────

@app.command("forecast")
def forecast(
    product_id: str = typer.Argument(..., help="Product to forecast."),
    window: Optional[int] = typer.Option(None, "--window", "-w", help="Analysis window in days."),
    as_json: bool = _JSON_OPTION,
    db_path: Optional[str] = _DB_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Stockout forecast and reorder guidance for one product."""
    from storefront_analytics.reporting.formatters import format_forecast_detail

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    if window is not None and window < 1:
        typer.echo("[ERROR] --window must be >= 1.", err=True)
        raise typer.Exit(code=1)

    with _query_engine(config, db_path) as engine:
        result = engine.forecast(product_id, window)

    if result is None:
        _not_found(f"Product '{product_id}' does not exist.")
    if as_json:
        _echo_json(result)
    else:
        typer.echo(format_forecast_detail(result, config.forecast.stockout_sentinel_days))


@app.command("scan-fleet")
def scan_fleet(
    risk: Optional[str] = typer.Option(
        None, "--risk", help="Comma-separated risk levels to keep, e.g. critical,high."
    ),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", help="Maximum rows."),
    export: Optional[str] = typer.Option(
        None, "--export", help="Also write results to a .csv or .json file."
    ),
    as_json: bool = _JSON_OPTION,
    db_path: Optional[str] = _DB_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Forecast every low-stock product, most urgent first."""
    from storefront_analytics.reporting.export import export_forecasts, forecasts_to_records
    from storefront_analytics.reporting.formatters import format_forecast_table
    from storefront_analytics.taxonomy import RiskLevel

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    risk_filter = None
    if risk:
        try:
            risk_filter = {RiskLevel(r.strip().lower()) for r in risk.split(",") if r.strip()}
        except ValueError:
            typer.echo(
                f"[ERROR] Unknown risk level in '{risk}'. "
                f"Valid: {', '.join(level.value for level in RiskLevel)}.",
                err=True,
            )
            raise typer.Exit(code=1)
    if limit is not None and limit < 0:
        typer.echo("[ERROR] --limit must be >= 0.", err=True)
        raise typer.Exit(code=1)

    with _query_engine(config, db_path) as engine:
        forecasts = engine.scan_fleet(risk_filter, limit)

    if export:
        try:
            written = export_forecasts(forecasts, Path(export))
        except ValueError as exc:
            typer.echo(f"[ERROR] {exc}", err=True)
            raise typer.Exit(code=1)
        typer.echo(f"  Exported {len(forecasts)} forecast(s) to {written}", err=True)

    if as_json:
        records = forecasts_to_records(forecasts)
        _echo_json({"forecasts": records, "count": len(records)})
    else:
        typer.echo(format_forecast_table(forecasts, config.forecast.stockout_sentinel_days))


@app.command("fleet-summary")
def fleet_summary(
    as_json: bool = _JSON_OPTION,
    db_path: Optional[str] = _DB_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Inventory health counts across all scanned products."""
    from storefront_analytics.reporting.formatters import format_fleet_summary

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    with _query_engine(config, db_path) as engine:
        summary = engine.fleet_summary()

    if as_json:
        _echo_json(summary)
    else:
        typer.echo(format_fleet_summary(summary))


# ── Recommendation / customer commands ────────────────────────────────────────

@app.command("recommend")
def recommend(
    strategy: str = typer.Argument(
        ..., help="coPurchase, categoryAffinity, trending or personalized."
    ),
    product_id: Optional[str] = typer.Option(None, "--product-id", "-p", help="Seed product."),
    customer: Optional[str] = typer.Option(None, "--customer", "-c", help="Customer email."),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", help="Maximum products."),
    as_json: bool = _JSON_OPTION,
    db_path: Optional[str] = _DB_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Product recommendations from one strategy."""
    from storefront_analytics.reporting.formatters import format_recommendations

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    try:
        with _query_engine(config, db_path) as engine:
            result = engine.recommend(
                strategy, product_id=product_id, customer_email=customer, limit=limit
            )
    except ValueError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    if as_json:
        _echo_json(result)
    else:
        typer.echo(format_recommendations(result))


@app.command("segment-customer")
def segment_customer(
    email: str = typer.Argument(..., help="Customer email."),
    as_json: bool = _JSON_OPTION,
    db_path: Optional[str] = _DB_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Lifetime metrics, RFM segment, category preferences and timeline."""
    from storefront_analytics.reporting.formatters import format_customer_analytics

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    with _query_engine(config, db_path) as engine:
        analytics = engine.segment_customer(email)

    if analytics is None:
        _not_found(f"No orders found for customer '{email}'.")
    if as_json:
        _echo_json(analytics)
    else:
        typer.echo(format_customer_analytics(analytics))


if __name__ == "__main__":
    app()
