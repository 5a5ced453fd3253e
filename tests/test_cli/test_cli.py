"""CLI smoke tests: every command against a temporary on-disk store."""

from __future__ import annotations

import json
import logging
from datetime import timedelta
from pathlib import Path

import pytest
from typer.testing import CliRunner

from storefront_analytics.cli import app
from storefront_analytics.utils.time_utils import utcnow

runner = CliRunner()


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    yield
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "config.toml"
    path.write_text(
        "[database]\n"
        f'db_path = "{(tmp_path / "db" / "store.db").as_posix()}"\n'
        "wal_mode = false\n"
        "[logging]\n"
        'level = "ERROR"\n'
        'log_file = ""\n',
        encoding="utf-8",
    )
    return path


@pytest.fixture
def exports(tmp_path: Path) -> tuple[Path, Path]:
    now = utcnow()
    products = [
        {"id": "p1", "name": "Oak Bowl", "price": 20.0, "category": "Bowls", "material": "Oak",
         "stock": 3, "createdAt": (now - timedelta(days=90)).isoformat()},
        {"id": "p2", "name": "Oak Spoon", "price": 5.0, "category": "Spoons", "material": "Oak",
         "stock": 10, "createdAt": (now - timedelta(days=60)).isoformat()},
    ]
    orders = [
        {"id": "o1", "customerEmail": "ana@example.com", "total": 305.0,
         "createdAt": (now - timedelta(days=2)).isoformat(),
         "items": [{"id": "p1", "quantity": 15, "price": 20.0},
                   {"id": "p2", "quantity": 1, "price": 5.0}]},
    ]
    products_path = tmp_path / "products.json"
    orders_path = tmp_path / "orders.json"
    products_path.write_text(json.dumps(products), encoding="utf-8")
    orders_path.write_text(json.dumps(orders), encoding="utf-8")
    return products_path, orders_path


@pytest.fixture
def loaded(config_file, exports) -> Path:
    products_path, orders_path = exports
    result = runner.invoke(app, [
        "import-data", "--products", str(products_path), "--orders", str(orders_path),
        "--config", str(config_file),
    ])
    assert result.exit_code == 0, result.output
    assert "Upserted 2 product(s) and 1 order(s)." in result.output
    return config_file


def test_validate_config(config_file) -> None:
    result = runner.invoke(app, ["validate-config", "--config", str(config_file)])
    assert result.exit_code == 0
    assert "[OK] Config valid." in result.output


def test_validate_config_missing_file(tmp_path) -> None:
    result = runner.invoke(app, ["validate-config", "--config", str(tmp_path / "nope.toml")])
    assert result.exit_code == 1
    assert "[ERROR]" in result.output


def test_init_db(config_file, tmp_path) -> None:
    result = runner.invoke(app, ["init-db", "--config", str(config_file)])
    assert result.exit_code == 0
    assert "[OK] Database ready." in result.output
    assert (tmp_path / "db" / "store.db").exists()


def test_import_requires_a_file(config_file) -> None:
    result = runner.invoke(app, ["import-data", "--config", str(config_file)])
    assert result.exit_code == 1


def test_forecast_json(loaded) -> None:
    result = runner.invoke(app, ["forecast", "p1", "--json", "--config", str(loaded)])
    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["productId"] == "p1"
    assert data["averageDailySales"] == 0.5
    assert data["daysUntilStockout"] == 6
    assert data["riskLevel"] == "high"


def test_forecast_not_found(loaded) -> None:
    result = runner.invoke(app, ["forecast", "ghost", "--config", str(loaded)])
    assert result.exit_code == 1
    assert "[NOT FOUND]" in result.output


def test_scan_fleet_table_and_export(loaded, tmp_path) -> None:
    out = tmp_path / "out" / "fleet.csv"
    result = runner.invoke(app, ["scan-fleet", "--export", str(out), "--config", str(loaded)])
    assert result.exit_code == 0, result.output
    assert "Oak Bowl (p1)" in result.output
    assert out.read_text(encoding="utf-8").startswith("productId,")


def test_scan_fleet_rejects_unknown_risk(loaded) -> None:
    result = runner.invoke(app, ["scan-fleet", "--risk", "urgent", "--config", str(loaded)])
    assert result.exit_code == 1
    assert "Unknown risk level" in result.output


def test_fleet_summary_json(loaded) -> None:
    result = runner.invoke(app, ["fleet-summary", "--json", "--config", str(loaded)])
    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["total"] == 2
    assert data["high"] == 1


def test_recommend(loaded) -> None:
    result = runner.invoke(
        app, ["recommend", "coPurchase", "--product-id", "p1", "--json", "--config", str(loaded)]
    )
    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert [p["productId"] for p in data["products"]] == ["p2"]


def test_recommend_missing_argument(loaded) -> None:
    result = runner.invoke(app, ["recommend", "personalized", "--config", str(loaded)])
    assert result.exit_code == 1
    assert "[ERROR]" in result.output


def test_segment_customer(loaded) -> None:
    result = runner.invoke(app, ["segment-customer", "ana@example.com", "--config", str(loaded)])
    assert result.exit_code == 0, result.output
    assert "Customer: ana@example.com" in result.output
    assert "Uncategorized" in result.output


def test_segment_customer_not_found(loaded) -> None:
    result = runner.invoke(app, ["segment-customer", "nobody@example.com", "--config", str(loaded)])
    assert result.exit_code == 1
    assert "[NOT FOUND]" in result.output


@pytest.mark.parametrize(
    "args",
    [
        ["forecast", "p1"],
        ["scan-fleet"],
        ["fleet-summary"],
        ["recommend", "trending"],
        ["segment-customer", "ana@example.com"],
    ],
)
def test_query_commands_refuse_missing_database(config_file, tmp_path, args) -> None:
    missing = tmp_path / "typo" / "store.db"
    result = runner.invoke(app, [*args, "--db-path", str(missing), "--config", str(config_file)])
    assert result.exit_code == 1
    assert "[ERROR] Database not found" in result.output
    assert not missing.parent.exists()


def test_query_against_uninitialized_database_reports_error(config_file, tmp_path) -> None:
    empty = tmp_path / "empty.db"
    empty.touch()
    result = runner.invoke(app, ["forecast", "p1", "--db-path", str(empty), "--config", str(config_file)])
    assert result.exit_code == 1
    assert "[ERROR] Query failed" in result.output
    assert empty.stat().st_size == 0
