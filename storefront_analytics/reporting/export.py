"""
Export helpers for spreadsheet and BI tooling.

All functions write to disk and return the written ``Path``. CSV exports are
flat (one row per forecast, camelCase columns matching the JSON output) so
they load directly in Excel or a BI tool.
"""

from __future__ import annotations

import csv
import json
from pathlib import Path

from storefront_analytics.models.analytics import ForecastResult

FORECAST_COLUMNS: list[str] = [
    "productId",
    "productName",
    "currentStock",
    "averageDailySales",
    "daysUntilStockout",
    "recommendedReorderPoint",
    "suggestedOrderQuantity",
    "trend",
    "riskLevel",
]


def export_to_csv(
    records: list[dict],
    path: Path,
    fieldnames: list[str] | None = None,
) -> Path:
    """Write ``records`` to a UTF-8 CSV file.

    Args:
        records:    List of row dicts.
        path:       Destination file path (parent dirs created if missing).
        fieldnames: Column order.  If None, uses the keys of the first record.

    Returns:
        ``path`` as written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    if not records and not fieldnames:
        path.write_text("", encoding="utf-8")
        return path
    cols = fieldnames or list(records[0].keys())
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=cols, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(records)
    return path


def export_to_json(
    data: dict | list,
    path: Path,
) -> Path:
    """Write ``data`` to a pretty-printed JSON file.

    Args:
        data: Dict or list to serialise.
        path: Destination file path (parent dirs created if missing).

    Returns:
        ``path`` as written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2, default=str), encoding="utf-8")
    return path


def forecasts_to_records(forecasts: list[ForecastResult]) -> list[dict]:
    """Flatten forecasts into JSON-safe camelCase row dicts."""
    return [fc.model_dump(mode="json", by_alias=True) for fc in forecasts]


def export_forecasts(forecasts: list[ForecastResult], path: Path) -> Path:
    """Write forecasts as CSV or JSON, chosen by ``path``'s suffix.

    Raises:
        ValueError: If the suffix is neither ``.csv`` nor ``.json``.
    """
    records = forecasts_to_records(forecasts)
    suffix = path.suffix.lower()
    if suffix == ".csv":
        return export_to_csv(records, path, fieldnames=FORECAST_COLUMNS)
    if suffix == ".json":
        return export_to_json({"forecasts": records, "count": len(records)}, path)
    raise ValueError(f"Unsupported export format '{suffix}'. Use .csv or .json.")
