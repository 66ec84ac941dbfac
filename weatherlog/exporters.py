"""
Export helpers.

We keep exporters small and dependency-free:
- JSON: pretty printed, full records including the raw forecast payload
- CSV: 1 row per log (raw forecast payload serialized as JSON in one cell)
"""

from __future__ import annotations

import csv
import io
import json
from typing import Iterable

from .schemas import WeatherLogRecord

CSV_COLUMNS = [
    "id", "location", "latitude", "longitude",
    "startDate", "endDate", "createdAt", "weatherData",
]


def export_json(records: Iterable[WeatherLogRecord]) -> str:
    """Export logs as pretty JSON (ISO datetimes)."""
    return json.dumps([r.model_dump(mode="json") for r in records], indent=2)


def export_csv(records: Iterable[WeatherLogRecord]) -> str:
    """
    Export logs as CSV.

    We "flatten" each log to one row; the forecast payload becomes a JSON
    string in the weatherData cell. No logs still yields the header row.
    """
    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=CSV_COLUMNS)
    writer.writeheader()

    for r in records:
        writer.writerow({
            "id": r.id,
            "location": r.location,
            "latitude": r.coordinate.latitude,
            "longitude": r.coordinate.longitude,
            "startDate": r.start_date.isoformat(),
            "endDate": r.end_date.isoformat(),
            "createdAt": r.created_at.isoformat(),
            "weatherData": json.dumps(r.raw_forecast_payload),
        })

    return output.getvalue()


def export_filename(fmt: str) -> str:
    return f"weather_logs.{fmt}"


EXPORTERS = {"json": export_json, "csv": export_csv}
MEDIA_TYPES = {"json": "application/json", "csv": "text/csv"}
