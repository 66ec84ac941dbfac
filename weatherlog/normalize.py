"""
Daily forecast normalization.

OpenWeather's forecast returns ~40 data points (3-hour steps over 5 days).
Consumers show one card per day, so the samples are collapsed here:

- group by UTC calendar date (floor(dt / 86400))
- the day's representative is the FIRST sample seen for that date, in input
  order (not the noon reading, not a min/max aggregate)
- dates come out ascending, capped at max_days

Nothing is padded: fewer raw days means fewer entries.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, Iterable, List

from .schemas import DailyForecastEntry, RawForecastSample
from .weather_clients import parse_forecast_samples

FORECAST_HORIZON_DAYS = 5


def normalize(samples: Iterable[RawForecastSample], max_days: int = FORECAST_HORIZON_DAYS) -> List[DailyForecastEntry]:
    """Collapse sub-daily samples into at most one entry per UTC day."""
    if max_days <= 0:
        return []

    first_by_day: Dict[date, RawForecastSample] = {}
    for sample in samples:
        first_by_day.setdefault(sample.calendar_date, sample)

    # Upstream is chronological, so this matches first-appearance order;
    # sorting keeps dates ascending even when it is not.
    days = sorted(first_by_day)[:max_days]
    return [
        DailyForecastEntry(calendar_date=day.isoformat(), representative_sample=first_by_day[day])
        for day in days
    ]


def normalize_payload(payload: Any, max_days: int = FORECAST_HORIZON_DAYS) -> List[DailyForecastEntry]:
    """Normalize a raw /forecast payload, e.g. one stored on a log."""
    return normalize(parse_forecast_samples(payload), max_days)
