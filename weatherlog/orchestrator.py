"""
WeatherLogOrchestrator.

Composes geocoding, forecast fetching and daily normalization into the two
operations the routes need:
- live weather for a place or a coordinate
- create/refresh a saved log for a place over a date range

Write path order is fixed: validate -> geocode -> fetch forecast -> persist.
Input is validated before any network call, and the store is only touched
once the forecast is in hand, so a failed update never clobbers the
existing row.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timezone
from typing import List, Optional, Tuple

from .errors import (
    InvalidDateRange,
    LocationNotFound,
    MissingInput,
    MissingRequiredField,
    RecordNotFound,
    UpstreamRejected,
)
from .normalize import FORECAST_HORIZON_DAYS, normalize, normalize_payload
from .schemas import Coordinate, DailyForecastEntry, GeoCandidate, LiveWeather, VideoResult, WeatherLogRecord
from .store import LogStore
from .weather_clients import ForecastFetcher, GeocodeResolver, VideoSearchClient

logger = logging.getLogger(__name__)


def _as_utc_naive(value: date | datetime) -> datetime:
    """Dates become midnight; aware datetimes are converted to naive UTC."""
    if not isinstance(value, datetime):
        return datetime.combine(value, time.min)
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def validate_log_input(
    location: Optional[str],
    start_date: Optional[date | datetime],
    end_date: Optional[date | datetime],
) -> Tuple[str, datetime, datetime]:
    """
    Business rule validations for a log write.

    Returns the cleaned (location, start, end) triple.
    """
    cleaned = (location or "").strip()
    if not cleaned or start_date is None or end_date is None:
        raise MissingRequiredField("Missing required fields: location, startDate and endDate are required.")

    start = _as_utc_naive(start_date)
    end = _as_utc_naive(end_date)
    if start >= end:
        raise InvalidDateRange("Invalid date range: end date must be after start date.")
    return cleaned, start, end


class WeatherLogOrchestrator:
    def __init__(
        self,
        geocoder: GeocodeResolver,
        forecasts: ForecastFetcher,
        store: LogStore,
        videos: Optional[VideoSearchClient] = None,
        max_days: int = FORECAST_HORIZON_DAYS,
    ):
        self.geocoder = geocoder
        self.forecasts = forecasts
        self.store = store
        self.videos = videos
        self.max_days = max_days

    async def _first_candidate(self, location: str) -> GeoCandidate:
        candidates = await self.geocoder.resolve(location)
        if not candidates:
            logger.info("No geocoding match for %r", location)
            raise LocationNotFound(
                f"Could not find location {location!r}. Try a more specific query "
                "(e.g., 'Paris, FR' or 'Austin, TX')."
            )
        return candidates[0]

    # -------------------------
    # Live weather
    # -------------------------

    async def get_live_weather(
        self,
        location: Optional[str] = None,
        coordinate: Optional[Coordinate] = None,
    ) -> LiveWeather:
        """
        Current conditions + daily cards.

        A coordinate skips geocoding; otherwise the first geocoding candidate
        for the location string is used.
        """
        candidate: Optional[GeoCandidate] = None
        if coordinate is None:
            if not location or not location.strip():
                raise MissingInput("Missing location, latitude, or longitude parameters.")
            candidate = await self._first_candidate(location)
            coordinate = candidate.coordinate

        current, samples = await self.forecasts.fetch_current_and_forecast(coordinate)
        return LiveWeather(
            location=candidate,
            coordinate=coordinate,
            current=current,
            daily_forecast=normalize(samples, self.max_days),
        )

    async def search_locations(self, query: str, limit: int = 5) -> List[GeoCandidate]:
        return await self.geocoder.resolve(query, limit=limit)

    # -------------------------
    # Saved logs
    # -------------------------

    async def create_or_update_log(
        self,
        location: Optional[str],
        start_date: Optional[date | datetime],
        end_date: Optional[date | datetime],
        existing_id: Optional[str] = None,
    ) -> WeatherLogRecord:
        """
        CREATE (no existing_id) or REPLACE a log:
        - validate location and date range (no network yet)
        - make sure the log being updated exists (still no network)
        - geocode -> first candidate
        - fetch the raw forecast payload
        - persist the raw payload, not the normalized days
        """
        cleaned, start, end = validate_log_input(location, start_date, end_date)

        if existing_id is not None and not self.store.exists(existing_id):
            raise RecordNotFound(f"Log {existing_id!r} not found.")

        candidate = await self._first_candidate(cleaned)
        payload = await self.forecasts.fetch_forecast_payload(candidate.coordinate)

        if existing_id is None:
            return self.store.create(cleaned, candidate, start, end, payload)
        return self.store.replace(existing_id, cleaned, candidate, start, end, payload)

    async def create_log(self, location, start_date, end_date) -> WeatherLogRecord:
        return await self.create_or_update_log(location, start_date, end_date)

    async def update_log(self, log_id: str, location, start_date, end_date) -> WeatherLogRecord:
        return await self.create_or_update_log(location, start_date, end_date, existing_id=log_id)

    def list_logs(self, limit: int = 100, offset: int = 0) -> List[WeatherLogRecord]:
        return self.store.list(limit=limit, offset=offset)

    def get_log(self, log_id: str) -> WeatherLogRecord:
        return self.store.get(log_id)

    def delete_log(self, log_id: str) -> None:
        self.store.delete(log_id)

    def log_daily_forecast(self, log_id: str, max_days: Optional[int] = None) -> List[DailyForecastEntry]:
        """Daily cards for a stored log, normalized from its raw payload on read."""
        record = self.store.get(log_id)
        return normalize_payload(record.raw_forecast_payload, self.max_days if max_days is None else max_days)

    async def related_videos(self, query: str) -> List[VideoResult]:
        if self.videos is None:
            raise UpstreamRejected("Video search is not configured.")
        return await self.videos.search(query)
