"""
Pydantic schemas.

Two groups live here:
- pipeline shapes (Coordinate, GeoCandidate, RawForecastSample, ...) that
  replace loosely typed upstream JSON once it crosses the client boundary
- request/response contracts of the REST endpoints
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

EPOCH = date(1970, 1, 1)
# Unix seconds whose UTC day is representable as a datetime.date
MIN_TIMESTAMP = (date.min - EPOCH).days * 86400
MAX_TIMESTAMP = ((date.max - EPOCH).days + 1) * 86400 - 1
ICON_URL = "https://openweathermap.org/img/wn/{icon}@2x.png"


class Coordinate(BaseModel):
    """A resolved geographic point. Immutable once built."""
    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)


class GeoCandidate(BaseModel):
    """One geocoding match, in upstream relevance order."""
    model_config = ConfigDict(frozen=True)

    display_name: str
    coordinate: Coordinate
    country_code: str = ""
    region_name: Optional[str] = None

    @property
    def label(self) -> str:
        """'Paris, Ile-de-France, FR' style label; empty parts are skipped."""
        parts = [self.display_name, self.region_name or "", self.country_code]
        return ", ".join(p for p in parts if p)


class WeatherConditions(BaseModel):
    """Fields shared by current conditions and forecast samples."""
    model_config = ConfigDict(frozen=True)

    timestamp: int = Field(..., ge=MIN_TIMESTAMP, le=MAX_TIMESTAMP)
    temperature_c: float
    feels_like_c: float
    humidity_pct: int
    wind_speed_mps: float
    condition_code: int
    condition_main: str
    condition_description: str
    icon_id: str

    @computed_field
    @property
    def icon_url(self) -> str:
        return ICON_URL.format(icon=self.icon_id)


class RawForecastSample(WeatherConditions):
    """One upstream forecast data point (3-hour cadence)."""

    @property
    def calendar_date(self) -> date:
        # UTC day: floor(timestamp / 86400)
        return EPOCH + timedelta(days=self.timestamp // 86400)


class CurrentConditions(WeatherConditions):
    """Current weather at a coordinate."""

    location_name: str = ""


class DailyForecastEntry(BaseModel):
    """The single representative sample for one UTC calendar day."""
    model_config = ConfigDict(frozen=True)

    calendar_date: str
    representative_sample: RawForecastSample


class LiveWeather(BaseModel):
    """Answer to "give me weather for X"."""
    location: Optional[GeoCandidate] = None
    coordinate: Coordinate
    current: CurrentConditions
    daily_forecast: List[DailyForecastEntry]


class VideoResult(BaseModel):
    """A related video for a location."""
    video_id: str
    title: str
    thumbnail_url: str = ""

    @computed_field
    @property
    def watch_url(self) -> str:
        return f"https://www.youtube.com/watch?v={self.video_id}"


class LogWrite(BaseModel):
    """
    Payload for creating or replacing a stored log:
    location + date range.

    Fields are optional so that missing values are reported by the
    orchestrator as MissingRequiredField (400) rather than as a 422.
    """
    model_config = ConfigDict(populate_by_name=True)

    location: Optional[str] = None
    start_date: Optional[datetime] = Field(None, alias="startDate")
    end_date: Optional[datetime] = Field(None, alias="endDate")


class WeatherLogRecord(BaseModel):
    """
    A stored log as returned by the store.

    raw_forecast_payload is the forecast JSON exactly as fetched at save time;
    daily cards are derived from it on read.
    """
    id: str
    location: str
    resolved_name: str = ""
    country_code: str = ""
    region_name: Optional[str] = None
    coordinate: Coordinate
    start_date: datetime
    end_date: datetime
    raw_forecast_payload: Any = None
    created_at: datetime
    updated_at: datetime

    @computed_field
    @property
    def map_url(self) -> str:
        return f"https://www.google.com/maps?q={self.coordinate.latitude},{self.coordinate.longitude}"
