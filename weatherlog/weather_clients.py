"""
Upstream clients.

API logic is kept apart from the FastAPI endpoints:
- easier to test in isolation (tests pass an httpx.AsyncClient backed by a
  MockTransport)
- one place that turns transport errors, non-success statuses and malformed
  JSON into the error taxonomy

Every client receives its httpx.AsyncClient from the caller. The app factory
owns that client (and its timeout) for the lifetime of the process.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Tuple

import httpx

from .errors import MissingRequiredField, UpstreamRejected, UpstreamUnavailable
from .schemas import Coordinate, CurrentConditions, GeoCandidate, RawForecastSample, VideoResult

logger = logging.getLogger(__name__)

OPENWEATHER_BASE = "https://api.openweathermap.org"
YOUTUBE_SEARCH_URL = "https://www.googleapis.com/youtube/v3/search"

DEFAULT_GEOCODE_LIMIT = 5

# Anything that can go wrong while reading a single upstream item.
_PARSE_ERRORS = (KeyError, IndexError, TypeError, ValueError, AttributeError, OverflowError)


def _upstream_message(r: httpx.Response) -> str:
    """
    Best-effort extraction of the provider's own error message.

    OpenWeather answers {"cod": ..., "message": ...};
    Google APIs answer {"error": {"message": ...}}.
    """
    try:
        data = r.json()
    except ValueError:
        return r.text
    if isinstance(data, dict):
        message = data.get("message")
        if not message and isinstance(data.get("error"), dict):
            message = data["error"].get("message")
        if message:
            return str(message)
    return r.text


async def _get_json(http: httpx.AsyncClient, url: str, params: Dict[str, Any], what: str) -> Any:
    """GET url and return decoded JSON, mapping failures onto the error taxonomy."""
    try:
        r = await http.get(url, params=params)
    except httpx.RequestError as e:
        # transport errors, timeouts, decoding errors, redirect loops
        logger.warning("%s request failed: %r", what, e)
        raise UpstreamUnavailable(f"{what} is unavailable: {e.__class__.__name__}") from e

    if not r.is_success:
        message = _upstream_message(r)
        logger.warning("%s rejected (%s): %s", what, r.status_code, message)
        raise UpstreamRejected(f"{what} failed ({r.status_code}): {message}", upstream_status=r.status_code)

    try:
        return r.json()
    except ValueError as e:
        raise UpstreamRejected(f"{what} returned a body that is not JSON.") from e


# -------------------------
# Boundary parsers
# -------------------------

def _conditions_fields(item: Dict[str, Any]) -> Dict[str, Any]:
    main = item["main"]
    weather = item["weather"][0]
    return {
        "timestamp": int(item["dt"]),
        "temperature_c": float(main["temp"]),
        "feels_like_c": float(main["feels_like"]),
        "humidity_pct": int(main["humidity"]),
        "wind_speed_mps": float(item["wind"]["speed"]),
        "condition_code": int(weather["id"]),
        "condition_main": str(weather["main"]),
        "condition_description": str(weather["description"]),
        "icon_id": str(weather["icon"]),
    }


def parse_forecast_samples(payload: Any) -> List[RawForecastSample]:
    """
    Validate an OpenWeather /forecast payload into typed samples.

    Any missing or malformed field is an UpstreamRejected; undefined values
    never travel further down the pipeline.
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("list"), list):
        raise UpstreamRejected("Forecast payload has no 'list' of samples.")

    samples: List[RawForecastSample] = []
    for i, item in enumerate(payload["list"]):
        try:
            samples.append(RawForecastSample(**_conditions_fields(item)))
        except _PARSE_ERRORS as e:
            raise UpstreamRejected(f"Forecast sample {i} is malformed: {e!r}") from e
    return samples


def parse_current_conditions(payload: Any) -> CurrentConditions:
    """Validate an OpenWeather /weather payload."""
    try:
        return CurrentConditions(**_conditions_fields(payload), location_name=str(payload.get("name", "")))
    except _PARSE_ERRORS as e:
        raise UpstreamRejected(f"Current weather payload is malformed: {e!r}") from e


def _parse_candidate(item: Any) -> GeoCandidate:
    try:
        return GeoCandidate(
            display_name=str(item.get("name", "")),
            coordinate=Coordinate(latitude=float(item["lat"]), longitude=float(item["lon"])),
            country_code=str(item.get("country", "")),
            region_name=item.get("state") or None,
        )
    except _PARSE_ERRORS as e:
        raise UpstreamRejected(f"Geocoding result is malformed: {e!r}") from e


# -------------------------
# Clients
# -------------------------

class GeocodeResolver:
    """
    OpenWeather direct geocoding:
        /geo/1.0/direct?q=...&limit=5&appid=KEY

    Results come back in upstream relevance order; no reordering is applied.
    """

    def __init__(self, http: httpx.AsyncClient, api_key: str, base: str = OPENWEATHER_BASE):
        self.http = http
        self.api_key = api_key
        self.base = base

    async def resolve(self, query: str, limit: int = DEFAULT_GEOCODE_LIMIT) -> List[GeoCandidate]:
        """
        Resolve a free-text place ("Austin, TX", "Paris, FR") into candidates.

        Zero matches is an empty list, not an error.
        """
        raw = (query or "").strip()
        if not raw:
            raise MissingRequiredField("Location query must not be empty.")

        params = {"q": raw, "limit": limit, "appid": self.api_key}
        results = await _get_json(self.http, f"{self.base}/geo/1.0/direct", params, "Geocoding")

        if results is None:
            return []
        if not isinstance(results, list):
            raise UpstreamRejected("Geocoding returned an unexpected payload.")

        candidates = [_parse_candidate(item) for item in results]
        logger.debug("Geocoded %r to %d candidate(s)", raw, len(candidates))
        return candidates


class ForecastFetcher:
    """
    OpenWeatherMap weather endpoints:
    - Current weather:
        /data/2.5/weather?lat=...&lon=...&units=metric&appid=KEY
    - 5-day forecast (3-hour increments):
        /data/2.5/forecast?lat=...&lon=...&units=metric&appid=KEY
    """

    def __init__(self, http: httpx.AsyncClient, api_key: str, base: str = OPENWEATHER_BASE, units: str = "metric"):
        self.http = http
        self.api_key = api_key
        self.base = base
        self.units = units

    def _params(self, coordinate: Coordinate) -> Dict[str, Any]:
        return {
            "lat": coordinate.latitude,
            "lon": coordinate.longitude,
            "units": self.units,
            "appid": self.api_key,
        }

    async def current_weather(self, coordinate: Coordinate) -> CurrentConditions:
        payload = await _get_json(self.http, f"{self.base}/data/2.5/weather", self._params(coordinate), "Current weather")
        return parse_current_conditions(payload)

    async def _forecast_json(self, coordinate: Coordinate) -> Any:
        return await _get_json(self.http, f"{self.base}/data/2.5/forecast", self._params(coordinate), "Forecast")

    async def fetch_forecast_payload(self, coordinate: Coordinate) -> Dict[str, Any]:
        """
        The forecast JSON exactly as upstream sent it.

        The samples are parsed once here so a payload that could not be
        normalized later is never handed out (and never stored).
        """
        payload = await self._forecast_json(coordinate)
        parse_forecast_samples(payload)
        return payload

    async def fetch_forecast_only(self, coordinate: Coordinate) -> List[RawForecastSample]:
        return parse_forecast_samples(await self._forecast_json(coordinate))

    async def fetch_current_and_forecast(self, coordinate: Coordinate) -> Tuple[CurrentConditions, List[RawForecastSample]]:
        """
        Both calls run concurrently and must both succeed.
        The first failure raised is the one reported.
        """
        current, samples = await asyncio.gather(
            self.current_weather(coordinate),
            self.fetch_forecast_only(coordinate),
        )
        return current, samples


class VideoSearchClient:
    """
    YouTube Data API v3 search, used for the "related videos" panel of a log.
    """

    def __init__(self, http: httpx.AsyncClient, api_key: str, base_url: str = YOUTUBE_SEARCH_URL):
        self.http = http
        self.api_key = api_key
        self.base_url = base_url

    async def search(self, query: str, max_results: int = 3) -> List[VideoResult]:
        raw = (query or "").strip()
        if not raw:
            raise MissingRequiredField("Query parameter is missing.")
        if not self.api_key:
            raise UpstreamRejected("YouTube API key is not configured.")

        params = {
            "part": "snippet",
            "q": f"travel highlights {raw}",
            "key": self.api_key,
            "type": "video",
            "maxResults": max_results,
        }
        data = await _get_json(self.http, self.base_url, params, "Video search")

        try:
            return [
                VideoResult(
                    video_id=item["id"]["videoId"],
                    title=item["snippet"]["title"],
                    thumbnail_url=((item["snippet"].get("thumbnails") or {}).get("medium") or {}).get("url", ""),
                )
                for item in data.get("items", [])
            ]
        except _PARSE_ERRORS as e:
            raise UpstreamRejected(f"Video search returned a malformed item: {e!r}") from e
