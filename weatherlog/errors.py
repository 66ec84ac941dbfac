"""
Error taxonomy.

Every failure the core raises is a WeatherError. The HTTP layer maps
``status_code`` onto the response; nothing here is fatal to the process.
"""

from __future__ import annotations


class WeatherError(RuntimeError):
    """Raised for user-facing weather lookup failures."""
    status_code = 400


class MissingRequiredField(WeatherError):
    """Caller input is incomplete."""
    status_code = 400


class MissingInput(MissingRequiredField):
    """Neither a location string nor a coordinate pair was supplied."""


class InvalidDateRange(WeatherError):
    """start_date is not strictly before end_date."""
    status_code = 400


class LocationNotFound(WeatherError):
    """Geocoding returned zero candidates."""
    status_code = 404


class RecordNotFound(WeatherError):
    """The store has no log with the given id."""
    status_code = 404


class UpstreamUnavailable(WeatherError):
    """Transport-level failure talking to a provider (safe to retry)."""
    status_code = 503


class UpstreamRejected(WeatherError):
    """Provider answered with a non-success status or an unusable body."""
    status_code = 502

    def __init__(self, message: str, upstream_status: int | None = None):
        super().__init__(message)
        self.upstream_status = upstream_status
