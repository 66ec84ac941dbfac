"""
LogStore: persistence of weather logs.

Each method opens its own session and commits (or rolls back) before
returning, so a record is created/replaced/deleted atomically. Callers only
ever see WeatherLogRecord snapshots, never live ORM rows.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from . import models
from .errors import RecordNotFound
from .schemas import Coordinate, GeoCandidate, WeatherLogRecord

logger = logging.getLogger(__name__)


def to_record(row: models.WeatherLog) -> WeatherLogRecord:
    """Convert ORM row -> pydantic record."""
    return WeatherLogRecord(
        id=row.id,
        location=row.location,
        resolved_name=row.resolved_name,
        country_code=row.country_code,
        region_name=row.region_name,
        coordinate=Coordinate(latitude=row.latitude, longitude=row.longitude),
        start_date=row.start_date,
        end_date=row.end_date,
        raw_forecast_payload=row.weather_data,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _apply(row: models.WeatherLog, location: str, candidate: GeoCandidate, start_date: datetime, end_date: datetime, payload: Any) -> None:
    row.location = location
    row.resolved_name = candidate.display_name
    row.country_code = candidate.country_code
    row.region_name = candidate.region_name
    row.latitude = candidate.coordinate.latitude
    row.longitude = candidate.coordinate.longitude
    row.start_date = start_date
    row.end_date = end_date
    row.weather_data = payload


class LogStore:
    """CRUD over the weather_logs table."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def _get_row(self, db: Session, log_id: str) -> models.WeatherLog:
        row = db.get(models.WeatherLog, log_id)
        if row is None:
            raise RecordNotFound(f"Log {log_id!r} not found.")
        return row

    def create(
        self,
        location: str,
        candidate: GeoCandidate,
        start_date: datetime,
        end_date: datetime,
        payload: Any,
        created_at: Optional[datetime] = None,
    ) -> WeatherLogRecord:
        now = created_at or models.utcnow()
        row = models.WeatherLog(created_at=now, updated_at=now)
        _apply(row, location, candidate, start_date, end_date, payload)

        with self._session_factory() as db:
            db.add(row)
            db.commit()
            db.refresh(row)
            logger.info("Created log %s for %r", row.id, location)
            return to_record(row)

    def get(self, log_id: str) -> WeatherLogRecord:
        with self._session_factory() as db:
            return to_record(self._get_row(db, log_id))

    def exists(self, log_id: str) -> bool:
        with self._session_factory() as db:
            return db.get(models.WeatherLog, log_id) is not None

    def list(self, limit: int = 100, offset: int = 0) -> List[WeatherLogRecord]:
        """Newest first, with basic pagination."""
        stmt = (
            select(models.WeatherLog)
            .order_by(models.WeatherLog.created_at.desc())
            .offset(offset)
            .limit(limit)
        )
        with self._session_factory() as db:
            return [to_record(row) for row in db.scalars(stmt)]

    def replace(
        self,
        log_id: str,
        location: str,
        candidate: GeoCandidate,
        start_date: datetime,
        end_date: datetime,
        payload: Any,
    ) -> WeatherLogRecord:
        """Overwrite every user-controlled field and the stored payload."""
        with self._session_factory() as db:
            row = self._get_row(db, log_id)
            _apply(row, location, candidate, start_date, end_date, payload)
            row.updated_at = models.utcnow()
            db.commit()
            db.refresh(row)
            logger.info("Replaced log %s", log_id)
            return to_record(row)

    def delete(self, log_id: str) -> None:
        with self._session_factory() as db:
            db.delete(self._get_row(db, log_id))
            db.commit()
        logger.info("Deleted log %s", log_id)
