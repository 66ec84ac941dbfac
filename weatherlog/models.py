"""
ORM models.

We store:
- the location string the user typed
- resolved lat/lon + resolved place name from geocoding at save time
- requested date range
- the raw forecast payload, verbatim, in a JSON column
  (daily cards are derived on read, so the normalization rule can change
  without a migration)
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import JSON, DateTime, Float, String
from sqlalchemy.orm import Mapped, mapped_column

from .db import Base


def utcnow() -> datetime:
    """Naive UTC now (SQLite DateTime columns do not keep tzinfo)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_log_id() -> str:
    return uuid.uuid4().hex


class WeatherLog(Base):
    __tablename__ = "weather_logs"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_log_id)

    # What the user typed
    location: Mapped[str] = mapped_column(String(255), index=True)

    # Geocoded location details
    resolved_name: Mapped[str] = mapped_column(String(255), default="")
    country_code: Mapped[str] = mapped_column(String(8), default="")
    region_name: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    latitude: Mapped[float] = mapped_column(Float)
    longitude: Mapped[float] = mapped_column(Float)

    start_date: Mapped[datetime] = mapped_column(DateTime)
    end_date: Mapped[datetime] = mapped_column(DateTime)

    # OpenWeather /forecast response as fetched
    weather_data: Mapped[dict] = mapped_column(JSON)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
