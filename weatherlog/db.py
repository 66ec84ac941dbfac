"""
Database configuration for SQLAlchemy (SQLite by default).

No module-level engine: the app factory (or a test) builds one from a URL
and hands the session factory to the LogStore.
"""

from __future__ import annotations

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker
from sqlalchemy.pool import StaticPool


class Base(DeclarativeBase):
    """Base class for ORM models."""
    pass


def make_engine(database_url: str) -> Engine:
    """
    Create an engine for database_url.

    SQLite needs check_same_thread=False because FastAPI runs sync work in a
    threadpool. In-memory SQLite also needs a single shared connection, or
    every session would see its own empty database.
    """
    if not database_url.startswith("sqlite"):
        return create_engine(database_url)

    kwargs = {"connect_args": {"check_same_thread": False}}
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        kwargs["poolclass"] = StaticPool
    return create_engine(database_url, **kwargs)


def make_session_factory(engine: Engine) -> sessionmaker:
    # expire_on_commit=False: rows are converted to pydantic records after commit
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    """Create tables (no migrations; schema is created on startup)."""
    from . import models  # noqa: F401  (registers tables on Base.metadata)

    Base.metadata.create_all(bind=engine)
