"""
FastAPI entrypoint.

This file focuses on:
- routing
- request/response handling
- wiring together DB + clients + orchestrator

Everything is built inside create_app() and kept on app.state; there are no
module-level clients or engines. Run with:

    uvicorn weatherlog.main:create_app --factory
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse, Response

from .db import init_db, make_engine, make_session_factory
from .errors import WeatherError
from .exporters import EXPORTERS, MEDIA_TYPES, export_filename
from .logging_config import setup_logging
from .orchestrator import WeatherLogOrchestrator
from .schemas import Coordinate, LogWrite
from .settings import Settings
from .store import LogStore
from .weather_clients import ForecastFetcher, GeocodeResolver, VideoSearchClient

logger = logging.getLogger(__name__)


def build_orchestrator(settings: Settings, http: httpx.AsyncClient) -> WeatherLogOrchestrator:
    """Construct the store and upstream clients from settings."""
    engine = make_engine(settings.database_url)
    init_db(engine)
    store = LogStore(make_session_factory(engine))
    return WeatherLogOrchestrator(
        geocoder=GeocodeResolver(http, settings.openweather_api_key),
        forecasts=ForecastFetcher(http, settings.openweather_api_key),
        store=store,
        videos=VideoSearchClient(http, settings.youtube_api_key),
        max_days=settings.forecast_max_days,
    )


def get_orchestrator(request: Request) -> WeatherLogOrchestrator:
    """FastAPI dependency: the orchestrator built for this app."""
    return request.app.state.orchestrator


def create_app(settings: Optional[Settings] = None, orchestrator: Optional[WeatherLogOrchestrator] = None) -> FastAPI:
    """
    Build the app.

    Tests pass a ready orchestrator (with fakes); production builds one from
    settings, sharing a single httpx.AsyncClient that is closed on shutdown.
    """
    settings = settings or Settings()
    setup_logging(settings.log_level)

    http: Optional[httpx.AsyncClient] = None
    if orchestrator is None:
        http = httpx.AsyncClient(timeout=settings.http_timeout_s)
        orchestrator = build_orchestrator(settings, http)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting %s", settings.app_name)
        yield
        if http is not None:
            await http.aclose()

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.state.settings = settings
    app.state.orchestrator = orchestrator

    @app.exception_handler(WeatherError)
    async def weather_error_handler(request: Request, exc: WeatherError):
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})

    register_routes(app)
    return app


def register_routes(app: FastAPI) -> None:

    @app.get("/health")
    def health():
        return {"ok": True}

    # -------------------------
    # Live weather
    # -------------------------

    @app.get("/api/weather")
    async def api_weather(
        location: Optional[str] = Query(None, max_length=255),
        lat: Optional[float] = Query(None, ge=-90.0, le=90.0),
        lon: Optional[float] = Query(None, ge=-180.0, le=180.0),
        orch: WeatherLogOrchestrator = Depends(get_orchestrator),
    ):
        """
        Current weather + daily forecast cards, by location string or by
        coordinates (browser geolocation).
        """
        coordinate = None
        if lat is not None and lon is not None:
            coordinate = Coordinate(latitude=lat, longitude=lon)
        return await orch.get_live_weather(location=location, coordinate=coordinate)

    @app.get("/api/geocode")
    async def api_geocode(
        q: str = Query(..., max_length=255),
        limit: int = Query(5, ge=1, le=5),
        orch: WeatherLogOrchestrator = Depends(get_orchestrator),
    ):
        """Location suggestions for the log form."""
        return await orch.search_locations(q, limit=limit)

    @app.get("/api/youtube")
    async def api_youtube(query: str = Query(..., max_length=255), orch: WeatherLogOrchestrator = Depends(get_orchestrator)):
        """Related travel videos for a location."""
        return await orch.related_videos(query)

    # -------------------------
    # Weather logs CRUD
    # -------------------------

    @app.get("/api/logs")
    def api_list_logs(
        limit: int = Query(100, ge=1, le=1000),
        offset: int = Query(0, ge=0),
        orch: WeatherLogOrchestrator = Depends(get_orchestrator),
    ):
        """List logs, newest first."""
        return orch.list_logs(limit=limit, offset=offset)

    @app.post("/api/logs", status_code=201)
    async def api_create_log(payload: LogWrite, orch: WeatherLogOrchestrator = Depends(get_orchestrator)):
        """Geocode, fetch the forecast and store a new log."""
        return await orch.create_log(payload.location, payload.start_date, payload.end_date)

    @app.get("/api/logs/{log_id}")
    def api_get_log(log_id: str, orch: WeatherLogOrchestrator = Depends(get_orchestrator)):
        return orch.get_log(log_id)

    @app.put("/api/logs/{log_id}")
    async def api_update_log(log_id: str, payload: LogWrite, orch: WeatherLogOrchestrator = Depends(get_orchestrator)):
        """Update location/date range, re-fetch the forecast, and replace the log."""
        return await orch.update_log(log_id, payload.location, payload.start_date, payload.end_date)

    @app.delete("/api/logs/{log_id}")
    def api_delete_log(log_id: str, orch: WeatherLogOrchestrator = Depends(get_orchestrator)):
        orch.delete_log(log_id)
        return {"message": "Log deleted successfully"}

    @app.get("/api/logs/{log_id}/forecast")
    def api_log_forecast(
        log_id: str,
        days: Optional[int] = Query(None, ge=1, le=16),
        orch: WeatherLogOrchestrator = Depends(get_orchestrator),
    ):
        """Daily cards derived from the log's stored forecast."""
        return orch.log_daily_forecast(log_id, max_days=days)

    # -------------------------
    # Export endpoint
    # -------------------------

    @app.get("/api/export")
    def api_export(
        format: str = Query("json", pattern="^(json|csv)$"),
        orch: WeatherLogOrchestrator = Depends(get_orchestrator),
    ):
        """Export every log as a JSON or CSV attachment."""
        records = orch.list_logs(limit=10_000, offset=0)
        return Response(
            content=EXPORTERS[format](records),
            media_type=MEDIA_TYPES[format],
            headers={"Content-Disposition": f'attachment; filename="{export_filename(format)}"'},
        )


def run() -> None:
    """Console entrypoint."""
    import uvicorn

    uvicorn.run(create_app(), host="127.0.0.1", port=8000)
