import pytest

from fakes import FakeUpstream
from weatherlog.db import init_db, make_engine, make_session_factory
from weatherlog.orchestrator import WeatherLogOrchestrator
from weatherlog.store import LogStore
from weatherlog.weather_clients import ForecastFetcher, GeocodeResolver, VideoSearchClient


@pytest.fixture()
def store():
    engine = make_engine("sqlite://")
    init_db(engine)
    return LogStore(make_session_factory(engine))


@pytest.fixture()
def upstream():
    return FakeUpstream()


@pytest.fixture()
def orchestrator(upstream, store):
    http = upstream.client()
    return WeatherLogOrchestrator(
        geocoder=GeocodeResolver(http, "test-key"),
        forecasts=ForecastFetcher(http, "test-key"),
        store=store,
        videos=VideoSearchClient(http, "yt-key"),
        max_days=5,
    )
