import pytest
from fastapi.testclient import TestClient

from weatherlog.main import create_app
from weatherlog.settings import Settings

LOG_BODY = {"location": "Paris", "startDate": "2024-01-01T00:00:00Z", "endDate": "2024-01-05T00:00:00Z"}


@pytest.fixture()
def client(orchestrator):
    settings = Settings(_env_file=None, database_url="sqlite://", openweather_api_key="test-key")
    return TestClient(create_app(settings=settings, orchestrator=orchestrator))


def test_health(client):
    assert client.get("/health").json() == {"ok": True}


def test_weather_by_location(client):
    resp = client.get("/api/weather", params={"location": "Paris"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["location"]["display_name"] == "Paris"
    assert len(data["daily_forecast"]) == 5
    assert data["daily_forecast"][0]["representative_sample"]["icon_url"].endswith("01d@2x.png")


def test_weather_by_coordinates(client, upstream):
    resp = client.get("/api/weather", params={"lat": 40.7128, "lon": -74.006})
    assert resp.status_code == 200
    assert resp.json()["location"] is None
    assert "/geo/1.0/direct" not in upstream.paths()


def test_weather_missing_input(client):
    resp = client.get("/api/weather")
    assert resp.status_code == 400
    assert "Missing location" in resp.json()["error"]


def test_weather_location_not_found(client, upstream):
    upstream.geo = []
    resp = client.get("/api/weather", params={"location": "Qwxyzzy123"})
    assert resp.status_code == 404


def test_weather_upstream_errors(client, upstream):
    upstream.failures["/data/2.5/forecast"] = (401, {"message": "Invalid API key."})
    resp = client.get("/api/weather", params={"location": "Paris"})
    assert resp.status_code == 502
    assert "Invalid API key." in resp.json()["error"]


def test_geocode_suggestions(client):
    resp = client.get("/api/geocode", params={"q": "Paris"})
    assert resp.status_code == 200
    assert resp.json()[0]["country_code"] == "FR"


def test_log_crud_flow(client):
    created = client.post("/api/logs", json=LOG_BODY)
    assert created.status_code == 201
    log = created.json()
    assert log["location"] == "Paris"
    assert log["start_date"] == "2024-01-01T00:00:00"
    assert log["map_url"] == "https://www.google.com/maps?q=48.8566,2.3522"

    listed = client.get("/api/logs").json()
    assert [r["id"] for r in listed] == [log["id"]]

    days = client.get(f"/api/logs/{log['id']}/forecast", params={"days": 3}).json()
    assert [d["calendar_date"] for d in days] == ["2024-01-01", "2024-01-02", "2024-01-03"]

    updated = client.put(f"/api/logs/{log['id']}", json={**LOG_BODY, "endDate": "2024-01-09T00:00:00Z"})
    assert updated.status_code == 200
    assert updated.json()["end_date"] == "2024-01-09T00:00:00"

    deleted = client.delete(f"/api/logs/{log['id']}")
    assert deleted.status_code == 200
    assert client.get(f"/api/logs/{log['id']}").status_code == 404


def test_create_log_validation(client, upstream):
    resp = client.post("/api/logs", json={**LOG_BODY, "endDate": LOG_BODY["startDate"]})
    assert resp.status_code == 400
    assert "end date must be after start date" in resp.json()["error"]

    resp = client.post("/api/logs", json={"location": "", "startDate": "2024-01-01T00:00:00Z"})
    assert resp.status_code == 400
    assert upstream.calls == []


def test_update_and_delete_unknown_log(client, upstream):
    assert client.put("/api/logs/abc", json=LOG_BODY).status_code == 404
    assert client.delete("/api/logs/abc").status_code == 404
    assert upstream.calls == []


def test_export(client):
    client.post("/api/logs", json=LOG_BODY)

    as_json = client.get("/api/export")
    assert as_json.status_code == 200
    assert as_json.headers["content-type"].startswith("application/json")
    assert 'filename="weather_logs.json"' in as_json.headers["content-disposition"]
    assert as_json.json()[0]["location"] == "Paris"

    as_csv = client.get("/api/export", params={"format": "csv"})
    assert as_csv.headers["content-type"].startswith("text/csv")
    assert as_csv.text.splitlines()[0].startswith("id,location,latitude")

    assert client.get("/api/export", params={"format": "pdf"}).status_code == 422


def test_youtube(client, upstream):
    upstream.videos = {"items": [
        {"id": {"videoId": "v1"}, "snippet": {"title": "Paris", "thumbnails": {"medium": {"url": "u"}}}},
    ]}
    resp = client.get("/api/youtube", params={"query": "Paris"})
    assert resp.status_code == 200
    assert resp.json() == [
        {"video_id": "v1", "title": "Paris", "thumbnail_url": "u", "watch_url": "https://www.youtube.com/watch?v=v1"},
    ]


def test_weather_out_of_range_timestamp_is_bad_gateway(client, upstream):
    upstream.forecast["list"][0]["dt"] = 10**15
    resp = client.get("/api/weather", params={"location": "Paris"})
    assert resp.status_code == 502
    assert "malformed" in resp.json()["error"]
