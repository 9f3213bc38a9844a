import pytest
from fastapi.testclient import TestClient

from app.config import settings
from app.domain.reference import airport_by_code
from app.main import app


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setattr(settings, "tracksim_env", "test")
    monkeypatch.setattr(settings, "simulation_autostart", False)
    monkeypatch.setattr(settings, "publish_mode", "none")
    monkeypatch.setattr(settings, "max_flights", 50)
    monkeypatch.setattr(settings, "max_vessels", 20)
    monkeypatch.setattr(settings, "source_overrides", {})

    with TestClient(app) as test_client:
        yield test_client


def test_health_check(client):
    response = client.get("/healthz")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "env": "test"}


def test_status_reports_population(client):
    body = client.get("/api/status").json()

    assert body["running"] is False
    assert body["entities"]["aircraft"]["active"] == 0
    assert body["entities"]["vessel"]["max"] == 20
    assert body["publish_mode"] == "none"


def test_mock_status_lists_every_source(client):
    body = client.get("/api/mock/status").json()

    assert set(body["sources"]) == {
        "flightradar24",
        "adsbexchange",
        "marinetraffic",
        "vesselfinder",
        "chinaports",
        "marinetrafficv2",
    }
    assert body["sources"]["chinaports"]["region"]["min_lat"] == 16.0


def test_poll_source_returns_provider_shape(client):
    created = client.post("/api/manual/flight", json={"callsign": "VN999"})
    assert created.status_code == 201

    body = client.get("/api/mock/flightradar24").json()

    assert body["version"] == 4
    assert body["full_count"] in (0, 1)


def test_poll_source_with_bounds(client):
    client.post("/api/manual/ship", json={"latitude": 20.8, "longitude": 106.7})
    client.post("/api/manual/ship", json={"latitude": 10.5, "longitude": 107.0})

    response = client.get(
        "/api/mock/marinetrafficv2", params={"bounds": "20.0,21.5,106.0,107.5"}
    )

    assert response.status_code == 200
    rows = response.json()["data"]
    assert len(rows) <= 1
    for row in rows:
        assert 19.9 <= row["lat"] <= 21.6


def test_poll_unknown_source_is_404(client):
    response = client.get("/api/mock/opensky")

    assert response.status_code == 404


@pytest.mark.parametrize("bounds", ["1,2,3", "a,b,c,d", "12,10,105,107"])
def test_poll_with_malformed_bounds_is_400(client, bounds):
    response = client.get("/api/mock/vesselfinder", params={"bounds": bounds})

    assert response.status_code == 400


def test_source_statistics(client):
    client.get("/api/mock/adsbexchange")

    body = client.get("/api/mock/sources/adsbexchange").json()

    assert body["polls"] == 1
    assert body["priority"] == 2
    assert client.get("/api/mock/sources/unknown").status_code == 404


def test_start_and_stop_simulation(client):
    started = client.post("/api/simulation/start", json={"max_flights": 4, "flight_interval": 5})
    assert started.json() == {"status": "started", "running": True}

    again = client.post("/api/simulation/start")
    assert again.json()["status"] == "already_running"

    conflict = client.post("/api/simulation/start", json={"max_vessels": 2})
    assert conflict.status_code == 409

    assert client.get("/api/config").json()["max_flights"] == 4

    stopped = client.post("/api/simulation/stop")
    assert stopped.json() == {"status": "stopped", "running": False}
    assert client.post("/api/simulation/stop").json()["status"] == "not_running"


def test_start_rejects_invalid_options(client):
    assert client.post("/api/simulation/start", json={"flight_interval": 0}).status_code == 422
    assert client.post("/api/simulation/start", json={"warp": 1}).status_code == 422


def test_airport_scenario(client):
    response = client.post("/api/simulation/scenarios/airport", json={"airport": "HAN"})

    assert response.status_code == 201
    body = response.json()
    assert body["created"] == 10
    han = airport_by_code("HAN")
    for flight in body["flights"]:
        assert abs(flight["latitude"] - han.lat) <= 0.05

    unknown = client.post("/api/simulation/scenarios/airport", json={"airport": "JFK"})
    assert unknown.status_code == 404


def test_port_scenario(client):
    response = client.post("/api/simulation/scenarios/port")

    assert response.status_code == 201
    assert response.json()["created"] == 10
    assert len(response.json()["vessels"]) == 10


def test_manual_flight_and_lookup(client):
    response = client.post(
        "/api/manual/flight",
        json={"callsign": "QH204", "latitude": 16.0, "longitude": 108.0, "altitude": 99999},
    )

    assert response.status_code == 201
    flight = response.json()
    assert flight["callsign"] == "QH204"
    assert flight["altitude"] == 42000.0

    lookup = client.get(f"/api/entities/flights/{flight['id']}")
    assert lookup.status_code == 200
    assert lookup.json()["hex_ident"] == flight["hex_ident"]
    assert client.get("/api/entities/flights/1").status_code == 404


def test_manual_ship_validation(client):
    outside = client.post("/api/manual/ship", json={"latitude": 0.0, "longitude": 0.0})
    assert outside.status_code == 400

    extra = client.post("/api/manual/ship", json={"mmsi": 123})
    assert extra.status_code == 422

    created = client.post("/api/manual/ship")
    assert created.status_code == 201
    voyage_id = created.json()["voyage_id"]
    assert client.get(f"/api/entities/vessels/{voyage_id}").json()["mmsi"] == created.json()["mmsi"]


def test_manual_injection_conflicts_when_full(client):
    client.post("/api/simulation/start", json={"max_vessels": 1})
    client.post("/api/simulation/stop")
    client.post("/api/manual/ship")

    response = client.post("/api/manual/ship")

    assert response.status_code == 409


def test_locations(client):
    body = client.get("/api/locations").json()

    assert {item["code"] for item in body["airports"]} >= {"SGN", "HAN"}
    assert len(body["ports"]) == 5


@pytest.mark.parametrize(
    "path, payload",
    [
        ("/api/manual/flight", '{"heading": NaN}'),
        ("/api/manual/flight", '{"vertical_speed": NaN}'),
        ("/api/manual/flight", '{"altitude": Infinity}'),
        ("/api/manual/ship", '{"course": NaN}'),
    ],
)
def test_manual_injection_rejects_non_finite_values(client, path, payload):
    response = client.post(path, content=payload, headers={"Content-Type": "application/json"})

    assert response.status_code == 422
    assert client.get("/api/status").json()["generated"] == 0
