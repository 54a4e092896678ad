from functools import partial

import pytest
from fastapi.testclient import TestClient

from delivery_routes.config import settings
from delivery_routes.main import create_app
from delivery_routes.models.domain import Coordinate
from delivery_routes.services.routing import matrix as matrix_module
from delivery_routes.services.routing import service as routing_service
from delivery_routes.services.routing.distance_client import MAX_DIRECTIONS_WAYPOINTS
from delivery_routes.services.routing.exceptions import ExternalServiceError
from delivery_routes.services.routing.matrix import DistanceMatrixConfig
from delivery_routes.services.routing.models import DirectionsRoute, DirectionsStep


def _stop_payload(sid: str, lat: float, lng: float) -> dict:
    return {
        "id": sid,
        "address": f"{sid} Main Street",
        "coordinates": {"lat": lat, "lng": lng},
        "order_ref": f"ORD-{sid}",
        "display_name": f"Customer {sid}",
    }


STOPS = [
    _stop_payload("S3", 0.0, 0.03),
    _stop_payload("S1", 0.0, 0.01),
    _stop_payload("S2", 0.0, 0.02),
]


@pytest.fixture
def api_client(monkeypatch: pytest.MonkeyPatch) -> TestClient:
    # Matrix config defaults are read from settings at import time, so patch both.
    monkeypatch.setattr(settings, "maps_api_key", None)
    monkeypatch.setattr(matrix_module, "DistanceMatrixConfig", partial(DistanceMatrixConfig, api_key=None))
    return TestClient(create_app())


def test_root_and_health(api_client: TestClient):
    assert api_client.get("/").json()["status"] == "running"
    assert api_client.get("/api/health").json() == {"status": "ok"}
    distance_health = api_client.get("/api/health/distance-service").json()
    assert distance_health == {"service": "distance-matrix", "configured": False, "healthy": False}


def test_optimize_endpoint_orders_stops_from_depot(api_client: TestClient):
    response = api_client.post(
        "/api/routes/optimize",
        json={"stops": STOPS, "depot": {"lat": 0.0, "lng": 0.0}},
    )

    assert response.status_code == 200
    payload = response.json()
    assert [stop["id"] for stop in payload["stops"]] == ["S1", "S2", "S3"]
    assert [stop["sequence"] for stop in payload["stops"]] == [1, 2, 3]
    assert payload["stops"][0]["order_ref"] == "ORD-S1"
    assert payload["total_distance_text"] == "3.3 km"
    assert payload["matrix_source"] == "haversine"
    assert payload["improvement"]["percentage_improved"] > 0
    assert payload["directions"] is None
    assert payload["estimated_arrival"]


def test_optimize_falls_back_when_road_distances_unavailable(
    api_client: TestClient, monkeypatch: pytest.MonkeyPatch
):
    created = []

    def recording_client(**kwargs):
        created.append(kwargs)
        raise ExternalServiceError("no client expected without an API key")

    monkeypatch.setattr(matrix_module, "MapsClient", recording_client)

    response = api_client.post(
        "/api/routes/optimize",
        json={"stops": STOPS, "use_external_service": True},
    )

    assert response.status_code == 200
    assert response.json()["matrix_source"] == "haversine"
    assert created == []


def test_default_matrix_config_has_no_api_key_under_api_client(api_client: TestClient):
    assert matrix_module.DistanceMatrixProvider().config.api_key is None


def test_directions_without_api_key_is_bad_gateway(api_client: TestClient):
    response = api_client.post("/api/routes/optimize", json={"stops": STOPS, "include_directions": True})

    assert response.status_code == 502
    assert "not configured" in response.json()["detail"]


def test_directions_with_too_many_stops_is_bad_request(api_client: TestClient, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(settings, "maps_api_key", "test-key")
    stops = [_stop_payload(f"S{k}", 0.0, k * 0.001) for k in range(MAX_DIRECTIONS_WAYPOINTS + 3)]

    response = api_client.post("/api/routes/optimize", json={"stops": stops, "include_directions": True})

    assert response.status_code == 400
    assert "waypoints" in response.json()["detail"]


def test_optimize_rejects_empty_stops(api_client: TestClient):
    response = api_client.post("/api/routes/optimize", json={"stops": []})

    assert response.status_code == 400
    assert "No stops" in response.json()["detail"]


def test_optimize_rejects_invalid_coordinates(api_client: TestClient):
    response = api_client.post(
        "/api/routes/optimize",
        json={"stops": [_stop_payload("S1", 95.0, 0.0)]},
    )

    assert response.status_code == 422


def test_optimize_with_directions(api_client: TestClient, monkeypatch: pytest.MonkeyPatch):
    captured = {}

    def fake_directions(stops, depot=None, client=None):
        captured["ids"] = [stop.id for stop in stops]
        captured["depot"] = depot
        return DirectionsRoute(
            distance=3400.0,
            distance_text="3.4 km",
            duration=600.0,
            duration_text="10 mins",
            polyline="_p~iF~ps|U_ulLnnqC_mqNvxq`@",
            start_address="Depot Rd",
            end_address="S3 Main Street",
            steps=[
                DirectionsStep(
                    instruction="Head east",
                    distance=3400.0,
                    distance_text="3.4 km",
                    duration=600.0,
                    duration_text="10 mins",
                    start_location=Coordinate(lat=0.0, lng=0.0),
                    end_location=Coordinate(lat=0.0, lng=0.03),
                )
            ],
        )

    monkeypatch.setattr(routing_service, "get_route_with_directions", fake_directions)

    response = api_client.post(
        "/api/routes/optimize",
        json={"stops": STOPS, "depot": {"lat": 0.0, "lng": 0.0}, "include_directions": True},
    )

    assert response.status_code == 200
    directions = response.json()["directions"]
    assert captured["ids"] == ["S1", "S2", "S3"]
    assert captured["depot"] == Coordinate(lat=0.0, lng=0.0)
    assert directions["distance_text"] == "3.4 km"
    assert len(directions["path"]) == 3
    assert directions["path"][0]["lat"] == pytest.approx(38.5)
    assert directions["steps"][0]["instruction"] == "Head east"


def test_directions_failure_maps_to_bad_gateway(api_client: TestClient, monkeypatch: pytest.MonkeyPatch):
    def failing_directions(stops, depot=None, client=None):
        raise ExternalServiceError("directions returned status OVER_QUERY_LIMIT")

    monkeypatch.setattr(routing_service, "get_route_with_directions", failing_directions)

    response = api_client.post("/api/routes/optimize", json={"stops": STOPS, "include_directions": True})

    assert response.status_code == 502


def test_compare_endpoint(api_client: TestClient):
    response = api_client.post("/api/routes/compare", json={"stops": STOPS})

    assert response.status_code == 200
    payload = response.json()
    assert [stop["id"] for stop in payload["original"]["stops"]] == ["S3", "S1", "S2"]
    assert [stop["id"] for stop in payload["optimized"]["stops"]] == ["S3", "S2", "S1"]
    assert payload["original"]["distance"] == pytest.approx(
        payload["optimized"]["distance"] + payload["improvement"]["distance"]
    )


def test_export_endpoint_csv(api_client: TestClient):
    response = api_client.post("/api/routes/export?format=csv", json={"stops": STOPS})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    lines = response.text.strip().splitlines()
    assert lines[0].startswith("sequence,stop_id")
    assert len(lines) == 4


def test_export_endpoint_json(api_client: TestClient):
    response = api_client.post("/api/routes/export", json={"stops": STOPS})

    assert response.status_code == 200
    assert [stop["sequence"] for stop in response.json()["stops"]] == [1, 2, 3]
