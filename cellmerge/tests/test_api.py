"""
Tests for the HTTP API.

Uses FastAPI's TestClient over a service whose spawn table fills
every cell with a 2, so responses do not depend on hash draws.
"""

import pytest
from fastapi.testclient import TestClient

from ..api import APIService, create_app
from ..api.schemas import CreateSessionRequest
from ..config import GameConfig
from ..engine_core.generator import SpawnBand, SpawnTable

ALL_TWOS = SpawnTable(bands=(SpawnBand(1.0, 2),))


@pytest.fixture
def service():
    return APIService(config=GameConfig(spawn_table=ALL_TWOS, viewport_radius=2))


@pytest.fixture
def client(service):
    return TestClient(create_app(service))


@pytest.fixture
def session_id(client):
    response = client.post("/api/v1/sessions", json={})
    assert response.status_code == 200
    return response.json()["session_id"]


class TestSessionEndpoints:
    """Tests for session lifecycle over HTTP."""

    def test_create_defaults(self, client):
        response = client.post("/api/v1/sessions", json={})
        data = response.json()

        assert response.status_code == 200
        assert data["status"] == "active"
        assert data["mode"] == "step"
        assert data["origin_scheme"] == "local"
        assert data["interact_steps"] == 3
        assert data["win_target"] == 32
        assert data["player"]["i"] == 0
        assert data["player"]["j"] == 0
        assert data["player"]["held_value"] is None

    def test_create_global(self, client):
        response = client.post("/api/v1/sessions", json={
            "origin_scheme": "global",
            "lat": 0.00035,
            "lng": -0.00015,
        })
        player = response.json()["player"]
        assert response.json()["origin_scheme"] == "global"
        assert (player["i"], player["j"]) == (3, -2)

    def test_get_list_delete(self, client, session_id):
        assert client.get(f"/api/v1/sessions/{session_id}").json()["session_id"] == session_id
        listed = client.get("/api/v1/sessions").json()
        assert session_id in listed["sessions"]
        assert listed["count"] == 1

        deleted = client.delete(f"/api/v1/sessions/{session_id}").json()
        assert deleted == {"success": True, "session_id": session_id}
        assert client.get("/api/v1/sessions").json()["count"] == 0

    def test_unknown_session(self, client):
        response = client.get("/api/v1/sessions/missing")
        assert response.status_code == 404
        assert response.json()["error_code"] == "SESSION_NOT_FOUND"

        response = client.post("/api/v1/sessions/missing/interact", json={"i": 0, "j": 0})
        assert response.status_code == 404

    def test_delete_unknown(self, client):
        assert client.delete("/api/v1/sessions/missing").json()["success"] is False

    @pytest.mark.parametrize("body", [
        {"lat": 95.0, "lng": 0.0},
        {"lat": 0.0, "lng": -181.0},
        {"lat": 1e308, "lng": 0.0},
        {"lat": 37.0},
        {"lng": -122.0},
    ])
    def test_invalid_start_position(self, client, body):
        """Impossible or half-given starting positions create no session."""
        response = client.post("/api/v1/sessions", json=body)
        assert response.status_code == 422
        assert response.json()["error_code"] == "INVALID_POSITION"
        assert client.get("/api/v1/sessions").json()["count"] == 0

    def test_eviction_too_small_for_reach(self):
        service = APIService(config=GameConfig(viewport_radius=1, viewport_padding=0))
        client = TestClient(create_app(service))
        response = client.post("/api/v1/sessions", json={"evict_offscreen": True})
        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_stale_sessions_release_sources(self, service):
        """Cleaning up stale sessions also drops their position feeds."""
        old = service.create_session(CreateSessionRequest()).session_id
        service.session_manager.get_session(old).created_at -= 7200

        fresh = service.create_session(CreateSessionRequest()).session_id

        assert service.list_sessions() == [fresh]
        assert list(service._sources) == [fresh]
        assert service.cleanup_stale_sessions(max_age_seconds=3600) == 0

    def test_invalid_body(self, client):
        response = client.post("/api/v1/sessions", json={"mode": "teleport"})
        assert response.status_code == 422


class TestGameEndpoints:
    """Tests for interact and state."""

    def test_state(self, client, session_id):
        data = client.get(f"/api/v1/sessions/{session_id}/state").json()
        rows = data["i_max"] - data["i_min"] + 1
        columns = data["j_max"] - data["j_min"] + 1
        assert rows >= 5 and columns >= 5
        assert len(data["cells"]) == rows * columns
        assert data["i_min"] <= 0 <= data["i_max"]
        assert all(cell["value"] == 2 for cell in data["cells"])
        assert data["status_text"].startswith("Empty-handed")

    def test_pick_up_and_merge(self, client, session_id):
        url = f"/api/v1/sessions/{session_id}/interact"

        picked = client.post(url, json={"i": 0, "j": 0}).json()
        assert picked["outcome"] == "picked_up"
        assert picked["player"]["held_value"] == 2

        merged = client.post(url, json={"i": 0, "j": 1}).json()
        assert merged["outcome"] == "merged"
        assert merged["player"]["held_value"] is None

        state = client.get(f"/api/v1/sessions/{session_id}/state").json()
        values = {(c["i"], c["j"]): c for c in state["cells"]}
        assert values[(0, 0)]["value"] == 0
        assert values[(0, 1)]["value"] == 4
        assert values[(0, 1)]["overridden"]
        assert state["overlay_size"] == 2

    def test_out_of_range_is_not_an_error(self, client, session_id):
        response = client.post(f"/api/v1/sessions/{session_id}/interact", json={"i": 9, "j": 9})
        data = response.json()
        assert response.status_code == 200
        assert data["success"]
        assert data["outcome"] == "out_of_range"
        assert not data["changed"]


class TestMovementEndpoints:
    """Tests for step, position and mode switching."""

    def test_move(self, client, session_id):
        data = client.post(f"/api/v1/sessions/{session_id}/move", json={"direction": "north"}).json()
        assert data["success"]
        assert (data["player"]["i"], data["player"]["j"]) == (1, 0)

    def test_unknown_direction(self, client, session_id):
        response = client.post(f"/api/v1/sessions/{session_id}/move", json={"direction": "up-left"})
        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_position_in_step_mode(self, client, session_id):
        response = client.post(f"/api/v1/sessions/{session_id}/position", json={"lat": 37.0, "lng": -122.0})
        assert response.status_code == 409
        assert response.json()["error_code"] == "WRONG_MODE"

    def test_feed_mode(self, client, session_id):
        base = f"/api/v1/sessions/{session_id}"
        switched = client.post(f"{base}/mode", json={"mode": "feed"})
        assert switched.status_code == 200
        assert switched.json()["mode"] == "feed"

        start = client.get(base).json()["player"]
        response = client.post(f"{base}/position", json={
            "lat": start["lat"] + 0.0005,
            "lng": start["lng"],
        })
        assert response.status_code == 200
        assert response.json()["player"]["i"] == 5

        response = client.post(f"{base}/move", json={"direction": "north"})
        assert response.status_code == 409
        assert response.json()["error_code"] == "WRONG_MODE"

    def test_invalid_fix(self, client, session_id):
        base = f"/api/v1/sessions/{session_id}"
        client.post(f"{base}/mode", json={"mode": "feed"})
        before = client.get(base).json()["player"]

        response = client.post(f"{base}/position", json={"lat": 95.0, "lng": 0.0})

        assert response.status_code == 422
        assert response.json()["error_code"] == "INVALID_POSITION"
        assert client.get(base).json()["player"] == before

    def test_feed_unavailable(self, client):
        """A client without location stays in step mode."""
        session_id = client.post("/api/v1/sessions", json={"location_available": False}).json()["session_id"]
        base = f"/api/v1/sessions/{session_id}"

        response = client.post(f"{base}/mode", json={"mode": "feed"})
        assert response.status_code == 409
        assert response.json()["error_code"] == "SOURCE_UNAVAILABLE"
        assert client.get(base).json()["mode"] == "step"

    def test_create_in_unavailable_feed(self, client):
        data = client.post("/api/v1/sessions", json={"mode": "feed", "location_available": False}).json()
        assert data["mode"] is None
        assert data["start_error"]


class TestSystemEndpoints:
    """Tests for health and docs."""

    def test_health(self, client):
        data = client.get("/health").json()
        assert data["status"] == "healthy"
        assert data["service"] == "cellmerge"

    def test_root(self, client):
        assert client.get("/").json()["docs"] == "/api/docs"

    def test_openapi_schema(self, client):
        schemas = client.get("/openapi.json").json()["components"]["schemas"]
        for name in ("CreateSessionRequest", "ActionResponse", "GameStateResponse", "ErrorResponse"):
            assert name in schemas
