"""
Tests for the REST API.

Tests:
- Session lifecycle endpoints
- Card play, events and target selection over HTTP
- Structured error responses
"""

import pytest
from fastapi.testclient import TestClient

from ..api import create_app
from ..api.schemas import ErrorCode, ErrorResponse, SessionStatus
from ..config import EngineConfig
from ..session import SessionManager


@pytest.fixture
def manager(catalog):
    return SessionManager(config=EngineConfig(), catalog=catalog)


@pytest.fixture
def client(manager):
    return TestClient(create_app(manager))


def hand_ids(data, card_id):
    return [c["instance_id"] for c in data["game_state"]["hand"] if c["card_id"] == card_id]


class TestSystemEndpoints:
    """Tests for health and root."""

    def test_health(self, client):
        response = client.get("/api/v1/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_root(self, client):
        assert client.get("/").json()["docs"] == "/api/docs"


class TestSessionEndpoints:
    """Tests for session lifecycle."""

    def test_create_session(self, client):
        response = client.post("/api/v1/sessions", json={"random_seed": 3})
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == SessionStatus.ACTIVE.value
        assert len(data["game_state"]["hand"]) == 5
        assert data["pending_request"] is None

    def test_create_session_without_body(self, client):
        assert client.post("/api/v1/sessions").status_code == 200

    def test_get_list_and_end(self, client):
        session_id = client.post("/api/v1/sessions", json={}).json()["session_id"]

        assert client.get(f"/api/v1/sessions/{session_id}").json()["session_id"] == session_id
        assert client.get("/api/v1/sessions").json()["sessions"] == [session_id]

        response = client.delete(f"/api/v1/sessions/{session_id}")
        assert response.json() == {"success": True, "session_id": session_id}
        assert client.get("/api/v1/sessions").json()["count"] == 0

    def test_missing_session(self, client):
        response = client.get("/api/v1/sessions/nope")
        assert response.status_code == 404
        error = ErrorResponse(**response.json())
        assert error.error_code == ErrorCode.SESSION_NOT_FOUND


class TestGameLoopEndpoints:
    """Tests for activations over HTTP."""

    @pytest.fixture
    def session(self, manager, make_state):
        return manager.create_session(
            game_state=make_state(hand=["smelting", "copper", "silver", "mint"], deck=["gold_coin"] * 4, gold=0))

    def test_play_and_select(self, client, session):
        base = f"/api/v1/sessions/{session.session_id}"
        smelting = session.game_state.hand[0].instance_id

        response = client.post(f"{base}/play", json={"instance_id": smelting})
        assert response.status_code == 200
        data = response.json()
        assert data["state"] == "awaiting_target"
        candidates = [c["instance_id"] for c in data["target_request"]["candidates"]]
        assert len(candidates) == 2

        data = client.post(f"{base}/targets", json={"instance_ids": candidates}).json()
        assert data["state"] == "completed"
        assert [r["kind"] for r in data["results"]] == ["settle_card", "draw_card"]
        assert data["game_state"]["gold"] == 3
        assert len(hand_ids(data, "gold_coin")) == 2

    def test_cancel(self, client, session):
        base = f"/api/v1/sessions/{session.session_id}"
        client.post(f"{base}/play", json={"instance_id": session.game_state.hand[0].instance_id})

        data = client.post(f"{base}/cancel").json()
        assert data["state"] == "completed"
        assert data["results"][0]["success"] is False

    def test_invalid_selection(self, client, session):
        base = f"/api/v1/sessions/{session.session_id}"
        client.post(f"{base}/play", json={"instance_id": session.game_state.hand[0].instance_id})
        mint = hand_ids(client.get(base).json(), "mint")

        response = client.post(f"{base}/targets", json={"instance_ids": mint})
        assert response.status_code == 400
        body = response.json()
        assert body["error_code"] == ErrorCode.INVALID_SELECTION.value
        assert body["details"]["invalid_ids"] == mint
        assert client.get(base).json()["status"] == "awaiting_target"

    def test_play_while_waiting(self, client, session):
        base = f"/api/v1/sessions/{session.session_id}"
        client.post(f"{base}/play", json={"instance_id": session.game_state.hand[0].instance_id})
        mint = hand_ids(client.get(base).json(), "mint")[0]

        response = client.post(f"{base}/play", json={"instance_id": mint})
        assert response.status_code == 409
        assert response.json()["error_code"] == ErrorCode.ACTIVATION_IN_PROGRESS.value

    def test_targets_without_pending(self, client, session):
        response = client.post(f"/api/v1/sessions/{session.session_id}/targets", json={"instance_ids": []})
        assert response.status_code == 409
        assert response.json()["error_code"] == ErrorCode.NO_PENDING_SELECTION.value

    def test_treasure_not_playable(self, client, session):
        copper = session.game_state.hand[1].instance_id
        response = client.post(f"/api/v1/sessions/{session.session_id}/play", json={"instance_id": copper})
        assert response.status_code == 400
        assert response.json()["error_code"] == ErrorCode.CARD_NOT_PLAYABLE.value

    def test_trigger_event(self, client, session):
        response = client.post(f"/api/v1/sessions/{session.session_id}/events/hidden_treasure")
        assert response.status_code == 200
        data = response.json()
        assert data["results"][0]["count"] == 2
        assert data["game_state"]["discard_count"] == 2

    def test_describe_choice_event(self, client, manager, make_state):
        session = manager.create_session(game_state=make_state(units=1))
        response = client.get(f"/api/v1/sessions/{session.session_id}/events/mysterious_altar")
        assert response.status_code == 200
        data = response.json()
        assert data["available"] is True
        assert {c["choice_id"]: c["can_select"] for c in data["choices"]} == {
            "sacrifice": False,
            "leave": True,
        }

    def test_describe_unavailable_event(self, client, session):
        data = client.get(f"/api/v1/sessions/{session.session_id}/events/bandit_raid").json()
        assert data["available"] is False
        assert data["choices"] == []

    def test_describe_unknown_event(self, client, session):
        response = client.get(f"/api/v1/sessions/{session.session_id}/events/meteor")
        assert response.status_code == 400
        assert response.json()["error_code"] == ErrorCode.EVENT_NOT_AVAILABLE.value

    def test_event_not_available(self, client, session):
        response = client.post(f"/api/v1/sessions/{session.session_id}/events/bandit_raid")
        assert response.status_code == 400
        assert response.json()["error_code"] == ErrorCode.EVENT_NOT_AVAILABLE.value

    def test_play_in_missing_session(self, client):
        response = client.post("/api/v1/sessions/nope/play", json={"instance_id": "copper#1"})
        assert response.status_code == 404
