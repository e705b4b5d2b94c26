"""HTTP and websocket tests against a temporary SQLite database."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import SQLAlchemyError
from starlette.websockets import WebSocketDisconnect

from formfit.history import SessionHistoryStore
from formfit.main import app

from conftest import PUSHUP_REP_ELBOW, make_pushup_frame, make_wrist_frame


@pytest.fixture(scope="module")
def client():
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture(autouse=True)
def empty_history(client):
    client.delete("/api/history")
    yield


def _session_payload(**overrides):
    payload = {
        "exercise_id": "PUSHUPS",
        "exercise_name": "Push-ups",
        "duration": 42.0,
        "reps": 12,
        "avg_form_score": 88.0,
        "feedback_summary": {"good": 10, "warning": 2, "error": 0},
    }
    payload.update(overrides)
    return payload


def _frame_message(frame):
    return {
        "type": "frame",
        "timestamp": frame.timestamp,
        "landmarks": frame.to_dict()["landmarks"],
    }


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


class TestHistoryApi:

    def test_create_and_list(self, client):
        response = client.post("/api/history", json=_session_payload())
        assert response.status_code == 201
        created = response.json()
        assert created["reps"] == 12
        assert created["feedback_summary"] == {"good": 10, "warning": 2, "error": 0}

        listing = client.get("/api/history").json()
        assert listing["total"] == 1
        assert listing["items"][0]["id"] == created["id"]

    def test_filter_by_exercise(self, client):
        client.post("/api/history", json=_session_payload())
        client.post("/api/history", json=_session_payload(exercise_id="SQUATS", exercise_name="Squats"))

        listing = client.get("/api/history", params={"exercise_id": "SQUATS"}).json()
        assert listing["total"] == 1
        assert listing["items"][0]["exercise_name"] == "Squats"

    def test_invalid_payload(self, client):
        response = client.post("/api/history", json=_session_payload(avg_form_score=120.0))
        assert response.status_code == 422

        response = client.post("/api/history", json=_session_payload(feedback_summary={"great": 1}))
        assert response.status_code == 422

    def test_get_and_delete(self, client):
        created = client.post("/api/history", json=_session_payload()).json()

        assert client.get(f"/api/history/{created['id']}").status_code == 200
        assert client.delete(f"/api/history/{created['id']}").status_code == 204
        assert client.get(f"/api/history/{created['id']}").status_code == 404
        assert client.delete(f"/api/history/{created['id']}").status_code == 404

    def test_stats(self, client):
        client.post("/api/history", json=_session_payload(reps=10, avg_form_score=90.0))
        client.post("/api/history", json=_session_payload(reps=5, avg_form_score=72.0))

        stats = client.get("/api/history/stats").json()
        assert stats == {
            "total_workouts": 2,
            "total_reps": 15,
            "avg_form_score": 81,
            "favorite_exercise": "Push-ups",
        }

    def test_clear(self, client):
        client.post("/api/history", json=_session_payload())
        client.post("/api/history", json=_session_payload())

        assert client.delete("/api/history").json() == {"deleted": 2}
        assert client.get("/api/history").json()["total"] == 0


class TestLiveSocket:

    def test_unknown_mode_is_rejected(self, client):
        with client.websocket_connect("/api/live/burpees") as ws:
            message = ws.receive_json()
            assert message["type"] == "error"
            with pytest.raises(WebSocketDisconnect) as exc_info:
                ws.receive_json()
        assert exc_info.value.code == 1008

    def test_pushup_session_is_counted_and_saved(self, client):
        with client.websocket_connect("/api/live/pushups") as ws:
            assert ws.receive_json() == {
                "type": "connected",
                "mode": "PUSHUPS",
                "exercise_name": "Push-ups",
            }

            for i, angle in enumerate(PUSHUP_REP_ELBOW):
                ws.send_json(_frame_message(make_pushup_frame(angle, t=i * 0.1)))

            event = ws.receive_json()
            assert event["event"] == "repetition_completed"
            assert event["exerciseKind"] == "pushup"
            assert event["totalCount"] == 1
            assert event["score"] == pytest.approx(96.25, abs=1e-3)

            ws.send_json({"type": "stop"})
            stopped = ws.receive_json()

        assert stopped["type"] == "stopped"
        assert stopped["summary"]["reps"] == 1
        assert stopped["session_id"] is not None

        listing = client.get("/api/history").json()
        assert [item["id"] for item in listing["items"]] == [stopped["session_id"]]

    def test_stop_without_reps_saves_nothing(self, client):
        with client.websocket_connect("/api/live/squats") as ws:
            ws.receive_json()
            ws.send_json({"type": "no_frame"})
            ws.send_json({"type": "stop"})
            stopped = ws.receive_json()

        assert stopped["summary"]["reps"] == 0
        assert stopped["session_id"] is None
        assert client.get("/api/history").json()["total"] == 0

    def test_axis_updates_are_pushed(self, client):
        with client.websocket_connect("/api/live/right_hand_y") as ws:
            ws.receive_json()
            ws.send_json(_frame_message(make_wrist_frame(0.25, t=0.0)))
            update = ws.receive_json()

        assert update["event"] == "axis_update"
        assert update["limb"] == "RIGHT"
        assert update["value"] == pytest.approx(0.75)

    def test_debug_and_reset(self, client):
        with client.websocket_connect("/api/live/pushups") as ws:
            ws.receive_json()
            for i, angle in enumerate([170, 168, 169]):
                ws.send_json(_frame_message(make_pushup_frame(angle, t=i * 0.1)))

            ws.send_json({"type": "debug"})
            dump = ws.receive_json()
            assert dump["type"] == "debug"
            assert dump["frameCount"] == 3
            assert dump["frames"][-1]["state"] == "AT_TOP"

            ws.send_json({"type": "reset"})
            assert ws.receive_json() == {"type": "reset"}

            ws.send_json({"type": "debug"})
            assert ws.receive_json()["frameCount"] == 0

    def test_bad_messages_get_errors(self, client):
        with client.websocket_connect("/api/live/pushups") as ws:
            ws.receive_json()

            ws.send_text("not json")
            assert ws.receive_json()["type"] == "error"

            ws.send_json({"type": "frame", "timestamp": "soon"})
            assert ws.receive_json()["type"] == "error"

            ws.send_json({"type": "jump"})
            assert ws.receive_json()["type"] == "error"

    def test_failed_save_keeps_the_socket_open(self, client, monkeypatch):
        async def failing_append(self, summary, date=None):
            raise SQLAlchemyError("database is locked")

        monkeypatch.setattr(SessionHistoryStore, "append", failing_append)

        with client.websocket_connect("/api/live/pushups") as ws:
            ws.receive_json()
            for i, angle in enumerate(PUSHUP_REP_ELBOW):
                ws.send_json(_frame_message(make_pushup_frame(angle, t=i * 0.1)))
            assert ws.receive_json()["event"] == "repetition_completed"

            ws.send_json({"type": "stop"})
            reply = ws.receive_json()
            assert reply["type"] == "error"
            assert reply["session_id"] is None

            # The unsaved session is still there for a retry
            ws.send_json({"type": "debug"})
            assert ws.receive_json()["frameCount"] == len(PUSHUP_REP_ELBOW)
