import pytest
from fastapi.testclient import TestClient

from conftest import make_responder
from voice_assistant.assistant import VoiceAssistant
from voice_assistant.main import app


USER = {"X-User-Id": "u1"}


def _client(assistant: VoiceAssistant) -> TestClient:
    # startup is skipped outside a `with` block, so no MongoDB connection is attempted
    app.state.assistant = assistant
    return TestClient(app)


@pytest.fixture
def client(offline_assistant):
    yield _client(offline_assistant)
    del app.state.assistant


def test_health(client) -> None:
    assert client.get("/").json() == {"status": "ok", "service": "voice-assistant-backend"}


def test_voice_input_requires_identity(client) -> None:
    response = client.post("/voice/input", json={"text": "hello", "sessionId": "s1"})
    assert response.status_code == 401


def test_voice_input_round_trip(client) -> None:
    response = client.post("/voice/input", json={"text": "sad depressed anxious worried", "sessionId": "s1"}, headers=USER)
    assert response.status_code == 200
    body = response.json()
    assert body["intent"]["category"] == "emotion_support"
    assert body["sentiment"]["emotion"] == "sad"
    assert "processingTime" in body
    assert body["metrics"]["responseLatency"] == body["processingTime"]

    history = client.get("/voice/conversations/s1", headers=USER).json()
    assert history["sessionId"] == "s1"
    assert [m["type"] for m in history["messages"]] == ["user", "assistant"]
    assert history["context"]["conversationTopic"] == "emotion_support"
    assert history["messages"][1]["content"] == body["response"]


def test_voice_input_rejects_empty_text(client) -> None:
    response = client.post("/voice/input", json={"text": "", "sessionId": "s1"}, headers=USER)
    assert response.status_code == 422


def test_history_and_metrics_without_identity_are_null(client) -> None:
    assert client.get("/voice/conversations/s1").json() is None
    assert client.get("/voice/metrics").json() is None


def test_metrics(client) -> None:
    client.post("/voice/input", json={"text": "hello", "sessionId": "s1"}, headers=USER)
    body = client.get("/voice/metrics", headers=USER).json()
    assert body["totalConversations"] == 1
    assert body["totalMessages"] == 1
    assert body["avgSentimentAccuracy"] == 100.0


def test_initialize_is_idempotent(client) -> None:
    assert client.post("/voice/initialize").json() == {"seeded": False}


def test_voice_settings(client) -> None:
    assert client.get("/voice/settings").status_code == 401
    assert client.get("/voice/settings", headers=USER).json()["speechRate"] == 0.9

    saved = client.put("/voice/settings", json={"preferredVoice": "alto", "speechRate": 1.2}, headers=USER).json()
    assert saved["userId"] == "u1"
    assert client.get("/voice/settings", headers=USER).json()["preferredVoice"] == "alto"


def test_missing_configuration_is_service_unavailable(store) -> None:
    client = _client(VoiceAssistant(store, make_responder()))
    try:
        response = client.post("/voice/input", json={"text": "hello", "sessionId": "s1"}, headers=USER)
        assert response.status_code == 503
    finally:
        del app.state.assistant


def test_websocket(client) -> None:
    with client.websocket_connect("/ws/s1", headers=USER) as ws:
        ws.send_json({"message": "wrong key"})
        assert "error" in ws.receive_json()

        ws.send_json({"text": "hello"})
        body = ws.receive_json()
        assert body["intent"]["category"] == "unknown"
        assert body["response"] == "I'm here to help! What can I do for you?"


def test_websocket_without_identity(client) -> None:
    with client.websocket_connect("/ws/s1") as ws:
        ws.send_json({"text": "hello"})
        assert ws.receive_json() == {"error": "User not authenticated"}
