import re

import pytest
from fastapi.testclient import TestClient

import api
from concierge.config import Settings
from concierge.dialogue import TurnStatus
from concierge.engine import TurnResult
from concierge.session import ConversationSession, Step


@pytest.fixture
def client():
    api.SESSIONS.clear()
    yield TestClient(api.app)
    api.SESSIONS.clear()


def chat(client, message, session_id="s1"):
    resp = client.post("/api/chat", json={"session_id": session_id, "message": message})
    assert resp.status_code == 200
    return resp.json()


class TestChat:
    def test_first_turn(self, client):
        body = chat(client, "English")
        assert body["status"] == "ok"
        assert body["intent"] == "select_language"
        assert body["action"] == {"type": "SET_LANGUAGE", "payload": {"language": "en"}}
        assert body["session"]["step"] == "service_select"
        assert body["errors"] == []

    def test_empty_message(self, client):
        body = chat(client, "   ")
        assert body["reply"] == ""
        assert body["session"]["step"] == "language"

    def test_sessions_are_separate(self, client):
        chat(client, "English", session_id="a")
        body = chat(client, "Español", session_id="b")
        assert body["session"]["language"] == "es"
        assert api.SESSIONS["a"].language == "en"

    def test_full_booking(self, client):
        for line in ("English", "I want to book a room", "check in July 15 to check out July 18, 2 adults",
                     "ocean view room", "my name is Ana Ruiz, phone 5551234567, email ana@example.com",
                     "pay at the hotel"):
            body = chat(client, line)
        assert body["session"]["step"] == "confirmation"

        body = chat(client, "yes")
        assert body["action"]["type"] == "CONFIRM_BOOKING"
        number = body["action"]["payload"]["confirmation_number"]
        assert re.fullmatch(r"LG[0-9A-Z]{8}", number)
        assert body["action"]["payload"]["booking"]["total_amount"] == 450
        assert body["session"]["step"] == "complete"
        assert body["session"]["confirmation_number"] == number

    def test_validation_errors_reported(self, client):
        for line in ("English", "I want to book a room"):
            chat(client, line)
        body = chat(client, "check in July 18 and check out July 15")
        assert body["status"] == "validation_error"
        assert body["errors"]
        assert body["session"]["slots"]["check_out"] is None


class TestSessions:
    def test_state(self, client):
        chat(client, "English")
        resp = client.get("/api/sessions/s1")
        assert resp.status_code == 200
        body = resp.json()
        assert body["step"] == "service_select"
        assert "check_in" in body["missing"]
        assert body["history"][0] == {"role": "user", "content": "English"}

    def test_unknown_session(self, client):
        assert client.get("/api/sessions/nope").status_code == 404

    def test_reset(self, client):
        for line in ("English", "I want to book a room", "from July 15 to July 18"):
            chat(client, line)
        body = client.post("/api/sessions/s1/reset").json()
        assert body["step"] == "language"
        assert body["slots"]["check_in"] is None


class TestTrain:
    def test_add_example(self, client):
        before = len(api.ENGINE.index)
        resp = client.post("/api/train", json={"text": "qwv blorp", "intent": "reservation"})
        assert resp.status_code == 200
        assert resp.json() == {"ok": True, "entries": before + 1}

    def test_empty_text_rejected(self, client):
        resp = client.post("/api/train", json={"text": "  ", "intent": "reservation"})
        assert resp.status_code == 422


class TestLLMFallback:
    def _no_match(self, sess):
        return TurnResult(response="Sorry", session=sess, status=TurnStatus.NO_INTENT_MATCH)

    def test_used_when_enabled(self, monkeypatch):
        monkeypatch.setattr(api.ENGINE, "settings", Settings(llm_fallback=True))
        monkeypatch.setattr(api, "classify_with_llm",
                            lambda text, step, history=None: ("payment_method", {"payment_method": "cash"}))
        sess = ConversationSession(step=Step.PAYMENT)
        result = api._with_llm_fallback(sess, "whatever is easiest", self._no_match(sess))
        assert result.intent.source == "external"
        assert sess.slots.payment_method == "Pay at Hotel"
        assert sess.step is Step.CONFIRMATION

    def test_skipped_when_disabled(self, monkeypatch):
        monkeypatch.setattr(api.ENGINE, "settings", Settings(llm_fallback=False))
        called = []
        monkeypatch.setattr(api, "classify_with_llm", lambda *a, **k: called.append(a))
        sess = ConversationSession(step=Step.PAYMENT)
        original = self._no_match(sess)
        assert api._with_llm_fallback(sess, "hmm", original) is original
        assert not called

    def test_model_gives_up(self, monkeypatch):
        monkeypatch.setattr(api.ENGINE, "settings", Settings(llm_fallback=True))
        monkeypatch.setattr(api, "classify_with_llm", lambda *a, **k: None)
        sess = ConversationSession(step=Step.PAYMENT)
        original = self._no_match(sess)
        assert api._with_llm_fallback(sess, "hmm", original) is original
