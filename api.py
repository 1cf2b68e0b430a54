from __future__ import annotations

import logging
import threading

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from concierge.config import Settings
from concierge.engine import Engine, TurnResult
from concierge.dialogue import TurnStatus
from concierge.llm.client import classify_with_llm
from concierge.session import ConversationSession


SETTINGS = Settings.from_env()
logging.basicConfig(level=getattr(logging, SETTINGS.log_level, logging.WARNING),
                    format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("concierge.api")

app = FastAPI(title="Lagunacreek Concierge API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

ENGINE = Engine(SETTINGS)


class ChatRequest(BaseModel):
    session_id: str
    message: str
    language: str | None = None


class TrainRequest(BaseModel):
    text: str
    intent: str
    entities: dict | None = None


SESSIONS: dict[str, ConversationSession] = {}
SESSIONS_LOCK = threading.Lock()


def get_session(session_id: str) -> ConversationSession:
    with SESSIONS_LOCK:
        sess = SESSIONS.get(session_id)
        if not sess:
            sess = ConversationSession(session_id=session_id, language=SETTINGS.default_language)
            SESSIONS[session_id] = sess
        return sess


def _payload(result: TurnResult) -> dict:
    action = result.action
    return {
        "reply": result.response,
        "status": result.status.value,
        "errors": result.errors,
        "intent": result.intent.intent if result.intent else None,
        "confidence": round(result.intent.confidence, 3) if result.intent else None,
        "action": {"type": action.type, "payload": action.payload} if action else None,
        "session": result.session.snapshot(),
    }


def _with_llm_fallback(sess: ConversationSession, user: str, result: TurnResult) -> TurnResult:
    """Ask the remote model when the engine found nothing; keep the engine's reply otherwise."""
    if result.status is not TurnStatus.NO_INTENT_MATCH or not ENGINE.settings.llm_fallback:
        return result
    history = sess.recent_history(ENGINE.settings.history_turns)
    guess = classify_with_llm(user, sess.step.value, history=history)
    if not guess:
        return result
    label, entities = guess
    logger.info("LLM fallback classified %r as %s", user, label)
    return ENGINE.advance_with_external(sess, label, entities, text="")


@app.post("/api/chat")
def chat(req: ChatRequest):
    sess = get_session(req.session_id)
    user = (req.message or "").strip()
    if not user:
        return {"reply": "", "session": sess.snapshot()}
    result = ENGINE.process(sess, user, language_hint=req.language)
    result = _with_llm_fallback(sess, user, result)
    return _payload(result)


@app.get("/api/sessions/{session_id}")
def session_state(session_id: str):
    with SESSIONS_LOCK:
        sess = SESSIONS.get(session_id)
    if not sess:
        raise HTTPException(status_code=404, detail="unknown session")
    return {**sess.snapshot(), "missing": sess.missing(), "history": sess.history}


@app.post("/api/sessions/{session_id}/reset")
def reset(session_id: str):
    sess = ENGINE.reset_session(get_session(session_id))
    return sess.snapshot()


@app.post("/api/train")
def train(req: TrainRequest):
    text = (req.text or "").strip()
    if not text or not req.intent:
        raise HTTPException(status_code=422, detail="text and intent are required")
    ENGINE.add_example(text, req.intent, req.entities)
    return {"ok": True, "entries": len(ENGINE.index)}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=3001)
