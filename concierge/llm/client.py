"""
concierge/llm/client.py

Optional remote-LLM fallback classifier, used by callers when the local engine finds no intent.
- call_llm(system_prompt, user_prompt, history=None): one chat completion (DeepSeek or Ollama)
- classify_with_llm(text, step, history=None): ask the model for {"intent", "entities"} and return
  (label, entities), or None when the model is unreachable or answers with something unusable

Environment variables:
- LLM_PROVIDER       (deepseek | ollama) default deepseek
- DEEPSEEK_API_URL   (default: https://api.deepseek.com)
- DEEPSEEK_API_KEY   (required for deepseek)
- DEEPSEEK_MODEL     (default: deepseek-chat)
- OLLAMA_BASE_URL    (default: http://localhost:11434)
- OLLAMA_MODEL       (default: qwen2.5:3b)
- DEEPSEEK_OFFLINE   (set to 1/true to skip the network entirely)
"""

from __future__ import annotations

import json
import logging
import os
import re

import requests

from concierge.prompts import CLASSIFIER_PROMPT

logger = logging.getLogger(__name__)

FENCE_RX = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def _offline() -> bool:
    return os.getenv("DEEPSEEK_OFFLINE", "").strip().lower() in {"1", "true", "yes"}


def call_llm(system_prompt, user_prompt, history=None):
    """
    Call an LLM with system + user prompts and optional history.
    Provider is selected by LLM_PROVIDER env: 'deepseek' (default) or 'ollama'.

    Args:
        system_prompt: Persistent system instruction (str)
        user_prompt: Per-turn prompt (str)
        history: List of past messages as dicts: {'role': 'user'|'assistant', 'content': str}

    Returns:
        Model response text (str), trimmed, or None when offline or the request failed.
    """
    provider = os.getenv("LLM_PROVIDER", "deepseek").strip().lower()

    messages = []
    if system_prompt:
        messages.append({"role": "system", "content": system_prompt})
    if history:
        messages.extend(history)
    messages.append({"role": "user", "content": user_prompt})

    if _offline():
        logger.debug("LLM offline; skipping request")
        return None

    if provider == "ollama":
        base = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434").rstrip("/")
        model = os.getenv("OLLAMA_MODEL", "qwen2.5:3b")
        try:
            resp = requests.post(
                f"{base}/api/chat",
                headers={"Content-Type": "application/json", "Accept": "application/json"},
                json={"model": model, "messages": messages, "stream": False, "format": "json",
                      "options": {"temperature": 0.0, "num_ctx": 4096, "num_predict": 256}},
                timeout=30,
            )
            resp.raise_for_status()
            data = resp.json()
            content = (data.get("message") or {}).get("content", "")
            return (content or "").strip()
        except requests.HTTPError as http_err:
            status = getattr(http_err.response, "status_code", None)
            logger.warning("Ollama error (HTTP %s). Is 'ollama serve' running with %s pulled?", status, model)
            return None
        except (requests.RequestException, ValueError) as err:
            logger.warning("unable to reach Ollama at %s: %s", base, err)
            return None

    # Default: DeepSeek
    base = os.getenv("DEEPSEEK_API_URL", "https://api.deepseek.com")
    key = os.getenv("DEEPSEEK_API_KEY", "")
    model = os.getenv("DEEPSEEK_MODEL", "deepseek-chat")
    endpoint = f"{base.rstrip('/')}/v1/chat/completions"
    headers = {"Authorization": f"Bearer {key}", "Content-Type": "application/json", "Accept": "application/json"}

    try:
        resp = requests.post(
            endpoint,
            headers=headers,
            json={"model": model, "messages": messages, "temperature": 0.0},
            timeout=30,
        )
        resp.raise_for_status()
        data = resp.json()
        content = (
            data.get("choices", [{}])[0]
            .get("message", {})
            .get("content", "")
        )
        return (content or "").strip()
    except requests.HTTPError as http_err:
        status = getattr(http_err.response, "status_code", None)
        logger.warning("DeepSeek error (HTTP %s). Check DEEPSEEK_API_KEY or try LLM_PROVIDER=ollama.", status)
        return None
    except (requests.RequestException, ValueError) as err:
        logger.warning("network issue while contacting the model: %s", err)
        return None


def parse_classification(reply: str | None) -> tuple[str, dict] | None:
    """Read {"intent": ..., "entities": {...}} out of a model reply."""
    if not reply:
        return None
    body = FENCE_RX.sub("", reply.strip())
    start, end = body.find("{"), body.rfind("}")
    if start < 0 or end <= start:
        return None
    try:
        data = json.loads(body[start:end + 1])
    except json.JSONDecodeError:
        logger.warning("LLM reply is not JSON: %r", reply[:120])
        return None
    if not isinstance(data, dict):
        return None
    label = str(data.get("intent") or "").strip().lower()
    entities = data.get("entities") or {}
    if not label or label == "unknown" or not isinstance(entities, dict):
        return None
    return label, entities


def classify_with_llm(text: str, step: str, history=None) -> tuple[str, dict] | None:
    """Fallback classification for text the local engine could not place."""
    system = CLASSIFIER_PROMPT.replace("{step}", step)
    result = parse_classification(call_llm(system, text, history=history))
    logger.debug("LLM classification for %r: %s", text, result)
    return result
