"""
concierge/config.py

Runtime settings for the conversational engine.
- Every tunable constant (vector size, thresholds, weights, guest bounds) lives here
- Values come from environment variables; unparsable values fall back to defaults

Environment variables:
- CONCIERGE_VECTOR_DIM               (default 100)
- CONCIERGE_INTENT_THRESHOLD         (default 0.3)
- CONCIERGE_EXAMPLE_WEIGHT           (default 1.0)
- CONCIERGE_PATTERN_WEIGHT           (default 0.8)
- CONCIERGE_PATTERN_CONFIDENCE       (default 0.9)
- CONCIERGE_DEFAULT_LANGUAGE         (default en)
- CONCIERGE_CHECKIN_PAST_GRACE_DAYS  (default 0)
- CONCIERGE_MAX_ADULTS               (default 10)
- CONCIERGE_MAX_CHILDREN             (default 8)
- HISTORY_TURNS                      (default 6)
- LOG_LEVEL                          (default WARNING)
- LLM_FALLBACK                       (set to 1/true to ask the LLM when nothing matches)
"""

from __future__ import annotations

import os
from dataclasses import dataclass


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except ValueError:
        return default


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in {"1", "true", "yes"}


@dataclass(frozen=True)
class Settings:
    vector_dim: int = 100
    intent_threshold: float = 0.3
    example_weight: float = 1.0  # literal example utterances
    pattern_weight: float = 0.8  # bare keyword patterns
    pattern_confidence: float = 0.9  # confidence reported for rule-based hits
    default_language: str = "en"
    checkin_past_grace_days: int = 0
    min_adults: int = 1
    max_adults: int = 10
    max_children: int = 8
    history_turns: int = 6
    log_level: str = "WARNING"
    llm_fallback: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the process environment."""
        return cls(
            vector_dim=max(_env_int("CONCIERGE_VECTOR_DIM", 100), 1),
            intent_threshold=_env_float("CONCIERGE_INTENT_THRESHOLD", 0.3),
            example_weight=_env_float("CONCIERGE_EXAMPLE_WEIGHT", 1.0),
            pattern_weight=_env_float("CONCIERGE_PATTERN_WEIGHT", 0.8),
            pattern_confidence=_env_float("CONCIERGE_PATTERN_CONFIDENCE", 0.9),
            default_language=os.getenv("CONCIERGE_DEFAULT_LANGUAGE", "en").strip().lower() or "en",
            checkin_past_grace_days=_env_int("CONCIERGE_CHECKIN_PAST_GRACE_DAYS", 0),
            max_adults=_env_int("CONCIERGE_MAX_ADULTS", 10),
            max_children=_env_int("CONCIERGE_MAX_CHILDREN", 8),
            history_turns=_env_int("HISTORY_TURNS", 6),
            log_level=os.getenv("LOG_LEVEL", "WARNING").strip().upper() or "WARNING",
            llm_fallback=_env_flag("LLM_FALLBACK"),
        )
