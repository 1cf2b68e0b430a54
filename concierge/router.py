"""
concierge/router.py

Rule-based intent routing and language detection.

Key functions:
- match_patterns(text, language=None): control phrases first (reset, missing info, confirm, next),
  then booking services, checking the declared language before every other one.
- detect_language(text): script ranges (Devanagari, Han, kana, Hangul), then keyword hints, default 'en'.
- resolve_language_name(text): language a guest names explicitly ("Spanish", "हिंदी").
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from concierge.patterns import (
    CONTROL_PATTERNS,
    LANGUAGE_KEYWORDS,
    LANGUAGE_NAMES,
    SERVICE_PATTERNS,
    SUPPORTED_LANGUAGES,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PatternHit:
    intent: str
    language: str
    phrase: str


def _is_latin_word(token: str) -> bool:
    return all((ch.isalpha() and ord(ch) < 0x250) or ch in "'-" for ch in token)


def _contains_hint(low: str, hints) -> str | None:
    """Return the first hint found in `low`, or None.

    - Single Latin-script words are matched with word boundaries ('book' must not hit 'booking').
    - Phrases and non-Latin scripts are matched by containment.
    """
    for h in hints:
        if " " not in h and _is_latin_word(h):
            if re.search(r"(?<![\w'])" + re.escape(h) + r"(?![\w'])", low):
                return h
            continue
        if h in low:
            return h
    return None


def _language_order(language: str | None) -> list[str]:
    if language and language in SUPPORTED_LANGUAGES:
        return [language] + [code for code in SUPPORTED_LANGUAGES if code != language]
    return list(SUPPORTED_LANGUAGES)


def _scan(low: str, table: dict[str, dict[str, list[str]]], order: list[str]) -> PatternHit | None:
    for intent, by_language in table.items():
        for code in order:
            phrase = _contains_hint(low, by_language.get(code, ()))
            if phrase:
                return PatternHit(intent=intent, language=code, phrase=phrase)
    return None


def match_control(text: str, language: str | None = None) -> PatternHit | None:
    """Dialogue control phrases only (valid at any step)."""
    low = (text or "").lower().strip()
    if not low:
        return None
    return _scan(low, CONTROL_PATTERNS, _language_order(language))


def match_service(text: str, language: str | None = None) -> PatternHit | None:
    """Booking service phrases only (book, check in, availability, ...)."""
    low = (text or "").lower().strip()
    if not low:
        return None
    return _scan(low, SERVICE_PATTERNS, _language_order(language))


def match_patterns(text: str, language: str | None = None) -> PatternHit | None:
    hit = match_control(text, language) or match_service(text, language)
    if hit:
        logger.debug("pattern hit %s (%s) via %r", hit.intent, hit.language, hit.phrase)
    return hit


def detect_language(text: str, default: str = "en") -> str:
    """Cheap language guess used only as a dispatch key."""
    if not text:
        return default
    if re.search(r"[ऀ-ॿ]", text):
        return "hi"
    if re.search(r"[぀-ゟ゠-ヿ]", text):
        return "ja"
    if re.search(r"[가-힯]", text):
        return "ko"
    if re.search(r"[一-鿿]", text):
        return "zh"
    low = text.lower()
    for code, words in LANGUAGE_KEYWORDS.items():
        if _contains_hint(low, words):
            return code
    return default


def resolve_language_name(text: str) -> str | None:
    """Return the language code a guest named, e.g. 'Español please' -> 'es'."""
    low = (text or "").lower().strip()
    if not low:
        return None
    for code, names in LANGUAGE_NAMES.items():
        if _contains_hint(low, names):
            return code
    return None
