"""
concierge/extract.py

Entity extractors, one per semantic field. Each takes raw text and returns a candidate value
(or None); validation happens later in concierge.validate.

- extract_stay_details: check-in / check-out phrases plus adult and child counts
- extract_guest_counts: digits or number words ("two adults", "a child", "no kids")
- extract_room_type: compound keyword sets first ({"deluxe", "king"}), then single keywords
- extract_guest_info: name lead-ins, 10-digit phone runs, local@domain.tld emails
- extract_payment_method: containment match against the three accepted methods
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from rapidfuzz import fuzz, process

from concierge.dates import find_dates
from concierge.intents import GuestDetails, StayDetails

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoomType:
    name: str
    price: int  # per night, USD
    max_occupancy: int
    keywords: tuple[str, ...]


ROOM_TYPES: tuple[RoomType, ...] = (
    RoomType("Deluxe King Room", 120, 2, ("deluxe", "king")),
    RoomType("Family Suite", 180, 6, ("family", "suite")),
    RoomType("Ocean View Room", 150, 2, ("ocean", "view")),
)
ROOM_BY_NAME = {room.name: room for room in ROOM_TYPES}

PAYMENT_METHODS = ("Credit Card", "Pay at Hotel", "UPI or Digital Wallet")

NUMBER_WORDS = {
    "zero": 0, "one": 1, "two": 2, "three": 3, "four": 4, "five": 5,
    "six": 6, "seven": 7, "eight": 8, "nine": 9, "ten": 10,
    "eleven": 11, "twelve": 12, "thirteen": 13, "fourteen": 14, "fifteen": 15,
    "sixteen": 16, "seventeen": 17, "eighteen": 18, "nineteen": 19, "twenty": 20,
    # Spanish
    "un": 1, "uno": 1, "una": 1, "dos": 2, "tres": 3, "cuatro": 4, "cinco": 5,
    "seis": 6, "siete": 7, "ocho": 8, "nueve": 9, "diez": 10,
}

_NUMBER = r"\d{1,3}|" + "|".join(sorted(NUMBER_WORDS, key=len, reverse=True))
_ADULT_NOUNS = (
    r"adults?|grown[- ]?ups?|guests?|people|persons?"
    r"|adultos?|huéspedes|huésped|personas?|वयस्क|अतिथि|व्यक्ति"
)
_CHILD_NOUNS = r"child(?:ren)?|kids?|niños?|niñas?|बच्चों|बच्चे|बच्चा"

ADULTS_RX = re.compile(rf"(?<![\w/])(?P<n>{_NUMBER})\s*(?:{_ADULT_NOUNS})(?!\w)", re.IGNORECASE)
GROUP_RX = re.compile(rf"\b(?:party|group|family)\s+of\s+(?P<n>{_NUMBER})\b", re.IGNORECASE)
CHILDREN_RX = re.compile(rf"(?<![\w/])(?P<n>{_NUMBER})\s*(?:{_CHILD_NOUNS})(?!\w)", re.IGNORECASE)
SINGLE_ADULT_RX = re.compile(r"\ban?\s+(?:adult|grown[- ]?up|person)\b", re.IGNORECASE)
SINGLE_CHILD_RX = re.compile(r"\ban?\s+(?:child|kid)\b", re.IGNORECASE)
NO_CHILDREN_RX = re.compile(
    r"\b(?:no|without(?:\s+any)?)\s+(?:child(?:ren)?|kids?)\b|\bsin\s+niños\b", re.IGNORECASE
)

ROOM_ALIASES = {
    "delux": "deluxe", "delex": "deluxe", "lujo": "deluxe",
    "suit": "suite", "sweet": "suite", "suites": "suite", "suite's": "suite",
    "families": "family", "familia": "family", "familiar": "family",
    "oceano": "ocean", "océano": "ocean", "sea": "ocean",
    "views": "view", "vista": "view", "rey": "king",
}
ROOM_VOCAB = sorted({kw for room in ROOM_TYPES for kw in room.keywords})

NAME_RX = re.compile(
    r"(?:my name is|name is|i'm|i am|this is|speaking is|me llamo|mi nombre es|नाम है)\s+"
    r"(?P<name>[a-zA-Z][a-zA-Z.'\- ]*?)"
    r"(?=\s*(?:,|;|\band\b|\bmy\b|\bphone\b|\be-?mail\b|\bnumber\b|\bcontact\b|\bmobile\b|\d|$))",
    re.IGNORECASE,
)
PHONE_RUN_RX = re.compile(r"(?<!\d)\+?\d{10,15}(?!\d)")
PHONE_FORMATTED_RX = re.compile(r"(?<!\d)\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}(?!\d)")
PHONE_LEAD_RX = re.compile(
    r"\b(?:phone|mobile|cell|contact)(?:\s+number)?(?:\s+is|\s*:)?\s+(?P<value>\+?\d[\d\s().-]*)",
    re.IGNORECASE,
)
EMAIL_RX = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")
EMAIL_LEAD_RX = re.compile(
    r"\be-?mail(?:\s+address)?(?:\s+is|\s*:)?\s+(?!is\b)(?P<value>[^\s,;]+)", re.IGNORECASE
)


def word_to_number(token: str) -> int | None:
    """'two' -> 2, '7' -> 7; None for anything else."""
    token = token.strip().lower()
    if token.isdigit():
        return int(token)
    return NUMBER_WORDS.get(token)


@dataclass(frozen=True)
class GuestCounts:
    adults: int | None = None
    children: int = 0
    no_children: bool = False


def extract_guest_counts(text: str) -> GuestCounts | None:
    """Adults and children mentioned in the text. Unmentioned adults stay None, unmentioned children 0;
    None when neither appears."""
    if not text:
        return None
    adults: int | None = None
    children = 0
    found = False

    m = ADULTS_RX.search(text) or GROUP_RX.search(text)
    if m:
        adults = word_to_number(m.group("n"))
        found = True
    elif SINGLE_ADULT_RX.search(text):
        adults, found = 1, True

    m = CHILDREN_RX.search(text)
    if m:
        children = word_to_number(m.group("n")) or 0
        found = True
    elif SINGLE_CHILD_RX.search(text):
        children, found = 1, True

    no_children = bool(NO_CHILDREN_RX.search(text)) or (m is not None and children == 0)
    if not found and not no_children:
        return None
    return GuestCounts(adults=adults, children=children, no_children=no_children and children == 0)


def extract_stay_details(text: str) -> StayDetails:
    dates = find_dates(text)
    counts = extract_guest_counts(text) or GuestCounts()
    details = StayDetails(
        check_in=dates.check_in,
        check_out=dates.check_out,
        undated=dates.undated,
        adults=counts.adults,
        children=counts.children,
        no_children=counts.no_children,
    )
    logger.debug("stay details from %r: %s", text, details)
    return details


def _room_tokens(text: str) -> set[str]:
    tokens: set[str] = set()
    for raw in re.findall(r"[a-záéíóúñ']+", text.lower()):
        if raw == "oceanview":
            tokens.update(("ocean", "view"))
            continue
        token = ROOM_ALIASES.get(raw, raw)
        if token not in ROOM_VOCAB and len(token) >= 5:
            best = process.extractOne(token, ROOM_VOCAB, scorer=fuzz.ratio, score_cutoff=85)
            if best:
                token = best[0]
        tokens.add(token)
    return tokens


def extract_room_type(text: str) -> str | None:
    """Canonical room name, or None. Never guesses a default room."""
    if not text:
        return None
    tokens = _room_tokens(text)
    for room in ROOM_TYPES:
        if all(kw in tokens for kw in room.keywords):
            return room.name
    for room in ROOM_TYPES:
        if any(kw in tokens for kw in room.keywords):
            return room.name
    return None


def _clean_name(raw: str) -> str:
    name = re.sub(r"\s+", " ", raw).strip(" .'-")
    return name


def extract_name(text: str) -> str | None:
    m = NAME_RX.search(text or "")
    if not m:
        return None
    return _clean_name(m.group("name")) or None


def extract_phone(text: str) -> str | None:
    """Phone candidate: a bare 10+ digit run, a formatted 3-3-4 number, or whatever follows 'phone'."""
    if not text:
        return None
    m = PHONE_RUN_RX.search(text) or PHONE_FORMATTED_RX.search(text)
    if m:
        return m.group(0)
    m = PHONE_LEAD_RX.search(text)
    if m:
        return m.group("value").strip(" .-")
    return None


def extract_email(text: str) -> str | None:
    """Email candidate: a well-formed address, a spoken one ('john at example dot com'), or
    whatever follows 'email' so a malformed value can be reported back."""
    if not text:
        return None
    m = EMAIL_RX.search(text)
    if m:
        return m.group(0)
    spoken = re.sub(r"\s+dot\s+", ".", re.sub(r"\s+at\s+", "@", text, flags=re.IGNORECASE),
                    flags=re.IGNORECASE)
    m = EMAIL_RX.search(spoken)
    if m:
        return m.group(0)
    m = EMAIL_LEAD_RX.search(text)
    if m:
        return m.group("value").rstrip(".")
    return None


def extract_guest_info(text: str) -> GuestDetails:
    """Name, phone and email are independent; any subset may come from one utterance."""
    return GuestDetails(name=extract_name(text), phone=extract_phone(text), email=extract_email(text))


def extract_payment_method(text: str) -> str | None:
    if not text:
        return None
    tokens = set(re.findall(r"[a-záéíóúñ]+", text.lower()))
    if "credit" in tokens and "card" in tokens:
        return "Credit Card"
    if "upi" in tokens or ("digital" in tokens and "wallet" in tokens):
        return "UPI or Digital Wallet"
    if "hotel" in tokens or "cash" in tokens:
        return "Pay at Hotel"
    if tokens & {"card", "debit", "visa", "mastercard", "amex", "tarjeta"}:
        return "Credit Card"
    if tokens & {"wallet", "gpay", "paytm", "phonepe"}:
        return "UPI or Digital Wallet"
    if tokens & {"efectivo", "counter", "arrival"}:
        return "Pay at Hotel"
    return None


def resolve_payment_method(value: str | None) -> str | None:
    """Map a free-text method (e.g. from an LLM) onto one of PAYMENT_METHODS."""
    if not value:
        return None
    if value in PAYMENT_METHODS:
        return value
    return extract_payment_method(value)


def resolve_room_type(value: str | None) -> str | None:
    if not value:
        return None
    if value in ROOM_BY_NAME:
        return value
    return extract_room_type(value)
