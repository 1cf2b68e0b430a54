"""
concierge/corpus.py

Default labelled corpus for the vector classifier.
Each intent lists literal example utterances (full weight) and bare keyword
patterns (lower weight, so an example outranks a loose keyword hit on ties).
The table is a fixture: tests and deployments may pass their own.
"""

from __future__ import annotations

INTENT_CORPUS: dict[str, dict[str, list[str]]] = {
    "check_in_date": {
        "examples": [
            "check in July 18",
            "checking date July 22",
            "arrival date 18 July",
            "arriving July 15",
        ],
        "patterns": [
            "check in", "checking date", "arrival date", "start date", "from",
            "arriving", "check-in", "checkin", "arrive on", "coming on",
        ],
    },
    "check_out_date": {
        "examples": [
            "check out July 20",
            "checkout date July 25",
            "departure date 20 July",
            "departing July 18",
        ],
        "patterns": [
            "check out", "checkout date", "departure date", "end date", "until",
            "departing", "check-out", "checkout", "leaving on", "depart on",
        ],
    },
    "guest_count": {
        "examples": [
            "I have two adults and one child",
            "party of four",
            "three adults",
            "with two kids",
        ],
        "patterns": [
            "adults", "adult", "people", "person", "guests", "party of", "group of",
            "children", "child", "kids", "kid",
        ],
    },
    "room_selection": {
        "examples": [
            "deluxe king room",
            "family suite",
            "ocean view room",
        ],
        "patterns": [
            "deluxe", "king", "family", "suite", "ocean", "view", "standard",
            "select", "choose",
        ],
    },
    "guest_info": {
        "examples": [
            "my name is John Smith",
            "phone number 1234567890",
            "email john@example.com",
        ],
        "patterns": [
            "name is", "my name", "i am", "this is", "speaking",
            "phone", "number", "contact", "email", "mail",
        ],
    },
    "payment_method": {
        "examples": [
            "credit card",
            "pay at hotel",
            "upi payment",
        ],
        "patterns": [
            "credit card", "pay at hotel", "upi", "digital wallet",
            "cash", "payment", "pay with",
        ],
    },
    "missing_info": {
        "examples": [
            "which information missing",
            "what do you need",
            "what else is required",
        ],
        "patterns": [
            "what missing", "which information", "what need", "what required",
            "what else", "what remaining", "status", "progress", "incomplete",
            "help complete", "what left",
        ],
    },
    "confirmation": {
        "examples": [
            "yes confirm the booking",
            "proceed with booking",
            "that looks correct",
        ],
        "patterns": [
            "yes confirm", "confirm booking", "book it", "proceed",
            "yes", "correct", "looks good", "that's right",
        ],
    },
    "next_step": {
        "examples": [
            "next",
            "continue to the next step",
            "let's move on",
        ],
        "patterns": ["next", "continue", "move on", "go ahead"],
    },
    "reservation": {
        "examples": [
            "make a reservation",
            "book a room",
            "need a hotel room",
        ],
        "patterns": [
            "make reservation", "book room", "need room", "want to book",
            "reserve", "booking", "availability", "stay",
        ],
    },
    "reset": {
        "examples": [
            "start over",
            "cancel and start again",
        ],
        "patterns": ["restart", "start over", "reset"],
    },
}


def build_corpus(table: dict[str, dict[str, list[str]]] | None = None,
                 example_weight: float = 1.0,
                 pattern_weight: float = 0.8) -> list[tuple[str, str, float]]:
    """Flatten an intent table into (text, intent, weight) rows in a stable order."""
    rows: list[tuple[str, str, float]] = []
    for intent, group in (table or INTENT_CORPUS).items():
        for example in group.get("examples", []):
            rows.append((example, intent, example_weight))
        for pattern in group.get("patterns", []):
            rows.append((pattern, intent, pattern_weight))
    return rows
