"""
concierge/session.py

Conversation session state and reservation slot memory.

Classes:
- Step: dialogue steps in their forward order (Language ... Complete).
- Slots: validated reservation fields (dates, guests, room, guest info, payment).
- ConversationSession: step, language, slots and message history, plus the lock that serializes
  turns for one conversation.
"""

from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field, fields
from datetime import date
from enum import Enum
from typing import Any


class Step(str, Enum):
    LANGUAGE = "language"
    SERVICE_SELECT = "service_select"
    DATES = "dates"
    GUESTS = "guests"
    ROOM_SELECT = "room_select"
    GUEST_INFO = "guest_info"
    PAYMENT = "payment"
    CONFIRMATION = "confirmation"
    COMPLETE = "complete"

    @property
    def order(self) -> int:
        return STEP_ORDER.index(self)


STEP_ORDER = list(Step)

# Guest counts get their own step, so Dates only needs the two dates; adults given alongside them
# carry the guest past Guests.
STEP_REQUIREMENTS: dict[Step, tuple[str, ...]] = {
    Step.DATES: ("check_in", "check_out"),
    Step.GUESTS: ("adults",),
    Step.ROOM_SELECT: ("room_type",),
    Step.GUEST_INFO: ("guest_name", "phone", "email"),
    Step.PAYMENT: ("payment_method",),
}
BOOKING_FIELDS: tuple[str, ...] = tuple(f for req in STEP_REQUIREMENTS.values() for f in req)
STEP_REQUIREMENTS[Step.CONFIRMATION] = BOOKING_FIELDS

# What "what's missing?" reports per step; dates and guests are asked for as one stage.
REPORT_FIELDS: dict[Step, tuple[str, ...]] = {
    **STEP_REQUIREMENTS,
    Step.LANGUAGE: BOOKING_FIELDS,
    Step.SERVICE_SELECT: BOOKING_FIELDS,
    Step.DATES: ("check_in", "check_out", "adults"),
    Step.GUESTS: ("check_in", "check_out", "adults"),
}


@dataclass
class Slots:
    check_in: date | None = None
    check_out: date | None = None
    adults: int | None = None
    children: int | None = None
    room_type: str | None = None
    room_price: int | None = None  # per night, follows room_type
    guest_name: str | None = None
    phone: str | None = None
    email: str | None = None
    payment_method: str | None = None

    def captured(self) -> dict[str, Any]:
        """Fields holding a value, in declaration order."""
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name) is not None}

    def to_dict(self) -> dict[str, Any]:
        out = {}
        for f in fields(self):
            value = getattr(self, f.name)
            out[f.name] = value.isoformat() if isinstance(value, date) else value
        return out


@dataclass
class ConversationSession:
    session_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    step: Step = Step.LANGUAGE
    language: str = "en"
    slots: Slots = field(default_factory=Slots)
    history: list[dict[str, str]] = field(default_factory=list)  # list of {role, content}
    confirmation_number: str | None = None
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def add(self, role, content):
        """Append a message to the conversation history."""
        self.history.append({"role": role, "content": content})

    def recent_history(self, limit):
        """Return the last N messages from the history."""
        return self.history[-limit:]

    def merge(self, updates: dict[str, Any]) -> list[str]:
        """Write validated values into the slots; returns the fields whose value changed."""
        changed = []
        for name, value in updates.items():
            if not hasattr(self.slots, name):
                raise KeyError(f"unknown slot: {name}")
            if getattr(self.slots, name) != value:
                setattr(self.slots, name, value)
                changed.append(name)
        return changed

    def clear_slots(self):
        self.slots = Slots()

    def missing(self, step: Step | None = None) -> list[str]:
        """Still-empty fields that the given (default: current) step reports on."""
        return report_missing(self.slots, step or self.step)

    def snapshot(self) -> dict[str, Any]:
        return {
            "session_id": self.session_id,
            "step": self.step.value,
            "language": self.language,
            "slots": self.slots.to_dict(),
            "confirmation_number": self.confirmation_number,
        }


def unmet(slots: Slots, step: Step) -> list[str]:
    """Required fields of `step` that are still empty."""
    return [name for name in STEP_REQUIREMENTS.get(step, ()) if getattr(slots, name) is None]


def report_missing(slots: Slots, step: Step) -> list[str]:
    return [name for name in REPORT_FIELDS.get(step, ()) if getattr(slots, name) is None]


def next_open_step(slots: Slots, after: Step) -> Step:
    """First step after `after` whose requirements are not met yet; Confirmation always stops."""
    for step in STEP_ORDER[after.order + 1:]:
        if step is Step.CONFIRMATION or unmet(slots, step):
            return step
    return Step.COMPLETE
