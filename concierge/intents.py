"""
concierge/intents.py

Typed intents.
Each variant carries only the fields its extractor produces, so handlers never
reach into a loose dict of optional keys. Labels are the classifier's vocabulary;
`variant_for` maps a label onto the variant that scopes extraction.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Union


# Classifier / pattern labels
RESERVATION = "reservation"
AVAILABILITY = "availability"
CHECKIN = "checkin"
CHECKOUT = "checkout"
SEARCH_RESERVATION = "search_reservation"
RESERVATION_LIST = "reservation_list"
INQUIRY = "inquiry"
HELP = "help"

CHECK_IN_DATE = "check_in_date"
CHECK_OUT_DATE = "check_out_date"
GUEST_COUNT = "guest_count"
ROOM_SELECTION = "room_selection"
GUEST_INFO = "guest_info"
PAYMENT_METHOD = "payment_method"
SELECT_LANGUAGE = "select_language"

MISSING_INFO = "missing_info"
CONFIRMATION = "confirmation"
NEXT_STEP = "next_step"
RESET = "reset"

SERVICE_LABELS = frozenset({
    RESERVATION, AVAILABILITY, CHECKIN, CHECKOUT, SEARCH_RESERVATION, RESERVATION_LIST, INQUIRY, HELP,
})
STAY_LABELS = frozenset({CHECK_IN_DATE, CHECK_OUT_DATE, GUEST_COUNT})
CONTROL_LABELS = frozenset({MISSING_INFO, CONFIRMATION, NEXT_STEP, RESET})


@dataclass(frozen=True)
class LanguageChoice:
    language: str | None = None
    explicit: bool = False  # named by the guest rather than detected


@dataclass(frozen=True)
class ServiceRequest:
    service: str
    language: str | None = None  # detected when the request arrives before a language was chosen


@dataclass(frozen=True)
class StayDetails:
    check_in: str | None = None
    check_out: str | None = None
    undated: str | None = None  # a date phrase with no check-in/check-out context
    adults: int | None = None  # None: not mentioned; 0 is a value to reject
    children: int = 0
    no_children: bool = False

    def is_empty(self) -> bool:
        return not (self.check_in or self.check_out or self.undated or self.adults is not None
                    or self.children or self.no_children)


@dataclass(frozen=True)
class RoomChoice:
    room_type: str | None = None


@dataclass(frozen=True)
class GuestDetails:
    name: str | None = None
    phone: str | None = None
    email: str | None = None

    def is_empty(self) -> bool:
        return not (self.name or self.phone or self.email)


@dataclass(frozen=True)
class PaymentChoice:
    method: str | None = None


@dataclass(frozen=True)
class MissingInfoQuery:
    pass


@dataclass(frozen=True)
class Reset:
    pass


StepDetails = Union[LanguageChoice, ServiceRequest, StayDetails, RoomChoice, GuestDetails, PaymentChoice]


@dataclass(frozen=True)
class Confirm:
    details: StepDetails | None = None  # data given alongside "yes", e.g. "yes, 2 adults"


@dataclass(frozen=True)
class NextStep:
    details: StepDetails | None = None


@dataclass(frozen=True)
class Unrecognized:
    label: str


Intent = Union[
    LanguageChoice, ServiceRequest, StayDetails, RoomChoice, GuestDetails, PaymentChoice,
    MissingInfoQuery, Confirm, NextStep, Reset, Unrecognized,
]


@dataclass(frozen=True)
class IntentMatch:
    """One turn's classification: label, confidence in [0, 1] and extracted entities."""
    intent: str
    confidence: float
    entities: Any = None
    source: str = "vector"  # vector | pattern | extractor | external
    matched_text: str | None = None


def variant_for(label: str) -> type:
    """Variant class that scopes extraction for a classifier label."""
    if label in STAY_LABELS:
        return StayDetails
    if label in SERVICE_LABELS:
        return ServiceRequest
    return {
        ROOM_SELECTION: RoomChoice,
        GUEST_INFO: GuestDetails,
        PAYMENT_METHOD: PaymentChoice,
        SELECT_LANGUAGE: LanguageChoice,
        MISSING_INFO: MissingInfoQuery,
        CONFIRMATION: Confirm,
        NEXT_STEP: NextStep,
        RESET: Reset,
    }.get(label, Unrecognized)


def _as_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _as_count(value: Any) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _as_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def from_mapping(label: str, entities: Mapping[str, Any] | None) -> Intent:
    """Build a typed intent from an externally supplied (label, entities) pair.

    Used for LLM fallbacks, which answer with loose JSON. Unknown keys are ignored.
    """
    data = dict(entities or {})
    kind = variant_for(label)
    if kind is StayDetails:
        return StayDetails(
            check_in=_as_str(data.get("check_in") or data.get("checkIn")),
            check_out=_as_str(data.get("check_out") or data.get("checkOut")),
            undated=_as_str(data.get("date")),
            adults=_as_count(data.get("adults")),
            children=_as_int(data.get("children")),
        )
    if kind is RoomChoice:
        return RoomChoice(room_type=_as_str(data.get("room_type") or data.get("roomType")))
    if kind is GuestDetails:
        return GuestDetails(
            name=_as_str(data.get("name") or data.get("guest_name") or data.get("guestName")),
            phone=_as_str(data.get("phone")),
            email=_as_str(data.get("email")),
        )
    if kind is PaymentChoice:
        return PaymentChoice(method=_as_str(data.get("payment_method") or data.get("paymentMethod")
                                            or data.get("payment_type")))
    if kind is ServiceRequest:
        return ServiceRequest(service=label)
    if kind is LanguageChoice:
        return LanguageChoice(language=_as_str(data.get("language")), explicit=True)
    if kind is Unrecognized:
        return Unrecognized(label=label)
    return kind()
