"""
concierge/dialogue.py

Step handlers for the reservation dialogue.

handle(step, match, session, ctx) picks the handler for the current step and returns a StepOutcome:
response text, validated slot updates, the next step, validation issues, a TurnStatus and an optional
structured Action for persistence/notification layers. Handlers never mutate the session; the engine
applies the outcome.

Rules shared by every step:
- reset goes back to Language from anywhere
- "what's missing" reports captured and missing fields without changing anything
- a step advances once its required fields are present, to the first later step that still needs
  something; an explicit next/confirm with requirements unmet is answered like an incomplete step
"""

from __future__ import annotations

import logging
import secrets
import string
from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import Any, Callable

from concierge import intents as labels
from concierge.config import Settings
from concierge.dates import nights_between
from concierge.intents import (
    Confirm,
    GuestDetails,
    IntentMatch,
    LanguageChoice,
    MissingInfoQuery,
    NextStep,
    PaymentChoice,
    Reset,
    RoomChoice,
    ServiceRequest,
    StayDetails,
)
from concierge.prompts import (
    describe_missing,
    describe_slots,
    payment_list,
    render,
    render_issue,
    room_list,
)
from concierge.session import ConversationSession, Slots, Step, next_open_step, report_missing, unmet
from concierge.validate import (
    ValidationIssue,
    validate_guest_details,
    validate_payment,
    validate_room,
    validate_stay,
)

logger = logging.getLogger(__name__)


class TurnStatus(str, Enum):
    OK = "ok"
    NO_INTENT_MATCH = "no_intent_match"
    VALIDATION_ERROR = "validation_error"
    INCOMPLETE_STEP = "incomplete_step"
    INVALID_TRANSITION = "invalid_transition"


SET_LANGUAGE = "SET_LANGUAGE"
START_SERVICE = "START_SERVICE"
SERVICE_REQUEST = "SERVICE_REQUEST"
UPDATE_SLOTS = "UPDATE_SLOTS"
CONFIRM_BOOKING = "CONFIRM_BOOKING"
RESET = "RESET"


@dataclass(frozen=True)
class Action:
    type: str
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass
class StepOutcome:
    response: str
    updates: dict[str, Any] = field(default_factory=dict)
    next_step: Step | None = None  # None: stay
    issues: list[ValidationIssue] = field(default_factory=list)
    status: TurnStatus = TurnStatus.OK
    action: Action | None = None
    language: str | None = None  # set when the guest picked a language
    clear_slots: bool = False
    confirmation_number: str | None = None


def new_confirmation_number() -> str:
    """'LG' followed by 8 upper-case base-36 characters."""
    alphabet = string.digits + string.ascii_uppercase
    return "LG" + "".join(secrets.choice(alphabet) for _ in range(8))


@dataclass
class DialogueContext:
    settings: Settings = field(default_factory=Settings)
    today: date = field(default_factory=date.today)
    confirmation_number: Callable[[], str] = new_confirmation_number


# ----------------------------- prompts -----------------------------

def booking_total(slots: Slots) -> tuple[int, int]:
    """(nights, total amount) for the stay; zeros while dates or room are missing."""
    if not (slots.check_in and slots.check_out and slots.room_price):
        return 0, 0
    nights = nights_between(slots.check_in, slots.check_out)
    return nights, nights * slots.room_price


def booking_summary(slots: Slots, language: str) -> str:
    nights, total = booking_total(slots)
    values = slots.captured()
    if values.get("children") is None and slots.adults is not None:
        values["children"] = 0
    return describe_slots(values, language) + f", {nights} night(s), total ${total}"


def prompt_for(step: Step, slots: Slots, language: str, number: str | None = None) -> str:
    """What the assistant asks at `step`."""
    if step is Step.LANGUAGE:
        return render("language_prompt", language)
    if step is Step.SERVICE_SELECT:
        return render("service_prompt", language)
    if step is Step.DATES:
        return render("dates_prompt", language)
    if step is Step.GUESTS:
        return render("guests_prompt", language)
    if step is Step.ROOM_SELECT:
        return render("room_prompt", language, rooms=room_list())
    if step is Step.GUEST_INFO:
        return render("guest_info_prompt", language)
    if step is Step.PAYMENT:
        return render("payment_prompt", language, methods=payment_list())
    if step is Step.CONFIRMATION:
        return render("confirmation_prompt", language, summary=booking_summary(slots, language))
    return render("complete", language, number=number or "")


def missing_report(slots: Slots, step: Step, language: str) -> str:
    captured = slots.captured()
    missing = report_missing(slots, step)
    if not missing:
        return render("nothing_missing", language, captured=describe_slots(captured, language))
    if not captured:
        return render("nothing_captured", language, missing=describe_missing(missing, language))
    return render("missing_report", language, captured=describe_slots(captured, language),
                  missing=describe_missing(missing, language))


def _join(*parts: str) -> str:
    return " ".join(p for p in parts if p)


# ----------------------------- handlers -----------------------------

def _validate_details(details, slots: Slots, ctx: DialogueContext):
    if isinstance(details, StayDetails):
        return validate_stay(details, slots, ctx.settings, ctx.today)
    if isinstance(details, RoomChoice):
        return validate_room(details.room_type)
    if isinstance(details, GuestDetails):
        return validate_guest_details(details)
    if isinstance(details, PaymentChoice):
        return validate_payment(details.method)
    return {}, []


def _collect(step: Step, intent, session: ConversationSession, ctx: DialogueContext) -> StepOutcome:
    """Shared handler for the data steps (Dates through Payment) and corrections at Confirmation."""
    lang = session.language
    explicit = isinstance(intent, (Confirm, NextStep))
    details = intent.details if explicit else intent
    updates, issues = _validate_details(details, session.slots, ctx)
    projected = replace(session.slots, **updates)
    noted = render("noted", lang, captured=describe_slots(updates, lang)) if updates else ""
    action = Action(UPDATE_SLOTS, {"fields": _plain(updates)}) if updates else None

    if issues:
        still = report_missing(projected, step) if unmet(projected, step) else []
        return StepOutcome(
            response=_join(noted, " ".join(render_issue(i, lang) for i in issues),
                           render("still_need", lang, missing=describe_missing(still, lang)) if still else ""),
            updates=updates, issues=issues, status=TurnStatus.VALIDATION_ERROR, action=action,
        )

    if step is Step.CONFIRMATION:
        return StepOutcome(response=_join(noted, prompt_for(step, projected, lang)), updates=updates, action=action)

    if unmet(projected, step):
        still = report_missing(projected, step)
        response = _join(noted, render("still_need", lang, missing=describe_missing(still, lang)))
        if not updates:
            response = _join(response, prompt_for(step, projected, lang))
        status = TurnStatus.INVALID_TRANSITION if explicit else TurnStatus.INCOMPLETE_STEP
        return StepOutcome(response=response, updates=updates, status=status, action=action)

    nxt = next_open_step(projected, step)
    logger.info("step %s complete, moving to %s", step.value, nxt.value)
    return StepOutcome(response=_join(noted, prompt_for(nxt, projected, lang)), updates=updates,
                       next_step=nxt, action=action)


def _plain(updates: dict[str, Any]) -> dict[str, Any]:
    return {k: v.isoformat() if isinstance(v, date) else v for k, v in updates.items()}


def _is_empty(details) -> bool:
    if details is None:
        return True
    if hasattr(details, "is_empty"):
        return details.is_empty()
    return not any(vars(details).values())


def _language(intent, session: ConversationSession, ctx: DialogueContext) -> StepOutcome:
    if isinstance(intent, ServiceRequest):
        language = intent.language or session.language
        outcome = _service(intent, session, ctx, language)
        outcome.language = language
        return outcome
    language = intent.language if isinstance(intent, LanguageChoice) and intent.language else None
    language = language or session.language or ctx.settings.default_language
    return StepOutcome(
        response=render("welcome", language),
        next_step=Step.SERVICE_SELECT,
        language=language,
        action=Action(SET_LANGUAGE, {"language": language}),
    )


def _service(intent, session: ConversationSession, ctx: DialogueContext,
             lang: str | None = None) -> StepOutcome:
    lang = lang or session.language
    if isinstance(intent, (StayDetails, RoomChoice, GuestDetails, PaymentChoice)) and not _is_empty(intent):
        # "2 adults from July 15 to July 18" starts a reservation on its own
        outcome = _collect(Step.DATES, intent, session, ctx)
        if outcome.next_step is None:
            outcome.next_step = Step.DATES
        outcome.action = Action(START_SERVICE, {"service": labels.RESERVATION})
        return outcome
    if not isinstance(intent, ServiceRequest):
        status = TurnStatus.INVALID_TRANSITION if isinstance(intent, (Confirm, NextStep)) \
            else TurnStatus.INCOMPLETE_STEP
        return StepOutcome(response=render("service_prompt", lang), status=status)

    service = intent.service
    if service in (labels.RESERVATION, labels.AVAILABILITY):
        nxt = next_open_step(session.slots, Step.SERVICE_SELECT)
        return StepOutcome(
            response=prompt_for(nxt, session.slots, lang),
            next_step=nxt,
            action=Action(START_SERVICE, {"service": service}),
        )
    if service in (labels.HELP, labels.INQUIRY):
        return StepOutcome(response=render("help", lang))
    return StepOutcome(
        response=render("service_request", lang, service=service.replace("_", " ")),
        action=Action(SERVICE_REQUEST, {"service": service, "language": lang}),
    )


def _data_step(step: Step):
    def handler(intent, session: ConversationSession, ctx: DialogueContext) -> StepOutcome:
        return _collect(step, intent, session, ctx)
    handler.__name__ = f"handle_{step.value}"
    return handler


def _booking_payload(slots: Slots, language: str) -> dict[str, Any]:
    nights, total = booking_total(slots)
    payload = slots.to_dict()
    payload["children"] = slots.children or 0
    payload.update(nights=nights, total_amount=total, language=language)
    return payload


def _confirmation(intent, session: ConversationSession, ctx: DialogueContext) -> StepOutcome:
    lang = session.language
    details = intent.details if isinstance(intent, (Confirm, NextStep)) else intent
    if not isinstance(intent, Confirm) or not _is_empty(details):
        # corrections, or anything other than a plain "yes", keep us here and show the booking again
        return _collect(Step.CONFIRMATION, details, session, ctx)

    missing = unmet(session.slots, Step.CONFIRMATION)
    if missing:
        return StepOutcome(
            response=render("still_need", lang, missing=describe_missing(missing, lang)),
            status=TurnStatus.INVALID_TRANSITION,
        )
    number = ctx.confirmation_number()
    nights, total = booking_total(session.slots)
    logger.info("booking confirmed: %s", number)
    return StepOutcome(
        response=render("confirmed", lang, number=number, total=total, nights=nights),
        next_step=Step.COMPLETE,
        clear_slots=True,
        confirmation_number=number,
        action=Action(CONFIRM_BOOKING, {"confirmation_number": number,
                                        "booking": _booking_payload(session.slots, lang)}),
    )


def _complete(intent, session: ConversationSession, ctx: DialogueContext) -> StepOutcome:
    return StepOutcome(response=render("complete", session.language, number=session.confirmation_number or ""))


HANDLERS: dict[Step, Callable[..., StepOutcome]] = {
    Step.LANGUAGE: _language,
    Step.SERVICE_SELECT: _service,
    Step.DATES: _data_step(Step.DATES),
    Step.GUESTS: _data_step(Step.GUESTS),
    Step.ROOM_SELECT: _data_step(Step.ROOM_SELECT),
    Step.GUEST_INFO: _data_step(Step.GUEST_INFO),
    Step.PAYMENT: _data_step(Step.PAYMENT),
    Step.CONFIRMATION: _confirmation,
    Step.COMPLETE: _complete,
}


def handle(step: Step, match: IntentMatch | None, session: ConversationSession,
           ctx: DialogueContext) -> StepOutcome:
    """Decide the response, slot updates and transition for one turn at `step`."""
    lang = session.language
    intent = match.entities if match else None
    if intent is None:
        return StepOutcome(
            response=_join(render("no_match", lang), prompt_for(step, session.slots, lang,
                                                              session.confirmation_number)),
            status=TurnStatus.NO_INTENT_MATCH,
        )
    if isinstance(intent, Reset):
        return StepOutcome(
            response=render("reset", lang),
            next_step=Step.LANGUAGE,
            clear_slots=True,
            action=Action(RESET),
        )
    if isinstance(intent, MissingInfoQuery):
        if step is Step.COMPLETE:
            return _complete(intent, session, ctx)
        return StepOutcome(response=missing_report(session.slots, step, lang))
    return HANDLERS[step](intent, session, ctx)
