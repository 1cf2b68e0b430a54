"""
concierge/engine.py

The conversational engine: one value that owns the intent index and pattern tables and runs turns.

Public operations:
- classify_intent(text, language_hint): control phrases, then service phrases, then the vector
  classifier; None when nothing clears the threshold
- extract_entities(text, intent, step): typed Intent for the label, scoped to the current step
- advance_session(session, match): run the step handler and apply its outcome under the session lock
- process(session, text): classify + extract + advance in one locked turn
- advance_with_external(session, label, entities): same path for an outside classifier (LLM fallback)
- reset_session(session), add_example(text, intent), similar(text)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any, Callable, Mapping

from concierge import intents as labels
from concierge.config import Settings
from concierge.corpus import build_corpus
from concierge.dialogue import (
    RESET,
    Action,
    DialogueContext,
    StepOutcome,
    TurnStatus,
    handle,
    new_confirmation_number,
)
from concierge.extract import (
    extract_guest_info,
    extract_payment_method,
    extract_room_type,
    extract_stay_details,
)
from concierge.intents import (
    Confirm,
    GuestDetails,
    Intent,
    IntentMatch,
    LanguageChoice,
    MissingInfoQuery,
    NextStep,
    PaymentChoice,
    Reset,
    RoomChoice,
    ServiceRequest,
    StayDetails,
    Unrecognized,
    from_mapping,
    variant_for,
)
from concierge.patterns import SUPPORTED_LANGUAGES
from concierge.prompts import render_issue
from concierge.router import detect_language, match_patterns, resolve_language_name
from concierge.session import ConversationSession, Step
from concierge.vectors import CorpusEntry, IntentIndex

logger = logging.getLogger(__name__)

# The one variant each data step extracts, whatever label the classifier produced.
STEP_VARIANTS: dict[Step, type] = {
    Step.DATES: StayDetails,
    Step.GUESTS: StayDetails,
    Step.ROOM_SELECT: RoomChoice,
    Step.GUEST_INFO: GuestDetails,
    Step.PAYMENT: PaymentChoice,
}
STEP_LABELS: dict[Step, str] = {
    Step.DATES: labels.CHECK_IN_DATE,
    Step.GUESTS: labels.GUEST_COUNT,
    Step.ROOM_SELECT: labels.ROOM_SELECTION,
    Step.GUEST_INFO: labels.GUEST_INFO,
    Step.PAYMENT: labels.PAYMENT_METHOD,
}
VARIANT_LABELS: dict[type, str] = {
    StayDetails: labels.CHECK_IN_DATE,
    RoomChoice: labels.ROOM_SELECTION,
    GuestDetails: labels.GUEST_INFO,
    PaymentChoice: labels.PAYMENT_METHOD,
}
# Corrections at Confirmation may touch any field; the first extractor that finds something wins.
CORRECTION_VARIANTS: tuple[type, ...] = (RoomChoice, PaymentChoice, GuestDetails, StayDetails)
BOOKING_SERVICES = frozenset({labels.RESERVATION, labels.AVAILABILITY})


@dataclass
class TurnResult:
    response: str
    session: ConversationSession
    errors: list[str] = field(default_factory=list)
    status: TurnStatus = TurnStatus.OK
    action: Action | None = None
    intent: IntentMatch | None = None


def extract_variant(kind: type, text: str) -> Intent:
    """Run the extractor for one data variant."""
    if kind is StayDetails:
        return extract_stay_details(text)
    if kind is RoomChoice:
        return RoomChoice(room_type=extract_room_type(text))
    if kind is GuestDetails:
        return extract_guest_info(text)
    if kind is PaymentChoice:
        return PaymentChoice(method=extract_payment_method(text))
    raise ValueError(f"not a data variant: {kind.__name__}")


class Engine:
    """Owns the corpus index and settings; holds no per-conversation state."""

    def __init__(self, settings: Settings | None = None,
                 corpus: dict[str, dict[str, list[str]]] | None = None,
                 clock: Callable[[], date] = date.today,
                 confirmation_number: Callable[[], str] = new_confirmation_number):
        self.settings = settings or Settings()
        rows = build_corpus(corpus, self.settings.example_weight, self.settings.pattern_weight)
        self.index = IntentIndex.from_corpus(rows, dim=self.settings.vector_dim,
                                             threshold=self.settings.intent_threshold)
        self.clock = clock
        self.confirmation_number = confirmation_number

    # ------------------------- classification -------------------------

    def _pattern_match(self, hit) -> IntentMatch:
        return IntentMatch(intent=hit.intent, confidence=self.settings.pattern_confidence,
                           source="pattern", matched_text=hit.phrase)

    def classify_intent(self, text: str, language_hint: str | None = None) -> IntentMatch | None:
        """Best (intent, confidence) for the utterance, or None.

        Precedence: control phrases, then service phrases, then the vector classifier.
        """
        hit = match_patterns(text, language_hint)
        if hit:
            return self._pattern_match(hit)
        return self.index.classify(text, self.settings.intent_threshold)

    def similar(self, text: str, limit: int = 5) -> list[tuple[CorpusEntry, float]]:
        return self.index.similar(text, limit)

    def add_example(self, text: str, intent: str, entities: dict[str, Any] | None = None) -> CorpusEntry:
        """Hot-train: safe to call while other threads classify."""
        return self.index.add_example(text, intent, entities, weight=self.settings.example_weight)

    # --------------------------- extraction ---------------------------

    def _step_details(self, text: str, step: Step | None):
        """Non-empty details the step's own extractor(s) find in `text`, or None."""
        if step is Step.CONFIRMATION:
            kinds = CORRECTION_VARIANTS
        elif step is Step.SERVICE_SELECT:
            kinds = (StayDetails,)  # "2 adults from July 15" starts a reservation
        elif step in STEP_VARIANTS:
            kinds = (STEP_VARIANTS[step],)
        else:
            return None
        for kind in kinds:
            details = extract_variant(kind, text)
            empty = details.is_empty() if hasattr(details, "is_empty") else not any(vars(details).values())
            if not empty:
                return details
        return None

    def extract_entities(self, text: str, intent: IntentMatch | str, step: Step | None = None) -> Intent:
        """Typed entities for `intent`, scoped to `step`.

        At a data step every non-control label is read as that step's variant, so a collision in
        the hashed classifier never routes text to the wrong extractor. Control intents are only
        taken from the rule-based matcher or an external classifier, not from vector similarity.
        """
        if isinstance(intent, IntentMatch):
            label, trusted = intent.intent, intent.source != "vector"
        else:
            label, trusted = intent, True

        if label in labels.CONTROL_LABELS and trusted:
            if label == labels.RESET:
                return Reset()
            if label == labels.MISSING_INFO:
                return MissingInfoQuery()
            details = self._step_details(text, step)
            return Confirm(details) if label == labels.CONFIRMATION else NextStep(details)

        if step is Step.LANGUAGE:
            named = resolve_language_name(text)
            if label in labels.SERVICE_LABELS and trusted and not named:
                return ServiceRequest(label, language=detect_language(text, self.settings.default_language))
            return LanguageChoice(language=named or detect_language(text, self.settings.default_language),
                                  explicit=named is not None)

        if step in STEP_VARIANTS:
            return extract_variant(STEP_VARIANTS[step], text)
        # a named service other than booking ("find my reservation for July 15") is handed off as is
        handoff = trusted and label in labels.SERVICE_LABELS - BOOKING_SERVICES
        if step is Step.CONFIRMATION or (step is Step.SERVICE_SELECT and not handoff):
            details = self._step_details(text, step)
            if details is not None:
                return details

        kind = variant_for(label)
        if kind is ServiceRequest:
            return ServiceRequest(label)
        if kind in (StayDetails, RoomChoice, GuestDetails, PaymentChoice):
            return extract_variant(kind, text)
        if kind is LanguageChoice:
            named = resolve_language_name(text)
            return LanguageChoice(language=named or detect_language(text), explicit=named is not None)
        return Unrecognized(label)

    # ----------------------------- turns ------------------------------

    def _context(self) -> DialogueContext:
        return DialogueContext(settings=self.settings, today=self.clock(),
                               confirmation_number=self.confirmation_number)

    def _apply(self, session: ConversationSession, outcome: StepOutcome):
        if outcome.clear_slots:
            session.clear_slots()
            session.confirmation_number = outcome.confirmation_number
        elif outcome.updates:
            changed = session.merge(outcome.updates)
            logger.debug("session %s updated %s", session.session_id, changed)
        if outcome.language:
            session.language = outcome.language
        if outcome.next_step is not None and outcome.next_step is not session.step:
            logger.info("session %s: %s -> %s", session.session_id, session.step.value,
                        outcome.next_step.value)
            session.step = outcome.next_step
        if outcome.action is not None and outcome.action.type == RESET:
            logger.info("session %s reset", session.session_id)

    def _advance(self, session: ConversationSession, match: IntentMatch | None) -> TurnResult:
        outcome = handle(session.step, match, session, self._context())
        self._apply(session, outcome)
        session.add("assistant", outcome.response)
        return TurnResult(
            response=outcome.response,
            session=session,
            errors=[render_issue(i, session.language) for i in outcome.issues],
            status=outcome.status,
            action=outcome.action,
            intent=match,
        )

    def advance_session(self, session: ConversationSession, intent_match: IntentMatch | None,
                        text: str = "") -> TurnResult:
        """Apply an already classified turn.

        A match straight from classify_intent carries no entities yet; they are extracted here from
        `text`, scoped to the session's step.
        """
        with session.lock:
            if intent_match is not None and intent_match.entities is None:
                intent_match = replace(intent_match,
                                       entities=self.extract_entities(text, intent_match, session.step))
            return self._advance(session, intent_match)

    def _match_for_turn(self, session: ConversationSession, text: str,
                        language_hint: str | None) -> IntentMatch | None:
        match = self.classify_intent(text, language_hint)
        if session.step is Step.LANGUAGE:
            named = resolve_language_name(text)
            controls = match is not None and match.source == "pattern" and match.intent in labels.CONTROL_LABELS
            if not controls and (named or match is None):
                # naming a language, or saying anything at all, picks the language
                match = IntentMatch(intent=labels.SELECT_LANGUAGE, confidence=self.settings.pattern_confidence,
                                    source="pattern", matched_text=text)
        if match is None:
            # nothing classified, but the step's own extractor may still find what it asked for
            details = self._step_details(text, session.step)
            if details is None:
                return None
            label = STEP_LABELS.get(session.step) or VARIANT_LABELS[type(details)]
            return IntentMatch(intent=label, confidence=self.settings.pattern_confidence,
                               entities=details, source="extractor", matched_text=text)
        return replace(match, entities=self.extract_entities(text, match, session.step))

    def process(self, session: ConversationSession, text: str, language_hint: str | None = None) -> TurnResult:
        """Run one full turn for raw text."""
        with session.lock:
            session.add("user", text)
            match = self._match_for_turn(session, text, language_hint or session.language)
            logger.debug("turn at %s: %r -> %s", session.step.value, text, match)
            return self._advance(session, match)

    def advance_with_external(self, session: ConversationSession, label: str | None,
                              entities: Mapping[str, Any] | None = None, text: str = "",
                              confidence: float = 1.0) -> TurnResult:
        """Feed a (label, entities) pair from an outside classifier through the same state machine."""
        with session.lock:
            if text:
                session.add("user", text)
            if not label or label == "unknown":
                return self._advance(session, None)
            intent = from_mapping(label, entities)
            if isinstance(intent, LanguageChoice):
                code = intent.language if intent.language in SUPPORTED_LANGUAGES else \
                    resolve_language_name(intent.language or "")
                intent = LanguageChoice(language=code or detect_language(text, self.settings.default_language),
                                        explicit=code is not None)
            elif session.step is Step.LANGUAGE and not isinstance(intent, (ServiceRequest, Reset, MissingInfoQuery)):
                intent = self.extract_entities(text, labels.SELECT_LANGUAGE, Step.LANGUAGE)
            match = IntentMatch(intent=label, confidence=min(max(confidence, 0.0), 1.0), entities=intent,
                                source="external", matched_text=text or None)
            logger.debug("external turn at %s: %s", session.step.value, match)
            return self._advance(session, match)

    def reset_session(self, session: ConversationSession) -> ConversationSession:
        """Clear slots and return to the first step; the chosen language is kept."""
        with session.lock:
            session.clear_slots()
            session.step = Step.LANGUAGE
            session.confirmation_number = None
            logger.info("session %s reset", session.session_id)
        return session
