import threading
from datetime import date

from concierge.dialogue import TurnStatus
from concierge.engine import Engine
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
    Unrecognized,
)
from concierge.session import ConversationSession, Step


class TestClassify:
    def test_control_before_service(self, engine):
        match = engine.classify_intent("yes, book it")
        assert match.intent == "confirmation"
        assert match.source == "pattern"
        assert match.confidence == engine.settings.pattern_confidence

    def test_service_pattern(self, engine):
        match = engine.classify_intent("I want to book a room")
        assert match.intent == "reservation"
        assert match.matched_text == "book"

    def test_vector_fallback_on_corpus_example(self, engine):
        match = engine.classify_intent("deluxe king room")
        assert match.source == "vector"
        assert match.intent == "room_selection"
        assert 0.3 < match.confidence <= 1.0

    def test_empty_text(self, engine):
        assert engine.classify_intent("") is None

    def test_custom_corpus(self):
        engine = Engine(corpus={"upgrade": {"examples": ["upgrade my room please"]}})
        assert engine.classify_intent("upgrade my room please").intent == "upgrade"


class TestTraining:
    def test_added_example_is_used(self, engine):
        before = len(engine.index)
        engine.add_example("zxq plorb", "room_selection")
        assert len(engine.index) == before + 1
        match = engine.classify_intent("zxq plorb")
        assert match.intent == "room_selection"
        assert match.source == "vector"

    def test_concurrent_training_and_turns(self, engine):
        before = len(engine.index)
        sessions = [ConversationSession() for _ in range(4)]

        def train(n):
            for i in range(20):
                engine.add_example(f"custom phrase {n} {i}", "reservation")

        def talk(sess):
            for line in ("English", "I want to book a room", "what is missing"):
                engine.process(sess, line)

        threads = [threading.Thread(target=train, args=(n,)) for n in range(3)]
        threads += [threading.Thread(target=talk, args=(s,)) for s in sessions]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(engine.index) == before + 60
        assert all(s.step is Step.DATES for s in sessions)


class TestExtractEntities:
    def test_data_step_scopes_extractor(self, engine):
        """Whatever the label, a data step reads its own fields."""
        match = IntentMatch("payment_method", 0.5, source="vector")
        assert engine.extract_entities("deluxe king", match, Step.ROOM_SELECT) == RoomChoice("Deluxe King Room")

    def test_stay_details(self, engine):
        details = engine.extract_entities("from July 15 to July 18", "check_in_date", Step.DATES)
        assert details == StayDetails(check_in="July 15", check_out="July 18")

    def test_guest_and_payment_steps(self, engine):
        assert isinstance(engine.extract_entities("my name is Ana Ruiz", "guest_info", Step.GUEST_INFO),
                          GuestDetails)
        assert engine.extract_entities("cash", "payment_method", Step.PAYMENT) == PaymentChoice("Pay at Hotel")

    def test_controls_from_patterns(self, engine):
        assert engine.extract_entities("start over", "reset", Step.PAYMENT) == Reset()
        assert engine.extract_entities("what's missing", "missing_info", Step.PAYMENT) == MissingInfoQuery()

    def test_vector_controls_not_trusted(self, engine):
        """A hashed-vector hit never resets or confirms on its own."""
        reset = IntentMatch("reset", 0.6, source="vector")
        assert engine.extract_entities("cash", reset, Step.PAYMENT) == PaymentChoice("Pay at Hotel")
        confirm = IntentMatch("confirmation", 0.6, source="vector")
        assert engine.extract_entities("hmm", confirm, Step.CONFIRMATION) == Unrecognized("confirmation")

    def test_confirm_carries_step_details(self, engine):
        entities = engine.extract_entities("yes, 3 adults", "confirmation", Step.GUESTS)
        assert entities == Confirm(StayDetails(adults=3))

    def test_confirmation_corrections(self, engine):
        assert engine.extract_entities("make it the ocean view", "room_selection",
                                       Step.CONFIRMATION) == RoomChoice("Ocean View Room")

    def test_language_step(self, engine):
        assert engine.extract_entities("Español", "select_language", Step.LANGUAGE) == \
            LanguageChoice("es", explicit=True)
        assert engine.extract_entities("quiero reservar", "reservation", Step.LANGUAGE) == \
            ServiceRequest("reservation", language="es")

    def test_stay_details_at_service_select(self, engine):
        entities = engine.extract_entities("2 adults from July 15 to July 18", "next_step", Step.SERVICE_SELECT)
        assert entities == NextStep(StayDetails(check_in="July 15", check_out="July 18", adults=2))
        vector_hit = IntentMatch("payment_method", 0.4, source="vector")
        assert engine.extract_entities("2 adults from July 15 to July 18", vector_hit, Step.SERVICE_SELECT) == \
            StayDetails(check_in="July 15", check_out="July 18", adults=2)

    def test_service_labels_outside_data_steps(self, engine):
        assert engine.extract_entities("find my reservation", "search_reservation",
                                       Step.SERVICE_SELECT) == ServiceRequest("search_reservation")

    def test_named_service_keeps_its_label(self, engine):
        match = engine.classify_intent("find my reservation for July 15")
        assert match.intent == "search_reservation"
        assert engine.extract_entities("find my reservation for July 15", match, Step.SERVICE_SELECT) == \
            ServiceRequest("search_reservation")

    def test_booking_service_still_takes_stay_details(self, engine):
        match = engine.classify_intent("book a room for 2 adults")
        assert engine.extract_entities("book a room for 2 adults", match, Step.SERVICE_SELECT) == \
            StayDetails(adults=2)


class TestAdvanceSession:
    def test_classified_match_without_entities(self, engine):
        sess = ConversationSession(step=Step.SERVICE_SELECT)
        match = engine.classify_intent("I want to book a room")
        assert match.entities is None
        result = engine.advance_session(sess, match)
        assert result.status is TurnStatus.OK
        assert result.intent.entities == ServiceRequest("reservation")
        assert sess.step is Step.DATES

    def test_entities_read_from_text(self, engine, session_at):
        sess = session_at(Step.CONFIRMATION, check_in=date(2027, 7, 15), check_out=date(2027, 7, 18),
                          adults=2, room_type="Family Suite", room_price=180, guest_name="Ana Ruiz",
                          phone="5551234567", email="ana@example.com", payment_method="Credit Card")
        text = "yes, make it the ocean view"
        result = engine.advance_session(sess, engine.classify_intent(text), text)
        assert sess.step is Step.CONFIRMATION
        assert sess.slots.room_type == "Ocean View Room"

        result = engine.advance_session(sess, engine.classify_intent("yes"), "yes")
        assert sess.step is Step.COMPLETE
        assert result.action.payload["confirmation_number"] == "LG12345678"


class TestExternal:
    def test_external_label_drives_state_machine(self, engine, session_at):
        sess = session_at(Step.DATES)
        result = engine.advance_with_external(
            sess, "check_in_date", {"check_in": "July 15", "check_out": "July 18", "adults": 2})
        assert result.status is TurnStatus.OK
        assert result.intent.source == "external"
        assert sess.step is Step.ROOM_SELECT

    def test_unknown_is_no_match(self, engine, session_at):
        sess = session_at(Step.PAYMENT)
        result = engine.advance_with_external(sess, "unknown", {})
        assert result.status is TurnStatus.NO_INTENT_MATCH
        assert sess.step is Step.PAYMENT

    def test_external_language(self, engine):
        sess = ConversationSession()
        engine.advance_with_external(sess, "select_language", {"language": "Spanish"}, text="Spanish please")
        assert sess.language == "es"
        assert sess.step is Step.SERVICE_SELECT
        assert sess.history[0] == {"role": "user", "content": "Spanish please"}

    def test_external_payment_is_normalized(self, engine, session_at):
        sess = session_at(Step.PAYMENT)
        engine.advance_with_external(sess, "payment_method", {"payment_method": "cash on arrival"})
        assert sess.slots.payment_method == "Pay at Hotel"
        assert sess.step is Step.CONFIRMATION


class TestReset:
    def test_reset_session(self, engine, session_at):
        sess = session_at(Step.PAYMENT, adults=2, check_in=date(2027, 7, 15))
        sess.language = "es"
        sess.confirmation_number = "LG00000000"
        engine.reset_session(sess)
        assert sess.step is Step.LANGUAGE
        assert not sess.slots.captured()
        assert sess.confirmation_number is None
        assert sess.language == "es"

    def test_turn_result_fields(self, engine):
        sess = ConversationSession()
        result = engine.process(sess, "English")
        assert result.session is sess
        assert result.errors == []
        assert result.intent.intent == "select_language"
