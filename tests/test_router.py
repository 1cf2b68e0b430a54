from concierge.router import (
    detect_language,
    match_control,
    match_patterns,
    match_service,
    resolve_language_name,
)


class TestPatterns:
    def test_booking_phrase(self):
        hit = match_patterns("I want to book a room")
        assert hit.intent == "reservation"
        assert hit.language == "en"
        assert hit.phrase == "book"

    def test_single_words_need_word_boundaries(self):
        """'book' must not fire inside 'booking'."""
        assert match_service("booking") is None

    def test_control_before_service(self):
        assert match_patterns("yes please book it").intent == "confirmation"

    def test_new_booking_is_a_reservation(self):
        assert match_control("I'd like a new booking please") is None
        assert match_patterns("I'd like a new booking please").intent == "reservation"

    def test_reset_before_other_controls(self):
        assert match_control("yes, start over").intent == "reset"

    def test_missing_info_before_confirmation(self):
        assert match_control("yes, what else do you need").intent == "missing_info"

    def test_declared_language_checked_first(self):
        hit = match_service("quiero reservar", language="es")
        assert hit.intent == "reservation"
        assert hit.language == "es"

    def test_non_latin_phrase(self):
        hit = match_service("मुझे कमरा चाहिए")
        assert hit.intent == "reservation"
        assert hit.language == "hi"

    def test_empty_text(self):
        assert match_patterns("") is None
        assert match_patterns("   ") is None

    def test_service_request_labels(self):
        assert match_service("I need to check out").intent == "checkout"
        assert match_service("any vacancy?").intent == "availability"


class TestLanguage:
    def test_script_detection(self):
        assert detect_language("मुझे कमरा चाहिए") == "hi"
        assert detect_language("予約したい") == "ja"
        assert detect_language("예약하고 싶어요") == "ko"

    def test_keyword_detection(self):
        assert detect_language("hola, quiero una habitación") == "es"

    def test_default(self):
        assert detect_language("hello there") == "en"
        assert detect_language("", default="es") == "es"

    def test_named_language(self):
        assert resolve_language_name("Español please") == "es"
        assert resolve_language_name("english") == "en"
        assert resolve_language_name("हिंदी") == "hi"

    def test_no_language_named(self):
        assert resolve_language_name("book a room") is None
        assert resolve_language_name("") is None
