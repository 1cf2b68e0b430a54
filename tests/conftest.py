from datetime import date

import pytest

from concierge.config import Settings
from concierge.engine import Engine
from concierge.session import ConversationSession, Step


TODAY = date(2027, 1, 10)
CONFIRMATION = "LG12345678"


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def engine(settings):
    return Engine(settings, clock=lambda: TODAY, confirmation_number=lambda: CONFIRMATION)


@pytest.fixture
def session_at():
    """Factory for a fresh English session parked at a given step."""
    def make(step: Step, **slots) -> ConversationSession:
        sess = ConversationSession(step=step, language="en")
        sess.merge(slots)
        return sess
    return make
