from __future__ import annotations

import pytest

from helpers import ScriptedProvider
from profile_scout.models.session import SessionState
from profile_scout.services.activity import ActivityEmitter, EventChannel
from profile_scout.services.invoker import RetryableInvoker


@pytest.fixture
def session():
    return SessionState(original_query="fashion bloggers in NYC")


@pytest.fixture
def channel():
    return EventChannel()


@pytest.fixture
def emitter(session, channel):
    return ActivityEmitter(session, channel)


@pytest.fixture
def make_invoker(session, emitter):
    def factory(handler, **kwargs) -> RetryableInvoker:
        kwargs.setdefault("base_delay_ms", 0)
        return RetryableInvoker(ScriptedProvider(handler), session, emitter, **kwargs)

    return factory
