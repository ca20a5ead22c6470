"""Shared fixtures for herald tests."""

import pytest

from herald.bot import Bot
from herald.chat import Channel, Message, User

BOT_NAME = "testBot"


class HandlerMock:
    """Callable handler that records the fields of every call."""

    def __init__(self):
        self.calls = []

    def __call__(self, state):
        self.calls.append(list(state.fields))

    @property
    def times_run(self):
        return len(self.calls)

    @property
    def last_fields(self):
        return self.calls[-1] if self.calls else None


def _make_message(text="", direct=False, user_name="Fake User"):
    return Message(
        user=User(id="U1", name=user_name),
        channel=Channel(id="C1", name="general"),
        text=text,
        is_direct=direct,
    )


@pytest.fixture
def bot():
    """Bot named testBot on the mock chat adapter."""
    return Bot(name=BOT_NAME, adapter="mock")


@pytest.fixture
def make_handler():
    return HandlerMock


@pytest.fixture
def make_message():
    return _make_message
