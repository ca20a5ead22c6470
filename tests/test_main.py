"""Tests for the demo command set wired up by the CLI."""

import asyncio

import pytest

from herald.exceptions import ChatAdapterError
from herald.main import add_handlers, monitor_errors


@pytest.fixture
def demo_bot(bot):
    add_handlers(bot)
    bot.enable_help()
    return bot


def _replies(bot):
    return [m.text for m in bot.chat.sent]


def test_hi_says_bye(demo_bot, make_message):
    demo_bot.process_message(make_message("hi", direct=True))
    assert _replies(demo_bot) == ["Bye Fake User!"]


def test_hello_is_alias_of_hi(demo_bot, make_message):
    demo_bot.process_message(make_message("@testBot hello"))
    assert _replies(demo_bot) == ["Bye Fake User!"]


def test_fields_replies_each_field(demo_bot, make_message):
    demo_bot.process_message(make_message('fields a "b c"', direct=True))
    assert _replies(demo_bot) == ["a", "b c"]


def test_thanks_regexp(demo_bot, make_message):
    demo_bot.process_message(make_message("Thanks!", direct=True))
    assert _replies(demo_bot) == ["You're welcome Fake User!"]


def test_unknown_command_gets_default(demo_bot, make_message):
    demo_bot.process_message(make_message("dance", direct=True))
    assert _replies(demo_bot) == ["Unrecognized command. Type `help` to see supported commands."]


def test_echo_hidden_from_help(demo_bot, make_message):
    demo_bot.process_message(make_message("help", direct=True))
    listing = _replies(demo_bot)[0]
    assert "*hi*" in listing
    assert "*thanks*" in listing
    assert "*echo*" not in listing
    assert "hello" not in listing


@pytest.mark.asyncio
async def test_monitor_errors_stops_on_fatal(bot):
    shutdown = asyncio.Event()
    bot.report_error(ChatAdapterError("blip"))
    bot.report_error(ChatAdapterError("gone", fatal=True))
    await asyncio.wait_for(monitor_errors(bot, shutdown), timeout=1)
    assert shutdown.is_set()
