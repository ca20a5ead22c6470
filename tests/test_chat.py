"""Tests for the chat adapters and adapter lookup."""

import asyncio
import io

import pytest

from herald.bot import Bot
from herald.chat import ADAPTERS, MockAdapter, ShellAdapter, load_adapter
from herald.chat.shell import SHELL_CHANNEL, SHELL_USER
from herald.exceptions import AdapterNotFoundError


def test_load_adapter_known_names():
    assert load_adapter("shell") is ShellAdapter
    assert load_adapter("mock") is MockAdapter
    assert set(ADAPTERS) == {"shell", "mock"}


def test_load_adapter_unknown_name():
    with pytest.raises(AdapterNotFoundError, match="Unknown chat adapter: nope"):
        load_adapter("nope")


class TestMockAdapter:

    def test_records_public_and_direct_messages(self):
        bot = Bot(name="testBot", adapter="mock")
        bot.chat.send("C1", "public")
        bot.chat.send_direct_message("U1", "private")
        assert [m.text for m in bot.chat.sent] == ["public", "private"]
        assert bot.chat.sent_public[0].channel_id == "C1"
        assert bot.chat.sent_direct[0].user_id == "U1"
        assert bot.chat.sent_direct[0].is_direct is True

    def test_clear(self):
        bot = Bot(name="testBot", adapter="mock")
        bot.chat.send("C1", "x")
        bot.chat.clear()
        assert bot.chat.sent == []
        assert bot.chat.sent_public == []

    def test_ids_are_unique(self):
        first = Bot(name="a", adapter="mock").chat
        second = Bot(name="b", adapter="mock").chat
        assert first.adapter_id != second.adapter_id

    def test_lookups(self):
        adapter = Bot(name="testBot", adapter="mock").chat
        assert adapter.get_user("anything").name == "Fake User"
        assert adapter.get_channel("CFakeChannel").name == "Fake Channel"
        assert adapter.get_channel("missing") is None
        assert len(adapter.get_all_users()) == 1


class TestShellAdapter:

    def _make_bot(self, text):
        stdout = io.StringIO()
        bot = Bot(
            name="testBot",
            adapter=lambda b: ShellAdapter(b, stdin=io.StringIO(text), stdout=stdout),
        )
        return bot, stdout

    def test_send_prints(self):
        bot, stdout = self._make_bot("")
        bot.chat.send("ignored", "hello")
        bot.chat.send_direct_message("U1", "psst")
        assert stdout.getvalue() == "SEND: hello\nSEND: DIRECT MESSAGE: psst\n"

    def test_lookups(self):
        bot, _ = self._make_bot("")
        assert bot.chat.get_user(SHELL_USER.id) == SHELL_USER
        assert bot.chat.get_user("other") is None
        assert bot.chat.get_public_channels() == [SHELL_CHANNEL]

    @pytest.mark.asyncio
    async def test_lines_become_direct_messages(self):
        bot, stdout = self._make_bot("echo one two\n")
        bot.register_command("echo", lambda state: state.reply(" ".join(state.fields)))
        task = asyncio.create_task(bot.run())
        try:
            error = await asyncio.wait_for(bot.chat_errors.get(), timeout=5)
            assert error.fatal is True
            await bot.join()
        finally:
            await bot.stop()
            await task
        assert stdout.getvalue() == "SEND: one two\n"
