"""Tests for the only_allow handler wrapper."""

from structlog.testing import capture_logs

from herald.security import only_allow


def test_allowed_user_runs_handler(bot, make_handler, make_message):
    handler = make_handler()
    bot.register_command("admin", only_allow(["Fake User"], handler))
    bot.process_message(make_message("admin reboot", direct=True))
    assert handler.calls == [["reboot"]]
    assert bot.chat.sent == []


def test_other_user_is_refused(bot, make_handler, make_message):
    handler = make_handler()
    bot.register_command("admin", only_allow(["root"], handler))
    with capture_logs() as logs:
        bot.process_message(make_message("admin reboot", direct=True, user_name="mallory"))
    assert handler.times_run == 0
    assert [m.text for m in bot.chat.sent] == ["Sorry, mallory. I can't let you do that."]
    assert [e["event"] for e in logs] == ["unauthorized_command_attempt"]


def test_user_names_are_case_sensitive(bot, make_handler, make_message):
    handler = make_handler()
    bot.register_command("admin", only_allow(["Root"], handler))
    bot.process_message(make_message("admin", direct=True, user_name="root"))
    assert handler.times_run == 0
