"""Main entry point for herald.

Initializes logging in two phases (defaults then config-driven),
builds a demo Bot on the configured chat adapter, and runs the async
event loop with graceful shutdown on SIGTERM/SIGINT or a fatal chat
adapter error.

Key functions:
    add_handlers: Registers the demo commands on a bot.
    main: Async entry point.
    run: Synchronous wrapper that calls asyncio.run(main()).
"""

import asyncio
import signal
import sys

import structlog

from . import __version__
from .commands import State
from .logging_config import setup_logging


def say_bye(state: State) -> None:
    state.reply(f"Bye {state.message.user.name}!")


def echo(state: State) -> None:
    state.reply(state.message.text)


def show_fields(state: State) -> None:
    for field in state.fields:
        state.reply(field)


def say_thanks(state: State) -> None:
    state.reply(f"You're welcome {state.message.user.name}!")


def unrecognized(state: State) -> None:
    state.reply("Unrecognized command. Type `help` to see supported commands.")


def add_handlers(bot) -> None:
    """Register the demo command set."""
    bot.register_command(
        "hi", say_bye,
        description="Says goodbye when the user says hi!",
        usage=[""],
    )
    # Hidden: not in the help listing, but "help echo" still describes it
    bot.register_command(
        "echo", echo,
        description="Hidden `echo` command!",
        usage=["", "`text to echo`"],
        hidden=True,
    )
    bot.register_command(
        "fields", show_fields,
        description="Show the fields/parameters of a command message!",
        usage=["`param0` `param1` `...`"],
    )
    # Only checked against the first word of addressed messages
    bot.register_regexp_command(
        r"thank[s]?(\s+you)?", "thanks", say_thanks,
        description="Say thank you!",
    )
    bot.register_alias("hi", "hello")
    bot.set_default_handler(unrecognized)


async def monitor_errors(bot, shutdown_event: asyncio.Event) -> None:
    """Log chat adapter errors; request shutdown on a fatal one."""
    logger = structlog.get_logger("herald.chat")
    while True:
        error = await bot.chat_errors.get()
        if error.fatal:
            logger.error("fatal_chat_error", error=str(error))
            shutdown_event.set()
            return
        logger.warning("chat_error", error=str(error))


async def main():
    """Main async entry point."""
    # Phase 1: defaults, cache_logger_on_first_use=False
    setup_logging()
    logger = structlog.get_logger("herald")

    logger.info("herald_starting", version=__version__)

    # Import here to ensure logging is configured first
    from .bot import Bot
    from .config import get_config

    config = get_config()
    config.validate()

    # Phase 2: reconfigure with real config
    setup_logging(config)

    bot = Bot.from_config(config)
    add_handlers(bot)
    if config.help_enabled:
        bot.enable_help()

    loop = asyncio.get_running_loop()
    shutdown_event = asyncio.Event()

    def handle_shutdown(sig):
        logger.info("shutdown_signal_received", signal=sig.name)
        shutdown_event.set()

    for sig in (signal.SIGTERM, signal.SIGINT):
        try:
            loop.add_signal_handler(sig, handle_shutdown, sig)
        except NotImplementedError:
            # Windows: add_signal_handler not supported.
            if sig == signal.SIGINT:
                signal.signal(
                    signal.SIGINT,
                    lambda s, f: handle_shutdown(signal.SIGINT),
                )

    try:
        bot_task = asyncio.create_task(bot.run())
        errors_task = asyncio.create_task(monitor_errors(bot, shutdown_event))

        await shutdown_event.wait()

        for task in (bot_task, errors_task):
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass

    except Exception as e:
        logger.error("bot_error", error=str(e))
        raise
    finally:
        await bot.stop()
        logger.info("herald_stopped")


def run():
    """Synchronous entry point for the ``herald`` console script."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
    except SystemExit as e:
        sys.exit(e.code)


if __name__ == "__main__":
    run()
