"""Access helpers for handler code.

The dispatcher enforces no authorization of its own; handlers that
should only serve some users wrap themselves with only_allow().
"""

import functools
from typing import Iterable

import structlog

from .commands.base import Handler, State

logger = structlog.get_logger("herald.security")

DENIED_FORMAT = "Sorry, {name}. I can't let you do that."


def only_allow(user_names: Iterable[str], handler: Handler) -> Handler:
    """Wrap a handler so only the listed user names may run it.

    Anyone else gets a refusal sent to the message's channel.
    """
    allowed = frozenset(user_names)

    @functools.wraps(handler)
    def wrapper(state: State) -> None:
        actual = state.message.user.name
        if actual in allowed:
            handler(state)
            return
        logger.warning("unauthorized_command_attempt", user=actual, text=state.message.text)
        state.reply(DENIED_FORMAT.format(name=actual))

    return wrapper
