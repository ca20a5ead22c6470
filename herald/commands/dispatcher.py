"""Message dispatcher.

Decides which handler, if any, processes an inbound message:

1. Messages addressed to the bot (name mention or direct message) have
   the mention stripped and are split into fields. The first field is
   looked up as an exact-name command, then against the regexp
   commands in registration order; the handler gets the remaining
   fields. If nothing matches, the default handler gets all fields,
   the attempted command word included.
2. Other messages are searched against the free patterns in
   registration order; the first match is called with no fields.

Any exception raised by a handler is logged and swallowed so one bad
handler cannot stop message processing.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

import structlog

from .addressing import AddressDetector
from .base import Handler, State
from .registry import CommandRegistry
from .tokenizer import tokenize

if TYPE_CHECKING:
    from ..bot import Bot
    from ..chat.models import Message

logger = structlog.get_logger("herald.dispatch")


class Dispatcher:
    """Routes messages for one bot through its command registry.

    Args:
        bot: Owning bot; provides ``name`` for mention detection and
            ``chat`` for handler replies.
        registry: Registry to route through. A new empty one is created
            if omitted.
    """

    def __init__(self, bot: "Bot", registry: Optional[CommandRegistry] = None):
        self.bot = bot
        self.registry = registry if registry is not None else CommandRegistry()
        self.detector = AddressDetector(bot.name)

    def enable_help(self) -> None:
        self.registry.enable_help()

    def process_message(self, message: "Message") -> None:
        """Find the handler for a message and run it.

        Holds the registry's read lock for the whole call, so concurrent
        messages proceed in parallel while registrations wait.
        """
        with self.registry.lock.read():
            try:
                self._route(message)
            except Exception as e:
                logger.exception(
                    "message_processing_failed",
                    text=message.text,
                    error=str(e),
                )

    def _route(self, message: "Message") -> None:
        addressing = self.detector.detect(message)
        if addressing.addressed:
            if not self._match_commands(message, addressing.text):
                self._call_default(message, addressing.text)
        else:
            self._match_patterns(message)

    def _match_commands(self, message: "Message", text: str) -> bool:
        fields = tokenize(text)
        if not fields:
            return False
        command_name = fields[0].lower()
        args = fields[1:]
        cmd = self.registry.lookup(command_name)
        if cmd is None or cmd.is_regexp_command:
            cmd = self.registry.find_regexp_command(command_name)
            if cmd is None:
                return False
        self._invoke(cmd.handler, message, args, command=cmd.name)
        return True

    def _call_default(self, message: "Message", text: str) -> None:
        handler = self.registry.default_handler
        if handler is None:
            logger.info("default_handler_not_set", text=message.text)
            return
        self._invoke(handler, message, tokenize(text), command=None)

    def _match_patterns(self, message: "Message") -> bool:
        pair = self.registry.find_pattern(message.text)
        if pair is None:
            return False
        self._invoke(pair.handler, message, [], command=None)
        return True

    def _invoke(
        self,
        handler: Optional[Handler],
        message: "Message",
        fields: List[str],
        command: Optional[str],
    ) -> None:
        if handler is None:
            logger.warning("command_without_handler", command=command)
            return
        handler(State(self.bot, message, fields))
