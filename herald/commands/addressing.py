"""Detection of messages addressed to the bot.

A message is addressed to the bot when it starts with a mention of the
bot's name (``@bot:``, ``bot,``, ``Bot hi`` ...) or when it arrives in a
direct conversation. The mention is stripped before command matching.
"""

import re
from dataclasses import dataclass
from typing import Pattern

from ..chat.models import Message
from ..exceptions import ConfigurationError

# Optional "@", the name, a word boundary, then an optional ":" or ","
# surrounded by any whitespace.
BOT_NAME_REGEX_FORMAT = r"^@?{name}(?!\w)\s*[:,]?\s*"


def build_name_pattern(bot_name: str) -> Pattern[str]:
    """Compile the case-insensitive mention prefix pattern for a bot name.

    Raises:
        ConfigurationError: If the bot name is empty.
    """
    if not bot_name or not bot_name.strip():
        raise ConfigurationError(
            "Bot name must not be empty",
            config_key="bot_name",
            module="commands.addressing",
        )
    return re.compile(
        BOT_NAME_REGEX_FORMAT.format(name=re.escape(bot_name.strip())),
        re.IGNORECASE,
    )


@dataclass(frozen=True)
class Addressing:
    """Result of checking one message.

    Attributes:
        addressed: True if the message is directed at the bot.
        text: Message text with any mention prefix removed.
        prefix: The mention prefix that was removed ("" if none).
        is_direct: True if the message came in a direct conversation.
    """
    addressed: bool
    text: str
    prefix: str = ""
    is_direct: bool = False


class AddressDetector:
    """Decides whether messages are addressed to a named bot."""

    def __init__(self, bot_name: str):
        self.bot_name = bot_name
        self.pattern = build_name_pattern(bot_name)

    def match_prefix(self, text: str) -> str:
        """Return the mention prefix at the start of text, or ""."""
        match = self.pattern.match(text)
        return match.group(0) if match else ""

    def detect(self, message: Message) -> Addressing:
        text = message.text
        prefix = self.match_prefix(text)
        if prefix:
            return Addressing(
                addressed=True,
                text=text[len(prefix):],
                prefix=prefix,
                is_direct=message.is_direct,
            )
        return Addressing(
            addressed=message.is_direct,
            text=text,
            is_direct=message.is_direct,
        )
