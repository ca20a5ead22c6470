"""Core types of the command dispatch engine.

Key classes:
    Command: A named, invokable unit. Either an exact-name command
        (``pattern is None``) or a regexp command matched against the
        first word of an addressed message.
    PatternHandler: A free pattern checked against the full text of
        messages that are not addressed to the bot.
    State: Per-invocation context handed to a handler.
"""

from __future__ import annotations

import bisect
import dataclasses
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, List, Optional, Pattern

if TYPE_CHECKING:
    from ..bot import Bot
    from ..chat.base import ChatAdapter
    from ..chat.models import Message

# Handler signature: (state: State) -> None
Handler = Callable[["State"], None]


def insert_sorted_unique(items: List[str], value: str) -> bool:
    """Insert value into a sorted list unless already present.

    Comparison is case-sensitive. Returns True if the value was inserted.
    """
    pos = bisect.bisect_left(items, value)
    if pos < len(items) and items[pos] == value:
        return False
    items.insert(pos, value)
    return True


@dataclass
class Command:
    """A registered command with its help documentation.

    Attributes:
        name: Display name; lookups compare it case-insensitively.
        handler: Called with a State when the command matches.
        description: One-line description shown by help.
        usage: Usage suffixes; help renders each as "<name> <usage>".
        hidden: Excluded from the help listing, still invokable.
        pattern: Compiled pattern for regexp commands, None otherwise.
        is_alias: True for entries created by alias registration.
    """
    name: str
    handler: Optional[Handler] = None
    description: str = ""
    usage: List[str] = field(default_factory=list)
    hidden: bool = False
    pattern: Optional[Pattern[str]] = None
    is_alias: bool = False
    _alias_names: List[str] = field(default_factory=list, repr=False)

    @property
    def key(self) -> str:
        """Normalized lookup key."""
        return self.name.lower()

    @property
    def is_regexp_command(self) -> bool:
        return self.pattern is not None

    @property
    def alias_names(self) -> List[str]:
        """Sorted copy of the alias names registered for this command."""
        return list(self._alias_names)

    def add_alias_name(self, alias_name: str) -> bool:
        """Record an alias name for help output.

        Does not affect dispatch. Case-sensitive. Returns False if the
        alias name was already recorded.
        """
        return insert_sorted_unique(self._alias_names, alias_name)

    def copy(self) -> "Command":
        """Copy with its own usage and alias lists."""
        return dataclasses.replace(
            self,
            usage=list(self.usage),
            _alias_names=list(self._alias_names),
        )

    def matches(self, word: str) -> bool:
        """Whether this regexp command's pattern matches anywhere in word."""
        return self.pattern is not None and self.pattern.search(word) is not None


@dataclass
class PatternHandler:
    """A free pattern and its handler. Never listed in help."""
    pattern: Pattern[str]
    handler: Handler

    def matches(self, text: str) -> bool:
        return self.pattern.search(text) is not None


class State:
    """Everything a handler needs to answer one message.

    Built fresh for every handler call and discarded afterwards.
    """

    def __init__(self, bot: "Bot", message: "Message", fields: Optional[List[str]] = None):
        self.bot = bot
        self.message = message
        self.fields: List[str] = list(fields) if fields else []

    @property
    def chat(self) -> "ChatAdapter":
        return self.bot.chat

    def reply(self, text: str) -> None:
        """Send text to the channel the message came from."""
        self.chat.send(self.message.channel.id, text)

    def __repr__(self) -> str:
        return f"State(text={self.message.text!r}, fields={self.fields!r})"
