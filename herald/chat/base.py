"""Chat adapter interface.

An adapter connects a Bot to a chat service. It turns service events
into Message values delivered through ``bot.receive()`` and exposes the
send capability that handlers use to answer.

``send`` and friends are synchronous because handlers run in worker
threads; ``run`` and ``stop`` are coroutines driven by the bot's event
loop.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, List, Optional

from .models import Channel, User

if TYPE_CHECKING:
    from ..bot import Bot


class ChatAdapter(ABC):
    """Abstract base class for chat adapters.

    Args:
        bot: The owning bot. Adapters call ``bot.receive(message)`` for
            inbound messages and ``bot.report_error(error)`` for problems.
    """

    def __init__(self, bot: "Bot"):
        self.bot = bot

    @abstractmethod
    async def run(self) -> None:
        """Start delivering messages to the bot. Must not block forever."""
        ...

    @abstractmethod
    async def stop(self) -> None:
        """Stop delivering messages and release resources."""
        ...

    @abstractmethod
    def send(self, channel_id: str, text: str) -> None:
        """Send text to a channel."""
        ...

    @abstractmethod
    def send_direct_message(self, user_id: str, text: str) -> None:
        """Send text privately to a user."""
        ...

    def send_typing(self, channel_id: str) -> None:
        """Show a typing indicator, if the service has one."""
        return None

    @property
    @abstractmethod
    def adapter_id(self) -> str:
        """Identifier that stays constant while connected to the same chat."""
        ...

    @property
    def name(self) -> str:
        """Name of the team/chat instance."""
        return ""

    @property
    def max_length(self) -> int:
        """Maximum length of a single outgoing message (0 means unlimited)."""
        return 0

    def get_user(self, user_id: str) -> Optional[User]:
        return None

    def get_channel(self, channel_id: str) -> Optional[Channel]:
        return None

    def get_all_users(self) -> List[User]:
        return []

    def get_public_channels(self) -> List[Channel]:
        return []
