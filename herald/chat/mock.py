"""In-memory chat adapter for tests and handler development.

Nothing is connected: sent messages are recorded on the adapter and
inbound messages are injected with ``receive()``.
"""

from __future__ import annotations

import itertools
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional

from .base import ChatAdapter
from .models import Channel, Message, User

if TYPE_CHECKING:
    from ..bot import Bot

DEFAULT_USER = User(id="UFakeUser", name="Fake User", email="fake@example.com")
DEFAULT_CHANNEL = Channel(id="CFakeChannel", name="Fake Channel")

_next_id = itertools.count()
_next_id_lock = threading.Lock()


@dataclass(frozen=True)
class SentMessage:
    """A message sent through the mock adapter.

    Attributes:
        text: Full message text.
        channel_id: Target channel (empty for direct messages).
        user_id: Target user (only set for direct messages).
        is_direct: Whether this was sent with send_direct_message().
    """
    text: str
    channel_id: str = ""
    user_id: str = ""
    is_direct: bool = False


class MockAdapter(ChatAdapter):
    """Chat adapter that records everything sent through it.

    ``user``, ``users``, ``channels`` and ``is_potential_user`` can be
    overridden to control what the lookup methods return.
    """

    def __init__(self, bot: "Bot"):
        super().__init__(bot)
        with _next_id_lock:
            self._id = str(next(_next_id))
        self._lock = threading.Lock()
        self.sent: List[SentMessage] = []
        self.sent_public: List[SentMessage] = []
        self.sent_direct: List[SentMessage] = []
        self.user: Optional[User] = DEFAULT_USER
        self.users: List[User] = [DEFAULT_USER]
        self.channels: List[Channel] = [DEFAULT_CHANNEL]
        self.running = False

    def clear(self) -> None:
        with self._lock:
            self.sent = []
            self.sent_public = []
            self.sent_direct = []

    async def receive(self, message: Message) -> None:
        """Simulate a message arriving from the chat service."""
        await self.bot.receive(message)

    async def run(self) -> None:
        self.running = True

    async def stop(self) -> None:
        self.running = False

    def send(self, channel_id: str, text: str) -> None:
        sent = SentMessage(text=text, channel_id=channel_id)
        with self._lock:
            self.sent.append(sent)
            self.sent_public.append(sent)

    def send_direct_message(self, user_id: str, text: str) -> None:
        sent = SentMessage(text=text, user_id=user_id, is_direct=True)
        with self._lock:
            self.sent.append(sent)
            self.sent_direct.append(sent)

    @property
    def adapter_id(self) -> str:
        return self._id

    @property
    def name(self) -> str:
        return "mock"

    def get_user(self, user_id: str) -> Optional[User]:
        return self.user

    def get_channel(self, channel_id: str) -> Optional[Channel]:
        for channel in self.channels:
            if channel.id == channel_id:
                return channel
        return None

    def get_all_users(self) -> List[User]:
        return list(self.users)

    def get_public_channels(self) -> List[Channel]:
        return list(self.channels)
