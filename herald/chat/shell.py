"""Shell chat adapter.

Reads lines from stdin and hands each one to the bot as a direct
message from a single local user. Replies are printed to stdout.
"""

from __future__ import annotations

import asyncio
import itertools
import sys
import threading
from datetime import datetime
from typing import TYPE_CHECKING, List, Optional, TextIO

import structlog

from ..exceptions import ChatAdapterError
from .base import ChatAdapter
from .models import Channel, Message, User

if TYPE_CHECKING:
    from ..bot import Bot

logger = structlog.get_logger("herald.chat")

TIME_FORMAT = "%Y%m%d%H%M%S"

SHELL_USER = User(
    id="shell_user",
    name="[Shell User]",
    email="user@example.com",
    is_bot=False,
)
SHELL_CHANNEL = Channel(id="shell_channel", name="shell channel")

_next_id = itertools.count()
_next_id_lock = threading.Lock()


class ShellAdapter(ChatAdapter):
    """Chat adapter backed by the process's stdin/stdout."""

    def __init__(
        self,
        bot: "Bot",
        stdin: Optional[TextIO] = None,
        stdout: Optional[TextIO] = None,
    ):
        super().__init__(bot)
        self._stdin = stdin or sys.stdin
        self._stdout = stdout or sys.stdout
        self._reader: Optional[asyncio.Task] = None
        with _next_id_lock:
            self._id = str(next(_next_id))

    async def run(self) -> None:
        self._reader = asyncio.create_task(self._read_lines())
        logger.info("shell_adapter_started", adapter_id=self._id)

    async def stop(self) -> None:
        if self._reader is not None:
            self._reader.cancel()
            try:
                await self._reader
            except asyncio.CancelledError:
                pass
            self._reader = None
        logger.info("shell_adapter_stopped", adapter_id=self._id)

    async def _read_lines(self) -> None:
        while True:
            try:
                line = await asyncio.to_thread(self._stdin.readline)
            except OSError as e:
                self.bot.report_error(ChatAdapterError(str(e), module="chat.shell"))
                return
            if not line:
                # EOF: nothing more will ever arrive
                self.bot.report_error(
                    ChatAdapterError("stdin closed", fatal=True, module="chat.shell")
                )
                return
            await self.bot.receive(Message(
                user=SHELL_USER,
                channel=SHELL_CHANNEL,
                text=line.rstrip("\r\n"),
                is_direct=True,
                timestamp=datetime.now().strftime(TIME_FORMAT),
            ))

    def send(self, channel_id: str, text: str) -> None:
        print("SEND:", text, file=self._stdout, flush=True)

    def send_direct_message(self, user_id: str, text: str) -> None:
        self.send("", "DIRECT MESSAGE: " + text)

    @property
    def adapter_id(self) -> str:
        return self._id

    @property
    def name(self) -> str:
        return "shell"

    def get_user(self, user_id: str) -> Optional[User]:
        if user_id == SHELL_USER.id:
            return SHELL_USER
        return None

    def get_channel(self, channel_id: str) -> Optional[Channel]:
        if channel_id == SHELL_CHANNEL.id:
            return SHELL_CHANNEL
        return None

    def get_all_users(self) -> List[User]:
        return [SHELL_USER]

    def get_public_channels(self) -> List[Channel]:
        return [SHELL_CHANNEL]
