"""Bot runtime for herald.

Ties a chat adapter to the dispatcher: the adapter delivers messages
with ``receive()``, the run loop hands each one to a worker thread
running ``Dispatcher.process_message`` so slow handlers never block
other messages, and handlers answer through the adapter.

Key classes:
    Bot: Owns the name, chat adapter, command registry and dispatcher,
        and exposes the registration API to application code.
"""

import asyncio
from typing import Dict, Iterable, Optional, Set, Union

import structlog

from .chat import AdapterFactory, ChatAdapter, Message, load_adapter
from .commands import Command, CommandRegistry, Dispatcher, Handler
from .commands.registry import PatternLike
from .config import DEFAULT_BOT_NAME, DEFAULT_CHAT_ADAPTER, Config
from .exceptions import ChatAdapterError

logger = structlog.get_logger("herald.bot")


class Bot:
    """A chat bot: one name, one chat adapter, one command registry.

    Registration may happen before or while the bot runs; the registry
    serializes it against message processing.

    Args:
        name: Name the bot answers to in mentions. Empty falls back to
            the default name.
        adapter: Chat adapter name (see ``herald.chat.ADAPTERS``) or a
            factory called with the bot.
        registry: Command registry to use; a new one if omitted.
    """

    def __init__(
        self,
        name: str = DEFAULT_BOT_NAME,
        adapter: Union[str, AdapterFactory] = DEFAULT_CHAT_ADAPTER,
        registry: Optional[CommandRegistry] = None,
    ):
        if not name or not name.strip():
            logger.warning("bot_name_missing", default=DEFAULT_BOT_NAME)
            name = DEFAULT_BOT_NAME
        self.name = name
        self.registry = registry if registry is not None else CommandRegistry()
        self.dispatcher = Dispatcher(self, self.registry)

        factory = load_adapter(adapter) if isinstance(adapter, str) else adapter
        self.chat: ChatAdapter = factory(self)

        self.running = False
        self.chat_errors: "asyncio.Queue[ChatAdapterError]" = asyncio.Queue()
        self._incoming: "asyncio.Queue[Optional[Message]]" = asyncio.Queue()
        self._tasks: Set[asyncio.Task] = set()
        self._stopped = False

    @classmethod
    def from_config(cls, config: Config, **kwargs) -> "Bot":
        return cls(name=config.bot_name, adapter=config.chat_adapter, **kwargs)

    # --- Registration ---

    def register_command(
        self,
        name: str,
        handler: Handler,
        description: str = "",
        usage: Optional[Iterable[str]] = None,
        hidden: bool = False,
    ) -> None:
        self.registry.register_command(name, handler, description, usage, hidden)

    def register_regexp_command(
        self,
        pattern: PatternLike,
        name: str,
        handler: Handler,
        description: str = "",
        usage: Optional[Iterable[str]] = None,
        hidden: bool = False,
    ) -> None:
        self.registry.register_regexp_command(pattern, name, handler, description, usage, hidden)

    def register_alias(self, original_name: str, alias_name: str) -> None:
        self.registry.register_alias(original_name, alias_name)

    def register_alias_regexp(self, original_name: str, alias_name: str, pattern: PatternLike) -> None:
        self.registry.register_alias_regexp(original_name, alias_name, pattern)

    def register_pattern(self, pattern: PatternLike, handler: Handler) -> None:
        self.registry.register_pattern(pattern, handler)

    def set_default_handler(self, handler: Handler) -> None:
        self.registry.set_default_handler(handler)

    def enable_help(self) -> None:
        self.dispatcher.enable_help()

    def commands(self) -> Dict[str, Command]:
        """Copy of the exact-name command map."""
        return self.registry.snapshot_commands()

    def process_message(self, message: Message) -> None:
        self.dispatcher.process_message(message)

    # --- Lifecycle ---

    async def receive(self, message: Message) -> None:
        """Queue a message for processing. Called by the chat adapter."""
        await self._incoming.put(message)

    def report_error(self, error: ChatAdapterError) -> None:
        """Record an adapter error on ``chat_errors``. Called by the chat adapter."""
        logger.warning("chat_adapter_error", error=str(error), fatal=error.fatal)
        self.chat_errors.put_nowait(error)

    async def run(self) -> None:
        """Start the adapter and process messages until stop() is called."""
        await self.chat.run()
        self.running = True
        logger.info("bot_started", name=self.name, adapter=self.chat.name)

        while self.running:
            message = await self._incoming.get()
            if message is None:
                break
            if self._is_own_message(message):
                continue
            task = asyncio.create_task(
                asyncio.to_thread(self.dispatcher.process_message, message)
            )
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

    async def stop(self) -> None:
        """Stop the adapter and wait for in-flight messages to finish."""
        if self._stopped:
            return
        self._stopped = True
        self.running = False
        self._incoming.put_nowait(None)
        await self.chat.stop()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        logger.info("bot_stopped", name=self.name)

    async def join(self) -> None:
        """Wait until every message queued so far has been processed.

        Only meaningful while run() is active.
        """
        while self.running and (not self._incoming.empty() or self._tasks):
            if self._tasks:
                await asyncio.gather(*list(self._tasks), return_exceptions=True)
            else:
                await asyncio.sleep(0)

    def _is_own_message(self, message: Message) -> bool:
        return message.user.name.lower() == self.name.lower()
