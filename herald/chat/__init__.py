"""Chat transport layer for herald.

Provides the ChatAdapter interface, the chat value models and the
built-in adapters. Adapters are looked up by name in the explicit
``ADAPTERS`` table.
"""

from typing import Callable, Dict

from ..exceptions import AdapterNotFoundError
from .base import ChatAdapter
from .mock import MockAdapter, SentMessage
from .models import Channel, Message, User
from .shell import ShellAdapter

AdapterFactory = Callable[..., ChatAdapter]

ADAPTERS: Dict[str, AdapterFactory] = {
    "shell": ShellAdapter,
    "mock": MockAdapter,
}


def load_adapter(name: str) -> AdapterFactory:
    """Return the adapter factory registered under ``name``.

    Raises:
        AdapterNotFoundError: If no adapter has that name.
    """
    try:
        return ADAPTERS[name]
    except KeyError:
        raise AdapterNotFoundError(name) from None


__all__ = [
    "ADAPTERS",
    "AdapterFactory",
    "Channel",
    "ChatAdapter",
    "Message",
    "MockAdapter",
    "SentMessage",
    "ShellAdapter",
    "User",
    "load_adapter",
]
