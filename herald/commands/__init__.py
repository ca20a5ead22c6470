"""Command dispatch engine for herald.

Provides the Command/State types, the thread-safe CommandRegistry, the
quote-aware tokenizer, bot-name mention detection, the Dispatcher that
routes messages, and the built-in help command.
"""

from .addressing import AddressDetector, Addressing, build_name_pattern
from .base import Command, Handler, PatternHandler, State
from .dispatcher import Dispatcher
from .help import HELP_COMMAND_NAME
from .registry import CommandRegistry
from .rwlock import ReadWriteLock
from .tokenizer import tokenize

__all__ = [
    "AddressDetector",
    "Addressing",
    "Command",
    "CommandRegistry",
    "Dispatcher",
    "HELP_COMMAND_NAME",
    "Handler",
    "PatternHandler",
    "ReadWriteLock",
    "State",
    "build_name_pattern",
    "tokenize",
]
