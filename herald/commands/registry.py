"""Command registry for the dispatch engine.

Holds exact-name commands, ordered regexp commands, aliases, free
patterns and the default handler. Every registration takes the write
side of ``lock`` for its whole duration. Message processing holds the
read side while it uses the unlocked lookup helpers below, so a
registration never interleaves with a message being routed.

Setup mistakes that only affect one entry (duplicate names, bad
aliases, a second default handler) are logged as warnings and never
raise. A missing or unparsable pattern for a primary regexp command
raises CommandPatternError: that is a bug in the bot's setup code.
"""

from __future__ import annotations

import re
from functools import partial
from typing import Dict, Iterable, List, Optional, Pattern, Union

import structlog

from ..exceptions import CommandPatternError
from .base import Command, Handler, PatternHandler, insert_sorted_unique
from .help import HELP_COMMAND_NAME, HELP_DESCRIPTION, HELP_USAGE, help_handler
from .rwlock import ReadWriteLock

logger = structlog.get_logger("herald.dispatch")

PatternLike = Union[str, Pattern[str], None]


def _compile(pattern: PatternLike) -> Optional[Pattern[str]]:
    """Compile a pattern given as a string; pass compiled patterns through.

    Raises:
        re.error: If a string pattern does not parse.
    """
    if pattern is None or isinstance(pattern, re.Pattern):
        return pattern
    return re.compile(pattern)


def _pattern_source(pattern: PatternLike) -> Optional[str]:
    if isinstance(pattern, re.Pattern):
        return pattern.pattern
    return pattern


class CommandRegistry:
    """Thread-safe store of everything the dispatcher can route to."""

    def __init__(self) -> None:
        self.lock = ReadWriteLock()
        self._commands: Dict[str, Command] = {}
        self._regexp_commands: List[Command] = []
        self._command_names: List[str] = []
        self._patterns: List[PatternHandler] = []
        self._default_handler: Optional[Handler] = None

    # ------------------------------------------------------------------
    # Registration (write lock)
    # ------------------------------------------------------------------

    def register_command(
        self,
        name: str,
        handler: Handler,
        description: str = "",
        usage: Optional[Iterable[str]] = None,
        hidden: bool = False,
    ) -> None:
        """Register an exact-name command.

        The name is matched case-insensitively against the first word of
        addressed messages. Registering a name twice replaces the earlier
        command and logs a warning.
        """
        with self.lock.write():
            self._add_command(Command(
                name=name,
                handler=handler,
                description=description,
                usage=list(usage or []),
                hidden=hidden,
            ))

    def register_regexp_command(
        self,
        pattern: PatternLike,
        name: str,
        handler: Handler,
        description: str = "",
        usage: Optional[Iterable[str]] = None,
        hidden: bool = False,
    ) -> None:
        """Register a command matched by pattern against the first word.

        Regexp commands are only consulted when no exact-name command
        matches, and are tried in registration order.

        Raises:
            CommandPatternError: If pattern is None or does not compile.
        """
        compiled = self._compile_command_pattern(pattern, name)
        with self.lock.write():
            self._add_regexp_command(Command(
                name=name,
                handler=handler,
                description=description,
                usage=list(usage or []),
                hidden=hidden,
                pattern=compiled,
            ))

    def register_command_pattern(
        self,
        pattern: str,
        name: str,
        handler: Handler,
        description: str = "",
        usage: Optional[Iterable[str]] = None,
        hidden: bool = False,
    ) -> None:
        """Same as register_regexp_command for an uncompiled pattern string."""
        self.register_regexp_command(pattern, name, handler, description, usage, hidden)

    def register_alias(self, original_name: str, alias_name: str) -> None:
        """Register alias_name as a hidden exact-name copy of a command.

        The alias shares the original's handler, description and usage,
        and is recorded in the original's alias list for help output.
        Logs a warning and does nothing if the original does not exist,
        the alias equals the original name, or the alias already exists.
        """
        with self.lock.write():
            original_key = original_name.lower()
            original = self._commands.get(original_key)
            if original is None:
                logger.warning("alias_for_unknown_command", command=original_key, alias=alias_name)
                return
            if original_key == alias_name.lower():
                logger.warning("alias_of_self", command=original_key)
                return
            if not original.add_alias_name(alias_name):
                logger.warning("alias_already_exists", command=original_key, alias=alias_name)
                return
            self._add_command(self._alias_of(original, alias_name))

    def register_alias_regexp(
        self,
        original_name: str,
        alias_name: str,
        pattern: PatternLike,
    ) -> None:
        """Register a hidden regexp command that aliases an existing command.

        ``alias_name`` is only used to list the alias in the original's
        help text; pass "" for an unlisted alias. Unlike the primary
        regexp registration an unusable pattern only logs a warning. A
        duplicate or self-referencing alias name is logged and left out
        of the alias list, but the pattern is still registered.
        """
        try:
            compiled = _compile(pattern)
        except re.error as e:
            logger.warning(
                "alias_pattern_invalid",
                command=original_name.lower(),
                pattern=_pattern_source(pattern),
                error=str(e),
            )
            return
        if compiled is None:
            logger.warning("alias_pattern_missing", command=original_name.lower())
            return

        with self.lock.write():
            original_key = original_name.lower()
            original = self._commands.get(original_key)
            if original is None:
                logger.warning("alias_for_unknown_command", command=original_key, alias=alias_name)
                return
            if alias_name:
                if original_key == alias_name.lower():
                    logger.warning(
                        "alias_of_self", command=original_key,
                        msg="regexp was still added",
                    )
                elif not original.add_alias_name(alias_name):
                    logger.warning(
                        "alias_already_exists", command=original_key, alias=alias_name,
                        msg="regexp was still added",
                    )
            alias = self._alias_of(original, alias_name)
            alias.pattern = compiled
            self._add_regexp_command(alias)

    def register_alias_pattern(self, original_name: str, alias_name: str, pattern: str) -> None:
        """Same as register_alias_regexp for an uncompiled pattern string."""
        self.register_alias_regexp(original_name, alias_name, pattern)

    def set_default_handler(self, handler: Handler) -> None:
        """Set the handler for addressed messages that match no command.

        Setting it again replaces the earlier handler and logs a warning.
        """
        with self.lock.write():
            if self._default_handler is not None:
                logger.warning("default_handler_set_twice")
            self._default_handler = handler

    def register_pattern(self, pattern: PatternLike, handler: Handler) -> None:
        """Register a free pattern for messages not addressed to the bot.

        Free patterns are searched against the full message text in
        registration order; the first match is called with no fields.

        Raises:
            CommandPatternError: If a pattern string does not compile.
        """
        try:
            compiled = _compile(pattern)
        except re.error as e:
            raise CommandPatternError(
                f"Cannot compile pattern: {e}", pattern=_pattern_source(pattern),
            ) from e
        with self.lock.write():
            if compiled is None:
                logger.warning("pattern_missing")
                return
            self._patterns.append(PatternHandler(pattern=compiled, handler=handler))

    def enable_help(self) -> None:
        """Register the built-in help command under the name "help".

        Replaces (with a warning) any command already registered as help.
        """
        with self.lock.write():
            overriding = HELP_COMMAND_NAME in self._commands
            if overriding:
                logger.warning("help_command_overridden")
            self._add_command(
                Command(
                    name=HELP_COMMAND_NAME,
                    handler=partial(help_handler, registry=self),
                    description=HELP_DESCRIPTION,
                    usage=list(HELP_USAGE),
                ),
                warn_duplicate=not overriding,
            )

    # ------------------------------------------------------------------
    # Snapshots (read lock)
    # ------------------------------------------------------------------

    def snapshot_commands(self) -> Dict[str, Command]:
        """Copy of the exact-name command map, keyed by lower-cased name.

        Mutating the returned dict or its commands does not affect the
        registry.
        """
        with self.lock.read():
            return {key: cmd.copy() for key, cmd in self._commands.items()}

    def snapshot_command_names(self) -> List[str]:
        """Sorted display names of every registered command."""
        with self.lock.read():
            return list(self._command_names)

    def snapshot_regexp_commands(self) -> List[Command]:
        with self.lock.read():
            return [cmd.copy() for cmd in self._regexp_commands]

    def snapshot_patterns(self) -> List[PatternHandler]:
        with self.lock.read():
            return list(self._patterns)

    def has_command(self, name: str) -> bool:
        """Case-insensitive check against the registered display names."""
        wanted = name.lower()
        with self.lock.read():
            return any(n.lower() == wanted for n in self._command_names)

    # ------------------------------------------------------------------
    # Lookups. Caller must hold ``lock`` for reading.
    # ------------------------------------------------------------------

    @property
    def default_handler(self) -> Optional[Handler]:
        return self._default_handler

    @property
    def is_empty(self) -> bool:
        return not self._command_names

    def lookup(self, name: str) -> Optional[Command]:
        """Exact-name command for a (case-insensitive) name."""
        return self._commands.get(name.lower())

    def find_regexp_command(self, word: str) -> Optional[Command]:
        """First regexp command, in registration order, matching word."""
        for cmd in self._regexp_commands:
            if cmd.matches(word):
                return cmd
        return None

    def find_pattern(self, text: str) -> Optional[PatternHandler]:
        """First free pattern, in registration order, matching text."""
        for pair in self._patterns:
            if pair.matches(text):
                return pair
        return None

    def visible_commands(self) -> List[Command]:
        """Non-hidden exact and regexp commands, sorted by name."""
        visible = [cmd for cmd in self._commands.values() if not cmd.hidden]
        visible.extend(cmd for cmd in self._regexp_commands if not cmd.hidden)
        visible.sort(key=lambda cmd: (cmd.name.lower(), cmd.name))
        return visible

    # ------------------------------------------------------------------
    # Internals. Caller must hold ``lock`` for writing.
    # ------------------------------------------------------------------

    def _add_command(self, cmd: Command, warn_duplicate: bool = True) -> None:
        key = cmd.key
        if warn_duplicate and key in self._commands:
            logger.warning("command_registered_twice", command=key)
        self._commands[key] = cmd
        if cmd.name:
            insert_sorted_unique(self._command_names, cmd.name)

    def _add_regexp_command(self, cmd: Command) -> None:
        self._regexp_commands.append(cmd)
        if cmd.name:
            insert_sorted_unique(self._command_names, cmd.name)

    @staticmethod
    def _alias_of(original: Command, alias_name: str) -> Command:
        return Command(
            name=alias_name,
            handler=original.handler,
            description=original.description,
            usage=list(original.usage),
            hidden=True,
            is_alias=True,
        )

    @staticmethod
    def _compile_command_pattern(pattern: PatternLike, name: str) -> Pattern[str]:
        if pattern is None:
            raise CommandPatternError(
                f'Cannot add nil regular expression command under name "{name.lower()}"',
                command=name,
            )
        try:
            return _compile(pattern)
        except re.error as e:
            raise CommandPatternError(
                f'Invalid regular expression for command "{name.lower()}": {e}',
                command=name,
                pattern=_pattern_source(pattern),
            ) from e
