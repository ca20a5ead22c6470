"""Custom exception hierarchy for herald.

Separates the three ways things go wrong around the dispatcher:
programming errors at setup time (bad command patterns), configuration
problems (unknown adapter, missing bot name) and error events reported
by a chat adapter while the bot is running.

Handler faults are deliberately absent here: the dispatcher traps any
exception a handler raises and logs it instead of re-raising.
"""

from typing import Any, Optional


class HeraldError(Exception):
    """Base exception for all herald errors.

    Attributes:
        message: Human-readable error description.
        module: Originating module name (e.g. "commands.registry").
        context: Arbitrary key-value pairs for structured logging.
    """

    def __init__(
        self,
        message: str = "",
        *,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        self.message = message
        self.module = module
        self.context = context
        super().__init__(message)

    def __str__(self) -> str:
        parts = [self.message or self.__class__.__name__]
        if self.module:
            parts.append(f"[module={self.module}]")
        if self.context:
            ctx = ", ".join(f"{k}={v}" for k, v in self.context.items())
            parts.append(f"({ctx})")
        return " ".join(parts)

    def __repr__(self) -> str:
        cls = self.__class__.__name__
        return f"{cls}({self.message!r}, module={self.module!r})"


# ---------------------------------------------------------------------------
# Setup-time errors
# ---------------------------------------------------------------------------

class CommandPatternError(HeraldError):
    """A regexp command was registered with a missing or invalid pattern.

    This signals a coding defect in the bot's setup and is never caught
    by herald itself.

    Attributes:
        command: Name of the command being registered.
        pattern: The offending pattern source (None if no pattern given).
    """

    def __init__(
        self,
        message: str = "",
        *,
        command: Optional[str] = None,
        pattern: Optional[str] = None,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        self.command = command
        self.pattern = pattern
        super().__init__(
            message,
            module=module or "commands.registry",
            command=command,
            pattern=pattern,
            **context,
        )


class ConfigurationError(HeraldError):
    """Invalid or missing configuration.

    Attributes:
        config_key: The configuration key that caused the error.
    """

    def __init__(
        self,
        message: str = "",
        *,
        config_key: Optional[str] = None,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        self.config_key = config_key
        super().__init__(message, module=module or "config", **context)


class AdapterNotFoundError(ConfigurationError):
    """No chat adapter is known under the requested name."""

    def __init__(self, adapter_name: str, **context: Any) -> None:
        self.adapter_name = adapter_name
        super().__init__(
            f"Unknown chat adapter: {adapter_name}",
            config_key="chat_adapter",
            module="chat",
            **context,
        )


# ---------------------------------------------------------------------------
# Runtime errors
# ---------------------------------------------------------------------------

class ChatAdapterError(HeraldError):
    """Error event reported by a chat adapter.

    Adapters put these on the bot's ``chat_errors`` queue rather than
    raising them, so the application decides how to react.

    Attributes:
        fatal: True if the adapter cannot recover on its own.
    """

    def __init__(
        self,
        message: str = "",
        *,
        fatal: bool = False,
        module: Optional[str] = None,
        **context: Any,
    ) -> None:
        self.fatal = fatal
        super().__init__(message, module=module or "chat", **context)
