"""Logging configuration for herald.

Provides subsystem-level log file routing and structlog + stdlib
integration.

Subsystem hierarchy (stdlib dotted names, structlog wraps them):
    root              → ConsoleHandler (terminal)
      └─ herald       → RotatingFileHandler → herald.log (combined)
           ├─ herald.dispatch → RFH → dispatch.log
           ├─ herald.chat     → RFH → chat.log
           ├─ herald.bot      → RFH → bot.log
           └─ herald.security → RFH → security.log
"""

import logging
import logging.handlers
import sys
from pathlib import Path

import structlog

# Each subsystem gets its own RotatingFileHandler
SUBSYSTEMS = ("dispatch", "chat", "bot", "security")

# stdlib logger name prefix for hierarchy-based propagation
LOGGER_PREFIX = "herald"


def _formatter(colors: bool) -> structlog.stdlib.ProcessorFormatter:
    """Render one event line for a stdlib handler."""
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
        ],
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.dev.ConsoleRenderer(colors=colors),
        ],
    )


def setup_logging(config=None) -> None:
    """Configure structured logging with subsystem file handlers.

    Sets up:
    1. Root logger: console handler
    2. "herald" logger: RotatingFileHandler → logs/herald.log
    3. "herald.<subsystem>" loggers: individual RotatingFileHandlers

    All subsystem loggers propagate up the hierarchy, so every event
    appears in its subsystem file, the combined herald.log and the
    console.

    Args:
        config: Optional Config instance. The first call (before config
                loads) uses defaults with cache_logger_on_first_use=False;
                a call with the real config caches loggers.
    """
    if config is not None:
        log_dir = config.log_dir
        root_level_name = config.logging_level.upper()
        subsystem_levels = config.logging_subsystem_levels
        max_bytes = config.logging_max_file_size_mb * 1024 * 1024
        backup_count = config.logging_backup_count
        cache_loggers = True
    else:
        log_dir = Path(__file__).parent.parent / "logs"
        root_level_name = "INFO"
        subsystem_levels = {}
        max_bytes = 10 * 1024 * 1024  # 10 MB
        backup_count = 5
        cache_loggers = False

    root_level = getattr(logging, root_level_name, logging.INFO)

    file_handlers_ok = False
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handlers_ok = True
    except OSError as exc:
        # Console-only; the bot must not crash on logging failure
        print(
            f"WARNING: Cannot create log directory {log_dir}: {exc}. "
            "Falling back to console-only logging.",
            file=sys.stderr,
        )

    # Structlog events arrive pre-processed; plain stdlib records get
    # the same fields from the foreign chain. Each handler renders once.
    file_formatter = _formatter(colors=False)

    # 1. Root logger: console only
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # Handlers filter by level
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(root_level)
    console_handler.setFormatter(_formatter(colors=sys.stderr.isatty()))
    root_logger.addHandler(console_handler)

    # 2. "herald" parent logger: combined log file
    herald_logger = logging.getLogger(LOGGER_PREFIX)
    herald_logger.setLevel(logging.DEBUG)
    herald_logger.handlers.clear()
    herald_logger.propagate = True

    if file_handlers_ok:
        combined_handler = logging.handlers.RotatingFileHandler(
            log_dir / "herald.log",
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        combined_handler.setLevel(root_level)
        combined_handler.setFormatter(file_formatter)
        herald_logger.addHandler(combined_handler)

    # 3. Per-subsystem loggers
    for subsystem in SUBSYSTEMS:
        sub_logger = logging.getLogger(f"{LOGGER_PREFIX}.{subsystem}")
        sub_level_name = subsystem_levels.get(subsystem, "").upper()
        sub_level = getattr(logging, sub_level_name, root_level) if sub_level_name else root_level
        sub_logger.setLevel(sub_level)
        sub_logger.handlers.clear()
        sub_logger.propagate = True

        if file_handlers_ok:
            sub_handler = logging.handlers.RotatingFileHandler(
                log_dir / f"{subsystem}.log",
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
            )
            sub_handler.setLevel(sub_level)
            sub_handler.setFormatter(file_formatter)
            sub_logger.addHandler(sub_handler)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=cache_loggers,
    )
