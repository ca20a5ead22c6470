"""Configuration management for herald.

Loads YAML settings (settings.yaml) and environment variables (.env)
into a Config object. Property getters provide safe access with
defaults for the bot's name, its chat adapter, the built-in help
command and logging.

Key classes:
    Config: Central configuration manager.

Key functions:
    get_config: Singleton accessor for the global Config instance.
"""

import os
from pathlib import Path
from typing import Optional

import structlog
import yaml
from dotenv import load_dotenv

logger = structlog.get_logger("herald.bot")

DEFAULT_BOT_NAME = "herald"
DEFAULT_CHAT_ADAPTER = "shell"


class Config:
    """Central configuration manager for herald.

    Loads settings.yaml and .env from the config directory. Settings
    are read-only after __init__.

    Args:
        config_dir: Path to the config directory. Defaults to
            ``<repo_root>/config/``.
    """

    def __init__(self, config_dir: Optional[Path] = None):
        if config_dir is None:
            config_dir = Path(__file__).parent.parent / "config"
        self.config_dir = Path(config_dir)

        env_file = self.config_dir / ".env"
        if env_file.exists():
            load_dotenv(env_file)

        self.settings = self._load_yaml("settings.yaml")

    def _load_yaml(self, filename: str) -> dict:
        """Load a YAML configuration file."""
        filepath = self.config_dir / filename
        if filepath.exists():
            with open(filepath, "r") as f:
                return yaml.safe_load(f) or {}
        return {}

    def validate(self):
        """Validate settings at startup.

        Logs errors but does not raise; problems that make the bot
        unusable surface again when the bot is built.
        """
        from .chat import ADAPTERS

        name = self.bot_name
        if not isinstance(name, str) or not name.strip():
            logger.error("bot_name_invalid", value=name)

        if self.chat_adapter not in ADAPTERS:
            logger.error(
                "chat_adapter_unknown",
                adapter=self.chat_adapter,
                valid=sorted(ADAPTERS),
            )

        if not isinstance(self.settings.get("logging", {}), dict):
            logger.error("config_invalid_value", key="logging", valid="mapping")

    @property
    def bot_name(self) -> str:
        """Name the bot answers to. Env var HERALD_BOT_NAME takes precedence."""
        return os.environ.get("HERALD_BOT_NAME") or self.settings.get("bot_name", DEFAULT_BOT_NAME)

    @property
    def chat_adapter(self) -> str:
        """Chat adapter name. Env var HERALD_CHAT_ADAPTER takes precedence."""
        return (
            os.environ.get("HERALD_CHAT_ADAPTER")
            or self.settings.get("chat_adapter", DEFAULT_CHAT_ADAPTER)
        )

    @property
    def help_enabled(self) -> bool:
        """Whether to register the built-in help command (default True)."""
        return bool(self.settings.get("help_enabled", True))

    @property
    def log_dir(self) -> Path:
        """Get log directory path."""
        configured = self.settings.get("log_dir")
        if configured:
            return Path(configured).expanduser()
        return Path(__file__).parent.parent / "logs"

    @property
    def logging_level(self) -> str:
        """Global log level (default INFO). Controls console and combined file."""
        log_config = self._logging_section()
        return log_config.get("level", "INFO")

    @property
    def logging_subsystem_levels(self) -> dict:
        """Per-subsystem log level overrides. E.g. {"dispatch": "DEBUG"}."""
        log_config = self._logging_section()
        return log_config.get("subsystem_levels", {})

    @property
    def logging_max_file_size_mb(self) -> int:
        """Max size per log file in MB before rotation (default 10)."""
        log_config = self._logging_section()
        return log_config.get("max_file_size_mb", 10)

    @property
    def logging_backup_count(self) -> int:
        """Number of rotated log files to keep (default 5)."""
        log_config = self._logging_section()
        return log_config.get("backup_count", 5)

    def _logging_section(self) -> dict:
        section = self.settings.get("logging", {})
        return section if isinstance(section, dict) else {}


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create the global config instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config
