"""
Scheduler configuration management.

Handles loading, saving, and validating the settings a Schedule runs
with: the default timezone for due checks, event id generation, and
logging.

Configuration path priority:
1. Explicit config_path argument
2. TASKSCHEDULER_CONFIG_PATH environment variable
3. Default: ~/.taskscheduler/config.json

Environment variables (TASKSCHEDULER_TIMEZONE, TASKSCHEDULER_ID_PREFIX,
TASKSCHEDULER_LOG_LEVEL, TASKSCHEDULER_LOG_FILE) override the file.
"""

import json
import logging
import os
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Optional, List

from dotenv import load_dotenv

from taskscheduler.event import to_timezone

load_dotenv()

logger = logging.getLogger(__name__)

ENV_CONFIG_PATH = 'TASKSCHEDULER_CONFIG_PATH'
ENV_TIMEZONE = 'TASKSCHEDULER_TIMEZONE'
ENV_ID_PREFIX = 'TASKSCHEDULER_ID_PREFIX'
ENV_LOG_LEVEL = 'TASKSCHEDULER_LOG_LEVEL'
ENV_LOG_FILE = 'TASKSCHEDULER_LOG_FILE'

LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    file: Optional[str] = None  # Console only when unset
    max_bytes: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5


@dataclass
class ScheduleSettings:
    """Settings a Schedule is created with."""
    timezone: str = "UTC"  # Used when an event has no timezone of its own
    id_prefix: str = "task"
    max_id_attempts: int = 10  # Before id generation is treated as broken
    logging: LoggingConfig = field(default_factory=LoggingConfig)


class SchedulerConfig:
    """
    Scheduler configuration manager.

    Loads settings from a JSON file, applies environment overrides and
    validates the result.
    """

    DEFAULT_CONFIG_PATH = Path.home() / ".taskscheduler" / "config.json"

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize scheduler configuration.

        Args:
            config_path: Path to configuration file. If None, uses env var or default.
        """
        if config_path:
            self.config_path = Path(config_path).expanduser()
        elif os.environ.get(ENV_CONFIG_PATH):
            self.config_path = Path(os.environ[ENV_CONFIG_PATH]).expanduser()
        else:
            self.config_path = self.DEFAULT_CONFIG_PATH
        self.settings = ScheduleSettings()

        if self.config_path.exists():
            self.load()
        else:
            logger.debug(f"No config found at {self.config_path}, using defaults")

        self._apply_environment()

    def load(self):
        """Load configuration from JSON file."""
        try:
            with open(self.config_path, 'r') as f:
                data = json.load(f)

            logging_data = data.get('logging', {})
            self.settings = ScheduleSettings(
                timezone=data.get('timezone', "UTC"),
                id_prefix=data.get('id_prefix', "task"),
                max_id_attempts=data.get('max_id_attempts', 10),
                logging=LoggingConfig(**logging_data)
            )

            logger.info(f"Loaded configuration from {self.config_path}")

        except Exception as e:
            logger.error(f"Failed to load config from {self.config_path}: {e}")
            raise

    def _apply_environment(self):
        """Override file values with environment variables."""
        if os.environ.get(ENV_TIMEZONE):
            self.settings.timezone = os.environ[ENV_TIMEZONE]
        if os.environ.get(ENV_ID_PREFIX):
            self.settings.id_prefix = os.environ[ENV_ID_PREFIX]
        if os.environ.get(ENV_LOG_LEVEL):
            self.settings.logging.level = os.environ[ENV_LOG_LEVEL].upper()
        if os.environ.get(ENV_LOG_FILE):
            self.settings.logging.file = os.environ[ENV_LOG_FILE]

    def save(self):
        """Save configuration to JSON file."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(self.config_path, 'w') as f:
            json.dump(asdict(self.settings), f, indent=2)

        logger.info(f"Saved configuration to {self.config_path}")

    def validate(self) -> List[str]:
        """
        Validate configuration.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []
        settings = self.settings

        try:
            to_timezone(settings.timezone)
        except ValueError as e:
            errors.append(str(e))

        if not settings.id_prefix or not settings.id_prefix.strip():
            errors.append("'id_prefix' cannot be empty")

        if settings.max_id_attempts < 1:
            errors.append("'max_id_attempts' must be at least 1")

        if settings.logging.level.upper() not in LOG_LEVELS:
            errors.append(
                f"'logging.level' must be one of {', '.join(LOG_LEVELS)}, "
                f"got {settings.logging.level!r}"
            )

        if settings.logging.max_bytes <= 0:
            errors.append("'logging.max_bytes' must be positive")

        return errors

    def __repr__(self):
        return f"SchedulerConfig(timezone={self.settings.timezone}, path={self.config_path})"


_settings: Optional[ScheduleSettings] = None


def get_settings() -> ScheduleSettings:
    """Get or create the process-wide settings."""
    global _settings
    if _settings is None:
        _settings = SchedulerConfig().settings
    return _settings


def set_settings(settings: Optional[ScheduleSettings]):
    """
    Replace the process-wide settings.

    Args:
        settings: New settings, or None to reload from configuration on next use
    """
    global _settings
    _settings = settings
