"""Environment variable loading and validation."""

import os
import re
from typing import Optional

from .exceptions import ConfigurationError

# Bot API tokens look like "123456789:AA..."
_TOKEN_PATTERN = re.compile(r"^\d+:[A-Za-z0-9_-]{20,}$")

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class EnvironmentConfig:
    """Environment variable configuration holder."""

    def __init__(
        self,
        telegram_token: Optional[str] = None,
        log_level: Optional[str] = None,
        filters_path: Optional[str] = None,
        environment: Optional[str] = None,
    ):
        self.telegram_token = telegram_token
        self.log_level = log_level
        self.filters_path = filters_path
        self.environment = environment or "local"


def load_environment_config(require_token: bool = True) -> EnvironmentConfig:
    """
    Load and validate environment variables.

    Environment variables:
    - TELEGRAM_BOT_TOKEN: Bot API token (required unless require_token=False)
    - LOG_LEVEL: Override log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - FILTERS_PATH: Override storage.filters_path
    - ENVIRONMENT: Environment label for logs (default: local)

    Args:
        require_token: Whether a missing TELEGRAM_BOT_TOKEN is an error

    Returns:
        EnvironmentConfig object with validated values

    Raises:
        ConfigurationError: If variables are missing or invalid
    """
    errors = []

    telegram_token = (os.getenv("TELEGRAM_BOT_TOKEN") or "").strip() or None
    log_level = (os.getenv("LOG_LEVEL") or "").strip() or None
    filters_path = (os.getenv("FILTERS_PATH") or "").strip() or None
    environment = (os.getenv("ENVIRONMENT") or "").strip() or None

    if require_token and not telegram_token:
        errors.append("Missing required environment variable: TELEGRAM_BOT_TOKEN")
    elif telegram_token and not _TOKEN_PATTERN.match(telegram_token):
        errors.append("Invalid TELEGRAM_BOT_TOKEN: expected '<bot id>:<secret>' as issued by @BotFather")

    if log_level:
        if log_level.upper() not in VALID_LOG_LEVELS:
            errors.append(
                f"Invalid LOG_LEVEL: '{log_level}'. Must be one of: {', '.join(VALID_LOG_LEVELS)}"
            )
        else:
            log_level = log_level.upper()

    if errors:
        raise ConfigurationError(
            "Environment variable validation failed",
            errors=errors,
            suggestions=[
                "Copy .env.example to .env and fill in your credentials",
                "Get a bot token from @BotFather and set TELEGRAM_BOT_TOKEN",
            ],
        )

    return EnvironmentConfig(
        telegram_token=telegram_token,
        log_level=log_level,
        filters_path=filters_path,
        environment=environment,
    )
