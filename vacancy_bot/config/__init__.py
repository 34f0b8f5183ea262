"""Configuration management for the vacancy bot."""

from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .loader import load_config, validate_config_dict
from .models import (
    AdvancedConfig,
    AppConfig,
    LogFormat,
    LogLevel,
    LoggingConfig,
    SearchConfig,
    SortOrder,
    SourcesConfig,
    StorageConfig,
    TelegramConfig,
)

__all__ = [
    # Loader functions
    "load_config",
    "validate_config_dict",
    "load_environment_config",
    # Configuration models
    "AppConfig",
    "SearchConfig",
    "SourcesConfig",
    "StorageConfig",
    "TelegramConfig",
    "LoggingConfig",
    "AdvancedConfig",
    "EnvironmentConfig",
    # Enums
    "LogLevel",
    "LogFormat",
    "SortOrder",
    # Exceptions
    "ConfigurationError",
]
