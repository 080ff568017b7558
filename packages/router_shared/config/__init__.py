"""Public API for router configuration."""

from .models import (
    DEFAULT_CONFIG_PATH,
    DatabaseSettings,
    EventBusSettings,
    HttpSettings,
    LoggingSettings,
    RetentionSettings,
    RouterSettings,
    load_settings,
)

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "DatabaseSettings",
    "EventBusSettings",
    "HttpSettings",
    "LoggingSettings",
    "RetentionSettings",
    "RouterSettings",
    "load_settings",
]
