"""Core configuration and logging for MenuGate."""

from menugate.core.config import Settings, get_settings
from menugate.core.logging import (
    LoggingContext,
    bind_correlation_id,
    clear_context,
    configure_logging,
    get_logger,
)

__all__ = [
    "LoggingContext",
    "Settings",
    "bind_correlation_id",
    "clear_context",
    "configure_logging",
    "get_logger",
    "get_settings",
]
