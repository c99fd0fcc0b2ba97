"""Logging utilities for the model discovery registry.

This module provides standardized, event-tagged logging for registry operations.
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, Optional, Union

# Type for log callback functions
LogCallback = Callable[[int, str, Dict[str, Any]], None]

LOGGER_NAMESPACE = "model_discovery_registry"

_callback: Optional[LogCallback] = None


class LogLevel(int, Enum):
    """Log levels for the registry."""

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL


class LogEvent(str, Enum):
    """Event types for registry logging."""

    REGISTRY = "registry"
    DISCOVERY = "discovery"
    CREDENTIALS = "credentials"
    CACHE = "cache"
    ENRICHMENT = "enrichment"
    CONFIG = "config"


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the package namespace.

    Args:
        name: Logger name, either a short suffix ("registry") or a dotted
            module name (``__name__``)

    Returns:
        Logger instance
    """
    if name == LOGGER_NAMESPACE or name.startswith(LOGGER_NAMESPACE + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAMESPACE}.{name}")


_logger = get_logger("events")


def set_log_callback(callback: Optional[LogCallback]) -> None:
    """Register a callback that receives every structured log event.

    Args:
        callback: Function called with (level, event, data), or None to remove
    """
    global _callback
    _callback = callback


def configure_logging(level: Union[int, str] = logging.WARNING) -> None:
    """Configure the package logger with a stderr handler.

    Args:
        level: Logging level name or number
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    root = logging.getLogger(LOGGER_NAMESPACE)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        root.addHandler(handler)
    root.setLevel(level)


def _log(
    callback: LogCallback,
    level: LogLevel,
    event: LogEvent,
    data: Dict[str, Any],
) -> None:
    """Log an event with the provided callback.

    Args:
        callback: Function to call with the log data
        level: Severity level
        event: Event type
        data: Dictionary of event data
    """
    try:
        callback(level, event.value, data)
    except Exception as e:
        # Fallback to standard logging if callback fails
        logging.error(
            f"Logging callback failed with error: {e}. Original log: "
            f"level={level}, event={event}, data={data}"
        )


def _emit(level: LogLevel, event: LogEvent, message: str, data: Dict[str, Any]) -> None:
    if _logger.isEnabledFor(level):
        if data:
            details = " ".join(f"{key}={value}" for key, value in data.items())
            _logger.log(level, f"[{event.value}] {message} ({details})")
        else:
            _logger.log(level, f"[{event.value}] {message}")
    if _callback is not None:
        _log(_callback, level, event, {"message": message, **data})


def log_debug(event: LogEvent, message: str, **data: Any) -> None:
    """Log a debug-level event."""
    _emit(LogLevel.DEBUG, event, message, data)


def log_info(event: LogEvent, message: str, **data: Any) -> None:
    """Log an info-level event."""
    _emit(LogLevel.INFO, event, message, data)


def log_warning(event: LogEvent, message: str, **data: Any) -> None:
    """Log a warning-level event."""
    _emit(LogLevel.WARNING, event, message, data)


def log_error(event: LogEvent, message: str, **data: Any) -> None:
    """Log an error-level event."""
    _emit(LogLevel.ERROR, event, message, data)
