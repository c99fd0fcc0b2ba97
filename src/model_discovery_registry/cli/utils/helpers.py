"""Helper functions for CLI operations."""

import os
import sys
from typing import Any, Dict, Optional

import click

from ...config_paths import ENV_CACHE_DIR, ENV_CACHE_TTL, ENV_CONFIG_PATH
from ...model_card import ModelMode
from ...ranking import PriceMetric


class ExitCode:
    """Standard exit codes for the CLI."""

    SUCCESS = 0
    GENERIC_ERROR = 1
    INVALID_USAGE = 2
    MODEL_NOT_FOUND = 3
    NO_DATA = 4


MODE_CHOICES = [mode.value for mode in ModelMode]
PRICE_METRIC_CHOICES = [metric.value for metric in PriceMetric]


def resolve_format(cli_format: Optional[str] = None, default_tty: str = "table", default_non_tty: str = "json") -> str:
    """Resolve output format with TTY detection.

    Args:
        cli_format: Format specified via CLI flag
        default_tty: Default format for TTY output
        default_non_tty: Default format for non-TTY output

    Returns:
        Resolved format name
    """
    if cli_format:
        return cli_format.lower()

    if sys.stdout.isatty():
        return default_tty
    else:
        return default_non_tty


def handle_error(error: Exception, exit_code: int = ExitCode.GENERIC_ERROR) -> None:
    """Print an error to stderr and exit.

    Args:
        error: Exception to report
        exit_code: Exit code to use
    """
    click.echo(f"Error: {str(error)}", err=True)
    sys.exit(exit_code)


def ensure_discovered(registry: Any) -> None:
    """Run discovery (cache first) when the registry holds no providers yet.

    Exits with ``ExitCode.NO_DATA`` when discovery still yields nothing.
    """
    if registry.providers_list():
        return
    registry.discover()
    if not registry.providers_list():
        handle_error(
            Exception("No provider data available. Set a provider API key or start Ollama, then run 'mdr discover'."),
            ExitCode.NO_DATA,
        )


def parse_mode(value: Optional[str]) -> Optional[ModelMode]:
    """Convert a ``--mode`` option value to a ModelMode."""
    if value is None:
        return None
    return ModelMode(value.lower())


def get_mdr_env_vars() -> Dict[str, Optional[str]]:
    """Get the MDR_* environment variables, including unset well-known ones.

    Returns:
        Dictionary of variable names to values (None when unset)
    """
    mdr_vars: Dict[str, Optional[str]] = {key: value for key, value in os.environ.items() if key.startswith("MDR_")}
    for var in (ENV_CACHE_DIR, ENV_CACHE_TTL, ENV_CONFIG_PATH):
        mdr_vars.setdefault(var, None)
    return mdr_vars


def format_file_size(size_bytes: int) -> str:
    """Format file size in human-readable format.

    >>> format_file_size(0)
    '0 B'
    >>> format_file_size(2048)
    '2.0 KB'
    """
    if size_bytes == 0:
        return "0 B"

    size = float(size_bytes)
    size_names = ["B", "KB", "MB", "GB"]
    i = 0
    while size >= 1024 and i < len(size_names) - 1:
        size /= 1024.0
        i += 1

    return f"{size:.1f} {size_names[i]}"


def format_timestamp(timestamp: Optional[float]) -> str:
    """Render epoch seconds for tables; 0 or None means never."""
    if not timestamp:
        return "never"
    from datetime import datetime

    return datetime.fromtimestamp(timestamp).strftime("%Y-%m-%d %H:%M:%S")
