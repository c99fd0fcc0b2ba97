"""CLI utilities package."""

from .helpers import (
    MODE_CHOICES,
    PRICE_METRIC_CHOICES,
    ExitCode,
    ensure_discovered,
    format_file_size,
    format_timestamp,
    get_mdr_env_vars,
    handle_error,
    parse_mode,
    resolve_format,
)
from .options import (
    capability_option,
    filter_options,
    mode_option,
    origin_option,
    provider_option,
)

__all__ = [
    "ExitCode",
    "MODE_CHOICES",
    "PRICE_METRIC_CHOICES",
    "resolve_format",
    "handle_error",
    "ensure_discovered",
    "parse_mode",
    "get_mdr_env_vars",
    "format_file_size",
    "format_timestamp",
    "provider_option",
    "origin_option",
    "mode_option",
    "capability_option",
    "filter_options",
]
