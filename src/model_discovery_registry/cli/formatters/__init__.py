"""CLI formatters package."""

from .json import (
    format_cache_info_json,
    format_json,
    format_models_json,
    format_providers_json,
    format_structured,
    format_yaml,
)
from .table import (
    create_console,
    format_cache_info_table,
    format_capabilities_table,
    format_cheapest_table,
    format_credential_prompts,
    format_errors_table,
    format_model_detail,
    format_models_table,
    format_providers_table,
    format_roles_table,
    format_routes_table,
)

__all__ = [
    "format_json",
    "format_yaml",
    "format_structured",
    "format_models_json",
    "format_providers_json",
    "format_cache_info_json",
    "create_console",
    "format_models_table",
    "format_model_detail",
    "format_providers_table",
    "format_routes_table",
    "format_roles_table",
    "format_capabilities_table",
    "format_cheapest_table",
    "format_credential_prompts",
    "format_errors_table",
    "format_cache_info_table",
]
