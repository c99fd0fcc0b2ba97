"""Main CLI application for the Model Discovery Registry."""

import json
from typing import Any, Dict, Optional

import click
import rich_click as rich_click

from .. import __version__
from ..credentials import PROVIDER_NAMES
from ..logging import configure_logging
from ..model_card import ModelMode
from ..ranking import PriceMetric
from .utils import get_mdr_env_vars, resolve_format

# Configure rich-click
rich_click.rich_click.USE_RICH_MARKUP = True
rich_click.rich_click.USE_MARKDOWN = True
rich_click.rich_click.SHOW_ARGUMENTS = True
rich_click.rich_click.GROUP_ARGUMENTS_OPTIONS = True

_FILTER_OPTIONS = [
    {"name": "--provider", "type": "string", "help": "Serving provider id"},
    {"name": "--origin", "type": "string", "help": "Original model vendor"},
    {"name": "--mode", "type": "choice", "choices": [m.value for m in ModelMode], "help": "Model mode"},
    {"name": "--capability", "type": "string", "help": "Capability tag"},
]


def _help_data() -> Dict[str, Any]:
    """Machine-readable description of the command tree."""
    return {
        "command": "mdr",
        "description": "Model Discovery Registry CLI - discover and query models across providers",
        "usage": "mdr [OPTIONS] COMMAND [ARGS]...",
        "version": __version__,
        "providers": sorted(PROVIDER_NAMES),
        "global_options": [
            {
                "name": "--format",
                "type": "choice",
                "choices": ["table", "json", "yaml"],
                "help": "Output format. Defaults to 'table' for TTY, 'json' for non-TTY.",
            },
            {"name": "--verbose", "short": "-v", "type": "count", "help": "Increase verbosity."},
            {"name": "--quiet", "short": "-q", "type": "count", "help": "Decrease verbosity."},
            {"name": "--debug", "type": "flag", "help": "Enable debug-level logging."},
            {"name": "--no-color", "type": "flag", "help": "Disable color output."},
            {"name": "--version", "type": "flag", "help": "Print version information."},
            {"name": "--help-json", "type": "flag", "help": "Show help in JSON format."},
        ],
        "commands": {
            "discover": {
                "description": "Discover models across providers (cache first)",
                "options": [
                    {"name": "--provider", "type": "string", "help": "Provider to discover (repeatable)"},
                    {"name": "--no-local", "type": "flag", "help": "Skip local runtimes"},
                    {"name": "--timeout", "type": "float", "help": "Per-request timeout in seconds"},
                    {"name": "--no-enrich", "type": "flag", "help": "Skip LiteLLM enrichment"},
                    {"name": "--force", "type": "flag", "help": "Ignore the cache"},
                ],
            },
            "refresh": {
                "description": "Re-discover one provider or all of them, bypassing the cache",
                "arguments": [{"name": "provider", "type": "string", "required": False}],
            },
            "models": {
                "description": "Model listing and inspection",
                "subcommands": {
                    "list": {"description": "List discovered models", "options": _FILTER_OPTIONS},
                    "search": {
                        "description": "Substring search over ids, names and aliases",
                        "arguments": [{"name": "query", "type": "string", "required": True}],
                        "options": [_FILTER_OPTIONS[1]],
                    },
                    "get": {
                        "description": "Show one model by id or alias",
                        "arguments": [{"name": "model_id", "type": "string", "required": True}],
                    },
                    "routes": {
                        "description": "Show every provider serving a model",
                        "arguments": [{"name": "model_id", "type": "string", "required": True}],
                    },
                    "resolve": {
                        "description": "Resolve an alias to a model id",
                        "arguments": [{"name": "alias", "type": "string", "required": True}],
                    },
                },
            },
            "roles": {
                "description": "Models grouped by provider with their roles",
                "options": [{"name": "--role", "type": "string", "help": "Role token"}] + _FILTER_OPTIONS,
            },
            "capabilities": {
                "description": "Capability tags across models",
                "options": [_FILTER_OPTIONS[0]],
            },
            "capable": {
                "description": "Models able to fill a role",
                "arguments": [{"name": "capability", "type": "string", "required": True}],
                "options": _FILTER_OPTIONS[:3] + [{"name": "--limit", "type": "int", "help": "Maximum results"}],
            },
            "cheapest": {
                "description": "Rank matching models by price",
                "options": [{"name": "--role", "type": "string", "help": "Role token"}]
                + _FILTER_OPTIONS
                + [
                    {"name": "--limit", "type": "int", "help": "Maximum results; 0 for all"},
                    {
                        "name": "--price-metric",
                        "type": "choice",
                        "choices": [m.value for m in PriceMetric],
                        "help": "Price to rank by",
                    },
                    {"name": "--input-weight", "type": "float", "help": "Blended input weight"},
                    {"name": "--output-weight", "type": "float", "help": "Blended output weight"},
                    {"name": "--include-unpriced", "type": "flag", "help": "Append unpriced models"},
                ],
            },
            "providers": {
                "description": "Provider inspection",
                "subcommands": {
                    "list": {"description": "List discovered providers"},
                    "get": {
                        "description": "Show one provider snapshot",
                        "arguments": [{"name": "provider_id", "type": "string", "required": True}],
                    },
                    "errors": {"description": "Show failures from the last discovery"},
                },
            },
            "cache": {
                "description": "Cache management operations",
                "subcommands": {
                    "info": {"description": "Show cache directory and entries"},
                    "clear": {
                        "description": "Delete every cached snapshot",
                        "options": [{"name": "--yes", "type": "flag", "help": "Confirm without prompting"}],
                    },
                },
            },
        },
        "exit_codes": {
            "0": "Success",
            "1": "Generic error",
            "2": "Invalid usage",
            "3": "Model not found",
            "4": "No provider data",
        },
        "environment_variables": sorted(get_mdr_env_vars()),
    }


def _show_json_help(ctx: click.Context, param: click.Parameter, value: bool) -> None:
    """Show comprehensive JSON help and exit."""
    if not value or ctx.resilient_parsing:
        return
    click.echo(json.dumps(_help_data(), indent=2, sort_keys=True))
    ctx.exit()


def _log_level(verbose: int, quiet: int, debug: bool) -> str:
    """Map the verbosity flags to a logging level name.

    >>> _log_level(0, 0, False)
    'WARNING'
    >>> _log_level(1, 0, False)
    'INFO'
    >>> _log_level(0, 1, False)
    'ERROR'
    """
    if debug:
        return "DEBUG"
    if verbose > quiet:
        return "DEBUG" if verbose - quiet >= 2 else "INFO"
    if quiet > verbose:
        return "CRITICAL" if quiet - verbose >= 2 else "ERROR"
    return "WARNING"


@click.group(invoke_without_command=True)
@click.option(
    "--format",
    type=click.Choice(["table", "json", "yaml"], case_sensitive=False),
    help="Output format. Defaults to 'table' for TTY, 'json' for non-TTY.",
)
@click.option("--verbose", "-v", count=True, help="Increase verbosity (can be used multiple times).")
@click.option("--quiet", "-q", count=True, help="Decrease verbosity (can be used multiple times).")
@click.option("--debug", is_flag=True, help="Enable debug-level logging.")
@click.option("--no-color", is_flag=True, help="Disable color output.")
@click.option("--version", is_flag=True, help="Print version information.")
@click.option(
    "--help-json",
    is_flag=True,
    is_eager=True,
    expose_value=False,
    callback=_show_json_help,
    help="Show help in JSON format for programmatic use.",
)
@click.pass_context
def app(
    ctx: click.Context,
    format: Optional[str] = None,
    verbose: int = 0,
    quiet: int = 0,
    debug: bool = False,
    no_color: bool = False,
    version: bool = False,
) -> None:
    """Model Discovery Registry CLI - discover and query models across providers.

    Models are discovered live from Anthropic, OpenAI, Google, OpenRouter and
    a local Ollama, then cached on disk. Query commands run discovery on
    first use.

    Examples:
      # Discover everything, ignoring the cache
      mdr discover --force

      # Three cheapest embedding models
      mdr cheapest --role embeddings --limit 3

      # Every provider serving a model
      mdr models routes claude-sonnet-4
    """
    if version:
        click.echo(f"mdr version: {__version__}")
        ctx.exit()

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit()

    log_level = _log_level(verbose, quiet, debug)
    configure_logging(log_level)

    ctx.ensure_object(dict)
    ctx.obj.update(
        {
            "format": resolve_format(format),
            "format_explicit": format is not None,
            "verbose": verbose,
            "quiet": quiet,
            "debug": debug,
            "no_color": no_color,
            "log_level": log_level,
        }
    )


from .commands import cache, discover, models, providers, roles  # noqa: E402

app.add_command(discover.discover)
app.add_command(discover.refresh)
app.add_command(models.models)
app.add_command(roles.roles)
app.add_command(roles.capabilities)
app.add_command(roles.capable)
app.add_command(roles.cheapest)
app.add_command(providers.providers)
app.add_command(cache.cache)


if __name__ == "__main__":
    app()
