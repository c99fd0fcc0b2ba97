"""Discovery commands for the mdr CLI."""

from typing import Any, Dict, List, Optional, Tuple

import click

from ...config import DEFAULT_TIMEOUT
from ...model_card import ProviderInfo
from ...registry import DiscoveryOptions, ModelRegistry
from ..formatters import (
    create_console,
    format_errors_table,
    format_providers_json,
    format_providers_table,
    format_structured,
)
from ..utils import ExitCode, handle_error


def _discovery_payload(registry: ModelRegistry, providers: List[ProviderInfo]) -> Dict[str, Any]:
    payload = format_providers_json(providers)
    payload["errors"] = [failure.to_dict() for failure in registry.discovery_errors()]
    payload["discovered_at"] = registry.discovered_at
    payload["model_count"] = sum(len(info.models) for info in providers)
    return payload


def _report(ctx: click.Context, registry: ModelRegistry, providers: List[ProviderInfo]) -> None:
    format_type = ctx.obj["format"]
    if format_type in ("json", "yaml"):
        format_structured(_discovery_payload(registry, providers), format_type)
    else:
        console = create_console(no_color=ctx.obj["no_color"])
        format_providers_table(providers, console)
        errors = registry.discovery_errors()
        if errors:
            format_errors_table(errors, console)

    if not providers:
        handle_error(Exception("No providers were discovered"), ExitCode.NO_DATA)


@click.command()
@click.option(
    "--provider",
    "providers",
    multiple=True,
    help="Provider to discover (repeatable). Defaults to all providers.",
)
@click.option("--no-local", is_flag=True, help="Skip local runtimes such as Ollama.")
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=DEFAULT_TIMEOUT,
    show_default=True,
    help="Per-request timeout in seconds.",
)
@click.option("--no-enrich", is_flag=True, help="Do not fill missing fields from the LiteLLM catalogue.")
@click.option("--force", is_flag=True, help="Ignore the cache and query providers live.")
@click.pass_context
def discover(
    ctx: click.Context,
    providers: Tuple[str, ...] = (),
    no_local: bool = False,
    timeout: float = DEFAULT_TIMEOUT,
    no_enrich: bool = False,
    force: bool = False,
) -> None:
    """Discover models across providers (served from the cache when fresh).

    Examples:
      mdr discover
      mdr discover --provider anthropic --provider openrouter --force
    """
    try:
        registry = ModelRegistry.get_default()
        options = DiscoveryOptions(
            providers=tuple(p.lower() for p in providers) or None,
            include_local=not no_local,
            timeout=timeout,
            enrich=not no_enrich,
            force=force,
        )
        result = registry.discover(options)
    except Exception as e:
        handle_error(e, ExitCode.GENERIC_ERROR)
        return

    _report(ctx, registry, result)


@click.command()
@click.argument("provider", required=False)
@click.pass_context
def refresh(ctx: click.Context, provider: Optional[str] = None) -> None:
    """Re-discover one provider, or all of them, bypassing the cache."""
    try:
        registry = ModelRegistry.get_default()
        result = registry.refresh(provider.lower() if provider else None)
    except Exception as e:
        handle_error(e, ExitCode.GENERIC_ERROR)
        return

    _report(ctx, registry, result)
