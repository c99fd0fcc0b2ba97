"""Model inspection commands for the mdr CLI."""

from typing import Optional

import click

from ...errors import ModelNotFoundError
from ...registry import ModelRegistry
from ..formatters import (
    create_console,
    format_model_detail,
    format_models_json,
    format_models_table,
    format_routes_table,
    format_structured,
)
from ..utils import ExitCode, ensure_discovered, filter_options, handle_error, origin_option, parse_mode


@click.group()
def models() -> None:
    """Inspect, search and list models."""
    pass


@models.command(name="list")
@filter_options
@click.pass_context
def list_models(
    ctx: click.Context,
    provider: Optional[str] = None,
    origin: Optional[str] = None,
    mode: Optional[str] = None,
    capability: Optional[str] = None,
) -> None:
    """List discovered models.

    Examples:
      mdr models list --origin anthropic
      mdr models list --mode embedding --format json
    """
    try:
        registry = ModelRegistry.get_default()
        ensure_discovered(registry)
        cards = registry.models(
            provider=provider,
            origin_provider=origin,
            mode=parse_mode(mode),
            capability=capability,
        )

        format_type = ctx.obj["format"]
        if format_type in ("json", "yaml"):
            format_structured(format_models_json(cards), format_type)
        else:
            format_models_table(cards, create_console(no_color=ctx.obj["no_color"]))

    except Exception as e:
        handle_error(e, ExitCode.GENERIC_ERROR)


@models.command()
@click.argument("query", type=str)
@origin_option
@click.pass_context
def search(ctx: click.Context, query: str, origin: Optional[str] = None) -> None:
    """Search model ids, names and aliases (case-insensitive substring)."""
    try:
        registry = ModelRegistry.get_default()
        ensure_discovered(registry)
        cards = registry.search(query, origin_provider=origin)

        format_type = ctx.obj["format"]
        if format_type in ("json", "yaml"):
            payload = format_models_json(cards)
            payload["query"] = query
            format_structured(payload, format_type)
        else:
            format_models_table(cards, create_console(no_color=ctx.obj["no_color"]), title=f"Matches for '{query}'")

    except Exception as e:
        handle_error(e, ExitCode.GENERIC_ERROR)


@models.command()
@click.argument("model_id", type=str)
@click.pass_context
def get(ctx: click.Context, model_id: str) -> None:
    """Show one model by id or alias."""
    try:
        registry = ModelRegistry.get_default()
        ensure_discovered(registry)
        card = registry.get_model(model_id)
    except ModelNotFoundError as e:
        message = e.message
        if e.suggestions:
            message += f". Did you mean: {', '.join(e.suggestions)}?"
        handle_error(Exception(message), ExitCode.MODEL_NOT_FOUND)
        return
    except Exception as e:
        handle_error(e, ExitCode.GENERIC_ERROR)
        return

    format_type = ctx.obj["format"]
    if format_type in ("json", "yaml"):
        format_structured(card.to_dict(), format_type)
    else:
        format_model_detail(card, create_console(no_color=ctx.obj["no_color"]))


@models.command()
@click.argument("model_id", type=str)
@click.pass_context
def routes(ctx: click.Context, model_id: str) -> None:
    """Show every provider serving a model, with the preferred route marked."""
    try:
        registry = ModelRegistry.get_default()
        ensure_discovered(registry)
        route_list = registry.model_route_info(model_id)
    except Exception as e:
        handle_error(e, ExitCode.GENERIC_ERROR)
        return

    if not route_list:
        handle_error(Exception(f"No routes found for model '{model_id}'"), ExitCode.MODEL_NOT_FOUND)
        return

    format_type = ctx.obj["format"]
    if format_type in ("json", "yaml"):
        payload = {
            "model": model_id,
            "resolved": registry.resolve(model_id),
            "routes": [route.to_dict() for route in route_list],
            "count": len(route_list),
        }
        format_structured(payload, format_type)
    else:
        format_routes_table(route_list, create_console(no_color=ctx.obj["no_color"]), title=f"Routes for {model_id}")


@models.command()
@click.argument("alias", type=str)
@click.pass_context
def resolve(ctx: click.Context, alias: str) -> None:
    """Resolve an alias to its canonical model id (no discovery needed)."""
    try:
        registry = ModelRegistry.get_default()
        resolved = registry.resolve(alias)
    except Exception as e:
        handle_error(e, ExitCode.GENERIC_ERROR)
        return

    format_type = ctx.obj["format"]
    if format_type in ("json", "yaml"):
        format_structured({"alias": alias, "model_id": resolved, "is_alias": resolved != alias}, format_type)
    else:
        click.echo(resolved)
