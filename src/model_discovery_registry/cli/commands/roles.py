"""Role, capability and price ranking commands for the mdr CLI."""

from typing import Optional

import click

from ...ranking import DEFAULT_LIMIT, CheapestQuery
from ...registry import ModelRegistry
from ...roles import RoleQuery
from ..formatters import (
    create_console,
    format_capabilities_table,
    format_cheapest_table,
    format_credential_prompts,
    format_models_json,
    format_models_table,
    format_roles_table,
    format_structured,
)
from ..utils import (
    PRICE_METRIC_CHOICES,
    ExitCode,
    ensure_discovered,
    filter_options,
    handle_error,
    mode_option,
    origin_option,
    parse_mode,
    provider_option,
)


@click.command()
@click.option("--role", type=str, help="Role token such as embeddings, tools or vision.")
@filter_options
@click.pass_context
def roles(
    ctx: click.Context,
    role: Optional[str] = None,
    provider: Optional[str] = None,
    origin: Optional[str] = None,
    mode: Optional[str] = None,
    capability: Optional[str] = None,
) -> None:
    """Show models grouped by provider with the roles each one can fill."""
    try:
        registry = ModelRegistry.get_default()
        ensure_discovered(registry)
        query = RoleQuery(
            provider=provider,
            origin_provider=origin,
            mode=parse_mode(mode),
            capability=capability,
            role=role,
        )
        grouped = registry.provider_roles(query)
        scope = [provider] if provider else None
        prompts = registry.missing_credential_prompts(scope)

        format_type = ctx.obj["format"]
        if format_type in ("json", "yaml"):
            payload = {
                "providers": [entry.to_dict() for entry in grouped],
                "missing_credentials": [prompt.to_dict() for prompt in prompts],
            }
            format_structured(payload, format_type)
        else:
            console = create_console(no_color=ctx.obj["no_color"])
            if grouped:
                format_roles_table(grouped, console)
            else:
                console.print("[dim]No models match these filters.[/dim]")
            format_credential_prompts(prompts, console)

    except Exception as e:
        handle_error(e, ExitCode.GENERIC_ERROR)


@click.command()
@provider_option
@click.pass_context
def capabilities(ctx: click.Context, provider: Optional[str] = None) -> None:
    """Summarize capability tags across discovered models, most common first."""
    try:
        registry = ModelRegistry.get_default()
        ensure_discovered(registry)
        summaries = registry.capabilities(provider=provider)

        format_type = ctx.obj["format"]
        if format_type in ("json", "yaml"):
            payload = {"capabilities": [s.to_dict() for s in summaries], "count": len(summaries)}
            format_structured(payload, format_type)
        else:
            format_capabilities_table(summaries, create_console(no_color=ctx.obj["no_color"]))

    except Exception as e:
        handle_error(e, ExitCode.GENERIC_ERROR)


@click.command()
@click.argument("capability", type=str)
@provider_option
@origin_option
@mode_option
@click.option("--limit", type=int, default=None, help="Maximum number of models to show.")
@click.pass_context
def capable(
    ctx: click.Context,
    capability: str,
    provider: Optional[str] = None,
    origin: Optional[str] = None,
    mode: Optional[str] = None,
    limit: Optional[int] = None,
) -> None:
    """List models able to fill a role (e.g. vision, embeddings, tools).

    Examples:
      mdr capable vision --origin anthropic
      mdr capable tools --limit 5
    """
    try:
        registry = ModelRegistry.get_default()
        ensure_discovered(registry)
        cards = registry.capable(
            capability,
            provider=provider,
            origin_provider=origin,
            mode=parse_mode(mode),
            limit=limit,
        )

        format_type = ctx.obj["format"]
        if format_type in ("json", "yaml"):
            payload = format_models_json(cards)
            payload["capability"] = registry.normalize_role_token(capability)
            format_structured(payload, format_type)
        else:
            title = f"Models capable of {registry.normalize_role_token(capability)}"
            format_models_table(cards, create_console(no_color=ctx.obj["no_color"]), title=title)

    except Exception as e:
        handle_error(e, ExitCode.GENERIC_ERROR)


@click.command()
@click.option("--role", type=str, help="Role token such as embeddings, tools or vision.")
@filter_options
@click.option("--limit", type=int, default=DEFAULT_LIMIT, show_default=True, help="Maximum results; 0 for all.")
@click.option(
    "--price-metric",
    type=click.Choice(PRICE_METRIC_CHOICES, case_sensitive=False),
    help="Price to rank by. Defaults to input for embeddings, blended otherwise.",
)
@click.option("--input-weight", type=click.FloatRange(min=0), default=1.0, show_default=True)
@click.option("--output-weight", type=click.FloatRange(min=0), default=1.0, show_default=True)
@click.option("--include-unpriced", is_flag=True, help="Append models with no usable price after the ranked ones.")
@click.pass_context
def cheapest(
    ctx: click.Context,
    role: Optional[str] = None,
    provider: Optional[str] = None,
    origin: Optional[str] = None,
    mode: Optional[str] = None,
    capability: Optional[str] = None,
    limit: int = DEFAULT_LIMIT,
    price_metric: Optional[str] = None,
    input_weight: float = 1.0,
    output_weight: float = 1.0,
    include_unpriced: bool = False,
) -> None:
    """Rank matching models by price, cheapest first.

    Examples:
      mdr cheapest --role embeddings --limit 3
      mdr cheapest --capability vision --price-metric output
    """
    try:
        registry = ModelRegistry.get_default()
        ensure_discovered(registry)
        query = CheapestQuery(
            provider=provider,
            origin_provider=origin,
            mode=parse_mode(mode),
            capability=capability,
            role=role,
            limit=limit,
            price_metric=price_metric.lower() if price_metric else None,
            input_weight=input_weight,
            output_weight=output_weight,
            include_unpriced=include_unpriced,
        )
        result = registry.cheapest_models(query)

        format_type = ctx.obj["format"]
        if format_type in ("json", "yaml"):
            format_structured(result.to_dict(), format_type)
        else:
            format_cheapest_table(result, create_console(no_color=ctx.obj["no_color"]))

    except Exception as e:
        handle_error(e, ExitCode.GENERIC_ERROR)
