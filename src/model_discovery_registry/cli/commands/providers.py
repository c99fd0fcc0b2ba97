"""Provider inspection commands for the mdr CLI."""

import click

from ...registry import ModelRegistry
from ..formatters import (
    create_console,
    format_credential_prompts,
    format_errors_table,
    format_models_table,
    format_providers_json,
    format_providers_table,
    format_structured,
)
from ..utils import ExitCode, ensure_discovered, handle_error


@click.group()
def providers() -> None:
    """Inspect providers and discovery status."""
    pass


@providers.command(name="list")
@click.pass_context
def list_providers(ctx: click.Context) -> None:
    """List discovered providers and their authentication state."""
    try:
        registry = ModelRegistry.get_default()
        ensure_discovered(registry)
        snapshots = registry.providers_list()
        prompts = registry.missing_credential_prompts()

        format_type = ctx.obj["format"]
        if format_type in ("json", "yaml"):
            payload = format_providers_json(snapshots)
            payload["missing_credentials"] = [prompt.to_dict() for prompt in prompts]
            format_structured(payload, format_type)
        else:
            console = create_console(no_color=ctx.obj["no_color"])
            format_providers_table(snapshots, console)
            format_credential_prompts(prompts, console)

    except Exception as e:
        handle_error(e, ExitCode.GENERIC_ERROR)


@providers.command()
@click.argument("provider_id", type=str)
@click.pass_context
def get(ctx: click.Context, provider_id: str) -> None:
    """Show one provider snapshot with its models."""
    try:
        registry = ModelRegistry.get_default()
        ensure_discovered(registry)
        info = registry.provider(provider_id.lower())
    except Exception as e:
        handle_error(e, ExitCode.GENERIC_ERROR)
        return

    if info is None:
        handle_error(Exception(f"Provider '{provider_id}' has not been discovered"), ExitCode.NO_DATA)
        return

    format_type = ctx.obj["format"]
    if format_type in ("json", "yaml"):
        format_structured(info.to_dict(), format_type)
    else:
        console = create_console(no_color=ctx.obj["no_color"])
        format_providers_table([info], console)
        format_models_table(list(info.models), console, title=f"{info.name} models")


@providers.command()
@click.pass_context
def errors(ctx: click.Context) -> None:
    """Show providers that failed during the last discovery, cached or live."""
    try:
        registry = ModelRegistry.get_default()
        if not registry.providers_list():
            registry.discover()
        failures = registry.discovery_errors()

        format_type = ctx.obj["format"]
        if format_type in ("json", "yaml"):
            format_structured({"errors": [f.to_dict() for f in failures], "count": len(failures)}, format_type)
        else:
            format_errors_table(failures, create_console(no_color=ctx.obj["no_color"]))

    except Exception as e:
        handle_error(e, ExitCode.GENERIC_ERROR)
