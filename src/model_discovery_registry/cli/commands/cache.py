"""Cache management commands for the mdr CLI."""

from typing import Any, Dict

import click

from ...registry import ModelRegistry
from ..formatters import (
    create_console,
    format_cache_info_json,
    format_cache_info_table,
    format_structured,
)
from ..utils import ExitCode, format_file_size, handle_error


def get_cache_info(registry: ModelRegistry) -> Dict[str, Any]:
    """Describe the registry's cache with human-readable sizes.

    Returns:
        ``DiskCache.info()`` output with ``size_formatted`` fields added
    """
    cache_info = registry.cache.info()
    for file_info in cache_info.get("files", []):
        file_info["size_formatted"] = format_file_size(int(file_info.get("size", 0)))
    cache_info["total_size_formatted"] = format_file_size(int(cache_info.get("total_size", 0)))
    cache_info["ttl_seconds"] = registry.config.cache_ttl
    return cache_info


@click.group()
def cache() -> None:
    """Manage the discovery cache."""
    pass


@cache.command()
@click.pass_context
def info(ctx: click.Context) -> None:
    """Show cache directory and entry information."""
    try:
        registry = ModelRegistry.get_default()
        cache_info = get_cache_info(registry)

        format_type = ctx.obj["format"]
        if format_type in ("json", "yaml"):
            payload = format_cache_info_json(cache_info)
            payload["ttl_seconds"] = cache_info["ttl_seconds"]
            format_structured(payload, format_type)
        else:
            console = create_console(no_color=ctx.obj["no_color"])
            format_cache_info_table(cache_info, console)
            console.print(f"[dim]Entries expire after {cache_info['ttl_seconds']:.0f} seconds[/dim]")

    except Exception as e:
        handle_error(e, ExitCode.GENERIC_ERROR)


@cache.command()
@click.option("--yes", is_flag=True, help="Confirm deletion without prompting (required for non-interactive use).")
@click.pass_context
def clear(ctx: click.Context, yes: bool = False) -> None:
    """Delete every cached discovery snapshot.

    The next query runs a live discovery.
    """
    try:
        registry = ModelRegistry.get_default()
        cache_info = get_cache_info(registry)

        if not yes:
            files = cache_info["files"]
            if not files:
                click.echo("No cache files found to clear.")
                return

            console = create_console(no_color=ctx.obj["no_color"])
            console.print(f"[yellow]Warning:[/yellow] This will delete {len(files)} cache files:")
            for file_info in files:
                console.print(f"  - {file_info['name']} ({file_info['size_formatted']})")
            console.print(f"\nCache directory: {cache_info['directory']}")

            if not click.confirm("\nAre you sure you want to clear the cache?"):
                console.print("Cache clear cancelled.")
                return

        removed_files = registry.clear_cache()

        format_type = ctx.obj["format"]
        if format_type in ("json", "yaml"):
            result_data = {
                "success": True,
                "files_removed": removed_files,
                "files_removed_count": len(removed_files),
                "cache_directory": cache_info["directory"],
            }
            format_structured(result_data, format_type)
        else:
            console = create_console(no_color=ctx.obj["no_color"])
            if removed_files:
                console.print(f"[green]Cleared {len(removed_files)} cache files:[/green]")
                for filename in removed_files:
                    console.print(f"  - {filename}")
            else:
                console.print("No cache files were found to clear.")
            console.print(f"\nCache directory: {cache_info['directory']}")

    except Exception as e:
        handle_error(e, ExitCode.GENERIC_ERROR)
