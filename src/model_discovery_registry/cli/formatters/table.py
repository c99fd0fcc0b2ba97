"""Rich table formatter for CLI output."""

import sys
from typing import Any, Dict, Iterable, List, Optional, Sequence, TextIO

from rich.console import Console
from rich.table import Table
from rich.text import Text

from ...credentials import CredentialPrompt
from ...model_card import ModelCard, ProviderInfo
from ...pricing import ModelPricing
from ...ranking import CheapestResult
from ...registry import DiscoveryFailure
from ...roles import CapabilitySummary, ProviderRoles
from ...routing import ModelRoute
from ..utils.helpers import format_timestamp


def create_console(output: Optional[TextIO] = None, no_color: bool = False) -> Console:
    """Create a Rich console instance.

    Args:
        output: Output stream (defaults to stdout)
        no_color: Disable color output

    Returns:
        Console instance
    """
    if output is None:
        output = sys.stdout

    return Console(file=output, no_color=no_color)


def format_tokens(value: Optional[int]) -> str:
    """Render a token count as 128K / 1.0M.

    >>> format_tokens(128000)
    '128K'
    >>> format_tokens(0)
    'N/A'
    """
    if not value:
        return "N/A"
    tokens = int(value)
    if tokens >= 1_000_000:
        return f"{tokens/1_000_000:.1f}M"
    if tokens >= 1_000:
        return f"{tokens/1_000:.0f}K"
    return str(tokens)


def format_price(value: Optional[float]) -> str:
    if value is None:
        return "N/A"
    return f"${value:.4g}"


def _pricing_cells(pricing: Optional[ModelPricing]) -> List[str]:
    if pricing is None:
        return ["N/A", "N/A"]
    return [format_price(pricing.input_per_million), format_price(pricing.output_per_million)]


def format_models_table(models: Sequence[ModelCard], console: Optional[Console] = None, title: str = "Models") -> None:
    """Format model cards as a Rich table.

    Args:
        models: Cards in display order
        console: Rich console (will create if None)
        title: Table title
    """
    if console is None:
        console = create_console()

    table = Table(title=f"{title} ({len(models)})", show_header=True, header_style="bold magenta")
    table.add_column("Model", style="cyan", no_wrap=True)
    table.add_column("Provider", style="yellow")
    table.add_column("Origin")
    table.add_column("Mode")
    table.add_column("Context\nWindow", justify="right", no_wrap=True)
    table.add_column("Max\nOutput", justify="right", no_wrap=True)
    table.add_column("Input\n$/1M", justify="right", no_wrap=True)
    table.add_column("Output\n$/1M", justify="right", no_wrap=True)
    table.add_column("Capabilities", style="dim")

    for card in models:
        table.add_row(
            card.id,
            card.provider,
            card.origin_provider or "N/A",
            card.mode.value,
            format_tokens(card.context_window),
            format_tokens(card.max_output_tokens),
            *_pricing_cells(card.pricing),
            ", ".join(card.capabilities),
        )

    console.print(table)


def format_model_detail(card: ModelCard, console: Optional[Console] = None) -> None:
    """Print one card as a two-column field/value table."""
    if console is None:
        console = create_console()

    table = Table(title=card.id, show_header=True, header_style="bold magenta")
    table.add_column("Field", style="cyan")
    table.add_column("Value")

    pricing = card.pricing
    rows = [
        ("Name", card.name),
        ("Provider", card.provider),
        ("Origin", card.origin_provider or "N/A"),
        ("Mode", card.mode.value),
        ("Capabilities", ", ".join(card.capabilities) or "N/A"),
        ("Context window", format_tokens(card.context_window)),
        ("Max output", format_tokens(card.max_output_tokens)),
        ("Max input", format_tokens(card.max_input_tokens)),
        ("Input $/1M", format_price(pricing.input_per_million if pricing else None)),
        ("Output $/1M", format_price(pricing.output_per_million if pricing else None)),
        ("Dimensions", str(card.dimensions) if card.dimensions else "N/A"),
        ("Aliases", ", ".join(card.aliases) or "N/A"),
        ("Source", card.source),
        ("Discovered", format_timestamp(card.discovered_at)),
    ]
    if card.region:
        rows.append(("Region", card.region))
    if card.project_id:
        rows.append(("Project", card.project_id))
    for field_name, value in rows:
        table.add_row(field_name, value)

    console.print(table)


def format_providers_table(providers: Iterable[ProviderInfo], console: Optional[Console] = None) -> None:
    """Format provider snapshots as a Rich table."""
    if console is None:
        console = create_console()

    table = Table(title="Providers", show_header=True, header_style="bold magenta")
    table.add_column("Provider", style="cyan")
    table.add_column("Name")
    table.add_column("Auth", justify="center")
    table.add_column("Credential")
    table.add_column("Models", justify="right")
    table.add_column("Refreshed", style="dim")

    for info in sorted(providers, key=lambda p: p.id):
        auth = Text("✓", style="green") if info.authenticated else Text("✗", style="red")
        table.add_row(
            info.id,
            info.name,
            auth,
            info.credential_source.value,
            str(len(info.models)),
            format_timestamp(info.last_refreshed),
        )

    console.print(table)


def format_routes_table(routes: Sequence[ModelRoute], console: Optional[Console] = None, title: str = "Routes") -> None:
    """Format routes for one model, marking the preferred one."""
    if console is None:
        console = create_console()

    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("Provider", style="cyan")
    table.add_column("Model")
    table.add_column("Origin")
    table.add_column("Direct", justify="center")
    table.add_column("Input\n$/1M", justify="right")
    table.add_column("Output\n$/1M", justify="right")
    table.add_column("Base URL", style="dim")

    for route in routes:
        style = "bold green" if route.is_preferred else ""
        table.add_row(
            route.provider + (" *" if route.is_preferred else ""),
            route.model.id,
            route.origin_provider or "N/A",
            "✓" if route.is_direct else "",
            *_pricing_cells(route.model.pricing),
            route.base_url or "N/A",
            style=style,
        )

    console.print(table)
    console.print("[dim]* preferred route[/dim]")


def format_roles_table(providers: Iterable[ProviderRoles], console: Optional[Console] = None) -> None:
    """One table per provider listing each model's roles."""
    if console is None:
        console = create_console()

    for entry in providers:
        status = "authenticated" if entry.authenticated else "not authenticated"
        table = Table(
            title=f"{entry.name} ({entry.id}, {status})",
            show_header=True,
            header_style="bold magenta",
        )
        table.add_column("Model", style="cyan", no_wrap=True)
        table.add_column("Mode")
        table.add_column("Roles")
        for role_card in entry.models:
            table.add_row(role_card.id, role_card.card.mode.value, ", ".join(role_card.roles))
        console.print(table)


def format_capabilities_table(summaries: Iterable[CapabilitySummary], console: Optional[Console] = None) -> None:
    """Format capability summaries as a Rich table."""
    if console is None:
        console = create_console()

    table = Table(title="Capabilities", show_header=True, header_style="bold magenta")
    table.add_column("Capability", style="cyan")
    table.add_column("Models", justify="right")
    table.add_column("Providers")
    table.add_column("Modes")
    table.add_column("Example", style="dim")

    for summary in summaries:
        table.add_row(
            summary.capability,
            str(summary.model_count),
            ", ".join(summary.providers),
            ", ".join(summary.modes),
            summary.example_model_id or "N/A",
        )

    console.print(table)


def format_cheapest_table(result: CheapestResult, console: Optional[Console] = None) -> None:
    """Format a price ranking, followed by any credential prompts."""
    if console is None:
        console = create_console()

    table = Table(
        title=f"Cheapest models by {result.price_metric.value} price",
        show_header=True,
        header_style="bold magenta",
    )
    table.add_column("#", justify="right", style="dim")
    table.add_column("Model", style="cyan", no_wrap=True)
    table.add_column("Provider", style="yellow")
    table.add_column("Score", justify="right")
    table.add_column("Input\n$/1M", justify="right")
    table.add_column("Output\n$/1M", justify="right")

    for rank, match in enumerate(result.matches, start=1):
        table.add_row(
            str(rank),
            match.model.id,
            match.model.provider,
            format_price(match.score),
            *_pricing_cells(match.model.pricing),
        )

    console.print(table)
    console.print(
        f"[dim]{result.candidates} candidates, {result.priced_candidates} priced, "
        f"{result.skipped_no_pricing} without pricing[/dim]"
    )
    format_credential_prompts(result.missing_credentials, console)


def format_credential_prompts(prompts: Iterable[CredentialPrompt], console: Optional[Console] = None) -> None:
    """Print one warning line per provider missing a credential."""
    if console is None:
        console = create_console()
    for prompt in prompts:
        console.print(f"[yellow]Missing credentials:[/yellow] {prompt.message}")


def format_errors_table(failures: Iterable[DiscoveryFailure], console: Optional[Console] = None) -> None:
    """Format discovery failures as a Rich table."""
    if console is None:
        console = create_console()

    failures = list(failures)
    if not failures:
        console.print("[green]No discovery errors.[/green]")
        return

    table = Table(title="Discovery Errors", show_header=True, header_style="bold magenta")
    table.add_column("Provider", style="cyan")
    table.add_column("Type", style="red")
    table.add_column("Message")
    table.add_column("When", style="dim")
    for failure in failures:
        table.add_row(failure.provider_id, failure.error_type, failure.message, format_timestamp(failure.timestamp))

    console.print(table)


def format_cache_info_table(cache_info: Dict[str, Any], console: Optional[Console] = None) -> None:
    """Format cache information as a Rich table.

    Args:
        cache_info: Output of ``DiskCache.info()`` with formatted sizes
        console: Rich console (will create if None)
    """
    if console is None:
        console = create_console()

    console.print(f"[bold]Cache Directory:[/bold] {cache_info.get('directory', 'N/A')}")
    console.print(f"[bold]Total Files:[/bold] {len(cache_info.get('files', []))}")
    console.print()

    files = cache_info.get("files", [])
    if files:
        table = Table(title="Cache Files", show_header=True, header_style="bold magenta")

        table.add_column("File", style="cyan")
        table.add_column("Size", justify="right")
        table.add_column("Modified", style="dim")
        table.add_column("Written", style="dim")

        for file_info in files:
            table.add_row(
                file_info.get("name", "Unknown"),
                file_info.get("size_formatted", "N/A"),
                file_info.get("modified", "N/A"),
                file_info.get("written_at") or "N/A",
            )

        console.print(table)
    else:
        console.print("[dim]No cache files found[/dim]")
