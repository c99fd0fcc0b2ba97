#!/usr/bin/env python3
"""Example of basic registry usage."""

from model_discovery_registry import CheapestQuery, DiscoveryOptions, ModelNotFoundError, get_registry


def print_model_info(registry, model_name):
    """Print information about a model and the providers serving it.

    Args:
        registry: Registry with discovered providers
        model_name: Model id or alias to look up
    """
    try:
        card = registry.get_model(model_name)
    except ModelNotFoundError as e:
        print(f"{e.message}")
        if e.suggestions:
            print(f"  Did you mean: {', '.join(e.suggestions)}")
        print()
        return

    print(f"Model: {card.id} ({card.provider})")
    print(f"  Mode: {card.mode.value}")
    print(f"  Context window: {card.context_window or 'unknown'}")
    print(f"  Capabilities: {', '.join(card.capabilities)}")
    if card.pricing and card.pricing.input_per_million is not None:
        print(f"  Input price: ${card.pricing.input_per_million:g} per million tokens")

    for route in registry.model_route_info(model_name):
        marker = " (preferred)" if route.is_preferred else ""
        print(f"  Route: {route.provider} -> {route.model.id}{marker}")
    print()


def main():
    """Run the example."""
    registry = get_registry()

    # Served from the cache when it is fresh
    registry.discover(DiscoveryOptions(timeout=5.0))
    for failure in registry.discovery_errors():
        print(f"  ❌ {failure.provider_id}: {failure.message}")

    for info in registry.providers_list():
        status = "✅" if info.authenticated else "🔑"
        print(f"{status} {info.name}: {len(info.models)} models")
    print()

    for model in ["gpt4o", "sonnet", "nomic"]:
        print_model_info(registry, model)

    print("Cheapest embedding models:")
    result = registry.cheapest_models(CheapestQuery(role="embeddings", limit=3))
    for match in result.matches:
        print(f"  {match.model.provider}/{match.model.id}: ${match.score:g} per million input tokens")
    for prompt in result.missing_credentials:
        print(f"  {prompt.message}")


if __name__ == "__main__":
    main()
