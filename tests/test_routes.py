"""Tests for cross-provider route sets."""

from conftest import card

from model_discovery_registry.model_card import ProviderInfo
from model_discovery_registry.routing import build_routes, find_route_cards, route_key

BASE_URLS = {
    "openai": "https://api.openai.com",
    "openrouter": "https://openrouter.ai",
    "azure": "https://example.azure.com",
}


def test_route_key_groups_variants() -> None:
    assert route_key("openai/gpt-4o-2024-11-20") == route_key("GPT-4o")


def test_find_route_cards_across_providers() -> None:
    direct = card("gpt-5.3-codex", "openai")
    routed = card("openai/gpt-5.3-codex", "openrouter", origin="openai")
    other = card("gpt-4o", "openai")
    providers = [
        ProviderInfo(id="openai", name="OpenAI", models=(direct, other)),
        ProviderInfo(id="openrouter", name="OpenRouter", models=(routed,)),
    ]
    assert find_route_cards(providers, "gpt-5.3-codex") == [direct, routed]


def test_single_direct_route_is_preferred() -> None:
    direct = card("gpt-5.3-codex", "openai", input_price=5.0)
    routed = card("openai/gpt-5.3-codex", "openrouter", origin="openai", input_price=1.0)

    routes = build_routes([routed, direct], BASE_URLS)

    assert [r.provider for r in routes] == ["openrouter", "openai"]
    openai_route = routes[1]
    assert openai_route.is_direct
    assert openai_route.is_preferred
    assert openai_route.version == "5.3"
    assert openai_route.base_url == "https://api.openai.com"
    assert not routes[0].is_direct
    assert not routes[0].is_preferred


def test_cheapest_route_when_none_direct() -> None:
    a = card("openai/gpt-4o", "openrouter", origin="openai", input_price=2.5)
    b = card("gpt-4o", "azure", origin="openai", input_price=2.0)
    c = card("gpt-4o", "proxy", origin="openai")

    routes = build_routes([a, b, c], BASE_URLS)

    assert [r.is_preferred for r in routes] == [False, True, False]
    assert routes[2].base_url is None


def test_unpriced_routes_fall_back_to_discovery_order() -> None:
    a = card("llama-3.3-70b", "groq", origin="meta")
    b = card("meta-llama/llama-3.3-70b", "openrouter", origin="meta")
    routes = build_routes([a, b], BASE_URLS)
    assert [r.is_preferred for r in routes] == [True, False]


def test_several_direct_routes_pick_cheapest_direct() -> None:
    first = card("gpt-4o", "openai", input_price=2.5)
    second = card("gpt-4o-2024-11-20", "openai", input_price=2.0)
    routed = card("openai/gpt-4o", "openrouter", origin="openai", input_price=0.5)

    routes = build_routes([first, second, routed], BASE_URLS)

    assert [r.is_preferred for r in routes] == [False, True, False]
    assert sum(r.is_preferred for r in routes) == 1


def test_empty_route_set() -> None:
    assert build_routes([], BASE_URLS) == []
