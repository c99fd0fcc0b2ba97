"""Tests for role tokens, role views and capability summaries."""

import pytest
from conftest import card

from model_discovery_registry.model_card import CredentialSource, ModelMode, ProviderInfo
from model_discovery_registry.roles import (
    RoleQuery,
    card_roles,
    filter_cards,
    model_supports_role,
    normalize_role_token,
    provider_roles,
    summarize_capabilities,
    unique_cards,
)

EMBED = card("text-embedding-3-small", "openai", mode=ModelMode.EMBEDDING, capabilities=["embedding"])
SONNET = card("claude-sonnet-4-6", "anthropic", capabilities=["chat", "vision", "function_calling"])
HAIKU = card("claude-haiku-4-5", "anthropic", capabilities=["chat", "code"])
ROUTED = card("anthropic/claude-sonnet-4", "openrouter", origin="anthropic", capabilities=["chat", "vision"])


class TestNormalizeRoleToken:
    """Tests for role token folding."""

    @pytest.mark.parametrize(
        "token,expected",
        [
            ("embeddings", "embedding"),
            ("Embed", "embedding"),
            ("tools", "function_calling"),
            ("Tool-Use", "function_calling"),
            ("function call", "function_calling"),
            ("STT", "speech_to_text"),
            ("tts", "text_to_speech"),
            ("image-gen", "image_generation"),
            ("caching", "prompt_caching"),
            ("coding", "code"),
            (" Vision ", "vision"),
            ("image", "image"),
        ],
    )
    def test_synonyms(self, token: str, expected: str) -> None:
        assert normalize_role_token(token) == expected


class TestModelSupportsRole:
    """Tests for role matching against cards."""

    def test_mode_satisfies_role(self) -> None:
        assert model_supports_role(EMBED, "embeddings")

    def test_capability_satisfies_role(self) -> None:
        assert model_supports_role(SONNET, "tools")
        assert not model_supports_role(HAIKU, "vision")

    def test_raw_token_fallback(self) -> None:
        custom = card("m", "p", capabilities=["Long-Context"])
        assert model_supports_role(custom, "Long-Context")


def test_card_roles_mode_first_without_duplicates() -> None:
    assert card_roles(SONNET) == ("chat", "vision", "function_calling")
    assert card_roles(EMBED) == ("embedding",)


def test_unique_cards_keeps_first_per_provider() -> None:
    duplicate = card("claude-haiku-4-5", "anthropic", capabilities=["chat"])
    assert unique_cards([HAIKU, duplicate, ROUTED]) == [HAIKU, ROUTED]


class TestRoleQuery:
    """Tests for RoleQuery filtering."""

    def test_string_mode_is_coerced(self) -> None:
        assert RoleQuery(mode="embedding").mode is ModelMode.EMBEDDING

    def test_filters_combine(self) -> None:
        cards = [EMBED, SONNET, HAIKU, ROUTED]
        assert filter_cards(cards, RoleQuery(origin_provider="anthropic", role="vision")) == [SONNET, ROUTED]
        assert filter_cards(cards, RoleQuery(provider="anthropic", capability="code")) == [HAIKU]
        assert filter_cards(cards, RoleQuery(mode=ModelMode.EMBEDDING)) == [EMBED]
        assert filter_cards(cards) == cards


class TestProviderRoles:
    """Tests for the provider-grouped role view."""

    def _providers(self) -> list:
        return [
            ProviderInfo(id="anthropic", name="Anthropic", authenticated=True, models=(SONNET, HAIKU)),
            ProviderInfo(id="openai", name="OpenAI", authenticated=True, models=(EMBED,)),
            ProviderInfo(id="google", name="Google", credential_source=CredentialSource.NONE),
        ]

    def test_all_providers_with_models(self) -> None:
        view = provider_roles(self._providers())
        assert [entry.id for entry in view] == ["anthropic", "openai"]
        assert view[0].models[0].roles == ("chat", "vision", "function_calling")
        assert view[0].models[0].id == "claude-sonnet-4-6"

    def test_role_filter_drops_empty_providers(self) -> None:
        view = provider_roles(self._providers(), RoleQuery(role="embeddings"))
        assert [entry.id for entry in view] == ["openai"]

    def test_provider_filter(self) -> None:
        view = provider_roles(self._providers(), RoleQuery(provider="anthropic", capability="code"))
        assert len(view) == 1
        assert [m.id for m in view[0].models] == ["claude-haiku-4-5"]

    def test_to_dict_includes_roles(self) -> None:
        data = provider_roles(self._providers())[1].to_dict()
        assert data["credential_source"] == "none"
        assert data["models"][0]["roles"] == ["embedding"]


def test_summarize_capabilities() -> None:
    summaries = summarize_capabilities([SONNET, HAIKU, ROUTED, EMBED, SONNET])
    by_name = {s.capability: s for s in summaries}

    assert summaries[0].capability == "chat"
    assert by_name["chat"].model_count == 3
    assert by_name["vision"].model_count == 2
    assert by_name["vision"].providers == ["anthropic", "openrouter"]
    assert by_name["vision"].provider_count == 2
    assert by_name["embedding"].modes == ["embedding"]
    assert by_name["code"].example_model_id == "claude-haiku-4-5"
    # Equal counts keep first-seen order
    singles = [s.capability for s in summaries if s.model_count == 1]
    assert singles == ["function_calling", "code", "embedding"]
