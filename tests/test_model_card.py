"""Tests for model cards, provider snapshots and pricing."""

import pytest

from model_discovery_registry.model_card import CredentialResult, CredentialSource, ModelCard, ModelMode, ProviderInfo
from model_discovery_registry.pricing import ModelPricing


class TestModelCard:
    """Tests for ModelCard construction and serialization."""

    def test_defaults_and_coercion(self) -> None:
        card = ModelCard(id="gpt-4o", provider="openai", mode="embedding", capabilities=["embedding"])
        assert card.name == "gpt-4o"
        assert card.mode is ModelMode.EMBEDDING
        assert card.capabilities == ("embedding",)
        assert card.aliases == ()
        assert card.source == "api"

    def test_single_capability_string(self) -> None:
        card = ModelCard(id="m", provider="p", capabilities="vision")
        assert card.capabilities == ("vision",)

    def test_cards_are_frozen(self) -> None:
        card = ModelCard(id="m", provider="p")
        with pytest.raises(AttributeError):
            card.id = "other"  # type: ignore[misc]

    def test_to_dict_uses_plain_values(self) -> None:
        card = ModelCard(
            id="text-embedding-3-small",
            provider="openai",
            origin_provider="openai",
            mode=ModelMode.EMBEDDING,
            capabilities=("embedding",),
            pricing=ModelPricing(input_per_million=0.02),
            dimensions=1536,
        )
        data = card.to_dict()
        assert data["mode"] == "embedding"
        assert data["capabilities"] == ["embedding"]
        assert data["pricing"] == {"input_per_million": 0.02, "output_per_million": None}
        assert ModelCard.from_dict(data) == card

    def test_from_dict_tolerates_sparse_input(self) -> None:
        card = ModelCard.from_dict({"id": "llama3.3:latest", "provider": "ollama", "unknown": 1})
        assert card.mode is ModelMode.CHAT
        assert card.pricing is None
        assert card.context_window == 0


class TestProviderInfo:
    """Tests for ProviderInfo."""

    def test_from_dict_restores_models(self) -> None:
        info = ProviderInfo(
            id="openai",
            name="OpenAI",
            authenticated=True,
            credential_source="env",
            models=[ModelCard(id="gpt-4o", provider="openai")],
            last_refreshed=12.5,
        )
        assert info.credential_source is CredentialSource.ENV
        assert isinstance(info.models, tuple)

        restored = ProviderInfo.from_dict(info.to_dict())
        assert restored == info

    def test_defaults_unauthenticated(self) -> None:
        info = ProviderInfo(id="google", name="Google")
        assert not info.authenticated
        assert info.credential_source is CredentialSource.NONE
        assert info.models == ()


class TestPricing:
    """Tests for ModelPricing."""

    def test_negative_cost_rejected(self) -> None:
        with pytest.raises(ValueError):
            ModelPricing(input_per_million=-1.0)

    def test_cache_costs_only_serialized_when_known(self) -> None:
        pricing = ModelPricing(input_per_million=3.0, output_per_million=15.0, cache_read_per_million=0.3)
        assert pricing.to_dict() == {
            "input_per_million": 3.0,
            "output_per_million": 15.0,
            "cache_read_per_million": 0.3,
        }


def test_credential_token_prefers_api_key() -> None:
    assert CredentialResult(api_key="k", access_token="t").token == "k"
    assert CredentialResult(access_token="t").token == "t"
    assert CredentialResult().token is None
    assert "secret" not in repr(CredentialResult(api_key="secret"))
