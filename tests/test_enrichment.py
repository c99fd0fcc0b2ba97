"""Tests for LiteLLM catalogue enrichment."""

from unittest.mock import MagicMock, patch

import pytest
import requests
from conftest import card

from model_discovery_registry.enrichment import LiteLLMEnricher
from model_discovery_registry.enrichment.litellm import extract_pricing
from model_discovery_registry.errors import NetworkError
from model_discovery_registry.model_card import ModelMode
from model_discovery_registry.pricing import ModelPricing

CATALOGUE = {
    "gpt-4o": {
        "input_cost_per_token": 0.0000025,
        "output_cost_per_token": 0.00001,
        "cache_read_input_token_cost": 0.00000125,
        "max_input_tokens": 128000,
        "max_output_tokens": 16384,
        "mode": "chat",
        "supports_vision": True,
        "supports_function_calling": True,
    },
    "text-embedding-3-small": {
        "input_cost_per_token": 0.00000002,
        "output_cost_per_token": 0.0,
        "max_input_tokens": 8191,
        "output_vector_size": 1536,
        "mode": "embedding",
    },
    "anthropic/claude-3-5-haiku": {
        "input_cost_per_token": 0.0000008,
        "output_cost_per_token": 0.000004,
        "max_tokens": 8192,
        "supports_prompt_caching": True,
    },
}


@pytest.fixture
def enricher() -> LiteLLMEnricher:
    return LiteLLMEnricher(data=CATALOGUE)


class TestExtractPricing:
    """Tests for per-token to per-million conversion."""

    def test_converts_costs(self) -> None:
        pricing = extract_pricing(CATALOGUE["gpt-4o"])
        assert pricing is not None
        assert pricing.input_per_million == pytest.approx(2.5)
        assert pricing.output_per_million == pytest.approx(10.0)
        assert pricing.cache_read_per_million == pytest.approx(1.25)
        assert pricing.cache_write_per_million is None

    def test_no_costs(self) -> None:
        assert extract_pricing({"mode": "chat"}) is None


class TestLiteLLMEnricher:
    """Tests for filling missing card fields."""

    def test_fills_missing_fields(self, enricher: LiteLLMEnricher) -> None:
        (enriched,) = enricher.enrich([card("gpt-4o", "openai")])

        assert enriched.pricing is not None
        assert enriched.pricing.input_per_million == pytest.approx(2.5)
        assert enriched.context_window == 128000
        assert enriched.max_input_tokens == 128000
        assert enriched.max_output_tokens == 16384
        assert enriched.capabilities == ("chat", "vision", "function_calling")

    def test_never_overwrites_populated_fields(self, enricher: LiteLLMEnricher) -> None:
        original = card(
            "gpt-4o",
            "openai",
            capabilities=("chat", "vision"),
            input_price=5.0,
            output_price=15.0,
            context_window=64000,
            max_output_tokens=4096,
        )

        (enriched,) = enricher.enrich([original])

        assert enriched.pricing == ModelPricing(input_per_million=5.0, output_per_million=15.0)
        assert enriched.context_window == 64000
        assert enriched.max_output_tokens == 4096
        assert enriched.capabilities == ("chat", "vision", "function_calling")

    def test_refines_generic_chat_mode(self, enricher: LiteLLMEnricher) -> None:
        (enriched,) = enricher.enrich([card("text-embedding-3-small", "openai")])
        assert enriched.mode is ModelMode.EMBEDDING
        assert enriched.dimensions == 1536

    def test_origin_and_normalized_lookup(self, enricher: LiteLLMEnricher) -> None:
        routed = card("claude-3-5-haiku-20241022", "bedrock", origin="anthropic")

        (enriched,) = enricher.enrich([routed])

        assert enriched.pricing is not None
        assert enriched.pricing.output_per_million == pytest.approx(4.0)
        assert enriched.max_output_tokens == 8192
        assert "prompt_caching" in enriched.capabilities

    def test_unknown_card_is_unchanged(self, enricher: LiteLLMEnricher) -> None:
        original = card("mystery-model", "ollama")
        assert enricher.enrich([original]) == [original]
        assert enricher.lookup(original) is None

    def test_lowercase_lookup(self, enricher: LiteLLMEnricher) -> None:
        assert enricher.lookup(card("GPT-4o", "openai")) is CATALOGUE["gpt-4o"]


class TestCatalogueDownload:
    """Tests for fetching the catalogue."""

    @patch("requests.get")
    def test_downloads_once(self, mock_get: MagicMock) -> None:
        response = MagicMock()
        response.json.return_value = CATALOGUE
        mock_get.return_value = response
        enricher = LiteLLMEnricher(url="https://catalogue.example/models.json", timeout=3.0)

        enricher.enrich([card("gpt-4o", "openai")])
        enricher.enrich([card("gpt-4o", "openai")])

        mock_get.assert_called_once_with("https://catalogue.example/models.json", timeout=3.0)

    @patch("requests.get")
    def test_network_failure_raises_network_error(self, mock_get: MagicMock) -> None:
        mock_get.side_effect = requests.ConnectionError("offline")

        with pytest.raises(NetworkError) as exc_info:
            LiteLLMEnricher(url="https://catalogue.example/models.json").load()

        assert exc_info.value.url == "https://catalogue.example/models.json"

    @patch("requests.get")
    def test_non_object_body_raises(self, mock_get: MagicMock) -> None:
        response = MagicMock()
        response.json.return_value = ["not", "a", "mapping"]
        mock_get.return_value = response

        with pytest.raises(NetworkError):
            LiteLLMEnricher().load()
