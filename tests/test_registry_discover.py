"""Tests for ModelRegistry discovery, caching and refresh."""

import json
import time
from dataclasses import replace
from pathlib import Path
from typing import Iterable, List
from unittest.mock import patch

import pytest
from conftest import ENV_KEY, FakeDiscoverer, StaticResolver, card

from model_discovery_registry.config import RegistryConfig
from model_discovery_registry.errors import CacheError, DiscoveryFailedError, NetworkError
from model_discovery_registry.model_card import CredentialResult, CredentialSource, ModelCard
from model_discovery_registry.pricing import ModelPricing
from model_discovery_registry.registry import CACHE_KEY_ALL, CACHE_KEY_ERRORS, DiscoveryOptions, ModelRegistry


def _fakes() -> List[FakeDiscoverer]:
    return [
        FakeDiscoverer("openai", [card("gpt-4o", "openai"), card("gpt-4o-mini", "openai")], name="OpenAI"),
        FakeDiscoverer("anthropic", [card("claude-sonnet-4-6", "anthropic")], name="Anthropic"),
    ]


class FailingEnricher:
    def __init__(self, error: Exception) -> None:
        self.error = error

    def enrich(self, cards: Iterable[ModelCard]) -> List[ModelCard]:
        raise self.error


class PricingEnricher:
    def enrich(self, cards: Iterable[ModelCard]) -> List[ModelCard]:
        return [replace(c, pricing=c.pricing or ModelPricing(input_per_million=1.0, output_per_million=2.0)) for c in cards]


class TestDiscover:
    """Tests for live discovery."""

    def test_discovers_every_provider(self, make_registry) -> None:
        registry = make_registry(_fakes(), credentials={"openai": ENV_KEY})

        providers = registry.discover()

        assert [p.id for p in providers] == ["openai", "anthropic"]
        assert [c.id for c in registry.models()] == ["gpt-4o", "gpt-4o-mini", "claude-sonnet-4-6"]
        assert registry.discovered_at > 0
        assert registry.discovery_errors() == []

    def test_provider_metadata(self, make_registry) -> None:
        registry = make_registry(_fakes(), credentials={"openai": ENV_KEY})
        registry.discover()

        openai = registry.provider("openai")
        assert openai.name == "OpenAI"
        assert openai.base_url == "https://openai.example"
        assert openai.authenticated is True
        assert openai.credential_source is CredentialSource.ENV
        assert openai.last_refreshed > 0

        anthropic = registry.provider("anthropic")
        assert anthropic.authenticated is False
        assert anthropic.credential_source is CredentialSource.NONE

    def test_failed_provider_is_isolated(self, make_registry) -> None:
        broken = FakeDiscoverer(
            "google", error=DiscoveryFailedError("Google API error: 503 Service Unavailable", "google", status_code=503)
        )
        crashing = FakeDiscoverer("ollama", error=RuntimeError("unexpected payload"))
        registry = make_registry(_fakes() + [broken, crashing])

        providers = registry.discover()

        assert [p.id for p in providers] == ["openai", "anthropic"]
        errors = registry.discovery_errors()
        assert [(e.provider_id, e.error_type) for e in errors] == [
            ("google", "DiscoveryFailedError"),
            ("ollama", "RuntimeError"),
        ]
        assert errors[0].message == "Google API error: 503 Service Unavailable"
        assert errors[0].to_dict()["provider_id"] == "google"

    def test_errors_reset_on_next_discovery(self, make_registry) -> None:
        flaky = FakeDiscoverer("openai", error=RuntimeError("boom"))
        registry = make_registry([flaky])
        registry.discover()
        assert len(registry.discovery_errors()) == 1

        flaky.error = None
        registry.discover(DiscoveryOptions(force=True))
        assert registry.discovery_errors() == []

    def test_timeout_is_passed_to_discoverers(self, make_registry) -> None:
        fakes = _fakes()
        registry = make_registry(fakes)

        registry.discover(DiscoveryOptions(timeout=2.5))
        assert fakes[0].calls[0]["timeout"] == 2.5

        registry.discover(DiscoveryOptions(force=True))
        assert fakes[0].calls[1]["timeout"] == 10.0

    def test_invalid_timeout(self) -> None:
        with pytest.raises(ValueError):
            DiscoveryOptions(timeout=0)

    def test_provider_selection(self, make_registry) -> None:
        fakes = _fakes()
        registry = make_registry(fakes)

        registry.discover(DiscoveryOptions(providers=["anthropic"]))

        assert fakes[0].calls == []
        assert [p.id for p in registry.providers_list()] == ["anthropic"]

    def test_exclude_local(self, make_registry) -> None:
        local = FakeDiscoverer("ollama", [card("llama3.3:latest", "ollama")])
        registry = make_registry(_fakes() + [local])

        registry.discover(DiscoveryOptions(include_local=False))

        assert local.calls == []
        assert registry.provider("ollama") is None

    def test_disabled_provider_is_skipped(self, make_registry, tmp_path: Path) -> None:
        fakes = _fakes()
        config = RegistryConfig(cache_dir=tmp_path / "c", providers={"anthropic": {"enabled": False}})
        registry = make_registry(fakes, config=config)

        registry.discover()

        assert fakes[1].calls == []
        assert [p.id for p in registry.providers_list()] == ["openai"]

    def test_configured_key_reaches_resolver(self, tmp_path: Path) -> None:
        resolver = StaticResolver()
        registry = ModelRegistry(
            config=RegistryConfig(cache_dir=tmp_path / "c", providers={"openai": {"api_key": "sk-config"}}),
            discoverers=_fakes(),
            credential_resolver=resolver,
            enricher=PricingEnricher(),
        )

        registry.discover()

        assert sorted(resolver.requests) == [("anthropic", None), ("openai", "sk-config")]

    def test_credential_metadata_is_applied(self, make_registry) -> None:
        gcloud = CredentialResult(source=CredentialSource.CONFIG, access_token="tok", project_id="my-project")
        fake = FakeDiscoverer("google", [card("gemini-2.0-flash", "google", region="us-central1")])
        registry = make_registry([fake], credentials={"google": gcloud})

        registry.discover()

        (model,) = registry.models()
        assert model.project_id == "my-project"
        assert model.region == "us-central1"
        assert fake.calls[0]["credential"] is gcloud

    def test_aliases_are_attached(self, make_registry) -> None:
        registry = make_registry(_fakes())
        registry.discover()
        assert registry.model("gpt-4o").aliases == ("gpt4o",)
        assert registry.model("sonnet").id == "claude-sonnet-4-6"


class TestEnrichment:
    """Tests for the enrichment pass during discovery."""

    def test_enricher_fills_cards(self, make_registry) -> None:
        registry = make_registry(_fakes(), enricher=PricingEnricher())
        registry.discover()
        assert all(c.pricing is not None for c in registry.models())

    def test_enrichment_can_be_disabled(self, make_registry) -> None:
        registry = make_registry(_fakes(), enricher=PricingEnricher())
        registry.discover(DiscoveryOptions(enrich=False))
        assert all(c.pricing is None for c in registry.models())

    def test_unavailable_source_keeps_cards(self, make_registry) -> None:
        registry = make_registry(_fakes(), enricher=FailingEnricher(NetworkError("offline", "https://x")))
        registry.discover()
        assert len(registry.models()) == 3

    def test_enricher_bug_skips_provider(self, make_registry) -> None:
        registry = make_registry(_fakes(), enricher=FailingEnricher(KeyError("mode")))
        registry.discover()
        assert [p.id for p in registry.providers_list()] == ["openai", "anthropic"]


class TestDiscoveryCache:
    """Tests for serving discovery from the disk cache."""

    def test_second_registry_reads_cache(self, make_registry) -> None:
        make_registry(_fakes()).discover()
        fresh = _fakes()
        registry = make_registry(fresh)

        registry.discover()

        assert fresh[0].calls == [] and fresh[1].calls == []
        assert [c.id for c in registry.models()] == ["gpt-4o", "gpt-4o-mini", "claude-sonnet-4-6"]
        assert registry.discovered_at == registry.cache.get(CACHE_KEY_ALL).timestamp

    def test_force_bypasses_cache(self, make_registry) -> None:
        make_registry(_fakes()).discover()
        fresh = _fakes()

        make_registry(fresh).discover(DiscoveryOptions(force=True))

        assert len(fresh[0].calls) == 1

    def test_scoped_discovery_uses_per_provider_entries(self, make_registry) -> None:
        make_registry(_fakes()).discover()
        fresh = _fakes()
        registry = make_registry(fresh)

        registry.discover(DiscoveryOptions(providers=("anthropic",)))

        assert fresh[1].calls == []
        assert [p.id for p in registry.providers_list()] == ["anthropic"]

    def test_scoped_load_is_all_or_nothing(self, make_registry) -> None:
        first = make_registry(_fakes())
        first.discover(DiscoveryOptions(providers=("openai",)))
        assert first.cache.get(CACHE_KEY_ALL) is None

        fresh = _fakes()
        make_registry(fresh).discover(DiscoveryOptions(providers=("openai", "anthropic")))

        assert len(fresh[0].calls) == 1
        assert len(fresh[1].calls) == 1

    def test_expired_cache_is_ignored(self, make_registry, tmp_path: Path) -> None:
        config = RegistryConfig(cache_dir=tmp_path / "ttl-cache", cache_ttl=60)
        make_registry(_fakes(), config=config).discover()
        path = tmp_path / "ttl-cache" / "providers_all.json"
        payload = json.loads(path.read_text())
        payload["timestamp"] = time.time() - 3600
        path.write_text(json.dumps(payload))

        fresh = _fakes()
        make_registry(fresh, config=config).discover()

        assert len(fresh[0].calls) == 1

    def test_cached_discovery_reports_stored_failures(self, make_registry) -> None:
        error = DiscoveryFailedError("Google API error: 503 Service Unavailable", "google", status_code=503)
        first = make_registry(_fakes() + [FakeDiscoverer("google", error=error)])
        first.discover()
        assert [e.provider_id for e in first.discovery_errors()] == ["google"]

        google = FakeDiscoverer("google", error=error)
        registry = make_registry(_fakes() + [google])
        registry.discover()

        assert google.calls == []
        failures = registry.discovery_errors()
        assert [(e.provider_id, e.error_type) for e in failures] == [("google", "DiscoveryFailedError")]
        assert failures[0].message == "Google API error: 503 Service Unavailable"
        assert failures[0].timestamp == first.discovery_errors()[0].timestamp

    def test_clean_discovery_drops_stored_failures(self, make_registry) -> None:
        flaky = FakeDiscoverer("openai", [card("gpt-4o", "openai")], error=RuntimeError("boom"))
        make_registry([flaky]).discover()
        assert make_registry([flaky]).cache.get(CACHE_KEY_ERRORS) is not None

        flaky.error = None
        make_registry([flaky]).discover(DiscoveryOptions(force=True))

        registry = make_registry([flaky])
        registry.discover()
        assert registry.cache.get(CACHE_KEY_ERRORS) is None
        assert registry.discovery_errors() == []
        assert [c.id for c in registry.models()] == ["gpt-4o"]

    def test_cache_write_failure_is_tolerated(self, make_registry) -> None:
        registry = make_registry(_fakes())
        with patch.object(registry.cache, "set", side_effect=CacheError("disk full", "provider_openai")):
            providers = registry.discover()
        assert len(providers) == 2


class TestRefresh:
    """Tests for refresh and cache clearing."""

    def test_refresh_one_provider(self, make_registry) -> None:
        fakes = _fakes()
        registry = make_registry(fakes)
        registry.discover()

        registry.refresh("openai")

        assert len(fakes[0].calls) == 2
        assert len(fakes[1].calls) == 1
        assert [p.id for p in registry.providers_list()] == ["openai", "anthropic"]

    def test_refreshed_provider_is_not_served_stale(self, make_registry) -> None:
        fakes = _fakes()
        registry = make_registry(fakes)
        registry.discover()

        fakes[0].cards = [card("gpt-5", "openai")]
        registry.refresh("openai")
        assert registry.cache.get(CACHE_KEY_ALL) is None

        later = _fakes()
        later[0].cards = [card("gpt-5", "openai")]
        second = make_registry(later)
        second.discover()

        assert [c.id for c in second.models(provider="openai")] == ["gpt-5"]

    def test_refreshed_entry_serves_scoped_discovery(self, make_registry) -> None:
        fakes = _fakes()
        registry = make_registry(fakes)
        registry.discover()
        fakes[0].cards = [card("gpt-5", "openai")]
        registry.refresh("openai")

        fresh = _fakes()
        second = make_registry(fresh)
        second.discover(DiscoveryOptions(providers=("openai",)))

        assert fresh[0].calls == []
        assert [c.id for c in second.models()] == ["gpt-5"]

    def test_refresh_everything(self, make_registry) -> None:
        fakes = _fakes()
        registry = make_registry(fakes)
        registry.discover()

        registry.refresh()

        assert [len(f.calls) for f in fakes] == [2, 2]

    def test_clear_cache(self, make_registry) -> None:
        registry = make_registry(_fakes())
        registry.discover()

        removed = registry.clear_cache()

        assert removed == ["provider_anthropic.json", "provider_openai.json", "providers_all.json"]
        assert registry.cache.get(CACHE_KEY_ALL) is None
