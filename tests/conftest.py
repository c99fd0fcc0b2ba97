"""Shared fixtures and fakes for the registry tests."""

from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence

import pytest

from model_discovery_registry.config import RegistryConfig
from model_discovery_registry.discovery.base import ProviderDiscoverer
from model_discovery_registry.model_card import CredentialResult, CredentialSource, ModelCard, ModelMode
from model_discovery_registry.pricing import ModelPricing
from model_discovery_registry.registry import ModelRegistry


def card(
    model_id: str,
    provider: str,
    origin: Optional[str] = None,
    mode: ModelMode = ModelMode.CHAT,
    capabilities: Sequence[str] = ("chat",),
    input_price: Optional[float] = None,
    output_price: Optional[float] = None,
    **fields,
) -> ModelCard:
    """Build a card with optional pricing for tests."""
    pricing = None
    if input_price is not None or output_price is not None:
        pricing = ModelPricing(input_per_million=input_price, output_per_million=output_price)
    return ModelCard(
        id=model_id,
        provider=provider,
        origin_provider=origin if origin is not None else provider,
        mode=mode,
        capabilities=tuple(capabilities),
        pricing=pricing,
        **fields,
    )


class FakeDiscoverer(ProviderDiscoverer):
    """Returns a fixed list of cards, or raises a fixed error."""

    def __init__(
        self,
        provider_id: str,
        cards: Iterable[ModelCard] = (),
        error: Optional[Exception] = None,
        name: Optional[str] = None,
    ) -> None:
        self.provider_id = provider_id
        self.provider_name = name or provider_id.title()
        self.base_url = f"https://{provider_id}.example"
        self.cards = list(cards)
        self.error = error
        self.calls: List[Dict[str, object]] = []

    def discover(self, credential: CredentialResult, timeout: Optional[float] = None) -> List[ModelCard]:
        self.calls.append({"credential": credential, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return list(self.cards)


class StaticResolver:
    """Credential resolver answering from a fixed table."""

    def __init__(self, credentials: Optional[Dict[str, CredentialResult]] = None) -> None:
        self.credentials = credentials or {}
        self.requests: List[tuple] = []

    def resolve(self, provider_id: str, explicit_key: Optional[str] = None) -> CredentialResult:
        self.requests.append((provider_id, explicit_key))
        return self.credentials.get(provider_id, CredentialResult())


class PassThroughEnricher:
    """Enricher that records calls and returns cards unchanged."""

    def __init__(self) -> None:
        self.calls = 0

    def enrich(self, cards: Iterable[ModelCard]) -> List[ModelCard]:
        self.calls += 1
        return list(cards)


ENV_KEY = CredentialResult(source=CredentialSource.ENV, api_key="test-key")


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Point cache and config paths at a temp dir and reset the singleton."""
    monkeypatch.setenv("MDR_CACHE_DIR", str(tmp_path / "cache"))
    monkeypatch.setenv("MDR_CONFIG_PATH", str(tmp_path / "config.yaml"))
    monkeypatch.delenv("MDR_CACHE_TTL", raising=False)
    ModelRegistry.cleanup()
    yield
    ModelRegistry.cleanup()


@pytest.fixture
def make_registry(tmp_path: Path) -> Callable[..., ModelRegistry]:
    """Factory for registries wired to fakes and a temp cache."""

    def _make(
        discoverers: Sequence[ProviderDiscoverer] = (),
        credentials: Optional[Dict[str, CredentialResult]] = None,
        config: Optional[RegistryConfig] = None,
        enricher: Optional[object] = None,
    ) -> ModelRegistry:
        return ModelRegistry(
            config=config or RegistryConfig(cache_dir=tmp_path / "registry-cache"),
            discoverers=list(discoverers),
            credential_resolver=StaticResolver(credentials),
            enricher=enricher or PassThroughEnricher(),
        )

    return _make
