"""Core registry for discovered models.

This module provides the ModelRegistry class, which drives discovery across
providers, keeps the resulting provider snapshots in memory, persists them to
the disk cache and answers queries over them.

Typical usage:

    from model_discovery_registry import get_registry

    registry = get_registry()
    registry.discover()
    registry.cheapest_models(CheapestQuery(role="embeddings", limit=3))
"""

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .aliases import AliasResolver
from .cache import DiskCache
from .config import DEFAULT_TIMEOUT, RegistryConfig, load_config_file
from .credentials import (
    PROVIDER_NAMES,
    CredentialPrompt,
    CredentialResolver,
    build_credential_prompts,
    fallback_credential,
)
from .discovery import ProviderDiscoverer, get_all_discoverers
from .enrichment import Enricher, LiteLLMEnricher
from .errors import CacheError, ModelNotFoundError, NetworkError
from .logging import LogEvent, get_logger, log_debug, log_info, log_warning
from .model_card import CredentialResult, CredentialSource, ModelCard, ModelMode, ProviderInfo
from .ranking import CheapestQuery, CheapestResult, rank_cheapest
from .roles import (
    CapabilitySummary,
    ProviderRoles,
    RoleQuery,
    model_supports_role,
    normalize_role_token,
    provider_roles,
    summarize_capabilities,
    unique_cards,
)
from .routing import ModelRoute, build_routes, find_route_cards

logger = get_logger("registry")

CACHE_KEY_ALL = "providers_all"
CACHE_KEY_PREFIX = "provider_"
CACHE_KEY_ERRORS = "discovery_errors"

# Providers that run on the local machine and need no remote credential
LOCAL_PROVIDERS = frozenset({"ollama"})


@dataclass(frozen=True)
class DiscoveryOptions:
    """Options for :meth:`ModelRegistry.discover`.

    Attributes:
        providers: Provider ids to discover; None or empty means all
        include_local: Include local runtimes such as Ollama
        timeout: Per-request timeout in seconds
        enrich: Fill missing card fields from the LiteLLM catalogue
        force: Skip the cache and discover live
    """

    providers: Optional[Tuple[str, ...]] = None
    include_local: bool = True
    timeout: float = DEFAULT_TIMEOUT
    enrich: bool = True
    force: bool = False

    def __post_init__(self) -> None:
        """Accept any sequence of provider ids."""
        if self.providers is not None and not isinstance(self.providers, tuple):
            object.__setattr__(self, "providers", tuple(self.providers))
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")


@dataclass(frozen=True)
class DiscoveryFailure:
    """Why one provider dropped out of a live discovery."""

    provider_id: str
    message: str
    error_type: str
    timestamp: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "provider_id": self.provider_id,
            "message": self.message,
            "error_type": self.error_type,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DiscoveryFailure":
        return cls(
            provider_id=data["provider_id"],
            message=data.get("message", ""),
            error_type=data.get("error_type", ""),
            timestamp=float(data.get("timestamp") or 0.0),
        )


class ModelRegistry:
    """Registry of models discovered across providers.

    Collaborators are injected through the constructor; any left out is
    replaced by the built-in default (all built-in discoverers, the
    multi-source credential resolver, the LiteLLM enricher and a disk cache
    under the configured directory).
    """

    _default_instance: Optional["ModelRegistry"] = None
    _instance_lock = threading.RLock()

    @classmethod
    def get_default(cls) -> "ModelRegistry":
        """Get the default registry instance, configured from the config files.

        Returns:
            The default ModelRegistry instance
        """
        with cls._instance_lock:
            if cls._default_instance is None:
                cls._default_instance = cls(config=load_config_file())
            return cls._default_instance

    @staticmethod
    def cleanup() -> None:
        """Drop the default registry instance."""
        with ModelRegistry._instance_lock:
            ModelRegistry._default_instance = None

    def __init__(
        self,
        config: Optional[RegistryConfig] = None,
        discoverers: Optional[Sequence[ProviderDiscoverer]] = None,
        credential_resolver: Optional[CredentialResolver] = None,
        enricher: Optional[Enricher] = None,
        cache: Optional[DiskCache] = None,
    ):
        """Initialize a new registry instance.

        Args:
            config: Registry configuration. If None, defaults are used.
            discoverers: Discoverers to run. If None, the built-in set is used.
            credential_resolver: Object with ``resolve(provider_id, explicit_key)``.
            enricher: Object with ``enrich(cards)``.
            cache: Cache store for provider snapshots.
        """
        self.config = config or RegistryConfig()
        self._discoverers = list(discoverers) if discoverers is not None else None
        self._credential_resolver = credential_resolver
        self._enricher = enricher
        self.cache = cache or DiskCache(self.config.cache_dir)

        self._aliases = AliasResolver(self.config.aliases)
        self._providers: Dict[str, ProviderInfo] = {}
        self._discovered_at = 0.0
        self._errors: List[DiscoveryFailure] = []
        self._providers_lock = threading.RLock()

    # Discovery

    def discover(self, options: Optional[DiscoveryOptions] = None) -> List[ProviderInfo]:
        """Discover models across providers.

        Unless ``options.force`` is set, the request is first served from the
        cache when every requested provider has a fresh entry. Otherwise all
        selected providers are queried concurrently; a provider that fails is
        logged, recorded in :meth:`discovery_errors` and left out, without
        affecting the others.

        Args:
            options: Discovery options

        Returns:
            Every provider snapshot in the registry after discovery
        """
        options = options or DiscoveryOptions()

        if not options.force and self._load_from_cache(options.providers):
            return self.providers_list()

        discoverers = self._load_discoverers(options)
        resolver = self._get_credential_resolver()
        log_info(
            LogEvent.DISCOVERY,
            "Starting discovery",
            providers=",".join(d.provider_id for d in discoverers) or "none",
            timeout=options.timeout,
        )

        results: List[ProviderInfo] = []
        failures: List[DiscoveryFailure] = []
        if discoverers:
            with ThreadPoolExecutor(max_workers=len(discoverers), thread_name_prefix="mdr-discover") as executor:
                futures = [
                    (discoverer, executor.submit(self._discover_one, discoverer, resolver, options.timeout))
                    for discoverer in discoverers
                ]
                for discoverer, future in futures:
                    try:
                        results.append(future.result())
                    except Exception as e:
                        log_warning(
                            LogEvent.DISCOVERY,
                            "Provider discovery failed",
                            provider=discoverer.provider_id,
                            error=str(e),
                        )
                        failures.append(
                            DiscoveryFailure(
                                provider_id=discoverer.provider_id,
                                message=str(e),
                                error_type=type(e).__name__,
                                timestamp=time.time(),
                            )
                        )

        with self._providers_lock:
            for info in results:
                self._providers[info.id] = info
            self._errors = failures

        if options.enrich:
            self._enrich_providers()

        with self._providers_lock:
            self._populate_model_aliases()
            self._discovered_at = time.time()

        self._save_to_cache([info.id for info in results], scoped=bool(options.providers))
        log_info(
            LogEvent.DISCOVERY,
            "Discovery finished",
            succeeded=len(results),
            failed=len(failures),
        )
        return self.providers_list()

    def refresh(self, provider_id: Optional[str] = None) -> List[ProviderInfo]:
        """Re-discover one provider or all of them, bypassing the cache.

        Refreshing one provider also drops the aggregate entry, so the next
        unscoped discovery cannot serve that provider's old snapshot.

        Args:
            provider_id: Provider to refresh; None refreshes everything

        Returns:
            Every provider snapshot in the registry after discovery
        """
        if provider_id:
            self.cache.invalidate(f"{CACHE_KEY_PREFIX}{provider_id}")
            self.cache.invalidate(CACHE_KEY_ALL)
            self.cache.invalidate(CACHE_KEY_ERRORS)
            return self.discover(DiscoveryOptions(providers=(provider_id,), force=True))
        self.cache.clear()
        return self.discover(DiscoveryOptions(force=True))

    def discovery_errors(self) -> List[DiscoveryFailure]:
        """Failures from the most recent discovery.

        An unscoped discovery served from the cache reports the failures
        recorded when that cache entry was written.
        """
        with self._providers_lock:
            return list(self._errors)

    @property
    def discovered_at(self) -> float:
        """Epoch seconds of the last discovery or cache load, 0.0 if none."""
        return self._discovered_at

    def _discover_one(
        self,
        discoverer: ProviderDiscoverer,
        resolver: Optional[CredentialResolver],
        timeout: float,
    ) -> ProviderInfo:
        provider_id = discoverer.provider_id
        explicit_key = self.config.provider_settings(provider_id).api_key
        if resolver is not None:
            credential = resolver.resolve(provider_id, explicit_key)
        else:
            credential = fallback_credential(provider_id, explicit_key)

        log_debug(LogEvent.DISCOVERY, "Discovering provider", provider=provider_id, source=credential.source.value)
        models = discoverer.discover(credential, timeout=timeout)
        log_debug(LogEvent.DISCOVERY, "Provider discovered", provider=provider_id, models=len(models))

        return ProviderInfo(
            id=provider_id,
            name=discoverer.provider_name,
            base_url=discoverer.base_url,
            authenticated=credential.source != CredentialSource.NONE,
            credential_source=credential.source,
            models=tuple(self._apply_credential_metadata(models, credential)),
            last_refreshed=time.time(),
        )

    @staticmethod
    def _apply_credential_metadata(models: Iterable[ModelCard], credential: CredentialResult) -> List[ModelCard]:
        if not credential.region and not credential.project_id:
            return list(models)
        return [
            replace(
                card,
                region=card.region or credential.region,
                project_id=card.project_id or credential.project_id,
            )
            for card in models
        ]

    def _load_discoverers(self, options: DiscoveryOptions) -> List[ProviderDiscoverer]:
        if self._discoverers is not None:
            discoverers = list(self._discoverers)
        else:
            discoverers = get_all_discoverers(ollama_base_url=self.config.provider_settings("ollama").base_url)

        if options.providers:
            discoverers = [d for d in discoverers if d.provider_id in options.providers]
        if not options.include_local:
            discoverers = [d for d in discoverers if d.provider_id not in LOCAL_PROVIDERS]
        return [d for d in discoverers if self.config.is_enabled(d.provider_id)]

    def _get_credential_resolver(self) -> Optional[CredentialResolver]:
        if self._credential_resolver is not None:
            return self._credential_resolver
        try:
            self._credential_resolver = CredentialResolver()
        except (OSError, RuntimeError) as e:
            # No home directory; discovery continues with env-only credentials
            log_warning(LogEvent.CREDENTIALS, "Credential resolver unavailable, using environment only", error=str(e))
            return None
        return self._credential_resolver

    def _get_enricher(self) -> Enricher:
        if self._enricher is None:
            self._enricher = LiteLLMEnricher()
        return self._enricher

    def _enrich_providers(self) -> None:
        enricher = self._get_enricher()
        with self._providers_lock:
            snapshots = list(self._providers.values())

        enriched: Dict[str, ProviderInfo] = {}
        for info in snapshots:
            try:
                cards = enricher.enrich(info.models)
            except NetworkError as e:
                log_warning(LogEvent.ENRICHMENT, "Enrichment source unavailable, skipping enrichment", error=str(e))
                return
            except Exception as e:
                log_warning(LogEvent.ENRICHMENT, "Enrichment failed for provider", provider=info.id, error=str(e))
                continue
            enriched[info.id] = replace(info, models=tuple(cards))

        with self._providers_lock:
            self._providers.update(enriched)

    def _populate_model_aliases(self) -> None:
        for provider_id, info in list(self._providers.items()):
            models = []
            changed = False
            for card in info.models:
                aliases = tuple(self._aliases.reverse_aliases(card.id))
                if aliases and aliases != card.aliases:
                    card = replace(card, aliases=aliases)
                    changed = True
                models.append(card)
            if changed:
                self._providers[provider_id] = replace(info, models=tuple(models))

    # Cache

    def _load_from_cache(self, provider_ids: Optional[Sequence[str]]) -> bool:
        """Load snapshots from the cache.

        A scoped load succeeds only when every requested provider has a fresh
        entry; otherwise nothing is loaded.
        """
        ttl = self.config.cache_ttl

        if not provider_ids:
            entry = self.cache.get(CACHE_KEY_ALL)
            if entry is None or self.cache.is_expired(entry.timestamp, ttl):
                log_debug(LogEvent.CACHE, "Cache miss", key=CACHE_KEY_ALL)
                return False
            try:
                snapshots = [ProviderInfo.from_dict(item) for item in entry.data]
            except (KeyError, TypeError, ValueError) as e:
                log_warning(LogEvent.CACHE, "Ignoring malformed cache entry", key=CACHE_KEY_ALL, error=str(e))
                return False
            failures = self._load_errors_from_cache()
            with self._providers_lock:
                for info in snapshots:
                    self._providers[info.id] = info
                self._errors = failures
                self._discovered_at = entry.timestamp
            log_debug(LogEvent.CACHE, "Cache hit", key=CACHE_KEY_ALL, providers=len(snapshots))
            return True

        loaded: Dict[str, ProviderInfo] = {}
        oldest = time.time()
        for provider_id in provider_ids:
            key = f"{CACHE_KEY_PREFIX}{provider_id}"
            entry = self.cache.get(key)
            if entry is None or self.cache.is_expired(entry.timestamp, ttl):
                log_debug(LogEvent.CACHE, "Cache miss", key=key)
                return False
            try:
                loaded[provider_id] = ProviderInfo.from_dict(entry.data)
            except (KeyError, TypeError, ValueError) as e:
                log_warning(LogEvent.CACHE, "Ignoring malformed cache entry", key=key, error=str(e))
                return False
            oldest = min(oldest, entry.timestamp)

        with self._providers_lock:
            self._providers.update(loaded)
            self._discovered_at = oldest
        log_debug(LogEvent.CACHE, "Cache hit", providers=",".join(loaded))
        return True

    def _load_errors_from_cache(self) -> List[DiscoveryFailure]:
        entry = self.cache.get(CACHE_KEY_ERRORS)
        if entry is None or self.cache.is_expired(entry.timestamp, self.config.cache_ttl):
            return []
        try:
            return [DiscoveryFailure.from_dict(item) for item in entry.data]
        except (KeyError, TypeError, ValueError) as e:
            log_warning(LogEvent.CACHE, "Ignoring malformed cache entry", key=CACHE_KEY_ERRORS, error=str(e))
            return []

    def _save_to_cache(self, provider_ids: Sequence[str], scoped: bool) -> None:
        """Write per-provider entries and, for unscoped discovery, the aggregate entry.

        The failures of an unscoped discovery are stored beside the aggregate
        entry. Write failures are logged; the in-memory state stays
        authoritative.
        """
        with self._providers_lock:
            snapshots = list(self._providers.values())
            failures = list(self._errors)

        try:
            for info in snapshots:
                if info.id in provider_ids:
                    self.cache.set(f"{CACHE_KEY_PREFIX}{info.id}", info.to_dict())
            if not scoped:
                self.cache.set(CACHE_KEY_ALL, [info.to_dict() for info in snapshots])
                if failures:
                    self.cache.set(CACHE_KEY_ERRORS, [failure.to_dict() for failure in failures])
                else:
                    self.cache.invalidate(CACHE_KEY_ERRORS)
        except CacheError as e:
            log_warning(LogEvent.CACHE, "Failed to write cache", key=e.key, error=e.message)

    def clear_cache(self) -> List[str]:
        """Delete every cache entry.

        Returns:
            Names of the removed cache files
        """
        return self.cache.clear()

    # Queries

    def _snapshots(self) -> List[ProviderInfo]:
        with self._providers_lock:
            return list(self._providers.values())

    def models(
        self,
        provider: Optional[str] = None,
        origin_provider: Optional[str] = None,
        mode: Optional[ModelMode] = None,
        capability: Optional[str] = None,
    ) -> List[ModelCard]:
        """Return known models, optionally filtered.

        Cards with the same id from different providers are separate routes
        and are all kept; repeats within one provider collapse to the first.

        Args:
            provider: Serving provider id
            origin_provider: Original creator of the model
            mode: Model mode
            capability: Capability tag

        Returns:
            Matching cards in discovery order
        """
        query = RoleQuery(provider=provider, origin_provider=origin_provider, mode=mode, capability=capability)
        cards = (card for info in self._snapshots() for card in info.models)
        return [card for card in unique_cards(cards) if query.matches(card)]

    def model(self, id_or_alias: str) -> Optional[ModelCard]:
        """Find a model by id or alias.

        When the alias table maps the input to another id, only that id is
        searched; the raw input is never tried as a fallback.

        Returns:
            The first matching card in discovery order, or None
        """
        target = self._aliases.resolve(id_or_alias)
        for info in self._snapshots():
            for card in info.models:
                if card.id == target:
                    return card
        return None

    def get_model(self, id_or_alias: str) -> ModelCard:
        """Find a model by id or alias, raising if it is unknown.

        Raises:
            ModelNotFoundError: If no card matches; close matches are attached
        """
        card = self.model(id_or_alias)
        if card is not None:
            return card
        suggestions = [match.id for match in self.search(id_or_alias)][:5]
        raise ModelNotFoundError(f"Model '{id_or_alias}' not found", id_or_alias, suggestions=suggestions)

    def search(self, query: str, origin_provider: Optional[str] = None) -> List[ModelCard]:
        """Case-insensitive substring search over ids, names and aliases."""
        needle = query.lower()
        return [
            card
            for card in self.models(origin_provider=origin_provider)
            if needle in card.id.lower()
            or needle in card.name.lower()
            or any(needle in alias.lower() for alias in card.aliases)
        ]

    def capable(
        self,
        query: str,
        provider: Optional[str] = None,
        origin_provider: Optional[str] = None,
        mode: Optional[ModelMode] = None,
        limit: Optional[int] = None,
    ) -> List[ModelCard]:
        """Models supporting a role token such as "vision", "embeddings" or "tools"."""
        cards = [
            card
            for card in self.models(provider=provider, origin_provider=origin_provider, mode=mode)
            if model_supports_role(card, query)
        ]
        if limit is not None and limit > 0:
            cards = cards[:limit]
        return cards

    def model_routes(self, model_id: str) -> List[ModelCard]:
        """Every card that is a route to the same model, sorted by provider."""
        cards = find_route_cards(self._snapshots(), model_id)
        return sorted(cards, key=lambda card: card.provider)

    def model_route_info(self, id_or_alias: str) -> List[ModelRoute]:
        """Annotated routes for a model, with exactly one marked preferred.

        Returns:
            Routes in discovery order; empty when the model is unknown
        """
        snapshots = self._snapshots()
        target = self._aliases.resolve(id_or_alias)
        cards = unique_cards(find_route_cards(snapshots, target))
        return build_routes(cards, {info.id: info.base_url for info in snapshots})

    def provider(self, provider_id: str) -> Optional[ProviderInfo]:
        """Get one provider snapshot by id."""
        with self._providers_lock:
            return self._providers.get(provider_id)

    def providers_list(self) -> List[ProviderInfo]:
        """All provider snapshots in discovery order."""
        return self._snapshots()

    # Aliases

    def resolve(self, alias: str) -> str:
        """Resolve an alias to its canonical model id."""
        with self._providers_lock:
            return self._aliases.resolve(alias)

    def alias(self, short: str, model_id: str) -> None:
        """Add or replace a custom alias."""
        with self._providers_lock:
            self._aliases.add_alias(short, model_id)

    # Derived views

    def provider_roles(self, query: Optional[RoleQuery] = None) -> List[ProviderRoles]:
        """Providers with their matching models and each model's roles."""
        return provider_roles(self._snapshots(), query)

    def capabilities(self, provider: Optional[str] = None) -> List[CapabilitySummary]:
        """Capability tags across models, most common first."""
        return summarize_capabilities(self.models(provider=provider))

    def cheapest_models(self, query: Optional[CheapestQuery] = None) -> CheapestResult:
        """Rank matching models by price, cheapest first.

        The result also lists credential prompts for unauthenticated providers
        in scope (the filtered provider, or every known provider), so callers
        can tell a missing key from a missing model.
        """
        query = query or CheapestQuery()
        result = rank_cheapest(self.models(), query)
        scope = [query.provider] if query.provider else None
        result.missing_credentials = self.missing_credential_prompts(scope)
        return result

    def missing_credential_prompts(self, provider_ids: Optional[Iterable[str]] = None) -> List[CredentialPrompt]:
        """Prompts for providers that need a credential and were not authenticated.

        Args:
            provider_ids: Providers to check; defaults to every known provider.
                Requested ids that were never discovered count as unauthenticated.

        Returns:
            One prompt per flagged provider
        """
        snapshots = {info.id: info for info in self._snapshots()}
        if provider_ids is None:
            infos = list(snapshots.values())
        else:
            infos = [
                snapshots.get(provider_id)
                or ProviderInfo(id=provider_id, name=PROVIDER_NAMES.get(provider_id, provider_id))
                for provider_id in provider_ids
            ]
        return build_credential_prompts(infos)

    @staticmethod
    def normalize_role_token(token: str) -> str:
        """Map a role token to its canonical mode or capability name."""
        return normalize_role_token(token)

    @staticmethod
    def model_supports_role(card: ModelCard, role: str) -> bool:
        """Check whether a card's mode or capabilities satisfy a role token."""
        return model_supports_role(card, role)

    # Serialization

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the registry state.

        Returns:
            ``{"providers": [...], "aliases": {...}, "discovered_at": float}``
        """
        with self._providers_lock:
            return {
                "providers": [info.to_dict() for info in self._providers.values()],
                "aliases": self._aliases.all(),
                "discovered_at": self._discovered_at,
            }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], **kwargs: Any) -> "ModelRegistry":
        """Restore a registry from :meth:`to_dict` output.

        Args:
            data: Serialized registry state
            **kwargs: Extra constructor arguments (cache, discoverers, ...)

        Returns:
            A registry answering the same queries as the serialized one
        """
        base = kwargs.pop("config", None) or RegistryConfig()
        config = RegistryConfig(
            cache_dir=base.cache_dir,
            cache_ttl=base.cache_ttl,
            providers=base.providers,
            aliases={**base.aliases, **(data.get("aliases") or {})},
        )
        registry = cls(config=config, **kwargs)
        for item in data.get("providers") or []:
            info = item if isinstance(item, ProviderInfo) else ProviderInfo.from_dict(item)
            registry._providers[info.id] = info
        registry._discovered_at = float(data.get("discovered_at") or 0.0)
        return registry


def get_registry() -> ModelRegistry:
    """Get the process-wide default registry."""
    return ModelRegistry.get_default()
