"""Registry of machine-learning models discovered across providers.

This package discovers the models offered by vendor APIs, aggregators and
local runtimes, normalizes them into model cards, caches the snapshots on
disk and answers queries over them: role and capability lookups, cross-provider
routes for one model and price rankings.
"""

from importlib.metadata import version as _version

# Version of the package
__version__ = _version("model-discovery-registry")

# Import main components for easier access
from .aliases import DEFAULT_ALIASES, AliasResolver
from .cache import CacheEntry, DiskCache
from .config import ProviderSettings, RegistryConfig, load_config_file
from .credentials import CredentialPrompt, CredentialResolver, fallback_credential
from .discovery import ProviderDiscoverer, get_all_discoverers, get_discoverer
from .enrichment import Enricher, LiteLLMEnricher
from .errors import (
    CacheError,
    ConfigurationError,
    DiscoveryFailedError,
    InvalidConfigFormatError,
    ModelNotFoundError,
    ModelRegistryError,
    NetworkError,
)
from .model_card import CredentialResult, CredentialSource, ModelCard, ModelMode, ProviderInfo
from .normalize import extract_model_version, extract_origin_provider, normalize_model_id
from .pricing import ModelPricing
from .ranking import CheapestMatch, CheapestQuery, CheapestResult, PriceMetric
from .registry import DiscoveryFailure, DiscoveryOptions, ModelRegistry, get_registry
from .roles import CapabilitySummary, ModelRoleCard, ProviderRoles, RoleQuery, model_supports_role, normalize_role_token
from .routing import ModelRoute

# Define public API
__all__ = [
    # Core registry
    "ModelRegistry",
    "DiscoveryOptions",
    "DiscoveryFailure",
    "get_registry",
    # Configuration
    "RegistryConfig",
    "ProviderSettings",
    "load_config_file",
    # Data types
    "ModelCard",
    "ModelMode",
    "ModelPricing",
    "ProviderInfo",
    "CredentialResult",
    "CredentialSource",
    # Derived views
    "ModelRoute",
    "RoleQuery",
    "ModelRoleCard",
    "ProviderRoles",
    "CapabilitySummary",
    "CheapestQuery",
    "CheapestMatch",
    "CheapestResult",
    "PriceMetric",
    "CredentialPrompt",
    # Collaborators
    "ProviderDiscoverer",
    "get_all_discoverers",
    "get_discoverer",
    "CredentialResolver",
    "fallback_credential",
    "Enricher",
    "LiteLLMEnricher",
    "DiskCache",
    "CacheEntry",
    "AliasResolver",
    "DEFAULT_ALIASES",
    # Identity helpers
    "extract_origin_provider",
    "normalize_model_id",
    "extract_model_version",
    "normalize_role_token",
    "model_supports_role",
    # Errors
    "ModelRegistryError",
    "ConfigurationError",
    "InvalidConfigFormatError",
    "DiscoveryFailedError",
    "NetworkError",
    "CacheError",
    "ModelNotFoundError",
]
