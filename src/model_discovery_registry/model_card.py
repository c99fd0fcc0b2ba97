"""Core data types for discovered models and providers.

A :class:`ModelCard` describes one model as served by one provider, and a
:class:`ProviderInfo` is one provider's discovery snapshot. Both are frozen;
registry projections hand them out without copying.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple

from .pricing import ModelPricing


class ModelMode(str, Enum):
    """Primary operational mode of a model."""

    CHAT = "chat"
    EMBEDDING = "embedding"
    IMAGE = "image"
    AUDIO = "audio"
    MODERATION = "moderation"


class CredentialSource(str, Enum):
    """Where a provider credential came from."""

    ENV = "env"
    CLI = "cli"
    CONFIG = "config"
    OAUTH = "oauth"
    NONE = "none"


def _as_tuple(values: Optional[Iterable[str]]) -> Tuple[str, ...]:
    if values is None:
        return ()
    if isinstance(values, str):
        return (values,)
    return tuple(values)


@dataclass(frozen=True)
class ModelCard:
    """Normalized descriptor for one model as seen through one serving provider.

    ``id`` is unique only within ``provider``; the same id may appear under
    several providers as separate routes.
    """

    id: str
    provider: str
    name: str = ""
    origin_provider: Optional[str] = None
    mode: ModelMode = ModelMode.CHAT
    capabilities: Tuple[str, ...] = ("chat",)
    context_window: int = 0
    max_output_tokens: int = 0
    pricing: Optional[ModelPricing] = None
    dimensions: Optional[int] = None
    max_input_tokens: Optional[int] = None
    aliases: Tuple[str, ...] = ()
    discovered_at: float = 0.0
    source: str = "api"
    region: Optional[str] = None
    project_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Coerce loose inputs (plain strings, lists) into canonical types."""
        if not self.name:
            object.__setattr__(self, "name", self.id)
        if not isinstance(self.mode, ModelMode):
            object.__setattr__(self, "mode", ModelMode(self.mode))
        object.__setattr__(self, "capabilities", _as_tuple(self.capabilities))
        object.__setattr__(self, "aliases", _as_tuple(self.aliases))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-ready dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "provider": self.provider,
            "origin_provider": self.origin_provider,
            "mode": self.mode.value,
            "capabilities": list(self.capabilities),
            "context_window": self.context_window,
            "max_output_tokens": self.max_output_tokens,
            "pricing": self.pricing.to_dict() if self.pricing else None,
            "dimensions": self.dimensions,
            "max_input_tokens": self.max_input_tokens,
            "aliases": list(self.aliases),
            "discovered_at": self.discovered_at,
            "source": self.source,
            "region": self.region,
            "project_id": self.project_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ModelCard":
        """Build a card from a dictionary produced by :meth:`to_dict`.

        Args:
            data: Card dictionary; unknown keys are ignored

        Returns:
            ModelCard instance
        """
        pricing = data.get("pricing")
        return cls(
            id=data["id"],
            provider=data["provider"],
            name=data.get("name") or data["id"],
            origin_provider=data.get("origin_provider"),
            mode=ModelMode(data.get("mode", ModelMode.CHAT.value)),
            capabilities=data.get("capabilities") or (),
            context_window=int(data.get("context_window") or 0),
            max_output_tokens=int(data.get("max_output_tokens") or 0),
            pricing=ModelPricing.from_dict(pricing) if pricing else None,
            dimensions=data.get("dimensions"),
            max_input_tokens=data.get("max_input_tokens"),
            aliases=data.get("aliases") or (),
            discovered_at=float(data.get("discovered_at") or 0.0),
            source=data.get("source", "api"),
            region=data.get("region"),
            project_id=data.get("project_id"),
        )


@dataclass(frozen=True)
class ProviderInfo:
    """One provider's discovery snapshot."""

    id: str
    name: str
    base_url: Optional[str] = None
    authenticated: bool = False
    credential_source: CredentialSource = CredentialSource.NONE
    models: Tuple[ModelCard, ...] = ()
    last_refreshed: float = 0.0

    def __post_init__(self) -> None:
        """Coerce loose inputs into canonical types."""
        if not isinstance(self.credential_source, CredentialSource):
            object.__setattr__(self, "credential_source", CredentialSource(self.credential_source))
        object.__setattr__(self, "models", tuple(self.models))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-ready dictionary, models included."""
        return {
            "id": self.id,
            "name": self.name,
            "base_url": self.base_url,
            "authenticated": self.authenticated,
            "credential_source": self.credential_source.value,
            "models": [model.to_dict() for model in self.models],
            "last_refreshed": self.last_refreshed,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProviderInfo":
        """Build a snapshot from a dictionary produced by :meth:`to_dict`."""
        return cls(
            id=data["id"],
            name=data.get("name") or data["id"],
            base_url=data.get("base_url"),
            authenticated=bool(data.get("authenticated", False)),
            credential_source=CredentialSource(data.get("credential_source", CredentialSource.NONE.value)),
            models=tuple(ModelCard.from_dict(model) for model in data.get("models") or []),
            last_refreshed=float(data.get("last_refreshed") or 0.0),
        )


@dataclass(frozen=True)
class CredentialResult:
    """A resolved provider credential.

    ``source == CredentialSource.NONE`` means no credential was found, which
    is not the same as no credential being needed.
    """

    source: CredentialSource = CredentialSource.NONE
    api_key: Optional[str] = field(default=None, repr=False)
    access_token: Optional[str] = field(default=None, repr=False)
    path: Optional[str] = None
    region: Optional[str] = None
    project_id: Optional[str] = None

    @property
    def token(self) -> Optional[str]:
        """The API key if present, otherwise the access token."""
        return self.api_key or self.access_token
