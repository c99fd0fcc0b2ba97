"""Role tokens and capability aggregation.

A role token is a loose name for a model mode or capability tag, as typed by
a user ("embeddings", "tools", "stt"). This module normalizes role tokens and
builds the role-augmented and capability-summary views over discovered cards.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from .model_card import CredentialSource, ModelCard, ModelMode, ProviderInfo

ROLE_SYNONYMS: Dict[str, str] = {
    "embeddings": "embedding",
    "embed": "embedding",
    "text_embedding": "embedding",
    "tools": "function_calling",
    "tool": "function_calling",
    "tool_use": "function_calling",
    "tool_calling": "function_calling",
    "function": "function_calling",
    "functions": "function_calling",
    "function_call": "function_calling",
    "stt": "speech_to_text",
    "asr": "speech_to_text",
    "transcription": "speech_to_text",
    "tts": "text_to_speech",
    "speech": "text_to_speech",
    "image_gen": "image_generation",
    "imagegen": "image_generation",
    "caching": "prompt_caching",
    "prompt_cache": "prompt_caching",
    "coding": "code",
}


def normalize_role_token(token: str) -> str:
    """Map a role token to its canonical mode or capability name.

    Case, surrounding whitespace, hyphens and inner spaces are folded before
    the synonym lookup. Unknown tokens pass through in folded form.

        >>> normalize_role_token("Embeddings")
        'embedding'
        >>> normalize_role_token("tool-use")
        'function_calling'
        >>> normalize_role_token("vision")
        'vision'
    """
    folded = token.strip().lower().replace("-", "_").replace(" ", "_")
    return ROLE_SYNONYMS.get(folded, folded)


def model_supports_role(card: ModelCard, role: str) -> bool:
    """Check whether a card's mode or capabilities satisfy a role token."""
    normalized = normalize_role_token(role)
    if normalized == card.mode.value or normalized in card.capabilities:
        return True
    return role in card.capabilities


def card_roles(card: ModelCard) -> Tuple[str, ...]:
    """The deduplicated union of a card's mode and capabilities, mode first."""
    roles: List[str] = [card.mode.value]
    for capability in card.capabilities:
        if capability not in roles:
            roles.append(capability)
    return tuple(roles)


def unique_cards(cards: Iterable[ModelCard]) -> List[ModelCard]:
    """Drop repeated (provider, id) pairs, keeping the first occurrence."""
    seen: Set[Tuple[str, str]] = set()
    result: List[ModelCard] = []
    for card in cards:
        key = (card.provider, card.id)
        if key in seen:
            continue
        seen.add(key)
        result.append(card)
    return result


@dataclass(frozen=True)
class RoleQuery:
    """Filters shared by the role, capability and ranking views.

    Filters are applied in field order: provider, origin provider, mode,
    capability, then role.
    """

    provider: Optional[str] = None
    origin_provider: Optional[str] = None
    mode: Optional[ModelMode] = None
    capability: Optional[str] = None
    role: Optional[str] = None

    def __post_init__(self) -> None:
        """Coerce a plain-string mode."""
        if self.mode is not None and not isinstance(self.mode, ModelMode):
            object.__setattr__(self, "mode", ModelMode(self.mode))

    def matches(self, card: ModelCard) -> bool:
        """Check a single card against every filter."""
        if self.provider and card.provider != self.provider:
            return False
        if self.origin_provider and card.origin_provider != self.origin_provider:
            return False
        if self.mode is not None and card.mode != self.mode:
            return False
        if self.capability and self.capability not in card.capabilities:
            return False
        if self.role and not model_supports_role(card, self.role):
            return False
        return True


def filter_cards(cards: Iterable[ModelCard], query: Optional[RoleQuery] = None) -> List[ModelCard]:
    """Return the cards matching ``query``, in input order."""
    if query is None:
        return list(cards)
    return [card for card in cards if query.matches(card)]


@dataclass(frozen=True)
class ModelRoleCard:
    """A model card together with its role list."""

    card: ModelCard
    roles: Tuple[str, ...]

    @property
    def id(self) -> str:
        return self.card.id

    @property
    def provider(self) -> str:
        return self.card.provider

    def to_dict(self) -> Dict[str, Any]:
        data = self.card.to_dict()
        data["roles"] = list(self.roles)
        return data


@dataclass(frozen=True)
class ProviderRoles:
    """One provider's models projected into the role view."""

    id: str
    name: str
    authenticated: bool
    credential_source: CredentialSource
    models: Tuple[ModelRoleCard, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "authenticated": self.authenticated,
            "credential_source": self.credential_source.value,
            "models": [model.to_dict() for model in self.models],
        }


def provider_roles(providers: Iterable[ProviderInfo], query: Optional[RoleQuery] = None) -> List[ProviderRoles]:
    """Project provider snapshots into the role view.

    Providers left with no matching models are omitted.

    Args:
        providers: Provider snapshots in registry order
        query: Optional filters

    Returns:
        List of ProviderRoles, one per provider with at least one match
    """
    result: List[ProviderRoles] = []
    for info in providers:
        if query is not None and query.provider and info.id != query.provider:
            continue
        matched = filter_cards(unique_cards(info.models), query)
        if not matched:
            continue
        result.append(
            ProviderRoles(
                id=info.id,
                name=info.name,
                authenticated=info.authenticated,
                credential_source=info.credential_source,
                models=tuple(ModelRoleCard(card=card, roles=card_roles(card)) for card in matched),
            )
        )
    return result


@dataclass
class CapabilitySummary:
    """Aggregate view of one capability tag across models."""

    capability: str
    model_count: int = 0
    provider_count: int = 0
    providers: List[str] = field(default_factory=list)
    modes: List[str] = field(default_factory=list)
    example_model_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "capability": self.capability,
            "model_count": self.model_count,
            "provider_count": self.provider_count,
            "providers": list(self.providers),
            "modes": list(self.modes),
            "example_model_id": self.example_model_id,
        }


def summarize_capabilities(cards: Iterable[ModelCard]) -> List[CapabilitySummary]:
    """Group cards by capability tag.

    Model counts are over distinct (provider, id) pairs. The result is sorted
    by descending model count; equal counts keep first-seen order.

    Args:
        cards: Cards to aggregate

    Returns:
        One CapabilitySummary per capability tag
    """
    summaries: Dict[str, CapabilitySummary] = {}
    for card in unique_cards(cards):
        for capability in card.capabilities:
            summary = summaries.get(capability)
            if summary is None:
                summary = CapabilitySummary(capability=capability, example_model_id=card.id)
                summaries[capability] = summary
            summary.model_count += 1
            if card.provider not in summary.providers:
                summary.providers.append(card.provider)
                summary.provider_count = len(summary.providers)
            if card.mode.value not in summary.modes:
                summary.modes.append(card.mode.value)

    # sorted() is stable, so ties keep insertion order
    return sorted(summaries.values(), key=lambda s: -s.model_count)
