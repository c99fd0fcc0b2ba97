"""Route sets for one underlying model.

A route is one serving provider's card for a model. Cards whose normalized
ids match belong to the same route set, so ``gpt-4o`` from OpenAI and
``openai/gpt-4o`` from OpenRouter are two routes to one model.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .model_card import ModelCard, ProviderInfo
from .normalize import extract_model_version, normalize_model_id


@dataclass(frozen=True)
class ModelRoute:
    """One (serving provider, card) pairing within a route set."""

    model: ModelCard
    provider: str
    origin_provider: str
    base_url: Optional[str]
    version: Optional[str]
    is_direct: bool
    is_preferred: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "model": self.model.to_dict(),
            "provider": self.provider,
            "origin_provider": self.origin_provider,
            "base_url": self.base_url,
            "version": self.version,
            "is_direct": self.is_direct,
            "is_preferred": self.is_preferred,
        }


def route_key(model_id: str) -> str:
    """The grouping key for route sets."""
    return normalize_model_id(model_id).lower()


def find_route_cards(providers: Iterable[ProviderInfo], model_id: str) -> List[ModelCard]:
    """Collect every card in the same route set as ``model_id``, in discovery order."""
    target = route_key(model_id)
    return [card for info in providers for card in info.models if route_key(card.id) == target]


def _preferred_index(routes: List[ModelRoute]) -> int:
    direct = [i for i, route in enumerate(routes) if route.is_direct]
    if len(direct) == 1:
        return direct[0]
    pool = direct or list(range(len(routes)))

    def price_key(index: int):
        pricing = routes[index].model.pricing
        price = pricing.input_per_million if pricing else None
        # Unpriced routes rank last, then discovery order
        return (price is None, price if price is not None else 0.0, index)

    return min(pool, key=price_key)


def build_routes(cards: Iterable[ModelCard], base_urls: Mapping[str, Optional[str]]) -> List[ModelRoute]:
    """Annotate a route set and mark exactly one route preferred.

    Preference: the single direct route; among several direct routes, or when
    none is direct, the lowest input price, with unpriced routes last and
    ties going to the earliest discovered.

    Args:
        cards: Cards of one route set, in discovery order
        base_urls: Serving provider id to base URL

    Returns:
        Routes in input order
    """
    routes: List[ModelRoute] = []
    for card in cards:
        origin = card.origin_provider or card.provider
        routes.append(
            ModelRoute(
                model=card,
                provider=card.provider,
                origin_provider=origin,
                base_url=base_urls.get(card.provider),
                version=extract_model_version(card.id),
                is_direct=origin == card.provider,
            )
        )
    if not routes:
        return routes

    preferred = _preferred_index(routes)
    return [
        ModelRoute(
            model=route.model,
            provider=route.provider,
            origin_provider=route.origin_provider,
            base_url=route.base_url,
            version=route.version,
            is_direct=route.is_direct,
            is_preferred=index == preferred,
        )
        for index, route in enumerate(routes)
    ]
