"""Cheapest-model ranking.

Candidates are filtered with a :class:`~model_discovery_registry.roles.RoleQuery`,
scored by a price metric and sorted cheapest first.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .credentials import CredentialPrompt
from .model_card import ModelCard, ModelMode
from .roles import RoleQuery, filter_cards, normalize_role_token

DEFAULT_LIMIT = 5


class PriceMetric(str, Enum):
    """How a candidate's price is scored."""

    INPUT = "input"
    OUTPUT = "output"
    BLENDED = "blended"


@dataclass(frozen=True)
class CheapestQuery(RoleQuery):
    """Filters and scoring options for :func:`rank_cheapest`."""

    limit: int = DEFAULT_LIMIT
    price_metric: Optional[PriceMetric] = None
    input_weight: float = 1.0
    output_weight: float = 1.0
    include_unpriced: bool = False

    def __post_init__(self) -> None:
        """Coerce plain strings and validate the weights."""
        super().__post_init__()
        if self.price_metric is not None and not isinstance(self.price_metric, PriceMetric):
            object.__setattr__(self, "price_metric", PriceMetric(self.price_metric))
        if self.input_weight < 0 or self.output_weight < 0:
            raise ValueError("Price weights must be non-negative")

    def role_query(self) -> RoleQuery:
        """The filter part of this query."""
        return RoleQuery(
            provider=self.provider,
            origin_provider=self.origin_provider,
            mode=self.mode,
            capability=self.capability,
            role=self.role,
        )


@dataclass(frozen=True)
class CheapestMatch:
    """One ranked candidate; ``score`` is None for unpriced candidates."""

    model: ModelCard
    score: Optional[float]
    price_metric: PriceMetric

    def to_dict(self) -> Dict[str, Any]:
        return {
            "model": self.model.to_dict(),
            "score": self.score,
            "price_metric": self.price_metric.value,
        }


@dataclass
class CheapestResult:
    """Ranking output plus counts that explain it."""

    matches: List[CheapestMatch]
    candidates: int
    priced_candidates: int
    skipped_no_pricing: int
    price_metric: PriceMetric
    missing_credentials: List[CredentialPrompt] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "matches": [match.to_dict() for match in self.matches],
            "candidates": self.candidates,
            "priced_candidates": self.priced_candidates,
            "skipped_no_pricing": self.skipped_no_pricing,
            "price_metric": self.price_metric.value,
            "missing_credentials": [prompt.to_dict() for prompt in self.missing_credentials],
        }


def infer_price_metric(query: CheapestQuery) -> PriceMetric:
    """Pick the metric for a query: explicit, else input for embeddings, else blended."""
    if query.price_metric is not None:
        return query.price_metric
    if query.mode == ModelMode.EMBEDDING:
        return PriceMetric.INPUT
    if query.role and normalize_role_token(query.role) == ModelMode.EMBEDDING.value:
        return PriceMetric.INPUT
    return PriceMetric.BLENDED


def score_card(card: ModelCard, metric: PriceMetric, input_weight: float = 1.0, output_weight: float = 1.0) -> Optional[float]:
    """Price score for a card, or None when the metric needs a missing price."""
    pricing = card.pricing
    if pricing is None:
        return None
    if metric == PriceMetric.INPUT:
        return pricing.input_per_million
    if metric == PriceMetric.OUTPUT:
        return pricing.output_per_million
    if pricing.input_per_million is None or pricing.output_per_million is None:
        return None
    return input_weight * pricing.input_per_million + output_weight * pricing.output_per_million


def rank_cheapest(cards: Iterable[ModelCard], query: Optional[CheapestQuery] = None) -> CheapestResult:
    """Rank cards by price.

    Args:
        cards: Deduplicated cards in discovery order
        query: Filters and scoring options

    Returns:
        The ranking; credential prompts are left empty for the caller to fill
    """
    query = query or CheapestQuery()
    metric = infer_price_metric(query)
    candidates = filter_cards(cards, query.role_query())

    priced: List[Tuple[float, ModelCard]] = []
    unpriced: List[ModelCard] = []
    for card in candidates:
        score = score_card(card, metric, query.input_weight, query.output_weight)
        if score is None:
            unpriced.append(card)
        else:
            priced.append((score, card))

    priced.sort(key=lambda item: (item[0], item[1].provider, item[1].id))
    matches = [CheapestMatch(model=card, score=score, price_metric=metric) for score, card in priced]
    if query.include_unpriced:
        matches.extend(CheapestMatch(model=card, score=None, price_metric=metric) for card in unpriced)
    if query.limit > 0:
        matches = matches[: query.limit]

    return CheapestResult(
        matches=matches,
        candidates=len(candidates),
        priced_candidates=len(priced),
        skipped_no_pricing=len(unpriced),
        price_metric=metric,
    )
