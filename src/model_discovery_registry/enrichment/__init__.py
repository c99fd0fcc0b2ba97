"""Card enrichment from third-party catalogues."""

from typing import Iterable, List, Protocol

from ..model_card import ModelCard
from .litellm import LITELLM_CATALOGUE_URL, LiteLLMEnricher


class Enricher(Protocol):
    """Fills missing fields on model cards.

    Implementations return new cards and never overwrite populated fields.
    """

    def enrich(self, cards: Iterable[ModelCard]) -> List[ModelCard]: ...


__all__ = ["Enricher", "LiteLLMEnricher", "LITELLM_CATALOGUE_URL"]
