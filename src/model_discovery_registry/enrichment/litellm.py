"""Enrichment from the LiteLLM community model catalogue.

The catalogue maps model keys to per-token prices, token limits and feature
flags. Enrichment only fills fields a card leaves empty; data that came from
a provider API is never overwritten.
"""

import threading
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Optional

import requests

from ..errors import NetworkError
from ..logging import LogEvent, get_logger, log_debug
from ..model_card import ModelCard, ModelMode
from ..normalize import normalize_model_id
from ..pricing import ModelPricing

logger = get_logger(__name__)

LITELLM_CATALOGUE_URL = "https://raw.githubusercontent.com/BerriAI/litellm/main/model_prices_and_context_window.json"

PER_MILLION = 1_000_000

LITELLM_MODES: Dict[str, ModelMode] = {
    "chat": ModelMode.CHAT,
    "completion": ModelMode.CHAT,
    "embedding": ModelMode.EMBEDDING,
    "image_generation": ModelMode.IMAGE,
    "audio_transcription": ModelMode.AUDIO,
    "audio_speech": ModelMode.AUDIO,
    "moderation": ModelMode.MODERATION,
}

_CAPABILITY_FLAGS = (
    ("supports_vision", "vision"),
    ("supports_function_calling", "function_calling"),
    ("supports_prompt_caching", "prompt_caching"),
)


def _per_million(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value) * PER_MILLION
    except (TypeError, ValueError):
        return None


def extract_pricing(entry: Dict[str, Any]) -> Optional[ModelPricing]:
    """Convert a catalogue entry's per-token costs to per-million pricing."""
    input_cost = _per_million(entry.get("input_cost_per_token"))
    output_cost = _per_million(entry.get("output_cost_per_token"))
    if input_cost is None and output_cost is None:
        return None
    return ModelPricing(
        input_per_million=input_cost,
        output_per_million=output_cost,
        cache_read_per_million=_per_million(entry.get("cache_read_input_token_cost")),
        cache_write_per_million=_per_million(entry.get("cache_creation_input_token_cost")),
    )


class LiteLLMEnricher:
    """Fills missing card fields from the LiteLLM catalogue.

    The catalogue is downloaded once per instance, on first use.

    Args:
        url: Catalogue URL
        timeout: Download timeout in seconds
        data: Preloaded catalogue, skips the download
    """

    def __init__(
        self,
        url: str = LITELLM_CATALOGUE_URL,
        timeout: float = 30.0,
        data: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self._data = data
        self._lock = threading.Lock()

    def load(self) -> Dict[str, Any]:
        """Download the catalogue if it is not loaded yet.

        Returns:
            The catalogue mapping

        Raises:
            NetworkError: If the catalogue cannot be downloaded or decoded
        """
        with self._lock:
            if self._data is not None:
                return self._data
            try:
                response = requests.get(self.url, timeout=self.timeout)
                response.raise_for_status()
                data = response.json()
            except requests.RequestException as e:
                raise NetworkError(f"Failed to fetch LiteLLM catalogue: {e}", self.url) from e
            except ValueError as e:
                raise NetworkError(f"LiteLLM catalogue is not valid JSON: {e}", self.url) from e
            if not isinstance(data, dict):
                raise NetworkError("LiteLLM catalogue is not a JSON object", self.url)
            log_debug(LogEvent.ENRICHMENT, "Loaded LiteLLM catalogue", entries=len(data))
            self._data = data
            return data

    def enrich(self, cards: Iterable[ModelCard]) -> List[ModelCard]:
        """Return new cards with missing fields filled from the catalogue.

        Cards with no catalogue entry come back unchanged.

        Raises:
            NetworkError: If the catalogue cannot be loaded
        """
        data = self.load()
        return [self._enrich_one(card, data) for card in cards]

    def lookup(self, card: ModelCard, data: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
        """Find the catalogue entry for a card.

        Keys are tried in order: the id, ``provider/id``, ``origin/id``,
        ``origin/normalized-id``, then lowercase forms of the id,
        ``provider/id`` and ``origin/normalized-id``.
        """
        catalogue = self._data if data is None else data
        if not catalogue:
            return None

        model_id = card.id
        origin = card.origin_provider
        normalized = normalize_model_id(model_id)
        lowered = model_id.lower()

        keys = [model_id, f"{card.provider}/{model_id}"]
        if origin and origin != card.provider:
            keys.append(f"{origin}/{model_id}")
        if origin:
            keys.append(f"{origin}/{normalized}")
        keys.extend([lowered, f"{card.provider}/{lowered}"])
        if origin:
            keys.append(f"{origin}/{normalized.lower()}")

        for key in keys:
            entry = catalogue.get(key)
            if isinstance(entry, dict):
                return entry
        return None

    def _enrich_one(self, card: ModelCard, data: Dict[str, Any]) -> ModelCard:
        entry = self.lookup(card, data)
        if entry is None:
            return card

        changes: Dict[str, Any] = {}
        if card.pricing is None:
            pricing = extract_pricing(entry)
            if pricing is not None:
                changes["pricing"] = pricing

        max_input = entry.get("max_input_tokens")
        if card.context_window == 0 and max_input:
            changes["context_window"] = int(max_input)
        if card.max_output_tokens == 0:
            max_output = entry.get("max_output_tokens") or entry.get("max_tokens")
            if max_output:
                changes["max_output_tokens"] = int(max_output)
        if card.max_input_tokens is None and max_input:
            changes["max_input_tokens"] = int(max_input)
        if card.dimensions is None and entry.get("output_vector_size"):
            changes["dimensions"] = int(entry["output_vector_size"])

        # Only a generic chat mode is refined
        mode = LITELLM_MODES.get(entry.get("mode") or "")
        if mode is not None and card.mode == ModelMode.CHAT and mode != ModelMode.CHAT:
            changes["mode"] = mode

        capabilities = list(card.capabilities)
        for flag, capability in _CAPABILITY_FLAGS:
            if entry.get(flag) and capability not in capabilities:
                capabilities.append(capability)
        if len(capabilities) != len(card.capabilities):
            changes["capabilities"] = tuple(capabilities)

        return replace(card, **changes) if changes else card
