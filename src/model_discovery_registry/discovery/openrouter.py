"""OpenRouter aggregator discovery via ``GET /api/v1/models``.

The catalogue is public; a key only raises rate limits. Entries carry
per-token prices, context lengths and modality, and their ids are
``vendor/name`` so the origin provider comes from the vendor prefix.
"""

from typing import Any, Dict, List, Optional

from ..model_card import CredentialResult, ModelCard, ModelMode
from ..normalize import extract_origin_provider
from ..pricing import ModelPricing
from .base import ProviderDiscoverer, api_token

_MODERN_CHAT_MARKERS = (
    "gpt-4",
    "gpt-5",
    "claude-3",
    "claude-sonnet",
    "claude-opus",
    "claude-haiku",
    "gemini",
    "command-r",
    "mistral-large",
    "llama-3",
    "deepseek",
)


def origin_from_vendor(model_id: str) -> str:
    """Origin provider of an OpenRouter id, falling back to its raw ``vendor/`` prefix."""
    vendor, sep, _ = model_id.partition("/")
    if not sep:
        return model_id
    return extract_origin_provider(model_id) or vendor


def parse_pricing(pricing: Optional[Dict[str, Any]]) -> Optional[ModelPricing]:
    """Convert OpenRouter per-token price strings to per-million pricing."""
    if not pricing:
        return None
    try:
        prompt = float(pricing["prompt"])
        completion = float(pricing["completion"])
    except (KeyError, TypeError, ValueError):
        return None
    if prompt < 0 or completion < 0:
        return None
    return ModelPricing(input_per_million=prompt * 1_000_000, output_per_million=completion * 1_000_000)


class OpenRouterDiscoverer(ProviderDiscoverer):
    """Discovers every model routed through OpenRouter."""

    provider_id = "openrouter"
    provider_name = "OpenRouter"
    base_url = "https://openrouter.ai"
    default_timeout = 15.0

    def discover(self, credential: CredentialResult, timeout: Optional[float] = None) -> List[ModelCard]:
        token = api_token(credential)
        headers = {"Authorization": f"Bearer {token}"} if token else None
        body = self.fetch_json(f"{self.base_url}/api/v1/models", headers=headers, timeout=timeout)
        models: List[Dict[str, Any]] = body.get("data") or []
        return [self._to_card(model) for model in models if model.get("id") and self._is_available(model)]

    @staticmethod
    def _is_available(model: Dict[str, Any]) -> bool:
        # Delisted models carry a prompt price of "-1"
        return (model.get("pricing") or {}).get("prompt") != "-1"

    def _to_card(self, model: Dict[str, Any]) -> ModelCard:
        model_id = model["id"]
        modality = ((model.get("architecture") or {}).get("modality") or "").lower()
        top_provider = model.get("top_provider") or {}
        return self.make_card(
            model_id,
            name=model.get("name") or model_id,
            origin_provider=origin_from_vendor(model_id),
            mode=self._mode(model, modality),
            capabilities=self._capabilities(model_id, modality),
            context_window=int(model.get("context_length") or 0),
            max_output_tokens=int(top_provider.get("max_completion_tokens") or 0),
            pricing=parse_pricing(model.get("pricing")),
        )

    @staticmethod
    def _mode(model: Dict[str, Any], modality: str) -> ModelMode:
        lowered_id = model["id"].lower()
        name = (model.get("name") or "").lower()
        output = modality.split("->")[-1]
        if "image" in output and "text" not in output:
            return ModelMode.IMAGE
        if "audio" in modality:
            return ModelMode.AUDIO
        if "embed" in lowered_id or "embedding" in name:
            return ModelMode.EMBEDDING
        return ModelMode.CHAT

    @staticmethod
    def _capabilities(model_id: str, modality: str) -> List[str]:
        lowered = model_id.lower()
        if "embed" in lowered:
            return ["embedding"]
        output = modality.split("->")[-1]
        if "image" in output and "text" not in output:
            return ["image_generation"]
        capabilities = ["chat"]
        inputs = modality.split("->")[0]
        if "image" in inputs and "text" in inputs:
            capabilities.append("vision")
        if any(marker in lowered for marker in _MODERN_CHAT_MARKERS):
            capabilities.extend(["function_calling", "code", "nlu"])
        return capabilities
