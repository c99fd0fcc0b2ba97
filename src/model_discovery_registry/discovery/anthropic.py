"""Anthropic model discovery via ``GET /v1/models``."""

import re
from typing import Any, Dict, List, Optional

from ..model_card import CredentialResult, ModelCard, ModelMode
from .base import ProviderDiscoverer, api_token

ANTHROPIC_VERSION = "2023-06-01"
PAGE_SIZE = 100

# Claude 3 and later accept image input, under either naming scheme
# (claude-3-5-sonnet, claude-sonnet-4-6)
_VISION_PATTERN = re.compile(r"claude-(?:[a-z]+-)?(?:[3-9]|[1-9]\d)")


class AnthropicDiscoverer(ProviderDiscoverer):
    """Discovers Claude models. The list endpoint is cursor-paginated."""

    provider_id = "anthropic"
    provider_name = "Anthropic"
    base_url = "https://api.anthropic.com"

    def discover(self, credential: CredentialResult, timeout: Optional[float] = None) -> List[ModelCard]:
        token = api_token(credential)
        if not token:
            return []

        headers = {"x-api-key": token, "anthropic-version": ANTHROPIC_VERSION}
        url = f"{self.base_url}/v1/models"
        params: Dict[str, Any] = {"limit": PAGE_SIZE}

        models: List[Dict[str, Any]] = []
        while True:
            page = self.fetch_json(url, headers=headers, params=params, timeout=timeout)
            models.extend(page.get("data") or [])
            last_id = page.get("last_id")
            if not page.get("has_more") or not last_id:
                break
            params = {"limit": PAGE_SIZE, "after_id": last_id}

        return [self._to_card(model) for model in models if model.get("id")]

    def _to_card(self, model: Dict[str, Any]) -> ModelCard:
        model_id = model["id"]
        is_embedding = "embed" in model_id.lower()
        return self.make_card(
            model_id,
            name=model.get("display_name") or model_id,
            mode=ModelMode.EMBEDDING if is_embedding else ModelMode.CHAT,
            capabilities=self._capabilities(model_id),
        )

    @staticmethod
    def _capabilities(model_id: str) -> List[str]:
        lowered = model_id.lower()
        if "embed" in lowered:
            return ["embedding"]
        capabilities = ["chat", "code", "nlu", "function_calling"]
        if _VISION_PATTERN.search(lowered):
            capabilities.append("vision")
        return capabilities
