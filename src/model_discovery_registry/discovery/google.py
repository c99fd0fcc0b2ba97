"""Google Gemini model discovery via the Generative Language API.

Unlike most vendor list endpoints this one reports token limits and the
supported generation methods, so cards come back with context windows
already filled in.
"""

from typing import Any, Dict, List, Optional

from ..model_card import CredentialResult, ModelCard, ModelMode
from .base import ProviderDiscoverer, api_token

PAGE_SIZE = 100


class GoogleDiscoverer(ProviderDiscoverer):
    """Discovers Gemini models. The API key goes in the query string."""

    provider_id = "google"
    provider_name = "Google"
    base_url = "https://generativelanguage.googleapis.com"

    def discover(self, credential: CredentialResult, timeout: Optional[float] = None) -> List[ModelCard]:
        token = api_token(credential)
        if not token:
            return []

        url = f"{self.base_url}/v1beta/models"
        models: List[Dict[str, Any]] = []
        page_token: Optional[str] = None
        while True:
            params: Dict[str, Any] = {"key": token, "pageSize": PAGE_SIZE}
            if page_token:
                params["pageToken"] = page_token
            page = self.fetch_json(url, params=params, timeout=timeout)
            models.extend(page.get("models") or [])
            page_token = page.get("nextPageToken")
            if not page_token:
                break

        return [self._to_card(model) for model in models if model.get("name")]

    def _to_card(self, model: Dict[str, Any]) -> ModelCard:
        name = model["name"]
        model_id = name[len("models/") :] if name.startswith("models/") else name
        input_limit = model.get("inputTokenLimit")
        embedding = self._is_embedding(model)
        return self.make_card(
            model_id,
            name=model.get("displayName") or model_id,
            mode=ModelMode.EMBEDDING if embedding else ModelMode.CHAT,
            capabilities=self._capabilities(model, embedding),
            context_window=int(input_limit or 0),
            max_output_tokens=int(model.get("outputTokenLimit") or 0),
            max_input_tokens=int(input_limit) if input_limit else None,
        )

    @staticmethod
    def _is_embedding(model: Dict[str, Any]) -> bool:
        methods = model.get("supportedGenerationMethods") or []
        display = (model.get("displayName") or "").lower()
        return "embedContent" in methods or "embedding" in display

    @staticmethod
    def _capabilities(model: Dict[str, Any], embedding: bool) -> List[str]:
        if embedding:
            return ["embedding"]
        capabilities: List[str] = []
        if "generateContent" in (model.get("supportedGenerationMethods") or []):
            capabilities.append("chat")
        lowered = model["name"].lower()
        if "gemini" in lowered:
            capabilities.extend(["code", "nlu"])
            if any(tier in lowered for tier in ("pro", "ultra", "flash")):
                capabilities.extend(["function_calling", "vision"])
        return capabilities or ["chat"]
