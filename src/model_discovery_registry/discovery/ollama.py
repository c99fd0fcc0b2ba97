"""Local model discovery from an Ollama daemon.

Ollama needs no credential and may not be running at all; an unreachable
daemon yields an empty list instead of an error.
"""

from typing import Any, Dict, List, Optional, Set

import requests

from ..errors import DiscoveryFailedError
from ..logging import LogEvent, log_debug
from ..model_card import CredentialResult, ModelCard, ModelMode
from .base import ProviderDiscoverer

DEFAULT_OLLAMA_URL = "http://localhost:11434"


def _is_embedding(name: str) -> bool:
    return "embed" in name.lower()


class OllamaDiscoverer(ProviderDiscoverer):
    """Discovers models pulled into a local Ollama instance."""

    provider_id = "ollama"
    provider_name = "Ollama (Local)"
    default_timeout = 5.0

    def __init__(self, base_url: Optional[str] = None) -> None:
        """Initialize the discoverer.

        Args:
            base_url: Ollama server URL, defaults to ``http://localhost:11434``
        """
        self.base_url = (base_url or DEFAULT_OLLAMA_URL).rstrip("/")
        self.running_models: Set[str] = set()

    def discover(self, credential: CredentialResult, timeout: Optional[float] = None) -> List[ModelCard]:
        self._fetch_running_models(timeout)
        try:
            body = self.fetch_json(f"{self.base_url}/api/tags", timeout=timeout)
        except DiscoveryFailedError as e:
            if isinstance(e.__cause__, (requests.ConnectionError, requests.Timeout)):
                log_debug(LogEvent.DISCOVERY, "Ollama is not reachable", url=self.base_url)
                return []
            raise

        models = body.get("models") if isinstance(body, dict) else None
        if not isinstance(models, list):
            return []
        return [self._to_card(model) for model in models if model.get("name")]

    def _fetch_running_models(self, timeout: Optional[float]) -> None:
        """Record which models are loaded in memory; failures are ignored."""
        self.running_models = set()
        try:
            body = self.fetch_json(f"{self.base_url}/api/ps", timeout=timeout)
        except DiscoveryFailedError:
            return
        for model in (body.get("models") if isinstance(body, dict) else None) or []:
            if model.get("name"):
                self.running_models.add(model["name"])

    def _to_card(self, model: Dict[str, Any]) -> ModelCard:
        name = model["name"]
        return self.make_card(
            name,
            mode=ModelMode.EMBEDDING if _is_embedding(name) else ModelMode.CHAT,
            capabilities=self._capabilities(model),
            source="local",
        )

    @staticmethod
    def _capabilities(model: Dict[str, Any]) -> List[str]:
        name = model["name"].lower()
        if _is_embedding(name):
            return ["embedding"]
        capabilities = ["chat", "code"]
        families = (model.get("details") or {}).get("families") or []
        if "clip" in families or "llava" in name or "vision" in name:
            capabilities.append("vision")
        return capabilities
