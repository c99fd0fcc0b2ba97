"""OpenAI model discovery via ``GET /v1/models``.

The list endpoint returns everything the key can see, including fine-tune
snapshots and completions-era models; only chat, embedding, image and audio
families are kept.
"""

from typing import Any, Dict, List, Optional

from ..model_card import CredentialResult, ModelCard, ModelMode
from .base import ProviderDiscoverer, api_token

_LEGACY_PREFIXES = ("babbage", "davinci", "curie", "ada")
_REASONING_PREFIXES = ("o1", "o3", "o4")


def _is_chat(model_id: str) -> bool:
    return model_id.startswith(("gpt-", "chatgpt-") + _REASONING_PREFIXES)


def _is_embedding(model_id: str) -> bool:
    return "embedding" in model_id


def _is_image(model_id: str) -> bool:
    return "dall-e" in model_id


def _is_audio(model_id: str) -> bool:
    return "whisper" in model_id or "tts" in model_id


def is_relevant_model(model_id: str) -> bool:
    """Whether an OpenAI model id belongs to a family worth listing."""
    lowered = model_id.lower()
    if "ft:" in lowered or ":ft-" in lowered:
        return False
    if lowered.startswith(_LEGACY_PREFIXES):
        return False
    return _is_chat(lowered) or _is_embedding(lowered) or _is_image(lowered) or _is_audio(lowered)


def infer_mode(model_id: str) -> ModelMode:
    lowered = model_id.lower()
    if _is_embedding(lowered):
        return ModelMode.EMBEDDING
    if _is_image(lowered):
        return ModelMode.IMAGE
    if _is_audio(lowered):
        return ModelMode.AUDIO
    return ModelMode.CHAT


def infer_capabilities(model_id: str) -> List[str]:
    lowered = model_id.lower()
    if _is_embedding(lowered):
        return ["embedding"]
    if _is_image(lowered):
        return ["image_generation"]
    if _is_audio(lowered):
        if "whisper" in lowered:
            return ["speech_to_text"]
        return ["text_to_speech"]
    # o-series reasoning models are listed without tool use
    if lowered.startswith(_REASONING_PREFIXES):
        return ["chat", "code", "nlu"]
    if "gpt-4o-mini" in lowered:
        return ["chat", "function_calling", "code", "nlu"]
    if "gpt-4o" in lowered or "gpt-4-turbo" in lowered:
        return ["chat", "vision", "function_calling", "code", "nlu"]
    if lowered.startswith("gpt-4") or lowered.startswith("gpt-5"):
        return ["chat", "function_calling", "code", "nlu"]
    if lowered.startswith(("gpt-", "chatgpt-")):
        return ["chat", "function_calling", "code"]
    return ["chat"]


class OpenAIDiscoverer(ProviderDiscoverer):
    """Discovers OpenAI models with bearer authentication."""

    provider_id = "openai"
    provider_name = "OpenAI"
    base_url = "https://api.openai.com"

    def discover(self, credential: CredentialResult, timeout: Optional[float] = None) -> List[ModelCard]:
        token = api_token(credential)
        if not token:
            return []

        body = self.fetch_json(
            f"{self.base_url}/v1/models",
            headers={"Authorization": f"Bearer {token}"},
            timeout=timeout,
        )
        models: List[Dict[str, Any]] = body.get("data") or []
        return [
            self.make_card(
                model["id"],
                mode=infer_mode(model["id"]),
                capabilities=infer_capabilities(model["id"]),
            )
            for model in models
            if model.get("id") and is_relevant_model(model["id"])
        ]
