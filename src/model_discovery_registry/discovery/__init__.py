"""Built-in provider discoverers and their registration table."""

from typing import Callable, Dict, List, Optional

from .anthropic import AnthropicDiscoverer
from .base import ProviderDiscoverer
from .bedrock import BedrockDiscoverer
from .google import GoogleDiscoverer
from .ollama import OllamaDiscoverer
from .openai import OpenAIDiscoverer
from .openrouter import OpenRouterDiscoverer
from .vertex import VertexDiscoverer

DISCOVERERS: Dict[str, Callable[[Optional[str]], ProviderDiscoverer]] = {
    "anthropic": lambda base_url: AnthropicDiscoverer(),
    "openai": lambda base_url: OpenAIDiscoverer(),
    "google": lambda base_url: GoogleDiscoverer(),
    "ollama": lambda base_url: OllamaDiscoverer(base_url),
    "openrouter": lambda base_url: OpenRouterDiscoverer(),
    "bedrock": lambda base_url: BedrockDiscoverer(),
    "vertex": lambda base_url: VertexDiscoverer(),
}


def get_all_discoverers(ollama_base_url: Optional[str] = None) -> List[ProviderDiscoverer]:
    """Create one instance of every built-in discoverer, in registration order."""
    return [
        factory(ollama_base_url if provider_id == "ollama" else None) for provider_id, factory in DISCOVERERS.items()
    ]


def get_discoverer(provider_id: str, base_url: Optional[str] = None) -> Optional[ProviderDiscoverer]:
    """Create the discoverer for ``provider_id``, or None if there is none."""
    factory = DISCOVERERS.get(provider_id)
    return factory(base_url) if factory else None


__all__ = [
    "AnthropicDiscoverer",
    "BedrockDiscoverer",
    "GoogleDiscoverer",
    "OllamaDiscoverer",
    "OpenAIDiscoverer",
    "OpenRouterDiscoverer",
    "VertexDiscoverer",
    "ProviderDiscoverer",
    "get_all_discoverers",
    "get_discoverer",
]
