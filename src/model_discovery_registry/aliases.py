"""Short-name aliases for model ids.

Built-in aliases cover the common model families; custom aliases from the
configuration override them.
"""

from typing import Dict, List, Mapping, Optional

DEFAULT_ALIASES: Mapping[str, str] = {
    # Anthropic
    "opus": "claude-opus-4-6",
    "opus-4": "claude-opus-4-6",
    "sonnet": "claude-sonnet-4-6",
    "sonnet-4": "claude-sonnet-4-6",
    "haiku": "claude-haiku-4-5-20251001",
    "haiku-4.5": "claude-haiku-4-5-20251001",
    # OpenAI
    "gpt4o": "gpt-4o",
    "gpt4o-mini": "gpt-4o-mini",
    "o1": "o1",
    "o3": "o3",
    "o3-mini": "o3-mini",
    "o4-mini": "o4-mini",
    # Google
    "gemini-pro": "gemini-2.5-pro-preview-05-06",
    "gemini-flash": "gemini-2.5-flash-preview-04-17",
    "gemini-flash-lite": "gemini-2.0-flash-lite",
    # Local (Ollama tags)
    "qwen": "qwen3:8b",
    "llama": "llama3.3:latest",
    "codestral": "codestral:latest",
    "deepseek": "deepseek-r1:latest",
    # Embeddings
    "embed-small": "text-embedding-3-small",
    "embed-large": "text-embedding-3-large",
    "nomic": "nomic-embed-text",
    "gemini-embed": "gemini-embedding-001",
}


class AliasResolver:
    """Maps short names to canonical model ids."""

    def __init__(self, custom_aliases: Optional[Mapping[str, str]] = None) -> None:
        """Initialize the resolver.

        Args:
            custom_aliases: Extra alias -> model id mappings, applied on top of
                the built-in table
        """
        self._aliases: Dict[str, str] = dict(DEFAULT_ALIASES)
        if custom_aliases:
            self._aliases.update(custom_aliases)

    def resolve(self, name_or_alias: str) -> str:
        """Return the canonical id for an alias, or the input unchanged."""
        return self._aliases.get(name_or_alias, name_or_alias)

    def reverse_aliases(self, model_id: str) -> List[str]:
        """Return every alias that points at ``model_id``, in table order."""
        return [alias for alias, target in self._aliases.items() if target == model_id]

    def add_alias(self, alias: str, model_id: str) -> None:
        """Add or replace an alias."""
        self._aliases[alias] = model_id

    def remove_alias(self, alias: str) -> None:
        """Remove an alias; unknown aliases are ignored."""
        self._aliases.pop(alias, None)

    def all(self) -> Dict[str, str]:
        """Return a copy of the full alias table."""
        return dict(self._aliases)
