"""CLI commands package."""

from . import cache, discover, models, providers, roles

__all__ = ["cache", "discover", "models", "providers", "roles"]
