"""Common CLI options and decorators."""

from functools import wraps
from typing import Any, Callable, TypeVar, cast

import click

from .helpers import MODE_CHOICES

F = TypeVar("F", bound=Callable[..., Any])


def provider_option(func: F) -> F:
    """Add --provider option to a command."""

    @click.option("--provider", type=str, help="Only models served by this provider (e.g. openrouter).")
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        if kwargs.get("provider"):
            kwargs["provider"] = kwargs["provider"].lower()
        return func(*args, **kwargs)

    return cast(F, wrapper)


def origin_option(func: F) -> F:
    """Add --origin option to a command."""

    @click.option("--origin", type=str, help="Only models created by this vendor (e.g. anthropic).")
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        if kwargs.get("origin"):
            kwargs["origin"] = kwargs["origin"].lower()
        return func(*args, **kwargs)

    return cast(F, wrapper)


def mode_option(func: F) -> F:
    """Add --mode option to a command."""

    @click.option("--mode", type=click.Choice(MODE_CHOICES, case_sensitive=False), help="Only models in this mode.")
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        return func(*args, **kwargs)

    return cast(F, wrapper)


def capability_option(func: F) -> F:
    """Add --capability option to a command."""

    @click.option("--capability", type=str, help="Only models with this capability tag (e.g. vision).")
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        return func(*args, **kwargs)

    return cast(F, wrapper)


def filter_options(func: F) -> F:
    """Add the common model filters (provider, origin, mode, capability)."""
    func = capability_option(func)
    func = mode_option(func)
    func = origin_option(func)
    func = provider_option(func)
    return func
