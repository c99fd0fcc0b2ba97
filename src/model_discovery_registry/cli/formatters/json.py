"""JSON and YAML output formatters for the CLI."""

import datetime as _dt
import json
import sys
from enum import Enum as _Enum
from typing import Any, Dict, Iterable, List, Optional, TextIO

import yaml

from ...model_card import ModelCard, ProviderInfo


def _default_serializer(obj: Any) -> Any:
    """Serialize otherwise non-JSON-serializable objects.

    - objects with ``to_dict()`` -> that dictionary
    - datetime/date -> ISO 8601 string
    - Enum -> value (fallback to name)
    - tuple/set -> list
    - Fallback -> str(obj)
    """
    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    if isinstance(obj, (_dt.datetime, _dt.date)):
        return obj.isoformat()
    if isinstance(obj, _Enum):
        return getattr(obj, "value", obj.name)
    if isinstance(obj, (set, frozenset)):
        return sorted(obj)
    return str(obj)


def to_plain(data: Any) -> Any:
    """Convert data to plain JSON-compatible structures."""
    return json.loads(json.dumps(data, default=_default_serializer))


def format_json(data: Any, output: Optional[TextIO] = None, indent: int = 2) -> None:
    """Format data as JSON and write to output.

    Args:
        data: Data to format
        output: Output stream (defaults to stdout)
        indent: JSON indentation level
    """
    if output is None:
        output = sys.stdout

    json.dump(
        data,
        output,
        indent=indent,
        ensure_ascii=False,
        sort_keys=True,
        default=_default_serializer,
    )
    output.write("\n")


def format_yaml(data: Any, output: Optional[TextIO] = None) -> None:
    """Format data as YAML and write to output."""
    if output is None:
        output = sys.stdout
    output.write(yaml.dump(to_plain(data), default_flow_style=False, sort_keys=True))


def format_structured(data: Any, format_type: str, output: Optional[TextIO] = None) -> None:
    """Write data as YAML when requested, otherwise as JSON."""
    if format_type == "yaml":
        format_yaml(data, output)
    else:
        format_json(data, output)


def format_models_json(models: Iterable[ModelCard]) -> Dict[str, Any]:
    """Format a list of cards for JSON output.

    Args:
        models: Cards in display order

    Returns:
        Formatted data structure
    """
    items = [card.to_dict() for card in models]
    return {"models": items, "count": len(items)}


def format_providers_json(providers: Iterable[ProviderInfo]) -> Dict[str, Any]:
    """Format provider snapshots without their model lists.

    Args:
        providers: Provider snapshots

    Returns:
        Formatted data structure with per-provider model counts
    """
    items: List[Dict[str, Any]] = []
    for info in providers:
        data = info.to_dict()
        data.pop("models", None)
        data["model_count"] = len(info.models)
        items.append(data)
    items.sort(key=lambda item: item["id"])
    return {"providers": items, "count": len(items)}


def format_cache_info_json(cache_info: Dict[str, Any]) -> Dict[str, Any]:
    """Format cache information for JSON output.

    Args:
        cache_info: Output of ``DiskCache.info()``

    Returns:
        Formatted data structure
    """
    return {
        "cache_directory": cache_info.get("directory"),
        "files": cache_info.get("files", []),
        "total_size_bytes": cache_info.get("total_size", 0),
        "file_count": len(cache_info.get("files", [])),
    }
