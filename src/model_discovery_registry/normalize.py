"""Model identity normalization.

Pure functions that map a raw model id, as reported by any serving provider,
to its origin provider, a normalized base id used for route grouping, and a
version hint.

    >>> extract_origin_provider("meta-llama/llama-3.3-70b-instruct")
    'meta'
    >>> normalize_model_id("openai/gpt-4o-2024-11-20")
    'gpt-4o'
    >>> extract_model_version("openai/gpt-5.3-codex")
    '5.3'
"""

import re
from typing import Dict, List, Optional, Pattern, Tuple

# Vendor namespace prefix -> canonical origin provider
PREFIX_TO_ORIGIN: Dict[str, str] = {
    "anthropic": "anthropic",
    "openai": "openai",
    "google": "google",
    "meta-llama": "meta",
    "meta": "meta",
    "mistralai": "mistral",
    "mistral": "mistral",
    "cohere": "cohere",
    "deepseek": "deepseek",
    "qwen": "qwen",
    "01-ai": "01-ai",
    "x-ai": "xai",
    "xai": "xai",
    "amazon": "amazon",
    "amazon-nova": "amazon",
}

# Bare model name patterns, first match wins
PATTERN_TO_ORIGIN: List[Tuple[Pattern[str], str]] = [
    (re.compile(r"^claude-", re.IGNORECASE), "anthropic"),
    (re.compile(r"^gpt-|^o[1-9](?:-|$)|^chatgpt-", re.IGNORECASE), "openai"),
    (re.compile(r"^dall-e", re.IGNORECASE), "openai"),
    (re.compile(r"^whisper|^tts-", re.IGNORECASE), "openai"),
    (re.compile(r"^gemini-", re.IGNORECASE), "google"),
    (re.compile(r"^llama", re.IGNORECASE), "meta"),
    (re.compile(r"^mistral|^codestral|^pixtral", re.IGNORECASE), "mistral"),
    (re.compile(r"^command-", re.IGNORECASE), "cohere"),
    (re.compile(r"^deepseek", re.IGNORECASE), "deepseek"),
    (re.compile(r"^qwen", re.IGNORECASE), "qwen"),
]

_ISO_DATE_SUFFIX = re.compile(r"-\d{4}-\d{2}-\d{2}$")
_COMPACT_DATE_SUFFIX = re.compile(r"-\d{8}$")

_VERSION_PATTERNS: List[Pattern[str]] = [
    re.compile(r"-(v\d+(?::\d+)?)$", re.IGNORECASE),
    re.compile(r"-(\d{4}-\d{2}-\d{2})$"),
    re.compile(r"-(\d{8})$"),
    re.compile(r"(?:^|[-_])v?(\d+\.\d+(?:\.\d+)?)(?=$|[-_])", re.IGNORECASE),
]


def _strip_vendor_prefix(model_id: str) -> str:
    slash = model_id.find("/")
    return model_id[slash + 1 :] if slash != -1 else model_id


def extract_origin_provider(model_id: str) -> Optional[str]:
    """Determine the original creator of a model from its id.

    Args:
        model_id: Raw model id, optionally namespaced as ``vendor/name``

    Returns:
        Canonical origin provider slug, or None when it cannot be inferred
    """
    slash = model_id.find("/")
    if slash != -1:
        prefix = model_id[:slash].lower()
        if prefix in PREFIX_TO_ORIGIN:
            return PREFIX_TO_ORIGIN[prefix]
        bare = model_id[slash + 1 :]
    else:
        bare = model_id

    for pattern, origin in PATTERN_TO_ORIGIN:
        if pattern.search(bare):
            return origin
    return None


def normalize_model_id(model_id: str) -> str:
    """Reduce a raw model id to its base id for cross-provider comparison.

    Strips a ``vendor/`` namespace, a trailing ``-YYYY-MM-DD`` or
    ``-YYYYMMDD`` date and a trailing ``:tag`` (for example a local
    quantization tag).

    Args:
        model_id: Raw model id

    Returns:
        Normalized base id
    """
    result = _strip_vendor_prefix(model_id)
    result = _ISO_DATE_SUFFIX.sub("", result)
    result = _COMPACT_DATE_SUFFIX.sub("", result)
    colon = result.find(":")
    if colon != -1:
        result = result[:colon]
    return result


def extract_model_version(model_id: str) -> Optional[str]:
    """Extract a version hint from a model id.

    Tries, in order, a provider suffix (``-v1``, ``-v2:0``), an ISO date
    suffix, a compact date suffix and a dotted version fragment (``4.5``).

    Args:
        model_id: Raw model id

    Returns:
        The first version hint found, or None
    """
    bare = _strip_vendor_prefix(model_id)
    for pattern in _VERSION_PATTERNS:
        match = pattern.search(bare)
        if match:
            return match.group(1)
    return None
