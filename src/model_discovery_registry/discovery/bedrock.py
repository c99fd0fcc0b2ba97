"""AWS Bedrock foundation-model discovery.

Models are listed with ``aws bedrock list-foundation-models``, which picks up
the ambient AWS credential chain. When the AWS CLI is missing or fails, a
static catalogue of well-known foundation models is returned instead, with
source ``manual`` and token limits left for enrichment to fill.

Bedrock ids look like ``anthropic.claude-sonnet-4-6-v1:0``: the vendor
before the first dot names the origin provider.
"""

import os
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..errors import DiscoveryFailedError
from ..logging import LogEvent, get_logger, log_debug
from ..model_card import CredentialResult, ModelCard, ModelMode
from ..normalize import extract_origin_provider
from .base import ProviderDiscoverer

logger = get_logger(__name__)

DEFAULT_REGION = "us-east-1"

VENDOR_TO_ORIGIN: Dict[str, str] = {
    "anthropic": "anthropic",
    "amazon": "amazon",
    "meta": "meta",
    "mistral": "mistral",
    "cohere": "cohere",
    "ai21": "ai21",
    "stability": "stability",
    "amazon-bedrock-preview": "amazon",
}

_CLAUDE_CAPABILITIES = ("chat", "vision", "code", "nlu", "function_calling")

# id, display name, mode, capabilities
STATIC_MODELS: List[Tuple[str, str, ModelMode, Tuple[str, ...]]] = [
    ("anthropic.claude-opus-4-6-v1:0", "Claude Opus 4.6 (Bedrock)", ModelMode.CHAT, _CLAUDE_CAPABILITIES),
    ("anthropic.claude-sonnet-4-6-v1:0", "Claude Sonnet 4.6 (Bedrock)", ModelMode.CHAT, _CLAUDE_CAPABILITIES),
    ("anthropic.claude-haiku-4-5-v1:0", "Claude Haiku 4.5 (Bedrock)", ModelMode.CHAT, _CLAUDE_CAPABILITIES),
    ("amazon.titan-text-premier-v2:0", "Titan Text Premier v2 (Bedrock)", ModelMode.CHAT, ("chat", "nlu")),
    ("amazon.titan-embed-text-v2:0", "Titan Embed Text v2 (Bedrock)", ModelMode.EMBEDDING, ("embedding",)),
    ("meta.llama3-3-70b-instruct-v1:0", "Llama 3.3 70B Instruct (Bedrock)", ModelMode.CHAT, ("chat", "code", "nlu")),
    (
        "mistral.mistral-large-2411-v1:0",
        "Mistral Large 2411 (Bedrock)",
        ModelMode.CHAT,
        ("chat", "code", "nlu", "function_calling"),
    ),
]


def origin_from_bedrock_id(model_id: str) -> Optional[str]:
    """Origin provider of a ``vendor.model-vN:M`` id, or None if it has no vendor."""
    vendor, sep, rest = model_id.partition(".")
    if not sep:
        return None
    vendor = vendor.lower()
    return VENDOR_TO_ORIGIN.get(vendor) or extract_origin_provider(rest) or vendor


def _modalities(summary: Dict[str, Any], key: str) -> List[str]:
    return [str(m).upper() for m in summary.get(key) or []]


def infer_mode(summary: Dict[str, Any]) -> ModelMode:
    """Mode from the output modalities; text-only output means chat."""
    output = _modalities(summary, "outputModalities")
    if "EMBEDDING" in output or "embed" in summary["modelId"].lower():
        return ModelMode.EMBEDDING
    if "IMAGE" in output and "TEXT" not in output:
        return ModelMode.IMAGE
    return ModelMode.CHAT


def infer_capabilities(summary: Dict[str, Any]) -> List[str]:
    """Capability tags from the modalities and the model family."""
    mode = infer_mode(summary)
    if mode == ModelMode.EMBEDDING:
        return ["embedding"]
    if mode == ModelMode.IMAGE:
        return ["image_generation"]

    model_id = summary["modelId"].lower()
    capabilities = ["chat"]
    if "IMAGE" in _modalities(summary, "inputModalities"):
        capabilities.append("vision")
    if "claude" in model_id:
        capabilities.extend(["code", "nlu", "function_calling"])
    elif "mistral" in model_id and "large" in model_id:
        capabilities.append("function_calling")
    return capabilities


class BedrockDiscoverer(ProviderDiscoverer):
    """Discovers foundation models offered by AWS Bedrock in one region.

    The region comes from the credential, then ``AWS_REGION``, then
    ``AWS_DEFAULT_REGION``, then ``us-east-1``.

    Args:
        env: Environment mapping, defaults to ``os.environ``
    """

    provider_id = "bedrock"
    provider_name = "AWS Bedrock"
    base_url = "https://bedrock.us-east-1.amazonaws.com"
    default_timeout = 15.0

    def __init__(self, env: Optional[Mapping[str, str]] = None) -> None:
        self.env = os.environ if env is None else env

    def resolve_region(self, credential: CredentialResult) -> str:
        return (
            credential.region
            or self.env.get("AWS_REGION")
            or self.env.get("AWS_DEFAULT_REGION")
            or DEFAULT_REGION
        )

    def discover(self, credential: CredentialResult, timeout: Optional[float] = None) -> List[ModelCard]:
        region = self.resolve_region(credential)
        try:
            cards = self._discover_via_cli(region, timeout)
        except DiscoveryFailedError as e:
            log_debug(LogEvent.DISCOVERY, "AWS CLI unavailable, using static catalogue", error=e.message)
            cards = []
        return cards or self.static_models(region)

    def _discover_via_cli(self, region: str, timeout: Optional[float]) -> List[ModelCard]:
        body = self.run_cli_json(
            ["aws", "bedrock", "list-foundation-models", "--region", region, "--output", "json"],
            timeout=timeout,
        )
        summaries = body.get("modelSummaries") if isinstance(body, dict) else None
        return [self._to_card(summary, region) for summary in summaries or [] if summary.get("modelId")]

    def _to_card(self, summary: Dict[str, Any], region: str) -> ModelCard:
        model_id = summary["modelId"]
        return self.make_card(
            model_id,
            name=summary.get("modelName") or model_id,
            origin_provider=origin_from_bedrock_id(model_id),
            mode=infer_mode(summary),
            capabilities=infer_capabilities(summary),
            region=region,
        )

    def static_models(self, region: str) -> List[ModelCard]:
        """Well-known Bedrock models, used when the CLI cannot be queried."""
        return [
            self.make_card(
                model_id,
                name=name,
                origin_provider=origin_from_bedrock_id(model_id),
                mode=mode,
                capabilities=list(capabilities),
                region=region,
                source="manual",
            )
            for model_id, name, mode, capabilities in STATIC_MODELS
        ]
