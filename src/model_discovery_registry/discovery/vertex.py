"""Google Vertex AI publisher-model discovery.

Three tiers are tried in order:

1. The Vertex AI REST API, with an OAuth access token from the credential,
   the Application Default Credentials (ADC) file or the gcloud CLI
2. ``gcloud ai models list``
3. A static catalogue of well-known Vertex models

Both live tiers need a project id, taken from the credential, then
``GOOGLE_CLOUD_PROJECT`` or ``GCLOUD_PROJECT``, then the active gcloud
configuration.
"""

import json
import os
import re
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import requests

from ..errors import DiscoveryFailedError
from ..logging import LogEvent, get_logger, log_debug
from ..model_card import CredentialResult, ModelCard, ModelMode
from .base import ProviderDiscoverer

logger = get_logger(__name__)

DEFAULT_REGION = "us-central1"
TOKEN_URL = "https://oauth2.googleapis.com/token"

_RESOURCE_PREFIX = re.compile(r"^.*/models/")


def infer_mode(model_id: str, actions: Sequence[str] = ()) -> ModelMode:
    lowered = model_id.lower()
    if "embedContent" in actions or "embed" in lowered:
        return ModelMode.EMBEDDING
    if "imagen" in lowered or "image" in lowered:
        return ModelMode.IMAGE
    return ModelMode.CHAT


def infer_capabilities(model_id: str, actions: Sequence[str] = ()) -> List[str]:
    """Capability tags for a Vertex model id.

    Gemini pro, flash and ultra tiers take images and call functions.
    """
    mode = infer_mode(model_id, actions)
    if mode == ModelMode.EMBEDDING:
        return ["embedding"]
    if mode == ModelMode.IMAGE:
        return ["image_generation"]

    lowered = model_id.lower()
    if "gemini" not in lowered:
        return ["chat"]
    capabilities = ["chat", "code", "nlu"]
    if any(tier in lowered for tier in ("pro", "flash", "ultra")):
        capabilities.extend(["vision", "function_calling"])
    return capabilities


class VertexDiscoverer(ProviderDiscoverer):
    """Discovers Google publisher models served by Vertex AI.

    Args:
        env: Environment mapping, defaults to ``os.environ``
        home: Home directory holding the gcloud ADC file
    """

    provider_id = "vertex"
    provider_name = "Google Vertex AI"
    base_url = "https://{region}-aiplatform.googleapis.com"

    def __init__(self, env: Optional[Mapping[str, str]] = None, home: Optional[Path] = None) -> None:
        self.env = os.environ if env is None else env
        self.home = Path(home) if home is not None else Path.home()

    def discover(self, credential: CredentialResult, timeout: Optional[float] = None) -> List[ModelCard]:
        project_id = self.resolve_project(credential)
        region = credential.region or self.env.get("GOOGLE_CLOUD_REGION") or DEFAULT_REGION

        if project_id:
            for tier in (self._discover_via_api, self._discover_via_cli):
                try:
                    cards = tier(credential, project_id, region, timeout)
                except DiscoveryFailedError as e:
                    log_debug(LogEvent.DISCOVERY, "Vertex discovery tier failed", tier=tier.__name__, error=e.message)
                    continue
                if cards:
                    return cards

        return self.static_models(region, project_id)

    def resolve_project(self, credential: CredentialResult) -> Optional[str]:
        project_id = (
            credential.project_id or self.env.get("GOOGLE_CLOUD_PROJECT") or self.env.get("GCLOUD_PROJECT")
        )
        if project_id:
            return project_id
        try:
            output = self.run_cli(["gcloud", "config", "get-value", "project"], timeout=5.0)
        except DiscoveryFailedError:
            return None
        # gcloud prints "(unset)" when no project is configured
        return output if output and output != "(unset)" else None

    def _discover_via_api(
        self, credential: CredentialResult, project_id: str, region: str, timeout: Optional[float]
    ) -> List[ModelCard]:
        token = self.access_token(credential, timeout)
        if not token:
            raise DiscoveryFailedError("No access token for Vertex AI", self.provider_id)

        url = (
            f"https://{region}-aiplatform.googleapis.com/v1/projects/{project_id}"
            f"/locations/{region}/publishers/google/models"
        )
        headers = {"Authorization": f"Bearer {token}"}
        models: List[Dict[str, Any]] = []
        page_token: Optional[str] = None
        while True:
            params = {"pageToken": page_token} if page_token else None
            page = self.fetch_json(url, headers=headers, params=params, timeout=timeout)
            models.extend(page.get("publisherModels") or page.get("models") or [])
            page_token = page.get("nextPageToken")
            if not page_token:
                break

        return [
            self._to_card(
                _RESOURCE_PREFIX.sub("", model["name"]),
                model.get("displayName"),
                model.get("supportedActions") or [],
                region,
                project_id,
            )
            for model in models
            if model.get("name")
        ]

    def _discover_via_cli(
        self, credential: CredentialResult, project_id: str, region: str, timeout: Optional[float]
    ) -> List[ModelCard]:
        models = self.run_cli_json(
            ["gcloud", "ai", "models", "list", f"--project={project_id}", f"--region={region}", "--format=json"],
            timeout=timeout,
        )
        if not isinstance(models, list):
            return []
        return [
            self._to_card(model["name"].rsplit("/", 1)[-1], model.get("displayName"), [], region, project_id)
            for model in models
            if isinstance(model, dict) and model.get("name")
        ]

    def access_token(self, credential: CredentialResult, timeout: Optional[float] = None) -> Optional[str]:
        """Find an OAuth access token for the REST API.

        Tries the credential, the ADC file (a stored access token, then a
        refresh-token exchange) and finally ``gcloud auth print-access-token``.
        """
        if credential.access_token:
            return credential.access_token

        adc = self._read_adc(credential)
        if adc:
            if adc.get("access_token"):
                return adc["access_token"]
            if adc.get("refresh_token") and adc.get("client_id") and adc.get("client_secret"):
                token = self._exchange_refresh_token(adc, timeout)
                if token:
                    return token

        try:
            return self.run_cli(["gcloud", "auth", "print-access-token"], timeout=8.0) or None
        except DiscoveryFailedError:
            return None

    def _read_adc(self, credential: CredentialResult) -> Optional[Dict[str, Any]]:
        path = (
            credential.path
            or self.env.get("GOOGLE_APPLICATION_CREDENTIALS")
            or str(self.home / ".config" / "gcloud" / "application_default_credentials.json")
        )
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError):
            return None
        return data if isinstance(data, dict) else None

    def _exchange_refresh_token(self, adc: Dict[str, Any], timeout: Optional[float]) -> Optional[str]:
        try:
            response = requests.post(
                TOKEN_URL,
                data={
                    "client_id": adc["client_id"],
                    "client_secret": adc["client_secret"],
                    "refresh_token": adc["refresh_token"],
                    "grant_type": "refresh_token",
                },
                timeout=self.default_timeout if timeout is None else timeout,
            )
            response.raise_for_status()
            return response.json().get("access_token")
        except (requests.RequestException, ValueError) as e:
            log_debug(LogEvent.CREDENTIALS, "Refresh token exchange failed", provider=self.provider_id, error=str(e))
            return None

    def _to_card(
        self,
        model_id: str,
        display_name: Optional[str],
        actions: Sequence[str],
        region: str,
        project_id: Optional[str],
        **fields: Any,
    ) -> ModelCard:
        return self.make_card(
            model_id,
            name=display_name or model_id,
            origin_provider="google",
            mode=infer_mode(model_id, actions),
            capabilities=infer_capabilities(model_id, actions),
            region=region,
            project_id=project_id,
            **fields,
        )

    def static_models(self, region: str, project_id: Optional[str]) -> List[ModelCard]:
        """Well-known Vertex models, used when neither live tier answers."""
        gemini = [
            ("gemini-2.5-pro-preview-05-06", "Gemini 2.5 Pro Preview", 1_048_576, 65_536),
            ("gemini-2.5-flash-preview-04-17", "Gemini 2.5 Flash Preview", 1_048_576, 8_192),
            ("gemini-2.0-flash", "Gemini 2.0 Flash", 1_048_576, 8_192),
        ]
        cards = [
            self._to_card(
                model_id,
                name,
                [],
                region,
                project_id,
                context_window=context,
                max_output_tokens=output,
                source="manual",
            )
            for model_id, name, context, output in gemini
        ]
        cards.append(
            self._to_card(
                "text-embedding-005", "Text Embedding 005", [], region, project_id, context_window=2_048, source="manual"
            )
        )
        cards.append(self._to_card("imagen-3.0-generate-002", "Imagen 3.0", [], region, project_id, source="manual"))
        return cards
