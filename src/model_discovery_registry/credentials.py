"""Provider credential resolution.

:class:`CredentialResolver` searches, per provider, an explicit key, then
environment variables, then credential files left behind by vendor CLIs and
cloud SDKs. The first hit wins. Resolution never raises; a provider with no
credential gets a result whose source is ``CredentialSource.NONE``.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .logging import LogEvent, get_logger, log_debug
from .model_card import CredentialResult, CredentialSource, ProviderInfo

logger = get_logger(__name__)

# Environment variables that satisfy each provider, in lookup order.
# An empty list means the provider needs no credential.
CREDENTIAL_ENV_VARS: Dict[str, List[str]] = {
    "anthropic": ["ANTHROPIC_API_KEY"],
    "openai": ["OPENAI_API_KEY"],
    "google": ["GOOGLE_API_KEY", "GEMINI_API_KEY"],
    "openrouter": ["OPENROUTER_API_KEY"],
    "ollama": [],
    "bedrock": ["AWS_ACCESS_KEY_ID", "AWS_PROFILE"],
    "vertex": ["GOOGLE_APPLICATION_CREDENTIALS"],
}

PROVIDER_NAMES: Dict[str, str] = {
    "anthropic": "Anthropic",
    "openai": "OpenAI",
    "google": "Google",
    "openrouter": "OpenRouter",
    "ollama": "Ollama",
    "bedrock": "AWS Bedrock",
    "vertex": "Google Vertex AI",
}

_FALLBACK_ENV_VARS: Dict[str, str] = {
    "anthropic": "ANTHROPIC_API_KEY",
    "openai": "OPENAI_API_KEY",
    "google": "GOOGLE_API_KEY",
    "openrouter": "OPENROUTER_API_KEY",
}


def _read_json(path: Path) -> Optional[Dict[str, Any]]:
    """Read a JSON object from disk, or None on any failure."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError):
        return None
    return data if isinstance(data, dict) else None


def fallback_credential(
    provider_id: str,
    explicit_key: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
) -> CredentialResult:
    """Resolve a credential from an explicit key or a single env var only.

    Used when no resolver is supplied and the default one cannot be built.
    """
    if explicit_key:
        return CredentialResult(source=CredentialSource.CONFIG, api_key=explicit_key)
    environ = os.environ if env is None else env
    env_var = _FALLBACK_ENV_VARS.get(provider_id)
    if env_var and environ.get(env_var):
        return CredentialResult(source=CredentialSource.ENV, api_key=environ[env_var])
    return CredentialResult()


class CredentialResolver:
    """Multi-source credential resolver.

    Resolution order per provider:

    1. Explicit key from configuration
    2. Environment variables
    3. Credential files written by vendor CLIs
    4. Cloud SDK config and OAuth files

    Args:
        home: Home directory to search, defaults to the current user's
        env: Environment mapping, defaults to ``os.environ``
    """

    def __init__(self, home: Optional[Path] = None, env: Optional[Mapping[str, str]] = None) -> None:
        self.home = Path(home) if home is not None else Path.home()
        self.env = os.environ if env is None else env
        self.is_windows = os.name == "nt"

    def resolve(self, provider_id: str, explicit_key: Optional[str] = None) -> CredentialResult:
        """Resolve the best available credential for a provider.

        Args:
            provider_id: Provider slug, e.g. "anthropic"
            explicit_key: Key from configuration, highest precedence

        Returns:
            The first credential found, or a result with source NONE
        """
        resolvers = {
            "anthropic": self._resolve_anthropic,
            "openai": self._resolve_openai,
            "google": self._resolve_google,
            "gemini": self._resolve_google,
            "openrouter": self._resolve_openrouter,
            "bedrock": self._resolve_bedrock,
            "vertex": self._resolve_vertex,
        }
        resolver = resolvers.get(provider_id)
        if resolver is None:
            return CredentialResult()

        result = resolver(explicit_key)
        log_debug(
            LogEvent.CREDENTIALS,
            "Resolved credential",
            provider=provider_id,
            source=result.source.value,
            path=result.path,
        )
        return result

    def _env_key(self, *names: str) -> Optional[str]:
        for name in names:
            value = self.env.get(name)
            if value:
                return value
        return None

    def _resolve_anthropic(self, explicit_key: Optional[str]) -> CredentialResult:
        if explicit_key:
            return CredentialResult(source=CredentialSource.CONFIG, api_key=explicit_key)

        env_key = self._env_key("ANTHROPIC_API_KEY")
        if env_key:
            return CredentialResult(source=CredentialSource.ENV, api_key=env_key)

        for path in (self.home / ".claude.json", self.home / ".config" / "claude" / "settings.json"):
            data = _read_json(path)
            if data and data.get("apiKey"):
                return CredentialResult(source=CredentialSource.CLI, api_key=data["apiKey"], path=str(path))

        oauth_path = self.home / ".claude" / "credentials.json"
        data = _read_json(oauth_path)
        if data and data.get("accessToken"):
            return CredentialResult(source=CredentialSource.OAUTH, access_token=data["accessToken"], path=str(oauth_path))

        codex_path = self.home / ".codex" / "auth.json"
        data = _read_json(codex_path)
        if data and data.get("anthropic"):
            return CredentialResult(source=CredentialSource.CLI, api_key=data["anthropic"], path=str(codex_path))

        return CredentialResult()

    def _resolve_openai(self, explicit_key: Optional[str]) -> CredentialResult:
        if explicit_key:
            return CredentialResult(source=CredentialSource.CONFIG, api_key=explicit_key)

        env_key = self._env_key("OPENAI_API_KEY")
        if env_key:
            return CredentialResult(source=CredentialSource.ENV, api_key=env_key)

        # GitHub Copilot stores an OAuth token per host
        for filename in ("hosts.json", "apps.json"):
            for path in self._copilot_paths(filename):
                data = _read_json(path)
                token = self._copilot_token(data) if data else None
                if token:
                    return CredentialResult(source=CredentialSource.CLI, access_token=token, path=str(path))

        return CredentialResult()

    def _resolve_google(self, explicit_key: Optional[str]) -> CredentialResult:
        if explicit_key:
            return CredentialResult(source=CredentialSource.CONFIG, api_key=explicit_key)

        env_key = self._env_key("GOOGLE_API_KEY", "GEMINI_API_KEY")
        if env_key:
            return CredentialResult(source=CredentialSource.ENV, api_key=env_key)

        gemini_path = self.home / ".gemini" / "credentials.json"
        data = _read_json(gemini_path)
        if data:
            if data.get("apiKey"):
                return CredentialResult(source=CredentialSource.CLI, api_key=data["apiKey"], path=str(gemini_path))
            if data.get("access_token"):
                return CredentialResult(
                    source=CredentialSource.CLI, access_token=data["access_token"], path=str(gemini_path)
                )

        for path in self._gcloud_paths():
            data = _read_json(path)
            if not data:
                continue
            token = data.get("access_token") or data.get("refresh_token")
            if token:
                return CredentialResult(
                    source=CredentialSource.CONFIG,
                    access_token=token,
                    path=str(path),
                    project_id=data.get("quota_project_id"),
                )

        return CredentialResult()

    def _resolve_openrouter(self, explicit_key: Optional[str]) -> CredentialResult:
        if explicit_key:
            return CredentialResult(source=CredentialSource.CONFIG, api_key=explicit_key)

        env_key = self._env_key("OPENROUTER_API_KEY")
        if env_key:
            return CredentialResult(source=CredentialSource.ENV, api_key=env_key)

        return CredentialResult()

    def _resolve_bedrock(self, explicit_key: Optional[str]) -> CredentialResult:
        # The AWS CLI reads the secret itself; only its presence and the region are recorded
        region = self._env_key("AWS_REGION", "AWS_DEFAULT_REGION")
        if self._env_key("AWS_ACCESS_KEY_ID", "AWS_PROFILE"):
            return CredentialResult(source=CredentialSource.ENV, region=region)

        aws_path = self.home / ".aws" / "credentials"
        if aws_path.is_file():
            return CredentialResult(source=CredentialSource.CONFIG, path=str(aws_path), region=region)

        return CredentialResult(region=region)

    def _resolve_vertex(self, explicit_key: Optional[str]) -> CredentialResult:
        project_id = self._env_key("GOOGLE_CLOUD_PROJECT", "GCLOUD_PROJECT")
        region = self._env_key("GOOGLE_CLOUD_REGION")

        candidates: List[Tuple[Path, CredentialSource]] = []
        env_path = self.env.get("GOOGLE_APPLICATION_CREDENTIALS")
        if env_path:
            candidates.append((Path(env_path), CredentialSource.ENV))
        candidates.extend((path, CredentialSource.CONFIG) for path in self._gcloud_paths())

        for path, source in candidates:
            data = _read_json(path)
            if data:
                return CredentialResult(
                    source=source,
                    access_token=data.get("access_token"),
                    path=str(path),
                    project_id=project_id or data.get("project_id") or data.get("quota_project_id"),
                    region=region,
                )

        return CredentialResult(project_id=project_id, region=region)

    def _copilot_paths(self, filename: str) -> List[Path]:
        paths = [self.home / ".config" / "github-copilot" / filename]
        if self.is_windows:
            for var in ("APPDATA", "LOCALAPPDATA"):
                base = self.env.get(var)
                if base:
                    paths.append(Path(base) / "github-copilot" / filename)
        return paths

    def _gcloud_paths(self) -> List[Path]:
        paths = [self.home / ".config" / "gcloud" / "application_default_credentials.json"]
        if self.is_windows:
            appdata = self.env.get("APPDATA")
            if appdata:
                paths.append(Path(appdata) / "gcloud" / "application_default_credentials.json")
        return paths

    @staticmethod
    def _copilot_token(data: Dict[str, Any]) -> Optional[str]:
        for value in data.values():
            if isinstance(value, dict) and value.get("oauth_token"):
                return value["oauth_token"]
        return None


@dataclass(frozen=True)
class CredentialPrompt:
    """A hint telling the user how to authenticate a provider."""

    provider_id: str
    provider_name: str
    required: bool
    env_vars: Tuple[str, ...] = field(default_factory=tuple)
    message: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "provider_id": self.provider_id,
            "provider_name": self.provider_name,
            "required": self.required,
            "env_vars": list(self.env_vars),
            "message": self.message,
        }


def requires_credentials(provider_id: str) -> bool:
    """Whether a provider needs a credential to list its models."""
    return bool(CREDENTIAL_ENV_VARS.get(provider_id))


def build_credential_prompts(providers: Iterable[ProviderInfo]) -> List[CredentialPrompt]:
    """Build prompts for unauthenticated providers that need a credential.

    Providers that need no credential, such as a local runtime, are never
    included. Input order is preserved.

    Args:
        providers: Provider snapshots to check

    Returns:
        One prompt per flagged provider
    """
    prompts: List[CredentialPrompt] = []
    for info in providers:
        if info.authenticated or not requires_credentials(info.id):
            continue
        env_vars = tuple(CREDENTIAL_ENV_VARS[info.id])
        name = info.name or PROVIDER_NAMES.get(info.id, info.id)
        prompts.append(
            CredentialPrompt(
                provider_id=info.id,
                provider_name=name,
                required=True,
                env_vars=env_vars,
                message=f"Set {' or '.join(env_vars)} to discover {name} models.",
            )
        )
    return prompts
