"""Registry configuration.

Configuration comes from, lowest precedence first: the user config file
(``config.yaml`` in the platform config dir, or ``MDR_CONFIG_PATH``), a
project-local ``mdr.yaml`` and explicit overrides. Example file::

    cache_ttl: 3600
    providers:
      openai:
        api_key: sk-...
      ollama:
        base_url: http://gpu-box:11434
      openrouter:
        enabled: false
    aliases:
      smart: claude-opus-4-6
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from .config_paths import ENV_CACHE_TTL, get_config_search_paths
from .config_result import ConfigResult
from .errors import ConfigurationError, InvalidConfigFormatError
from .logging import LogEvent, get_logger, log_debug, log_warning

logger = get_logger(__name__)

DEFAULT_CACHE_TTL = 86_400.0
DEFAULT_TIMEOUT = 10.0


@dataclass
class ProviderSettings:
    """Per-provider configuration."""

    enabled: bool = True
    api_key: Optional[str] = field(default=None, repr=False)
    base_url: Optional[str] = None

    @classmethod
    def from_dict(cls, provider_id: str, data: Any, path: Optional[str] = None) -> "ProviderSettings":
        """Build settings from a config mapping.

        Raises:
            ConfigurationError: If the entry is not a mapping
        """
        if data is None:
            return cls()
        if not isinstance(data, Mapping):
            raise ConfigurationError(f"Settings for provider '{provider_id}' must be a mapping", path)
        return cls(
            enabled=bool(data.get("enabled", True)),
            api_key=data.get("api_key"),
            base_url=data.get("base_url"),
        )


class RegistryConfig:
    """Configuration for the model registry."""

    def __init__(
        self,
        cache_dir: Optional[Union[str, Path]] = None,
        cache_ttl: Optional[float] = None,
        providers: Optional[Mapping[str, Union[ProviderSettings, Mapping[str, Any]]]] = None,
        aliases: Optional[Mapping[str, str]] = None,
    ):
        """Initialize registry configuration.

        Args:
            cache_dir: Directory for the discovery cache. If None, the
                       default location is used.
            cache_ttl: Seconds a cached snapshot stays fresh. If None,
                       ``MDR_CACHE_TTL`` or 24 hours is used.
            providers: Per-provider settings keyed by provider id.
            aliases: Custom aliases applied on top of the built-in table.

        Raises:
            ConfigurationError: If a value is out of range or malformed
        """
        self.cache_dir = Path(cache_dir).expanduser() if cache_dir else None

        if cache_ttl is None:
            env_ttl = os.environ.get(ENV_CACHE_TTL)
            if env_ttl:
                try:
                    cache_ttl = float(env_ttl)
                except ValueError:
                    raise ConfigurationError(f"{ENV_CACHE_TTL} must be a number of seconds, got '{env_ttl}'")
            else:
                cache_ttl = DEFAULT_CACHE_TTL
        if cache_ttl < 0:
            raise ConfigurationError("cache_ttl must be non-negative")
        self.cache_ttl = float(cache_ttl)

        self.providers: Dict[str, ProviderSettings] = {}
        for provider_id, settings in (providers or {}).items():
            if isinstance(settings, ProviderSettings):
                self.providers[provider_id] = settings
            else:
                self.providers[provider_id] = ProviderSettings.from_dict(provider_id, settings)

        self.aliases: Dict[str, str] = dict(aliases or {})

    def provider_settings(self, provider_id: str) -> ProviderSettings:
        """Get settings for a provider, defaulting to enabled with no key."""
        return self.providers.get(provider_id) or ProviderSettings()

    def is_enabled(self, provider_id: str) -> bool:
        """Check whether a provider takes part in discovery."""
        return self.provider_settings(provider_id).enabled

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], path: Optional[str] = None) -> "RegistryConfig":
        """Build a configuration from a parsed config mapping.

        Args:
            data: Mapping with optional ``cache_dir``, ``cache_ttl``,
                  ``providers`` and ``aliases`` keys
            path: Source file, used in error messages

        Raises:
            ConfigurationError: If a section has the wrong type
        """
        providers = data.get("providers") or {}
        if not isinstance(providers, Mapping):
            raise ConfigurationError("'providers' must be a mapping of provider id to settings", path)
        aliases = data.get("aliases") or {}
        if not isinstance(aliases, Mapping):
            raise ConfigurationError("'aliases' must be a mapping of alias to model id", path)

        cache_ttl = data.get("cache_ttl")
        if cache_ttl is not None:
            try:
                cache_ttl = float(cache_ttl)
            except (TypeError, ValueError):
                raise ConfigurationError(f"'cache_ttl' must be a number of seconds, got {cache_ttl!r}", path)

        return cls(
            cache_dir=data.get("cache_dir"),
            cache_ttl=cache_ttl,
            providers={
                str(provider_id): ProviderSettings.from_dict(str(provider_id), settings, path)
                for provider_id, settings in providers.items()
            },
            aliases={str(alias): str(target) for alias, target in aliases.items()},
        )


def read_config_file(path: Path) -> ConfigResult:
    """Read one YAML config file.

    Args:
        path: File to read

    Returns:
        ConfigResult; a missing file is a success with empty data
    """
    if not path.is_file():
        return ConfigResult(success=True, data={}, path=str(path))

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        return ConfigResult(success=False, error=f"Failed to read config file: {e}", exception=e, path=str(path))

    if data is None:
        return ConfigResult(success=True, data={}, path=str(path))
    if not isinstance(data, dict):
        error = InvalidConfigFormatError(
            f"Config file must contain a mapping, got {type(data).__name__}",
            path=str(path),
        )
        return ConfigResult(success=False, error=error.message, exception=error, path=str(path))

    return ConfigResult(success=True, data=data, path=str(path))


def _merge_config(base: Dict[str, Any], update: Mapping[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in update.items():
        if key == "providers" and isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            providers = {pid: dict(settings or {}) for pid, settings in merged[key].items()}
            for provider_id, settings in value.items():
                current = providers.get(provider_id, {})
                current.update(settings or {})
                providers[provider_id] = current
            merged[key] = providers
        elif key == "aliases" and isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = {**merged[key], **value}
        else:
            merged[key] = value
    return merged


def load_config_file(
    overrides: Optional[Mapping[str, Any]] = None,
    cwd: Optional[Path] = None,
    strict: bool = False,
) -> RegistryConfig:
    """Load configuration from the config files, then apply overrides.

    Args:
        overrides: Explicit settings, highest precedence
        cwd: Directory holding the project-local ``mdr.yaml``
        strict: Raise on unreadable or malformed files instead of skipping them

    Returns:
        The merged configuration; empty when no file exists

    Raises:
        InvalidConfigFormatError: In strict mode, when a file is malformed
        ConfigurationError: When a merged value is invalid
    """
    merged: Dict[str, Any] = {}
    for path in get_config_search_paths(cwd):
        result = read_config_file(path)
        if not result.success:
            if strict:
                if isinstance(result.exception, InvalidConfigFormatError):
                    raise result.exception
                raise InvalidConfigFormatError(result.error or "Invalid config file", path=result.path)
            log_warning(LogEvent.CONFIG, "Skipping config file", path=result.path, error=result.error)
            continue
        if result.data:
            log_debug(LogEvent.CONFIG, "Loaded config file", path=result.path)
            merged = _merge_config(merged, result.data)

    if overrides:
        merged = _merge_config(merged, overrides)

    return RegistryConfig.from_dict(merged)
