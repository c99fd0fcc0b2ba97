"""Tests for configuration loading and path resolution."""

from pathlib import Path

import pytest
import yaml

from model_discovery_registry import config_paths
from model_discovery_registry.config import (
    DEFAULT_CACHE_TTL,
    ProviderSettings,
    RegistryConfig,
    load_config_file,
    read_config_file,
)
from model_discovery_registry.errors import ConfigurationError, InvalidConfigFormatError


def _write_yaml(path: Path, data: object) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.safe_dump(data, f)
    return path


class TestRegistryConfig:
    """Tests for RegistryConfig defaults and validation."""

    def test_defaults(self) -> None:
        config = RegistryConfig()
        assert config.cache_ttl == DEFAULT_CACHE_TTL
        assert config.cache_dir is None
        assert config.providers == {}
        assert config.aliases == {}
        assert config.is_enabled("openai")

    def test_ttl_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MDR_CACHE_TTL", "120")
        assert RegistryConfig().cache_ttl == 120.0

    def test_explicit_ttl_beats_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MDR_CACHE_TTL", "120")
        assert RegistryConfig(cache_ttl=5).cache_ttl == 5.0

    def test_invalid_environment_ttl(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MDR_CACHE_TTL", "soon")
        with pytest.raises(ConfigurationError):
            RegistryConfig()

    def test_negative_ttl(self) -> None:
        with pytest.raises(ConfigurationError):
            RegistryConfig(cache_ttl=-1)

    def test_provider_settings_from_mappings(self) -> None:
        config = RegistryConfig(providers={"openrouter": {"enabled": False}, "openai": {"api_key": "sk-x"}})
        assert not config.is_enabled("openrouter")
        assert config.provider_settings("openai").api_key == "sk-x"
        assert config.provider_settings("anthropic") == ProviderSettings()

    def test_api_key_hidden_from_repr(self) -> None:
        assert "sk-secret" not in repr(ProviderSettings(api_key="sk-secret"))

    def test_from_dict_rejects_bad_sections(self) -> None:
        with pytest.raises(ConfigurationError):
            RegistryConfig.from_dict({"providers": ["openai"]})
        with pytest.raises(ConfigurationError):
            RegistryConfig.from_dict({"aliases": "fast"})
        with pytest.raises(ConfigurationError):
            RegistryConfig.from_dict({"providers": {"openai": "sk-x"}})
        with pytest.raises(ConfigurationError):
            RegistryConfig.from_dict({"cache_ttl": "a day"})


class TestReadConfigFile:
    """Tests for reading a single file."""

    def test_missing_file_is_empty_success(self, tmp_path: Path) -> None:
        result = read_config_file(tmp_path / "absent.yaml")
        assert result.success
        assert result.data == {}

    def test_non_mapping_is_invalid_format(self, tmp_path: Path) -> None:
        path = _write_yaml(tmp_path / "list.yaml", ["a", "b"])
        result = read_config_file(path)
        assert not result.success
        assert isinstance(result.exception, InvalidConfigFormatError)
        assert result.path == str(path)

    def test_yaml_syntax_error(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.yaml"
        path.write_text("providers: [unclosed")
        result = read_config_file(path)
        assert not result.success
        assert "Failed to read config file" in (result.error or "")


class TestLoadConfigFile:
    """Tests for merging the config file layers."""

    def test_user_then_project_then_overrides(self, tmp_path: Path) -> None:
        _write_yaml(
            tmp_path / "config.yaml",
            {
                "cache_ttl": 600,
                "providers": {"openai": {"api_key": "sk-user"}, "ollama": {"base_url": "http://box:11434"}},
                "aliases": {"fast": "gpt-4o-mini", "smart": "claude-opus-4-6"},
            },
        )
        project = tmp_path / "project"
        _write_yaml(
            project / "mdr.yaml",
            {"providers": {"openai": {"enabled": False}}, "aliases": {"fast": "gemini-2.0-flash"}},
        )

        config = load_config_file(overrides={"cache_ttl": 30}, cwd=project)

        assert config.cache_ttl == 30.0
        openai = config.provider_settings("openai")
        assert openai.api_key == "sk-user"
        assert openai.enabled is False
        assert config.provider_settings("ollama").base_url == "http://box:11434"
        assert config.aliases == {"fast": "gemini-2.0-flash", "smart": "claude-opus-4-6"}

    def test_no_files(self, tmp_path: Path) -> None:
        config = load_config_file(cwd=tmp_path)
        assert config.providers == {}

    def test_bad_file_skipped_unless_strict(self, tmp_path: Path) -> None:
        _write_yaml(tmp_path / "config.yaml", ["not", "a", "mapping"])

        assert load_config_file(cwd=tmp_path).providers == {}
        with pytest.raises(InvalidConfigFormatError):
            load_config_file(cwd=tmp_path, strict=True)

    def test_unreadable_file_strict(self, tmp_path: Path) -> None:
        (tmp_path / "config.yaml").write_text("aliases: {")
        with pytest.raises(InvalidConfigFormatError) as exc_info:
            load_config_file(cwd=tmp_path, strict=True)
        assert exc_info.value.path == str(tmp_path / "config.yaml")


class TestConfigPaths:
    """Tests for path resolution."""

    def test_user_config_dir_contains_app_name(self) -> None:
        assert config_paths.APP_NAME in str(config_paths.get_user_config_dir())

    def test_config_path_from_environment(self, tmp_path: Path) -> None:
        # MDR_CONFIG_PATH is set by the autouse fixture
        assert config_paths.get_user_config_path() == tmp_path / "config.yaml"

    def test_default_config_path(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("MDR_CONFIG_PATH")
        assert config_paths.get_user_config_path() == config_paths.get_user_config_dir() / "config.yaml"

    def test_cache_dir_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("MDR_CACHE_DIR")
        assert config_paths.get_cache_dir() == config_paths.get_user_cache_dir()

    def test_search_order(self, tmp_path: Path) -> None:
        paths = config_paths.get_config_search_paths(tmp_path / "proj")
        assert paths == [tmp_path / "config.yaml", tmp_path / "proj" / "mdr.yaml"]

    def test_ensure_dir_exists_creates(self, tmp_path: Path) -> None:
        target = tmp_path / "a" / "b"
        config_paths.ensure_dir_exists(target)
        assert target.is_dir()
