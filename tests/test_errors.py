"""Tests for error classes."""

from model_discovery_registry.errors import (
    CacheError,
    ConfigurationError,
    DiscoveryFailedError,
    InvalidConfigFormatError,
    ModelNotFoundError,
    ModelRegistryError,
    NetworkError,
)


class TestErrorClasses:
    """Tests for all error classes."""

    def test_model_registry_error(self) -> None:
        error = ModelRegistryError("Base error message")
        assert str(error) == "Base error message"
        assert error.message == "Base error message"

    def test_configuration_errors(self) -> None:
        error = InvalidConfigFormatError("Bad format", path="/tmp/config.yaml")
        assert error.path == "/tmp/config.yaml"
        assert error.expected_type == "mapping"
        assert isinstance(error, ConfigurationError)
        assert isinstance(error, ModelRegistryError)

    def test_discovery_failed_error(self) -> None:
        error = DiscoveryFailedError(
            "OpenAI API error: 401 Unauthorized",
            "openai",
            status_code=401,
            url="https://api.openai.com/v1/models",
        )
        assert error.provider_id == "openai"
        assert error.status_code == 401
        assert error.url.endswith("/v1/models")
        assert isinstance(error, ModelRegistryError)

    def test_network_error(self) -> None:
        error = NetworkError("Connection failed", "https://example.com")
        assert error.url == "https://example.com"
        assert str(error) == "Connection failed"

    def test_cache_error(self) -> None:
        error = CacheError("disk full", "providers_all")
        assert error.key == "providers_all"

    def test_model_not_found_error(self) -> None:
        error = ModelNotFoundError("Model 'gpt-9' not found", "gpt-9", suggestions=["gpt-4o"])
        assert str(error) == "Model 'gpt-9' not found"
        assert error.model == "gpt-9"
        assert error.suggestions == ["gpt-4o"]
        assert ModelNotFoundError("x", "x").suggestions == []
