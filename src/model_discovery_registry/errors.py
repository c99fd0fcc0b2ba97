"""Error types for the model discovery registry.

This module defines the error types raised by the registry, its configuration
layer, and the provider discoverers.
"""

from typing import List, Optional


class ModelRegistryError(Exception):
    """Base class for all registry-related errors.

    This is the parent class for all registry-specific exceptions.
    """

    def __init__(self, message: str) -> None:
        """Initialize registry error.

        Args:
            message: Error message
        """
        super().__init__(message)
        self.message = message


class ConfigurationError(ModelRegistryError):
    """Base class for configuration-related errors.

    This is raised for errors related to configuration loading, parsing,
    or validation.
    """

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        """Initialize configuration error.

        Args:
            message: Error message
            path: Optional path to the configuration file that caused the error
        """
        super().__init__(message)
        self.path = path


class InvalidConfigFormatError(ConfigurationError):
    """Raised when a configuration file has an invalid format.

    Examples:
        >>> try:
        ...     load_config_file()
        ... except InvalidConfigFormatError as e:
        ...     print(f"Invalid config format in {e.path}")
    """

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        expected_type: str = "mapping",
    ) -> None:
        """Initialize invalid format error.

        Args:
            message: Error message
            path: Optional path to the configuration file
            expected_type: Expected type of the configuration
        """
        super().__init__(message, path)
        self.expected_type = expected_type


class DiscoveryFailedError(ModelRegistryError):
    """Raised by a discoverer when a provider cannot be queried.

    Client errors (4xx) are raised on the first attempt; server and network
    errors are raised once retries are exhausted.

    Examples:
        >>> try:
        ...     OpenAIDiscoverer().discover(credential)
        ... except DiscoveryFailedError as e:
        ...     print(f"{e.provider_id} failed with status {e.status_code}")
    """

    def __init__(
        self,
        message: str,
        provider_id: str,
        status_code: Optional[int] = None,
        url: Optional[str] = None,
    ) -> None:
        """Initialize discovery error.

        Args:
            message: Error message
            provider_id: Provider whose API call failed
            status_code: HTTP status code, when a response was received
            url: URL that was being accessed
        """
        super().__init__(message)
        self.provider_id = provider_id
        self.status_code = status_code
        self.url = url


class NetworkError(ModelRegistryError):
    """Raised when a network operation outside provider discovery fails.

    Examples:
        >>> try:
        ...     LiteLLMEnricher().load()
        ... except NetworkError as e:
        ...     print(f"Network error: {e}")
    """

    def __init__(self, message: str, url: Optional[str] = None) -> None:
        """Initialize network error.

        Args:
            message: Error message
            url: Optional URL that was being accessed
        """
        super().__init__(message)
        self.url = url


class CacheError(ModelRegistryError):
    """Raised when a cache entry cannot be written."""

    def __init__(self, message: str, key: str) -> None:
        """Initialize cache error.

        Args:
            message: Error message
            key: Cache key being written
        """
        super().__init__(message)
        self.key = key


class ModelNotFoundError(ModelRegistryError):
    """Raised when a model cannot be found by id or alias.

    Examples:
        >>> try:
        ...     registry.get_model("unknown-model")
        ... except ModelNotFoundError as e:
        ...     print(f"Model {e.model} not found")
    """

    def __init__(
        self,
        message: str,
        model: str,
        suggestions: Optional[List[str]] = None,
    ) -> None:
        """Initialize model not found error.

        Args:
            message: Error message
            model: The requested id or alias
            suggestions: Close matches, if any
        """
        super().__init__(message)
        self.model = model
        self.suggestions = list(suggestions) if suggestions else []

    def __str__(self) -> str:
        """Return string representation of the error.

        Returns:
            Error message
        """
        return self.message
