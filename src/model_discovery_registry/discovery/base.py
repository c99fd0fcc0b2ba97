"""Base class for provider discoverers.

A discoverer turns a resolved credential into a list of model cards for one
provider. Subclasses set the identity attributes and implement
:meth:`ProviderDiscoverer.discover`; the base class supplies HTTP fetching
with retries, vendor CLI invocation and card construction with defaults.
"""

import json
import subprocess
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence

import requests
from tenacity import RetryCallState, Retrying, retry_if_exception, stop_after_attempt, wait_exponential

from ..errors import DiscoveryFailedError
from ..logging import LogEvent, get_logger, log_debug
from ..model_card import CredentialResult, ModelCard

logger = get_logger(__name__)


def is_transient(error: BaseException) -> bool:
    """Network errors, timeouts and 5xx responses are retried; nothing else is."""
    if not isinstance(error, DiscoveryFailedError):
        return False
    return error.status_code is None or error.status_code >= 500


class ProviderDiscoverer(ABC):
    """Lists the models one provider serves.

    ``discover`` raises :class:`DiscoveryFailedError` on unrecoverable
    errors and returns an empty list when the provider is reachable but has
    nothing to report, or when it needs a credential that is missing.
    """

    provider_id: str = ""
    provider_name: str = ""
    base_url: str = ""

    default_timeout: float = 10.0
    max_attempts: int = 3
    retry_base_delay: float = 0.5

    @abstractmethod
    def discover(self, credential: CredentialResult, timeout: Optional[float] = None) -> List[ModelCard]:
        """Query the provider and return normalized model cards.

        Args:
            credential: Resolved credential for the provider
            timeout: Per-request timeout in seconds, defaults to ``default_timeout``

        Returns:
            Model cards, possibly empty

        Raises:
            DiscoveryFailedError: If the provider cannot be queried
        """

    def fetch_json(
        self,
        url: str,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """GET a URL and decode its JSON body, retrying transient failures.

        Network errors, timeouts and 5xx responses are retried with
        exponential backoff (0.5 s, 1 s, ...). 4xx responses and undecodable
        bodies fail immediately.

        Args:
            url: URL to fetch
            headers: Request headers
            params: Query string parameters
            timeout: Request timeout in seconds

        Returns:
            Decoded JSON body

        Raises:
            DiscoveryFailedError: When the request fails for good
        """
        timeout = self.default_timeout if timeout is None else timeout
        retrying = Retrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.retry_base_delay),
            retry=retry_if_exception(is_transient),
            before_sleep=self._log_retry,
            reraise=True,
        )
        return retrying(self._get_json, url, headers, params, timeout)

    def _get_json(
        self,
        url: str,
        headers: Optional[Dict[str, str]],
        params: Optional[Dict[str, Any]],
        timeout: float,
    ) -> Any:
        try:
            response = requests.get(url, headers=headers, params=params, timeout=timeout)
        except requests.Timeout as e:
            raise DiscoveryFailedError(
                f"{self.provider_name} API request timed out after {timeout}s", self.provider_id, url=url
            ) from e
        except requests.RequestException as e:
            raise DiscoveryFailedError(
                f"{self.provider_name} API request failed: {e}", self.provider_id, url=url
            ) from e

        status = response.status_code
        if not 200 <= status < 300:
            raise DiscoveryFailedError(
                f"{self.provider_name} API error: {status} {response.reason or ''}".rstrip(),
                self.provider_id,
                status_code=status,
                url=url,
            )
        try:
            return response.json()
        except ValueError as e:
            raise DiscoveryFailedError(
                f"{self.provider_name} API returned invalid JSON: {e}",
                self.provider_id,
                status_code=status,
                url=url,
            ) from e

    def _log_retry(self, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        log_debug(
            LogEvent.DISCOVERY,
            "Retrying provider request",
            provider=self.provider_id,
            attempt=retry_state.attempt_number,
            delay=retry_state.next_action.sleep if retry_state.next_action else None,
            error=str(error) if error else None,
        )

    def run_cli(self, args: Sequence[str], timeout: Optional[float] = None) -> str:
        """Run a vendor CLI command and return its stripped stdout.

        Args:
            args: Command and arguments, e.g. ``["aws", "bedrock", ...]``
            timeout: Seconds before the process is killed

        Raises:
            DiscoveryFailedError: If the CLI is missing, fails or times out
        """
        timeout = self.default_timeout if timeout is None else timeout
        command = " ".join(args[:3])
        try:
            completed = subprocess.run(list(args), capture_output=True, text=True, timeout=timeout, check=True)
        except FileNotFoundError as e:
            raise DiscoveryFailedError(f"{args[0]} CLI is not installed", self.provider_id) from e
        except subprocess.TimeoutExpired as e:
            raise DiscoveryFailedError(f"{command} timed out after {timeout}s", self.provider_id) from e
        except subprocess.CalledProcessError as e:
            raise DiscoveryFailedError(f"{command} exited with status {e.returncode}", self.provider_id) from e
        return completed.stdout.strip()

    def run_cli_json(self, args: Sequence[str], timeout: Optional[float] = None) -> Any:
        """Run a vendor CLI command and decode the JSON it prints.

        Raises:
            DiscoveryFailedError: As :meth:`run_cli`, or when stdout is not JSON
        """
        output = self.run_cli(args, timeout=timeout)
        try:
            return json.loads(output)
        except ValueError as e:
            raise DiscoveryFailedError(f"{' '.join(args[:3])} printed invalid JSON", self.provider_id) from e

    def make_card(self, id: str, **fields: Any) -> ModelCard:
        """Build a card for this provider, filling unset fields with defaults.

        The origin provider defaults to the serving provider; aggregators pass
        an explicit ``origin_provider``.
        """
        fields.setdefault("provider", self.provider_id)
        if fields.get("origin_provider") is None:
            fields["origin_provider"] = fields["provider"]
        fields.setdefault("discovered_at", time.time())
        fields.setdefault("source", "api")
        return ModelCard(id=id, **fields)


def api_token(credential: CredentialResult) -> Optional[str]:
    """The key or token a discoverer should send, if any."""
    return credential.token
