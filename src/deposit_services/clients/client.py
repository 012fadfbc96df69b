"""HTTP access to repository servers.

Deposit status lives on the repository: a SWORD server publishes one Atom
statement per deposit, usually behind the same basic auth credentials used
to deposit. Client holds the connection settings for one server and turns
HTTP failures into the exceptions of deposit_services.clients.exceptions.
"""

import logging
from abc import ABC, abstractmethod
from time import sleep
from typing import Any

import httpx

from .exceptions import (
    APIError,
    AuthenticationError,
    ConnectionError,
    NotFoundError,
    RateLimitError,
)

logger = logging.getLogger(__name__)

TRANSIENT_ERRORS = (httpx.ConnectError, httpx.TimeoutException)


class Client(ABC):
    """Base class for clients of a repository server.

    The httpx.Client is created on first use and closed with the client, so
    a Client can be configured up front and used as a context manager around
    the requests for one status check.

    Config keys:
        base_url (required): Scheme and host of the repository server
        timeout: Request timeout in seconds (default: 30)
        retry_attempts: Attempts per request when the server cannot be
                        reached (default: 3)
        retry_delay: Seconds to wait between attempts (default: 1)
        headers: Headers sent with every request, e.g. the User-Agent the
                 repository expects
        username, password: Repository credentials, sent as basic auth
    """

    def __init__(self, config: dict):
        if "base_url" not in config:
            raise ValueError("config must include 'base_url'")

        self._config = config
        self._client: httpx.Client | None = None

    @property
    def base_url(self) -> str:
        return str(self._config["base_url"])

    @property
    def timeout(self) -> float:
        return float(self._config.get("timeout", 30))

    @property
    def retry_attempts(self) -> int:
        return int(self._config.get("retry_attempts", 3))

    @property
    def retry_delay(self) -> float:
        return float(self._config.get("retry_delay", 1))

    @property
    def headers(self) -> dict[str, str]:
        return dict(self._config.get("headers", {}))

    @property
    def auth(self) -> httpx.BasicAuth | None:
        username = self._config.get("username")
        if not username:
            return None
        return httpx.BasicAuth(username, self._config.get("password") or "")

    @property
    def client(self) -> httpx.Client:
        if self._client is None:
            # Statement URLs may redirect to the repository's storage
            self._client = httpx.Client(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=self.headers,
                auth=self.auth,
                follow_redirects=True,
            )
        return self._client

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def _handle_response(self, response: httpx.Response) -> httpx.Response:
        """Raise the exception matching an unsuccessful response.

        Raises:
            AuthenticationError: The credentials were refused (401, 403)
            NotFoundError: The repository has no such document (404)
            RateLimitError: The repository is throttling requests (429)
            APIError: Any other non-2xx response
        """
        if response.is_success:
            return response

        status_code = response.status_code
        if status_code in (401, 403):
            raise AuthenticationError(
                f"Not authorized to read {response.url}", status_code=status_code
            )
        if status_code == 404:
            raise NotFoundError(f"Resource not found: {response.url}")
        if status_code == 429:
            raise RateLimitError(f"Rate limit exceeded: {response.url}")
        raise APIError(
            f"API error {status_code}: {response.url}",
            status_code=status_code,
        )

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        """Send a request, retrying while the server cannot be reached.

        Error responses are not retried.

        Args:
            method: HTTP method
            path: Path relative to base_url, or an absolute URL
            **kwargs: Passed on to httpx.Client.request

        Raises:
            ConnectionError: If every attempt failed to reach the server
            APIError: If the server returns a non-2xx response
        """
        last_exception: Exception | None = None

        for attempt in range(1, self.retry_attempts + 1):
            try:
                response = self.client.request(method, path, **kwargs)
            except TRANSIENT_ERRORS as e:
                last_exception = e
                logger.warning(
                    f"{type(e).__name__} reaching {self.base_url} "
                    f"(attempt {attempt}/{self.retry_attempts}): {e}"
                )
                if attempt < self.retry_attempts:
                    sleep(self.retry_delay)
                continue
            return self._handle_response(response)

        msg = f"Connection failed after {self.retry_attempts} attempts"
        raise ConnectionError(msg) from last_exception

    def get(self, path: str, **kwargs) -> httpx.Response:
        return self._request("GET", path, **kwargs)

    @abstractmethod
    def fetch(self, *args, **kwargs) -> Any:
        """Fetch one document from the repository server."""
        pass
