"""
HTTP Clients for CLI.

Provides the synchronous HTTP client used to talk to the app platform API
and the database service API. Requests authenticate with the configured
API key and carry a pgops User-Agent header.

Errors are not retried here: transport failures and non-2xx responses
surface as httpx.HTTPError to the calling command. Bodies that are not
the expected JSON raise ApiResponseError.
"""

import hashlib
from typing import Any
from urllib.parse import urlsplit

import httpx
from pydantic import ValidationError

from pgops import __version__
from pgops.cli.models import DatabaseStatus
from pgops.core.config import (
    get_database_service_endpoint,
    get_platform_endpoint,
    get_settings,
)
from pgops.core.exceptions import ApiResponseError
from pgops.core.logging import get_logger, log_with_source

logger = get_logger(__name__)


class APIClient:
    """
    HTTP client for one remote API.

    Features:
    - Basic auth with the API key as password
    - User-Agent header identifying pgops
    - Structured logging of requests/responses
    - Non-2xx responses raised as httpx.HTTPStatusError

    Usage:
        client = APIClient("https://api.example.com", api_key="...")
        response = client.get("/apps/myapp")
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ):
        """
        Initialize the API client.

        Args:
            base_url: API base URL.
            api_key: Key sent as the basic-auth password.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport, used by tests.
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._api_key = api_key
        self._transport = transport
        self._client: httpx.Client | None = None

    def _get_client(self) -> httpx.Client:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.Client(
                base_url=self.base_url,
                timeout=self.timeout,
                auth=("", self._api_key),
                headers={
                    "Accept": "application/json",
                    "User-Agent": f"pgops/{__version__}",
                },
                transport=self._transport,
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            self._client.close()
            self._client = None

    def __enter__(self) -> "APIClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """
        Make an HTTP request.

        Args:
            method: HTTP method (GET, POST, etc.)
            path: API path (e.g., /apps/myapp/config-vars)
            **kwargs: Additional arguments for httpx

        Returns:
            httpx.Response with a 2xx status

        Raises:
            httpx.HTTPError: On transport failure or non-2xx status
        """
        client = self._get_client()

        log_with_source(logger, "cli", "debug", "API request", method=method, path=path)

        try:
            response = client.request(method, path, **kwargs)
            log_with_source(
                logger,
                "cli",
                "debug",
                "API response",
                method=method,
                path=path,
                status_code=response.status_code,
            )
            response.raise_for_status()
            return response

        except httpx.HTTPError as e:
            log_with_source(
                logger,
                "cli",
                "warning",
                "API request failed",
                method=method,
                path=path,
                error=str(e),
            )
            raise

    def get(self, path: str, **kwargs: Any) -> httpx.Response:
        """Make a GET request."""
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs: Any) -> httpx.Response:
        """Make a POST request."""
        return self.request("POST", path, **kwargs)

    def put(self, path: str, **kwargs: Any) -> httpx.Response:
        """Make a PUT request."""
        return self.request("PUT", path, **kwargs)

    def patch(self, path: str, **kwargs: Any) -> httpx.Response:
        """Make a PATCH request."""
        return self.request("PATCH", path, **kwargs)


def _json_object(response: httpx.Response) -> dict[str, Any]:
    """Decode a JSON object body or raise ApiResponseError."""
    try:
        body = response.json()
    except ValueError as e:
        raise ApiResponseError(
            f"Unexpected response from {response.request.url.path}: body is not JSON"
        ) from e
    if not isinstance(body, dict):
        raise ApiResponseError(
            f"Unexpected response from {response.request.url.path}: expected a JSON object"
        )
    return body


class PlatformClient:
    """Operations on an app in the platform API."""

    def __init__(self, api: APIClient):
        self.api = api

    def config_vars(self, app: str) -> dict[str, str]:
        """Return the app's config vars."""
        return _json_object(self.api.get(f"/apps/{app}/config-vars"))

    def set_config_vars(self, app: str, values: dict[str, str]) -> dict[str, str]:
        """Update config vars and return the resulting set."""
        return _json_object(self.api.patch(f"/apps/{app}/config-vars", json=values))

    def app_info(self, app: str) -> dict[str, Any]:
        return _json_object(self.api.get(f"/apps/{app}"))

    def reset_shared_database(self, app: str) -> None:
        self.api.post(f"/apps/{app}/database/reset")

    def close(self) -> None:
        self.api.close()


def resource_id(url: str) -> str:
    """
    Derive the database service resource id from a connection URL.

    The id is the SHA-256 of the URL's "user:password" pair, so the
    connection URL itself never leaves the machine.
    """
    parts = urlsplit(url)
    credentials = f"{parts.username or ''}:{parts.password or ''}"
    return hashlib.sha256(credentials.encode("utf-8")).hexdigest()


class DatabaseServiceClient:
    """
    Operations on one database in the database service API.

    The client is keyed by the database connection URL.
    """

    def __init__(self, api: APIClient, url: str):
        self.api = api
        self.url = url
        self.path = f"/client/databases/{resource_id(url)}"

    def get_database(self) -> DatabaseStatus:
        """Fetch a fresh status snapshot."""
        body = _json_object(self.api.get(self.path))
        try:
            return DatabaseStatus.model_validate(body)
        except ValidationError as e:
            raise ApiResponseError("Unexpected database status from the database service") from e

    def reset(self) -> None:
        self.api.post(f"{self.path}/reset")

    def unfollow(self) -> None:
        self.api.put(f"{self.path}/unfollow")

    def ingress(self) -> None:
        self.api.put(f"{self.path}/ingress")

    def close(self) -> None:
        self.api.close()


def get_platform_client() -> PlatformClient:
    """Create a platform client from application.yaml and settings."""
    base_url, timeout = get_platform_endpoint()
    api_key = get_settings().require_api_key()
    return PlatformClient(APIClient(base_url, api_key, timeout=timeout))


def get_database_client(url: str) -> DatabaseServiceClient:
    """Create a database service client for the database at ``url``."""
    base_url, timeout = get_database_service_endpoint()
    api_key = get_settings().require_api_key()
    return DatabaseServiceClient(APIClient(base_url, api_key, timeout=timeout), url)
