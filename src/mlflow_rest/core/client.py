"""Connection object for the MLflow tracking REST API."""

from __future__ import annotations

import logging
from dataclasses import replace
from enum import Enum
from typing import TYPE_CHECKING, Any

import httpx

from .errors import MLFlowConnectionError, error_from_response

if TYPE_CHECKING:
    from .config import TrackingConfig

logger = logging.getLogger(__name__)


def encode(value: Any) -> Any:
    """Convert a request value into its JSON representation."""
    if isinstance(value, Enum):
        return value.value
    if hasattr(value, "to_dict"):
        return encode(value.to_dict())
    if isinstance(value, dict):
        return {k: encode(v) for k, v in value.items() if v is not None}
    if isinstance(value, (list, tuple)):
        return [encode(v) for v in value]
    return value


def _encode_query(value: Any) -> Any:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return [_encode_query(v) for v in value]
    return encode(value)


class MLFlow:
    """
    Connection to an MLflow tracking server.

    Holds the base URI, API version and credentials, and performs the HTTP
    calls used by the service functions. Credentials are only passed
    through to the server.

    Usage:
        with MLFlow("http://localhost:5000") as mlf:
            experiment_id = create_experiment(mlf, "my-experiment")
    """

    def __init__(
        self,
        tracking_uri: str | None = None,
        *,
        config: TrackingConfig | None = None,
        headers: dict[str, str] | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the connection."""
        if config is None:
            from .config import get_settings

            config = get_settings().tracking
        if tracking_uri:
            config = replace(config, uri=tracking_uri)
        if not config.uri:
            raise ValueError(
                "Tracking URI not set. "
                "Set MLFLOW_TRACKING_URI environment variable or configure in settings."
            )

        self.config = config
        # Header names are case-insensitive
        self.headers = httpx.Headers(headers or {})
        self._client = httpx.Client(
            timeout=config.timeout,
            verify=config.verify_ssl,
            auth=self._build_auth(),
            headers=self._build_headers(),
            transport=transport,
        )

    def _build_auth(self) -> httpx.Auth | None:
        if "Authorization" in self.headers:
            return None
        if self.config.username and self.config.password:
            return httpx.BasicAuth(self.config.username, self.config.password)
        return None

    def _build_headers(self) -> httpx.Headers:
        headers = httpx.Headers({"Accept": "application/json"})
        if (
            self.config.token
            and "Authorization" not in self.headers
            and not (self.config.username and self.config.password)
        ):
            headers["Authorization"] = f"Bearer {self.config.token}"
        headers.update(self.headers)
        return headers

    @property
    def api_root(self) -> str:
        """Base of the REST API, e.g. ``http://localhost:5000/api``."""
        root = self.config.uri.rstrip("/")
        if not root.endswith("/api"):
            root = f"{root}/api"
        return root

    @property
    def api_version(self) -> str:
        """REST API version."""
        return self.config.api_version

    def uri(self, endpoint: str) -> str:
        """Full URL for an endpoint such as ``experiments/get``."""
        return f"{self.api_root}/{self.api_version}/mlflow/{endpoint.lstrip('/')}"

    def request(
        self,
        method: str,
        endpoint: str,
        *,
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Send a request and return the decoded JSON response."""
        url = self.uri(endpoint)
        query = None
        if params is not None:
            query = {k: _encode_query(v) for k, v in params.items() if v is not None}
        payload = encode(body) if body is not None else None

        try:
            response = self._client.request(method, url, params=query, json=payload)
        except httpx.RequestError as e:
            raise MLFlowConnectionError(
                f"Could not reach tracking server at {self.config.uri}: {e}"
            ) from e

        logger.debug("%s %s -> %d", method, endpoint, response.status_code)

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise error_from_response(response, endpoint) from e

        if not response.content:
            return {}
        return response.json()

    def get(self, endpoint: str, **params: Any) -> dict[str, Any]:
        """GET with query parameters."""
        return self.request("GET", endpoint, params=params)

    def post(self, endpoint: str, **body: Any) -> dict[str, Any]:
        """POST with a JSON body."""
        return self.request("POST", endpoint, body=body)

    def patch(self, endpoint: str, **body: Any) -> dict[str, Any]:
        """PATCH with a JSON body."""
        return self.request("PATCH", endpoint, body=body)

    def delete(self, endpoint: str, **body: Any) -> dict[str, Any]:
        """DELETE with a JSON body."""
        return self.request("DELETE", endpoint, body=body)

    def close(self) -> None:
        """Close HTTP client."""
        self._client.close()

    def __enter__(self) -> "MLFlow":
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"MLFlow(api_root={self.api_root!r}, api_version={self.api_version!r})"


# Global client instance
_client: MLFlow | None = None


def get_client() -> MLFlow:
    """Get or create global client from settings."""
    global _client
    if _client is None:
        _client = MLFlow()
    return _client
