"""
Core HTTP client for the Carthooks API.

Handles authentication, request construction, envelope decoding and error
normalization. One request per call, no retries.
"""

import dataclasses
import http.client
import json
import logging
import os
import urllib.error
import urllib.request
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from carthooks.core.errors import BuildError, DomainError, HTTPStatusError, TransportError
from carthooks.core.types import Envelope

logger = logging.getLogger(__name__)

# Configuration
DEFAULT_BASE_URL = "https://api.carthooks.com"
BASE_URL_ENV = "CARTHOOKS_API_URL"
ACCESS_TOKEN_ENV = "CARTHOOKS_ACCESS_TOKEN"

# Bytes of a non-OK response body kept on HTTPStatusError
MAX_ERROR_BODY = 2048


@dataclass(frozen=True)
class ClientConfig:
    """Connection settings for the API client."""

    base_url: str = DEFAULT_BASE_URL
    access_token: str = ""
    # None leaves the transport's default in place
    timeout: float | None = None
    # Only these statuses count as success
    ok_statuses: tuple[int, ...] = (200,)

    def __post_init__(self) -> None:
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        **overrides: Any,
    ) -> "ClientConfig":
        """
        Build a config from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)
            **overrides: Explicit values; None entries are ignored

        Returns:
            ClientConfig with CARTHOOKS_API_URL / CARTHOOKS_ACCESS_TOKEN applied

        """
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {
            "base_url": env.get(BASE_URL_ENV) or DEFAULT_BASE_URL,
            "access_token": env.get(ACCESS_TOKEN_ENV, ""),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


class APIClient:
    """
    Low-level HTTP client for the Carthooks API.

    Handles:
    - Bearer authentication (omitted when no token is configured)
    - HTTP methods (GET, POST, PUT, DELETE)
    - Envelope decoding and error normalization
    """

    def __init__(self, config: ClientConfig | None = None):
        self._config = config or ClientConfig()

    @property
    def config(self) -> ClientConfig:
        """Get the active configuration."""
        return self._config

    @property
    def base_url(self) -> str:
        return self._config.base_url

    def configure(self, **changes: Any) -> ClientConfig:
        """Replace configuration fields, e.g. ``configure(access_token="...")``."""
        self._config = dataclasses.replace(self._config, **changes)
        return self._config

    def _build_url(self, path: str) -> str:
        """Build full URL from path."""
        if path.startswith(("http://", "https://")):
            return path
        if not path.startswith("/"):
            path = f"/{path}"
        return f"{self.base_url}{path}"

    def _build_request(
        self,
        method: str,
        url: str,
        body: Mapping[str, Any] | None,
    ) -> urllib.request.Request:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self._config.access_token:
            headers["Authorization"] = f"Bearer {self._config.access_token}"

        data = None
        if body is not None:
            try:
                data = json.dumps(body).encode("utf-8")
            except (TypeError, ValueError) as e:
                raise BuildError(f"Cannot encode request body: {e}") from e

        try:
            return urllib.request.Request(url, data=data, headers=headers, method=method)
        except ValueError as e:
            raise BuildError(f"Invalid request URL {url!r}: {e}") from e

    def _send(self, req: urllib.request.Request) -> tuple[int, bytes]:
        """Execute the request and return (status, raw body)."""
        kwargs: dict[str, Any] = {}
        if self._config.timeout is not None:
            kwargs["timeout"] = self._config.timeout

        try:
            with urllib.request.urlopen(req, **kwargs) as response:
                return response.status, response.read()

        except urllib.error.HTTPError as e:
            # urllib raises for 4xx/5xx; the status is judged by the caller
            try:
                return e.code, e.read()
            except (OSError, http.client.HTTPException) as read_err:
                raise TransportError(f"Connection error reading {e.code} response: {read_err!r}") from read_err
            finally:
                e.close()

        except urllib.error.URLError as e:
            raise TransportError(f"Connection error: {e.reason}") from e

        except TimeoutError as e:
            raise TransportError(f"Request timed out after {self._config.timeout} seconds") from e

        except ValueError as e:
            # http.client rejects URLs with control characters or bad ports here
            raise BuildError(f"Invalid request URL {req.full_url!r}: {e}") from e

        except OSError as e:
            raise TransportError(f"Connection error: {e}") from e

        except http.client.HTTPException as e:
            raise TransportError(f"Malformed HTTP response: {e!r}") from e

    def request(
        self,
        method: str,
        path: str,
        body: Mapping[str, Any] | None = None,
    ) -> Envelope:
        """
        Make an HTTP request to the API.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE)
            path: API path (e.g., /v1/uploads/token) or absolute URL
            body: Request body, serialized as JSON when not None

        Returns:
            Decoded response envelope

        Raises:
            BuildError: If the request cannot be constructed
            TransportError: On network failure
            HTTPStatusError: If the status is not an OK status
            DecodeError: If the body is not a valid envelope
            DomainError: If the envelope carries an error

        """
        url = self._build_url(path)
        req = self._build_request(method, url, body)

        logger.debug("%s %s", method, url)
        status, raw = self._send(req)
        logger.debug("%s %s -> %s", method, url, status)

        if status not in self._config.ok_statuses:
            raise HTTPStatusError(status, raw[:MAX_ERROR_BODY].decode("utf-8", errors="replace"))

        envelope = Envelope.from_json(raw)
        if envelope.error is not None:
            logger.debug("%s %s -> error key=%r trace_id=%s", method, url, envelope.error.key, envelope.trace_id)
            raise DomainError(
                envelope.error.message,
                type=envelope.error.type,
                key=envelope.error.key,
                trace_id=envelope.trace_id,
                status=status,
            )
        return envelope

    # =========================================================================
    # HTTP Methods
    # =========================================================================

    def get(self, path: str) -> Envelope:
        """Make a GET request."""
        return self.request("GET", path)

    def post(self, path: str, body: Mapping[str, Any] | None = None) -> Envelope:
        """Make a POST request."""
        return self.request("POST", path, body)

    def put(self, path: str, body: Mapping[str, Any] | None = None) -> Envelope:
        """Make a PUT request."""
        return self.request("PUT", path, body)

    def delete(self, path: str) -> Envelope:
        """Make a DELETE request."""
        return self.request("DELETE", path)
