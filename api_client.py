"""Async HTTP client for the CV Tailor backend.

Single choke point for all backend calls: JSON headers, optional bearer
token, and uniform translation of HTTP failures into RequestError.
Transport failures (connection refused, DNS, timeout) propagate unchanged.
"""

import json
import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

ALLOWED_METHODS = ("GET", "POST", "PUT", "DELETE")


class RequestError(Exception):
    """Raised when the backend answers with a non-success status."""

    def __init__(self, message: str, status_code: int, payload: Any = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload


class ApiClient:
    """Wrapper for the backend REST API over a shared httpx.AsyncClient."""

    def __init__(
        self,
        base_url: str,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            base_url: Backend root, e.g. "http://localhost:8000".
            timeout: Request timeout in seconds. None keeps httpx's default.
            transport: Optional transport override (mock or ASGI in tests).
        """
        self.base_url = base_url.rstrip("/")
        kwargs: dict[str, Any] = {"base_url": self.base_url}
        if timeout is not None:
            kwargs["timeout"] = timeout
        if transport is not None:
            kwargs["transport"] = transport
        self._http = httpx.AsyncClient(**kwargs)

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def call(
        self,
        path: str,
        method: str = "GET",
        body: Any = None,
        token: str | None = None,
        params: dict | None = None,
    ) -> Any:
        """Perform a request and return the decoded JSON body.

        Args:
            path: Path relative to the base URL, e.g. "/skills/".
            method: One of GET, POST, PUT, DELETE.
            body: JSON-serializable payload, sent only when not None.
            token: Bearer token attached as the Authorization header.
            params: Query string parameters.

        Returns:
            Decoded JSON, or None for an empty success body.

        Raises:
            RequestError: On any status outside 2xx.
            httpx.TransportError: On network failure (not wrapped).
        """
        method = method.upper()
        if method not in ALLOWED_METHODS:
            raise ValueError(f"Unsupported method: {method!r}")

        headers = {"Accept": "application/json"}
        content = None
        if body is not None:
            headers["Content-Type"] = "application/json"
            content = json.dumps(body)
        if token:
            headers["Authorization"] = f"Bearer {token}"

        logger.debug("%s %s params=%s", method, path, params)
        response = await self._http.request(
            method, path, headers=headers, content=content, params=params
        )

        if not response.is_success:
            message, payload = error_message(response)
            logger.warning("%s %s failed: %s", method, path, message)
            raise RequestError(message, response.status_code, payload)

        if not response.content:
            return None
        return response.json()


def error_message(response: httpx.Response) -> tuple[str, Any]:
    """Extract a human-readable message from an error response.

    Returns:
        (message, parsed payload or None)
    """
    fallback = f"HTTP {response.status_code}: {response.reason_phrase}"
    try:
        payload = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return fallback, None

    detail = payload.get("detail") if isinstance(payload, dict) else None

    if isinstance(detail, str) and detail.strip():
        return detail, payload

    # FastAPI-style validation errors: [{"loc": [...], "msg": "...", ...}]
    if isinstance(detail, list):
        messages = [
            entry["msg"]
            for entry in detail
            if isinstance(entry, dict) and isinstance(entry.get("msg"), str)
        ]
        if messages:
            return "; ".join(messages), payload

    return fallback, payload
