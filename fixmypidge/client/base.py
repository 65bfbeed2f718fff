"""Async HTTP client for the FixMyPidge API."""

import logging
from typing import Any

import httpx

from fixmypidge.core.exceptions import (
    AuthorizationError,
    DependencyError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def _detail(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and isinstance(body.get("detail"), str):
        return body["detail"]
    return None


def raise_for_api_error(response: httpx.Response) -> None:
    """Translate an error response into the domain error taxonomy."""
    status = response.status_code
    if status < 400:
        return
    if status in (401, 403):
        raise AuthorizationError()
    if status == 404:
        raise NotFoundError(_detail(response))
    if status in (400, 409, 413, 422):
        raise ValidationError(_detail(response))
    raise DependencyError(_detail(response) or f"API returned {status}")


class ApiClient:
    """Thin wrapper around httpx.AsyncClient carrying the session token.

    Usage:
        async with ApiClient("http://localhost:8000", token=token) as api:
            response = await api.request("GET", "/cases")
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize client.

        Args:
            base_url: API base URL (e.g., http://localhost:8000)
            token: Session JWT sent as a bearer token
            timeout: Request timeout in seconds (default: 30.0)
            transport: Optional transport (tests use httpx.ASGITransport)
        """
        self.base_url = base_url.rstrip("/")
        self.token = token
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
        )

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Send a request; errors are raised as domain errors.

        Raises:
            DependencyError: Network failure or 5xx
            ValidationError / AuthorizationError / NotFoundError: 4xx
        """
        headers = {**self._headers(), **kwargs.pop("headers", {})}
        try:
            response = await self._client.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("API request %s %s failed (%s)", method, path, type(exc).__name__)
            raise DependencyError("API unreachable") from exc
        raise_for_api_error(response)
        return response

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
