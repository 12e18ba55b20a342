"""
Base HTTP adapter and error taxonomy for the remote services.

Adapters raise these errors; domain services catch them at the call site and
turn them into state (an omitted country, a converter error).
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)


# ============================================================================
# Errors
# ============================================================================


class ServiceError(Exception):
    """Base error for remote service calls."""

    def __init__(self, message: str, service: str = "", status_code: Optional[int] = None):
        super().__init__(message)
        self.service = service
        self.status_code = status_code


class LookupFailure(ServiceError):
    """A country lookup failed or returned no candidate."""


class ConversionUnsupported(ServiceError):
    """The rate service rejected the currency pair or omitted the target."""


class TransportFailure(ServiceError):
    """Network-level failure (connect, timeout, unreadable body)."""


# ============================================================================
# Base client
# ============================================================================


class JSONServiceClient:
    """Thin async JSON client shared by both adapters.

    Owns an ``httpx.AsyncClient`` unless one is injected; injected clients are
    left open on ``aclose()``.
    """

    SERVICE_NAME = "service"

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        user_agent: str = "atlas/1.0",
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=timeout,
            headers={"User-Agent": user_agent, "Accept": "application/json"},
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> httpx.Response:
        """Issue one GET. Transport problems become ``TransportFailure``."""
        url = f"{self.base_url}/{path.lstrip('/')}"
        logger.debug(f"{self.SERVICE_NAME}: GET {url} params={params}")
        try:
            response = await self._client.get(url, params=params, timeout=self.timeout)
        except httpx.HTTPError as e:
            raise TransportFailure(
                f"{self.SERVICE_NAME} request failed: {e}",
                service=self.SERVICE_NAME,
            ) from e
        logger.debug(f"{self.SERVICE_NAME}: {response.status_code} for {url}")
        return response

    def _json(self, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise TransportFailure(
                f"{self.SERVICE_NAME} returned an unreadable body",
                service=self.SERVICE_NAME,
                status_code=response.status_code,
            ) from e
