"""Base provider class with common HTTP and error handling logic."""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional, Dict, Any
from urllib.parse import quote

import httpx

from ..exceptions import NotFoundError, UpstreamError
from ..services.http_pool import get_http_client

logger = logging.getLogger(__name__)


class BaseProvider(ABC):
    """Base class for upstream data providers.

    Provides common functionality:
    - Access to the shared HTTP client pool
    - Mapping of transport failures onto ``NotFoundError``/``UpstreamError``
    - Standardized provider identification

    Requests are attempted once. Retry policy, if any, belongs to the
    transport in front of the service.
    """

    DEFAULT_TIMEOUT = 30.0

    def __init__(self, base_url: str, timeout: float = DEFAULT_TIMEOUT):
        """Initialize base provider.

        Args:
            base_url: Root URL every request path is appended to
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the canonical provider name used in logs and error details."""
        pass

    def _url(self, *segments: str) -> str:
        """Join URL-encoded path segments onto the base URL."""
        path = "/".join(quote(segment.strip(), safe="") for segment in segments)
        return f"{self.base_url}/{path}"

    async def _get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET ``url`` and return the decoded JSON body.

        Raises:
            NotFoundError: upstream answered 404
            UpstreamError: any other non-success status, a transport failure,
                or a body that is not JSON
        """
        client = get_http_client()
        logger.debug(f"{self.provider_name}: GET {url} params={params}")

        try:
            response = await client.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 404:
                raise NotFoundError(
                    f"{self.provider_name} has no match for {url}",
                    provider=self.provider_name,
                ) from e
            logger.warning(f"{self.provider_name} returned HTTP {status} for {url}")
            raise UpstreamError(
                f"API error: {status}",
                provider=self.provider_name,
                upstream_status=status,
            ) from e
        except httpx.HTTPError as e:
            logger.warning(f"{self.provider_name} request failed for {url}: {e}")
            raise UpstreamError(
                f"Request to {self.provider_name} failed: {e}",
                provider=self.provider_name,
            ) from e

        return self._parse_json_safe(response)

    def _parse_json_safe(self, response: httpx.Response) -> Any:
        """Parse a JSON response, mapping decode failures to ``UpstreamError``."""
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(
                f"Failed to parse {self.provider_name} response: {e}",
                provider=self.provider_name,
            ) from e
