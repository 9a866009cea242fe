"""
Shared HTTP client pool.

All upstream requests go through one process-wide ``httpx.AsyncClient`` so
TCP/TLS connections to REST Countries are reused across invocations (HTTP/2
where the server offers it). The pool only reuses connections; responses are
never cached.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from .. import __version__
from ..config import get_settings

logger = logging.getLogger(__name__)


class HTTPClientPool:
    """Singleton owner of the shared upstream client."""

    _instance: Optional[HTTPClientPool] = None
    _client: Optional[httpx.AsyncClient] = None

    def __new__(cls) -> HTTPClientPool:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if HTTPClientPool._client is None:
            HTTPClientPool._client = self._build_client()

    @staticmethod
    def _build_client() -> httpx.AsyncClient:
        settings = get_settings()

        client = httpx.AsyncClient(
            limits=httpx.Limits(
                max_connections=settings.upstream_max_connections,
                max_keepalive_connections=settings.upstream_max_keepalive,
                keepalive_expiry=5.0,
            ),
            # Per-request timeouts set by providers override the read budget
            timeout=httpx.Timeout(settings.upstream_timeout, connect=10.0, pool=5.0),
            http2=True,
            follow_redirects=True,
            headers={
                "Accept": "application/json",
                "User-Agent": f"{settings.agent_name}/{__version__}",
            },
        )

        logger.info(
            "HTTP client pool ready: max_connections=%d, max_keepalive=%d, timeout=%ss",
            settings.upstream_max_connections,
            settings.upstream_max_keepalive,
            settings.upstream_timeout,
        )
        return client

    @classmethod
    def get_client(cls) -> httpx.AsyncClient:
        """Return the shared client, creating it on first use."""
        cls()
        return HTTPClientPool._client

    @classmethod
    async def close(cls) -> None:
        client, HTTPClientPool._client = HTTPClientPool._client, None
        if client is not None:
            await client.aclose()
            logger.info("HTTP client pool closed")

    @classmethod
    def get_stats(cls) -> Dict[str, Any]:
        """Describe the pool for the health endpoint. Never creates a client."""
        client = HTTPClientPool._client
        if client is None:
            return {"status": "not_initialized"}

        return {
            "status": "closed" if client.is_closed else "active",
            "timeout": {
                "connect": client.timeout.connect,
                "read": client.timeout.read,
                "pool": client.timeout.pool,
            },
        }


def get_http_client() -> httpx.AsyncClient:
    """Shared client for upstream calls. Providers must not build their own."""
    return HTTPClientPool.get_client()


async def close_http_pool() -> None:
    """Close the shared client (application shutdown)."""
    await HTTPClientPool.close()
