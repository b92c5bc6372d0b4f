"""Shared httpx client for the Supabase REST and Auth APIs.

Usage:
    from racebook.core.http_client import get_http_client

    client = get_http_client()
    response = await client.get(f"{base_url}/rest/v1/racing_bets")
"""

import logging

import httpx

from racebook.core.config import settings

logger = logging.getLogger(__name__)

_client: httpx.AsyncClient | None = None


def get_http_client() -> httpx.AsyncClient:
    """Get the shared async HTTP client, creating it lazily."""
    global _client
    if _client is None or _client.is_closed:
        _client = httpx.AsyncClient(
            timeout=httpx.Timeout(settings.http_timeout, connect=5.0),
            limits=httpx.Limits(
                max_connections=50,
                max_keepalive_connections=20,
                keepalive_expiry=30,
            ),
        )
        logger.info("Created shared HTTP client with connection pooling")
    return _client


async def close_http_client() -> None:
    """Close the shared HTTP client. Call during app shutdown."""
    global _client
    if _client and not _client.is_closed:
        await _client.aclose()
        _client = None
        logger.info("Closed shared HTTP client")
