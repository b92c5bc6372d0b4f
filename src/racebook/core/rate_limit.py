"""Rate limiting for the API.

Authenticated requests are bucketed per user (JWT ``sub``), anonymous ones
per client IP. Credential endpoints get a much stricter limit.
"""

import base64
import json
import logging
import re
from typing import Any

from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request

from racebook.core.config import settings

logger = logging.getLogger(__name__)


def parse_redis_url(raw_url: str) -> str:
    """Normalize a Redis URL, unwrapping a pasted ``redis-cli`` command."""
    if not raw_url:
        return ""

    url_match = re.search(r"(rediss?://[^\s]+)", raw_url)
    url = url_match.group(1) if url_match else raw_url

    if "--tls" in raw_url and url.startswith("redis://"):
        url = url.replace("redis://", "rediss://", 1)

    return url


def _jwt_subject(token: str) -> str | None:
    """Read ``sub`` from a JWT without verifying it.

    Only used to pick a rate limit bucket; verification happens in the
    auth dependencies.
    """
    parts = token.split(".")
    if len(parts) != 3:
        return None
    payload_b64 = parts[1] + "=" * (-len(parts[1]) % 4)
    try:
        payload: Any = json.loads(base64.urlsafe_b64decode(payload_b64))
    except (ValueError, TypeError):
        return None
    if not isinstance(payload, dict):
        return None
    sub = payload.get("sub")
    return str(sub) if sub else None


def get_rate_limit_key(request: Request) -> str:
    """Use ``user:{sub}`` for bearer requests, the client IP otherwise."""
    auth_header = request.headers.get("authorization", "")
    if auth_header.startswith("Bearer "):
        subject = _jwt_subject(auth_header[7:])
        if subject:
            return f"user:{subject}"
    return get_remote_address(request)


STORAGE_URI = parse_redis_url(settings.redis_url) or "memory://"

if settings.is_production and STORAGE_URI == "memory://":
    logger.warning("REDIS_URL is not set - rate limits are tracked per worker")

limiter = Limiter(
    key_func=get_rate_limit_key,
    default_limits=["100/minute"],
    storage_uri=STORAGE_URI,
    enabled=settings.rate_limit_enabled,
)

RATE_LIMITS = {
    "default": "100/minute",
    "auth": "10/minute",
    "bets": "60/minute",
}
