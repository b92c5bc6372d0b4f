"""Supabase JWT authentication for FastAPI.

Validates access tokens issued by Supabase Auth. Asymmetric tokens
(ES256/RS256) are checked against the project's JWKS; HS* tokens against the
shared JWT secret.
"""

import logging
import time
from typing import Any

import httpx
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from racebook.core.config import settings
from racebook.core.logging_config import bind_user
from racebook.models.accounts import UserContext

logger = logging.getLogger(__name__)

# auto_error=False so missing credentials become our own 401
security = HTTPBearer(auto_error=False)

ASYMMETRIC_ALGORITHMS = ("ES256", "ES384", "ES512", "RS256", "RS384", "RS512")
HMAC_ALGORITHMS = ["HS256", "HS384", "HS512"]
AUDIENCE = "authenticated"

_jwks_cache: dict[str, Any] | None = None
_jwks_cache_time: float = 0.0
_JWKS_CACHE_TTL = 3600  # 1 hour


def _jwks_url() -> str | None:
    if not settings.supabase_url:
        return None
    return f"{settings.supabase_url.rstrip('/')}/auth/v1/.well-known/jwks.json"


def _fetch_jwks() -> dict[str, Any] | None:
    """Fetch the project's JWKS, cached for an hour; stale cache on failure."""
    global _jwks_cache, _jwks_cache_time

    now = time.time()
    if _jwks_cache is not None and (now - _jwks_cache_time) < _JWKS_CACHE_TTL:
        return _jwks_cache
    url = _jwks_url()
    if not url:
        return None

    try:
        with httpx.Client(timeout=10.0) as client:
            response = client.get(url)
            response.raise_for_status()
            _jwks_cache = response.json()
            _jwks_cache_time = now
            logger.info(f"Fetched JWKS from {url}")
    except httpx.HTTPError as e:
        logger.warning(f"Failed to fetch JWKS: {e}")
    return _jwks_cache


def _signing_key(kid: str | None, jwks: dict[str, Any]) -> dict[str, Any] | None:
    if not kid:
        return None
    for key in jwks.get("keys", []):
        if key.get("kid") == kid:
            return key  # type: ignore[no-any-return]
    logger.warning(f"No matching key found for kid: {kid}")
    return None


def decode_token(token: str) -> dict[str, Any]:
    """Verify a Supabase access token and return its claims.

    Raises:
        JWTError: the token is malformed, expired or fails every available check.
    """
    header = jwt.get_unverified_header(token)
    alg = header.get("alg", "")

    if alg in ASYMMETRIC_ALGORITHMS:
        jwks = _fetch_jwks()
        key = _signing_key(header.get("kid"), jwks) if jwks else None
        if key:
            payload: dict[str, Any] = jwt.decode(token, key, algorithms=[alg], audience=AUDIENCE)
            return payload

    if settings.supabase_jwt_secret:
        hmac_payload: dict[str, Any] = jwt.decode(
            token, settings.supabase_jwt_secret, algorithms=HMAC_ALGORITHMS, audience=AUDIENCE
        )
        return hmac_payload

    raise JWTError("No valid verification method available")


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> dict[str, Any]:
    """Validated JWT claims of the caller; 401 when missing or invalid."""
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        payload = decode_token(credentials.credentials)
    except JWTError as e:
        logger.warning(f"JWT validation failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    logger.debug(f"Authenticated user: {payload.get('sub')}")
    return payload


async def get_user_context(
    user: dict[str, Any] = Depends(get_current_user),
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> UserContext:
    """The caller as an explicit context, carrying the token for row-level security."""
    context = UserContext(
        user_id=str(user.get("sub", "")),
        email=user.get("email"),
        access_token=credentials.credentials if credentials else None,
    )
    bind_user(context.user_id)
    return context
