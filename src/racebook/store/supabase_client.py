"""Thin async client for the Supabase REST (PostgREST) and Auth (GoTrue) APIs.

Talks HTTP directly through the shared httpx client rather than the
supabase-py SDK; only the primitives the application needs are exposed.
"""

import logging
from typing import Any

import httpx

from racebook.core.config import Settings, settings
from racebook.core.exceptions import (
    AuthError,
    ConfigurationError,
    MutationError,
    QueryError,
    StoreError,
)
from racebook.core.http_client import get_http_client
from racebook.store.query import Filter, Query

logger = logging.getLogger(__name__)


def _error_message(response: httpx.Response) -> str:
    """Pull the human-readable message out of a Supabase error body."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("message", "msg", "error_description", "error"):
            value = body.get(key)
            if value:
                return str(value)
    text = response.text.strip()
    return text or f"HTTP {response.status_code}"


class SupabaseClient:
    """Supabase project client bound to one URL and API key pair."""

    def __init__(
        self,
        base_url: str,
        anon_key: str,
        service_role_key: str = "",
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.anon_key = anon_key
        self.service_role_key = service_role_key
        self._http = http

    @classmethod
    def from_settings(cls, config: Settings = settings) -> "SupabaseClient":
        return cls(
            config.supabase_url,
            config.supabase_anon_key,
            config.supabase_service_role_key,
        )

    @property
    def service_token(self) -> str:
        """Token for writes made outside a user session."""
        return self.service_role_key or self.anon_key

    def _client(self) -> httpx.AsyncClient:
        return self._http or get_http_client()

    def _url(self, path: str) -> str:
        if not self.base_url or not self.anon_key:
            raise ConfigurationError("Supabase is not configured")
        return f"{self.base_url}{path}"

    def _headers(self, token: str | None = None, prefer: str | None = None) -> dict[str, str]:
        headers = {
            "apikey": self.anon_key,
            "Authorization": f"Bearer {token or self.anon_key}",
            "Content-Type": "application/json",
        }
        if prefer:
            headers["Prefer"] = prefer
        return headers

    # ------------------------------------------------------------------
    # REST
    # ------------------------------------------------------------------

    async def _rest(
        self,
        method: str,
        table: str,
        error_cls: type[StoreError],
        *,
        token: str | None,
        params: list[tuple[str, str]] | None = None,
        json: Any = None,
        prefer: str | None = None,
    ) -> list[dict[str, Any]]:
        url = self._url(f"/rest/v1/{table}")
        try:
            response = await self._client().request(
                method,
                url,
                params=params,
                json=json,
                headers=self._headers(token, prefer),
            )
        except httpx.HTTPError as e:
            logger.error(f"Supabase {method} {table} failed: {e}")
            raise error_cls(f"Could not reach the database: {e}") from e

        if response.is_error:
            message = _error_message(response)
            logger.warning(f"Supabase {method} {table} -> {response.status_code}: {message}")
            raise error_cls(message, {"status": response.status_code})

        if not response.content:
            return []
        data = response.json()
        return data if isinstance(data, list) else [data]

    async def select(self, table: str, query: Query, *, token: str | None) -> list[dict[str, Any]]:
        """Run a filtered, ordered select."""
        return await self._rest("GET", table, QueryError, token=token, params=query.params())

    async def insert(
        self, table: str, row: dict[str, Any], *, token: str | None
    ) -> list[dict[str, Any]]:
        """Insert one row and return the stored representation."""
        return await self._rest(
            "POST", table, MutationError, token=token, json=row, prefer="return=representation"
        )

    async def update(
        self,
        table: str,
        values: dict[str, Any],
        filters: list[Filter],
        *,
        token: str | None,
    ) -> list[dict[str, Any]]:
        """Patch every row matching ``filters``; returns the updated rows."""
        return await self._rest(
            "PATCH",
            table,
            MutationError,
            token=token,
            params=[f.to_param() for f in filters],
            json=values,
            prefer="return=representation",
        )

    async def delete(
        self, table: str, filters: list[Filter], *, token: str | None
    ) -> list[dict[str, Any]]:
        """Delete every row matching ``filters``; returns the deleted rows."""
        return await self._rest(
            "DELETE",
            table,
            MutationError,
            token=token,
            params=[f.to_param() for f in filters],
            prefer="return=representation",
        )

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    async def _auth(
        self,
        method: str,
        path: str,
        *,
        token: str | None = None,
        params: dict[str, str] | None = None,
        json: Any = None,
    ) -> dict[str, Any]:
        url = self._url(f"/auth/v1/{path}")
        try:
            response = await self._client().request(
                method, url, params=params, json=json, headers=self._headers(token)
            )
        except httpx.HTTPError as e:
            logger.error(f"Supabase auth {path} failed: {e}")
            raise AuthError(f"Could not reach the auth service: {e}") from e

        if response.is_error:
            raise AuthError(_error_message(response), {"status": response.status_code})

        if not response.content:
            return {}
        result: dict[str, Any] = response.json()
        return result

    async def sign_up(
        self, email: str, password: str, metadata: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """Create an auth identity; ``metadata`` lands in ``user_metadata``."""
        return await self._auth(
            "POST",
            "signup",
            json={"email": email, "password": password, "data": metadata or {}},
        )

    async def sign_in_with_password(self, email: str, password: str) -> dict[str, Any]:
        """Exchange credentials for a session (access + refresh token)."""
        return await self._auth(
            "POST",
            "token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )

    async def get_user(self, token: str) -> dict[str, Any]:
        """Return the user behind an access token."""
        return await self._auth("GET", "user", token=token)

    async def sign_out(self, token: str) -> None:
        """Revoke the session behind an access token."""
        await self._auth("POST", "logout", token=token)
