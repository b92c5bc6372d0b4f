"""Authentication module for Supabase JWT validation."""

from racebook.auth.dependencies import CurrentUser
from racebook.auth.responses import (
    ACCOUNT_RESPONSES,
    AUTH_RESPONSES,
    BET_RESPONSES,
    AppErrorResponse,
    HTTPErrorResponse,
)
from racebook.auth.supabase_auth import get_current_user, get_user_context

__all__ = [
    "get_current_user",
    "get_user_context",
    "CurrentUser",
    "HTTPErrorResponse",
    "AppErrorResponse",
    "AUTH_RESPONSES",
    "BET_RESPONSES",
    "ACCOUNT_RESPONSES",
]
