"""Error response models for OpenAPI documentation."""

from typing import Any

from pydantic import BaseModel


class HTTPErrorResponse(BaseModel):
    """FastAPI's ``HTTPException`` body."""

    detail: str


class AppErrorResponse(BaseModel):
    """Body rendered for application errors."""

    error: str
    message: str
    details: dict[str, Any] = {}


AUTH_RESPONSES: dict[int | str, dict[str, Any]] = {
    401: {
        "model": HTTPErrorResponse,
        "description": "Authentication required - missing or invalid token",
    },
}

BET_RESPONSES: dict[int | str, dict[str, Any]] = {
    **AUTH_RESPONSES,
    404: {"model": AppErrorResponse, "description": "Bet not found for this user"},
    409: {"model": AppErrorResponse, "description": "Bet is not pending"},
    502: {"model": AppErrorResponse, "description": "Database request failed"},
}

ACCOUNT_RESPONSES: dict[int | str, dict[str, Any]] = {
    401: {"model": AppErrorResponse, "description": "Rejected by Supabase Auth"},
    422: {"model": AppErrorResponse, "description": "Form validation failed"},
    502: {"model": AppErrorResponse, "description": "Profile could not be created"},
}
