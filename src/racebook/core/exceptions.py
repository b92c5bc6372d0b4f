"""Custom exceptions for the application."""

from typing import Any


class RacebookError(Exception):
    """Base exception for the application."""

    status_code: int = 400

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(RacebookError):
    """Client input rejected before anything reaches the backend.

    ``details["fields"]`` maps each offending field to its message.
    """

    status_code = 422

    def __init__(self, fields: dict[str, str], message: str = "Validation failed"):
        super().__init__(message, {"fields": fields})
        self.fields = fields


class AuthError(RacebookError):
    """Credential or session error reported by Supabase Auth."""

    status_code = 401


class StoreError(RacebookError):
    """Error talking to the Supabase REST API."""

    status_code = 502


class QueryError(StoreError):
    """A read query failed; the caller may retry it manually."""

    pass


class MutationError(StoreError):
    """An insert, update or delete failed."""

    pass


class BetNotFoundError(RacebookError):
    """No bet with this id belongs to the requesting user."""

    status_code = 404

    def __init__(self, bet_id: str):
        super().__init__("Bet not found", {"bet_id": bet_id})


class BetStateError(RacebookError):
    """Operation not allowed for the bet's current status."""

    status_code = 409


class ConfigurationError(RacebookError):
    """Required backend settings are missing."""

    status_code = 503
