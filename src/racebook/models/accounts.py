"""Account, session and provisioning models."""

from dataclasses import dataclass
from enum import StrEnum

from pydantic import BaseModel, Field


class PasswordStrength(StrEnum):
    WEAK = "weak"
    MEDIUM = "medium"
    STRONG = "strong"


@dataclass(frozen=True)
class UserContext:
    """The authenticated caller, passed explicitly to every store call."""

    user_id: str
    email: str | None = None
    access_token: str | None = None


class RegistrationRequest(BaseModel):
    """Sign-up form. Field rules are enforced by the account service."""

    full_name: str = ""
    email: str = ""
    password: str = ""
    confirm_password: str = ""
    country: str = ""
    telegram_username: str | None = None
    phone_number: str | None = None


class RegistrationResult(BaseModel):
    user_id: str
    email: str
    bankroll_id: str | None = None
    settings_created: bool = False
    warnings: list[str] = Field(default_factory=list)
    message: str = "Account created! Please check your email for the confirmation link."


class LoginRequest(BaseModel):
    email: str
    password: str


class Session(BaseModel):
    """A signed-in session plus where the client should go next."""

    access_token: str
    refresh_token: str | None = None
    token_type: str = "bearer"
    expires_in: int | None = None
    user_id: str
    email: str | None = None
    redirect_to: str


class SessionUser(BaseModel):
    id: str
    email: str | None = None
    full_name: str | None = None
    country: str | None = None
