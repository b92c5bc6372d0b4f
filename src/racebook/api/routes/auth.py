"""Account endpoints: register, login, logout, session, password strength."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import BaseModel

from racebook.api.deps import get_account_service
from racebook.auth import ACCOUNT_RESPONSES, AUTH_RESPONSES, CurrentUser
from racebook.core.rate_limit import RATE_LIMITS, limiter
from racebook.models.accounts import (
    LoginRequest,
    PasswordStrength,
    RegistrationRequest,
    RegistrationResult,
    Session,
    SessionUser,
)
from racebook.services.accounts import AccountService
from racebook.services.passwords import classify_strength

logger = logging.getLogger(__name__)

router = APIRouter()


class PasswordCheck(BaseModel):
    password: str


class PasswordStrengthResponse(BaseModel):
    strength: PasswordStrength


def _require_token(user: CurrentUser) -> str:
    if not user.access_token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user.access_token


@router.post(
    "/register",
    response_model=RegistrationResult,
    status_code=status.HTTP_201_CREATED,
    responses=ACCOUNT_RESPONSES,
)
@limiter.limit(RATE_LIMITS["auth"])
async def register(
    request: Request,
    form: RegistrationRequest,
    accounts: AccountService = Depends(get_account_service),
) -> RegistrationResult:
    """
    Create an account.

    Creates the Supabase identity and profile, then a default bankroll and
    settings. Failures of the last two are reported in ``warnings`` only.
    """
    return await accounts.register(form)


@router.post("/login", response_model=Session, responses=ACCOUNT_RESPONSES)
@limiter.limit(RATE_LIMITS["auth"])
async def login(
    request: Request,
    credentials: LoginRequest,
    accounts: AccountService = Depends(get_account_service),
) -> Session:
    """Sign in with email and password; ``redirect_to`` points at the dashboard."""
    return await accounts.login(credentials.email, credentials.password)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT, responses=AUTH_RESPONSES)
async def logout(
    user: CurrentUser,
    accounts: AccountService = Depends(get_account_service),
) -> None:
    """Revoke the current session."""
    await accounts.logout(_require_token(user))
    logger.info(f"User {user.user_id} signed out")


@router.get("/session", response_model=SessionUser, responses=AUTH_RESPONSES)
async def get_session(
    user: CurrentUser,
    accounts: AccountService = Depends(get_account_service),
) -> SessionUser:
    """The signed-in user as Supabase currently knows them."""
    return await accounts.current_user(_require_token(user))


@router.post("/password-strength", response_model=PasswordStrengthResponse)
async def password_strength(check: PasswordCheck) -> PasswordStrengthResponse:
    """Score a candidate password for the sign-up strength meter."""
    return PasswordStrengthResponse(strength=classify_strength(check.password))
