"""Account lifecycle: sign-up with first-run provisioning, sign-in, sign-out.

Registration is a best-effort sequence, not a transaction:

1. create the auth identity
2. insert the profile (failure is surfaced; the identity is left behind)
3. insert the default bankroll (failure is logged only)
4. insert the default settings, pointing at the bankroll (only if 3 succeeded)
"""

import logging
import re
from typing import Any

from racebook.core.config import Settings, settings
from racebook.core.exceptions import AuthError, MutationError, StoreError, ValidationError
from racebook.models.accounts import (
    PasswordStrength,
    RegistrationRequest,
    RegistrationResult,
    Session,
    SessionUser,
)
from racebook.services.passwords import MIN_PASSWORD_LENGTH, classify_strength
from racebook.store.accounts import AccountStore
from racebook.store.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"\S+@\S+\.\S+")


def validate_registration(
    form: RegistrationRequest, *, medium_min_length: int | None = None
) -> dict[str, str]:
    """Return field -> message for every rule the form breaks."""
    errors: dict[str, str] = {}

    if not form.full_name.strip():
        errors["full_name"] = "Full name is required"

    if not form.email.strip():
        errors["email"] = "Email is required"
    elif not EMAIL_PATTERN.search(form.email):
        errors["email"] = "Please enter a valid email address"

    if not form.password:
        errors["password"] = "Password is required"
    elif len(form.password) < MIN_PASSWORD_LENGTH:
        errors["password"] = f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
    elif (
        classify_strength(form.password, medium_min_length=medium_min_length)
        is PasswordStrength.WEAK
    ):
        errors["password"] = "Password is too weak"

    if form.password != form.confirm_password:
        errors["confirm_password"] = "Passwords do not match"

    if not form.country.strip():
        errors["country"] = "Please select your country"

    return errors


class AccountService:
    """Sign-up, sign-in and session lookups against Supabase Auth."""

    def __init__(
        self,
        client: SupabaseClient,
        store: AccountStore | None = None,
        config: Settings = settings,
    ) -> None:
        self.client = client
        self.store = store or AccountStore(client, config)
        self.config = config

    async def register(self, form: RegistrationRequest) -> RegistrationResult:
        """Create an account and its default records.

        Raises:
            ValidationError: the form breaks a field rule; nothing was sent.
            AuthError: Supabase refused the sign-up.
            MutationError: the profile row could not be written.
        """
        errors = validate_registration(
            form, medium_min_length=self.config.password_medium_min_length
        )
        if errors:
            raise ValidationError(errors)

        email = form.email.strip()
        signup = await self.client.sign_up(
            email,
            form.password,
            metadata={
                "full_name": form.full_name.strip(),
                "country": form.country,
                "telegram_username": form.telegram_username or None,
                "phone_number": form.phone_number or None,
            },
        )
        user: dict[str, Any] = signup.get("user") or signup
        user_id = user.get("id")
        if not user_id:
            raise AuthError("Sign-up did not return a user")
        user_id = str(user_id)

        # Without email confirmation Supabase returns a session straight away.
        token = signup.get("access_token") or self.client.service_token

        try:
            await self.store.insert_profile(user_id, form, token=token)
        except StoreError as e:
            logger.error(f"Error creating user profile for {user_id}: {e.message}")
            raise MutationError(
                "Failed to create user profile", {"user_id": user_id, "reason": e.message}
            ) from e

        result = RegistrationResult(user_id=user_id, email=email)
        await self._provision_defaults(user_id, token, result)
        logger.info(f"Registered user {user_id}")
        return result

    async def _provision_defaults(
        self, user_id: str, token: str | None, result: RegistrationResult
    ) -> None:
        try:
            bankroll = await self.store.insert_bankroll(user_id, token=token)
        except StoreError as e:
            logger.error(f"Error creating default bankroll for {user_id}: {e.message}")
            result.warnings.append("Default bankroll could not be created")
            return

        bankroll_id = bankroll.get("id")
        if bankroll_id is None:
            logger.error(f"Default bankroll insert for {user_id} returned no id")
            result.warnings.append("Default bankroll could not be created")
            return
        result.bankroll_id = str(bankroll_id)

        try:
            await self.store.insert_settings(user_id, result.bankroll_id, token=token)
        except StoreError as e:
            logger.error(f"Error creating user settings for {user_id}: {e.message}")
            result.warnings.append("Default settings could not be created")
            return
        result.settings_created = True

    async def login(self, email: str, password: str) -> Session:
        """Sign in; the backend's error message is passed through unchanged."""
        payload = await self.client.sign_in_with_password(email.strip(), password)
        user = payload.get("user") or {}
        access_token = payload.get("access_token")
        if not access_token or not user.get("id"):
            raise AuthError("Failed to sign in. Please check your credentials.")

        return Session(
            access_token=access_token,
            refresh_token=payload.get("refresh_token"),
            token_type=payload.get("token_type", "bearer"),
            expires_in=payload.get("expires_in"),
            user_id=str(user["id"]),
            email=user.get("email"),
            redirect_to=self.config.dashboard_path,
        )

    async def logout(self, access_token: str) -> None:
        await self.client.sign_out(access_token)

    async def current_user(self, access_token: str) -> SessionUser:
        user = await self.client.get_user(access_token)
        metadata = user.get("user_metadata") or {}
        return SessionUser(
            id=str(user.get("id", "")),
            email=user.get("email"),
            full_name=metadata.get("full_name"),
            country=metadata.get("country"),
        )
