"""Profile, bankroll and settings rows created when an account is opened."""

import logging
from typing import Any

from racebook.core.config import Settings, settings
from racebook.models.accounts import RegistrationRequest
from racebook.store.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)


class AccountStore:
    """Inserts for the first-run account records."""

    def __init__(self, client: SupabaseClient, config: Settings = settings) -> None:
        self.client = client
        self.config = config

    async def insert_profile(
        self, user_id: str, form: RegistrationRequest, *, token: str | None
    ) -> dict[str, Any]:
        rows = await self.client.insert(
            self.config.profiles_table,
            {
                "user_id": user_id,
                "full_name": form.full_name.strip(),
                "email": form.email.strip(),
                "country": form.country,
                "telegram_username": form.telegram_username or None,
                "phone_number": form.phone_number or None,
            },
            token=token,
        )
        return rows[0] if rows else {}

    async def insert_bankroll(self, user_id: str, *, token: str | None) -> dict[str, Any]:
        """Create the default bankroll and return the stored row."""
        amount = self.config.default_bankroll_amount
        rows = await self.client.insert(
            self.config.bankrolls_table,
            {
                "user_id": user_id,
                "name": "Default Bankroll",
                "description": "Your default bankroll for tracking bets",
                "initial_amount": amount,
                "current_amount": amount,
                "currency": self.config.default_currency,
                "is_active": True,
            },
            token=token,
        )
        return rows[0] if rows else {}

    async def insert_settings(
        self, user_id: str, bankroll_id: str, *, token: str | None
    ) -> dict[str, Any]:
        rows = await self.client.insert(
            self.config.user_settings_table,
            {
                "user_id": user_id,
                "default_stake": self.config.default_stake,
                "default_bankroll_id": bankroll_id,
                "stake_currency": self.config.default_currency,
                "preferred_odds_format": self.config.default_odds_format,
                "ai_preferences": {"model": "default"},
            },
            token=token,
        )
        return rows[0] if rows else {}
