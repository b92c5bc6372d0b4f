"""Tests for registration, sign-in and session lookups."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from racebook.core.config import settings
from racebook.core.exceptions import AuthError, MutationError, ValidationError
from racebook.models.accounts import RegistrationRequest
from racebook.services.accounts import AccountService, validate_registration


def make_form(**overrides) -> RegistrationRequest:
    data = {
        "full_name": "Jane Punter",
        "email": "jane@example.com",
        "password": "Gallop1!ng",
        "confirm_password": "Gallop1!ng",
        "country": "GB",
        "telegram_username": "",
        "phone_number": "",
    }
    data.update(overrides)
    return RegistrationRequest(**data)


def make_client(signup: dict | None = None) -> MagicMock:
    client = MagicMock()
    client.service_token = "service-key"
    client.sign_up = AsyncMock(
        return_value=signup if signup is not None else {"user": {"id": "user-1"}}
    )
    client.insert = AsyncMock()
    client.sign_in_with_password = AsyncMock()
    client.sign_out = AsyncMock(return_value=None)
    client.get_user = AsyncMock()
    return client


def inserted_tables(client: MagicMock) -> list[str]:
    return [call.args[0] for call in client.insert.call_args_list]


class TestValidateRegistration:
    """Tests for validate_registration()."""

    def test_valid_form(self):
        assert validate_registration(make_form()) == {}

    def test_every_field_reported(self):
        """All broken rules are collected in one pass."""
        errors = validate_registration(
            make_form(full_name=" ", email="", password="", confirm_password="x", country="")
        )
        assert errors == {
            "full_name": "Full name is required",
            "email": "Email is required",
            "password": "Password is required",
            "confirm_password": "Passwords do not match",
            "country": "Please select your country",
        }

    def test_invalid_email(self):
        errors = validate_registration(make_form(email="jane.example.com"))
        assert errors["email"] == "Please enter a valid email address"

    def test_short_password(self):
        errors = validate_registration(make_form(password="Ab1!", confirm_password="Ab1!"))
        assert errors["password"] == "Password must be at least 8 characters"

    def test_weak_password(self):
        errors = validate_registration(
            make_form(password="abcdefghij", confirm_password="abcdefghij")
        )
        assert errors["password"] == "Password is too weak"

    def test_medium_threshold_applies(self):
        """An 8-character pair match is weak at the default threshold of 10."""
        form = make_form(password="abcdefg1", confirm_password="abcdefg1")
        assert "password" in validate_registration(form, medium_min_length=10)
        assert "password" not in validate_registration(form, medium_min_length=8)


class TestRegister:
    """Tests for AccountService.register()."""

    async def test_invalid_form_sends_nothing(self):
        client = make_client()
        service = AccountService(client)

        with pytest.raises(ValidationError) as exc_info:
            await service.register(make_form(country=""))

        assert exc_info.value.fields == {"country": "Please select your country"}
        client.sign_up.assert_not_awaited()
        client.insert.assert_not_awaited()

    async def test_full_provisioning(self):
        """Profile, bankroll and settings are created in that order."""
        client = make_client()
        client.insert.side_effect = [[{"id": "profile-1"}], [{"id": 42}], [{"id": "settings-1"}]]
        service = AccountService(client)

        result = await service.register(make_form())

        assert result.user_id == "user-1"
        assert result.bankroll_id == "42"
        assert result.settings_created is True
        assert result.warnings == []
        assert inserted_tables(client) == [
            settings.profiles_table,
            settings.bankrolls_table,
            settings.user_settings_table,
        ]
        settings_row = client.insert.call_args_list[2].args[1]
        assert settings_row["default_bankroll_id"] == "42"
        assert settings_row["default_stake"] == settings.default_stake
        assert settings_row["preferred_odds_format"] == "decimal"

    async def test_signup_metadata(self):
        client = make_client()
        client.insert.return_value = [{"id": "row"}]
        service = AccountService(client)

        await service.register(make_form(telegram_username="@jane"))

        metadata = client.sign_up.call_args.kwargs["metadata"]
        assert metadata == {
            "full_name": "Jane Punter",
            "country": "GB",
            "telegram_username": "@jane",
            "phone_number": None,
        }

    async def test_bankroll_failure_skips_settings(self):
        """Without a bankroll there is nothing for the settings row to point at."""
        client = make_client()
        client.insert.side_effect = [[{"id": "profile-1"}], MutationError("insert failed")]
        service = AccountService(client)

        result = await service.register(make_form())

        assert result.bankroll_id is None
        assert result.settings_created is False
        assert result.warnings == ["Default bankroll could not be created"]
        assert inserted_tables(client) == [settings.profiles_table, settings.bankrolls_table]

    async def test_settings_failure_is_a_warning(self):
        client = make_client()
        client.insert.side_effect = [
            [{"id": "profile-1"}],
            [{"id": "bankroll-1"}],
            MutationError("insert failed"),
        ]
        service = AccountService(client)

        result = await service.register(make_form())

        assert result.bankroll_id == "bankroll-1"
        assert result.settings_created is False
        assert result.warnings == ["Default settings could not be created"]

    async def test_profile_failure_is_raised(self):
        client = make_client()
        client.insert.side_effect = MutationError("duplicate key")
        service = AccountService(client)

        with pytest.raises(MutationError) as exc_info:
            await service.register(make_form())

        assert exc_info.value.message == "Failed to create user profile"
        assert client.insert.await_count == 1

    async def test_signup_session_token_used_for_writes(self):
        client = make_client({"user": {"id": "user-1"}, "access_token": "user-token"})
        client.insert.return_value = [{"id": "row"}]
        service = AccountService(client)

        await service.register(make_form())

        tokens = {call.kwargs["token"] for call in client.insert.call_args_list}
        assert tokens == {"user-token"}

    async def test_service_token_without_session(self):
        client = make_client()
        client.insert.return_value = [{"id": "row"}]
        service = AccountService(client)

        await service.register(make_form())

        assert client.insert.call_args_list[0].kwargs["token"] == "service-key"

    async def test_signup_without_user_id(self):
        client = make_client({"user": None})
        service = AccountService(client)

        with pytest.raises(AuthError):
            await service.register(make_form())


class TestLogin:
    """Tests for AccountService.login() and friends."""

    async def test_login_returns_session_with_redirect(self):
        client = make_client()
        client.sign_in_with_password.return_value = {
            "access_token": "access",
            "refresh_token": "refresh",
            "expires_in": 3600,
            "user": {"id": "user-1", "email": "jane@example.com"},
        }
        service = AccountService(client)

        session = await service.login(" jane@example.com ", "secret")

        client.sign_in_with_password.assert_awaited_once_with("jane@example.com", "secret")
        assert session.access_token == "access"
        assert session.user_id == "user-1"
        assert session.redirect_to == settings.dashboard_path

    async def test_login_error_passes_through(self):
        client = make_client()
        client.sign_in_with_password.side_effect = AuthError("Invalid login credentials")
        service = AccountService(client)

        with pytest.raises(AuthError, match="Invalid login credentials"):
            await service.login("jane@example.com", "wrong")

    async def test_login_without_token(self):
        client = make_client()
        client.sign_in_with_password.return_value = {"user": {"id": "user-1"}}
        service = AccountService(client)

        with pytest.raises(AuthError):
            await service.login("jane@example.com", "secret")

    async def test_current_user_reads_metadata(self):
        client = make_client()
        client.get_user.return_value = {
            "id": "user-1",
            "email": "jane@example.com",
            "user_metadata": {"full_name": "Jane Punter", "country": "IE"},
        }
        service = AccountService(client)

        user = await service.current_user("access")

        assert user.full_name == "Jane Punter"
        assert user.country == "IE"

    async def test_logout(self):
        client = make_client()
        service = AccountService(client)

        await service.logout("access")

        client.sign_out.assert_awaited_once_with("access")
