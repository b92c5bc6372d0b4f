"""Pytest configuration and fixtures for API integration tests."""

import os

os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")

from collections.abc import Iterator  # noqa: E402
from datetime import UTC, datetime  # noqa: E402
from typing import Any  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from racebook.api.deps import get_account_service, get_bet_store  # noqa: E402
from racebook.api.main import app  # noqa: E402
from racebook.auth.supabase_auth import get_current_user, get_user_context  # noqa: E402
from racebook.core.exceptions import BetNotFoundError  # noqa: E402
from racebook.models.accounts import UserContext  # noqa: E402
from racebook.models.bets import Bet, BetCreate, BetView, SortOrder  # noqa: E402
from racebook.services.bet_list import matches_view  # noqa: E402

# Mock user data for testing (matches JWT payload structure)
MOCK_USER: dict[str, Any] = {
    "sub": "test-user-123",
    "email": "test@example.com",
    "aud": "authenticated",
    "role": "authenticated",
    "user_metadata": {"full_name": "Test User", "country": "GB"},
    "iat": int(datetime.now(UTC).timestamp()),
    "exp": int(datetime.now(UTC).timestamp()) + 3600,
}

MOCK_CONTEXT = UserContext(
    user_id=MOCK_USER["sub"],
    email=MOCK_USER["email"],
    access_token="test-jwt-token",
)


def make_bet_row(**overrides: Any) -> dict[str, Any]:
    """A ``racing_bets`` row as Supabase returns it."""
    row: dict[str, Any] = {
        "id": "bet-1",
        "user_id": MOCK_CONTEXT.user_id,
        "track_name": "cheltenham",
        "race_number": 3,
        "horse_name": "desert orchid",
        "race_date": "2026-03-14",
        "scheduled_race_time": "2026-03-14T15:30:00+00:00",
        "bet_type": "win",
        "stake": 10.0,
        "odds": 4.5,
        "each_way": False,
        "status": "pending",
        "bookmaker": "Bet365",
        "returns": None,
        "profit_loss": None,
        "created_at": "2026-03-10T09:00:00+00:00",
        "horses": None,
    }
    row.update(overrides)
    return row


class FakeBetStore:
    """In-memory stand-in for ``BetStore`` with the same ownership rules."""

    def __init__(self, rows: list[dict[str, Any]] | None = None) -> None:
        self.rows = [dict(row) for row in rows or []]
        self.deleted: list[str] = []
        self.fail_with: Exception | None = None

    def _find(self, user: UserContext, bet_id: str) -> dict[str, Any]:
        for row in self.rows:
            if str(row["id"]) == bet_id and row["user_id"] == user.user_id:
                return row
        raise BetNotFoundError(bet_id)

    async def list_bets(
        self,
        user: UserContext,
        view: BetView = BetView.ALL,
        sort: SortOrder = SortOrder.DESC,
    ) -> list[dict[str, Any]]:
        if self.fail_with is not None:
            raise self.fail_with
        rows = [
            row
            for row in self.rows
            if row["user_id"] == user.user_id and matches_view(row.get("status"), view)
        ]
        return sorted(
            rows, key=lambda row: row.get("created_at") or "", reverse=sort is SortOrder.DESC
        )

    async def get_bet(self, user: UserContext, bet_id: str) -> Bet:
        return Bet.model_validate(self._find(user, bet_id))

    async def create_bet(self, user: UserContext, bet: BetCreate) -> Bet:
        row = bet.model_dump(exclude_none=True)
        row.update(
            id=f"bet-{len(self.rows) + 1}",
            user_id=user.user_id,
            status="pending",
            returns=None,
            profit_loss=None,
            created_at=datetime.now(UTC).isoformat(),
        )
        self.rows.append(row)
        return Bet.model_validate(row)

    async def update_bet(self, user: UserContext, bet_id: str, values: dict[str, Any]) -> Bet:
        row = self._find(user, bet_id)
        row.update(values)
        return Bet.model_validate(row)

    async def delete_bet(self, user: UserContext, bet_id: str) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        row = self._find(user, bet_id)
        self.rows.remove(row)
        self.deleted.append(bet_id)


def get_mock_user() -> dict[str, Any]:
    """Override for get_current_user dependency."""
    return MOCK_USER


def get_mock_context() -> UserContext:
    """Override for get_user_context dependency."""
    return MOCK_CONTEXT


@pytest.fixture
def bet_store() -> FakeBetStore:
    """A store holding one pending and one settled bet of the mock user."""
    return FakeBetStore(
        [
            make_bet_row(),
            make_bet_row(
                id="bet-2",
                horse_name="red rum",
                track_name="aintree",
                status="won",
                stake=20.0,
                odds=3.0,
                returns=60.0,
                profit_loss=40.0,
                created_at="2026-03-11T09:00:00+00:00",
            ),
            make_bet_row(id="bet-other", user_id="someone-else", horse_name="arkle"),
        ]
    )


@pytest.fixture
def account_service() -> MagicMock:
    """Account service with every Supabase-facing call mocked."""
    service = MagicMock()
    service.register = AsyncMock()
    service.login = AsyncMock()
    service.logout = AsyncMock(return_value=None)
    service.current_user = AsyncMock()
    return service


@pytest.fixture
def client(bet_store: FakeBetStore, account_service: MagicMock) -> Iterator[TestClient]:
    """Create a test client with mocked auth and in-memory services."""
    app.dependency_overrides[get_current_user] = get_mock_user
    app.dependency_overrides[get_user_context] = get_mock_context
    app.dependency_overrides[get_bet_store] = lambda: bet_store
    app.dependency_overrides[get_account_service] = lambda: account_service

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def client_no_auth(account_service: MagicMock) -> Iterator[TestClient]:
    """Create a test client without auth override (for 401 tests)."""
    app.dependency_overrides.clear()
    app.dependency_overrides[get_account_service] = lambda: account_service

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> dict[str, str]:
    """Return mock authorization headers."""
    return {"Authorization": "Bearer test-jwt-token"}
