"""Bet rows in the ``racing_bets`` table.

Every read and write is constrained by the owner's user id in addition to
whatever else identifies the row.
"""

import logging
from datetime import UTC, datetime
from typing import Any

from racebook.core.config import settings
from racebook.core.exceptions import BetNotFoundError, MutationError
from racebook.models.accounts import UserContext
from racebook.models.bets import Bet, BetCreate, BetView, SortOrder
from racebook.store.query import Filter, Query, eq, ilike, not_ilike
from racebook.store.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)

PENDING_PATTERN = "%pending%"


def view_filters(view: BetView) -> list[Filter]:
    """Status constraint for a list view; ``settled`` is the complement of ``pending``."""
    if view is BetView.PENDING:
        return [ilike("status", PENDING_PATTERN)]
    if view is BetView.SETTLED:
        return [not_ilike("status", PENDING_PATTERN)]
    return []


def owned(user_id: str, bet_id: str) -> list[Filter]:
    """Filters addressing one bet of one user."""
    return [eq("id", bet_id), eq("user_id", user_id)]


class BetStore:
    """CRUD over a user's bets."""

    def __init__(self, client: SupabaseClient, table: str | None = None) -> None:
        self.client = client
        self.table = table or settings.bets_table

    async def list_bets(
        self,
        user: UserContext,
        view: BetView = BetView.ALL,
        sort: SortOrder = SortOrder.DESC,
    ) -> list[dict[str, Any]]:
        """Raw rows for a view, ordered by creation date."""
        query = (
            Query()
            .where(eq("user_id", user.user_id), *view_filters(view))
            .order_by("created_at", ascending=sort is SortOrder.ASC)
        )
        rows = await self.client.select(self.table, query, token=user.access_token)
        logger.debug(f"Fetched {len(rows)} bets for {user.user_id} (view={view}, sort={sort})")
        return rows

    async def get_bet(self, user: UserContext, bet_id: str) -> Bet:
        query = Query().where(*owned(user.user_id, bet_id))
        rows = await self.client.select(self.table, query, token=user.access_token)
        if not rows:
            raise BetNotFoundError(bet_id)
        return Bet.model_validate(rows[0])

    async def create_bet(self, user: UserContext, bet: BetCreate) -> Bet:
        """Insert a new pending bet owned by ``user``."""
        row: dict[str, Any] = bet.model_dump(exclude_none=True)
        row.update(
            user_id=user.user_id,
            status="pending",
            returns=None,
            profit_loss=None,
        )
        rows = await self.client.insert(self.table, row, token=user.access_token)
        if not rows:
            raise MutationError("Bet insert returned no row")
        logger.info(f"Created bet {rows[0].get('id')} for user {user.user_id}")
        return Bet.model_validate(rows[0])

    async def update_bet(self, user: UserContext, bet_id: str, values: dict[str, Any]) -> Bet:
        """Patch one owned bet. Raises ``BetNotFoundError`` when nothing matched."""
        values = {**values, "updated_at": datetime.now(UTC).isoformat()}
        rows = await self.client.update(
            self.table, values, owned(user.user_id, bet_id), token=user.access_token
        )
        if not rows:
            raise BetNotFoundError(bet_id)
        return Bet.model_validate(rows[0])

    async def delete_bet(self, user: UserContext, bet_id: str) -> None:
        """Delete one owned bet. Raises ``BetNotFoundError`` when nothing matched."""
        rows = await self.client.delete(
            self.table, owned(user.user_id, bet_id), token=user.access_token
        )
        if not rows:
            raise BetNotFoundError(bet_id)
        logger.info(f"Deleted bet {bet_id} for user {user.user_id}")
