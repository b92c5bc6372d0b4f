"""Bet list state: fetch by view and sort, refine by search, re-fetch on change.

The controller walks ``uninitialized -> loading -> (error | empty | populated)``.
Search is applied to the last fetched rows without another query; view and
sort changes, refreshes and retries always re-query. Every fetch carries a
sequence number and a response that is not from the latest fetch is dropped,
so a slow earlier query can never overwrite a newer one.
"""

import logging
from collections.abc import Awaitable, Callable
from enum import StrEnum
from typing import Any

import pydantic

from racebook.core.exceptions import RacebookError
from racebook.models.accounts import UserContext
from racebook.models.bets import Bet, BetView, SortOrder, parse_timestamp
from racebook.services.bet_card import BetCardPresenter, EditCallback
from racebook.store.bets import PENDING_PATTERN, BetStore

logger = logging.getLogger(__name__)

NO_USER_MESSAGE = "No user found. Please log in."
UNREADABLE_ROWS_MESSAGE = "Some bets could not be read."

DATE_FIELDS = ("scheduled_race_time", "race_date")

IdentityResolver = Callable[[], Awaitable[UserContext | None]]


class ListState(StrEnum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    ERROR = "error"
    EMPTY = "empty"
    POPULATED = "populated"


def sanitize_bet_row(row: dict[str, Any]) -> dict[str, Any]:
    """Null out date fields that don't parse, so formatting never fails later."""
    sanitized = dict(row)
    for field in DATE_FIELDS:
        value = sanitized.get(field)
        if value and parse_timestamp(value) is None:
            logger.warning(f"Invalid {field} found: {value}")
            sanitized[field] = None
    return sanitized


def matches_view(status: str | None, view: BetView) -> bool:
    """In-memory equivalent of the store's view filter."""
    if view is BetView.ALL:
        return True
    pending = PENDING_PATTERN.strip("%") in (status or "").lower()
    return pending if view is BetView.PENDING else not pending


def apply_search(bets: list[Bet], search: str) -> list[Bet]:
    """Case-insensitive substring match on horse name; empty search keeps all."""
    if not search:
        return list(bets)
    needle = search.lower()
    return [bet for bet in bets if bet.horse_name and needle in bet.horse_name.lower()]


class BetListController:
    """Holds one user's bet list and the filters applied to it."""

    def __init__(
        self,
        store: BetStore,
        resolve_identity: IdentityResolver,
        *,
        view: BetView = BetView.ALL,
        sort: SortOrder = SortOrder.DESC,
        search: str = "",
        on_edit: EditCallback | None = None,
    ) -> None:
        self.store = store
        self.resolve_identity = resolve_identity
        self.view = view
        self.sort = sort
        self.search = search
        self.on_edit = on_edit

        self.state = ListState.UNINITIALIZED
        self.error: str | None = None
        self.user: UserContext | None = None
        self.all_bets: list[Bet] = []
        self.refresh_counter = 0
        self._latest_fetch = 0

    @property
    def display_bets(self) -> list[Bet]:
        return apply_search(self.all_bets, self.search)

    async def mount(self) -> None:
        """Resolve the signed-in user and run the first fetch."""
        self.state = ListState.LOADING
        self.error = None
        try:
            self.user = await self.resolve_identity()
        except RacebookError as e:
            logger.error(f"Error fetching user: {e.message}")
            self._fail("Failed to get user.")
            return

        if self.user is None:
            self._fail(NO_USER_MESSAGE)
            return
        await self._fetch()

    async def _fetch(self) -> None:
        if self.user is None:
            return
        self._latest_fetch += 1
        ticket = self._latest_fetch
        self.state = ListState.LOADING
        self.error = None

        try:
            rows = await self.store.list_bets(self.user, self.view, self.sort)
        except RacebookError as e:
            if ticket != self._latest_fetch:
                return
            logger.error(f"Error fetching bets: {e.message}")
            self.all_bets = []
            self._fail(e.message)
            return

        if ticket != self._latest_fetch:
            logger.debug(f"Discarding stale bet list response #{ticket}")
            return

        try:
            self.all_bets = [Bet.model_validate(sanitize_bet_row(row)) for row in rows]
        except pydantic.ValidationError as e:
            logger.error(f"Unreadable bet row for {self.user.user_id}: {e}")
            self.all_bets = []
            self._fail(UNREADABLE_ROWS_MESSAGE)
            return
        self._settle_state()

    def _fail(self, message: str) -> None:
        self.state = ListState.ERROR
        self.error = message

    def _settle_state(self) -> None:
        if self.state is ListState.ERROR:
            return
        self.state = ListState.POPULATED if self.display_bets else ListState.EMPTY

    async def refresh(self) -> None:
        """Re-fetch everything; called after any mutation."""
        self.refresh_counter += 1
        await self._fetch()

    async def retry(self) -> None:
        """Re-issue the last query after an error."""
        if self.user is None:
            await self.mount()
            return
        await self.refresh()

    async def set_view(self, view: BetView) -> None:
        if view == self.view:
            return
        self.view = view
        await self._fetch()

    async def toggle_sort(self) -> None:
        self.sort = self.sort.toggled()
        await self._fetch()

    def set_search(self, text: str) -> None:
        self.search = text
        if self.state in (ListState.EMPTY, ListState.POPULATED):
            self._settle_state()

    def clear_search(self) -> None:
        self.set_search("")

    def cards(self) -> list[BetCardPresenter]:
        """Presenters for the visible bets, wired to refresh this list."""
        if self.user is None:
            return []
        return [
            BetCardPresenter(
                bet,
                self.user,
                self.store,
                on_edit=self.on_edit,
                on_refresh=self.refresh,
            )
            for bet in self.display_bets
        ]
