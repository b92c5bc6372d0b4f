"""Presentation of a single bet and the actions available on it."""

import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import BaseModel

from racebook.core.exceptions import BetStateError, MutationError, StoreError
from racebook.models.accounts import UserContext
from racebook.models.bets import Bet, BetHorse, BetOutcome, parse_timestamp
from racebook.services.classifier import classify, is_pending
from racebook.services.settlement import settle_amounts
from racebook.store.bets import BetStore

logger = logging.getLogger(__name__)

HORSE_NAME_MAX_LENGTH = 26

RefreshCallback = Callable[[], Awaitable[None] | None]
EditCallback = Callable[[Bet], Any]


def _title_case(name: str) -> str:
    parts = name.split("/")
    return " & ".join(
        " ".join(word[:1].upper() + word[1:].lower() for word in part.strip().split(" "))
        for part in parts
    )


def format_track_name(name: str | None) -> str:
    """Title-case a track name, joining ``/``-separated parts with ``&``."""
    if not name:
        return "Unknown Track"
    return _title_case(name)


def format_horse_name(name: str | None) -> str:
    """Like :func:`format_track_name`, truncated to fit the card header."""
    if not name:
        return "Unknown Horse"
    formatted = _title_case(name)
    if len(formatted) > HORSE_NAME_MAX_LENGTH:
        return f"{formatted[:HORSE_NAME_MAX_LENGTH - 3]}..."
    return formatted


def format_amount(amount: float) -> str:
    return f"{amount:,.2f}"


def format_signed_amount(amount: float) -> str:
    """``+`` for zero and gains; losses show their magnitude only."""
    prefix = "+" if amount >= 0 else ""
    return f"{prefix}{format_amount(abs(amount))}"


def format_race_time(value: str | None) -> str:
    """``h:mm AM/PM`` for a valid timestamp, empty string otherwise."""
    moment = parse_timestamp(value)
    if moment is None:
        return ""
    hour = moment.hour % 12 or 12
    meridiem = "AM" if moment.hour < 12 else "PM"
    return f"{hour}:{moment.minute:02d} {meridiem}"


class BetCardView(BaseModel):
    """What a bet card displays."""

    bet_id: str
    horse_name: str
    track_name: str
    race_time: str
    bet_type: str
    status_label: str
    color_token: str
    is_pending: bool
    stake: str
    odds: str
    bookmaker: str | None = None
    returns: str | None = None
    profit_loss: str | None = None
    is_profit: bool | None = None
    horses: list[BetHorse]
    bet: Bet


class BetCardPresenter:
    """Renders one bet and performs its delete/settle actions.

    Mutations go straight to the store scoped by bet id and owner; on success
    ``on_refresh`` is awaited so the owning list re-fetches.
    """

    def __init__(
        self,
        bet: Bet,
        user: UserContext,
        store: BetStore,
        on_edit: EditCallback | None = None,
        on_refresh: RefreshCallback | None = None,
    ) -> None:
        self.bet = bet
        self.user = user
        self.store = store
        self.on_edit = on_edit
        self.on_refresh = on_refresh

    def render(self) -> BetCardView:
        bet = self.bet
        status = classify(bet.status)
        pending = is_pending(bet.status)
        show_outcome = not pending and bet.profit_loss is not None

        return BetCardView(
            bet_id=bet.id,
            horse_name=format_horse_name(bet.horses[0].name if bet.horses else bet.horse_name),
            track_name=format_track_name(bet.track_name),
            race_time=format_race_time(bet.scheduled_race_time),
            bet_type=f"{bet.bet_type}{' (E/W)' if bet.each_way else ''}",
            status_label=status.display_label,
            color_token=status.color_token,
            is_pending=pending,
            stake=format_amount(bet.stake),
            odds=f"{bet.odds:.2f}",
            bookmaker=bet.bookmaker,
            returns=format_amount(bet.returns or 0.0) if show_outcome else None,
            profit_loss=format_signed_amount(bet.profit_loss) if show_outcome else None,
            is_profit=bet.profit_loss >= 0 if show_outcome else None,
            horses=bet.horses,
            bet=bet,
        )

    async def _refresh(self) -> None:
        if self.on_refresh is None:
            return
        result = self.on_refresh()
        if inspect.isawaitable(result):
            await result

    def edit(self) -> None:
        """Hand the bet to the caller's editor; nothing is written here."""
        if self.on_edit is not None:
            self.on_edit(self.bet)

    async def delete(self) -> None:
        """Delete the bet. On failure the row stays and no refresh happens."""
        try:
            await self.store.delete_bet(self.user, self.bet.id)
        except StoreError as e:
            logger.error(f"Error deleting bet {self.bet.id}: {e.message}")
            raise MutationError("Failed to delete bet", {"bet_id": self.bet.id}) from e
        await self._refresh()

    async def settle(self, outcome: BetOutcome, returns: float | None = None) -> Bet:
        """Mark a pending bet won, lost or void and record its returns."""
        if not is_pending(self.bet.status):
            raise BetStateError(
                "Only pending bets can be settled",
                {"bet_id": self.bet.id, "status": self.bet.status},
            )
        settled_returns, profit_loss = settle_amounts(
            self.bet.stake, self.bet.odds, outcome, returns
        )
        try:
            self.bet = await self.store.update_bet(
                self.user,
                self.bet.id,
                {"status": outcome.value, "returns": settled_returns, "profit_loss": profit_loss},
            )
        except StoreError as e:
            logger.error(f"Error settling bet {self.bet.id}: {e.message}")
            raise MutationError("Failed to settle bet", {"bet_id": self.bet.id}) from e
        await self._refresh()
        return self.bet
