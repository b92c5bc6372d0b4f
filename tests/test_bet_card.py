"""Tests for bet card formatting and actions."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from racebook.core.exceptions import BetStateError, MutationError, QueryError
from racebook.models.bets import Bet, BetOutcome
from racebook.services.bet_card import (
    BetCardPresenter,
    format_horse_name,
    format_race_time,
    format_signed_amount,
    format_track_name,
)
from tests.conftest import MOCK_CONTEXT, make_bet_row


def make_presenter(row: dict | None = None, **kwargs) -> tuple[BetCardPresenter, MagicMock]:
    store = MagicMock()
    store.delete_bet = AsyncMock(return_value=None)
    store.update_bet = AsyncMock()
    bet = Bet.model_validate(row or make_bet_row())
    return BetCardPresenter(bet, MOCK_CONTEXT, store, **kwargs), store


class TestFormatting:
    """Tests for the name, amount and time formatters."""

    def test_track_name_title_case(self):
        assert format_track_name("cheltenham") == "Cheltenham"
        assert format_track_name("KEMPTON park") == "Kempton Park"

    def test_track_name_slash_becomes_ampersand(self):
        assert format_track_name("newmarket/july course") == "Newmarket & July Course"

    def test_track_name_missing(self):
        assert format_track_name(None) == "Unknown Track"
        assert format_track_name("") == "Unknown Track"

    def test_horse_name_truncated(self):
        formatted = format_horse_name("the quick brown fox jumps over")
        assert formatted == "The Quick Brown Fox Jum..."
        assert len(formatted) == 26

    def test_horse_name_at_limit_untouched(self):
        name = "a" * 26
        assert format_horse_name(name) == "A" + "a" * 25

    def test_horse_name_missing(self):
        assert format_horse_name(None) == "Unknown Horse"

    def test_signed_amount(self):
        assert format_signed_amount(35.0) == "+35.00"
        assert format_signed_amount(0.0) == "+0.00"
        assert format_signed_amount(-10.0) == "10.00"
        assert format_signed_amount(1234.5) == "+1,234.50"

    def test_race_time(self):
        assert format_race_time("2026-03-14T15:30:00+00:00") == "3:30 PM"
        assert format_race_time("2026-03-14T00:05:00") == "12:05 AM"
        assert format_race_time("2026-03-14T12:00:00Z") == "12:00 PM"

    def test_race_time_invalid(self):
        assert format_race_time("not a time") == ""
        assert format_race_time(None) == ""


class TestRender:
    """Tests for BetCardPresenter.render()."""

    def test_pending_card(self):
        presenter, _ = make_presenter()

        view = presenter.render()

        assert view.horse_name == "Desert Orchid"
        assert view.track_name == "Cheltenham"
        assert view.race_time == "3:30 PM"
        assert view.status_label == "Pending"
        assert view.color_token == "yellow"
        assert view.is_pending is True
        assert view.stake == "10.00"
        assert view.odds == "4.50"
        assert view.returns is None
        assert view.profit_loss is None

    def test_default_horse_list(self):
        """A row without horses gets one entry built from horse_name and odds."""
        presenter, _ = make_presenter()

        horses = presenter.render().horses

        assert len(horses) == 1
        assert horses[0].name == "desert orchid"
        assert horses[0].odds == 4.5

    def test_settled_card_shows_outcome(self):
        presenter, _ = make_presenter(
            make_bet_row(status="lost", returns=0.0, profit_loss=-10.0)
        )

        view = presenter.render()

        assert view.returns == "0.00"
        assert view.profit_loss == "10.00"
        assert view.is_profit is False
        assert view.color_token == "red"

    def test_settled_without_profit_loss_hides_outcome(self):
        presenter, _ = make_presenter(make_bet_row(status="won", returns=None, profit_loss=None))

        view = presenter.render()

        assert view.returns is None
        assert view.profit_loss is None

    def test_each_way_label(self):
        presenter, _ = make_presenter(make_bet_row(bet_type="each-way", each_way=True))
        assert presenter.render().bet_type == "each-way (E/W)"


class TestActions:
    """Tests for edit, delete and settle."""

    def test_edit_hands_over_bet(self):
        on_edit = MagicMock()
        presenter, store = make_presenter(on_edit=on_edit)

        presenter.edit()

        on_edit.assert_called_once_with(presenter.bet)
        store.update_bet.assert_not_called()

    async def test_delete_scoped_and_refreshes(self):
        on_refresh = AsyncMock()
        presenter, store = make_presenter(on_refresh=on_refresh)

        await presenter.delete()

        store.delete_bet.assert_awaited_once_with(MOCK_CONTEXT, "bet-1")
        on_refresh.assert_awaited_once()

    async def test_delete_failure_does_not_refresh(self):
        on_refresh = AsyncMock()
        presenter, store = make_presenter(on_refresh=on_refresh)
        store.delete_bet.side_effect = QueryError("connection reset")

        with pytest.raises(MutationError, match="Failed to delete bet"):
            await presenter.delete()

        on_refresh.assert_not_awaited()

    async def test_sync_refresh_callback(self):
        on_refresh = MagicMock(return_value=None)
        presenter, _ = make_presenter(on_refresh=on_refresh)

        await presenter.delete()

        on_refresh.assert_called_once()

    async def test_settle_writes_amounts(self):
        on_refresh = AsyncMock()
        presenter, store = make_presenter(on_refresh=on_refresh)
        store.update_bet.return_value = Bet.model_validate(
            make_bet_row(status="won", returns=45.0, profit_loss=35.0)
        )

        bet = await presenter.settle(BetOutcome.WON)

        store.update_bet.assert_awaited_once_with(
            MOCK_CONTEXT, "bet-1", {"status": "won", "returns": 45.0, "profit_loss": 35.0}
        )
        assert bet.status == "won"
        assert presenter.render().profit_loss == "+35.00"
        on_refresh.assert_awaited_once()

    async def test_settle_settled_bet_rejected(self):
        presenter, store = make_presenter(make_bet_row(status="won", profit_loss=35.0))

        with pytest.raises(BetStateError):
            await presenter.settle(BetOutcome.LOST)

        store.update_bet.assert_not_called()
