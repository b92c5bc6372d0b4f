"""Bet endpoints: list, record, edit, settle, delete and profit/loss summary."""

import logging

from fastapi import APIRouter, Depends, Query, Request, status
from pydantic import BaseModel

from racebook.api.deps import get_bet_store
from racebook.auth import BET_RESPONSES, CurrentUser
from racebook.core.exceptions import QueryError
from racebook.core.rate_limit import RATE_LIMITS, limiter
from racebook.models.accounts import UserContext
from racebook.models.bets import BetCreate, BetUpdate, BetView, SettleRequest, SortOrder
from racebook.services.bet_card import BetCardPresenter, BetCardView
from racebook.services.bet_list import BetListController, ListState
from racebook.services.settlement import BetSummary, apply_edit, summarize
from racebook.store.bets import BetStore

logger = logging.getLogger(__name__)

router = APIRouter()


class BetListResponse(BaseModel):
    """A rendered bet list plus the filters that produced it."""

    state: ListState
    view: BetView
    sort: SortOrder
    search: str
    total: int
    bets: list[BetCardView]


async def _load_list(
    store: BetStore,
    user: UserContext,
    view: BetView = BetView.ALL,
    sort: SortOrder = SortOrder.DESC,
    search: str = "",
) -> BetListController:
    async def resolve_identity() -> UserContext:
        return user

    controller = BetListController(store, resolve_identity, view=view, sort=sort, search=search)
    await controller.mount()
    if controller.state is ListState.ERROR:
        raise QueryError(controller.error or "Failed to fetch bets", {"retryable": True})
    return controller


@router.get("", response_model=BetListResponse, responses=BET_RESPONSES)
@limiter.limit(RATE_LIMITS["bets"])
async def list_bets(
    request: Request,
    user: CurrentUser,
    view: BetView = Query(BetView.ALL, description="all, pending or settled"),
    sort: SortOrder = Query(SortOrder.DESC, description="Creation date order"),
    search: str = Query("", description="Case-insensitive horse name filter"),
    store: BetStore = Depends(get_bet_store),
) -> BetListResponse:
    """List the caller's bets for a view, newest first unless ``sort=asc``."""
    controller = await _load_list(store, user, view, sort, search)
    cards = [card.render() for card in controller.cards()]
    return BetListResponse(
        state=controller.state,
        view=controller.view,
        sort=controller.sort,
        search=controller.search,
        total=len(cards),
        bets=cards,
    )


@router.get("/summary", response_model=BetSummary, responses=BET_RESPONSES)
async def get_summary(
    user: CurrentUser,
    store: BetStore = Depends(get_bet_store),
) -> BetSummary:
    """Aggregated stakes, returns and profit/loss over all of the caller's bets."""
    controller = await _load_list(store, user)
    return summarize(controller.all_bets)


@router.post(
    "",
    response_model=BetCardView,
    status_code=status.HTTP_201_CREATED,
    responses=BET_RESPONSES,
)
async def create_bet(
    user: CurrentUser,
    bet: BetCreate,
    store: BetStore = Depends(get_bet_store),
) -> BetCardView:
    """Record a new pending bet."""
    created = await store.create_bet(user, bet)
    return BetCardPresenter(created, user, store).render()


@router.get("/{bet_id}", response_model=BetCardView, responses=BET_RESPONSES)
async def get_bet(
    user: CurrentUser,
    bet_id: str,
    store: BetStore = Depends(get_bet_store),
) -> BetCardView:
    bet = await store.get_bet(user, bet_id)
    return BetCardPresenter(bet, user, store).render()


@router.patch("/{bet_id}", response_model=BetCardView, responses=BET_RESPONSES)
async def update_bet(
    user: CurrentUser,
    bet_id: str,
    update: BetUpdate,
    store: BetStore = Depends(get_bet_store),
) -> BetCardView:
    """Save an edit. Returns and profit/loss follow the resulting status."""
    current = await store.get_bet(user, bet_id)
    values = apply_edit(current, update.model_dump(exclude_unset=True))
    updated = await store.update_bet(user, bet_id, values)
    return BetCardPresenter(updated, user, store).render()


@router.post("/{bet_id}/settle", response_model=BetCardView, responses=BET_RESPONSES)
async def settle_bet(
    user: CurrentUser,
    bet_id: str,
    settlement: SettleRequest,
    store: BetStore = Depends(get_bet_store),
) -> BetCardView:
    """Mark a pending bet won, lost or void."""
    card = BetCardPresenter(await store.get_bet(user, bet_id), user, store)
    await card.settle(settlement.outcome, settlement.returns)
    return card.render()


@router.delete("/{bet_id}", status_code=status.HTTP_204_NO_CONTENT, responses=BET_RESPONSES)
async def delete_bet(
    user: CurrentUser,
    bet_id: str,
    store: BetStore = Depends(get_bet_store),
) -> None:
    """Delete a bet. There is no undo."""
    card = BetCardPresenter(await store.get_bet(user, bet_id), user, store)
    await card.delete()
