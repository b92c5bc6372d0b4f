"""Settlement maths and profit/loss aggregation."""

from typing import Any

from pydantic import BaseModel

from racebook.models.bets import Bet, BetOutcome
from racebook.services.classifier import classify, is_pending

_OUTCOME_BY_LABEL = {
    "Won": BetOutcome.WON,
    "Lost": BetOutcome.LOST,
    "Void": BetOutcome.VOID,
}


def outcome_for(status: str | None) -> BetOutcome | None:
    """The settlement outcome a status classifies as, if any."""
    return _OUTCOME_BY_LABEL.get(classify(status).display_label)


def settle_amounts(
    stake: float,
    odds: float,
    outcome: BetOutcome,
    returns: float | None = None,
) -> tuple[float, float]:
    """Return ``(returns, profit_loss)`` for a settled bet.

    Won pays stake x odds, lost pays nothing and void refunds the stake.
    An explicit ``returns`` (e.g. the place part of an each-way bet)
    overrides the computed figure.
    """
    if returns is None:
        if outcome is BetOutcome.WON:
            returns = stake * odds
        elif outcome is BetOutcome.LOST:
            returns = 0.0
        else:
            returns = stake
    returns = round(returns, 2)
    return returns, round(returns - stake, 2)


def apply_edit(bet: Bet, changes: dict[str, Any]) -> dict[str, Any]:
    """Complete an edit so returns/profit_loss stay consistent with the status.

    Pending bets never carry returns or profit/loss. A won, lost or void bet
    whose status, stake or odds changed gets them recomputed unless the
    edit supplies returns itself.
    """
    values = dict(changes)
    status = values.get("status", bet.status)

    if is_pending(status):
        values["returns"] = None
        values["profit_loss"] = None
        return values

    stake = values.get("stake", bet.stake)
    outcome = outcome_for(status)
    if "returns" in values and values["returns"] is not None:
        values.setdefault("profit_loss", round(values["returns"] - stake, 2))
        return values

    touched = {"status", "stake", "odds"} & values.keys()
    if outcome is not None and (touched or bet.returns is None):
        returns, profit_loss = settle_amounts(stake, values.get("odds", bet.odds), outcome)
        values["returns"] = returns
        values["profit_loss"] = profit_loss
    return values


class BetSummary(BaseModel):
    """Aggregated profit/loss over a set of bets."""

    total_bets: int
    pending_bets: int
    won_bets: int
    lost_bets: int
    void_bets: int
    total_staked: float
    total_returns: float
    profit_loss: float
    roi_pct: float
    win_rate: float


def summarize(bets: list[Bet]) -> BetSummary:
    """Totals over settled bets; pending stakes count towards ``total_staked`` only."""
    counts = {outcome: 0 for outcome in BetOutcome}
    pending = 0
    total_staked = 0.0
    settled_staked = 0.0
    total_returns = 0.0
    profit_loss = 0.0

    for bet in bets:
        outcome = outcome_for(bet.status)
        if outcome is not None:
            counts[outcome] += 1
        elif is_pending(bet.status):
            pending += 1

        if outcome is BetOutcome.VOID:
            continue
        total_staked += bet.stake
        if bet.profit_loss is not None:
            settled_staked += bet.stake
            total_returns += bet.returns or 0.0
            profit_loss += bet.profit_loss

    decided = counts[BetOutcome.WON] + counts[BetOutcome.LOST]
    return BetSummary(
        total_bets=len(bets),
        pending_bets=pending,
        won_bets=counts[BetOutcome.WON],
        lost_bets=counts[BetOutcome.LOST],
        void_bets=counts[BetOutcome.VOID],
        total_staked=round(total_staked, 2),
        total_returns=round(total_returns, 2),
        profit_loss=round(profit_loss, 2),
        roi_pct=round(profit_loss / settled_staked * 100, 2) if settled_staked > 0 else 0.0,
        win_rate=round(counts[BetOutcome.WON] / decided * 100, 1) if decided > 0 else 0.0,
    )
