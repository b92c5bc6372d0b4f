"""Bet records and request payloads."""

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

BET_TYPES = ("win", "place", "each-way")


class BetView(StrEnum):
    """Status slice shown by the bet list."""

    ALL = "all"
    PENDING = "pending"
    SETTLED = "settled"


class SortOrder(StrEnum):
    """Creation-date ordering."""

    DESC = "desc"
    ASC = "asc"

    def toggled(self) -> "SortOrder":
        return SortOrder.ASC if self is SortOrder.DESC else SortOrder.DESC


class BetOutcome(StrEnum):
    WON = "won"
    LOST = "lost"
    VOID = "void"


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO date or timestamp string; anything unparseable gives None."""
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return datetime.fromisoformat(value.strip())
    except ValueError:
        return None


def _as_optional_str(value: Any) -> Any:
    if value is None or isinstance(value, str):
        return value
    return str(value)


def _normalize_bet_type(value: str | None) -> str | None:
    if value is None:
        return None
    normalized = value.strip().lower().replace("_", "-").replace(" ", "-")
    if normalized not in BET_TYPES:
        raise ValueError(f"bet_type must be one of {', '.join(BET_TYPES)}")
    return normalized


class BetHorse(BaseModel):
    """One selection covered by a bet."""

    name: str
    race_number: str | None = None
    venue: str | None = None
    odds: float

    @field_validator("race_number", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        return _as_optional_str(value)


class Bet(BaseModel):
    """A stored bet row as returned by the store."""

    model_config = ConfigDict(extra="ignore")

    id: str
    user_id: str
    track_name: str | None = None
    race_number: str | None = None
    horse_name: str | None = None
    jockey: str | None = None
    trainer: str | None = None
    race_distance: str | None = None
    race_type: str | None = None
    race_date: str | None = None
    scheduled_race_time: str | None = None
    bet_type: str = "win"
    stake: float = 0.0
    odds: float = 0.0
    each_way: bool | None = None
    status: str = "pending"
    bookmaker: str | None = None
    model: str | None = None
    notes: str | None = None
    returns: float | None = None
    profit_loss: float | None = None
    created_at: str | None = None
    updated_at: str | None = None
    horses: list[BetHorse] = Field(default_factory=list)

    @field_validator("id", "user_id", "race_number", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        return _as_optional_str(value)

    @field_validator("horses", mode="before")
    @classmethod
    def _none_horses(cls, value: Any) -> Any:
        return value or []

    # Rows edited by hand can hold NULL in these columns.
    @field_validator("status", "bet_type", mode="before")
    @classmethod
    def _none_text(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("stake", "odds", mode="before")
    @classmethod
    def _none_amount(cls, value: Any) -> Any:
        return 0.0 if value is None else value

    @model_validator(mode="after")
    def _default_horses(self) -> "Bet":
        if not self.horses:
            self.horses = [BetHorse(name=self.horse_name or "Unknown Horse", odds=self.odds)]
        return self


class BetCreate(BaseModel):
    """Payload for recording a new bet."""

    track_name: str = Field(..., min_length=1)
    horse_name: str | None = None
    jockey: str | None = None
    trainer: str | None = None
    race_number: str | None = None
    race_distance: str | None = None
    race_type: str | None = None
    race_date: str | None = None
    scheduled_race_time: str | None = None
    bet_type: str = Field("win", description="win, place or each-way")
    stake: float = Field(..., ge=0, description="Stake amount")
    odds: float = Field(..., gt=0, description="Decimal odds")
    each_way: bool | None = None
    bookmaker: str | None = None
    model: str | None = None
    notes: str | None = None
    horses: list[BetHorse] | None = None

    @field_validator("race_number", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        return _as_optional_str(value)

    @field_validator("bet_type")
    @classmethod
    def _check_bet_type(cls, value: str) -> str:
        return _normalize_bet_type(value) or "win"


class BetUpdate(BaseModel):
    """Partial edit of an existing bet. Only fields that were sent are written."""

    track_name: str | None = Field(None, min_length=1)
    horse_name: str | None = None
    jockey: str | None = None
    trainer: str | None = None
    race_number: str | None = None
    race_distance: str | None = None
    race_type: str | None = None
    race_date: str | None = None
    scheduled_race_time: str | None = None
    bet_type: str | None = None
    stake: float | None = Field(None, ge=0)
    odds: float | None = Field(None, gt=0)
    each_way: bool | None = None
    status: str | None = None
    bookmaker: str | None = None
    model: str | None = None
    notes: str | None = None
    returns: float | None = Field(None, ge=0)
    profit_loss: float | None = None

    @field_validator("race_number", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        return _as_optional_str(value)

    @field_validator("track_name", "bet_type", "stake", "odds", "status", mode="before")
    @classmethod
    def _reject_null(cls, value: Any) -> Any:
        # Omit a field to leave it unchanged; these columns cannot be cleared.
        if value is None:
            raise ValueError("may be omitted but not null")
        return value

    @field_validator("bet_type")
    @classmethod
    def _check_bet_type(cls, value: str | None) -> str | None:
        return _normalize_bet_type(value)


class SettleRequest(BaseModel):
    """Mark a pending bet as won, lost or void."""

    outcome: BetOutcome
    returns: float | None = Field(
        None, ge=0, description="Actual returns; computed from stake and odds when omitted"
    )
