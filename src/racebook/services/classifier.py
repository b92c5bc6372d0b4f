"""Bet status classification.

Statuses are free text in the store; this maps them onto the five display
states the UI knows about.
"""

from typing import NamedTuple


class StatusInfo(NamedTuple):
    display_label: str
    color_token: str


_STATUS_MAP: dict[str, StatusInfo] = {
    "pending": StatusInfo("Pending", "yellow"),
    "placed": StatusInfo("Placed", "blue"),
    "open": StatusInfo("Placed", "blue"),
    "won": StatusInfo("Won", "green"),
    "win": StatusInfo("Won", "green"),
    "lost": StatusInfo("Lost", "red"),
    "lose": StatusInfo("Lost", "red"),
    "void": StatusInfo("Void", "gray"),
    "voided": StatusInfo("Void", "gray"),
}


def classify(status: str | None) -> StatusInfo:
    """Map a raw status to its display label and color token. Never raises."""
    normalized = (status or "").strip().lower()
    known = _STATUS_MAP.get(normalized)
    if known is not None:
        return known
    return StatusInfo(status or "Unknown", "gray")


def is_pending(status: str | None) -> bool:
    """True when the status classifies as pending."""
    return classify(status) is _STATUS_MAP["pending"]
