"""Sorting and headline stats over a blocked-vehicle result."""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass
from datetime import date, datetime
from typing import Literal

from fleetblock.dates import is_blocked_today, parse_date
from fleetblock.models import BlockedReservation

SortOption = Literal["date-asc", "date-desc", "days-asc", "days-desc"]
SORT_OPTIONS: tuple[str, ...] = ("date-asc", "date-desc", "days-asc", "days-desc")


@dataclass
class BlockedSummary:
    total_blocked: int
    blocked_today: int
    top_reason: str


def _pickup_or_none(item: BlockedReservation) -> datetime | None:
    try:
        return parse_date(item.pickupdatetime)
    except ValueError:
        return None


def sort_reservations(
    items: list[BlockedReservation], option: SortOption = "date-asc"
) -> list[BlockedReservation]:
    """
    Return a sorted copy of the reservations.

    Date sorts use the pickup datetime; rows with an unparseable pickup
    always go last. Day sorts use the rental day count.
    """
    if option not in SORT_OPTIONS:
        raise ValueError(f"Unknown sort option: {option}")

    descending = option.endswith("desc")

    if option.startswith("days"):
        return sorted(items, key=lambda item: float(item.rentaldays), reverse=descending)

    dated = [(item, _pickup_or_none(item)) for item in items]
    valid = [pair for pair in dated if pair[1] is not None]
    undated = [item for item, pickup in dated if pickup is None]

    valid.sort(key=lambda pair: pair[1], reverse=descending)
    return [item for item, _ in valid] + undated


def block_reason(item: BlockedReservation) -> str:
    """First word of the customer-name field, which staff use for the reason."""
    words = item.aclastname.split()
    if not words:
        return "Unknown"
    return re.sub(r"[^a-zA-Z]", "", words[0]) or "Unknown"


def _safe_blocked_today(item: BlockedReservation, today: date | None) -> bool:
    try:
        return is_blocked_today(item.pickupdatetime, item.dropoffdatetime, today)
    except ValueError:
        return False


def summarize(
    items: list[BlockedReservation], today: date | None = None
) -> BlockedSummary:
    """
    Headline numbers for a result set.

    Args:
        items: Blocked reservations
        today: Day used for the "blocked today" count

    Returns:
        Totals and the most common block reason ("N/A" when empty)
    """
    reasons = Counter(block_reason(item) for item in items if item.aclastname)
    top_reason = reasons.most_common(1)[0][0] if reasons else "N/A"

    return BlockedSummary(
        total_blocked=len(items),
        blocked_today=sum(1 for item in items if _safe_blocked_today(item, today)),
        top_reason=top_reason,
    )
