"""Turn raw availability rows into enriched blocked reservations."""

from __future__ import annotations

import logging
from typing import Iterable

from fleetblock.config import FetchConstants
from fleetblock.locations import ALL_LOCATIONS, LOCATIONS, Location, resolve_location_code
from fleetblock.models import AvailabilityRow, BlockedReservation, VehicleMetadata

logger = logging.getLogger(__name__)


def filter_blocked(rows: Iterable[AvailabilityRow]) -> list[AvailabilityRow]:
    """Keep maintenance rows only."""
    return [
        row
        for row in rows
        if row.reservationtypeid == FetchConstants.BLOCKED_RESERVATION_TYPE
    ]


def deduplicate(rows: Iterable[AvailabilityRow]) -> list[AvailabilityRow]:
    """Drop rows whose identity key was already seen; first occurrence wins."""
    seen_keys: set[str] = set()
    unique = []
    for row in rows:
        key = row.identity_key
        if key in seen_keys:
            continue
        seen_keys.add(key)
        unique.append(row)
    return unique


def filter_by_location(
    rows: list[AvailabilityRow],
    location_id: int,
    locations: tuple[Location, ...] = LOCATIONS,
) -> list[AvailabilityRow]:
    """
    Keep rows picked up or dropped off at the given location.

    An unknown location id matches nothing.
    """
    if location_id == ALL_LOCATIONS:
        return rows

    code = resolve_location_code(location_id, locations)
    if code is None:
        logger.warning(f"Unknown location id {location_id}, no rows will match")
        return []

    return [
        row
        for row in rows
        if row.pickuplocation == code or row.dropofflocation == code
    ]


def enrich(
    row: AvailabilityRow,
    vehicles_by_id: dict[int, VehicleMetadata],
    category_id: int | None = None,
) -> BlockedReservation:
    data = row.model_dump(by_alias=True, exclude={"car_details", "categoryid"})
    data["categoryid"] = (
        category_id if category_id is not None else getattr(row, "categoryid", None)
    )
    data["carDetails"] = vehicles_by_id.get(row.carid) if row.carid is not None else None
    return BlockedReservation.model_validate(data)


def reconcile(
    rows: Iterable[AvailabilityRow],
    vehicles: Iterable[VehicleMetadata],
    location_id: int,
    *,
    category_id: int | None = None,
    locations: tuple[Location, ...] = LOCATIONS,
) -> list[BlockedReservation]:
    """
    Filter, deduplicate, location-filter and enrich one category's rows.

    Args:
        rows: Raw rows from every page of the category
        vehicles: Vehicle metadata from the first page
        location_id: Location to filter on, 0 for all locations
        category_id: Category the rows were fetched under
        locations: Location table used to resolve the id

    Returns:
        Blocked reservations in first-seen order
    """
    raw_blocked = filter_blocked(rows)
    blocked = deduplicate(raw_blocked)
    logger.info(
        f"Cat {category_id}: found {len(raw_blocked)} blocked bookings. Unique: {len(blocked)}"
    )

    located = filter_by_location(blocked, location_id, locations)
    vehicles_by_id = {v.carid: v for v in vehicles if v.carid is not None}

    return [enrich(row, vehicles_by_id, category_id) for row in located]
