"""
Static lookup tables for branch locations and vehicle categories.

The availability endpoint reports pickup/dropoff locations by short code
while callers select a location by numeric id, so filtering needs this map.

Only Sydney (9) and category 47 are confirmed against the live site; the
other entries are placeholders to be replaced with the real tables.
"""

from __future__ import annotations

from dataclasses import dataclass

# Sentinel location id meaning "do not filter by location"
ALL_LOCATIONS = 0


@dataclass(frozen=True)
class Location:
    """A rental branch."""

    locid: int
    code: str
    name: str


@dataclass(frozen=True)
class Category:
    """A vehicle class used to partition availability queries."""

    id: int
    name: str


LOCATIONS: tuple[Location, ...] = (
    Location(locid=1, code="MEL", name="Melbourne Airport"),
    Location(locid=2, code="BNE", name="Brisbane Airport"),
    Location(locid=3, code="PER", name="Perth Airport"),
    Location(locid=4, code="ADL", name="Adelaide Airport"),
    Location(locid=5, code="OOL", name="Gold Coast Airport"),
    Location(locid=6, code="CNS", name="Cairns Airport"),
    Location(locid=7, code="HBA", name="Hobart Airport"),
    Location(locid=8, code="DRW", name="Darwin Airport"),
    Location(locid=9, code="SYD", name="Sydney Airport"),
)

CATEGORIES: tuple[Category, ...] = (
    Category(id=47, name="Economy"),
    Category(id=48, name="Compact"),
    Category(id=49, name="Intermediate"),
    Category(id=50, name="Full Size"),
    Category(id=51, name="Premium"),
    Category(id=52, name="Compact SUV"),
    Category(id=53, name="Intermediate SUV"),
    Category(id=54, name="Full Size SUV"),
    Category(id=55, name="People Mover"),
    Category(id=56, name="Commercial Van"),
    Category(id=91, name="Electric"),
)


def resolve_location_code(
    location_id: int, locations: tuple[Location, ...] = LOCATIONS
) -> str | None:
    """Return the short code for a location id, or None if the id is unknown."""
    for location in locations:
        if location.locid == location_id:
            return location.code
    return None


def all_category_ids() -> list[int]:
    return [category.id for category in CATEGORIES]
