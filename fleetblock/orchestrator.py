"""
Fan the category pipeline out over many categories.

Categories are processed in fixed-size batches: batches run one after the
other, the categories inside a batch run concurrently. A category that fails
is recorded in the error list and never affects its siblings.
"""

from __future__ import annotations

import asyncio
import logging
import math
from datetime import date

import httpx

from fleetblock.client import managed_client
from fleetblock.config import FetchConstants
from fleetblock.dates import format_backend_date
from fleetblock.exceptions import ValidationError
from fleetblock.fetcher import fetch_category
from fleetblock.locations import LOCATIONS, Location
from fleetblock.models import BlockedReservation, BlockedVehiclesResult, CategoryError
from fleetblock.reconciler import reconcile

logger = logging.getLogger(__name__)


def chunk_categories(category_ids: list[int], batch_size: int) -> list[list[int]]:
    """Split category ids into consecutive batches of at most batch_size."""
    if batch_size < 1:
        raise ValueError("batch_size must be at least 1")
    return [
        category_ids[i : i + batch_size]
        for i in range(0, len(category_ids), batch_size)
    ]


async def fetch_blocked_for_category(
    client: httpx.AsyncClient,
    cookies: list[str] | str,
    category_id: int,
    from_date: str,
    to_date: str,
    location_id: int,
    semaphore: asyncio.Semaphore,
    locations: tuple[Location, ...] = LOCATIONS,
) -> list[BlockedReservation]:
    """Fetch one category and reconcile its rows."""
    result = await fetch_category(
        cookies,
        category_id,
        from_date,
        to_date,
        location_id,
        client=client,
        semaphore=semaphore,
    )
    return reconcile(
        result.rows,
        result.vehicles,
        location_id,
        category_id=category_id,
        locations=locations,
    )


async def fetch_blocked_vehicles(
    cookies: list[str] | str,
    from_date: date | str,
    to_date: date | str,
    location_id: int,
    category_ids: list[int] | None = None,
    *,
    client: httpx.AsyncClient | None = None,
    batch_size: int = FetchConstants.BATCH_SIZE,
    max_concurrency: int = FetchConstants.MAX_CONCURRENT_REQUESTS,
    locations: tuple[Location, ...] = LOCATIONS,
) -> BlockedVehiclesResult:
    """
    Fetch blocked reservations for a set of categories.

    Args:
        cookies: Session token collection
        from_date: Range start, a date or any string parse_date accepts
        to_date: Range end, a date or any string parse_date accepts
        location_id: Location to filter on, 0 for all locations
        category_ids: Categories to query, defaults to the built-in category
        client: Optional HTTP client to reuse
        batch_size: Categories per sequential round
        max_concurrency: Cap on requests in flight at any time
        locations: Location table used for filtering

    Returns:
        Flattened blocked reservations and per-category errors

    Raises:
        ValidationError: If cookies, dates or location id are missing
    """
    if not cookies or not from_date or not to_date or location_id is None:
        raise ValidationError("Missing required parameters")

    try:
        backend_from = format_backend_date(from_date)
        backend_to = format_backend_date(to_date)
    except ValueError as e:
        raise ValidationError(f"Invalid date: {e}") from e

    categories = list(category_ids) if category_ids else [FetchConstants.DEFAULT_CATEGORY_ID]
    batches = chunk_categories(categories, batch_size)
    semaphore = asyncio.Semaphore(max_concurrency)

    result = BlockedVehiclesResult()

    async with managed_client(client) as http:
        for batch_number, batch in enumerate(batches, 1):
            logger.info(
                f"Processing batch {batch_number} of {math.ceil(len(categories) / batch_size)}..."
            )

            batch_results = await asyncio.gather(
                *(
                    fetch_blocked_for_category(
                        http,
                        cookies,
                        category_id,
                        backend_from,
                        backend_to,
                        location_id,
                        semaphore,
                        locations,
                    )
                    for category_id in batch
                ),
                return_exceptions=True,
            )

            for category_id, category_result in zip(batch, batch_results):
                if isinstance(category_result, BaseException):
                    logger.error(
                        f"Error fetching cat {category_id}: {category_result}"
                    )
                    result.errors.append(
                        CategoryError(category_id=category_id, error=str(category_result))
                    )
                else:
                    result.data.extend(category_result)

    logger.info(
        f"Fetched {len(result.data)} blocked reservations across {len(categories)} categories "
        f"({len(result.errors)} failed)"
    )
    return result
