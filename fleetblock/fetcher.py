"""
Paginated fetch of one vehicle category from the availability endpoint.

Pagination contract: ``rcmcardata[0].totcars`` on the first page is the total
number of rows for the category. The first request asks for ``rowno=1``;
further pages start at ``1 + page_size`` and step by ``page_size`` while the
row number does not exceed the total. Supplementary pages are requested
concurrently once the first page has been read.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from contextlib import nullcontext
from dataclasses import dataclass, field
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from fleetblock.client import cookie_header, looks_like_html, managed_client
from fleetblock.config import BackendDetails, FetchConstants
from fleetblock.exceptions import (
    CategoryFetchError,
    PageFetchError,
    SessionExpiredError,
)
from fleetblock.models import AvailabilityResponse, AvailabilityRow, VehicleMetadata

logger = logging.getLogger(__name__)

AVAILABILITY_URL = BackendDetails().availability_url

# Errors that make a single page unusable
PAGE_ERRORS = (
    httpx.HTTPError,
    json.JSONDecodeError,
    PydanticValidationError,
)


@dataclass
class CategoryFetchResult:
    """Raw rows of every page plus the first page's vehicle metadata."""

    category_id: int
    rows: list[AvailabilityRow] = field(default_factory=list)
    vehicles: list[VehicleMetadata] = field(default_factory=list)
    pages_requested: int = 1


def build_availability_params(
    category_id: int,
    row_no: int,
    from_date: str,
    to_date: str,
    location_id: int,
) -> dict[str, Any]:
    return {
        "mode": "availability",
        "catid": category_id,
        "rowno": row_no,
        "from": from_date,
        "to": to_date,
        "locid": location_id,
        "ctypeid": 0,
        # Cache buster
        "q": int(time.time() * 1000),
    }


def supplementary_row_numbers(total_rows: int, page_size: int) -> list[int]:
    """
    Row numbers of the pages that follow the first one.

    Args:
        total_rows: Total row count reported by the first page
        page_size: Rows returned per page

    Returns:
        Starting row numbers, e.g. [51, 101] for 120 rows at 50 per page
    """
    return list(range(1 + page_size, total_rows + 1, page_size))


async def fetch_availability_page(
    client: httpx.AsyncClient,
    cookies: list[str] | str,
    category_id: int,
    row_no: int,
    from_date: str,
    to_date: str,
    location_id: int,
) -> AvailabilityResponse | None:
    """
    Fetch and decode one availability page.

    Returns:
        The decoded page, or None if the body is empty or JSON null

    Raises:
        SessionExpiredError: If the backend answers with an HTML page
        httpx.HTTPError: On transport errors or non-2xx responses
        json.JSONDecodeError: If the body is neither HTML nor JSON
        pydantic.ValidationError: If the JSON does not fit the page model
    """
    response = await client.get(
        AVAILABILITY_URL,
        params=build_availability_params(
            category_id, row_no, from_date, to_date, location_id
        ),
        headers={"Cookie": cookie_header(cookies)},
        follow_redirects=True,
    )
    response.raise_for_status()

    text = response.text
    if not text.strip():
        return None

    if looks_like_html(text):
        raise SessionExpiredError(
            f"Category {category_id}: received HTML instead of JSON, session likely expired"
        )

    data = json.loads(text)
    if data is None:
        return None
    if not isinstance(data, dict):
        logger.warning(
            f"Cat {category_id} row {row_no}: unexpected {type(data).__name__} body, treating as empty"
        )
        return AvailabilityResponse()

    return AvailabilityResponse.model_validate(data)


async def _fetch_supplementary_rows(
    client: httpx.AsyncClient,
    cookies: list[str] | str,
    category_id: int,
    row_no: int,
    from_date: str,
    to_date: str,
    location_id: int,
    semaphore: asyncio.Semaphore | None,
) -> list[AvailabilityRow]:
    """Rows of one supplementary page; any failure surfaces as PageFetchError."""
    try:
        async with semaphore or nullcontext():
            page = await fetch_availability_page(
                client, cookies, category_id, row_no, from_date, to_date, location_id
            )
    except (SessionExpiredError, *PAGE_ERRORS) as e:
        raise PageFetchError(category_id, row_no, str(e)) from e

    return page.rcmbooking if page else []


async def fetch_category(
    cookies: list[str] | str,
    category_id: int,
    from_date: str,
    to_date: str,
    location_id: int,
    *,
    client: httpx.AsyncClient | None = None,
    page_size: int = FetchConstants.PAGE_SIZE,
    semaphore: asyncio.Semaphore | None = None,
) -> CategoryFetchResult:
    """
    Fetch every availability row of one category.

    Args:
        cookies: Session token collection
        category_id: Vehicle category id
        from_date: Range start in ``dd/MM/yyyy``
        to_date: Range end in ``dd/MM/yyyy``
        location_id: Location id passed through to the backend
        client: Optional HTTP client to reuse
        page_size: Rows per page used to step the row number
        semaphore: Optional cap on requests in flight

    Returns:
        Concatenated rows of all pages with the first page's vehicles

    Raises:
        SessionExpiredError: If the first page is HTML
        CategoryFetchError: If the first page fails for any other reason
    """
    async with managed_client(client) as http:
        logger.info(f"Fetching category {category_id} row 1...")
        try:
            async with semaphore or nullcontext():
                first_page = await fetch_availability_page(
                    http, cookies, category_id, 1, from_date, to_date, location_id
                )
        except SessionExpiredError:
            logger.error(f"Cat {category_id}: received HTML instead of JSON")
            raise
        except PAGE_ERRORS as e:
            raise CategoryFetchError(category_id, str(e)) from e

        if first_page is None:
            logger.warning(f"Cat {category_id}: no data in response")
            return CategoryFetchResult(category_id=category_id)

        rows = list(first_page.rcmbooking)
        total_rows = first_page.total_rows
        logger.info(f"Cat {category_id}: total rows {total_rows}")

        row_numbers = supplementary_row_numbers(total_rows, page_size)
        if row_numbers:
            pages = await asyncio.gather(
                *(
                    _fetch_supplementary_rows(
                        http,
                        cookies,
                        category_id,
                        row_no,
                        from_date,
                        to_date,
                        location_id,
                        semaphore,
                    )
                    for row_no in row_numbers
                ),
                return_exceptions=True,
            )
            for page_result in pages:
                if isinstance(page_result, PageFetchError):
                    logger.error(
                        f"Error fetching cat {category_id} row {page_result.row_no}: {page_result}"
                    )
                elif isinstance(page_result, BaseException):
                    raise page_result
                else:
                    rows.extend(page_result)

    logger.info(
        f"Cat {category_id}: finished fetching, {len(rows)} booking entries"
    )
    return CategoryFetchResult(
        category_id=category_id,
        rows=rows,
        vehicles=list(first_page.rcmcarsize),
        pages_requested=1 + len(row_numbers),
    )
