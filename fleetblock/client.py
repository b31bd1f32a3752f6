"""
HTTP client setup and cookie handling shared by the login and fetch steps.
"""

from __future__ import annotations

import json
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Iterable

import httpx

from fleetblock.config import FetchConstants
from fleetblock.exceptions import ProxyError, ValidationError

logger = logging.getLogger(__name__)


def create_http_client() -> httpx.AsyncClient:
    """
    Create HTTP client with standard headers.

    TLS verification is disabled because the booking site's certificate
    chain does not validate everywhere. Redirects are opt-in per request.

    Returns:
        Configured HTTP client
    """
    return httpx.AsyncClient(
        verify=False,
        follow_redirects=False,
        timeout=FetchConstants.DEFAULT_TIMEOUT,
        headers={"User-Agent": FetchConstants.USER_AGENT},
    )


@asynccontextmanager
async def managed_client(
    client: httpx.AsyncClient | None = None,
) -> AsyncGenerator[httpx.AsyncClient, None]:
    """
    Yield the given client, or a fresh one that is closed on exit.

    Args:
        client: Caller-owned client to reuse, left open afterwards
    """
    if client is not None:
        yield client
        return

    client = create_http_client()
    try:
        yield client
    finally:
        if not client.is_closed:
            await client.aclose()


def strip_cookie_attributes(set_cookie: str) -> str:
    """Reduce a ``Set-Cookie`` value to its ``name=value`` part."""
    return set_cookie.split(";", 1)[0].strip()


def response_cookies(response: httpx.Response) -> list[str]:
    """Raw ``Set-Cookie`` header values of a response, in order."""
    return response.headers.get_list("set-cookie")


def merge_cookies(*groups: Iterable[str]) -> list[str]:
    """
    Merge cookie groups into an ordered, deduplicated ``name=value`` list.

    Args:
        groups: Raw ``Set-Cookie`` values or already-stripped cookies

    Returns:
        Cookies in first-seen order with exact duplicates removed
    """
    merged: list[str] = []
    for group in groups:
        for cookie in group:
            stripped = strip_cookie_attributes(cookie)
            if stripped and stripped not in merged:
                merged.append(stripped)
    return merged


def cookie_header(cookies: list[str] | str) -> str:
    """Join a session token collection into one ``Cookie`` header value."""
    if isinstance(cookies, str):
        return cookies
    return "; ".join(cookies)


def looks_like_html(text: str) -> bool:
    """True when a body is an HTML page (typically the login page)."""
    head = text.lstrip()[:512].lower()
    return head.startswith("<!doctype html") or "<html" in head


async def raw_proxy_get(
    cookies: list[str] | str,
    url: str,
    *,
    client: httpx.AsyncClient | None = None,
) -> Any:
    """
    Diagnostic pass-through GET with the session cookies attached.

    Args:
        cookies: Session token collection
        url: Absolute URL on the booking backend
        client: Optional HTTP client to reuse

    Returns:
        Decoded JSON when the body is JSON, otherwise the body text

    Raises:
        ValidationError: If cookies or url are missing
        ProxyError: On transport errors or non-2xx responses
    """
    if not cookies or not url:
        raise ValidationError("Missing required parameters")

    logger.info(f"Proxy calling: {url}")

    async with managed_client(client) as http:
        try:
            response = await http.get(
                url,
                headers={"Cookie": cookie_header(cookies)},
                follow_redirects=True,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"Proxy error: {e}")
            raise ProxyError(
                str(e), status=e.response.status_code, data=e.response.text
            ) from e
        except httpx.RequestError as e:
            logger.error(f"Proxy error: {e}")
            raise ProxyError(str(e)) from e

    logger.info(f"Proxy response status: {response.status_code}")

    try:
        return response.json()
    except json.JSONDecodeError:
        return response.text
