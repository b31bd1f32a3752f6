"""
Login against the booking site's ASP.NET form.

The site has no API, so a session is established the way a browser does it:
scrape the hidden anti-forgery fields from the login page, post them back
with the credentials, then follow the 302 to pick up the remaining cookies.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from urllib.parse import urljoin

import httpx
from bs4 import BeautifulSoup

from fleetblock.client import (
    cookie_header,
    managed_client,
    merge_cookies,
    response_cookies,
)
from fleetblock.config import BackendDetails
from fleetblock.exceptions import (
    AuthenticationFailure,
    TokenExtractionError,
    ValidationError,
)

logger = logging.getLogger(__name__)

backend_details = BackendDetails()

LOGIN_PAGE_URL = backend_details.login_page_url
BASE_URL = backend_details.base_url
DASHBOARD_URL = BASE_URL + backend_details.dashboard_path


@dataclass
class FormTokens:
    """Hidden ASP.NET fields that must be echoed back on login."""

    view_state: str
    view_state_generator: str
    event_validation: str


def _input_value(soup: BeautifulSoup, element_id: str) -> str | None:
    element = soup.find(id=element_id)
    if element is None:
        return None
    return element.get("value") or None


def extract_form_tokens(html_content: str) -> FormTokens:
    """
    Extract the view-state tokens from the login page HTML.

    Args:
        html_content: Login page HTML

    Returns:
        The three form tokens, generator defaulting to ""

    Raises:
        TokenExtractionError: If view-state or event-validation is missing
    """
    soup = BeautifulSoup(html_content, "html.parser")
    view_state = _input_value(soup, "__VIEWSTATE")
    event_validation = _input_value(soup, "__EVENTVALIDATION")

    if not view_state or not event_validation:
        raise TokenExtractionError("Failed to retrieve login form parameters")

    return FormTokens(
        view_state=view_state,
        view_state_generator=_input_value(soup, "__VIEWSTATEGENERATOR") or "",
        event_validation=event_validation,
    )


async def fetch_login_tokens(
    client: httpx.AsyncClient, login_url: str = LOGIN_PAGE_URL
) -> tuple[FormTokens, list[str]]:
    """
    Fetch the login page and scrape its form tokens.

    Args:
        client: HTTP client to use for requests
        login_url: Login page URL

    Returns:
        Tuple of (form_tokens, set_cookie_values)

    Raises:
        TokenExtractionError: If the page cannot be fetched or parsed
    """
    logger.info("Accessing login page...")
    try:
        response = await client.get(login_url)
        response.raise_for_status()
    except httpx.HTTPError as e:
        raise TokenExtractionError(f"Failed to load login page: {e}") from e

    return extract_form_tokens(response.text), response_cookies(response)


def build_login_payload(tokens: FormTokens, username: str, password: str) -> dict[str, str]:
    return {
        "__EVENTTARGET": "",
        "__EVENTARGUMENT": "",
        "__VIEWSTATE": tokens.view_state,
        "__VIEWSTATEGENERATOR": tokens.view_state_generator,
        "__EVENTVALIDATION": tokens.event_validation,
        backend_details.username_field: username,
        backend_details.password_field: password,
        backend_details.submit_field: backend_details.submit_value,
    }


def resolve_redirect(location: str | None) -> str:
    """Absolute URL for a login redirect, falling back to the dashboard."""
    if not location:
        return DASHBOARD_URL
    return urljoin(BASE_URL + "/", location)


async def submit_login(
    client: httpx.AsyncClient,
    tokens: FormTokens,
    cookies: list[str],
    username: str,
    password: str,
) -> httpx.Response:
    """
    Post credentials with the scraped tokens, without following redirects.

    Raises:
        AuthenticationFailure: If the response is anything other than a 302
    """
    logger.info("Submitting username and password...")
    response = await client.post(
        LOGIN_PAGE_URL,
        data=build_login_payload(tokens, username, password),
        headers={"Cookie": cookie_header(merge_cookies(cookies))},
        follow_redirects=False,
    )

    if response.status_code != 302:
        logger.warning(
            f"Login failed: status {response.status_code}, body: {response.text[:200]}"
        )
        raise AuthenticationFailure(
            "Login failed (Invalid credentials or unexpected response)"
        )

    return response


async def authenticate(
    username: str,
    password: str,
    *,
    client: httpx.AsyncClient | None = None,
) -> list[str]:
    """
    Log in and return the session token collection.

    Args:
        username: Booking site username
        password: Booking site password
        client: Optional HTTP client to reuse

    Returns:
        Ordered, deduplicated ``name=value`` cookies from all three round trips

    Raises:
        ValidationError: If username or password is missing
        AuthenticationFailure: If any step of the login fails
    """
    if not username or not password:
        raise ValidationError("Username and password required")

    async with managed_client(client) as http:
        try:
            tokens, initial_cookies = await fetch_login_tokens(http)
            login_response = await submit_login(
                http, tokens, initial_cookies, username, password
            )

            intermediate_cookies = merge_cookies(
                initial_cookies, response_cookies(login_response)
            )
            next_url = resolve_redirect(login_response.headers.get("location"))
            logger.info(f"Following login redirect to: {next_url}")

            landing_response = await http.get(
                next_url,
                headers={"Cookie": cookie_header(intermediate_cookies)},
                follow_redirects=False,
            )
        except AuthenticationFailure:
            raise
        except TokenExtractionError as e:
            logger.error(f"Login error: {e}")
            raise AuthenticationFailure(str(e)) from e
        except httpx.HTTPError as e:
            logger.error(f"Login error: {e}")
            raise AuthenticationFailure(f"Authentication failed: {e}") from e

    if landing_response.status_code >= 500:
        raise AuthenticationFailure(
            f"Login redirect target returned {landing_response.status_code}"
        )
    logger.info(f"Verification status: {landing_response.status_code}")

    session_cookies = merge_cookies(
        intermediate_cookies, response_cookies(landing_response)
    )
    logger.info(f"Login successful, {len(session_cookies)} session cookies")
    return session_cookies
