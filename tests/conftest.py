"""Shared fixtures: mocked HTTP clients and backend payload builders."""

import json
from typing import Any, Callable

import httpx
import pytest

LOGIN_PAGE_HTML = """
<html><body>
<form method="post" action="./login.aspx" id="form1">
  <input type="hidden" name="__VIEWSTATE" id="__VIEWSTATE" value="vs-token" />
  <input type="hidden" name="__VIEWSTATEGENERATOR" id="__VIEWSTATEGENERATOR" value="gen-token" />
  <input type="hidden" name="__EVENTVALIDATION" id="__EVENTVALIDATION" value="ev-token" />
  <input name="ctl00$MainContent$Username" type="text" />
  <input name="ctl00$MainContent$Password" type="password" />
</form>
</body></html>
"""

EXPIRED_SESSION_HTML = "<!DOCTYPE html>\n<html><head><title>Login</title></head><body></body></html>"


def booking_row(
    reservationno: int = 0,
    resbufferno: int = 0,
    reservationtypeid: int = 3,
    pickuplocation: str = "SYD",
    dropofflocation: str = "SYD",
    carid: int | None = 1,
    **extra: Any,
) -> dict[str, Any]:
    row = {
        "reservationno": reservationno,
        "resbufferno": resbufferno,
        "reservationtypeid": reservationtypeid,
        "pickupdatetime": "14/01/2026 10:00:00",
        "dropoffdatetime": "16/01/2026 10:00:00",
        "pickuplocation": pickuplocation,
        "dropofflocation": dropofflocation,
        "carid": carid,
        "rentaldays": 2,
        "registrationno": "ABC123",
        "aclastname": "Service due",
    }
    row.update(extra)
    return row


def car(carid: int, make: str = "Toyota", model: str = "Corolla") -> dict[str, Any]:
    return {
        "carid": carid,
        "make": make,
        "model": model,
        "year": 2024,
        "colour": "White",
        "fleetno": f"F{carid}",
        "size": "Compact",
        "rego": f"REG{carid}",
    }


def availability_page(
    bookings: list[dict[str, Any]],
    cars: list[dict[str, Any]] | None = None,
    totcars: int | None = None,
) -> dict[str, Any]:
    page: dict[str, Any] = {"rcmbooking": bookings, "rcmcarsize": cars or []}
    if totcars is not None:
        page["rcmcardata"] = [{"totcars": totcars}]
    return page


def json_response(payload: Any, status_code: int = 200) -> httpx.Response:
    return httpx.Response(
        status_code,
        content=json.dumps(payload).encode(),
        headers={"content-type": "application/json"},
    )


@pytest.fixture
def make_client() -> Callable[[Callable[[httpx.Request], Any]], httpx.AsyncClient]:
    """Build an AsyncClient whose requests are answered by a handler."""

    def _make(handler: Callable[[httpx.Request], Any]) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return _make


@pytest.fixture
def builders():
    """Payload builders for backend responses."""

    class Builders:
        row = staticmethod(booking_row)
        car = staticmethod(car)
        page = staticmethod(availability_page)
        json = staticmethod(json_response)
        login_html = LOGIN_PAGE_HTML
        expired_html = EXPIRED_SESSION_HTML

    return Builders
