"""Tests for cookie helpers and the diagnostic proxy."""

import httpx
import pytest

from fleetblock.client import (
    cookie_header,
    looks_like_html,
    merge_cookies,
    raw_proxy_get,
    strip_cookie_attributes,
)
from fleetblock.exceptions import ProxyError, ValidationError

TEST_URL = (
    "https://bookings.rentalcarmanager.com/bookingsheet/loadcardata.ashx"
    "?mode=availability&catid=91&rowno=1&from=14/01/2026&to=15/02/2026&locid=9&ctypeid=0"
)


class TestCookieHelpers:
    def test_strip_attributes(self):
        assert strip_cookie_attributes("a=1; path=/; HttpOnly") == "a=1"
        assert strip_cookie_attributes("b=2") == "b=2"

    def test_merge_keeps_first_seen_order(self):
        merged = merge_cookies(
            ["a=1; path=/", "b=2; secure"],
            ["b=2", "c=3; HttpOnly"],
            ["a=1", "a=9"],
        )
        assert merged == ["a=1", "b=2", "c=3", "a=9"]

    def test_merge_skips_blank(self):
        assert merge_cookies(["", " ; path=/"]) == []

    def test_cookie_header(self):
        assert cookie_header(["a=1", "b=2"]) == "a=1; b=2"
        assert cookie_header("a=1; b=2") == "a=1; b=2"

    @pytest.mark.parametrize(
        "body,expected",
        [
            ("<!DOCTYPE html><html></html>", True),
            ("\r\n  <html lang='en'>", True),
            ('{"rcmbooking": []}', False),
            ("", False),
        ],
    )
    def test_looks_like_html(self, body, expected):
        assert looks_like_html(body) is expected


class TestRawProxyGet:
    @pytest.mark.asyncio
    async def test_returns_json(self, make_client, builders):
        seen = []

        def handler(request):
            seen.append(request)
            return builders.json({"rcmbooking": [], "rcmcardata": [{"totcars": 3}]})

        async with make_client(handler) as client:
            body = await raw_proxy_get(["a=1", "b=2"], TEST_URL, client=client)

        assert body["rcmcardata"][0]["totcars"] == 3
        assert seen[0].headers["cookie"] == "a=1; b=2"

    @pytest.mark.asyncio
    async def test_returns_text_for_non_json(self, make_client, builders):
        handler = lambda request: httpx.Response(200, text=builders.expired_html)  # noqa: E731

        async with make_client(handler) as client:
            body = await raw_proxy_get("a=1", TEST_URL, client=client)

        assert body.startswith("<!DOCTYPE html>")

    @pytest.mark.asyncio
    async def test_error_status_carries_response(self, make_client):
        handler = lambda request: httpx.Response(403, text="Forbidden")  # noqa: E731

        async with make_client(handler) as client:
            with pytest.raises(ProxyError) as exc_info:
                await raw_proxy_get(["a=1"], TEST_URL, client=client)

        assert exc_info.value.status == 403
        assert exc_info.value.data == "Forbidden"

    @pytest.mark.asyncio
    async def test_missing_parameters(self):
        with pytest.raises(ValidationError):
            await raw_proxy_get([], TEST_URL)
        with pytest.raises(ValidationError):
            await raw_proxy_get(["a=1"], "")
