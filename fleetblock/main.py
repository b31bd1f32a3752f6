"""
Command line entry point for fetching blocked vehicles.

Subcommands:
  login    Authenticate and print the session cookies as JSON
  blocked  Fetch and display blocked vehicles for a date range and location
  proxy    Diagnostic GET of a backend URL with the session cookies
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from datetime import date, timedelta

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from fleetblock.auth import authenticate
from fleetblock.client import raw_proxy_get
from fleetblock.config import FetchConstants, LoginDetails
from fleetblock.exceptions import AuthenticationFailure, FleetBlockError, ValidationError
from fleetblock.locations import all_category_ids
from fleetblock.models import BlockedVehiclesResult
from fleetblock.orchestrator import fetch_blocked_vehicles
from fleetblock.summary import SORT_OPTIONS, sort_reservations, summarize

logger = logging.getLogger(__name__)
console = Console()


def parse_cookies_argument(value: str) -> list[str]:
    """Accept cookies as a JSON list or a ``; `` separated header string."""
    value = value.strip()
    if value.startswith("["):
        return [str(cookie) for cookie in json.loads(value)]
    return [part.strip() for part in value.split(";") if part.strip()]


async def login_with_settings(args: argparse.Namespace) -> list[str]:
    settings = LoginDetails()
    username = args.username or settings.rcm_username
    password = args.password or settings.rcm_password
    return await authenticate(username, password)


async def resolve_cookies(args: argparse.Namespace) -> list[str]:
    if args.cookies:
        return parse_cookies_argument(args.cookies)
    console.print("🔐 No cookies given, logging in...")
    return await login_with_settings(args)


def render_result(result: BlockedVehiclesResult, sort_option: str) -> None:
    """Print a table of blocked vehicles, stats and category warnings."""
    items = sort_reservations(result.data, sort_option)
    summary = summarize(items)

    console.print(
        Panel.fit(
            f"[bold]Total blocked:[/bold] {summary.total_blocked}\n"
            f"[bold]Blocked today:[/bold] {summary.blocked_today}\n"
            f"[bold]Top reason:[/bold] {summary.top_reason}",
            title="🚗 Blocked Vehicles",
        )
    )

    table = Table(title=f"Blocked vehicles ({len(items)})")
    table.add_column("Res/Buf", style="cyan", no_wrap=True)
    table.add_column("Cat", style="dim")
    table.add_column("Vehicle", style="green")
    table.add_column("Rego", style="yellow")
    table.add_column("Pickup")
    table.add_column("Dropoff")
    table.add_column("Days", justify="right")
    table.add_column("Reason", style="magenta")

    for item in items:
        car = item.car_details
        vehicle = f"{car.make} {car.model} {car.year or ''}".strip() if car else "-"
        table.add_row(
            item.identity_key,
            str(item.categoryid or ""),
            vehicle,
            item.registrationno or (car.rego if car else ""),
            f"{item.pickupdatetime} {item.pickuplocation}",
            f"{item.dropoffdatetime} {item.dropofflocation}",
            str(item.rentaldays),
            item.aclastname,
        )

    console.print(table)

    if result.errors:
        console.print("[yellow]⚠️  Some categories failed to load:[/yellow]")
        for error in result.errors:
            console.print(f"  [yellow]Category {error.category_id}: {error.error}[/yellow]")


async def run_login(args: argparse.Namespace) -> int:
    cookies = await login_with_settings(args)
    print(json.dumps({"cookies": cookies}, indent=2))
    return 0


async def run_blocked(args: argparse.Namespace) -> int:
    cookies = await resolve_cookies(args)
    category_ids = all_category_ids() if args.all_categories else args.category

    result = await fetch_blocked_vehicles(
        cookies,
        args.from_date,
        args.to_date,
        args.location,
        category_ids,
        batch_size=args.batch_size,
    )

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        render_result(result, args.sort)
    return 0


async def run_proxy(args: argparse.Namespace) -> int:
    cookies = await resolve_cookies(args)
    body = await raw_proxy_get(cookies, args.url)
    if isinstance(body, str):
        print(body)
    else:
        print(json.dumps(body, indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Blocked (maintenance) vehicles from the booking platform",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s login
  %(prog)s blocked --from 14/01/2026 --to 15/02/2026 --location 9
  %(prog)s blocked --all-categories --sort days-desc
  %(prog)s proxy --cookies '["ASP.NET_SessionId=abc"]' URL
        """,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--username", help="Overrides RCM_USERNAME")
    parser.add_argument("--password", help="Overrides RCM_PASSWORD")

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("login", help="Log in and print session cookies")

    blocked = subparsers.add_parser("blocked", help="List blocked vehicles")
    blocked.add_argument("--cookies", help="JSON list or '; ' separated cookies")
    blocked.add_argument(
        "--from", dest="from_date", default=date.today().strftime("%d/%m/%Y")
    )
    blocked.add_argument(
        "--to",
        dest="to_date",
        default=(date.today() + timedelta(days=30)).strftime("%d/%m/%Y"),
    )
    blocked.add_argument(
        "--location",
        type=int,
        default=FetchConstants.DEFAULT_LOCATION_ID,
        help="Location id, 0 for all locations",
    )
    blocked.add_argument(
        "--category",
        type=int,
        action="append",
        help="Category id (repeatable)",
    )
    blocked.add_argument(
        "--all-categories",
        action="store_true",
        help="Query every category in the built-in catalogue (mostly placeholder ids)",
    )
    blocked.add_argument("--sort", choices=SORT_OPTIONS, default="date-asc")
    blocked.add_argument("--batch-size", type=int, default=FetchConstants.BATCH_SIZE)
    blocked.add_argument("--json", action="store_true", help="Print raw JSON")

    proxy = subparsers.add_parser("proxy", help="Diagnostic GET with session cookies")
    proxy.add_argument("--cookies", help="JSON list or '; ' separated cookies")
    proxy.add_argument("url")

    return parser


COMMANDS = {
    "login": run_login,
    "blocked": run_blocked,
    "proxy": run_proxy,
}


def main(argv: list[str] | None = None) -> int:
    """Main entry point with argument parsing."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        return asyncio.run(COMMANDS[args.command](args))
    except ValidationError as e:
        console.print(f"[red]❌ {e}[/red]")
    except AuthenticationFailure as e:
        console.print(f"[red]❌ Login failed: {e}[/red]")
    except FleetBlockError as e:
        console.print(f"[red]❌ {e}[/red]")
    except KeyboardInterrupt:
        console.print("\n👋 Cancelled by user")
    except Exception as e:
        logger.exception(f"Internal error: {e}")
        console.print(f"[red]❌ Internal error: {e}[/red]")
    return 1


if __name__ == "__main__":
    sys.exit(main())
