"""Blocked-vehicle scraping and aggregation for the Rental Car Manager booking site."""

from fleetblock.auth import authenticate
from fleetblock.client import raw_proxy_get
from fleetblock.orchestrator import fetch_blocked_vehicles

__all__ = ["authenticate", "fetch_blocked_vehicles", "raw_proxy_get"]
