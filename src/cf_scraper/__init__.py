"""Async client for the Romanian land-registry (CF) portal."""
import asyncio
import logging
from typing import List, Optional

from .client import CadastralClient
from .errors import PortalError, TokenNotFound, TransportError, UpstreamDataError
from .models import (
    CityUnit,
    Failure,
    PortalConfig,
    RecordQuery,
    RecordResult,
    RecordSuccess,
    UnitsResult,
    UnitsSuccess,
)
from .session import PortalSession, SessionManager
from .token import TOKEN_FIELD_ID, extract_token

__version__ = "0.1.0"
__all__ = [
    "CadastralClient",
    "PortalConfig",
    "CityUnit",
    "RecordQuery",
    "UnitsSuccess",
    "RecordSuccess",
    "Failure",
    "UnitsResult",
    "RecordResult",
    "PortalSession",
    "SessionManager",
    "PortalError",
    "TransportError",
    "TokenNotFound",
    "UpstreamDataError",
    "TOKEN_FIELD_ID",
    "extract_token",
    "main"
]

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for CLI usage."""
    import argparse
    import sys

    parser = argparse.ArgumentParser(description="Land-registry portal client")
    parser.add_argument("--base-url", default="https://cf.ro", help="Portal base URL")
    parser.add_argument("--timeout", type=float, default=30.0, help="Per-request timeout in seconds")
    parser.add_argument("--rate-limit", type=float, default=5.0, help="Requests per second")
    commands = parser.add_subparsers(dest="command", required=True)

    units = commands.add_parser("units", help="List the administrative units of a county")
    units.add_argument("county", help="County code, e.g. ALBA")

    search = commands.add_parser("search", help="Query a record with a known city id")
    search.add_argument("county")
    search.add_argument("city_name")
    search.add_argument("city_id")
    search.add_argument("record_number")
    search.add_argument("--page-id", default="1")

    lookup = commands.add_parser("lookup", help="Resolve the city by name, then query the record")
    lookup.add_argument("county")
    lookup.add_argument("city_name")
    lookup.add_argument("record_number")
    lookup.add_argument("--page-id", default="1")

    commands.add_parser("default", help="Query the built-in sample record")

    args = parser.parse_args(argv)

    config = PortalConfig(
        base_url=args.base_url,
        timeout=args.timeout,
        requests_per_second=args.rate_limit
    )

    async def run_command():
        async with CadastralClient(config) as client:
            if args.command == "units":
                return await client.list_units(args.county)
            if args.command == "search":
                return await client.query_record(
                    args.county, args.city_name, args.city_id, args.record_number, args.page_id
                )
            if args.command == "lookup":
                return await client.lookup_record(
                    args.county, args.city_name, args.record_number, args.page_id
                )
            return await client.run_default_search()

    try:
        result = asyncio.run(run_command())
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        return 1

    print(result.model_dump_json(indent=2))
    if not result.success:
        print(f"Error: {result.error}", file=sys.stderr)
        return 1
    return 0
