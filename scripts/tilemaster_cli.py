#!/usr/bin/env python3
"""
Tilemaster store maintenance: health check, load summary, factory reset, setup SQL
"""

import sys
import asyncio
import argparse
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from tilemaster.config import SETUP_SQL, get_settings
from tilemaster.logging_conf import configure_logging
from tilemaster.services import HealthStatus, SyncEngine

EXIT_CODES = {
    HealthStatus.OK: 0,
    HealthStatus.UNAVAILABLE: 0,
    HealthStatus.MISSING_TABLES: 2,
    HealthStatus.CONNECTION_ERROR: 3,
}


async def run_health(engine: SyncEngine) -> int:
    status = await engine.check_health()
    print(f"Store health: {status.value}")
    if status == HealthStatus.UNAVAILABLE:
        print(f"No Supabase project configured; using local files in {get_settings().LOCAL_STORE_DIR}")
    elif status == HealthStatus.MISSING_TABLES:
        print("Tables are missing. Run `setup-sql` and paste the output into the Supabase SQL editor.")
    return EXIT_CODES[status]


async def run_load(engine: SyncEngine) -> int:
    loaded = await engine.load_all()
    print(f"tiles:     {len(loaded.tiles)}")
    print(f"customers: {len(loaded.customers)}")
    print(f"employees: {len(loaded.employees)}")
    return 0


async def run_clear(engine: SyncEngine, confirmed: bool) -> int:
    if not confirmed:
        print("Refusing to clear every collection without --yes")
        return 1
    ok = await engine.clear_all()
    print("All collections cleared" if ok else "Some collections could not be cleared, see log")
    return 0 if ok else 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Tilemaster data store tools")
    parser.add_argument("--log-level", default=None, help="Log level (DEBUG, INFO, WARNING, ERROR)")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("health", help="Check whether the store is reachable and provisioned")
    subparsers.add_parser("load", help="Load every collection and print record counts")
    clear_parser = subparsers.add_parser("clear", help="Delete every record of every collection")
    clear_parser.add_argument("--yes", action="store_true", help="Confirm the factory reset")
    subparsers.add_parser("setup-sql", help="Print the SQL that provisions the Supabase tables")

    args = parser.parse_args(argv)

    load_dotenv()
    configure_logging(level=args.log_level)

    if args.command == "setup-sql":
        print(SETUP_SQL)
        return 0

    engine = SyncEngine.from_settings()
    if args.command == "health":
        return asyncio.run(run_health(engine))
    if args.command == "load":
        return asyncio.run(run_load(engine))
    return asyncio.run(run_clear(engine, args.yes))


if __name__ == "__main__":
    sys.exit(main())
