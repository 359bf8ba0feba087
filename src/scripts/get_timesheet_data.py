#!/usr/bin/env python3
"""
Fetch an employee's aggregated timesheets from TSheets, ADP or Unanet.

Prints the Portal response body as JSON.

Usage:
    uv run python src/scripts/get_timesheet_data.py --system tsheets --employee 10066 \
        --start 2025-01-01 --end 2025-03-31
    uv run python src/scripts/get_timesheet_data.py --system unanet --employee 10066 --only-pto
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import DB_PATH, LOG_LEVEL
from core.database import EmployeeStore, get_connection
from core.dates import parse_date, today
from core.errors import PortalError
from services.timesheets import TimesheetRequest, get_timesheet_data


async def main(args: argparse.Namespace):
    """Main entry point for a timesheet lookup."""
    start = parse_date(args.start) if args.start else today().replace(month=1, day=1)
    end = parse_date(args.end) if args.end else today()

    if args.only_pto:
        request = TimesheetRequest(args.system, args.employee, only_pto=True, account=args.account)
    else:
        request = TimesheetRequest.for_range(
            args.system, args.employee, start, end, statuses=args.status, account=args.account
        )
        print(f"Fetching {args.system} timesheets for {args.employee}: {start} to {end}", file=sys.stderr)

    conn = get_connection(DB_PATH) if DB_PATH.exists() else None
    try:
        store = EmployeeStore(conn) if conn else None
        body = await get_timesheet_data(request, store)
    except PortalError as e:
        print(f"\nError: {e.message}", file=sys.stderr)
        print(json.dumps(e.to_body(), indent=2, default=str), file=sys.stderr)
        raise SystemExit(1)
    finally:
        if conn:
            conn.close()

    print(json.dumps(body, indent=2))


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Get aggregated timesheet data for an employee")
    parser.add_argument("--system", required=True, choices=["tsheets", "adp", "unanet"])
    parser.add_argument("--employee", required=True, type=int, help="Portal employee number")
    parser.add_argument("--start", help="Start date (YYYY-MM-DD). Defaults to January 1st.")
    parser.add_argument("--end", help="End date (YYYY-MM-DD). Defaults to today.")
    parser.add_argument("--only-pto", action="store_true", help="Only fetch PTO / leave balances")
    parser.add_argument("--status", action="append", help="Unanet timesheet status filter (repeatable)")
    parser.add_argument("--account", default="CYK", help="ADP payroll account")
    args = parser.parse_args()

    logging.basicConfig(level=LOG_LEVEL)
    asyncio.run(main(args))
