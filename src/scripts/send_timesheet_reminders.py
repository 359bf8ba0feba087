#!/usr/bin/env python3
"""
Text reminders to employees who are behind on timesheet hours.

Scheduled twice for CASE employees (last work day of the month, and the day
after) and once per pay period for CYK employees. Messages go through the
dry-run notifier, which logs instead of sending.

Usage:
    uv run python src/scripts/send_timesheet_reminders.py --day 1
    uv run python src/scripts/send_timesheet_reminders.py --day 2 --date 2025-03-31
"""

import argparse
import asyncio
import logging
import sys
import traceback
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import DB_PATH, LOG_LEVEL, OPERATOR_EMAIL
from core.database import EmployeeStore, get_connection
from core.dates import parse_date, today
from services.email import send_error_email, send_reminder_summary_email
from services.notifications import LoggingNotifier
from services.reminders import send_timesheet_reminders


async def main(day: int, date_str: str | None = None, email: bool = False):
    """Main entry point for a reminder run."""
    as_of = parse_date(date_str) if date_str else today()
    print(f"Running timesheet reminders for {as_of} (reminder day {day})")

    conn = get_connection(DB_PATH)
    try:
        reminded = await send_timesheet_reminders(day, EmployeeStore(conn), LoggingNotifier(), as_of=as_of)
        print(f"\nEmployees behind on hours: {len(reminded)}")
        for number in reminded:
            print(f"  {number}")

        if email and OPERATOR_EMAIL:
            await send_reminder_summary_email(as_of, day, reminded)

        print("\nDone!")

    except Exception as e:
        print(f"\nError: {e}")
        traceback.print_exc()
        if email and OPERATOR_EMAIL:
            await send_error_email(e, job="timesheet reminder")
        raise

    finally:
        conn.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Send timesheet submission reminders")
    parser.add_argument("--day", type=int, required=True, choices=[1, 2], help="Reminder day (1 or 2)")
    parser.add_argument("--date", help="Run as if today were this date (YYYY-MM-DD)")
    parser.add_argument("--email", action="store_true", help="E-mail the run summary to the operator")
    args = parser.parse_args()

    logging.basicConfig(level=LOG_LEVEL)
    asyncio.run(main(args.day, args.date, args.email))
