"""
SMS delivery of timesheet reminders.

The SMS transport itself is supplied by the caller; LoggingNotifier is a
dry-run implementation that only records what would have been sent.
"""

import logging
import re
from collections.abc import Iterable
from typing import TYPE_CHECKING, Protocol

from core.config import REMINDER_MESSAGE, STAGE, TEST_EMPLOYEE_NUMBERS
from core.errors import InvalidInput
from models.timesheets import Employee

if TYPE_CHECKING:
    from core.database import EmployeeStore

logger = logging.getLogger(__name__)


class SmsNotifier(Protocol):
    """Outbound SMS channel keyed by E.164 phone number."""

    async def publish(self, phone_number: str, message: str) -> None: ...

    async def opted_out_numbers(self) -> set[str]: ...


class LoggingNotifier:
    """Dry-run notifier: logs messages instead of sending them."""

    def __init__(self, opted_out: Iterable[str] = ()):
        self.opted_out = set(opted_out)
        self.sent: list[tuple[str, str]] = []

    async def publish(self, phone_number: str, message: str) -> None:
        logger.info("[dry run] SMS to %s: %s", phone_number, message)
        self.sent.append((phone_number, message))

    async def opted_out_numbers(self) -> set[str]:
        return set(self.opted_out)


def sms_phone_number(number: str | None) -> str | None:
    """Convert a Portal phone number ('703-555-0100') to SMS format ('+17035550100')."""
    if not number:
        return None
    digits = re.sub(r"\D", "", number)
    if not digits:
        return None
    return f"+1{digits}"


async def send_reminder(
    employee: Employee,
    notifier: SmsNotifier,
    stage: str = STAGE,
    test_employee_numbers: Iterable[int] = TEST_EMPLOYEE_NUMBERS,
    message: str = REMINDER_MESSAGE,
) -> bool:
    """
    Text a reminder to an employee.

    Outside prod only test employees are texted. Opted-out employees are
    skipped.

    Returns:
        True if a message was published

    Raises:
        InvalidInput: if the employee has no cell phone number
    """
    if stage != "prod" and employee.employee_number not in set(test_employee_numbers):
        logger.debug("Skipping employee number %s outside prod", employee.employee_number)
        return False
    if not employee.phone_number:
        raise InvalidInput(f"Phone number does not exist for employee number {employee.employee_number}")
    if employee.is_opted_out:
        logger.info("Employee number %s has opted-out of receiving text messages", employee.employee_number)
        return False

    logger.info("Attempting to send message to employee number %s", employee.employee_number)
    await notifier.publish(employee.phone_number, message)
    logger.info("Successfully sent text message to employee number %s", employee.employee_number)
    return True


async def sync_opt_outs(
    employees: Iterable[Employee], notifier: SmsNotifier, store: "EmployeeStore"
) -> int:
    """
    Mark employees whose number is on the channel's opt-out list.

    Returns:
        Number of employee records updated
    """
    opted_out = await notifier.opted_out_numbers()
    updated = 0
    for employee in employees:
        if employee.phone_number in opted_out and not employee.is_opted_out:
            employee.is_opted_out = True
            store.mark_opted_out(employee.id)
            updated += 1
    if updated:
        logger.info("Marked %d employee(s) as opted out of SMS", updated)
    return updated
