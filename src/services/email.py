"""
Operator e-mail: reminder run summaries and script failures.
"""

import logging
import traceback
from collections.abc import Sequence
from datetime import date

from msgraph.generated.models.body_type import BodyType
from msgraph.generated.models.email_address import EmailAddress
from msgraph.generated.models.item_body import ItemBody
from msgraph.generated.models.message import Message
from msgraph.generated.models.recipient import Recipient
from msgraph.generated.users.item.send_mail.send_mail_post_request_body import (
    SendMailPostRequestBody,
)

from core.config import FROM_EMAIL, OPERATOR_EMAIL, STAGE
from core.graph_client import get_graph_client

logger = logging.getLogger(__name__)


def format_reminder_summary(as_of: date, day: int, reminded: Sequence[int]) -> str:
    """Plain-text body listing the employees reminded in one run."""
    lines = [f"Timesheet reminders ({STAGE}) - {as_of.isoformat()}, reminder day {day}", ""]
    if reminded:
        lines.append(f"{len(reminded)} employee(s) behind on hours:")
        lines.extend(f"  - {number}" for number in sorted(reminded))
    else:
        lines.append("All employees met their hour requirements.")
    return "\n".join(lines)


def _build_message(subject: str, body_text: str) -> SendMailPostRequestBody:
    message = Message(
        subject=subject,
        body=ItemBody(content_type=BodyType.Text, content=body_text),
        to_recipients=[Recipient(email_address=EmailAddress(address=OPERATOR_EMAIL))],
    )
    return SendMailPostRequestBody(message=message, save_to_sent_items=True)


async def send_reminder_summary_email(as_of: date, day: int, reminded: Sequence[int]):
    """Send the reminder run summary to the operator mailbox."""
    graph = get_graph_client()
    request_body = _build_message(
        f"Timesheet Reminders {as_of.isoformat()}",
        format_reminder_summary(as_of, day, reminded),
    )
    await graph.users.by_user_id(FROM_EMAIL).send_mail.post(request_body)
    logger.info("Sent reminder summary email to %s", OPERATOR_EMAIL)


async def send_error_email(error: Exception, job: str = "timesheet integration"):
    """Send error notification email. Failures to send are logged, not raised."""
    body_text = (
        f"An error occurred while running the {job} job ({STAGE}):\n\n"
        f"{''.join(traceback.format_exception(error))}"
    )
    try:
        graph = get_graph_client()
        request_body = _build_message(f"Portal Integrations - {job} error", body_text)
        await graph.users.by_user_id(FROM_EMAIL).send_mail.post(request_body)
        logger.info("Sent error email to %s", OPERATOR_EMAIL)
    except Exception:
        logger.exception("Failed to send error email")
