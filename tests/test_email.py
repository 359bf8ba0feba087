"""Tests for operator e-mail."""

from datetime import date

import pytest

from core.errors import ConfigurationError
from services import email


class FakeGraph:
    """Records send_mail posts made through users.by_user_id(...).send_mail.post()."""

    def __init__(self):
        self.posts = []
        self.users = self
        self.send_mail = self

    def by_user_id(self, user_id):
        self.user_id = user_id
        return self

    async def post(self, body):
        self.posts.append(body)


def test_format_reminder_summary():
    text = email.format_reminder_summary(date(2024, 3, 29), 1, [10068, 10066])

    assert "2024-03-29, reminder day 1" in text
    assert text.endswith("2 employee(s) behind on hours:\n  - 10066\n  - 10068")


def test_format_reminder_summary_nobody_behind():
    assert email.format_reminder_summary(date(2024, 3, 29), 2, []).endswith(
        "All employees met their hour requirements."
    )


@pytest.mark.asyncio
async def test_send_reminder_summary_email(monkeypatch):
    graph = FakeGraph()
    monkeypatch.setattr(email, "get_graph_client", lambda: graph)

    await email.send_reminder_summary_email(date(2024, 3, 29), 1, [10066])

    assert graph.posts[0].message.subject == "Timesheet Reminders 2024-03-29"


@pytest.mark.asyncio
async def test_send_error_email_does_not_raise(monkeypatch):
    def missing_credentials():
        raise ConfigurationError("Secret '/Graph/tenantId' is not configured")

    monkeypatch.setattr(email, "get_graph_client", missing_credentials)

    await email.send_error_email(RuntimeError("boom"), job="timesheet reminder")
