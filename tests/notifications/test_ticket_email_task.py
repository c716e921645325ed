from unittest.mock import AsyncMock, MagicMock, patch

import aiosmtplib
import pytest

from quickdesk.notifications.email_templates import (
    build_ticket_commented_email,
    build_ticket_created_email,
)
from quickdesk.notifications.services.email_service import (
    ConsoleEmailService,
    EmailMessage,
    SMTPEmailService,
)
from quickdesk.notifications.tasks import build_ticket_emails, send_ticket_email
from tests.utils.factories import (
    create_comment_factory,
    create_profile_factory,
    create_ticket_factory,
)


class TestEmailTemplates:
    def test_created_email_links_to_ticket(self):
        message = build_ticket_created_email(
            recipient_name="Sam",
            recipient_email="sam@example.com",
            ticket_id="abc",
            ticket_title="Printer on fire",
            category_name="Hardware",
            priority="urgent",
            creator_name="Alex",
        )

        assert message.to == "sam@example.com"
        assert message.subject == "New Ticket Created: Printer on fire"
        assert "http://frontend.test/tickets/abc" in message.body_text
        assert "Created by: Alex" in message.body_text

    def test_html_body_escapes_user_content(self):
        message = build_ticket_commented_email(
            recipient_name="Sam",
            recipient_email="sam@example.com",
            ticket_id="abc",
            ticket_title="<script>alert(1)</script>",
            status="open",
            comment_author="Alex",
            comment_preview="<b>bold</b>",
        )

        assert "<script>" not in message.body_html
        assert "&lt;script&gt;" in message.body_html


class TestBuildTicketEmails:
    def test_created_goes_to_active_staff_with_email_enabled(
        self, db_session, test_user, test_agent, test_admin, test_category
    ):
        create_profile_factory(db_session, role="support_agent", is_active=False)
        create_profile_factory(
            db_session, role="support_agent", notification_settings={"email_notifications": False}
        )
        ticket = create_ticket_factory(db_session, test_user, test_category)

        messages = build_ticket_emails(db_session, ticket, "created")

        assert sorted(m.to for m in messages) == sorted([test_admin.email, test_agent.email])
        assert all(m.subject.startswith("New Ticket Created: ") for m in messages)

    def test_status_change_goes_to_creator(self, db_session, test_user, test_category):
        ticket = create_ticket_factory(db_session, test_user, test_category, status="in_progress")

        messages = build_ticket_emails(db_session, ticket, "status_changed")

        assert [m.to for m in messages] == [test_user.email]
        assert "New Status: in progress" in messages[0].body_text

    def test_assignment_goes_to_agent(self, db_session, test_user, test_agent, test_category):
        ticket = create_ticket_factory(db_session, test_user, test_category, assigned_agent=test_agent)

        messages = build_ticket_emails(db_session, ticket, "assigned")

        assert [m.to for m in messages] == [test_agent.email]

    def test_creator_closing_own_ticket_gets_no_status_email(self, db_session, test_user, test_category):
        ticket = create_ticket_factory(db_session, test_user, test_category, status="closed")

        assert build_ticket_emails(db_session, ticket, "status_changed", actor_id=test_user.id) == []

    def test_agent_assigning_themselves_gets_no_assignment_email(
        self, db_session, test_user, test_agent, test_category
    ):
        ticket = create_ticket_factory(db_session, test_user, test_category, assigned_agent=test_agent)

        assert build_ticket_emails(db_session, ticket, "assigned", actor_id=test_agent.id) == []

    def test_staff_creator_is_left_out_of_created_email(
        self, db_session, test_agent, test_admin, test_category
    ):
        ticket = create_ticket_factory(db_session, test_agent, test_category)

        messages = build_ticket_emails(db_session, ticket, "created", actor_id=test_agent.id)

        assert [m.to for m in messages] == [test_admin.email]

    def test_comment_skips_author_and_duplicates(self, db_session, test_user, test_agent, test_category):
        ticket = create_ticket_factory(db_session, test_user, test_category, assigned_agent=test_agent)
        by_agent = create_comment_factory(db_session, ticket, test_agent, content="Fixed it")

        messages = build_ticket_emails(db_session, ticket, "commented", by_agent)

        assert [m.to for m in messages] == [test_user.email]
        assert "Fixed it" in messages[0].body_text

    def test_comment_on_self_assigned_ticket_sends_nothing(self, db_session, test_agent, test_category):
        ticket = create_ticket_factory(db_session, test_agent, test_category, assigned_agent=test_agent)
        comment = create_comment_factory(db_session, ticket, test_agent)

        assert build_ticket_emails(db_session, ticket, "commented", comment) == []

    def test_unknown_event_raises(self, db_session, test_user, test_category):
        ticket = create_ticket_factory(db_session, test_user, test_category)

        with pytest.raises(ValueError):
            build_ticket_emails(db_session, ticket, "exploded")


class TestSendTicketEmailTask:
    def test_sends_each_message_and_counts_failures(
        self, db_session, test_user, test_agent, test_admin, test_category
    ):
        ticket = create_ticket_factory(db_session, test_user, test_category)
        ticket_id = str(ticket.id)
        email_service = MagicMock()
        email_service.send_email = AsyncMock(side_effect=[True, False])

        with (
            patch("quickdesk.notifications.tasks.SessionLocal", return_value=db_session),
            patch("quickdesk.notifications.tasks.get_email_service", return_value=email_service),
        ):
            result = send_ticket_email.run(ticket_id=ticket_id, event="created")

        assert result == {"sent": 1, "failed": 1}
        assert email_service.send_email.await_count == 2

    def test_missing_ticket_is_skipped(self, db_session):
        email_service = MagicMock()
        email_service.send_email = AsyncMock(return_value=True)

        with (
            patch("quickdesk.notifications.tasks.SessionLocal", return_value=db_session),
            patch("quickdesk.notifications.tasks.get_email_service", return_value=email_service),
        ):
            result = send_ticket_email.run(
                ticket_id="00000000-0000-0000-0000-000000000000", event="created"
            )

        assert result == {"sent": 0, "failed": 0}
        email_service.send_email.assert_not_called()


class TestEmailServices:
    @pytest.mark.asyncio
    async def test_console_backend_always_succeeds(self, capsys):
        message = EmailMessage(to="a@example.com", subject="Hi", body_html="<p>x</p>", body_text="x")

        assert await ConsoleEmailService().send_email(message) is True
        assert "a@example.com" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_smtp_failure_returns_false(self):
        service = SMTPEmailService("smtp.test", 587, "", "", "support@test", "QuickDesk")
        message = EmailMessage(to="a@example.com", subject="Hi", body_html="<p>x</p>", body_text="x")

        with patch(
            "quickdesk.notifications.services.email_service.aiosmtplib.send",
            new=AsyncMock(side_effect=aiosmtplib.SMTPException("refused")),
        ):
            assert await service.send_email(message) is False
