from html import escape

from quickdesk.core.config import settings
from quickdesk.core.constants import TICKETS_PATH
from quickdesk.notifications.services.email_service import EmailMessage

# Brand colors
_BLUE = "#3B82F6"
_BG_LIGHT = "#F8FAFC"
_CARD_BG = "#FFFFFF"
_TEXT_DARK = "#0F172A"
_TEXT_MUTED = "#64748B"
_BORDER = "#E2E8F0"

_SIGNATURE = "Best regards,\nQuickDesk Support System"


def _wrap_html(inner: str) -> str:
    """Wrap email content in the branded template."""
    return f"""\
<html>
<body style="margin: 0; padding: 0; background-color: {_BG_LIGHT}; font-family: 'Segoe UI', Roboto, Helvetica, Arial, sans-serif;">
  <table width="100%" cellpadding="0" cellspacing="0" style="background-color: {_BG_LIGHT}; padding: 32px 0;">
    <tr>
      <td align="center">
        <table width="600" cellpadding="0" cellspacing="0" style="max-width: 600px; width: 100%;">
          <tr>
            <td align="center" style="padding: 0 0 24px 0; font-size: 20px; font-weight: 700; color: {_BLUE};">
              QuickDesk
            </td>
          </tr>
          <tr>
            <td style="background-color: {_CARD_BG}; border: 1px solid {_BORDER}; border-radius: 12px; padding: 36px 32px;">
              {inner}
            </td>
          </tr>
          <tr>
            <td align="center" style="padding: 24px 0 0 0;">
              <p style="margin: 0; font-size: 12px; color: {_TEXT_MUTED}; line-height: 1.5;">
                You receive this e-mail because of your QuickDesk notification settings.
              </p>
            </td>
          </tr>
        </table>
      </td>
    </tr>
  </table>
</body>
</html>"""


def ticket_url(ticket_id: str) -> str:
    return f"{settings.FRONTEND_URL}{TICKETS_PATH}/{ticket_id}"


def _humanize(value: str) -> str:
    return value.replace("_", " ")


def _details_html(rows: list[tuple[str, str]]) -> str:
    cells = "".join(
        f'<tr><td style="padding: 4px 16px 4px 0; color: {_TEXT_MUTED};">{label}</td>'
        f'<td style="padding: 4px 0; color: {_TEXT_DARK}; font-weight: 600;">{escape(value)}</td></tr>'
        for label, value in rows
    )
    return (
        f'<table cellpadding="0" cellspacing="0" style="margin: 0 0 24px 0; font-size: 14px;">'
        f"{cells}</table>"
    )


def _details_text(rows: list[tuple[str, str]]) -> str:
    return "\n".join(f"{label}: {value}" for label, value in rows)


def _build(
    *,
    to: str,
    subject: str,
    greeting: str,
    intro: str,
    rows: list[tuple[str, str]],
    outro: str,
    link: str,
) -> EmailMessage:
    inner = f"""\
<h2 style="margin: 0 0 20px 0; font-size: 20px; font-weight: 700; color: {_TEXT_DARK};">
  {escape(subject)}
</h2>
<p style="margin: 0 0 16px 0; font-size: 15px; color: {_TEXT_MUTED}; line-height: 1.6;">
  {escape(greeting)}
</p>
<p style="margin: 0 0 16px 0; font-size: 15px; color: {_TEXT_MUTED}; line-height: 1.6;">
  {escape(intro)}
</p>
{_details_html(rows)}
<p style="margin: 0 0 24px 0; font-size: 15px; color: {_TEXT_MUTED}; line-height: 1.6;">
  {escape(outro)}
</p>
<table cellpadding="0" cellspacing="0">
  <tr>
    <td style="border-radius: 8px; background-color: {_BLUE};">
      <a href="{link}"
         style="display: inline-block; padding: 12px 28px; font-size: 14px; font-weight: 600;
                color: #ffffff; text-decoration: none; border-radius: 8px;">
        View ticket
      </a>
    </td>
  </tr>
</table>"""

    text_body = f"""\
{greeting}

{intro}

{_details_text(rows)}

{outro}

View the ticket: {link}

{_SIGNATURE}"""

    return EmailMessage(to=to, subject=subject, body_html=_wrap_html(inner), body_text=text_body)


def build_ticket_created_email(
    recipient_name: str,
    recipient_email: str,
    ticket_id: str,
    ticket_title: str,
    category_name: str,
    priority: str,
    creator_name: str,
) -> EmailMessage:
    """Sent to every support agent and admin when a ticket is filed."""
    return _build(
        to=recipient_email,
        subject=f"New Ticket Created: {ticket_title}",
        greeting=f"Hello {recipient_name},",
        intro="A new support ticket has been created:",
        rows=[
            ("Title", ticket_title),
            ("Category", category_name),
            ("Priority", priority),
            ("Created by", creator_name),
        ],
        outro="Please review and assign this ticket as needed.",
        link=ticket_url(ticket_id),
    )


def build_status_changed_email(
    recipient_name: str,
    recipient_email: str,
    ticket_id: str,
    ticket_title: str,
    status: str,
) -> EmailMessage:
    return _build(
        to=recipient_email,
        subject=f"Ticket Status Updated: {ticket_title}",
        greeting=f"Hello {recipient_name},",
        intro="Your ticket status has been updated:",
        rows=[("Title", ticket_title), ("New Status", _humanize(status))],
        outro="You can follow the progress of your ticket in QuickDesk.",
        link=ticket_url(ticket_id),
    )


def build_ticket_assigned_email(
    recipient_name: str,
    recipient_email: str,
    ticket_id: str,
    ticket_title: str,
    category_name: str,
    priority: str,
    status: str,
) -> EmailMessage:
    return _build(
        to=recipient_email,
        subject=f"Ticket Assigned: {ticket_title}",
        greeting=f"Hello {recipient_name},",
        intro="A ticket has been assigned to you:",
        rows=[
            ("Title", ticket_title),
            ("Category", category_name),
            ("Priority", priority),
            ("Status", _humanize(status)),
        ],
        outro="Please review and update the ticket status as needed.",
        link=ticket_url(ticket_id),
    )


def build_ticket_commented_email(
    recipient_name: str,
    recipient_email: str,
    ticket_id: str,
    ticket_title: str,
    status: str,
    comment_author: str,
    comment_preview: str,
) -> EmailMessage:
    return _build(
        to=recipient_email,
        subject=f"New Comment on Ticket: {ticket_title}",
        greeting=f"Hello {recipient_name},",
        intro=f"{comment_author} added a comment to the ticket:",
        rows=[
            ("Title", ticket_title),
            ("Status", _humanize(status)),
            ("Comment", comment_preview),
        ],
        outro="You can read and reply to the comment in QuickDesk.",
        link=ticket_url(ticket_id),
    )
