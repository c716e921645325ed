"""Outgoing e-mail transports.

``EMAIL_BACKEND=console`` prints messages to stdout for local development;
``smtp`` delivers through ``aiosmtplib``. Both report success as a bool so a
failed recipient never aborts the rest of a batch.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from email.message import EmailMessage as MimeMessage
from email.utils import formataddr

import aiosmtplib

from quickdesk.core.config import settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmailMessage:
    to: str
    subject: str
    body_html: str
    body_text: str


class EmailService(ABC):
    @abstractmethod
    async def send_email(self, message: EmailMessage) -> bool: ...


class ConsoleEmailService(EmailService):
    async def send_email(self, message: EmailMessage) -> bool:
        rule = "-" * 72
        print(f"{rule}\n[console mail] to={message.to}\nsubject: {message.subject}\n{rule}")
        print(message.body_text)
        print(rule)
        return True


class SMTPEmailService(EmailService):
    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        from_email: str,
        from_name: str,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.sender = formataddr((from_name, from_email))

    def _build(self, message: EmailMessage) -> MimeMessage:
        mime = MimeMessage()
        mime["From"] = self.sender
        mime["To"] = message.to
        mime["Subject"] = message.subject
        mime.set_content(message.body_text)
        mime.add_alternative(message.body_html, subtype="html")
        return mime

    async def send_email(self, message: EmailMessage) -> bool:
        try:
            await aiosmtplib.send(
                self._build(message),
                hostname=self.host,
                port=self.port,
                username=self.username or None,
                password=self.password or None,
                start_tls=True,
            )
        except aiosmtplib.SMTPException as exc:
            logger.error("SMTP delivery to %s failed: %s", message.to, exc)
            return False
        logger.info("Sent '%s' to %s", message.subject, message.to)
        return True


def get_email_service() -> EmailService:
    if settings.EMAIL_BACKEND != "smtp":
        return ConsoleEmailService()
    return SMTPEmailService(
        host=settings.SMTP_HOST,
        port=settings.SMTP_PORT,
        username=settings.SMTP_USERNAME,
        password=settings.SMTP_PASSWORD,
        from_email=settings.SMTP_FROM_EMAIL,
        from_name=settings.SMTP_FROM_NAME,
    )
