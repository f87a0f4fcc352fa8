"""
Email service - handles sending emails.
Currently supports: Mock (development) and SMTP (production ready).
"""
import asyncio
import logging
import smtplib
from collections import deque
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from email.utils import formataddr
from typing import Optional, Tuple
from abc import ABC, abstractmethod

from kvb_crm.config import settings
from kvb_crm.core.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)

MAX_KEPT_EMAILS = 100


def apply_redirect(to: str, subject: str, html: Optional[str]) -> Tuple[str, str, Optional[str]]:
    """
    Point a message at EMAIL_REDIRECT_TO when it is configured.
    The original recipient is kept visible in the subject and body.
    """
    redirect_to = settings.EMAIL_REDIRECT_TO
    if not redirect_to:
        return to, subject, html

    subject = f"[TEST] {subject} (Originally to: {to})"
    if html:
        html = (
            '<div style="border: 2px solid #ff6b6b; padding: 10px; margin-bottom: 20px; background: #ffeaa7;">'
            f"<strong>TEST EMAIL</strong><br>Original recipient: {to}<br>"
            "This email was redirected for testing purposes.</div>"
            f"{html}"
        )
    return redirect_to, subject, html


class EmailService(ABC):
    """Base email service interface."""

    @abstractmethod
    async def send_email(
        self,
        to: str,
        subject: str,
        body: str,
        html: Optional[str] = None
    ) -> bool:
        """
        Send an email.

        Raises:
            ExternalServiceError: the provider rejected or never received the message
        """
        pass


class MockEmailService(EmailService):
    """
    Mock email service for development.
    Logs emails instead of sending and keeps them for inspection.
    """

    def __init__(self, fail: bool = False, keep: int = MAX_KEPT_EMAILS):
        self.fail = fail
        # Most recent messages only, for tests and debugging
        self.sent_emails = deque(maxlen=keep)

    async def send_email(
        self,
        to: str,
        subject: str,
        body: str,
        html: Optional[str] = None
    ) -> bool:
        """Mock send - logs and stores for debugging."""
        if self.fail:
            raise ExternalServiceError("Email", "mock delivery failure")

        to, subject, html = apply_redirect(to, subject, html)
        email_data = {
            "to": to,
            "subject": subject,
            "body": body,
            "html": html
        }
        self.sent_emails.append(email_data)

        logger.info("Mock email to %s: %s", to, subject)
        return True

    def get_last_email(self) -> Optional[dict]:
        """Get the last sent email (for testing)."""
        return self.sent_emails[-1] if self.sent_emails else None


class SMTPEmailService(EmailService):
    """
    SMTP email service for production.
    Configure with environment variables:
    - SMTP_HOST
    - SMTP_PORT
    - SMTP_USER
    - SMTP_PASSWORD
    - EMAIL_FROM
    - EMAIL_REDIRECT_TO (optional)
    """

    def __init__(self):
        self.host = settings.SMTP_HOST
        self.port = settings.SMTP_PORT
        self.user = settings.SMTP_USER
        self.password = settings.SMTP_PASSWORD
        self.from_email = settings.EMAIL_FROM
        self.from_name = settings.EMAIL_FROM_NAME

    def _deliver(self, to: str, message: str) -> None:
        with smtplib.SMTP(self.host, self.port) as server:
            server.starttls()
            if self.user and self.password:
                server.login(self.user, self.password)
            server.sendmail(self.from_email, to, message)

    async def send_email(
        self,
        to: str,
        subject: str,
        body: str,
        html: Optional[str] = None
    ) -> bool:
        """Send email via SMTP."""
        to, subject, html = apply_redirect(to, subject, html)

        msg = MIMEMultipart('alternative')
        msg['Subject'] = subject
        msg['From'] = formataddr((self.from_name, self.from_email))
        msg['To'] = to

        # Add plain text
        msg.attach(MIMEText(body or "", 'plain'))

        # Add HTML if provided
        if html:
            msg.attach(MIMEText(html, 'html'))

        try:
            await asyncio.to_thread(self._deliver, to, msg.as_string())
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email to {to}: {e}")
            raise ExternalServiceError("SMTP", str(e))

        logger.info(f"Email sent to {to}: {subject}")
        return True


# =============================================================================
# EMAIL SERVICE SINGLETON
# =============================================================================

_email_service: Optional[EmailService] = None


def get_email_service() -> EmailService:
    """Get the email service instance."""
    global _email_service

    if _email_service is None:
        if settings.SMTP_HOST:
            logger.info("Using SMTP Email Service")
            _email_service = SMTPEmailService()
        else:
            logger.info("Using Mock Email Service (emails are logged only)")
            _email_service = MockEmailService()

    return _email_service


def set_email_service(service: Optional[EmailService]) -> None:
    """Set custom email service (for testing)."""
    global _email_service
    _email_service = service
