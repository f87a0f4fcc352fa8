"""
Notification service - the email outbox.
Each send is recorded before delivery and the outcome is written back, so
failures never interrupt the caller but stay visible and retryable.
"""
import logging
import uuid
from datetime import datetime
from typing import Optional, List

from sqlmodel.ext.asyncio.session import AsyncSession

from kvb_crm.core.exceptions import ExternalServiceError, NotFoundError, ValidationError
from kvb_crm.models.notification import EmailNotification
from kvb_crm.repositories.notification_repo import NotificationRepository
from kvb_crm.services.email_service import EmailService, get_email_service
from kvb_crm.services.email_templates import EmailContent

logger = logging.getLogger(__name__)


class NotificationStatus:
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


class NotificationService:
    def __init__(self, session: AsyncSession, email_service: Optional[EmailService] = None):
        self.session = session
        self.repo = NotificationRepository(session)
        self.email_service = email_service or get_email_service()

    async def notify(
        self,
        kind: str,
        to: Optional[str],
        content: EmailContent,
        entity_type: Optional[str] = None,
        entity_id: Optional[uuid.UUID] = None
    ) -> Optional[EmailNotification]:
        """
        Record and send one email. Never raises for delivery problems.
        Returns None when there is no recipient.
        """
        if not to:
            logger.warning(f"Skipping {kind} notification for {entity_type} {entity_id}: no recipient")
            return None

        notification = await self.repo.create({
            "kind": kind,
            "to_email": to,
            "subject": content.subject,
            "body": content.body,
            "html": content.html,
            "entity_type": entity_type,
            "entity_id": entity_id,
        })
        return await self._deliver(notification)

    async def _deliver(self, notification: EmailNotification) -> EmailNotification:
        notification.attempts += 1
        try:
            await self.email_service.send_email(
                notification.to_email,
                notification.subject,
                notification.body,
                notification.html
            )
        except ExternalServiceError as e:
            notification.status = NotificationStatus.FAILED
            notification.last_error = e.message
            logger.warning(
                f"{notification.kind} email to {notification.to_email} failed "
                f"(attempt {notification.attempts}): {e.message}"
            )
        else:
            notification.status = NotificationStatus.SENT
            notification.sent_at = datetime.utcnow()
            notification.last_error = None

        return await self.repo.save(notification)

    async def retry(self, notification_id: uuid.UUID) -> EmailNotification:
        """Send a failed or pending notification again."""
        notification = await self.repo.get(notification_id)
        if not notification:
            raise NotFoundError("Notification", str(notification_id))
        if notification.status == NotificationStatus.SENT:
            raise ValidationError("Notification was already sent")
        return await self._deliver(notification)

    async def list_notifications(self, status: Optional[str] = None, limit: int = 100) -> List[EmailNotification]:
        return await self.repo.list_by_status(status, limit)

    async def send_required(
        self,
        kind: str,
        to: str,
        content: EmailContent,
        entity_type: Optional[str] = None,
        entity_id: Optional[uuid.UUID] = None
    ) -> EmailNotification:
        """
        Like notify, for emails that are the point of the request.
        A failed delivery stays in the outbox and is raised to the caller.
        """
        if not to or not content.subject:
            raise ValidationError("Recipient and subject are required")

        notification = await self.notify(kind, to, content, entity_type, entity_id)
        if notification.status != NotificationStatus.SENT:
            raise ExternalServiceError("Email", notification.last_error)
        return notification
