"""
Email outbox repository.
"""
from typing import Optional, List

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from kvb_crm.models.notification import EmailNotification
from kvb_crm.repositories.base import BaseRepository


class NotificationRepository(BaseRepository[EmailNotification]):
    def __init__(self, session: AsyncSession):
        super().__init__(EmailNotification, session)

    async def list_by_status(self, status: Optional[str] = None, limit: int = 100) -> List[EmailNotification]:
        """Newest notifications, optionally only one status."""
        query = select(EmailNotification)
        if status:
            query = query.where(EmailNotification.status == status)
        query = query.order_by(EmailNotification.created_at.desc()).limit(limit)
        result = await self.session.exec(query)
        return result.all()
