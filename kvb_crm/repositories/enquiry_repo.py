"""
Enquiry repository.
"""
import uuid
from typing import List

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from kvb_crm.models.enquiry import Enquiry
from kvb_crm.repositories.base import BaseRepository


class EnquiryRepository(BaseRepository[Enquiry]):
    def __init__(self, session: AsyncSession):
        super().__init__(Enquiry, session)

    async def list_for_customer(self, customer_id: uuid.UUID) -> List[Enquiry]:
        query = (
            select(Enquiry)
            .where(Enquiry.customer_id == customer_id)
            .order_by(Enquiry.created_at.desc())
        )
        result = await self.session.exec(query)
        return result.all()
