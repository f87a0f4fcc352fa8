"""
Quotation repository.
"""
import uuid
from typing import List

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from kvb_crm.models.quotation import Quotation
from kvb_crm.repositories.base import BaseRepository


class QuotationRepository(BaseRepository[Quotation]):
    def __init__(self, session: AsyncSession):
        super().__init__(Quotation, session)

    async def list_for_customer(self, customer_id: uuid.UUID) -> List[Quotation]:
        """A customer's own quotations, newest first."""
        query = (
            select(Quotation)
            .where(Quotation.customer_id == customer_id)
            .order_by(Quotation.created_at.desc())
        )
        result = await self.session.exec(query)
        return result.all()
