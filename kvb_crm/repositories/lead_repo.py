"""
Lead repository with search.
"""
from typing import Optional

from sqlmodel import select, or_
from sqlmodel.ext.asyncio.session import AsyncSession

from kvb_crm.models.lead import Lead
from kvb_crm.repositories.base import BaseRepository
from kvb_crm.schemas.lead import LeadFilter


class LeadRepository(BaseRepository[Lead]):
    """Repository for Lead operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Lead, session)

    async def search(
        self,
        filters: Optional[LeadFilter] = None,
        page: int = 1,
        limit: int = 20
    ) -> dict:
        """Search leads with filtering, newest first."""
        query = select(Lead)

        if filters:
            if filters.status:
                query = query.where(Lead.status == filters.status)
            if filters.region:
                query = query.where(Lead.region == filters.region)
            if filters.assigned_to:
                query = query.where(Lead.assigned_to == filters.assigned_to)
            if filters.search:
                search_term = f"%{filters.search}%"
                query = query.where(
                    or_(
                        Lead.name.ilike(search_term),
                        Lead.email.ilike(search_term),
                        Lead.phone.ilike(search_term)
                    )
                )

        return await self.list_paginated(query=query, page=page, limit=limit)

    async def get_by_email(self, email: str) -> Optional[Lead]:
        """Oldest lead with this email (for deduplication)."""
        query = select(Lead).where(Lead.email == email).order_by(Lead.created_at)
        result = await self.session.exec(query)
        return result.first()
