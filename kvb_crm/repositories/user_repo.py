"""
Principal repositories: one per role table.
"""
import uuid
from typing import Optional, List, Type, TypeVar
from datetime import datetime

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from kvb_crm.models.user import Admin, Sales, Worker, Customer, PrincipalBase
from kvb_crm.repositories.base import BaseRepository

PrincipalType = TypeVar("PrincipalType", bound=PrincipalBase)


class PrincipalRepository(BaseRepository[PrincipalType]):
    """Lookups shared by every principal table."""

    async def get_by_email(self, email: str) -> Optional[PrincipalType]:
        """Get principal by email."""
        query = select(self.model).where(self.model.email == email)
        result = await self.session.exec(query)
        return result.first()

    async def get_by_reset_token(self, token_hash: str) -> Optional[PrincipalType]:
        """Get a principal holding an unexpired reset token."""
        query = select(self.model).where(
            self.model.password_reset_token == token_hash,
            self.model.password_reset_expires > datetime.utcnow()
        )
        result = await self.session.exec(query)
        return result.first()

    async def get_many(self, ids: List[uuid.UUID]) -> List[PrincipalType]:
        """Principals with the given ids; unknown ids are left out."""
        if not ids:
            return []
        query = select(self.model).where(self.model.id.in_(ids))
        result = await self.session.exec(query)
        return result.all()


class AdminRepository(PrincipalRepository[Admin]):
    def __init__(self, session: AsyncSession):
        super().__init__(Admin, session)


class SalesRepository(PrincipalRepository[Sales]):
    def __init__(self, session: AsyncSession):
        super().__init__(Sales, session)


class WorkerRepository(PrincipalRepository[Worker]):
    def __init__(self, session: AsyncSession):
        super().__init__(Worker, session)


class CustomerRepository(PrincipalRepository[Customer]):
    def __init__(self, session: AsyncSession):
        super().__init__(Customer, session)


REPOSITORIES = {
    "admin": AdminRepository,
    "sales": SalesRepository,
    "worker": WorkerRepository,
    "customer": CustomerRepository,
}


def get_principal_repository(role: str, session: AsyncSession) -> PrincipalRepository:
    """Repository for the table backing a role."""
    repo_class: Type[PrincipalRepository] = REPOSITORIES[role]
    return repo_class(session)
