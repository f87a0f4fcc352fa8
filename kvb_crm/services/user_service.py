"""
User service - admin management of customers, workers and sales staff.
"""
import logging
import uuid
from typing import List

from sqlmodel.ext.asyncio.session import AsyncSession

from kvb_crm.core.exceptions import raise_not_found, raise_bad_request
from kvb_crm.core.security import get_password_hash
from kvb_crm.models.user import Customer, Worker, Sales
from kvb_crm.repositories.task_repo import TaskRepository
from kvb_crm.repositories.user_repo import (
    PrincipalRepository,
    CustomerRepository,
    WorkerRepository,
    SalesRepository,
)
from kvb_crm.services.auth_service import check_password_strength

logger = logging.getLogger(__name__)


class UserService:
    """Service for principal management."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.customer_repo = CustomerRepository(session)
        self.worker_repo = WorkerRepository(session)
        self.sales_repo = SalesRepository(session)

    async def _ensure_email_free(self, repo: PrincipalRepository, email: str, current_id: uuid.UUID = None):
        existing = await repo.get_by_email(email)
        if existing and existing.id != current_id:
            raise_bad_request("Email already exists")

    async def _create(self, repo: PrincipalRepository, data: dict):
        check_password_strength(data["password"])
        await self._ensure_email_free(repo, data["email"])
        data = dict(data)
        data["password_hash"] = get_password_hash(data.pop("password"))
        return await repo.create(data)

    async def _update(self, repo: PrincipalRepository, principal_id: uuid.UUID, data: dict, label: str):
        principal = await repo.get(principal_id)
        if not principal:
            raise_not_found(label)
        if data.get("email") and data["email"] != principal.email:
            await self._ensure_email_free(repo, data["email"], principal.id)
        return await repo.update(principal_id, data)

    # Customers

    async def list_customers(self) -> List[Customer]:
        return await self.customer_repo.list()

    async def get_customer(self, customer_id: uuid.UUID) -> Customer:
        customer = await self.customer_repo.get(customer_id)
        if not customer:
            raise_not_found("Customer")
        return customer

    async def create_customer(self, data: dict) -> Customer:
        customer = await self._create(self.customer_repo, data)
        logger.info(f"Customer created by admin: {customer.email}")
        return customer

    async def update_customer(self, customer_id: uuid.UUID, data: dict) -> Customer:
        return await self._update(self.customer_repo, customer_id, data, "Customer")

    async def delete_customer(self, customer_id: uuid.UUID) -> None:
        if not await self.customer_repo.delete(customer_id):
            raise_not_found("Customer")

    # Workers

    async def list_workers(self) -> List[Worker]:
        return await self.worker_repo.list()

    async def get_worker(self, worker_id: uuid.UUID) -> Worker:
        worker = await self.worker_repo.get(worker_id)
        if not worker:
            raise_not_found("Worker")
        return worker

    async def create_worker(self, data: dict) -> Worker:
        worker = await self._create(self.worker_repo, data)
        logger.info(f"Worker created by admin: {worker.email}")
        return worker

    async def update_worker(self, worker_id: uuid.UUID, data: dict) -> Worker:
        return await self._update(self.worker_repo, worker_id, data, "Worker")

    async def delete_worker(self, worker_id: uuid.UUID) -> None:
        """Unassign the worker from every task, then delete."""
        worker = await self.get_worker(worker_id)
        removed = await TaskRepository(self.session).remove_worker_assignments(worker.id)
        await self.session.delete(worker)
        await self.session.commit()
        logger.info(f"Worker {worker_id} deleted, removed from {removed} task(s)")

    # Sales

    async def list_sales(self) -> List[Sales]:
        return await self.sales_repo.list()
