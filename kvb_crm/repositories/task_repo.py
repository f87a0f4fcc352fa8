"""
Task repository.
Worker-scoped lookups join through the task_assignment table.
"""
import uuid
from typing import Optional, List

from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from kvb_crm.models.task import Task, TaskAssignment
from kvb_crm.repositories.base import BaseRepository


class TaskRepository(BaseRepository[Task]):
    """Repository for Task operations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Task, session)

    async def get_for_worker(self, task_id: uuid.UUID, worker_id: uuid.UUID) -> Optional[Task]:
        """Get a task only if the worker is assigned to it."""
        query = (
            select(Task)
            .join(TaskAssignment, TaskAssignment.task_id == Task.id)
            .where(Task.id == task_id, TaskAssignment.worker_id == worker_id)
        )
        result = await self.session.exec(query)
        return result.first()

    async def list_for_worker(self, worker_id: uuid.UUID) -> List[Task]:
        """Tasks assigned to a worker, soonest due first."""
        query = (
            select(Task)
            .join(TaskAssignment, TaskAssignment.task_id == Task.id)
            .where(TaskAssignment.worker_id == worker_id)
            .order_by(Task.due_date)
        )
        result = await self.session.exec(query)
        return result.all()

    async def list_for_customer(self, customer_id: uuid.UUID) -> List[Task]:
        query = (
            select(Task)
            .where(Task.customer_id == customer_id)
            .order_by(Task.created_at.desc())
        )
        result = await self.session.exec(query)
        return result.all()

    async def get_by_quotation(self, quotation_id: uuid.UUID) -> Optional[Task]:
        """The task spawned from a quotation, if any."""
        return await self.get_by_field("quotation_id", quotation_id)

    async def count_by_quotation(self, quotation_id: uuid.UUID) -> int:
        return await self.count({"quotation_id": quotation_id})

    async def remove_worker_assignments(self, worker_id: uuid.UUID) -> int:
        """Drop a worker from every task. Caller commits."""
        query = select(TaskAssignment).where(TaskAssignment.worker_id == worker_id)
        result = await self.session.exec(query)
        assignments = result.all()
        for assignment in assignments:
            await self.session.delete(assignment)
        return len(assignments)
