"""
Task service - admin task management, installation task spawning and the
worker side of the task lifecycle (status, comments, attachments).
"""
import logging
import uuid
from datetime import datetime, timedelta
from typing import Optional, List

from fastapi import UploadFile
from sqlmodel.ext.asyncio.session import AsyncSession

from kvb_crm.config import settings
from kvb_crm.core.exceptions import raise_not_found, raise_bad_request
from kvb_crm.models.notification import NotificationKinds
from kvb_crm.models.quotation import Quotation
from kvb_crm.models.task import Task, TaskStatus, TaskPriority
from kvb_crm.models.user import PrincipalBase, Worker, Customer
from kvb_crm.repositories.task_repo import TaskRepository
from kvb_crm.repositories.user_repo import WorkerRepository, CustomerRepository
from kvb_crm.schemas.task import TaskCreate, TaskUpdate
from kvb_crm.services import email_templates
from kvb_crm.services.notification_service import NotificationService
from kvb_crm.services.upload_service import UploadService

logger = logging.getLogger(__name__)

TASK_ATTACHMENT_FOLDER = "task-attachments"
NOT_ASSIGNED_MESSAGE = "Task not found or not assigned to you"


class TaskService:
    """Service for task operations."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.task_repo = TaskRepository(session)
        self.worker_repo = WorkerRepository(session)
        self.customer_repo = CustomerRepository(session)
        self.notifications = NotificationService(session)

    # -------------------------------------------------------------------------
    # Admin operations
    # -------------------------------------------------------------------------

    async def _load_workers(self, worker_ids: List[uuid.UUID]) -> List[Worker]:
        unique_ids = list(dict.fromkeys(worker_ids))
        workers = await self.worker_repo.get_many(unique_ids)
        if len(workers) != len(unique_ids):
            raise_bad_request("One or more assigned workers do not exist")
        return workers

    async def get_task(self, task_id: uuid.UUID) -> Task:
        task = await self.task_repo.get(task_id)
        if not task:
            raise_not_found("Task")
        return task

    async def list_tasks(
        self,
        status: Optional[str] = None,
        customer_id: Optional[uuid.UUID] = None,
        page: int = 1,
        limit: int = 20
    ) -> dict:
        return await self.task_repo.list_paginated(
            filters={"status": status, "customer_id": customer_id},
            page=page,
            limit=limit
        )

    async def create_task(self, data: TaskCreate, actor: PrincipalBase) -> Task:
        """Create a task and tell every assigned worker about it."""
        workers = await self._load_workers(data.assigned_to)

        task = Task(
            **data.model_dump(exclude={"assigned_to"}),
            assigned_by_type=actor.kind,
            assigned_by_id=actor.id,
            assigned_workers=workers
        )
        task = await self.task_repo.save(task)
        logger.info(f"Task {task.id} created by {actor.kind} {actor.id} for {len(workers)} worker(s)")

        await self._notify_assigned(task, workers)
        return task

    async def update_task(self, task_id: uuid.UUID, data: TaskUpdate) -> Task:
        """Edit a task; newly added workers are notified."""
        task = await self.get_task(task_id)
        previous_status = task.status
        previous_worker_ids = set(task.assigned_to)

        update_data = data.model_dump(exclude_unset=True, exclude={"assigned_to"})
        for field, value in update_data.items():
            if value is not None:
                setattr(task, field, value)

        added_workers: List[Worker] = []
        if data.assigned_to is not None:
            workers = await self._load_workers(data.assigned_to)
            task.assigned_workers = workers
            added_workers = [w for w in workers if w.id not in previous_worker_ids]

        task = await self.task_repo.save(task)

        await self._notify_assigned(task, added_workers)
        await self._after_status_change(task, previous_status)
        return task

    async def delete_task(self, task_id: uuid.UUID) -> None:
        """Hard delete; the assignment rows go with it."""
        deleted = await self.task_repo.delete(task_id)
        if not deleted:
            raise_not_found("Task")

    async def spawn_installation_task(
        self,
        quotation: Quotation,
        customer: Optional[Customer],
        product_name: str,
        actor: PrincipalBase
    ) -> Optional[Task]:
        """
        Create the installation task for an accepted quotation.
        Returns None when the quotation already has its task.
        """
        existing = await self.task_repo.get_by_quotation(quotation.id)
        if existing:
            logger.info(f"Quotation {quotation.id} already has installation task {existing.id}")
            return None

        task = Task(
            title=f"Installation for {product_name}",
            description=f"Installation task created from accepted quotation {quotation.id}",
            priority=TaskPriority.MEDIUM,
            status=TaskStatus.PENDING,
            location=(customer.address if customer and customer.address else "To be confirmed"),
            due_date=datetime.utcnow() + timedelta(days=settings.INSTALLATION_DUE_DAYS),
            customer_id=quotation.customer_id,
            product_id=quotation.product_id,
            quotation_id=quotation.id,
            assigned_by_type=actor.kind,
            assigned_by_id=actor.id,
            assigned_workers=[]
        )
        task = await self.task_repo.save(task)
        logger.info(f"Installation task {task.id} spawned from quotation {quotation.id}")
        return task

    # -------------------------------------------------------------------------
    # Worker operations
    # -------------------------------------------------------------------------

    async def list_worker_tasks(self, worker: Worker) -> List[Task]:
        return await self.task_repo.list_for_worker(worker.id)

    async def get_worker_task(self, task_id: uuid.UUID, worker: Worker) -> Task:
        """A task the worker is assigned to; anything else is a 404."""
        task = await self.task_repo.get_for_worker(task_id, worker.id)
        if not task:
            raise_not_found(message=NOT_ASSIGNED_MESSAGE)
        return task

    async def update_status(
        self,
        task_id: uuid.UUID,
        worker: Worker,
        status: Optional[str],
        comment: Optional[str] = None
    ) -> Task:
        """
        Set the status of an assigned task, optionally with a comment.
        A missing status leaves it unchanged, so a comment can be posted on its own.
        """
        task = await self.get_worker_task(task_id, worker)
        if status is not None and status not in TaskStatus.ALL:
            raise_bad_request("Invalid status value")

        previous_status = task.status
        if status is not None:
            task.status = status
        if comment and comment.strip():
            task.comments = [*task.comments, self._comment(worker, comment.strip())]

        task = await self.task_repo.save(task)
        logger.info(f"Worker {worker.id} moved task {task.id} from {previous_status} to {task.status}")

        await self._after_status_change(task, previous_status)
        return task

    async def mark_complete(self, task_id: uuid.UUID, worker: Worker) -> Task:
        return await self.update_status(task_id, worker, TaskStatus.COMPLETED)

    async def add_comment(self, task_id: uuid.UUID, worker: Worker, text: Optional[str]) -> dict:
        """Append a comment and return it."""
        if not text or not text.strip():
            raise_bad_request("Comment is required")

        task = await self.get_worker_task(task_id, worker)
        comment = self._comment(worker, text.strip())
        task.comments = [*task.comments, comment]
        await self.task_repo.save(task)
        return comment

    async def upload_files(self, task_id: uuid.UUID, worker: Worker, files: List[UploadFile]) -> List[dict]:
        """
        Attach files to an assigned task.
        Either every file is stored and recorded or the request fails and the
        task is left unchanged.
        """
        task = await self.get_worker_task(task_id, worker)

        attachments = await UploadService().upload_many(files, TASK_ATTACHMENT_FOLDER)
        if attachments:
            task.attachments = [*task.attachments, *attachments]
            await self.task_repo.save(task)

        logger.info(f"Worker {worker.id} attached {len(attachments)} file(s) to task {task.id}")
        return attachments

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _comment(author: PrincipalBase, text: str) -> dict:
        return {
            "user": str(author.id),
            "user_type": author.kind,
            "comment": text,
            "timestamp": datetime.utcnow().isoformat(),
        }

    async def _notify_assigned(self, task: Task, workers: List[Worker]) -> None:
        if not workers:
            return
        customer = await self.customer_repo.get(task.customer_id)
        customer_name = customer.full_name if customer else "Customer"
        for worker in workers:
            await self.notifications.notify(
                NotificationKinds.TASK_ASSIGNED,
                worker.email,
                email_templates.task_assigned(
                    worker.full_name, task.title, customer_name, task.location or "To be confirmed"
                ),
                entity_type="task",
                entity_id=task.id
            )

    async def _after_status_change(self, task: Task, previous_status: str) -> None:
        """Completion email, only when the task moves into completed."""
        if task.status == previous_status or task.status != TaskStatus.COMPLETED:
            return
        customer = await self.customer_repo.get(task.customer_id)
        if not customer:
            logger.warning(f"Task {task.id} completed but customer {task.customer_id} is gone")
            return
        await self.notifications.notify(
            NotificationKinds.TASK_COMPLETED,
            customer.email,
            email_templates.task_completed(customer.full_name, task.title),
            entity_type="task",
            entity_id=task.id
        )
