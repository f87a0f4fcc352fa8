"""
Task model - a field-service work item handled by one or more workers.
"""
import uuid
from datetime import datetime
from typing import Optional, List

from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column

from kvb_crm.database import JSONType
from kvb_crm.models.user import Worker


class TaskStatus:
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    ALL = [PENDING, IN_PROGRESS, COMPLETED, CANCELLED]


class TaskPriority:
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    ALL = [LOW, MEDIUM, HIGH]


class TaskAssignment(SQLModel, table=True):
    """Junction table for the workers assigned to a task."""
    __tablename__ = "task_assignment"

    task_id: uuid.UUID = Field(foreign_key="task.id", primary_key=True)
    worker_id: uuid.UUID = Field(foreign_key="worker.id", primary_key=True)
    # Rows are written through Task.assigned_workers, so the default lives on the column
    assigned_at: datetime = Field(
        default_factory=datetime.utcnow,
        sa_column_kwargs={"default": datetime.utcnow}
    )


class Task(SQLModel, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)

    title: str
    description: str = Field(default="")
    priority: str = Field(default=TaskPriority.MEDIUM)
    status: str = Field(default=TaskStatus.PENDING, index=True)
    location: Optional[str] = None
    due_date: datetime

    # References
    customer_id: uuid.UUID = Field(index=True)
    product_id: Optional[uuid.UUID] = Field(default=None, index=True)
    quotation_id: Optional[uuid.UUID] = Field(default=None, index=True)  # set when spawned by an accepted quotation
    assigned_by_type: Optional[str] = None  # Admin, Sales
    assigned_by_id: Optional[uuid.UUID] = None

    comments: List[dict] = Field(default=[], sa_column=Column(JSONType))
    # Example: [{"user": "<uuid>", "user_type": "Worker", "comment": "On site", "timestamp": "..."}]

    attachments: List[dict] = Field(default=[], sa_column=Column(JSONType))
    # Example: [{"filename": "meter.jpg", "url": "https://...", "public_id": "task-attachments/abc", "uploaded_at": "..."}]

    # Timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    assigned_workers: List[Worker] = Relationship(
        link_model=TaskAssignment,
        sa_relationship_kwargs={"lazy": "selectin"}
    )

    @property
    def assigned_to(self) -> List[uuid.UUID]:
        return [worker.id for worker in self.assigned_workers]

    @property
    def assigned_by(self) -> Optional[dict]:
        if not self.assigned_by_id:
            return None
        return {"kind": self.assigned_by_type, "id": self.assigned_by_id}
