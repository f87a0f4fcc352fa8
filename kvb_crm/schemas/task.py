"""
Task schemas.
"""
import uuid
from typing import Optional, List, Literal
from datetime import datetime
from pydantic import BaseModel, ConfigDict

from kvb_crm.schemas.common import PrincipalRef, Attachment


class TaskComment(BaseModel):
    user: uuid.UUID
    user_type: str  # Admin, Worker
    comment: str
    timestamp: datetime


class TaskCreate(BaseModel):
    """Create a task (admin)."""
    title: str
    description: str = ""
    priority: Literal["low", "medium", "high"] = "medium"
    status: Literal["pending", "in-progress", "completed", "cancelled"] = "pending"
    location: Optional[str] = None
    due_date: datetime
    assigned_to: List[uuid.UUID] = []
    customer_id: uuid.UUID
    product_id: Optional[uuid.UUID] = None


class TaskUpdate(BaseModel):
    """Admin edit; omitted fields are left untouched."""
    title: Optional[str] = None
    description: Optional[str] = None
    priority: Optional[Literal["low", "medium", "high"]] = None
    status: Optional[Literal["pending", "in-progress", "completed", "cancelled"]] = None
    location: Optional[str] = None
    due_date: Optional[datetime] = None
    assigned_to: Optional[List[uuid.UUID]] = None
    customer_id: Optional[uuid.UUID] = None
    product_id: Optional[uuid.UUID] = None


class TaskStatusUpdate(BaseModel):
    """
    Worker status change.
    `status` is checked by the service so an unknown value is a 400, not a 422.
    Leaving it out keeps the current status.
    """
    status: Optional[str] = None
    comment: Optional[str] = None


class TaskCommentCreate(BaseModel):
    comment: str = ""


class TaskResponse(BaseModel):
    id: uuid.UUID
    title: str
    description: str
    priority: str
    status: str
    location: Optional[str]
    due_date: datetime
    assigned_to: List[uuid.UUID]
    assigned_by: Optional[PrincipalRef]
    customer_id: uuid.UUID
    product_id: Optional[uuid.UUID]
    quotation_id: Optional[uuid.UUID]
    comments: List[TaskComment]
    attachments: List[Attachment]
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TaskCommentResponse(BaseModel):
    success: bool = True
    message: str
    comment: TaskComment


class TaskUploadResponse(BaseModel):
    success: bool = True
    message: str
    attachments: List[Attachment]
