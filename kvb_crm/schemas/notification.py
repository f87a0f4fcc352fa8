"""
Notification outbox schemas.
"""
import uuid
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict


class NotificationResponse(BaseModel):
    id: uuid.UUID
    kind: str
    to_email: str
    subject: str
    entity_type: Optional[str]
    entity_id: Optional[uuid.UUID]
    status: str
    attempts: int
    last_error: Optional[str]
    created_at: datetime
    sent_at: Optional[datetime]

    model_config = ConfigDict(from_attributes=True)
