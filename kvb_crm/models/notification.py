"""
Email notification outbox.
Every transactional email is recorded here with its delivery outcome, so a
failed send is visible and can be retried instead of disappearing in a log line.
"""
import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field


class EmailNotification(SQLModel, table=True):
    __tablename__ = "email_notification"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)

    # What and to whom
    kind: str = Field(index=True)  # see NotificationKinds
    to_email: str
    subject: str
    body: str = Field(default="")
    html: Optional[str] = None

    # What it is about
    entity_type: Optional[str] = None  # lead, quotation, task, enquiry, staff
    entity_id: Optional[uuid.UUID] = None

    # Delivery status
    status: str = Field(default="pending", index=True)  # pending, sent, failed
    attempts: int = Field(default=0)
    last_error: Optional[str] = None

    # Timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow)
    sent_at: Optional[datetime] = None


class NotificationKinds:
    LEAD_WELCOME = "lead_welcome"
    LEAD_FOLLOW_UP = "lead_follow_up"
    LEAD_EMAIL = "lead_email"
    CUSTOM_EMAIL = "custom_email"
    ENQUIRY_CONFIRMATION = "enquiry_confirmation"
    QUOTATION_SENT = "quotation_sent"
    QUOTATION_ACCEPTED = "quotation_accepted"
    QUOTATION_EMAIL = "quotation_email"
    TASK_ASSIGNED = "task_assigned"
    TASK_COMPLETED = "task_completed"
    PASSWORD_RESET = "password_reset"
