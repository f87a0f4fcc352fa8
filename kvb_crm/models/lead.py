"""
Lead model - a sales prospect with an append-only note log.
"""
import uuid
from datetime import datetime
from typing import Optional, List

from sqlmodel import SQLModel, Field
from sqlalchemy import Column

from kvb_crm.database import JSONType


class LeadStatus:
    """
    Values offered by the client dropdowns.
    The column itself is an open string and is never validated against these.
    """
    NEW = "new"
    CONTACTED = "contacted"
    FOLLOW_UP_PENDING = "follow-up pending"
    CONVERTED = "converted"
    CLOSED = "closed"

    ALL = [NEW, CONTACTED, FOLLOW_UP_PENDING, CONVERTED, CLOSED]


class Lead(SQLModel, table=True):
    """
    Lead entity - contact details and interest of a prospective customer.
    Created by staff or derived from a customer enquiry.
    """
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)

    # Contact info
    name: str = Field(index=True)
    email: str = Field(index=True)
    phone: str
    region: Optional[str] = Field(default=None, index=True)

    # Qualification
    status: str = Field(default=LeadStatus.NEW, index=True)
    source: str = Field(default="website")
    message: Optional[str] = None

    # Ownership
    assigned_to: Optional[uuid.UUID] = Field(default=None, index=True)  # Sales or Admin id
    customer_id: Optional[uuid.UUID] = Field(default=None, index=True)

    notes: List[dict] = Field(default=[], sa_column=Column(JSONType))
    # Example: [{"message": "Called, asked for brochure", "added_by": "<uuid>", "added_at": "2024-01-01T10:00:00"}]

    # Timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
