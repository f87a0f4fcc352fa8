"""
Enquiry model - a customer's request for product information.
Every enquiry is linked to a Lead so sales can follow it up.
"""
import uuid
from datetime import datetime
from typing import Optional, List

from sqlmodel import SQLModel, Field
from sqlalchemy import Column

from kvb_crm.database import JSONType


class EnquiryStatus:
    PENDING = "pending"
    CONVERTED = "converted"
    CLOSED = "closed"


class Enquiry(SQLModel, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    customer_id: uuid.UUID = Field(index=True)
    product_id: uuid.UUID = Field(index=True)
    lead_id: Optional[uuid.UUID] = Field(default=None, index=True)

    message: str
    status: str = Field(default=EnquiryStatus.PENDING)
    region: Optional[str] = None

    attachments: List[dict] = Field(default=[], sa_column=Column(JSONType))

    # Timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
