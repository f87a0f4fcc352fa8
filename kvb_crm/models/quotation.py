"""
Quotation model - a priced proposal for one customer and one product.
"""
import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlmodel import SQLModel, Field
from sqlalchemy import Column

from kvb_crm.database import JSONType


class QuotationStatus(str, Enum):
    """Every status the quotation workflow reads or writes."""
    NEW = "new"
    CONTACTED = "contacted"
    FOLLOW_UP_PENDING = "follow-up pending"
    QUOTATION_SENT = "quotation sent"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    CLOSED = "closed"
    CONVERTED = "converted"


class CreatorKind:
    ADMIN = "Admin"
    SALES = "Sales"
    CUSTOMER = "Customer"


class Quotation(SQLModel, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    customer_id: uuid.UUID = Field(index=True)
    product_id: uuid.UUID = Field(index=True)

    details: str
    price: float = Field(default=0)
    status: str = Field(default=QuotationStatus.NEW.value, index=True)
    region: Optional[str] = None

    # Product as it was when the quotation was issued
    product_snapshot: dict = Field(default={}, sa_column=Column(JSONType))
    # Example: {"name": "Solar Panel 5kW", "description": "...", "price": 1000.0, "image": "https://..."}

    # Creator, a tagged reference: (kind, id)
    created_by_type: str  # Admin, Sales, Customer
    created_by_id: uuid.UUID = Field(index=True)

    # Timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def created_by(self) -> dict:
        return {"kind": self.created_by_type, "id": self.created_by_id}
