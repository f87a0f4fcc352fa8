"""
Product catalogue model.
"""
import uuid
from datetime import datetime
from typing import Optional, List

from sqlmodel import SQLModel, Field
from sqlalchemy import Column

from kvb_crm.database import JSONType


class Product(SQLModel, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)

    name: str = Field(index=True)
    description: str = Field(default="")
    price: float = Field(default=0)
    category: Optional[str] = Field(default=None, index=True)
    stock: int = Field(default=0)

    specifications: dict = Field(default={}, sa_column=Column(JSONType))
    # Example: {"capacity": "5kW", "warranty": "10 years"}

    images: List[str] = Field(default=[], sa_column=Column(JSONType))

    # Timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
