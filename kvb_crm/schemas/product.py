"""
Product schemas.
"""
import uuid
from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, ConfigDict


class ProductResponse(BaseModel):
    """Full product, for admins and signed-in customers."""
    id: uuid.UUID
    name: str
    description: str
    price: float
    category: Optional[str]
    stock: int
    specifications: dict
    images: List[str]
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PublicProductResponse(BaseModel):
    """Anonymous catalogue view: no price, stock or specifications."""
    id: uuid.UUID
    name: str
    description: str
    image: str
