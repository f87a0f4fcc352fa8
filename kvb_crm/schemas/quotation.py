"""
Quotation schemas.
"""
import uuid
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict

from kvb_crm.models.quotation import QuotationStatus
from kvb_crm.schemas.common import PrincipalRef


class QuotationCreate(BaseModel):
    """
    Create a quotation as staff.
    With `lead_id` the lead is converted and its customer becomes the owner.
    """
    product_id: uuid.UUID
    details: str
    price: float = 0
    customer_id: Optional[uuid.UUID] = None
    lead_id: Optional[uuid.UUID] = None
    region: Optional[str] = None


class QuotationRequest(BaseModel):
    """Quotation requested by a customer for themselves."""
    product_id: uuid.UUID
    details: str


class QuotationUpdate(BaseModel):
    product_id: Optional[uuid.UUID] = None
    details: Optional[str] = None
    status: Optional[QuotationStatus] = None
    price: Optional[float] = None


class QuotationResponse(BaseModel):
    id: uuid.UUID
    customer_id: uuid.UUID
    product_id: uuid.UUID
    details: str
    price: float
    status: str
    region: Optional[str]
    product_snapshot: dict
    created_by: PrincipalRef
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class QuotationRequestResponse(BaseModel):
    message: str
    quotation: QuotationResponse
