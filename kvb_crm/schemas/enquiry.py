"""
Enquiry and customer portal schemas.
"""
import uuid
from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, ConfigDict

from kvb_crm.schemas.common import Attachment


class EnquiryResponse(BaseModel):
    id: uuid.UUID
    customer_id: uuid.UUID
    product_id: uuid.UUID
    lead_id: Optional[uuid.UUID]
    message: str
    status: str
    region: Optional[str]
    attachments: List[Attachment]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class EnquirySubmitResponse(BaseModel):
    success: bool = True
    message: str
    enquiry: EnquiryResponse


class ProjectItem(BaseModel):
    """A quotation or a task, flattened for the customer's project list."""
    id: uuid.UUID
    type: str  # quotation, task
    title: str
    description: str
    status: str
    product_id: Optional[uuid.UUID] = None
    location: Optional[str] = None
    due_date: Optional[datetime] = None
    attachments: List[Attachment] = []
    created_at: datetime
    updated_at: datetime


class EnquiryListResponse(BaseModel):
    success: bool = True
    enquiries: List[EnquiryResponse]


class ProjectListResponse(BaseModel):
    success: bool = True
    projects: List[ProjectItem]
