"""
Lead schemas.
"""
import uuid
from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, ConfigDict


class LeadNote(BaseModel):
    message: str
    added_by: Optional[uuid.UUID] = None  # None for system generated notes
    added_at: datetime


class LeadCreate(BaseModel):
    """Create a new lead."""
    name: str
    email: str
    phone: str
    region: Optional[str] = None
    source: Optional[str] = "website"
    message: Optional[str] = None
    notes: Optional[List[str]] = []

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "A",
                "email": "a@x.com",
                "phone": "123",
                "region": "North",
                "source": "web"
            }
        }
    )


class LeadUpdate(BaseModel):
    """
    Update an existing lead.
    `status` is free text; `note` is appended to the note log.
    """
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    region: Optional[str] = None
    source: Optional[str] = None
    message: Optional[str] = None
    status: Optional[str] = None
    assigned_to: Optional[uuid.UUID] = None
    note: Optional[str] = None


class LeadNoteCreate(BaseModel):
    message: str
    added_by: Optional[uuid.UUID] = None


class LeadResponse(BaseModel):
    """Lead response."""
    id: uuid.UUID
    name: str
    email: str
    phone: str
    region: Optional[str]
    status: str
    source: str
    message: Optional[str]
    assigned_to: Optional[uuid.UUID]
    customer_id: Optional[uuid.UUID]
    notes: List[LeadNote]
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class LeadNoteResponse(BaseModel):
    message: str
    lead: LeadResponse


class LeadFilter(BaseModel):
    """Lead filtering options."""
    status: Optional[str] = None
    region: Optional[str] = None
    assigned_to: Optional[uuid.UUID] = None
    search: Optional[str] = None  # Search in name, email, phone


class FollowUpEmailRequest(BaseModel):
    """Email to an arbitrary address, composed by sales."""
    to: str
    subject: str
    text: Optional[str] = ""
    html: Optional[str] = None
