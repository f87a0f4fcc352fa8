"""
Common schemas used across multiple endpoints.
"""
import uuid
from typing import TypeVar, Generic, List, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict

T = TypeVar("T")


class MessageResponse(BaseModel):
    """Simple message response."""
    message: str

    model_config = ConfigDict(json_schema_extra={"example": {"message": "Operation successful"}})


class PaginatedResponse(BaseModel, Generic[T]):
    """Generic paginated response."""
    items: List[T]
    total: int
    page: int
    limit: int
    pages: int
    has_next: bool
    has_prev: bool


class PrincipalRef(BaseModel):
    """Tagged reference to a principal: which table, which row."""
    kind: str  # Admin, Sales, Worker, Customer
    id: uuid.UUID


class Attachment(BaseModel):
    filename: str
    url: str
    public_id: str
    uploaded_at: Optional[datetime] = None


class EmailRequest(BaseModel):
    """Ad-hoc email composed by staff."""
    subject: str
    text: Optional[str] = ""
    html: Optional[str] = None


class ImportResponse(BaseModel):
    """Excel bulk import result."""
    message: str
    total_rows: int
    imported: int
    skipped: int


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "healthy"
    version: str = "1.0.0"
