"""
Principal management schemas (admin screens).
"""
import uuid
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, EmailStr


# Customer schemas
class CustomerCreate(BaseModel):
    full_name: str
    email: EmailStr
    password: str
    phone: str
    address: str
    region: Optional[str] = None
    company: Optional[str] = None


class CustomerUpdate(BaseModel):
    full_name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    region: Optional[str] = None
    company: Optional[str] = None


class CustomerResponse(BaseModel):
    id: uuid.UUID
    email: str
    full_name: str
    phone: str
    address: str
    region: Optional[str] = None
    company: Optional[str] = None
    profile_pic: str = ""
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# Worker schemas
class WorkerCreate(BaseModel):
    full_name: str
    email: EmailStr
    password: str
    specialization: str


class WorkerUpdate(BaseModel):
    full_name: Optional[str] = None
    email: Optional[EmailStr] = None
    specialization: Optional[str] = None
    status: Optional[str] = None


class WorkerResponse(BaseModel):
    id: uuid.UUID
    email: str
    full_name: str
    specialization: str
    status: str
    profile_pic: str = ""
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# Sales schemas
class SalesResponse(BaseModel):
    id: uuid.UUID
    email: str
    full_name: str
    region: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
