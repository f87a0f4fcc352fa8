"""
Authentication schemas.
"""
import uuid
from typing import Optional
from pydantic import BaseModel, ConfigDict, EmailStr


class LoginRequest(BaseModel):
    """Login request, same shape for every role."""
    email: EmailStr
    password: str

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "email": "user@kvbenergies.com",
                "password": "securepassword123"
            }
        }
    )


class AdminSignupRequest(BaseModel):
    email: EmailStr
    password: str
    full_name: str


class SalesSignupRequest(BaseModel):
    email: EmailStr
    password: str
    full_name: str
    region: str


class WorkerSignupRequest(BaseModel):
    email: EmailStr
    password: str
    full_name: str
    specialization: str


class CustomerSignupRequest(BaseModel):
    email: EmailStr
    password: str
    full_name: str
    phone: str
    address: str
    region: Optional[str] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "email": "customer@mail.com",
                "password": "securepassword123",
                "full_name": "Asha Rao",
                "phone": "9876543210",
                "address": "12 MG Road, Pune"
            }
        }
    )


class PrincipalResponse(BaseModel):
    """Returned by signup and login."""
    id: uuid.UUID
    email: str
    full_name: str
    role: str
    profile_pic: str = ""
    region: Optional[str] = None
    specialization: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class PasswordResetRequest(BaseModel):
    """Request password reset."""
    email: EmailStr


class PasswordResetConfirm(BaseModel):
    """New password, the token travels in the URL."""
    password: str
