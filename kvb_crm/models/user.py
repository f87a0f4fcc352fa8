"""
Principal models - one table per role.
Each role authenticates with its own cookie and sees its own scope.
"""
import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field


class Region:
    NORTH = "North"
    SOUTH = "South"
    EAST = "East"
    WEST = "West"
    CENTRAL = "Central"

    ALL = [NORTH, SOUTH, EAST, WEST, CENTRAL]


class PrincipalBase(SQLModel):
    """Columns shared by every principal table."""
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)

    # Auth
    email: str = Field(unique=True, index=True)
    password_hash: str

    # Profile
    full_name: str
    profile_pic: str = Field(default="")

    # Timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def kind(self) -> str:
        """Tag used in polymorphic references: Admin, Sales, Worker, Customer."""
        return self.role.capitalize()


class StaffBase(PrincipalBase):
    """Staff principals can reset their password."""
    password_reset_token: Optional[str] = Field(default=None, index=True)  # sha256 of the raw token
    password_reset_expires: Optional[datetime] = None


class Admin(StaffBase, table=True):
    role: str = Field(default="admin")


class Sales(StaffBase, table=True):
    role: str = Field(default="sales")
    region: str = Field(index=True)


class Worker(StaffBase, table=True):
    role: str = Field(default="worker")
    specialization: str
    status: str = Field(default="available")  # available, busy, off-duty


class Customer(PrincipalBase, table=True):
    role: str = Field(default="customer")
    phone: str
    address: str
    region: Optional[str] = None
    company: Optional[str] = None
