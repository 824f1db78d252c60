"""
User Model Module

This module defines the User profile model and UserRole enumeration used for
authorization throughout the application. A profile shares its id with the
AuthAccount it belongs to; an account without a profile still needs to be
activated through an invitation.
"""
from enum import Enum
from typing import Optional
from sqlmodel import SQLModel, Field, Relationship
import uuid
from datetime import datetime

from datenova.models.company import Company


class UserRole(str, Enum):
    """
    Enumeration of user roles.

    - CLIENT: External client user; can approve or reject deliverables
    - ADVISOR: Account advisor, manages companies and projects
    - SUPPORT: Technical support staff (shown as "Asesor Técnico")
    - DEVELOPER: Technical staff doing the work
    - SUPER_ADMIN: Full access, manages users and invitations
    """
    CLIENT = "cliente"
    ADVISOR = "asesor"
    SUPPORT = "apoyo"
    DEVELOPER = "desarrollador"
    SUPER_ADMIN = "superadmin"


class UserBase(SQLModel):
    """
    Fields shared by the profile table and its read schema.
    """
    nombre: str = Field(nullable=False)
    email: str = Field(index=True, nullable=False)
    rol: str = Field(default=UserRole.CLIENT.value)

    # Only clients are attached to a company
    empresa_id: Optional[str] = Field(default=None, foreign_key="empresas.id")

    # Internal cost per hour (payroll) and price per hour charged to the client
    tarifa_hora: float = 0
    billable_rate: float = 0

    avatar_url: Optional[str] = None
    created_at: Optional[str] = Field(default_factory=lambda: datetime.utcnow().isoformat())
    updated_at: Optional[str] = Field(default_factory=lambda: datetime.utcnow().isoformat())


class User(UserBase, table=True):
    """
    User profile table model.
    """
    __tablename__ = "usuarios"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)

    empresa: Optional[Company] = Relationship()

    @property
    def is_client(self) -> bool:
        return self.rol == UserRole.CLIENT


class UserRead(UserBase):
    """Schema for reading a user profile."""
    id: str
