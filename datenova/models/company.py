"""
Company Model Module

Companies are the CRM's clients. They are referenced, never owned, by projects
and by client users.
"""
from typing import Optional
from sqlmodel import SQLModel, Field
import uuid

from datetime import datetime


class CompanyBase(SQLModel):
    """
    Attributes:
        nombre: Company name (required)
        email: Contact e-mail
        telefono: Contact phone
        direccion: Postal address
    """
    nombre: str = Field(nullable=False)

    # Optional contact details
    email: Optional[str] = None
    telefono: Optional[str] = None
    direccion: Optional[str] = None

    created_at: Optional[str] = Field(default_factory=lambda: datetime.utcnow().isoformat())
    updated_at: Optional[str] = Field(default_factory=lambda: datetime.utcnow().isoformat())


class Company(CompanyBase, table=True):
    """
    Company model representing a client organization.
    """
    __tablename__ = "empresas"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)


class CompanyRead(CompanyBase):
    id: str
