"""
Project Model Module

This module defines the Project model and its status vocabulary. A project may
belong to a company and groups the tasks (service orders) done for it.
"""
from enum import Enum
from typing import Optional
from sqlmodel import SQLModel, Field, Relationship
import uuid

from datetime import datetime

from datenova.models.company import Company, CompanyRead


class ProjectStatus(str, Enum):
    PENDING = "pendiente"
    IN_PROGRESS = "en_progreso"
    PAUSED = "pausado"
    COMPLETED = "completado"


class ProjectBase(SQLModel):
    """
    Base Project model containing common fields.

    Attributes:
        nombre: Project name (required)
        descripcion: Free text description
        empresa_id: Company the project is done for
        estado: One of ProjectStatus values
        fecha_inicio / fecha_fin: ISO dates (YYYY-MM-DD)
        budget: Financial budget of the project
    """
    nombre: str = Field(nullable=False)
    descripcion: Optional[str] = None

    empresa_id: Optional[str] = Field(default=None, foreign_key="empresas.id")

    estado: str = Field(default=ProjectStatus.PENDING.value)

    # Timeline - dates stored as ISO format strings (YYYY-MM-DD)
    fecha_inicio: Optional[str] = None
    fecha_fin: Optional[str] = None

    budget: Optional[float] = None

    created_at: Optional[str] = Field(default_factory=lambda: datetime.utcnow().isoformat())
    updated_at: Optional[str] = Field(default_factory=lambda: datetime.utcnow().isoformat())


class Project(ProjectBase, table=True):
    """
    Project table model.
    """
    __tablename__ = "proyectos"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)

    empresa: Optional[Company] = Relationship()


class ProjectRead(ProjectBase):
    id: str


class ProjectReadWithCompany(ProjectRead):
    empresa: Optional[CompanyRead] = None
