"""
Deliverable Model Module

Deliverables are versioned artifacts (file + metadata) submitted against a task
and approved or rejected by the client. DeliverableVersion rows form an
append-only history and are never updated after insert.
"""
from enum import Enum
from typing import Optional
from sqlmodel import SQLModel, Field, Relationship
import uuid
from datetime import datetime

from datenova.models.task import Task


class DeliverableStatus(str, Enum):
    PENDING = "Pendiente"
    IN_REVIEW = "En Revisión"
    APPROVED = "Aprobado"
    REJECTED = "Rechazado"
    # Declared and rendered, but no transition ever sets it
    IN_CORRECTION = "En Corrección"


class DeliverableType(str, Enum):
    DOCUMENT = "Documento"
    CODE = "Código"
    DESIGN = "Diseño"
    MANUAL = "Manual"
    OTHER = "Otro"


class DeliverableBase(SQLModel):
    """
    Attributes:
        tarea_id: Task the deliverable was produced for
        tipo_entregable: One of DeliverableType values
        version: Free-form version label ("1.0", "v2"...)
        archivo_url / archivo_nombre / archivo_tamano: Stored file reference
        estado: One of DeliverableStatus values
        fecha_entrega: Due date, fecha_aprobacion: set on approval
        comentarios_cliente: Client comments (required on rejection)
        aprobado_por / creado_por: Acting user references
    """
    tarea_id: str = Field(foreign_key="tareas.id", index=True)

    nombre: str = Field(nullable=False)
    descripcion: Optional[str] = None
    tipo_entregable: str = Field(default=DeliverableType.DOCUMENT.value)
    version: str = Field(default="1.0")

    archivo_url: Optional[str] = None
    archivo_nombre: Optional[str] = None
    archivo_tamano: Optional[int] = None

    estado: str = Field(default=DeliverableStatus.PENDING.value)

    fecha_entrega: Optional[str] = None
    fecha_aprobacion: Optional[str] = None
    comentarios_cliente: Optional[str] = None

    aprobado_por: Optional[str] = Field(default=None, foreign_key="usuarios.id", ondelete="SET NULL")
    creado_por: Optional[str] = Field(default=None, foreign_key="usuarios.id", ondelete="SET NULL")

    created_at: Optional[str] = Field(default_factory=lambda: datetime.utcnow().isoformat())
    updated_at: Optional[str] = Field(default_factory=lambda: datetime.utcnow().isoformat())


class Deliverable(DeliverableBase, table=True):
    __tablename__ = "deliverables"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)

    tarea: Optional[Task] = Relationship()


class DeliverableRead(DeliverableBase):
    id: str


class DeliverableVersionBase(SQLModel):
    """One uploaded file in a deliverable's history. Rows are never updated."""
    deliverable_id: str = Field(foreign_key="deliverables.id", index=True, ondelete="CASCADE")

    version: str = Field(nullable=False)
    archivo_url: Optional[str] = None
    archivo_nombre: Optional[str] = None
    archivo_tamano: Optional[int] = None
    notas_version: Optional[str] = None
    subido_por: Optional[str] = Field(default=None, foreign_key="usuarios.id", ondelete="SET NULL")

    created_at: Optional[str] = Field(default_factory=lambda: datetime.utcnow().isoformat())


class DeliverableVersion(DeliverableVersionBase, table=True):
    __tablename__ = "deliverable_versions"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)


class DeliverableVersionRead(DeliverableVersionBase):
    id: str
