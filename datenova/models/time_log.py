"""
Time Log Model Module

One row per block of hours a user worked on a task. Logs are owned by their
task and are deleted with it.
"""
from typing import Optional
from sqlmodel import SQLModel, Field, Relationship
import uuid
from datetime import datetime

from datenova.models.user import User, UserRead


class TimeLogBase(SQLModel):
    tarea_id: str = Field(foreign_key="tareas.id", index=True, ondelete="CASCADE")
    usuario_id: Optional[str] = Field(default=None, foreign_key="usuarios.id", ondelete="SET NULL")

    fecha: str = Field(nullable=False)  # ISO date (YYYY-MM-DD)
    horas: float = Field(nullable=False)
    descripcion: Optional[str] = None

    created_at: Optional[str] = Field(default_factory=lambda: datetime.utcnow().isoformat())


class TimeLog(TimeLogBase, table=True):
    __tablename__ = "registro_horas"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)

    usuario: Optional[User] = Relationship()


class TimeLogRead(TimeLogBase):
    id: str
    usuario: Optional[UserRead] = None
