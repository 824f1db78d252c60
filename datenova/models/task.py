"""
Task Model Module

This module defines the Task model ("service order") and the TaskAssignment
association table for many-to-many task assignment. The legacy responsable_id
column is kept for backward compatibility and mirrors the first assignee.
"""
from enum import Enum
from typing import Optional, List
from sqlmodel import SQLModel, Field, Relationship
import uuid
from datetime import datetime

from datenova.models.user import User, UserRead


class TaskStatus(str, Enum):
    PENDING = "pendiente"
    IN_PROGRESS = "en_progreso"
    COMPLETED = "completada"


class TaskPriority(str, Enum):
    LOW = "baja"
    MEDIUM = "media"
    HIGH = "alta"


class TaskAssignment(SQLModel, table=True):
    """
    Association table between Tasks and Users.

    Rows have no lifecycle of their own: they are replaced wholesale whenever
    the task's assignee set is saved, and disappear with the task.

    Attributes:
        task_id: Task being assigned
        user_id: User assigned to the task
        role_in_task: Fixed role tag (e.g. "collaborator")
    """
    __tablename__ = "task_assignments"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    task_id: str = Field(foreign_key="tareas.id", index=True, ondelete="CASCADE")
    user_id: str = Field(foreign_key="usuarios.id", ondelete="CASCADE")
    role_in_task: str = Field(default="collaborator")

    usuario: Optional[User] = Relationship()


class TaskBase(SQLModel):
    """
    Base Task model containing common fields.
    """
    nombre: str = Field(nullable=False)
    descripcion: Optional[str] = None

    # Every task belongs to a project
    proyecto_id: str = Field(foreign_key="proyectos.id", nullable=False)

    # Deprecated in favor of task_assignments, kept for backward compatibility
    responsable_id: Optional[str] = Field(default=None, foreign_key="usuarios.id", ondelete="SET NULL")

    prioridad: str = Field(default=TaskPriority.MEDIUM.value)
    estado: str = Field(default=TaskStatus.PENDING.value)

    horas_estimadas: float = 0
    # Accumulated from time logs, updated after each log insert
    horas_reales: float = 0

    fecha_vencimiento: Optional[str] = None

    created_at: Optional[str] = Field(default_factory=lambda: datetime.utcnow().isoformat())
    updated_at: Optional[str] = Field(default_factory=lambda: datetime.utcnow().isoformat())


class Task(TaskBase, table=True):
    """
    Task table model.
    """
    __tablename__ = "tareas"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)

    task_assignments: List["TaskAssignment"] = Relationship()

    @property
    def assignees(self) -> List[User]:
        return [ta.usuario for ta in self.task_assignments if ta.usuario is not None]


class TaskRead(TaskBase):
    """Schema for reading basic task data."""
    id: str


class TaskReadWithAssignees(TaskRead):
    """Schema for reading task data with its assignees flattened."""
    assignees: List[UserRead] = []
