"""
Task save and assignee reconciliation.

Assignments are stored as one TaskAssignment row per (task, user). Saving a
task replaces the whole set: every existing row for the task is deleted and
one row per desired user is inserted. The legacy `responsable_id` column
mirrors the first desired assignee for staff and is left untouched for
clients, who never change assignments.
"""
from typing import Any, Dict, List, Optional, Sequence

import structlog

from datenova.core.config import settings
from datenova.core.errors import PermissionDenied
from datenova.db.gateway import DataGateway
from datenova.models.task import Task, TaskAssignment
from datenova.models.user import User, UserRole
from datenova.services.dashboard import as_number
from datenova.services.validation import task_schema, validate_or_raise

logger = structlog.get_logger(__name__)

ASSIGNER_ROLES = (UserRole.SUPER_ADMIN.value, UserRole.ADVISOR.value, UserRole.DEVELOPER.value)

TASK_FIELDS = (
    "nombre", "descripcion", "proyecto_id", "prioridad", "estado",
    "horas_estimadas", "fecha_vencimiento",
)


def can_assign(role: Optional[str]) -> bool:
    return role in ASSIGNER_ROLES


def unique_ids(user_ids: Sequence[str]) -> List[str]:
    """Drop duplicates and blanks, keeping first-seen order."""
    return list(dict.fromkeys(uid for uid in user_ids if uid))


def legacy_responsible(actor_role: Optional[str], desired: Sequence[str],
                       current: Optional[str]) -> Optional[str]:
    if actor_role == UserRole.CLIENT:
        return current
    return desired[0] if desired else None


def reconcile_assignments(gateway: DataGateway, task_id: str, desired: Sequence[str]) -> List[TaskAssignment]:
    """
    Replace the assignee set of a task.

    Two independent calls: delete everything, then insert the new rows. If
    the insert fails the task is left with no assignments.
    """
    desired = unique_ids(desired)
    removed = gateway.delete(TaskAssignment, task_id=task_id)
    rows = [
        {"task_id": task_id, "user_id": user_id, "role_in_task": settings.TASK_ASSIGNMENT_ROLE}
        for user_id in desired
    ]
    inserted = gateway.insert(TaskAssignment, rows)
    logger.info("task_assignments_replaced", task_id=task_id, removed=removed, inserted=len(inserted))
    return inserted


def _save(gateway: DataGateway, data: Dict[str, Any], actor: User, task_id: Optional[str],
          assignee_ids: Optional[List[str]]) -> str:
    reconcile = assignee_ids is not None and not actor.is_client

    if task_id:
        current = gateway.select_one(Task, id=task_id)
        if reconcile:
            data["responsable_id"] = legacy_responsible(actor.rol, assignee_ids, current.responsable_id)
        gateway.update(Task, data, id=task_id)
    else:
        if reconcile:
            data["responsable_id"] = legacy_responsible(actor.rol, assignee_ids, None)
        task_id = gateway.insert(Task, [data])[0].id

    if reconcile:
        reconcile_assignments(gateway, task_id, assignee_ids)
    return task_id


def save_task(gateway: DataGateway, payload: Dict[str, Any], actor: User, task_id: Optional[str] = None,
              assignee_ids: Optional[Sequence[str]] = None, atomic: Optional[bool] = None) -> Task:
    """
    Create (task_id=None) or update a task and, for staff, replace its assignees.

    `assignee_ids=None` leaves assignments and the legacy field alone; an empty
    list clears them. Clients may edit task fields but their assignee list is
    ignored.
    """
    validate_or_raise(payload, task_schema())
    if atomic is None:
        atomic = settings.ATOMIC_MULTI_STEP_WRITES

    if assignee_ids is not None:
        if actor.is_client:
            assignee_ids = None
        elif not can_assign(actor.rol):
            raise PermissionDenied("No tienes permisos para asignar tareas")
        else:
            assignee_ids = unique_ids(assignee_ids)

    data = {key: payload[key] for key in TASK_FIELDS if key in payload}
    if "horas_estimadas" in data:
        data["horas_estimadas"] = as_number(data["horas_estimadas"])

    if atomic:
        with gateway.transaction():
            task_id = _save(gateway, data, actor, task_id, assignee_ids)
    else:
        task_id = _save(gateway, data, actor, task_id, assignee_ids)

    return gateway.select_one(Task, id=task_id, expand=("task_assignments.usuario",))
