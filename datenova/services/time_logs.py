"""
Time tracking.

Logging hours is two calls: insert the log, then add its hours to the task's
`horas_reales`. They commit separately unless ATOMIC_MULTI_STEP_WRITES is on,
so a failure between them leaves the log without the task total updated.
"""
from typing import Any, Dict, List, Optional

import structlog

from datenova.core.config import settings
from datenova.db.gateway import DataGateway
from datenova.models.task import Task, TaskStatus
from datenova.models.time_log import TimeLog
from datenova.models.user import User
from datenova.services.dashboard import as_number
from datenova.services.validation import time_log_schema, validate_or_raise

logger = structlog.get_logger(__name__)

RECENT_LIMIT = 50


def _record(gateway: DataGateway, row: Dict[str, Any]) -> str:
    log = gateway.insert(TimeLog, [row])[0]
    log_id = log.id

    task = gateway.select_one(Task, id=row["tarea_id"])
    gateway.update(Task, {"horas_reales": as_number(task.horas_reales) + row["horas"]}, id=task.id)
    return log_id


def log_hours(gateway: DataGateway, payload: Dict[str, Any], user: User,
              atomic: Optional[bool] = None) -> TimeLog:
    validate_or_raise(payload, time_log_schema())
    if atomic is None:
        atomic = settings.ATOMIC_MULTI_STEP_WRITES

    row = {
        "tarea_id": payload["tarea_id"],
        "usuario_id": user.id,
        "fecha": payload["fecha"],
        "horas": as_number(payload["horas"]),
        "descripcion": payload["descripcion"],
    }
    if atomic:
        with gateway.transaction():
            log_id = _record(gateway, row)
    else:
        log_id = _record(gateway, row)

    logger.info("hours_logged", task_id=row["tarea_id"], user_id=user.id, hours=row["horas"])
    return gateway.select_one(TimeLog, id=log_id, expand=("usuario",))


def recent_logs(gateway: DataGateway, limit: int = RECENT_LIMIT) -> List[TimeLog]:
    return gateway.select(TimeLog, order_by="created_at", descending=True, limit=limit, expand=("usuario",))


def open_tasks(gateway: DataGateway) -> List[Task]:
    """Tasks that can still receive hours."""
    return gateway.select(Task, filters={"estado__ne": TaskStatus.COMPLETED.value}, order_by="nombre")
