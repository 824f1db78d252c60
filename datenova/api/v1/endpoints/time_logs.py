"""
Time Log Endpoints Module

Hour logging. Creating a log also adds its hours to the task's running total.
"""
from typing import Any, Dict, List

from fastapi import APIRouter, Depends

from datenova.api import deps
from datenova.db.gateway import DataGateway
from datenova.models.task import TaskRead
from datenova.models.time_log import TimeLogRead
from datenova.models.user import User
from datenova.services import time_logs

router = APIRouter()


@router.get("", response_model=List[TimeLogRead])
def list_time_logs(
    gateway: DataGateway = Depends(deps.get_gateway),
    current_user: User = Depends(deps.get_current_user),
):
    """The 50 most recent logs with the user who logged them."""
    return [TimeLogRead.model_validate(log, from_attributes=True) for log in time_logs.recent_logs(gateway)]


@router.get("/open-tasks", response_model=List[TaskRead])
def list_open_tasks(
    gateway: DataGateway = Depends(deps.get_gateway),
    current_user: User = Depends(deps.get_current_user),
):
    return [TaskRead.model_validate(t, from_attributes=True) for t in time_logs.open_tasks(gateway)]


@router.post("", response_model=TimeLogRead)
def create_time_log(
    payload: Dict[str, Any],
    gateway: DataGateway = Depends(deps.get_gateway),
    current_user: User = Depends(deps.get_current_user),
):
    log = time_logs.log_hours(gateway, payload, current_user)
    return TimeLogRead.model_validate(log, from_attributes=True)
