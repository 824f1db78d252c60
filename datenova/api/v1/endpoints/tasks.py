"""
Task Endpoints Module

This module provides CRUD endpoints for managing tasks with multi-user assignment support.
Tasks use a many-to-many relationship with users through the task_assignments table;
saving a task with an "assignees" list replaces the whole assignee set.
"""
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query

from datenova.api import deps
from datenova.db.gateway import DataGateway
from datenova.models.task import Task, TaskReadWithAssignees
from datenova.models.user import User
from datenova.services.assignments import save_task
from datenova.services.dashboard import filter_tasks

router = APIRouter()

ASSIGNEE_EXPAND = ("task_assignments.usuario",)


def _as_read(task: Task) -> TaskReadWithAssignees:
    return TaskReadWithAssignees.model_validate(task, from_attributes=True)


@router.get("", response_model=List[TaskReadWithAssignees])
def list_tasks(
    project_id: Optional[str] = None,
    estado: Optional[str] = None,
    q: Optional[str] = None,
    user_ids: Optional[List[str]] = Query(default=None),
    gateway: DataGateway = Depends(deps.get_gateway),
    current_user: User = Depends(deps.get_current_user),
):
    """
    Retrieve tasks with their assignees, newest first.

    Args:
        project_id: Only tasks of this project
        estado: Only tasks in this status
        q: Case-insensitive search on name and description
        user_ids: Only tasks assigned to at least one of these users
    """
    tasks = gateway.select(Task, order_by="created_at", descending=True, expand=ASSIGNEE_EXPAND)
    return [_as_read(t) for t in filter_tasks(tasks, project_id, estado, q, user_ids)]


@router.get("/{task_id}", response_model=TaskReadWithAssignees)
def read_task(
    task_id: str,
    gateway: DataGateway = Depends(deps.get_gateway),
    current_user: User = Depends(deps.get_current_user),
):
    return _as_read(gateway.select_one(Task, id=task_id, expand=ASSIGNEE_EXPAND))


@router.post("", response_model=TaskReadWithAssignees)
def create_task(
    task_data: Dict[str, Any],
    gateway: DataGateway = Depends(deps.get_gateway),
    current_user: User = Depends(deps.require_staff),
):
    """
    Create a new task with optional assignees.

    The task_data can include an "assignees" field containing a list of user IDs.
    The first one is also stored in the legacy responsable_id column.
    """
    assignee_ids = task_data.pop("assignees", None)
    return _as_read(save_task(gateway, task_data, current_user, assignee_ids=assignee_ids))


@router.patch("/{task_id}", response_model=TaskReadWithAssignees)
def update_task(
    task_id: str,
    task_update: Dict[str, Any],
    gateway: DataGateway = Depends(deps.get_gateway),
    current_user: User = Depends(deps.get_current_user),
):
    """
    Update an existing task from the full edit form.

    "assignees" absent means don't touch assignments, [] means clear all.
    Clients can edit task fields but never change assignments.
    """
    assignee_ids = task_update.pop("assignees", None)
    task = save_task(gateway, task_update, current_user, task_id=task_id, assignee_ids=assignee_ids)
    return _as_read(task)


@router.delete("/{task_id}")
def delete_task(
    task_id: str,
    gateway: DataGateway = Depends(deps.get_gateway),
    current_user: User = Depends(deps.require_staff),
):
    """
    Delete a task. Assignments and time logs are removed with it.
    """
    gateway.select_one(Task, id=task_id)
    gateway.delete(Task, id=task_id)
    return {"status": "success", "detail": "Tarea eliminada"}
