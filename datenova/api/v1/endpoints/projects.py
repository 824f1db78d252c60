"""
Project Endpoints Module

This module provides CRUD endpoints for managing projects. Every authenticated
user can list projects; only staff (non-client roles) can change them.
"""
from typing import Any, Dict, List

from fastapi import APIRouter, Depends

from datenova.api import deps
from datenova.db.gateway import DataGateway
from datenova.models.project import Project, ProjectReadWithCompany
from datenova.models.user import User
from datenova.services.dashboard import as_number
from datenova.services.validation import project_schema, validate_or_raise

router = APIRouter()

PROJECT_FIELDS = ("nombre", "descripcion", "empresa_id", "estado", "fecha_inicio", "fecha_fin", "budget")


def _project_data(payload: Dict[str, Any]) -> Dict[str, Any]:
    data = {key: payload[key] for key in PROJECT_FIELDS if key in payload}
    # The edit form sends "" for "no company"
    if "empresa_id" in data and not data["empresa_id"]:
        data["empresa_id"] = None
    if "budget" in data:
        data["budget"] = None if data["budget"] in (None, "") else as_number(data["budget"])
    return data


def _read(gateway: DataGateway, project_id: str) -> ProjectReadWithCompany:
    project = gateway.select_one(Project, id=project_id, expand=("empresa",))
    return ProjectReadWithCompany.model_validate(project, from_attributes=True)


@router.get("", response_model=List[ProjectReadWithCompany])
def list_projects(
    estado: str = None,
    gateway: DataGateway = Depends(deps.get_gateway),
    current_user: User = Depends(deps.get_current_user),
):
    """
    Retrieve all projects with their company, newest first.

    Args:
        estado: Optional status filter
    """
    filters = {"estado": estado} if estado else None
    projects = gateway.select(Project, filters=filters, order_by="created_at", descending=True, expand=("empresa",))
    return [ProjectReadWithCompany.model_validate(p, from_attributes=True) for p in projects]


@router.get("/{project_id}", response_model=ProjectReadWithCompany)
def read_project(
    project_id: str,
    gateway: DataGateway = Depends(deps.get_gateway),
    current_user: User = Depends(deps.get_current_user),
):
    return _read(gateway, project_id)


@router.post("", response_model=ProjectReadWithCompany)
def create_project(
    payload: Dict[str, Any],
    gateway: DataGateway = Depends(deps.get_gateway),
    current_user: User = Depends(deps.require_staff),
):
    validate_or_raise(payload, project_schema(payload.get("fecha_inicio")))
    project = gateway.insert(Project, [_project_data(payload)])[0]
    return _read(gateway, project.id)


@router.patch("/{project_id}", response_model=ProjectReadWithCompany)
def update_project(
    project_id: str,
    payload: Dict[str, Any],
    gateway: DataGateway = Depends(deps.get_gateway),
    current_user: User = Depends(deps.require_staff),
):
    gateway.select_one(Project, id=project_id)
    validate_or_raise(payload, project_schema(payload.get("fecha_inicio")))
    gateway.update(Project, _project_data(payload), id=project_id)
    return _read(gateway, project_id)


@router.delete("/{project_id}")
def delete_project(
    project_id: str,
    gateway: DataGateway = Depends(deps.get_gateway),
    current_user: User = Depends(deps.require_staff),
):
    """
    Delete a project. Fails with 409 while tasks still reference it.
    """
    gateway.select_one(Project, id=project_id)
    gateway.delete(Project, id=project_id)
    return {"status": "success", "detail": "Proyecto eliminado"}
