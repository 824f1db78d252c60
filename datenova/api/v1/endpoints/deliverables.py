"""
Deliverable Endpoints Module

Deliverables are files produced for a task and approved or rejected by the
client. Staff create them, submit them for review and upload new versions;
only clients approve or reject.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from pydantic import BaseModel

from datenova.api import deps
from datenova.db.gateway import DataGateway
from datenova.models.deliverable import Deliverable, DeliverableRead, DeliverableVersionRead
from datenova.models.user import User
from datenova.services import deliverables as workflow
from datenova.services.dashboard import filter_deliverables
from datenova.storage.local_provider import get_storage
from datenova.storage.provider import StorageProvider

router = APIRouter()


class ReviewDecision(BaseModel):
    comentarios: Optional[str] = None


def _as_read(deliverable: Deliverable) -> DeliverableRead:
    return DeliverableRead.model_validate(deliverable, from_attributes=True)


def _to_upload(archivo: Optional[UploadFile]) -> Optional[workflow.FileUpload]:
    if archivo is None or not archivo.filename:
        return None
    return workflow.FileUpload(
        filename=archivo.filename,
        content=archivo.file.read(),
        content_type=archivo.content_type,
    )


@router.get("", response_model=List[DeliverableRead])
def list_deliverables(
    estado: Optional[str] = None,
    tarea_id: Optional[str] = None,
    gateway: DataGateway = Depends(deps.get_gateway),
    current_user: User = Depends(deps.get_current_user),
):
    """Retrieve deliverables, newest first, optionally filtered by status and task."""
    deliverables = gateway.select(Deliverable, order_by="created_at", descending=True)
    return [_as_read(d) for d in filter_deliverables(deliverables, estado, tarea_id)]


@router.get("/{deliverable_id}", response_model=DeliverableRead)
def read_deliverable(
    deliverable_id: str,
    gateway: DataGateway = Depends(deps.get_gateway),
    current_user: User = Depends(deps.get_current_user),
):
    return _as_read(gateway.select_one(Deliverable, id=deliverable_id))


@router.post("", response_model=DeliverableRead)
def create_deliverable(
    nombre: str = Form(""),
    tarea_id: str = Form(...),
    tipo_entregable: str = Form("Documento"),
    descripcion: Optional[str] = Form(None),
    fecha_entrega: Optional[str] = Form(None),
    version: str = Form("1.0"),
    archivo: Optional[UploadFile] = File(None),
    gateway: DataGateway = Depends(deps.get_gateway),
    storage: StorageProvider = Depends(get_storage),
    current_user: User = Depends(deps.get_current_user),
):
    """
    Create a deliverable from a multipart form and upload its file.
    """
    payload = {
        "nombre": nombre,
        "tarea_id": tarea_id,
        "tipo_entregable": tipo_entregable,
        "descripcion": descripcion,
        "fecha_entrega": fecha_entrega,
        "version": version,
    }
    upload = _to_upload(archivo)
    deliverable = workflow.create_deliverable(gateway, storage, payload, upload, current_user)
    return _as_read(deliverable)


@router.post("/{deliverable_id}/review", response_model=DeliverableRead)
def mark_for_review(
    deliverable_id: str,
    gateway: DataGateway = Depends(deps.get_gateway),
    current_user: User = Depends(deps.get_current_user),
):
    return _as_read(workflow.mark_for_review(gateway, deliverable_id, current_user))


@router.post("/{deliverable_id}/approve", response_model=DeliverableRead)
def approve_deliverable(
    deliverable_id: str,
    decision: Optional[ReviewDecision] = None,
    gateway: DataGateway = Depends(deps.get_gateway),
    current_user: User = Depends(deps.get_current_user),
):
    comments = decision.comentarios if decision else None
    return _as_read(workflow.approve(gateway, deliverable_id, current_user, comments))


@router.post("/{deliverable_id}/reject", response_model=DeliverableRead)
def reject_deliverable(
    deliverable_id: str,
    decision: ReviewDecision,
    gateway: DataGateway = Depends(deps.get_gateway),
    current_user: User = Depends(deps.get_current_user),
):
    return _as_read(workflow.reject(gateway, deliverable_id, current_user, decision.comentarios))


@router.get("/{deliverable_id}/versions", response_model=List[DeliverableVersionRead])
def list_versions(
    deliverable_id: str,
    gateway: DataGateway = Depends(deps.get_gateway),
    current_user: User = Depends(deps.get_current_user),
):
    gateway.select_one(Deliverable, id=deliverable_id)
    return [
        DeliverableVersionRead.model_validate(v, from_attributes=True)
        for v in workflow.list_versions(gateway, deliverable_id)
    ]


@router.post("/{deliverable_id}/versions", response_model=DeliverableVersionRead)
def add_version(
    deliverable_id: str,
    version: str = Form(""),
    notas_version: Optional[str] = Form(None),
    archivo: Optional[UploadFile] = File(None),
    gateway: DataGateway = Depends(deps.get_gateway),
    storage: StorageProvider = Depends(get_storage),
    current_user: User = Depends(deps.get_current_user),
):
    upload = _to_upload(archivo)
    entry = workflow.add_version(gateway, storage, deliverable_id, upload, version, current_user, notas_version)
    return DeliverableVersionRead.model_validate(entry, from_attributes=True)


@router.delete("/{deliverable_id}")
def delete_deliverable(
    deliverable_id: str,
    gateway: DataGateway = Depends(deps.get_gateway),
    storage: StorageProvider = Depends(get_storage),
    current_user: User = Depends(deps.get_current_user),
):
    workflow.delete_deliverable(gateway, storage, deliverable_id, current_user)
    return {"status": "success", "detail": "Entregable eliminado"}
