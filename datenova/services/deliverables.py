"""
Deliverable approval workflow.

    Pendiente --(staff: mark for review)--> En Revisión
    En Revisión --(client: approve)--> Aprobado
    En Revisión --(client: reject, comments required)--> Rechazado

Aprobado and Rechazado are terminal; a new file is submitted as a new version,
not as a transition. "En Corrección" is part of the vocabulary but no operation
sets it.

Creating a deliverable is three remote steps (insert record, upload file, patch
the record with the file reference). By default nothing is compensated: if the
upload fails the record stays without a file. With ATOMIC_MULTI_STEP_WRITES the
two database steps share a transaction and an uploaded file is removed again if
the final patch fails.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

import structlog

from datenova.core.config import settings
from datenova.core.errors import InvalidTransition, PermissionDenied, ValidationFailed
from datenova.db.gateway import DataGateway
from datenova.models.deliverable import (
    Deliverable, DeliverableStatus, DeliverableType, DeliverableVersion,
)
from datenova.models.user import User, UserRole
from datenova.services.validation import deliverable_schema, validate_form
from datenova.storage.provider import StorageProvider

logger = structlog.get_logger(__name__)

TRANSITIONS = {
    DeliverableStatus.PENDING.value: {DeliverableStatus.IN_REVIEW.value},
    DeliverableStatus.IN_REVIEW.value: {DeliverableStatus.APPROVED.value, DeliverableStatus.REJECTED.value},
}

CREATE_FIELDS = ("nombre", "descripcion", "tarea_id", "tipo_entregable", "fecha_entrega", "version")


@dataclass
class FileUpload:
    filename: str
    content: bytes
    content_type: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.content)


def can_approve(role: Optional[str]) -> bool:
    return role == UserRole.CLIENT


def can_manage(role: Optional[str]) -> bool:
    """Create, mark for review, add versions and delete."""
    return role != UserRole.CLIENT


def allowed_targets(status: str) -> set:
    return set(TRANSITIONS.get(status, set()))


def check_transition(current: str, target: str) -> None:
    if target not in allowed_targets(current):
        raise InvalidTransition(f"Un entregable en estado '{current}' no puede pasar a '{target}'")


def _require_manager(actor: User) -> None:
    if not can_manage(actor.rol):
        raise PermissionDenied("No tienes permisos para realizar esta acción")


def _require_client(actor: User) -> None:
    if not can_approve(actor.rol):
        raise PermissionDenied("Solo el cliente puede aprobar o rechazar entregables")


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------

def mark_for_review(gateway: DataGateway, deliverable_id: str, actor: User) -> Deliverable:
    _require_manager(actor)
    deliverable = gateway.select_one(Deliverable, id=deliverable_id)
    check_transition(deliverable.estado, DeliverableStatus.IN_REVIEW.value)
    updated = gateway.update(Deliverable, {"estado": DeliverableStatus.IN_REVIEW.value}, id=deliverable_id)
    logger.info("deliverable_marked_for_review", deliverable_id=deliverable_id, actor=actor.id)
    return updated[0]


def approve(gateway: DataGateway, deliverable_id: str, actor: User,
            comments: Optional[str] = None) -> Deliverable:
    _require_client(actor)
    deliverable = gateway.select_one(Deliverable, id=deliverable_id)
    check_transition(deliverable.estado, DeliverableStatus.APPROVED.value)
    patch = {
        "estado": DeliverableStatus.APPROVED.value,
        "comentarios_cliente": comments or None,
        "aprobado_por": actor.id,
        "fecha_aprobacion": datetime.utcnow().isoformat(),
    }
    updated = gateway.update(Deliverable, patch, id=deliverable_id)
    logger.info("deliverable_approved", deliverable_id=deliverable_id, actor=actor.id)
    return updated[0]


def reject(gateway: DataGateway, deliverable_id: str, actor: User, comments: Optional[str]) -> Deliverable:
    _require_client(actor)
    if not comments or not comments.strip():
        raise ValidationFailed([{
            "field": "comentarios_cliente",
            "message": "Debes proporcionar comentarios al rechazar un entregable",
        }])
    deliverable = gateway.select_one(Deliverable, id=deliverable_id)
    check_transition(deliverable.estado, DeliverableStatus.REJECTED.value)
    patch = {
        "estado": DeliverableStatus.REJECTED.value,
        "comentarios_cliente": comments,
        "aprobado_por": actor.id,
    }
    updated = gateway.update(Deliverable, patch, id=deliverable_id)
    logger.info("deliverable_rejected", deliverable_id=deliverable_id, actor=actor.id)
    return updated[0]


# ---------------------------------------------------------------------------
# Create / versions / delete
# ---------------------------------------------------------------------------

def _validate_create(payload: Dict[str, Any], upload: Optional[FileUpload]) -> None:
    result = validate_form(payload, deliverable_schema())
    if not result.is_valid:
        raise ValidationFailed(result.errors)
    if upload is None or not upload.filename:
        raise ValidationFailed([{"field": "archivo", "message": "Debes seleccionar un archivo para subir"}])


def _create_steps(gateway: DataGateway, storage: StorageProvider, row: Dict[str, Any],
                  upload: FileUpload, uploaded: List[str]) -> str:
    bucket = settings.DELIVERABLES_BUCKET
    # 1. Create the record
    record = gateway.insert(Deliverable, [row])[0]
    deliverable_id = record.id

    # 2. Upload the file
    path = f"{deliverable_id}/{upload.filename}"
    storage.put(bucket, path, upload.content, content_type=upload.content_type)
    uploaded.append(path)

    # 3. Attach the file reference
    gateway.update(
        Deliverable,
        {
            "archivo_url": storage.get_public_url(bucket, path),
            "archivo_nombre": upload.filename,
            "archivo_tamano": upload.size,
        },
        id=deliverable_id,
    )
    return deliverable_id


def create_deliverable(gateway: DataGateway, storage: StorageProvider, payload: Dict[str, Any],
                       upload: Optional[FileUpload], actor: User,
                       atomic: Optional[bool] = None) -> Deliverable:
    _require_manager(actor)
    _validate_create(payload, upload)
    if atomic is None:
        atomic = settings.ATOMIC_MULTI_STEP_WRITES

    row = {key: payload.get(key) for key in CREATE_FIELDS if payload.get(key) not in (None, "")}
    row.setdefault("tipo_entregable", DeliverableType.DOCUMENT.value)
    row["estado"] = DeliverableStatus.PENDING.value
    row["creado_por"] = actor.id

    uploaded: List[str] = []
    if not atomic:
        deliverable_id = _create_steps(gateway, storage, row, upload, uploaded)
    else:
        try:
            with gateway.transaction():
                deliverable_id = _create_steps(gateway, storage, row, upload, uploaded)
        except Exception:
            if uploaded:
                storage.remove(settings.DELIVERABLES_BUCKET, uploaded)
            raise

    logger.info("deliverable_created", deliverable_id=deliverable_id, actor=actor.id, atomic=atomic)
    return gateway.select_one(Deliverable, id=deliverable_id)


def add_version(gateway: DataGateway, storage: StorageProvider, deliverable_id: str,
                upload: Optional[FileUpload], version: Optional[str], actor: User,
                notes: Optional[str] = None) -> DeliverableVersion:
    """
    Record a new file for a deliverable in its version history and point the
    deliverable at it. The approval status is left as it is.
    """
    _require_manager(actor)
    errors = []
    if not version or not version.strip():
        errors.append({"field": "version", "message": "Versión es obligatorio"})
    if upload is None or not upload.filename:
        errors.append({"field": "archivo", "message": "Debes seleccionar un archivo para subir"})
    if errors:
        raise ValidationFailed(errors)

    gateway.select_one(Deliverable, id=deliverable_id)
    bucket = settings.DELIVERABLES_BUCKET
    path = f"{deliverable_id}/v{version.strip()}/{upload.filename}"
    storage.put(bucket, path, upload.content, content_type=upload.content_type)
    url = storage.get_public_url(bucket, path)

    entry = gateway.insert(DeliverableVersion, [{
        "deliverable_id": deliverable_id,
        "version": version.strip(),
        "archivo_url": url,
        "archivo_nombre": upload.filename,
        "archivo_tamano": upload.size,
        "notas_version": notes or None,
        "subido_por": actor.id,
    }])[0]
    gateway.update(
        Deliverable,
        {
            "version": version.strip(),
            "archivo_url": url,
            "archivo_nombre": upload.filename,
            "archivo_tamano": upload.size,
        },
        id=deliverable_id,
    )
    return entry


def list_versions(gateway: DataGateway, deliverable_id: str) -> List[DeliverableVersion]:
    return gateway.select(
        DeliverableVersion,
        filters={"deliverable_id": deliverable_id},
        order_by="created_at",
        descending=True,
    )


def delete_deliverable(gateway: DataGateway, storage: StorageProvider, deliverable_id: str,
                       actor: User) -> None:
    """Remove the stored files first (every version), then the record."""
    _require_manager(actor)
    gateway.select_one(Deliverable, id=deliverable_id)
    bucket = settings.DELIVERABLES_BUCKET

    paths = storage.list_paths(bucket, f"{deliverable_id}/")
    if paths:
        storage.remove(bucket, paths)

    gateway.delete(Deliverable, id=deliverable_id)
    logger.info("deliverable_deleted", deliverable_id=deliverable_id, actor=actor.id)
