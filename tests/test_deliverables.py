from unittest.mock import patch

import pytest

from datenova.core.errors import InvalidTransition, PermissionDenied, RemoteOperationFailed, ValidationFailed
from datenova.models import Deliverable, DeliverableStatus
from datenova.services import deliverables as workflow
from datenova.services.deliverables import FileUpload


def _payload(task, **extra):
    return {"nombre": "Manual de usuario", "tarea_id": task.id, "tipo_entregable": "Manual", **extra}


def _upload():
    return FileUpload(filename="manual.pdf", content=b"%PDF-1.4 contenido", content_type="application/pdf")


@pytest.fixture
def deliverable(gateway, storage, task, developer):
    return workflow.create_deliverable(gateway, storage, _payload(task), _upload(), developer)


def test_role_capabilities():
    assert workflow.can_approve("cliente")
    assert not workflow.can_approve("superadmin")
    assert workflow.can_manage("desarrollador")
    assert not workflow.can_manage("cliente")


def test_create_uploads_file_and_links_it(deliverable, storage):
    assert deliverable.estado == DeliverableStatus.PENDING.value
    assert deliverable.archivo_nombre == "manual.pdf"
    assert deliverable.archivo_tamano == len(b"%PDF-1.4 contenido")
    assert deliverable.archivo_url == f"http://testserver/storage/deliverables/{deliverable.id}/manual.pdf"
    assert storage.exists("deliverables", f"{deliverable.id}/manual.pdf")


def test_create_requires_a_file(gateway, storage, task, developer):
    with pytest.raises(ValidationFailed) as excinfo:
        workflow.create_deliverable(gateway, storage, _payload(task), None, developer)
    assert excinfo.value.message == "Debes seleccionar un archivo para subir"
    assert gateway.select(Deliverable) == []


def test_clients_cannot_create(gateway, storage, task, client_user):
    with pytest.raises(PermissionDenied):
        workflow.create_deliverable(gateway, storage, _payload(task), _upload(), client_user)


def test_failed_upload_leaves_record_without_file(gateway, storage, task, developer):
    with patch.object(storage, "put", side_effect=RemoteOperationFailed("disk full")):
        with pytest.raises(RemoteOperationFailed):
            workflow.create_deliverable(gateway, storage, _payload(task), _upload(), developer, atomic=False)

    [orphan] = gateway.select(Deliverable)
    assert orphan.archivo_url is None


def test_atomic_create_rolls_back_record_and_file(gateway, storage, task, developer):
    with patch.object(storage, "get_public_url", side_effect=RemoteOperationFailed("no url")):
        with pytest.raises(RemoteOperationFailed):
            workflow.create_deliverable(gateway, storage, _payload(task), _upload(), developer, atomic=True)

    assert gateway.select(Deliverable) == []
    assert not any((storage.base_dir / "deliverables").rglob("*.pdf"))


def test_full_approval_path(gateway, deliverable, developer, client_user):
    reviewed = workflow.mark_for_review(gateway, deliverable.id, developer)
    assert reviewed.estado == "En Revisión"

    approved = workflow.approve(gateway, deliverable.id, client_user, "Todo correcto")
    assert approved.estado == "Aprobado"
    assert approved.aprobado_por == client_user.id
    assert approved.fecha_aprobacion is not None
    assert approved.comentarios_cliente == "Todo correcto"


def test_reject_requires_comments_and_keeps_state(gateway, deliverable, developer, client_user):
    workflow.mark_for_review(gateway, deliverable.id, developer)

    with pytest.raises(ValidationFailed) as excinfo:
        workflow.reject(gateway, deliverable.id, client_user, "   ")
    assert excinfo.value.message == "Debes proporcionar comentarios al rechazar un entregable"
    assert gateway.select_one(Deliverable, id=deliverable.id).estado == "En Revisión"

    rejected = workflow.reject(gateway, deliverable.id, client_user, "Faltan capturas")
    assert rejected.estado == "Rechazado"
    assert rejected.fecha_aprobacion is None


def test_only_clients_approve(gateway, deliverable, developer):
    workflow.mark_for_review(gateway, deliverable.id, developer)
    with pytest.raises(PermissionDenied):
        workflow.approve(gateway, deliverable.id, developer)


def test_invalid_transitions(gateway, deliverable, developer, client_user):
    with pytest.raises(InvalidTransition):
        workflow.approve(gateway, deliverable.id, client_user)

    workflow.mark_for_review(gateway, deliverable.id, developer)
    workflow.approve(gateway, deliverable.id, client_user)

    with pytest.raises(InvalidTransition):
        workflow.reject(gateway, deliverable.id, client_user, "Demasiado tarde")
    with pytest.raises(InvalidTransition):
        workflow.mark_for_review(gateway, deliverable.id, developer)


def test_add_version_keeps_status_and_history(gateway, storage, deliverable, developer):
    workflow.mark_for_review(gateway, deliverable.id, developer)
    new_file = FileUpload(filename="manual-v2.pdf", content=b"v2")

    entry = workflow.add_version(gateway, storage, deliverable.id, new_file, "2.0", developer, "Corrige índice")

    current = gateway.select_one(Deliverable, id=deliverable.id)
    assert current.estado == "En Revisión"
    assert current.version == "2.0"
    assert current.archivo_nombre == "manual-v2.pdf"
    assert entry.notas_version == "Corrige índice"
    assert [v.version for v in workflow.list_versions(gateway, deliverable.id)] == ["2.0"]


def test_delete_removes_files_and_versions(gateway, storage, deliverable, developer):
    workflow.add_version(gateway, storage, deliverable.id, FileUpload("b.pdf", b"b"), "2.0", developer)

    workflow.delete_deliverable(gateway, storage, deliverable.id, developer)

    assert gateway.select(Deliverable) == []
    assert workflow.list_versions(gateway, deliverable.id) == []
    assert not any((storage.base_dir / "deliverables").rglob("*.pdf"))
