import pytest

from datenova.core.errors import NotFound, RemoteOperationFailed
from datenova.models import AuthAccount, Company, Task, TaskAssignment, TimeLog


def test_select_filters_and_ordering(gateway):
    gateway.insert(Company, [
        {"nombre": "Beta", "created_at": "2024-01-02T00:00:00"},
        {"nombre": "Alfa", "created_at": "2024-01-01T00:00:00"},
        {"nombre": "Gamma", "email": "g@test", "created_at": "2024-01-03T00:00:00"},
    ])

    newest_first = gateway.select(Company, order_by="created_at", descending=True)
    assert [c.nombre for c in newest_first] == ["Gamma", "Beta", "Alfa"]

    assert [c.nombre for c in gateway.select(Company, filters={"email": None}, order_by="nombre")] == ["Alfa", "Beta"]
    assert [c.nombre for c in gateway.select(Company, filters={"nombre__ne": "Beta"}, order_by="nombre")] == ["Alfa", "Gamma"]
    assert len(gateway.select(Company, filters={"nombre__in": ["Alfa", "Gamma"]})) == 2
    assert len(gateway.select(Company, limit=1)) == 1


def test_select_one_raises_not_found(gateway):
    with pytest.raises(NotFound):
        gateway.select_one(Company, id="missing")


def test_committed_inserts_and_updates_are_published(gateway, feed):
    events = []
    feed.subscribe("empresas", "*", None, events.append)

    company = gateway.insert(Company, [{"nombre": "Acme"}])[0]
    gateway.update(Company, {"telefono": "555"}, id=company.id)

    assert [e["nombre"] for e in events] == ["Acme", "Acme"]
    assert events[1]["telefono"] == "555"


def test_update_requires_a_filter(gateway):
    with pytest.raises(ValueError):
        gateway.update(Company, {"nombre": "x"})


def test_unique_violation_maps_to_23505(gateway):
    gateway.insert(AuthAccount, [{"email": "a@test"}])
    with pytest.raises(RemoteOperationFailed) as excinfo:
        gateway.insert(AuthAccount, [{"email": "a@test"}])
    assert excinfo.value.code == "23505"
    assert excinfo.value.status_code == 409


def test_foreign_key_violation_maps_to_23503(gateway):
    with pytest.raises(RemoteOperationFailed) as excinfo:
        gateway.insert(Task, [{"nombre": "Huérfana", "proyecto_id": "missing"}])
    assert excinfo.value.code == "23503"


def test_transaction_rolls_back_every_call(gateway, feed):
    events = []
    feed.subscribe("empresas", "INSERT", None, events.append)

    with pytest.raises(RuntimeError):
        with gateway.transaction():
            gateway.insert(Company, [{"nombre": "Temporal"}])
            raise RuntimeError("abort")

    assert gateway.select(Company) == []
    assert events == []


def test_transaction_publishes_on_commit(gateway, feed):
    events = []
    feed.subscribe("empresas", "INSERT", None, events.append)

    with gateway.transaction():
        gateway.insert(Company, [{"nombre": "Uno"}])
        gateway.insert(Company, [{"nombre": "Dos"}])
        assert events == []

    assert [e["nombre"] for e in events] == ["Uno", "Dos"]


def test_deleting_a_task_cascades(gateway, task, developer):
    gateway.insert(TaskAssignment, [{"task_id": task.id, "user_id": developer.id}])
    gateway.insert(TimeLog, [{"tarea_id": task.id, "usuario_id": developer.id, "fecha": "2024-05-01", "horas": 2}])

    assert gateway.delete(Task, id=task.id) == 1
    assert gateway.select(TaskAssignment) == []
    assert gateway.select(TimeLog) == []
