from unittest.mock import patch

import pytest

from datenova.core.errors import RemoteOperationFailed, ValidationFailed
from datenova.db.gateway import DataGateway
from datenova.models import Task, TimeLog
from datenova.services import time_logs


def _entry(task, horas=3):
    return {"tarea_id": task.id, "horas": horas, "fecha": "2024-05-02", "descripcion": "Implementación del login"}


def test_logging_hours_adds_to_task_total(gateway, task, developer):
    time_logs.log_hours(gateway, _entry(task, 3), developer)
    log = time_logs.log_hours(gateway, _entry(task, "1.5"), developer)

    assert log.usuario.id == developer.id
    assert log.horas == 1.5
    assert gateway.select_one(Task, id=task.id).horas_reales == 4.5


def test_invalid_entry_is_rejected_before_any_write(gateway, task, developer):
    with pytest.raises(ValidationFailed) as excinfo:
        time_logs.log_hours(gateway, _entry(task, 25), developer)
    assert excinfo.value.message == "Horas trabajadas no puede ser mayor a 24"
    assert gateway.select(TimeLog) == []


def test_failed_total_update_keeps_the_log(gateway, task, developer):
    original_update = DataGateway.update

    def failing_update(self, model, patch_, **filters):
        if model is Task:
            raise RemoteOperationFailed("timeout")
        return original_update(self, model, patch_, **filters)

    with patch.object(DataGateway, "update", failing_update):
        with pytest.raises(RemoteOperationFailed):
            time_logs.log_hours(gateway, _entry(task, 2), developer, atomic=False)

    assert len(gateway.select(TimeLog)) == 1
    assert gateway.select_one(Task, id=task.id).horas_reales == 0


def test_atomic_mode_rolls_back_the_log(gateway, task, developer):
    original_update = DataGateway.update

    def failing_update(self, model, patch_, **filters):
        if model is Task:
            raise RemoteOperationFailed("timeout")
        return original_update(self, model, patch_, **filters)

    with patch.object(DataGateway, "update", failing_update):
        with pytest.raises(RemoteOperationFailed):
            time_logs.log_hours(gateway, _entry(task, 2), developer, atomic=True)

    assert gateway.select(TimeLog) == []


def test_recent_logs_and_open_tasks(gateway, session, task, project, developer):
    done = Task(nombre="Terminada", proyecto_id=project.id, estado="completada")
    session.add(done)
    session.commit()
    for day in range(1, 4):
        time_logs.log_hours(gateway, {**_entry(task, 1), "fecha": f"2024-05-0{day}"}, developer)

    assert [t.id for t in time_logs.open_tasks(gateway)] == [task.id]
    assert len(time_logs.recent_logs(gateway, limit=2)) == 2
