from types import SimpleNamespace as NS

import pytest

from datenova.services.dashboard import (
    LoggedHours, as_number, compute_dashboard, compute_financials, compute_stats,
    filter_deliverables, filter_tasks, role_badge, status_badge,
)


def _task(id, estado="pendiente", prioridad="media", proyecto_id="p1", nombre="Tarea", descripcion=None, assignees=()):
    return NS(id=id, estado=estado, prioridad=prioridad, proyecto_id=proyecto_id,
              nombre=nombre, descripcion=descripcion, assignees=[NS(id=a) for a in assignees])


def test_as_number_coalesces():
    assert as_number(None) == 0
    assert as_number("3.5") == 3.5
    assert as_number("abc") == 0
    assert as_number(float("nan")) == 0


def test_financials_from_logged_hours():
    logs = [
        LoggedHours(hours=10, cost_rate=20, billable_rate=50),
        LoggedHours(hours=5, cost_rate=30, billable_rate=60),
    ]
    result = compute_financials(logs)
    assert result.revenue == 800
    assert result.cost == 350
    assert result.profit == 450
    assert result.profit_margin == pytest.approx(56.25)


def test_financials_read_rates_from_the_logging_user():
    logs = [
        NS(horas=2, usuario=NS(tarifa_hora=10, billable_rate=None)),
        NS(horas=None, usuario=NS(tarifa_hora=99, billable_rate=99)),
        NS(horas=1, usuario=None),
    ]
    result = compute_financials(logs)
    assert result.cost == 20
    assert result.revenue == 0
    assert result.profit == -20
    assert result.profit_margin == 0


def test_stats_counts_and_efficiency():
    projects = [NS(id="p1", estado="en_progreso"), NS(id="p2", estado="pausado")]
    tasks = [
        _task("t1", estado="completada", prioridad="alta"),
        _task("t2", prioridad="alta"),
        _task("t3", estado="en_progreso"),
        _task("t4", estado="completada"),
    ]
    stats = compute_stats(projects, tasks)
    assert stats.active_projects == 1
    assert stats.pending_tasks == 2
    assert stats.urgent_tasks == 1
    assert stats.efficiency == 50


def test_empty_dashboard_has_no_division_errors():
    summary = compute_dashboard([], [], [], [])
    assert summary.stats.efficiency == 0
    assert summary.financials.profit_margin == 0
    assert summary.financials.cost == 0
    assert summary.financials.revenue == 0
    assert summary.financials.profit == 0
    assert summary.active_project_ids == []


def test_dashboard_display_lists_are_capped():
    projects = [NS(id=f"p{i}", estado="en_progreso") for i in range(7)]
    tasks = [_task(f"t{i}", prioridad="alta") for i in range(6)]
    summary = compute_dashboard(projects, tasks, [], [NS(id="u1"), NS(id="u2")])
    assert summary.active_project_ids == ["p0", "p1", "p2", "p3", "p4"]
    assert summary.critical_task_ids == ["t0", "t1", "t2", "t3"]
    assert summary.user_count == 2


def test_filter_tasks():
    tasks = [
        _task("t1", proyecto_id="p1", nombre="Login page", assignees=["u1"]),
        _task("t2", proyecto_id="p2", nombre="API", descripcion="Endpoints de LOGIN", assignees=["u2"]),
        _task("t3", proyecto_id="p1", nombre="Deploy", estado="completada"),
    ]
    assert [t.id for t in filter_tasks(tasks, project_id="p1")] == ["t1", "t3"]
    assert [t.id for t in filter_tasks(tasks, query="login")] == ["t1", "t2"]
    assert [t.id for t in filter_tasks(tasks, status="completada")] == ["t3"]
    assert [t.id for t in filter_tasks(tasks, user_ids=["u2", "u9"])] == ["t2"]
    assert [t.id for t in filter_tasks(tasks, user_ids=[])] == ["t1", "t2", "t3"]


def test_filter_deliverables():
    items = [NS(estado="Pendiente", tarea_id="a"), NS(estado="Aprobado", tarea_id="b")]
    assert filter_deliverables(items, status="Aprobado") == [items[1]]
    assert filter_deliverables(items, task_id="a") == [items[0]]


def test_badges():
    assert status_badge("En Revisión") == "blue"
    assert status_badge("En Corrección") == "yellow"
    assert status_badge("desconocido") == "gray"
    assert status_badge(None) == "gray"
    assert role_badge("apoyo") == {"color": "blue", "label": "ASESOR TÉCNICO"}
    assert role_badge("superadmin")["color"] == "red"
    assert role_badge("cliente")["color"] == "green"
    assert role_badge("asesor") == {"color": "yellow", "label": "ASESOR"}


def test_efficiency_is_full_when_every_task_is_completed():
    tasks = [_task("t1", estado="completada"), _task("t2", estado="completada", prioridad="alta")]
    stats = compute_stats([], tasks)
    assert stats.efficiency == 100
    assert stats.pending_tasks == 0
    assert stats.urgent_tasks == 0
