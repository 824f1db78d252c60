"""
Dashboard aggregation and list predicates.

Everything here is a pure function over records already fetched from the
gateway. Nothing is cached or persisted; the dashboard recomputes on every load.
"""
from typing import Any, Iterable, List, Optional, Sequence

from pydantic import BaseModel

from datenova.models.deliverable import DeliverableStatus
from datenova.models.project import ProjectStatus
from datenova.models.task import TaskPriority, TaskStatus
from datenova.models.user import UserRole


def as_number(value: Any) -> float:
    """Numeric value of a rate or an hour count; missing or non-numeric is 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return 0.0 if number != number else number


class LoggedHours(BaseModel):
    """A time log reduced to what the money figures need."""
    hours: float = 0
    cost_rate: float = 0
    billable_rate: float = 0

    @classmethod
    def from_log(cls, log: Any) -> "LoggedHours":
        user = getattr(log, "usuario", None)
        return cls(
            hours=as_number(getattr(log, "horas", None)),
            cost_rate=as_number(getattr(user, "tarifa_hora", None)),
            billable_rate=as_number(getattr(user, "billable_rate", None)),
        )


class Financials(BaseModel):
    revenue: float = 0
    cost: float = 0
    profit: float = 0
    # Percentages (0-100)
    profit_margin: float = 0


class OperationalStats(BaseModel):
    active_projects: int = 0
    pending_tasks: int = 0
    urgent_tasks: int = 0
    efficiency: float = 0


class DashboardSummary(BaseModel):
    financials: Financials
    stats: OperationalStats
    active_project_ids: List[str] = []
    critical_task_ids: List[str] = []
    user_count: int = 0


def compute_financials(time_logs: Iterable[Any]) -> Financials:
    total_cost = 0.0
    total_revenue = 0.0
    for log in time_logs:
        entry = log if isinstance(log, LoggedHours) else LoggedHours.from_log(log)
        total_cost += entry.hours * entry.cost_rate
        total_revenue += entry.hours * entry.billable_rate

    profit = total_revenue - total_cost
    margin = (profit / total_revenue) * 100 if total_revenue > 0 else 0
    return Financials(revenue=total_revenue, cost=total_cost, profit=profit, profit_margin=margin)


def compute_stats(projects: Sequence[Any], tasks: Sequence[Any]) -> OperationalStats:
    pending = [t for t in tasks if t.estado != TaskStatus.COMPLETED]
    completed = [t for t in tasks if t.estado == TaskStatus.COMPLETED]
    urgent = [t for t in pending if t.prioridad == TaskPriority.HIGH]
    efficiency = (len(completed) / len(tasks)) * 100 if tasks else 0
    return OperationalStats(
        active_projects=len([p for p in projects if p.estado == ProjectStatus.IN_PROGRESS]),
        pending_tasks=len(pending),
        urgent_tasks=len(urgent),
        efficiency=efficiency,
    )


def compute_dashboard(projects: Sequence[Any], tasks: Sequence[Any],
                      time_logs: Sequence[Any], users: Sequence[Any]) -> DashboardSummary:
    active = [p for p in projects if p.estado == ProjectStatus.IN_PROGRESS]
    urgent = [t for t in tasks if t.estado != TaskStatus.COMPLETED and t.prioridad == TaskPriority.HIGH]
    return DashboardSummary(
        financials=compute_financials(time_logs),
        stats=compute_stats(projects, tasks),
        active_project_ids=[p.id for p in active[:5]],
        critical_task_ids=[t.id for t in urgent[:4]],
        user_count=len(users),
    )


# ---------------------------------------------------------------------------
# List predicates
# ---------------------------------------------------------------------------

def task_matches(task: Any, project_id: Optional[str] = None, status: Optional[str] = None,
                 query: Optional[str] = None, user_ids: Optional[Sequence[str]] = None) -> bool:
    if project_id and task.proyecto_id != project_id:
        return False
    if status and task.estado != status:
        return False
    if query:
        needle = query.lower()
        in_name = needle in (task.nombre or "").lower()
        in_description = bool(task.descripcion) and needle in task.descripcion.lower()
        if not (in_name or in_description):
            return False
    if user_ids:
        assignee_ids = {u.id for u in (getattr(task, "assignees", None) or [])}
        if not assignee_ids.intersection(user_ids):
            return False
    return True


def filter_tasks(tasks: Iterable[Any], project_id: Optional[str] = None, status: Optional[str] = None,
                 query: Optional[str] = None, user_ids: Optional[Sequence[str]] = None) -> List[Any]:
    return [t for t in tasks if task_matches(t, project_id, status, query, user_ids)]


def filter_deliverables(deliverables: Iterable[Any], status: Optional[str] = None,
                        task_id: Optional[str] = None) -> List[Any]:
    return [
        d for d in deliverables
        if (not status or d.estado == status) and (not task_id or d.tarea_id == task_id)
    ]


# ---------------------------------------------------------------------------
# Badges
# ---------------------------------------------------------------------------

STATUS_BADGES = {
    DeliverableStatus.PENDING.value: "gray",
    DeliverableStatus.IN_REVIEW.value: "blue",
    DeliverableStatus.APPROVED.value: "green",
    DeliverableStatus.REJECTED.value: "red",
    DeliverableStatus.IN_CORRECTION.value: "yellow",
}


def status_badge(status: Optional[str]) -> str:
    return STATUS_BADGES.get(status or "", STATUS_BADGES[DeliverableStatus.PENDING.value])


def role_badge(role: Optional[str]) -> dict:
    if role == UserRole.SUPER_ADMIN:
        color = "red"
    elif role in (UserRole.DEVELOPER, UserRole.SUPPORT):
        color = "blue"
    elif role == UserRole.CLIENT:
        color = "green"
    else:
        color = "yellow"
    label = "ASESOR TÉCNICO" if role == UserRole.SUPPORT else (role or "").upper()
    return {"color": color, "label": label}
