from fastapi import APIRouter, Depends

from datenova.api import deps
from datenova.db.gateway import DataGateway
from datenova.models.project import Project
from datenova.models.task import Task
from datenova.models.time_log import TimeLog
from datenova.models.user import User
from datenova.services.dashboard import DashboardSummary, compute_dashboard

router = APIRouter()


@router.get("", response_model=DashboardSummary)
def read_dashboard(
    gateway: DataGateway = Depends(deps.get_gateway),
    current_user: User = Depends(deps.get_current_user),
):
    """
    Financial and operational summary, recomputed from the current records on
    every call. Money figures use the rates of the user who logged each block
    of hours.
    """
    projects = gateway.select(Project, order_by="created_at", descending=True)
    tasks = gateway.select(Task, order_by="created_at", descending=True)
    time_logs = gateway.select(TimeLog, expand=("usuario",))
    users = gateway.select(User)
    return compute_dashboard(projects, tasks, time_logs, users)
