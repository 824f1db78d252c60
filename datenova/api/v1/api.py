from fastapi import APIRouter
from datenova.api.v1.endpoints import (
    auth, health, users, invitations, notifications,
    companies, projects, tasks, time_logs, deliverables, dashboard
)

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(invitations.router, prefix="/invitations", tags=["invitations"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["notifications"])

# Resource endpoints
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
api_router.include_router(companies.router, prefix="/companies", tags=["companies"])
api_router.include_router(projects.router, prefix="/projects", tags=["projects"])
api_router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
api_router.include_router(time_logs.router, prefix="/time-logs", tags=["time-logs"])
api_router.include_router(deliverables.router, prefix="/deliverables", tags=["deliverables"])
