from .auth_models import AuthAccount
from .company import Company, CompanyRead
from .user import User, UserRole, UserRead
from .project import Project, ProjectStatus, ProjectRead, ProjectReadWithCompany
from .task import Task, TaskAssignment, TaskStatus, TaskPriority, TaskRead, TaskReadWithAssignees
from .time_log import TimeLog, TimeLogRead
from .deliverable import (
    Deliverable, DeliverableVersion, DeliverableStatus, DeliverableType, DeliverableRead,
    DeliverableVersionRead,
)
from .invitation import Invitation, InvitationRead, InvitationStatus, OPEN_INVITATION_STATUSES
from .notification import Notification, NotificationRead, NotificationType

__all__ = [
    "AuthAccount",
    "Company", "CompanyRead",
    "User", "UserRole", "UserRead",
    "Project", "ProjectStatus", "ProjectRead", "ProjectReadWithCompany",
    "Task", "TaskAssignment", "TaskStatus", "TaskPriority", "TaskRead", "TaskReadWithAssignees",
    "TimeLog", "TimeLogRead",
    "Deliverable", "DeliverableVersion", "DeliverableStatus", "DeliverableType", "DeliverableRead",
    "DeliverableVersionRead",
    "Invitation", "InvitationRead", "InvitationStatus", "OPEN_INVITATION_STATUSES",
    "Notification", "NotificationRead", "NotificationType",
]
