"""
Notification Model Module

In-app notifications shown in the header bell. Rows are inserted by other
parts of the system; the owner only flips the read flag.
"""
from enum import Enum
from typing import Optional
from sqlmodel import SQLModel, Field
import uuid
from datetime import datetime


class NotificationType(str, Enum):
    ASSIGNMENT = "assignment"
    STATUS_CHANGE = "status_change"
    COMMENT = "comment"
    MENTION = "mention"
    INFO = "info"


class NotificationBase(SQLModel):
    user_id: str = Field(foreign_key="usuarios.id", index=True, ondelete="CASCADE")

    title: str = Field(nullable=False)
    message: str = Field(nullable=False)
    type: str = Field(default=NotificationType.INFO.value)
    link: Optional[str] = None
    read: bool = False

    created_at: Optional[str] = Field(default_factory=lambda: datetime.utcnow().isoformat())


class Notification(NotificationBase, table=True):
    __tablename__ = "notifications"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)


class NotificationRead(NotificationBase):
    id: str
