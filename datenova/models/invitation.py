"""
Invitation Model Module

An invitation is a pending grant of role, company and rates. It becomes a real
user profile when the invited person activates their account.

Lifecycle: pending -> sent -> accepted, with cancelled and expired as exits.
"""
from enum import Enum
from typing import Optional
from sqlmodel import SQLModel, Field
import uuid
from datetime import datetime


class InvitationStatus(str, Enum):
    PENDING = "pending"
    SENT = "sent"
    ACCEPTED = "accepted"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


OPEN_INVITATION_STATUSES = (InvitationStatus.PENDING.value, InvitationStatus.SENT.value)


class InvitationBase(SQLModel):
    email: str = Field(index=True, nullable=False)
    rol: str = Field(nullable=False)
    empresa_id: Optional[str] = Field(default=None, foreign_key="empresas.id", ondelete="SET NULL")

    tarifa_hora: float = 0
    billable_rate: float = 0

    status: str = Field(default=InvitationStatus.PENDING.value)

    # Account that consumed the invitation
    user_id: Optional[str] = None

    invited_at: Optional[str] = Field(default_factory=lambda: datetime.utcnow().isoformat())
    accepted_at: Optional[str] = None
    created_at: Optional[str] = Field(default_factory=lambda: datetime.utcnow().isoformat())


class Invitation(InvitationBase, table=True):
    __tablename__ = "invitations"

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)


class InvitationRead(InvitationBase):
    id: str
