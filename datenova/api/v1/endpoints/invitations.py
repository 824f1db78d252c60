"""
Invitation Endpoints Module

Super-admin only. Invitations are created here, "sent" by the administrator
from their own mail client using the composed mailto: link, and consumed by
POST /auth/activate.
"""
from typing import Any, Dict, List

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from datenova.api import deps
from datenova.db.gateway import DataGateway
from datenova.models.invitation import InvitationRead
from datenova.models.user import User
from datenova.services import invitations as invitation_service

router = APIRouter()


class InvitationEmail(BaseModel):
    to: str
    subject: str
    body: str
    link: str
    mailto: str


class InvitationSent(BaseModel):
    invitation: InvitationRead
    email: InvitationEmail


@router.get("", response_model=List[InvitationRead])
def list_invitations(
    gateway: DataGateway = Depends(deps.get_gateway),
    current_user: User = Depends(deps.require_superadmin),
):
    """Pending and sent invitations, newest first. Stale ones expire on the way."""
    return [
        InvitationRead.model_validate(inv, from_attributes=True)
        for inv in invitation_service.list_open_invitations(gateway)
    ]


@router.post("", response_model=InvitationRead)
def create_invitation(
    payload: Dict[str, Any],
    gateway: DataGateway = Depends(deps.get_gateway),
    current_user: User = Depends(deps.require_superadmin),
):
    invitation = invitation_service.create_invitation(gateway, payload)
    return InvitationRead.model_validate(invitation, from_attributes=True)


@router.post("/{invitation_id}/send", response_model=InvitationSent)
def send_invitation(
    invitation_id: str,
    gateway: DataGateway = Depends(deps.get_gateway),
    current_user: User = Depends(deps.require_superadmin),
) -> Any:
    result = invitation_service.mark_sent(gateway, invitation_id)
    return InvitationSent(
        invitation=InvitationRead.model_validate(result["invitation"], from_attributes=True),
        email=InvitationEmail(**result["email"]),
    )


@router.post("/{invitation_id}/cancel", response_model=InvitationRead)
def cancel_invitation(
    invitation_id: str,
    gateway: DataGateway = Depends(deps.get_gateway),
    current_user: User = Depends(deps.require_superadmin),
):
    invitation = invitation_service.cancel_invitation(gateway, invitation_id)
    return InvitationRead.model_validate(invitation, from_attributes=True)


@router.delete("/{invitation_id}")
def delete_invitation(
    invitation_id: str,
    gateway: DataGateway = Depends(deps.get_gateway),
    current_user: User = Depends(deps.require_superadmin),
):
    invitation_service.delete_invitation(gateway, invitation_id)
    return {"status": "success", "detail": "Invitación eliminada"}
