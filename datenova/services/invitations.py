"""
Invitation Service
Handles user invitations - create, send (manually), cancel, expire and complete.

E-mail is never sent by the server: mark_sent composes the message and a
mailto: link for the administrator to send from their own client.
"""
from datetime import datetime, timedelta
from typing import Any, Dict, List
from urllib.parse import quote

import structlog

from datenova.core.config import settings
from datenova.core.errors import NotFound, ValidationFailed
from datenova.db.gateway import DataGateway
from datenova.models.auth_models import AuthAccount
from datenova.models.invitation import Invitation, InvitationStatus, OPEN_INVITATION_STATUSES
from datenova.models.user import User
from datenova.services.dashboard import as_number
from datenova.services.validation import invitation_schema, validate_or_raise

logger = structlog.get_logger(__name__)

DUPLICATE_EMAIL_MESSAGE = "Este email ya está registrado en el sistema"
INVITATION_SUBJECT = "Invitación a colaborar en Datenova"


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def create_invitation(gateway: DataGateway, payload: Dict[str, Any]) -> Invitation:
    """
    Create a pending invitation.

    Raises ValidationFailed if the payload is invalid or the e-mail already
    belongs to a profile or to another open invitation.
    """
    validate_or_raise(payload, invitation_schema())
    email = _normalize_email(payload["email"])

    # Check if a user already exists with this email
    existing_user = gateway.select(User, filters={"email": email}, limit=1)
    existing_invitation = gateway.select(
        Invitation,
        filters={"email": email, "status__in": OPEN_INVITATION_STATUSES},
        limit=1,
    )
    if existing_user or existing_invitation:
        raise ValidationFailed([{"field": "email", "message": DUPLICATE_EMAIL_MESSAGE}])

    invitation = gateway.insert(Invitation, [{
        "email": email,
        "rol": payload["rol"],
        "empresa_id": payload.get("empresa_id") or None,
        "tarifa_hora": as_number(payload.get("tarifa_hora")),
        "billable_rate": as_number(payload.get("billable_rate")),
        "status": InvitationStatus.PENDING.value,
        "invited_at": datetime.utcnow().isoformat(),
    }])[0]
    logger.info("invitation_created", invitation_id=invitation.id, rol=invitation.rol)
    return invitation


def compose_invitation_email(invitation: Invitation) -> Dict[str, str]:
    """Subject, body and mailto: link for an invitation."""
    link = f"{settings.FRONTEND_URL}/activate-account"
    body = (
        "Hola,\n\n"
        f"Te hemos invitado a unirte al equipo de Datenova con el rol de {invitation.rol.upper()}.\n\n"
        f"Para activar tu cuenta, por favor regístrate usando este correo electrónico ({invitation.email}) "
        f"en el siguiente enlace:\n\n{link}\n\n"
        "¡Bienvenido!"
    )
    mailto = f"mailto:{invitation.email}?subject={quote(INVITATION_SUBJECT)}&body={quote(body)}"
    return {"to": invitation.email, "subject": INVITATION_SUBJECT, "body": body, "link": link, "mailto": mailto}


def mark_sent(gateway: DataGateway, invitation_id: str) -> Dict[str, Any]:
    invitation = gateway.select_one(Invitation, id=invitation_id)
    if invitation.status not in OPEN_INVITATION_STATUSES:
        raise ValidationFailed([{
            "field": "status",
            "message": "Solo se pueden enviar invitaciones pendientes",
        }])
    email = compose_invitation_email(invitation)
    updated = gateway.update(Invitation, {"status": InvitationStatus.SENT.value}, id=invitation_id)[0]
    logger.info("invitation_sent", invitation_id=invitation_id)
    return {"invitation": updated, "email": email}


def cancel_invitation(gateway: DataGateway, invitation_id: str) -> Invitation:
    gateway.select_one(Invitation, id=invitation_id)
    return gateway.update(Invitation, {"status": InvitationStatus.CANCELLED.value}, id=invitation_id)[0]


def delete_invitation(gateway: DataGateway, invitation_id: str) -> None:
    if not gateway.delete(Invitation, id=invitation_id):
        raise NotFound("Invitación no encontrada")


def expire_stale_invitations(gateway: DataGateway, now: datetime = None) -> int:
    """Move open invitations older than INVITATION_EXPIRY_DAYS to expired."""
    now = now or datetime.utcnow()
    cutoff = (now - timedelta(days=settings.INVITATION_EXPIRY_DAYS)).isoformat()
    stale = [
        inv for inv in gateway.select(Invitation, filters={"status__in": OPEN_INVITATION_STATUSES})
        if inv.invited_at and inv.invited_at < cutoff
    ]
    if not stale:
        return 0
    gateway.update(
        Invitation,
        {"status": InvitationStatus.EXPIRED.value},
        id__in=[inv.id for inv in stale],
    )
    logger.info("invitations_expired", count=len(stale))
    return len(stale)


def list_open_invitations(gateway: DataGateway) -> List[Invitation]:
    """Get all pending and sent invitations, newest first"""
    expire_stale_invitations(gateway)
    return gateway.select(
        Invitation,
        filters={"status__in": OPEN_INVITATION_STATUSES},
        order_by="created_at",
        descending=True,
    )


def complete_invitation(gateway: DataGateway, account: AuthAccount, nombre: str) -> User:
    """
    Turn the open invitation for the account's e-mail into a user profile.

    The profile reuses the account id and takes role, company and rates from
    the invitation. Raises NotFound when there is no open invitation.
    """
    email = _normalize_email(account.email)
    matches = gateway.select(
        Invitation,
        filters={"email": email, "status__in": OPEN_INVITATION_STATUSES},
        order_by="created_at",
        descending=True,
        limit=1,
    )
    if not matches:
        raise NotFound("No hay una invitación pendiente para este email")
    invitation = matches[0]

    profile = gateway.insert(User, [{
        "id": account.id,
        "email": email,
        "nombre": nombre.strip(),
        "rol": invitation.rol,
        "empresa_id": invitation.empresa_id,
        "tarifa_hora": as_number(invitation.tarifa_hora),
        "billable_rate": as_number(invitation.billable_rate),
    }])[0]
    gateway.update(
        Invitation,
        {
            "status": InvitationStatus.ACCEPTED.value,
            "accepted_at": datetime.utcnow().isoformat(),
            "user_id": account.id,
        },
        id=invitation.id,
    )
    logger.info("invitation_accepted", invitation_id=invitation.id, user_id=account.id)
    return profile
