from datetime import datetime, timedelta

import pytest

from datenova.core.errors import NotFound, ValidationFailed
from datenova.models import AuthAccount, Invitation, User
from datenova.services import invitations


def _invite(gateway, email="nuevo@datenova.test", **extra):
    payload = {"email": email, "rol": "desarrollador", "tarifa_hora": 15, "billable_rate": None, **extra}
    return invitations.create_invitation(gateway, payload)


def test_create_invitation_coalesces_rates(gateway):
    invitation = _invite(gateway, email="  Nuevo@Datenova.test ")
    assert invitation.email == "nuevo@datenova.test"
    assert invitation.status == "pending"
    assert invitation.tarifa_hora == 15
    assert invitation.billable_rate == 0


def test_duplicate_emails_are_rejected(gateway, developer):
    _invite(gateway)
    with pytest.raises(ValidationFailed) as excinfo:
        _invite(gateway)
    assert excinfo.value.message == "Este email ya está registrado en el sistema"

    with pytest.raises(ValidationFailed):
        _invite(gateway, email=developer.email)


def test_mark_sent_composes_mailto(gateway):
    invitation = _invite(gateway)
    result = invitations.mark_sent(gateway, invitation.id)

    assert result["invitation"].status == "sent"
    email = result["email"]
    assert email["subject"] == "Invitación a colaborar en Datenova"
    assert "DESARROLLADOR" in email["body"]
    assert email["mailto"].startswith("mailto:nuevo@datenova.test?subject=")


def test_cancelled_invitations_cannot_be_sent(gateway):
    invitation = _invite(gateway)
    invitations.cancel_invitation(gateway, invitation.id)
    with pytest.raises(ValidationFailed):
        invitations.mark_sent(gateway, invitation.id)


def test_listing_expires_stale_invitations(gateway):
    fresh = _invite(gateway, email="fresh@datenova.test")
    stale = _invite(gateway, email="stale@datenova.test")
    old = (datetime.utcnow() - timedelta(days=30)).isoformat()
    gateway.update(Invitation, {"invited_at": old}, id=stale.id)

    open_ids = [inv.id for inv in invitations.list_open_invitations(gateway)]

    assert open_ids == [fresh.id]
    assert gateway.select_one(Invitation, id=stale.id).status == "expired"


def test_complete_invitation_creates_profile(gateway, company):
    _invite(gateway, rol="cliente", empresa_id=company.id, billable_rate=40)
    account = gateway.insert(AuthAccount, [{"email": "nuevo@datenova.test"}])[0]

    profile = invitations.complete_invitation(gateway, account, "  Nora Nueva ")

    assert profile.id == account.id
    assert profile.nombre == "Nora Nueva"
    assert profile.rol == "cliente"
    assert profile.empresa_id == company.id
    assert profile.billable_rate == 40
    [invitation] = gateway.select(Invitation)
    assert invitation.status == "accepted"
    assert invitation.user_id == account.id
    assert invitation.accepted_at is not None


def test_complete_without_invitation_is_not_found(gateway):
    account = gateway.insert(AuthAccount, [{"email": "nadie@datenova.test"}])[0]
    with pytest.raises(NotFound):
        invitations.complete_invitation(gateway, account, "Nadie")
    assert gateway.select(User) == []


def test_delete_missing_invitation(gateway):
    with pytest.raises(NotFound):
        invitations.delete_invitation(gateway, "missing")
