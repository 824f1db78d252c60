from datenova.models import Invitation
from tests.conftest import PASSWORD, auth_headers, create_account


def test_health(client):
    response = client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_register_and_login(client):
    response = client.post("/api/v1/auth/register", json={"email": "Nueva@Datenova.test", "password": PASSWORD})
    assert response.status_code == 200
    assert response.json()["email"] == "nueva@datenova.test"

    duplicate = client.post("/api/v1/auth/register", json={"email": "nueva@datenova.test", "password": PASSWORD})
    assert duplicate.status_code == 400

    login = client.post("/api/v1/auth/login", data={"username": "nueva@datenova.test", "password": PASSWORD})
    assert login.status_code == 200
    assert login.json()["token_type"] == "bearer"
    assert "access_token" in login.cookies


def test_login_with_wrong_password(client, developer):
    response = client.post("/api/v1/auth/login", data={"username": developer.email, "password": "nope"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Email o contraseña incorrectos"


def test_session_reports_pending_activation(client, session):
    create_account(session, "pendiente@datenova.test")
    response = client.get("/api/v1/auth/session", headers=auth_headers("pendiente@datenova.test"))
    assert response.status_code == 200
    body = response.json()
    assert body["needs_activation"] is True
    assert body["profile"] is None

    blocked = client.get("/api/v1/users/me", headers=auth_headers("pendiente@datenova.test"))
    assert blocked.status_code == 403


def test_activate_creates_profile_from_invitation(client, session):
    session.add(Invitation(email="invitado@datenova.test", rol="apoyo", tarifa_hora=12, billable_rate=30))
    session.commit()
    create_account(session, "invitado@datenova.test", password="temporal")
    headers = auth_headers("invitado@datenova.test")

    mismatch = client.post("/api/v1/auth/activate", headers=headers, json={
        "nombre": "Iván Invitado", "password": "definitiva", "confirm_password": "otra",
    })
    assert mismatch.status_code == 422
    assert mismatch.json()["detail"] == "Las contraseñas no coinciden"
    assert mismatch.json()["toast"]["type"] == "error"

    response = client.post("/api/v1/auth/activate", headers=headers, json={
        "nombre": "Iván Invitado", "password": "definitiva", "confirm_password": "definitiva",
    })
    assert response.status_code == 200
    assert response.json()["rol"] == "apoyo"
    assert response.json()["tarifa_hora"] == 12

    login = client.post("/api/v1/auth/login", data={"username": "invitado@datenova.test", "password": "definitiva"})
    assert login.status_code == 200

    again = client.post("/api/v1/auth/activate", headers=headers, json={
        "nombre": "Iván Invitado", "password": "definitiva", "confirm_password": "definitiva",
    })
    assert again.status_code == 422


def test_activate_without_invitation(client, session):
    create_account(session, "sininvitacion@datenova.test")
    response = client.post("/api/v1/auth/activate", headers=auth_headers("sininvitacion@datenova.test"), json={
        "nombre": "Sin Invitación", "password": "definitiva", "confirm_password": "definitiva",
    })
    assert response.status_code == 404


def test_invalid_token_is_forbidden(client):
    response = client.get("/api/v1/users/me", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 403
