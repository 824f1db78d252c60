import pytest
from starlette.websockets import WebSocketDisconnect

from datenova.models import Notification
from tests.conftest import auth_headers


def _notify(client, sender, recipient, title="Nueva tarea"):
    return client.post("/api/v1/notifications", headers=auth_headers(sender.email), json={
        "user_id": recipient.id, "title": title, "message": "Se te asignó una tarea", "type": "task",
    })


def test_bell_shows_latest_and_unread_count(client, session, admin, developer):
    for n in range(12):
        session.add(Notification(user_id=developer.id, title=f"Aviso {n}", message="...",
                                 created_at=f"2024-05-01T10:{n:02d}:00"))
    session.commit()

    body = client.get("/api/v1/notifications", headers=auth_headers(developer.email)).json()
    assert len(body["notifications"]) == 10
    assert body["notifications"][0]["title"] == "Aviso 11"
    assert body["unread_count"] == 12

    first = body["notifications"][0]["id"]
    read = client.patch(f"/api/v1/notifications/{first}/read", headers=auth_headers(developer.email))
    assert read.json()["read"] is True

    foreign = client.patch(f"/api/v1/notifications/{first}/read", headers=auth_headers(admin.email))
    assert foreign.status_code == 403

    all_read = client.post("/api/v1/notifications/read-all", headers=auth_headers(developer.email))
    assert all_read.json()["updated"] == 11
    assert client.get("/api/v1/notifications", headers=auth_headers(developer.email)).json()["unread_count"] == 0


def test_clients_cannot_send_notifications(client, client_user, developer):
    assert _notify(client, client_user, developer).status_code == 403


def test_websocket_pushes_new_notifications(client, admin, developer):
    token = auth_headers(developer.email)["Authorization"].split()[1]
    with client.websocket_connect(f"/api/v1/notifications/ws?token={token}") as websocket:
        websocket.send_text("ping")
        assert websocket.receive_text() == "pong"

        # Notifications for someone else are not forwarded
        _notify(client, developer, admin, title="Para otra persona")
        assert _notify(client, admin, developer).status_code == 200

        message = websocket.receive_json()
        assert message["event"] == "notification"
        assert message["data"]["title"] == "Nueva tarea"
        assert message["data"]["user_id"] == developer.id


def test_websocket_rejects_missing_token(client):
    with pytest.raises(WebSocketDisconnect) as excinfo:
        with client.websocket_connect("/api/v1/notifications/ws") as websocket:
            websocket.receive_text()
    assert excinfo.value.code == 4401
