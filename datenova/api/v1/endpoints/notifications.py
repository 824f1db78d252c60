"""
Notification Endpoints Module

The header bell: the 10 newest notifications of the caller plus the unread
count, read flags, and a websocket that pushes new notifications as they are
inserted.
"""
import asyncio
from typing import List, Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect
from pydantic import BaseModel
from sqlmodel import Session

from datenova.api import deps
from datenova.core.errors import PermissionDenied
from datenova.db.gateway import DataGateway
from datenova.db.session import get_db
from datenova.models.notification import Notification, NotificationRead, NotificationType
from datenova.models.user import User
from datenova.services.realtime import change_feed

logger = structlog.get_logger(__name__)

router = APIRouter()

BELL_LIMIT = 10


class NotificationCreate(BaseModel):
    user_id: str
    title: str
    message: str
    type: NotificationType = NotificationType.INFO
    link: Optional[str] = None


class NotificationFeed(BaseModel):
    notifications: List[NotificationRead]
    unread_count: int


@router.get("", response_model=NotificationFeed)
def list_my_notifications(
    gateway: DataGateway = Depends(deps.get_gateway),
    current_user: User = Depends(deps.get_current_user),
):
    latest = gateway.select(
        Notification,
        filters={"user_id": current_user.id},
        order_by="created_at",
        descending=True,
        limit=BELL_LIMIT,
    )
    unread = gateway.select(Notification, filters={"user_id": current_user.id, "read": False})
    return NotificationFeed(
        notifications=[NotificationRead.model_validate(n, from_attributes=True) for n in latest],
        unread_count=len(unread),
    )


@router.post("", response_model=NotificationRead)
def create_notification(
    notification_in: NotificationCreate,
    gateway: DataGateway = Depends(deps.get_gateway),
    current_user: User = Depends(deps.require_staff),
):
    row = notification_in.model_dump()
    row["type"] = notification_in.type.value
    notification = gateway.insert(Notification, [row])[0]
    return NotificationRead.model_validate(notification, from_attributes=True)


@router.patch("/{notification_id}/read", response_model=NotificationRead)
def mark_as_read(
    notification_id: str,
    gateway: DataGateway = Depends(deps.get_gateway),
    current_user: User = Depends(deps.get_current_user),
):
    notification = gateway.select_one(Notification, id=notification_id)
    if notification.user_id != current_user.id:
        raise PermissionDenied("No tienes permisos para realizar esta acción")
    updated = gateway.update(Notification, {"read": True}, id=notification_id)[0]
    return NotificationRead.model_validate(updated, from_attributes=True)


@router.post("/read-all")
def mark_all_as_read(
    gateway: DataGateway = Depends(deps.get_gateway),
    current_user: User = Depends(deps.get_current_user),
):
    updated = gateway.update(Notification, {"read": True}, user_id=current_user.id, read=False)
    return {"status": "success", "updated": len(updated)}


async def _forward(websocket: WebSocket, queue: asyncio.Queue) -> None:
    while True:
        row = await queue.get()
        await websocket.send_json({"event": "notification", "data": row})


@router.websocket("/ws")
async def notifications_ws(websocket: WebSocket, token: Optional[str] = None, db: Session = Depends(get_db)):
    """
    Push every new notification of the authenticated user.

    The token comes from the `token` query parameter or the access_token cookie.
    Sending "ping" answers "pong".
    """
    if not token:
        token = deps.token_from_request(websocket, None)
    try:
        account = deps.account_from_token(db, token)
    except HTTPException:
        await websocket.close(code=4401)
        return

    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue()
    # Inserts are published from worker threads; hand rows over to this loop
    subscription = change_feed.subscribe(
        "notifications", "INSERT", {"user_id": account.id},
        lambda row: loop.call_soon_threadsafe(queue.put_nowait, row),
    )
    await websocket.accept()
    sender = asyncio.create_task(_forward(websocket, queue))
    logger.info("notifications_ws_connected", user_id=account.id)

    try:
        while True:
            data = await websocket.receive_text()
            if data and data.strip().lower() in {"ping", "keepalive"}:
                await websocket.send_text("pong")
    except WebSocketDisconnect:
        logger.info("notifications_ws_disconnected", user_id=account.id)
    finally:
        subscription.unsubscribe()
        sender.cancel()
