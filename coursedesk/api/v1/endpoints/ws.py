import asyncio
import json
import logging
from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status
from starlette.concurrency import run_in_threadpool
from coursedesk.api.v1.endpoints.auth import resolve_session
from coursedesk.core.config import settings
from coursedesk.services.connection_registry import LiveConnection

logger = logging.getLogger(__name__)

router = APIRouter()


def handshake_user(message: dict):
    """Validate an ``{"type": "auth", "userId": ...}`` frame.

    Returns ``(user_id, error)``. With WS_VERIFY_SESSION (the default) the
    frame must also carry a live session token for that same user; without
    it the declared user id is trusted as is.
    """
    user_id = message.get("userId")
    if message.get("type") != "auth" or not isinstance(user_id, str) or not user_id:
        return None, None
    if settings.WS_VERIFY_SESSION:
        token = message.get("token")
        if not isinstance(token, str) or resolve_session(token) != user_id:
            return None, "Session token does not match userId"
    return user_id, None


@router.websocket("/ws")
async def notifications_socket(websocket: WebSocket):
    await websocket.accept()
    registry = websocket.app.state.connections
    connection = LiveConnection(websocket, asyncio.get_running_loop())
    user_id = None

    try:
        while True:
            raw = await websocket.receive_text()
            try:
                message = json.loads(raw)
            except ValueError:
                logger.warning("Ignoring malformed WebSocket frame")
                continue
            if not isinstance(message, dict):
                continue

            # Session lookup hits Redis, keep it off the event loop
            declared, error = await run_in_threadpool(handshake_user, message)
            if error:
                await websocket.send_json({"type": "error", "message": error})
                await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
                return
            if declared is None:
                continue

            if user_id and user_id != declared:
                registry.unregister(user_id, connection)
            user_id = declared
            registry.register(user_id, connection)
            await websocket.send_json({"type": "connected", "userId": user_id})
    except WebSocketDisconnect:
        pass
    finally:
        if user_id:
            registry.unregister(user_id, connection)
