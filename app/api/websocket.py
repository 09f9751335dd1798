import json
import logging
from typing import Any

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError as PydanticValidationError

from app.database import AsyncSessionLocal
from app.exceptions import AppError
from app.repositories.message_repository import MessageRepository
from app.schemas.message import MessageResponse, SendMessageWebSocket, WebSocketFrame
from app.websocket_manager import Connection, ConnectionManager

router = APIRouter()
logger = logging.getLogger(__name__)

@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    manager: ConnectionManager = websocket.app.state.manager
    connection = await manager.connect(websocket)

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", 1000))

            data = message.get("text")
            if data is None:
                logger.warning("Ignoring binary frame (%d bytes)", len(message.get("bytes") or b""))
                continue

            try:
                frame = WebSocketFrame.model_validate(json.loads(data))
            except (json.JSONDecodeError, PydanticValidationError):
                logger.warning("Ignoring malformed frame: %.200s", data)
                continue

            await handle_websocket_message(frame.action, frame.data, connection)

    except WebSocketDisconnect:
        pass
    finally:
        manager.disconnect(connection)
        logger.debug("Connection closed (groups=%s)", sorted(connection.user_ids))

async def handle_websocket_message(action: str, payload: Any, connection: Connection):

    if action == "join":
        handle_join(payload, connection)

    elif action == "sendMessage":
        await handle_send_message(payload, connection)

    elif action == "ping":
        await connection.send("pong")

    else:
        logger.warning("Ignoring unknown action: %s", action)

def handle_join(payload: Any, connection: Connection):
    if isinstance(payload, int) and not isinstance(payload, bool):
        user_id = payload
    elif isinstance(payload, str) and payload.isascii() and payload.isdigit():
        user_id = int(payload)
    else:
        logger.warning("Ignoring join with invalid user id: %r", payload)
        return
    connection.join_group(user_id)

async def handle_send_message(payload: Any, connection: Connection):
    """Persist a direct message and deliver it to the receiver's connections only.

    The sender gets nothing back: it has already rendered its own copy. If the
    message cannot be stored it is logged and dropped, with no error frame, no
    acknowledgement and no retry.
    """
    try:
        message_data = SendMessageWebSocket.model_validate(payload)
    except PydanticValidationError as e:
        logger.warning("Dropping sendMessage with invalid payload: %s", e.errors())
        return

    try:
        async with AsyncSessionLocal() as db:
            message_repo = MessageRepository(db)
            message = await message_repo.create(
                message_data.sender_id,
                message_data.receiver_id,
                message_data.content
            )
    except AppError as e:
        logger.warning("Dropping message from %s to %s: %s", message_data.sender_id, message_data.receiver_id, e.message)
        return
    except Exception:
        logger.exception("Error saving message from %s to %s", message_data.sender_id, message_data.receiver_id)
        return

    response = MessageResponse.from_model(message)
    await connection.manager.group(message.receiver_id).broadcast(
        "receiveMessage",
        response.model_dump(mode="json")
    )
