import logging
from typing import Annotated, List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.repositories.message_repository import MessageRepository
from app.schemas.message import MessageCreate, MessageResponse
from app.schemas.user import TokenClaims
from app.auth import get_current_user
from app.exceptions import Forbidden
from app.websocket_manager import ConnectionManager, get_connection_manager

router = APIRouter()
logger = logging.getLogger(__name__)

@router.get("/{user_id}", response_model=List[MessageResponse])
async def get_user_messages(
    user_id: int,
    current_user: Annotated[TokenClaims, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db)
):
    """Conversation history of the caller, oldest first."""
    if current_user.id != user_id:
        raise Forbidden("Access denied to other user's messages")

    message_repo = MessageRepository(db)
    messages = await message_repo.list_for_user(user_id)
    return [MessageResponse.from_model(message) for message in messages]

@router.post("", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def send_message(
    message_data: MessageCreate,
    current_user: Annotated[TokenClaims, Depends(get_current_user)],
    manager: Annotated[ConnectionManager, Depends(get_connection_manager)],
    db: AsyncSession = Depends(get_db)
):
    """Send a direct message as the caller; the receiver's connections get it live."""
    message_repo = MessageRepository(db)
    message = await message_repo.create(current_user.id, message_data.receiver_id, message_data.content)
    response = MessageResponse.from_model(message)

    await manager.group(message.receiver_id).broadcast("receiveMessage", response.model_dump(mode="json"))
    return response
