from typing import Optional, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_
from sqlalchemy.orm import joinedload

from app.models.message import Message
from app.models.user import User
from app.exceptions import ValidationError

class MessageRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, sender_id: int, receiver_id: int, content: str) -> Message:
        if not content or not content.strip():
            raise ValidationError("Message content is required")
        if await self.db.get(User, sender_id) is None:
            raise ValidationError("Sender does not exist")
        if await self.db.get(User, receiver_id) is None:
            raise ValidationError("Receiver does not exist")

        message = Message(
            sender_id=sender_id,
            receiver_id=receiver_id,
            content=content
        )
        self.db.add(message)
        await self.db.commit()
        return await self.get_by_id(message.id)

    async def get_by_id(self, message_id: int) -> Optional[Message]:
        result = await self.db.execute(
            select(Message).options(
                joinedload(Message.sender),
                joinedload(Message.receiver)
            ).where(Message.id == message_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_for_user(self, user_id: int) -> List[Message]:
        """Every message the user sent or received, oldest first."""
        result = await self.db.execute(
            select(Message).options(
                joinedload(Message.sender),
                joinedload(Message.receiver)
            ).where(
                or_(
                    Message.sender_id == user_id,
                    Message.receiver_id == user_id
                )
            ).order_by(Message.created_at.asc(), Message.id.asc())
        )
        return list(result.scalars().all())
