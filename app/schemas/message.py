from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Optional
from datetime import datetime

from app.models.message import Message


class MessageCreate(BaseModel):
    receiver_id: int
    content: str


class MessageResponse(BaseModel):
    id: int
    sender_id: int
    receiver_id: int
    content: str
    created_at: datetime
    sender_name: str
    receiver_name: str

    @classmethod
    def from_model(cls, message: Message) -> "MessageResponse":
        return cls(
            id=message.id,
            sender_id=message.sender_id,
            receiver_id=message.receiver_id,
            content=message.content,
            created_at=message.created_at,
            sender_name=message.sender.username,
            receiver_name=message.receiver.username,
        )


class WebSocketFrame(BaseModel):
    action: str
    data: Any = None


class SendMessageWebSocket(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    sender_id: int = Field(alias="senderId")
    receiver_id: int = Field(alias="receiverId")
    content: str
    sender_username: Optional[str] = Field(default=None, alias="senderUsername")
