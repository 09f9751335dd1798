from enum import Enum as PyEnum

from sqlalchemy import Column, String
from sqlalchemy.orm import relationship
from .base import BaseModel

class UserRole(str, PyEnum):
    MEMBER = "member"
    ADMIN = "admin"

class User(BaseModel):
    __tablename__ = "users"
    
    username = Column(String(50), nullable=False, index=True)
    email = Column(String(100), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default=UserRole.MEMBER.value)
    
    posts = relationship("Post", back_populates="author")
    sent_messages = relationship("Message", foreign_keys="Message.sender_id", back_populates="sender")
    received_messages = relationship("Message", foreign_keys="Message.receiver_id", back_populates="receiver")
