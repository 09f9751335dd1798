from .base import Base
from .user import User, UserRole
from .post import Post
from .message import Message

__all__ = [
    "Base",
    "User",
    "UserRole",
    "Post",
    "Message"
]
