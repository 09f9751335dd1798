from pydantic import BaseModel
from datetime import datetime

from app.models.post import Post


class PostCreate(BaseModel):
    content: str


class PostResponse(BaseModel):
    id: int
    author_id: int
    content: str
    created_at: datetime
    author_name: str

    @classmethod
    def from_model(cls, post: Post) -> "PostResponse":
        return cls(
            id=post.id,
            author_id=post.author_id,
            content=post.content,
            created_at=post.created_at,
            author_name=post.author.username,
        )
