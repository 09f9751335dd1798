from typing import Optional, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import joinedload

from app.models.post import Post
from app.models.user import User
from app.exceptions import ValidationError

class PostRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, author_id: int, content: str) -> Post:
        if not content or not content.strip():
            raise ValidationError("Post content is required")
        if await self.db.get(User, author_id) is None:
            raise ValidationError("Author does not exist")

        post = Post(author_id=author_id, content=content)
        self.db.add(post)
        await self.db.commit()
        return await self.get_by_id(post.id)

    async def get_by_id(self, post_id: int) -> Optional[Post]:
        result = await self.db.execute(
            select(Post).options(
                joinedload(Post.author)
            ).where(Post.id == post_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_all(self) -> List[Post]:
        """All posts, newest first, each with its author loaded."""
        result = await self.db.execute(
            select(Post).options(
                joinedload(Post.author)
            ).order_by(Post.created_at.desc(), Post.id.desc())
        )
        return list(result.scalars().all())
