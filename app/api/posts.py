import logging
from typing import Annotated, List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.repositories.post_repository import PostRepository
from app.schemas.post import PostCreate, PostResponse
from app.schemas.user import TokenClaims
from app.auth import get_current_user
from app.websocket_manager import ConnectionManager, get_connection_manager

router = APIRouter()
logger = logging.getLogger(__name__)

@router.get("", response_model=List[PostResponse])
async def list_posts(db: AsyncSession = Depends(get_db)):
    post_repo = PostRepository(db)
    posts = await post_repo.list_all()
    return [PostResponse.from_model(post) for post in posts]

@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    post_data: PostCreate,
    current_user: Annotated[TokenClaims, Depends(get_current_user)],
    manager: Annotated[ConnectionManager, Depends(get_connection_manager)],
    db: AsyncSession = Depends(get_db)
):
    """Create a post as the caller and push it to every connected client."""
    post_repo = PostRepository(db)
    post = await post_repo.create(current_user.id, post_data.content)
    response = PostResponse.from_model(post)

    delivered = await manager.broadcast("newPost", response.model_dump(mode="json"))
    logger.info("Post %s created by user %s, broadcast to %d connections", post.id, current_user.id, delivered)
    return response
