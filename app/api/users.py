from typing import Annotated, List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.repositories.user_repository import UserRepository
from app.schemas.user import TokenClaims, UserListItem
from app.auth import get_current_user

router = APIRouter()

@router.get("", response_model=List[UserListItem])
async def list_users(
    _current_user: Annotated[TokenClaims, Depends(get_current_user)],
    db: AsyncSession = Depends(get_db)
):
    """Everyone registered, for picking a message recipient."""
    user_repo = UserRepository(db)
    return await user_repo.list_all()
