from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.repositories.user_repository import UserRepository
from app.schemas.user import AuthResponse, TokenClaims, UserCreate, UserLogin, UserResponse
from app.auth import create_access_token, get_current_user

router = APIRouter()

@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register_user(user_data: UserCreate, db: AsyncSession = Depends(get_db)):
    user_repo = UserRepository(db)
    user = await user_repo.create(
        user_data.username,
        user_data.email,
        user_data.password,
        user_data.role.value
    )
    return {"user": UserResponse.model_validate(user), "token": create_access_token(user)}

@router.post("/login", response_model=AuthResponse)
async def login_user(user_data: UserLogin, db: AsyncSession = Depends(get_db)):
    user_repo = UserRepository(db)
    role = user_data.role.value if user_data.role else None
    user = await user_repo.authenticate(user_data.email, user_data.password, role)
    return {"user": UserResponse.model_validate(user), "token": create_access_token(user)}

@router.get("/me", response_model=TokenClaims)
async def get_current_user_info(current_user: Annotated[TokenClaims, Depends(get_current_user)]):
    return current_user
