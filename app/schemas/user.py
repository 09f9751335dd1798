from typing import Optional

from pydantic import BaseModel, Field, field_validator

from app.models.user import UserRole


class UserCreate(BaseModel):
    username: str = Field(..., min_length=1, max_length=50)
    email: str = Field(..., min_length=3, max_length=100)
    password: str = Field(..., min_length=1)
    role: UserRole = UserRole.MEMBER

    @field_validator("username", "email")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()


class UserLogin(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    role: Optional[UserRole] = None

    @field_validator("email")
    @classmethod
    def strip_email(cls, v: str) -> str:
        # registration stores the stripped address
        return v.strip()


class UserResponse(BaseModel):
    id: int
    username: str
    email: str
    role: str

    class Config:
        from_attributes = True


class UserListItem(BaseModel):
    id: int
    username: str
    role: str

    class Config:
        from_attributes = True


class AuthResponse(BaseModel):
    user: UserResponse
    token: str


class TokenClaims(BaseModel):
    """Decoded session token: identity, role and expiry."""

    id: int
    username: str
    email: str
    role: str
    exp: int
