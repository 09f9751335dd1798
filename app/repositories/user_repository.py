import logging
from typing import Optional, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from app.models.user import User, UserRole
from app.auth import get_password_hash, verify_password
from app.exceptions import ConflictError, CredentialError

logger = logging.getLogger(__name__)

class UserRepository:
    """Credential store: user records and password checks."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, username: str, email: str, password: str, role: str = UserRole.MEMBER.value) -> User:
        if await self.get_by_email(email):
            raise ConflictError()

        db_user = User(
            username=username,
            email=email,
            password_hash=get_password_hash(password),
            role=role
        )
        self.db.add(db_user)
        try:
            await self.db.commit()
        except IntegrityError:
            # lost a race against a concurrent registration with the same email
            await self.db.rollback()
            raise ConflictError()
        await self.db.refresh(db_user)
        logger.info("Registered user id=%s role=%s", db_user.id, db_user.role)
        return db_user

    async def authenticate(self, email: str, password: str, role: Optional[str] = None) -> User:
        """Return the user for a valid email/password pair.

        When ``role`` is given it acts as a filter: a user whose stored role
        differs is rejected even if the password matches.
        """
        user = await self.get_by_email(email)
        if user is None:
            raise CredentialError()
        if role is not None and user.role != role:
            raise CredentialError()
        if not verify_password(password, user.password_hash):
            raise CredentialError("Invalid credentials")
        return user

    async def get_by_id(self, user_id: int) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def list_all(self) -> List[User]:
        result = await self.db.execute(select(User).order_by(User.id))
        return list(result.scalars().all())
