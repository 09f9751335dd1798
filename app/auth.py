"""Password hashing and session tokens.

Tokens are stateless: possession of an unexpired, correctly signed token is the
only authorization check. There is no revocation list, so a leaked token stays
valid until its ``exp``.
"""

from datetime import datetime, timedelta, timezone
from typing import Annotated, Optional

import bcrypt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt
from pydantic import ValidationError as PydanticValidationError

from app.config import settings
from app.exceptions import InvalidToken, TokenExpired, Unauthenticated
from app.models.user import User
from app.schemas.user import TokenClaims

security = HTTPBearer(auto_error=False)


def get_password_hash(password: str) -> str:
    # bcrypt only looks at the first 72 bytes
    pw_bytes = password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed_password.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def create_access_token(user: User, expires_delta: Optional[timedelta] = None) -> str:
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    expire = datetime.now(timezone.utc) + expires_delta
    payload = {
        "sub": str(user.id),
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "role": user.role,
        "exp": expire,
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_access_token(token: Optional[str]) -> TokenClaims:
    """Decode a session token into its claim set.

    Raises Unauthenticated when no token is given, TokenExpired past ``exp``
    and InvalidToken for a bad signature or malformed claims.
    """
    if not token:
        raise Unauthenticated()
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except ExpiredSignatureError:
        raise TokenExpired()
    except JWTError:
        raise InvalidToken()

    try:
        return TokenClaims.model_validate(payload)
    except PydanticValidationError:
        raise InvalidToken("Invalid token payload")


async def get_current_user(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
) -> TokenClaims:
    if credentials is None:
        raise Unauthenticated()
    return verify_access_token(credentials.credentials)
