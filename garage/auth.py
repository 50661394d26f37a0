"""
Password hashing, JWT access tokens and the request-level auth dependencies.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from garage.config import get_settings
from garage.database import get_db
from garage.exceptions import AuthError, ForbiddenError
from garage.models.user import User, UserRole
from garage.permissions import can_access
from garage.schemas.user import TokenData

settings = get_settings()

bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    """One-way hash a plaintext password for storage."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed_password: str) -> bool:
    """Check a plaintext password against a stored hash."""
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # Malformed hash or a password bcrypt refuses to handle
        return False


def create_access_token(user: User, expires_delta: Optional[timedelta] = None) -> str:
    """Issue a signed token carrying the user's id and role."""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    role = user.role.value if isinstance(user.role, UserRole) else user.role
    claims = {"sub": str(user.id), "role": role, "exp": expire}
    return jwt.encode(claims, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> TokenData:
    """Validate a token and return its claims, or raise AuthError."""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
        return TokenData(user_id=int(payload["sub"]), role=payload["role"])
    except jwt.ExpiredSignatureError:
        raise AuthError("Token has expired")
    except (jwt.InvalidTokenError, KeyError, ValueError):
        raise AuthError("Could not validate credentials")


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the bearer token on the request to a stored user."""
    if credentials is None:
        raise AuthError("Not authenticated")

    token_data = decode_access_token(credentials.credentials)
    user = await db.get(User, token_data.user_id)
    if user is None:
        raise AuthError("Could not validate credentials")

    return user


def require_feature(*features: str):
    """
    Dependency factory guarding a route by the role/feature policy.
    Passing several features allows any one of them.
    """
    async def checker(current_user: User = Depends(get_current_user)) -> User:
        if not can_access(current_user.role, *features):
            raise ForbiddenError("You do not have permission to perform this action")
        return current_user

    return checker


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> Optional[User]:
    """Like ``get_current_user`` but anonymous requests get ``None``. A bad token is still rejected."""
    if credentials is None:
        return None
    return await get_current_user(credentials, db)
