"""
Authentication routes.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import Optional

from garage.database import get_db
from garage.models.user import User, UserRole
from garage.schemas.user import AccessList, LoginRequest, Token, User as UserSchema, UserCreate
from garage.auth import create_access_token, get_current_user, get_optional_user, hash_password, verify_password
from garage.crud import commit_or_conflict
from garage.exceptions import AuthError, ConflictError, ForbiddenError
from garage.permissions import USERS, can_access, features_for

router = APIRouter(prefix="/auth", tags=["auth"])


def _token_response(user: User) -> Token:
    return Token(
        access_token=create_access_token(user),
        token_type="bearer",
        user=UserSchema.model_validate(user),
    )


@router.post("/register", response_model=Token, status_code=status.HTTP_201_CREATED)
async def register(
    payload: UserCreate,
    db: AsyncSession = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
):
    """
    Register a new user and return an access token.

    Anyone may sign up as a plain user. Other roles need a caller who can
    manage users, except for the very first account, which bootstraps the system.
    """
    if payload.role != UserRole.USER and not (current_user and can_access(current_user.role, USERS)):
        if await db.scalar(select(User.id).limit(1)) is not None:
            raise ForbiddenError("Only an administrator can register users with this role")

    email = payload.email.lower()
    result = await db.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none():
        raise ConflictError("User already exists with this email")

    user = User(
        full_name=payload.full_name,
        email=email,
        phone=payload.phone,
        role=payload.role,
        hashed_password=hash_password(payload.password),
    )
    db.add(user)
    await commit_or_conflict(db, "User already exists with this email")
    await db.refresh(user)

    return _token_response(user)


@router.post("/login", response_model=Token)
async def login(
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Exchange email and password for an access token.
    """
    result = await db.execute(select(User).where(User.email == credentials.email.lower()))
    user = result.scalar_one_or_none()

    if not user or not verify_password(credentials.password, user.hashed_password):
        raise AuthError("Invalid credentials")

    return _token_response(user)


@router.get("/me", response_model=UserSchema)
async def read_me(current_user: User = Depends(get_current_user)):
    """Return the user the token belongs to."""
    return current_user


@router.get("/access", response_model=AccessList)
async def read_access(current_user: User = Depends(get_current_user)):
    """
    Features available to the caller's role.
    The UI uses this to build its navigation; the server enforces the same table.
    """
    return AccessList(role=current_user.role, features=features_for(current_user.role))
