"""
User management and profile routes.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import List, Optional

from garage.database import get_db
from garage.models.jobcard import JobCard
from garage.models.garage_profile import GarageProfile
from garage.models.user import User, UserRole
from garage.schemas.user import (
    PasswordChange, ProfileUpdate, User as UserSchema, UserCreate, UserUpdate,
)
from garage.auth import get_current_user, hash_password, require_feature, verify_password
from garage.crud import apply_update, commit_or_conflict, ensure_unreferenced, get_or_404, require_fields
from garage.exceptions import ConflictError, ValidationError
from garage.permissions import JOBCARDS, PROFILE, USERS

router = APIRouter(prefix="/users", tags=["users"])

EMAIL_TAKEN = "User already exists with this email"


async def _ensure_email_free(db: AsyncSession, email: str, user_id: Optional[int] = None) -> None:
    query = select(User.id).where(User.email == email)
    if user_id is not None:
        query = query.where(User.id != user_id)
    if await db.scalar(query) is not None:
        raise ConflictError(EMAIL_TAKEN)


@router.get("/", response_model=List[UserSchema])
async def get_users(
    role: Optional[UserRole] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(USERS)),
):
    """
    Get all users, optionally filtered by role.
    """
    query = select(User).order_by(User.id)
    if role:
        query = query.where(User.role == role)
    result = await db.execute(query)
    return result.scalars().all()


@router.get("/mechanics", response_model=List[UserSchema])
async def get_mechanics(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(USERS, JOBCARDS)),
):
    """
    Users who can be assigned to job cards.
    """
    result = await db.execute(select(User).where(User.role == UserRole.MECHANIC).order_by(User.full_name))
    return result.scalars().all()


@router.get("/me", response_model=UserSchema)
async def get_profile(current_user: User = Depends(require_feature(PROFILE))):
    """Get the caller's own profile."""
    return current_user


@router.put("/me", response_model=UserSchema)
async def update_profile(
    profile: ProfileUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(PROFILE)),
):
    """
    Update the caller's own profile. Role and password are not editable here.
    """
    require_fields(profile, "full_name", "email")
    if profile.email is not None:
        profile.email = profile.email.lower()
        await _ensure_email_free(db, profile.email, current_user.id)

    apply_update(current_user, profile)
    await commit_or_conflict(db, EMAIL_TAKEN)
    await db.refresh(current_user)

    return current_user


@router.put("/me/password", status_code=status.HTTP_204_NO_CONTENT)
async def change_password(
    payload: PasswordChange,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(PROFILE)),
):
    """
    Change the caller's password after checking the current one.
    """
    if not verify_password(payload.current_password, current_user.hashed_password):
        raise ValidationError.for_field("currentPassword", "Current password is incorrect")

    current_user.hashed_password = hash_password(payload.new_password)
    await db.commit()

    return None


@router.get("/{user_id}", response_model=UserSchema)
async def get_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(USERS)),
):
    """
    Get a specific user by ID.
    """
    return await get_or_404(db, User, user_id, "User")


@router.post("/", response_model=UserSchema, status_code=status.HTTP_201_CREATED)
async def create_user(
    user: UserCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(USERS)),
):
    """
    Create a user with any role.
    """
    email = user.email.lower()
    await _ensure_email_free(db, email)

    db_user = User(
        full_name=user.full_name,
        email=email,
        phone=user.phone,
        role=user.role,
        hashed_password=hash_password(user.password),
    )
    db.add(db_user)
    await commit_or_conflict(db, EMAIL_TAKEN)
    await db.refresh(db_user)

    return db_user


@router.put("/{user_id}", response_model=UserSchema)
async def update_user(
    user_id: int,
    user_update: UserUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(USERS)),
):
    """
    Update a user. A new password is hashed before it is stored.
    """
    db_user = await get_or_404(db, User, user_id, "User")
    require_fields(user_update, "full_name", "email", "role")

    if user_update.email is not None:
        user_update.email = user_update.email.lower()
        await _ensure_email_free(db, user_update.email, user_id)

    apply_update(db_user, user_update, exclude={"password"})
    if user_update.password is not None:
        db_user.hashed_password = hash_password(user_update.password)

    await commit_or_conflict(db, EMAIL_TAKEN)
    await db.refresh(db_user)

    return db_user


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(USERS)),
):
    """
    Delete a user. Users assigned to job cards or owning the garage profile are kept.
    """
    db_user = await get_or_404(db, User, user_id, "User")
    if db_user.id == current_user.id:
        raise ConflictError("You cannot delete your own account")

    await ensure_unreferenced(
        db, JobCard, JobCard.assigned_mechanic_id, user_id,
        "User is assigned to job cards and cannot be deleted",
    )
    await ensure_unreferenced(
        db, GarageProfile, GarageProfile.user_id, user_id,
        "User owns the garage profile and cannot be deleted",
    )

    await db.delete(db_user)
    await db.commit()

    return None
