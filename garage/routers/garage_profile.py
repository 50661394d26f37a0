"""
Garage profile routes.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from garage.auth import get_current_user, require_feature
from garage.crud import apply_update, require_fields
from garage.database import get_db
from garage.models.garage_profile import GarageProfile
from garage.models.user import User
from garage.schemas.garage_profile import (
    GarageProfile as GarageProfileSchema, GarageProfileCreate, GarageProfileUpdate,
)
from garage.exceptions import ConflictError, NotFoundError
from garage.permissions import SETTINGS

router = APIRouter(prefix="/garage", tags=["garage"])


async def _load_profile(db: AsyncSession) -> GarageProfile:
    profile = await db.scalar(select(GarageProfile).order_by(GarageProfile.id).limit(1))
    if profile is None:
        raise NotFoundError("Garage details not found")
    return profile


@router.get("/", response_model=GarageProfileSchema)
async def get_garage(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Get the garage profile. Every signed-in user may read it for branding.
    """
    return await _load_profile(db)


@router.post("/", response_model=GarageProfileSchema, status_code=status.HTTP_201_CREATED)
async def create_garage(
    profile: GarageProfileCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(SETTINGS)),
):
    """
    Create the garage profile, owned by the caller. Only one may exist.
    """
    existing = await db.scalar(select(GarageProfile.id).limit(1))
    if existing is not None:
        raise ConflictError("Garage details already exist")

    db_profile = GarageProfile(**profile.model_dump(), user_id=current_user.id)
    db.add(db_profile)
    await db.commit()
    await db.refresh(db_profile)

    return db_profile


@router.put("/", response_model=GarageProfileSchema)
async def update_garage(
    profile_update: GarageProfileUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(SETTINGS)),
):
    """
    Update the garage profile. Bills already issued keep their own copy.
    """
    db_profile = await _load_profile(db)

    require_fields(profile_update, "garage_name", "email", "enable_gst", "gst_rate")
    apply_update(db_profile, profile_update)
    await db.commit()
    await db.refresh(db_profile)

    return db_profile
