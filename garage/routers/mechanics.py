"""
Mechanic roster routes.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import List

from garage.database import get_db
from garage.models.mechanic import Mechanic
from garage.models.user import User
from garage.schemas.mechanic import Mechanic as MechanicSchema, MechanicCreate, MechanicUpdate
from garage.auth import require_feature
from garage.crud import apply_update, get_or_404, require_fields
from garage.permissions import JOBCARDS, USERS

router = APIRouter(prefix="/mechanics", tags=["mechanics"])


@router.get("/", response_model=List[MechanicSchema])
async def get_mechanics(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(USERS, JOBCARDS)),
):
    """
    Get all mechanics.
    """
    result = await db.execute(select(Mechanic).order_by(Mechanic.name))
    return result.scalars().all()


@router.get("/{mechanic_id}", response_model=MechanicSchema)
async def get_mechanic(
    mechanic_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(USERS, JOBCARDS)),
):
    return await get_or_404(db, Mechanic, mechanic_id, "Mechanic")


@router.post("/", response_model=MechanicSchema, status_code=status.HTTP_201_CREATED)
async def create_mechanic(
    mechanic: MechanicCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(USERS)),
):
    db_mechanic = Mechanic(**mechanic.model_dump())
    db.add(db_mechanic)
    await db.commit()
    await db.refresh(db_mechanic)

    return db_mechanic


@router.put("/{mechanic_id}", response_model=MechanicSchema)
async def update_mechanic(
    mechanic_id: int,
    mechanic_update: MechanicUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(USERS)),
):
    db_mechanic = await get_or_404(db, Mechanic, mechanic_id, "Mechanic")
    require_fields(mechanic_update, "name", "specialty")

    apply_update(db_mechanic, mechanic_update)
    await db.commit()
    await db.refresh(db_mechanic)

    return db_mechanic


@router.delete("/{mechanic_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_mechanic(
    mechanic_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(USERS)),
):
    db_mechanic = await get_or_404(db, Mechanic, mechanic_id, "Mechanic")

    await db.delete(db_mechanic)
    await db.commit()

    return None
