"""
Expense category routes.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import List, Optional

from garage.database import get_db
from garage.models.expense import ExpenseCategory
from garage.models.user import User
from garage.schemas.expense import (
    ExpenseCategory as ExpenseCategorySchema, ExpenseCategoryCreate, ExpenseCategoryUpdate,
)
from garage.auth import require_feature
from garage.crud import apply_update, commit_or_conflict, get_or_404, require_fields
from garage.exceptions import ConflictError
from garage.permissions import EXPENSES

router = APIRouter(prefix="/expense-categories", tags=["expense-categories"])

NAME_TAKEN = "An expense category with this name already exists"


async def _ensure_name_free(db: AsyncSession, name: str, category_id: Optional[int] = None) -> None:
    query = select(ExpenseCategory.id).where(ExpenseCategory.name == name)
    if category_id is not None:
        query = query.where(ExpenseCategory.id != category_id)
    if await db.scalar(query) is not None:
        raise ConflictError(NAME_TAKEN)


@router.get("/", response_model=List[ExpenseCategorySchema])
async def get_categories(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(EXPENSES)),
):
    result = await db.execute(select(ExpenseCategory).order_by(ExpenseCategory.name))
    return result.scalars().all()


@router.get("/{category_id}", response_model=ExpenseCategorySchema)
async def get_category(
    category_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(EXPENSES)),
):
    return await get_or_404(db, ExpenseCategory, category_id, "Expense category")


@router.post("/", response_model=ExpenseCategorySchema, status_code=status.HTTP_201_CREATED)
async def create_category(
    category: ExpenseCategoryCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(EXPENSES)),
):
    await _ensure_name_free(db, category.name)

    db_category = ExpenseCategory(**category.model_dump())
    db.add(db_category)
    await commit_or_conflict(db, NAME_TAKEN)
    await db.refresh(db_category)

    return db_category


@router.put("/{category_id}", response_model=ExpenseCategorySchema)
async def update_category(
    category_id: int,
    category_update: ExpenseCategoryUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(EXPENSES)),
):
    db_category = await get_or_404(db, ExpenseCategory, category_id, "Expense category")
    require_fields(category_update, "name", "value", "color")
    if category_update.name is not None:
        await _ensure_name_free(db, category_update.name, category_id)

    apply_update(db_category, category_update)

    await commit_or_conflict(db, NAME_TAKEN)
    await db.refresh(db_category)

    return db_category


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(
    category_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(EXPENSES)),
):
    db_category = await get_or_404(db, ExpenseCategory, category_id, "Expense category")

    await db.delete(db_category)
    await db.commit()

    return None
