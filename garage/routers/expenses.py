"""
Expense routes.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import func, select
from typing import List, Optional
from datetime import datetime

from garage.database import get_db
from garage.models.expense import Expense, PaymentMode
from garage.models.user import User
from garage.schemas.base import as_utc
from garage.schemas.expense import (
    Expense as ExpenseSchema, ExpenseCreate, ExpenseSummary, ExpenseTypeTotal, ExpenseUpdate,
)
from garage.auth import require_feature
from garage.crud import apply_update, get_or_404, require_fields
from garage.permissions import EXPENSES, REPORTS

router = APIRouter(prefix="/expenses", tags=["expenses"])


def _filtered(query, start: Optional[datetime], end: Optional[datetime], expense_type: Optional[str]):
    if start is not None:
        query = query.where(Expense.date >= as_utc(start))
    if end is not None:
        query = query.where(Expense.date <= as_utc(end))
    if expense_type:
        query = query.where(Expense.type == expense_type)
    return query


@router.get("/", response_model=List[ExpenseSchema])
async def get_expenses(
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    type: Optional[str] = None,
    payment_mode: Optional[PaymentMode] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(EXPENSES)),
):
    """
    Get expenses, newest first, optionally within a date range or of one type.
    """
    query = _filtered(select(Expense), start, end, type).order_by(Expense.date.desc(), Expense.id.desc())
    if payment_mode:
        query = query.where(Expense.payment_mode == payment_mode)

    result = await db.execute(query)
    return result.scalars().all()


@router.get("/summary", response_model=ExpenseSummary)
async def get_expense_summary(
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(EXPENSES, REPORTS)),
):
    """
    Expense totals per type.
    """
    query = _filtered(
        select(Expense.type, func.sum(Expense.amount), func.count(Expense.id)),
        start, end, None,
    ).group_by(Expense.type).order_by(Expense.type)

    rows = (await db.execute(query)).all()
    by_type = [
        ExpenseTypeTotal(type=expense_type, total=round(total or 0, 2), count=count)
        for expense_type, total, count in rows
    ]
    return ExpenseSummary(total=round(sum(row.total for row in by_type), 2), by_type=by_type)


@router.get("/{expense_id}", response_model=ExpenseSchema)
async def get_expense(
    expense_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(EXPENSES)),
):
    return await get_or_404(db, Expense, expense_id, "Expense")


@router.post("/", response_model=ExpenseSchema, status_code=status.HTTP_201_CREATED)
async def create_expense(
    expense: ExpenseCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(EXPENSES)),
):
    """
    Record an expense. ``createdBy`` defaults to the caller's name.
    """
    data = expense.model_dump()
    data["created_by"] = expense.created_by or current_user.full_name

    db_expense = Expense(**data)
    db.add(db_expense)
    await db.commit()
    await db.refresh(db_expense)

    return db_expense


@router.put("/{expense_id}", response_model=ExpenseSchema)
async def update_expense(
    expense_id: int,
    expense_update: ExpenseUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(EXPENSES)),
):
    db_expense = await get_or_404(db, Expense, expense_id, "Expense")

    require_fields(expense_update, "date", "type", "amount", "paid_to", "payment_mode")
    apply_update(db_expense, expense_update)

    await db.commit()
    await db.refresh(db_expense)

    return db_expense


@router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_expense(
    expense_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(EXPENSES)),
):
    db_expense = await get_or_404(db, Expense, expense_id, "Expense")

    await db.delete(db_expense)
    await db.commit()

    return None
