"""
Pydantic schemas for Expense and ExpenseCategory.
"""
from pydantic import Field
from datetime import datetime
from typing import Optional

from garage.models.expense import PaymentMode
from garage.schemas.base import CamelModel, ORMModel, UtcDatetime


class ExpenseBase(CamelModel):
    """Base expense schema with common fields."""
    date: UtcDatetime
    type: str = Field(min_length=1)
    amount: float = Field(ge=0)
    description: Optional[str] = None
    paid_to: str = Field(min_length=1)
    payment_mode: PaymentMode


class ExpenseCreate(ExpenseBase):
    """Schema for creating an expense. ``createdBy`` defaults to the caller."""
    created_by: Optional[str] = Field(default=None, min_length=1)


class ExpenseUpdate(CamelModel):
    date: Optional[UtcDatetime] = None
    type: Optional[str] = Field(default=None, min_length=1)
    amount: Optional[float] = Field(default=None, ge=0)
    description: Optional[str] = None
    paid_to: Optional[str] = Field(default=None, min_length=1)
    payment_mode: Optional[PaymentMode] = None


class Expense(ExpenseBase, ORMModel):
    """Schema for expense responses."""
    id: int
    created_by: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ExpenseTypeTotal(CamelModel):
    type: str
    total: float
    count: int


class ExpenseSummary(CamelModel):
    total: float
    by_type: list[ExpenseTypeTotal]


class ExpenseCategoryBase(CamelModel):
    name: str = Field(min_length=1)
    value: float
    color: str = Field(min_length=1)


class ExpenseCategoryCreate(ExpenseCategoryBase):
    pass


class ExpenseCategoryUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1)
    value: Optional[float] = None
    color: Optional[str] = Field(default=None, min_length=1)


class ExpenseCategory(ExpenseCategoryBase, ORMModel):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
