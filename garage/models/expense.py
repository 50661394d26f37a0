"""
Expense and expense category models.
"""
from sqlalchemy import Column, Integer, String, Float, DateTime, Enum as SQLEnum
from garage.database import Base, TimestampMixin
import enum


class PaymentMode(str, enum.Enum):
    """How an expense was paid."""
    CASH = "Cash"
    BANK_TRANSFER = "Bank Transfer"
    UPI = "UPI"
    CHEQUE = "Cheque"


class Expense(TimestampMixin, Base):
    """Expense database model."""

    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True, index=True)
    date = Column(DateTime(timezone=True), nullable=False, index=True)
    type = Column(String, nullable=False, index=True)
    amount = Column(Float, nullable=False)
    description = Column(String, nullable=True)
    paid_to = Column(String, nullable=False)
    payment_mode = Column(
        SQLEnum(PaymentMode, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    created_by = Column(String, nullable=False)


class ExpenseCategory(TimestampMixin, Base):
    """Expense category database model."""

    __tablename__ = "expense_categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False, index=True)
    value = Column(Float, nullable=False)
    color = Column(String, nullable=False)
