"""
Pydantic schemas for Item.
"""
from pydantic import Field
from datetime import datetime
from typing import Optional

from garage.schemas.base import CamelModel, GstPercent, ORMModel


class ItemBase(CamelModel):
    """Base item schema with common fields."""
    description: str = Field(min_length=1)
    hsn_code: str = Field(min_length=1)
    quantity: int = Field(default=1, ge=1)
    rate: float = Field(ge=0)
    gst_percent: Optional[GstPercent] = None


class ItemCreate(ItemBase):
    """Schema for creating an item. ``amount`` is derived, never accepted."""
    pass


class ItemUpdate(CamelModel):
    description: Optional[str] = Field(default=None, min_length=1)
    hsn_code: Optional[str] = Field(default=None, min_length=1)
    quantity: Optional[int] = Field(default=None, ge=1)
    rate: Optional[float] = Field(default=None, ge=0)
    gst_percent: Optional[GstPercent] = None


class Item(ItemBase, ORMModel):
    """Schema for item responses."""
    id: int
    amount: float
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ItemSummary(ORMModel):
    id: int
    description: str
    hsn_code: str
