"""
Pydantic schemas for the garage profile.
"""
from pydantic import EmailStr, Field
from datetime import datetime
from typing import Optional

from garage.schemas.base import CamelModel, GstPercent, ORMModel


class GarageProfileBase(CamelModel):
    """Base garage profile schema with common fields."""
    logo: Optional[str] = None
    garage_name: str = Field(min_length=1)
    phone: Optional[str] = None
    email: EmailStr
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    footer_message: Optional[str] = None
    enable_gst: bool = False
    gst_number: Optional[str] = None
    gst_rate: GstPercent = 18


class GarageProfileCreate(GarageProfileBase):
    """Schema for creating the garage profile; the owner is the caller."""
    pass


class GarageProfileUpdate(CamelModel):
    logo: Optional[str] = None
    garage_name: Optional[str] = Field(default=None, min_length=1)
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    footer_message: Optional[str] = None
    enable_gst: Optional[bool] = None
    gst_number: Optional[str] = None
    gst_rate: Optional[GstPercent] = None


class GarageProfile(GarageProfileBase, ORMModel):
    """Schema for garage profile responses."""
    id: int
    user_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
