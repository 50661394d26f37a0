"""
Pydantic schemas for Mechanic.
"""
from pydantic import Field
from datetime import datetime
from typing import Optional

from garage.schemas.base import CamelModel, ORMModel


class MechanicBase(CamelModel):
    name: str = Field(min_length=1)
    specialty: str = Field(min_length=1)


class MechanicCreate(MechanicBase):
    pass


class MechanicUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1)
    specialty: Optional[str] = Field(default=None, min_length=1)


class Mechanic(MechanicBase, ORMModel):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
