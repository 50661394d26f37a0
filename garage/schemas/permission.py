"""
Pydantic schemas for Permission and RolePermission.
"""
from pydantic import Field
from datetime import datetime
from typing import Optional

from garage.models.user import UserRole
from garage.schemas.base import CamelModel, ORMModel


class PermissionBase(CamelModel):
    name: str = Field(min_length=1)
    is_active: bool = True
    description: Optional[str] = None


class PermissionCreate(PermissionBase):
    pass


class PermissionUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1)
    is_active: Optional[bool] = None
    description: Optional[str] = None


class Permission(PermissionBase, ORMModel):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class RolePermissionCreate(CamelModel):
    permission_id: int


class RolePermission(ORMModel):
    id: int
    role: UserRole
    permission_id: int
    permission: Permission
