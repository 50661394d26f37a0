"""
Permission and role-permission routes.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import List

from garage.database import get_db
from garage.models.permission import Permission, RolePermission
from garage.models.user import User, UserRole
from garage.schemas.permission import (
    Permission as PermissionSchema, PermissionCreate, PermissionUpdate,
    RolePermission as RolePermissionSchema, RolePermissionCreate,
)
from garage.auth import require_feature
from garage.crud import apply_update, commit_or_conflict, get_or_404, require_fields
from garage.exceptions import ConflictError, NotFoundError
from garage.permissions import SETTINGS

router = APIRouter(prefix="/permissions", tags=["permissions"])


@router.get("/", response_model=List[PermissionSchema])
async def get_permissions(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(SETTINGS)),
):
    result = await db.execute(select(Permission).order_by(Permission.id))
    return result.scalars().all()


@router.get("/roles/{role}", response_model=List[RolePermissionSchema])
async def get_role_permissions(
    role: UserRole,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(SETTINGS)),
):
    """
    Permissions granted to a role.
    """
    result = await db.execute(
        select(RolePermission).where(RolePermission.role == role.value).order_by(RolePermission.id)
    )
    return result.scalars().all()


@router.post("/roles/{role}", response_model=RolePermissionSchema, status_code=status.HTTP_201_CREATED)
async def grant_permission(
    role: UserRole,
    payload: RolePermissionCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(SETTINGS)),
):
    """
    Grant a permission to a role.
    """
    await get_or_404(db, Permission, payload.permission_id, "Permission")

    existing = await db.scalar(select(RolePermission.id).where(
        RolePermission.role == role.value, RolePermission.permission_id == payload.permission_id,
    ))
    if existing is not None:
        raise ConflictError("Role already has this permission")

    link = RolePermission(role=role.value, permission_id=payload.permission_id)
    db.add(link)
    await commit_or_conflict(db, "Role already has this permission")
    await db.refresh(link)

    return link


@router.delete("/roles/{role}/{permission_id}", status_code=status.HTTP_204_NO_CONTENT)
async def revoke_permission(
    role: UserRole,
    permission_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(SETTINGS)),
):
    link = await db.scalar(select(RolePermission).where(
        RolePermission.role == role.value, RolePermission.permission_id == permission_id,
    ))
    if link is None:
        raise NotFoundError("Role does not have this permission")

    await db.delete(link)
    await db.commit()

    return None


@router.get("/{permission_id}", response_model=PermissionSchema)
async def get_permission(
    permission_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(SETTINGS)),
):
    return await get_or_404(db, Permission, permission_id, "Permission")


@router.post("/", response_model=PermissionSchema, status_code=status.HTTP_201_CREATED)
async def create_permission(
    permission: PermissionCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(SETTINGS)),
):
    db_permission = Permission(**permission.model_dump())
    db.add(db_permission)
    await db.commit()
    await db.refresh(db_permission)

    return db_permission


@router.put("/{permission_id}", response_model=PermissionSchema)
async def update_permission(
    permission_id: int,
    permission_update: PermissionUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(SETTINGS)),
):
    db_permission = await get_or_404(db, Permission, permission_id, "Permission")
    require_fields(permission_update, "name", "is_active")

    apply_update(db_permission, permission_update)
    await db.commit()
    await db.refresh(db_permission)

    return db_permission


@router.delete("/{permission_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_permission(
    permission_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(SETTINGS)),
):
    """
    Delete a permission and its role links.
    """
    db_permission = await get_or_404(db, Permission, permission_id, "Permission")

    links = await db.execute(select(RolePermission).where(RolePermission.permission_id == permission_id))
    for link in links.scalars().all():
        await db.delete(link)
    await db.delete(db_permission)
    await db.commit()

    return None
