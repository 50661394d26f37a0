"""
Helpers shared by the CRUD routers.
"""
from typing import Any, Type, TypeVar

from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from garage.exceptions import ConflictError, NotFoundError, ValidationError

ModelT = TypeVar("ModelT")

# SQLSTATE for unique_violation
UNIQUE_VIOLATION = "23505"


async def get_or_404(db: AsyncSession, model: Type[ModelT], obj_id: int, label: str) -> ModelT:
    """Load ``model`` by primary key or raise NotFoundError."""
    obj = await db.get(model, obj_id)
    if obj is None:
        raise NotFoundError(f"{label} not found")
    return obj


def require_fields(update: BaseModel, *fields: str) -> None:
    """
    Reject an explicit ``null`` for columns a record cannot do without.
    Fields the client left out are fine; partial updates keep them.
    """
    sent = update.model_dump(exclude_unset=True)
    missing = [to_camel(field) for field in fields if field in sent and sent[field] is None]
    if missing:
        raise ValidationError(
            f"{', '.join(missing)} cannot be null",
            errors=[{"field": field, "message": f"{field} is required"} for field in missing],
        )


def apply_update(obj: Any, update: BaseModel, exclude: set[str] | None = None) -> dict:
    """Copy the fields the client actually sent onto ``obj``."""
    update_data = update.model_dump(exclude_unset=True, exclude=exclude)
    for field, value in update_data.items():
        setattr(obj, field, value)
    return update_data


def is_unique_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    if getattr(orig, "pgcode", None) == UNIQUE_VIOLATION or getattr(orig, "sqlstate", None) == UNIQUE_VIOLATION:
        return True
    return "unique" in str(orig).lower()


async def commit_or_conflict(db: AsyncSession, message: str) -> None:
    """
    Commit, turning a unique-constraint violation into ConflictError.
    Other integrity failures propagate as database errors.
    """
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        if is_unique_violation(exc):
            raise ConflictError(message)
        raise


async def ensure_unreferenced(db: AsyncSession, model, column, value: int, message: str) -> None:
    """Raise ConflictError if any ``model`` row points at ``value`` (restrict-on-delete)."""
    count = await db.scalar(select(func.count()).select_from(model).where(column == value))
    if count:
        raise ConflictError(message)
