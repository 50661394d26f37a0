"""
Billable item routes.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import func, or_, select
from typing import List, Optional

from garage.billing import compute_item_amount
from garage.database import get_db
from garage.models.bill import GstBillLine, non_gst_bill_items
from garage.models.item import Item
from garage.models.user import User
from garage.schemas.item import Item as ItemSchema, ItemCreate, ItemUpdate
from garage.auth import require_feature
from garage.crud import apply_update, ensure_unreferenced, get_or_404, require_fields
from garage.exceptions import ConflictError
from garage.permissions import BILLING, PRODUCTS

router = APIRouter(prefix="/items", tags=["items"])


async def _ensure_unique(db: AsyncSession, description: Optional[str], hsn_code: Optional[str],
                         item_id: Optional[int] = None) -> None:
    """An item's description and its HSN code are each unique, ignoring case."""
    clauses = []
    if description is not None:
        clauses.append(func.lower(Item.description) == description.lower())
    if hsn_code is not None:
        clauses.append(func.lower(Item.hsn_code) == hsn_code.lower())
    if not clauses:
        return

    query = select(Item.id).where(or_(*clauses))
    if item_id is not None:
        query = query.where(Item.id != item_id)
    if await db.scalar(query.limit(1)) is not None:
        raise ConflictError("An item with this description or HSN code already exists")


@router.get("/", response_model=List[ItemSchema])
async def get_items(
    search: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(PRODUCTS, BILLING)),
):
    """
    Get all items ordered by description.
    """
    query = select(Item).order_by(Item.description)
    if search:
        pattern = f"%{search}%"
        query = query.where(or_(Item.description.ilike(pattern), Item.hsn_code.ilike(pattern)))

    result = await db.execute(query)
    return result.scalars().all()


@router.get("/{item_id}", response_model=ItemSchema)
async def get_item(
    item_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(PRODUCTS, BILLING)),
):
    return await get_or_404(db, Item, item_id, "Item")


@router.post("/", response_model=ItemSchema, status_code=status.HTTP_201_CREATED)
async def create_item(
    item: ItemCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(PRODUCTS, BILLING)),
):
    """
    Create an item. Its amount is quantity times rate.
    """
    await _ensure_unique(db, item.description, item.hsn_code)

    db_item = Item(**item.model_dump(), amount=compute_item_amount(item.quantity, item.rate))
    db.add(db_item)
    await db.commit()
    await db.refresh(db_item)

    return db_item


@router.put("/{item_id}", response_model=ItemSchema)
async def update_item(
    item_id: int,
    item_update: ItemUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(PRODUCTS)),
):
    """
    Update an item and recompute its amount.
    """
    db_item = await get_or_404(db, Item, item_id, "Item")
    require_fields(item_update, "description", "hsn_code", "quantity", "rate")
    await _ensure_unique(db, item_update.description, item_update.hsn_code, item_id)

    apply_update(db_item, item_update)

    db_item.amount = compute_item_amount(db_item.quantity, db_item.rate)
    await db.commit()
    await db.refresh(db_item)

    return db_item


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(
    item_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(PRODUCTS)),
):
    """
    Delete an item that no bill refers to.
    """
    db_item = await get_or_404(db, Item, item_id, "Item")

    message = "Item is used on a bill and cannot be deleted"
    await ensure_unreferenced(db, GstBillLine, GstBillLine.item_id, item_id, message)
    await ensure_unreferenced(db, non_gst_bill_items, non_gst_bill_items.c.item_id, item_id, message)

    await db.delete(db_item)
    await db.commit()

    return None
