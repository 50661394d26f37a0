"""
Non-GST bill routes.
"""
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import func, select
from typing import List, Optional
from datetime import datetime, timezone

from garage.billing import (
    NON_GST_INVOICE_PREFIX, ensure_invoice_no_free, load_items, next_invoice_no,
    non_gst_invoice_total, resolve_billed_vehicle,
)
from garage.database import get_db
from garage.invoices import render_non_gst_invoice
from garage.models.bill import NonGstBill
from garage.models.garage_profile import GarageProfile
from garage.models.user import User
from garage.schemas.bill import (
    BillCount, BillTotals, GarageSnapshot, NonGstBill as NonGstBillSchema, NonGstBillCreate, NonGstBillUpdate,
)
from garage.auth import require_feature
from garage.crud import commit_or_conflict, get_or_404, require_fields
from garage.exceptions import ValidationError
from garage.permissions import BILLING, BILLING_HISTORY

router = APIRouter(prefix="/non-gst-bills", tags=["non-gst-bills"])

INVOICE_TAKEN = "Invoice number is already in use"


async def _garage_snapshot(db: AsyncSession) -> GarageSnapshot:
    """Current garage details, copied onto a bill at issue time."""
    profile = await db.scalar(select(GarageProfile).order_by(GarageProfile.id).limit(1))
    if profile is None:
        raise ValidationError.for_field("garage", "Garage details are required; create the garage profile first")

    address = ", ".join(part for part in (profile.address, profile.city) if part)
    if profile.zip_code:
        address = f"{address} - {profile.zip_code}" if address else profile.zip_code

    return GarageSnapshot(
        name=profile.garage_name,
        address=address,
        gstin=profile.gst_number or "",
        state=profile.state or "",
    )


def _total(bill: NonGstBill) -> float:
    return non_gst_invoice_total(((item.quantity, item.rate) for item in bill.items), bill.mechanic_charge)


@router.get("/", response_model=List[NonGstBillSchema])
async def get_non_gst_bills(
    skip: int = 0,
    limit: int = 100,
    customer_id: Optional[int] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(BILLING, BILLING_HISTORY)),
):
    """
    Get all non-GST bills, newest first.
    """
    query = select(NonGstBill).order_by(NonGstBill.created_at.desc(), NonGstBill.id.desc())
    if customer_id is not None:
        query = query.where(NonGstBill.customer_id == customer_id)

    result = await db.execute(query.offset(skip).limit(limit))
    return result.scalars().all()


@router.get("/count", response_model=BillCount)
async def count_non_gst_bills(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(BILLING, BILLING_HISTORY)),
):
    count = await db.scalar(select(func.count()).select_from(NonGstBill))
    return BillCount(count=count or 0)


@router.get("/{bill_id}", response_model=NonGstBillSchema)
async def get_non_gst_bill(
    bill_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(BILLING, BILLING_HISTORY)),
):
    """
    Get a specific non-GST bill by ID.
    """
    return await get_or_404(db, NonGstBill, bill_id, "Bill")


@router.get("/{bill_id}/pdf", response_class=Response)
async def get_non_gst_bill_pdf(
    bill_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(BILLING, BILLING_HISTORY)),
):
    """
    Download a non-GST bill as a PDF invoice.
    """
    bill = await get_or_404(db, NonGstBill, bill_id, "Bill")
    pdf = render_non_gst_invoice(bill)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{bill.invoice_no}.pdf"'},
    )


@router.get("/{bill_id}/total", response_model=BillTotals)
async def get_non_gst_bill_total(
    bill_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(BILLING, BILLING_HISTORY)),
):
    """
    Recompute a non-GST bill's total from its items.
    """
    bill = await get_or_404(db, NonGstBill, bill_id, "Bill")
    items_total = non_gst_invoice_total((item.quantity, item.rate) for item in bill.items)

    return BillTotals(
        invoice_no=bill.invoice_no,
        invoice_date=bill.invoice_date,
        customer=bill.customer.name,
        total_actual_amount=items_total,
        total_gst=0,
        mechanic_charge=bill.mechanic_charge,
        grand_total=_total(bill),
    )


@router.post("/", response_model=NonGstBillSchema, status_code=status.HTTP_201_CREATED)
async def create_non_gst_bill(
    bill: NonGstBillCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(BILLING)),
):
    """
    Generate a non-GST bill. The garage's current details are frozen onto it.
    """
    await resolve_billed_vehicle(db, bill.customer_id, bill.vehicle_id)
    items = await load_items(db, bill.item_ids)

    if bill.invoice_no:
        await ensure_invoice_no_free(db, NonGstBill, bill.invoice_no)
        invoice_no = bill.invoice_no
    else:
        invoice_no = await next_invoice_no(db, NonGstBill, NON_GST_INVOICE_PREFIX)

    snapshot = bill.garage or await _garage_snapshot(db)

    db_bill = NonGstBill(
        customer_id=bill.customer_id,
        vehicle_id=bill.vehicle_id,
        invoice_no=invoice_no,
        invoice_date=bill.invoice_date or datetime.now(timezone.utc),
        items=[items[item_id] for item_id in dict.fromkeys(bill.item_ids)],
        mechanic_charge=bill.mechanic_charge,
        additional_notes=bill.additional_notes,
        garage=snapshot.model_dump(),
    )
    db_bill.total_amount = _total(db_bill)

    db.add(db_bill)
    await commit_or_conflict(db, INVOICE_TAKEN)
    await db.refresh(db_bill)

    return db_bill


@router.put("/{bill_id}", response_model=NonGstBillSchema)
async def update_non_gst_bill(
    bill_id: int,
    bill_update: NonGstBillUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(BILLING)),
):
    """
    Update a non-GST bill. The garage snapshot is never refreshed.
    """
    db_bill = await get_or_404(db, NonGstBill, bill_id, "Bill")
    require_fields(bill_update, "vehicle_id", "invoice_no", "invoice_date", "item_ids", "mechanic_charge")
    update_data = bill_update.model_dump(exclude_unset=True, exclude={"item_ids"})

    if "vehicle_id" in update_data:
        await resolve_billed_vehicle(db, db_bill.customer_id, update_data["vehicle_id"])
    if update_data.get("invoice_no"):
        await ensure_invoice_no_free(db, NonGstBill, update_data["invoice_no"], bill_id)

    for field, value in update_data.items():
        setattr(db_bill, field, value)

    if bill_update.item_ids is not None:
        items = await load_items(db, bill_update.item_ids)
        db_bill.items = [items[item_id] for item_id in dict.fromkeys(bill_update.item_ids)]
    db_bill.total_amount = _total(db_bill)

    await commit_or_conflict(db, INVOICE_TAKEN)
    await db.refresh(db_bill)

    return db_bill


@router.delete("/{bill_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_non_gst_bill(
    bill_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(BILLING)),
):
    """
    Delete a non-GST bill.
    """
    db_bill = await get_or_404(db, NonGstBill, bill_id, "Bill")

    await db.delete(db_bill)
    await db.commit()

    return None
