"""
GST bill routes.
"""
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import func, select
from typing import List, Optional
from datetime import datetime, timezone

from garage.billing import (
    GST_INVOICE_PREFIX, PricedLine, ensure_invoice_no_free, gst_breakdown, gst_invoice_totals,
    load_items, next_invoice_no, price_line, resolve_billed_vehicle,
)
from garage.branding import load_branding
from garage.database import get_db
from garage.invoices import render_gst_invoice
from garage.models.bill import GstBill, GstBillLine
from garage.models.user import User
from garage.schemas.bill import (
    BillCount, BillTotals, GstBill as GstBillSchema, GstBillCreate, GstBillLineIn, GstBillUpdate,
)
from garage.auth import require_feature
from garage.crud import commit_or_conflict, get_or_404, require_fields
from garage.permissions import BILLING, BILLING_HISTORY

router = APIRouter(prefix="/gst-bills", tags=["gst-bills"])

INVOICE_TAKEN = "Invoice number is already in use"


async def _build_lines(db: AsyncSession, lines: List[GstBillLineIn]) -> List[GstBillLine]:
    """Price each requested line against the stored item."""
    items = await load_items(db, [line.item_id for line in lines])

    priced = []
    for position, line in enumerate(lines):
        item = items[line.item_id]
        rate = line.rate if line.rate is not None else item.rate
        gst_percent = line.gst_percent if line.gst_percent is not None else (item.gst_percent or 0)
        amounts = price_line(line.quantity, rate, gst_percent)
        priced.append(GstBillLine(
            item_id=item.id,
            position=position,
            quantity=amounts.quantity,
            rate=amounts.rate,
            gst_percent=amounts.gst_percent,
            actual_amount=amounts.actual_amount,
            gst_amount=amounts.gst_amount,
            total_amount=amounts.total_amount,
        ))
    return priced


def _as_priced(lines: List[GstBillLine]) -> List[PricedLine]:
    return [
        PricedLine(
            quantity=line.quantity,
            rate=line.rate,
            gst_percent=line.gst_percent,
            actual_amount=line.actual_amount,
            gst_amount=line.gst_amount,
            total_amount=line.total_amount,
        )
        for line in lines
    ]


def _apply_totals(bill: GstBill) -> None:
    bill.total_amount, bill.gst = gst_invoice_totals(_as_priced(bill.items), bill.mechanic_charge)


@router.get("/", response_model=List[GstBillSchema])
async def get_gst_bills(
    skip: int = 0,
    limit: int = 100,
    customer_id: Optional[int] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(BILLING, BILLING_HISTORY)),
):
    """
    Get all GST bills, newest first.
    """
    query = select(GstBill).order_by(GstBill.created_at.desc(), GstBill.id.desc())
    if customer_id is not None:
        query = query.where(GstBill.customer_id == customer_id)

    result = await db.execute(query.offset(skip).limit(limit))
    return result.scalars().all()


@router.get("/count", response_model=BillCount)
async def count_gst_bills(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(BILLING, BILLING_HISTORY)),
):
    count = await db.scalar(select(func.count()).select_from(GstBill))
    return BillCount(count=count or 0)


@router.get("/{bill_id}", response_model=GstBillSchema)
async def get_gst_bill(
    bill_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(BILLING, BILLING_HISTORY)),
):
    """
    Get a specific GST bill by ID.
    """
    return await get_or_404(db, GstBill, bill_id, "GST Bill")


@router.get("/{bill_id}/pdf", response_class=Response)
async def get_gst_bill_pdf(
    bill_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(BILLING, BILLING_HISTORY)),
):
    """
    Download a GST bill as a PDF invoice.
    """
    bill = await get_or_404(db, GstBill, bill_id, "GST Bill")
    pdf = render_gst_invoice(bill, await load_branding(db))
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{bill.invoice_no}.pdf"'},
    )


@router.get("/{bill_id}/total", response_model=BillTotals)
async def get_gst_bill_total(
    bill_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(BILLING, BILLING_HISTORY)),
):
    """
    Recompute a GST bill's totals from its lines, with GST split per rate.
    """
    bill = await get_or_404(db, GstBill, bill_id, "GST Bill")

    lines = [price_line(line.quantity, line.rate, line.gst_percent) for line in bill.items]
    grand_total, total_gst = gst_invoice_totals(lines, bill.mechanic_charge)

    return BillTotals(
        invoice_no=bill.invoice_no,
        invoice_date=bill.invoice_date,
        customer=bill.customer.name,
        total_actual_amount=round(sum(line.actual_amount for line in lines), 2),
        total_gst=total_gst,
        gst_breakdown=gst_breakdown(lines),
        mechanic_charge=bill.mechanic_charge,
        grand_total=grand_total,
    )


@router.post("/", response_model=GstBillSchema, status_code=status.HTTP_201_CREATED)
async def create_gst_bill(
    bill: GstBillCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(BILLING)),
):
    """
    Generate a GST bill. Line amounts and totals are computed here.
    """
    await resolve_billed_vehicle(db, bill.customer_id, bill.vehicle_id)

    if bill.invoice_no:
        await ensure_invoice_no_free(db, GstBill, bill.invoice_no)
        invoice_no = bill.invoice_no
    else:
        invoice_no = await next_invoice_no(db, GstBill, GST_INVOICE_PREFIX)

    db_bill = GstBill(
        customer_id=bill.customer_id,
        vehicle_id=bill.vehicle_id,
        gstin=bill.gstin,
        invoice_no=invoice_no,
        invoice_date=bill.invoice_date or datetime.now(timezone.utc),
        mechanic_charge=bill.mechanic_charge,
        items=await _build_lines(db, bill.items),
    )
    _apply_totals(db_bill)

    db.add(db_bill)
    await commit_or_conflict(db, INVOICE_TAKEN)
    await db.refresh(db_bill)

    return db_bill


@router.put("/{bill_id}", response_model=GstBillSchema)
async def update_gst_bill(
    bill_id: int,
    bill_update: GstBillUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(BILLING)),
):
    """
    Update a GST bill. Totals are recomputed from the resulting lines.
    """
    db_bill = await get_or_404(db, GstBill, bill_id, "GST Bill")
    require_fields(bill_update, "vehicle_id", "invoice_no", "invoice_date", "items", "mechanic_charge")
    update_data = bill_update.model_dump(exclude_unset=True, exclude={"items"})

    if "vehicle_id" in update_data:
        await resolve_billed_vehicle(db, db_bill.customer_id, update_data["vehicle_id"])
    if update_data.get("invoice_no"):
        await ensure_invoice_no_free(db, GstBill, update_data["invoice_no"], bill_id)

    for field, value in update_data.items():
        setattr(db_bill, field, value)

    if bill_update.items is not None:
        db_bill.items = await _build_lines(db, bill_update.items)
    _apply_totals(db_bill)

    await commit_or_conflict(db, INVOICE_TAKEN)
    await db.refresh(db_bill)

    return db_bill


@router.delete("/{bill_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_gst_bill(
    bill_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(BILLING)),
):
    """
    Delete a GST bill and its lines.
    """
    db_bill = await get_or_404(db, GstBill, bill_id, "GST Bill")

    await db.delete(db_bill)
    await db.commit()

    return None
