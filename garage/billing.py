"""
Invoice arithmetic and invoice numbering.

Amounts are rounded to two decimal places per line; invoice totals are sums
of the rounded line values, so a printed invoice always adds up.
"""
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from garage.crud import get_or_404
from garage.exceptions import ConflictError, ValidationError
from garage.models.customer import Customer
from garage.models.item import Item

GST_INVOICE_PREFIX = "GST"
NON_GST_INVOICE_PREFIX = "NGST"


def _money(value: float) -> float:
    return round(value, 2)


@dataclass(frozen=True)
class PricedLine:
    """One bill line with its derived amounts."""

    quantity: int
    rate: float
    gst_percent: int
    actual_amount: float
    gst_amount: float
    total_amount: float


def compute_item_amount(quantity: int, rate: float) -> float:
    """Amount stored on an item: quantity times rate."""
    return _money(quantity * rate)


def price_line(quantity: int, rate: float, gst_percent: int = 0) -> PricedLine:
    """Derive actual, GST and total amounts for a single line."""
    if quantity < 0 or rate < 0 or gst_percent < 0:
        raise ValueError("quantity, rate and gst_percent must be non-negative")
    actual = _money(quantity * rate)
    gst = _money(actual * gst_percent / 100)
    return PricedLine(
        quantity=quantity,
        rate=rate,
        gst_percent=gst_percent,
        actual_amount=actual,
        gst_amount=gst,
        total_amount=_money(actual + gst),
    )


def gst_invoice_totals(lines: Sequence[PricedLine], mechanic_charge: float = 0) -> tuple[float, float]:
    """Return ``(total_amount, gst)`` for a GST invoice."""
    total = _money(sum(line.total_amount for line in lines) + mechanic_charge)
    gst = _money(sum(line.gst_amount for line in lines))
    return total, gst


def non_gst_invoice_total(lines: Iterable[tuple[int, float]], mechanic_charge: float = 0) -> float:
    """Total of a non-GST invoice from ``(quantity, rate)`` pairs; no tax is applied."""
    return _money(sum(_money(quantity * rate) for quantity, rate in lines) + mechanic_charge)


def gst_breakdown(lines: Iterable[PricedLine]) -> list[dict]:
    """GST collected per rate slab, ordered by rate."""
    slabs: dict[int, float] = {}
    for line in lines:
        slabs[line.gst_percent] = slabs.get(line.gst_percent, 0.0) + line.gst_amount
    return [{"percent": percent, "amount": _money(amount)} for percent, amount in sorted(slabs.items())]


def format_invoice_no(prefix: str, sequence: int) -> str:
    return f"{prefix}-{sequence:05d}"


async def next_invoice_no(db: AsyncSession, model, prefix: str) -> str:
    """
    Next free invoice number for ``model`` (``GST-00001`` style).
    Uniqueness is still enforced by the column constraint at write time.
    """
    count = await db.scalar(select(func.count()).select_from(model))
    sequence = (count or 0) + 1
    while True:
        candidate = format_invoice_no(prefix, sequence)
        taken = await db.scalar(select(model.id).where(model.invoice_no == candidate))
        if taken is None:
            return candidate
        sequence += 1


async def resolve_billed_vehicle(db: AsyncSession, customer_id: int, vehicle_id: int):
    """Load the bill's customer and check the vehicle is one of theirs."""
    customer = await get_or_404(db, Customer, customer_id, "Customer")
    vehicle = next((v for v in customer.vehicles if v.id == vehicle_id), None)
    if vehicle is None:
        raise ValidationError.for_field("vehicleId", "Vehicle does not belong to this customer")
    return customer, vehicle


async def load_items(db: AsyncSession, item_ids: Sequence[int]) -> dict:
    """Items by id; every id must exist."""
    wanted = set(item_ids)
    if not wanted:
        return {}
    result = await db.execute(select(Item).where(Item.id.in_(wanted)))
    items = {item.id: item for item in result.scalars().all()}
    missing = sorted(wanted - items.keys())
    if missing:
        raise ValidationError(
            "One or more items not found",
            errors=[{"field": "items", "message": f"Item {item_id} not found"} for item_id in missing],
        )
    return items


async def ensure_invoice_no_free(db: AsyncSession, model, invoice_no: str, bill_id: Optional[int] = None) -> None:
    query = select(model.id).where(model.invoice_no == invoice_no)
    if bill_id is not None:
        query = query.where(model.id != bill_id)
    if await db.scalar(query) is not None:
        raise ConflictError(f"Invoice number {invoice_no} is already in use")
