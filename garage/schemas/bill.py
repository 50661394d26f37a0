"""
Pydantic schemas for GST and non-GST bills.
"""
from pydantic import Field
from datetime import datetime
from typing import Optional

from garage.schemas.base import CamelModel, GstPercent, ORMModel, UtcDatetime
from garage.schemas.customer import CustomerSummary, Vehicle
from garage.schemas.item import Item, ItemSummary

GSTIN_PATTERN = r"^[0-9]{2}[A-Z]{5}[0-9]{4}[A-Z][1-9A-Z]Z[0-9A-Z]$"


class GstBillLineIn(CamelModel):
    """
    An item line on a GST bill.
    ``rate`` and ``gstPercent`` default to the item's own values when omitted.
    """
    item_id: int
    quantity: int = Field(default=1, ge=1)
    rate: Optional[float] = Field(default=None, ge=0)
    gst_percent: Optional[GstPercent] = None


class GstBillLine(ORMModel):
    item_id: int
    item: Optional[ItemSummary] = None
    quantity: int
    rate: float
    gst_percent: int
    actual_amount: float
    gst_amount: float
    total_amount: float


class GstBillCreate(CamelModel):
    """Schema for creating a GST bill. Amounts are computed server-side."""
    customer_id: int
    vehicle_id: int
    gstin: Optional[str] = Field(default=None, pattern=GSTIN_PATTERN)
    invoice_no: Optional[str] = Field(default=None, min_length=1)
    invoice_date: Optional[UtcDatetime] = None
    items: list[GstBillLineIn] = Field(min_length=1)
    mechanic_charge: float = Field(default=0, ge=0)


class GstBillUpdate(CamelModel):
    vehicle_id: Optional[int] = None
    gstin: Optional[str] = Field(default=None, pattern=GSTIN_PATTERN)
    invoice_no: Optional[str] = Field(default=None, min_length=1)
    invoice_date: Optional[UtcDatetime] = None
    items: Optional[list[GstBillLineIn]] = Field(default=None, min_length=1)
    mechanic_charge: Optional[float] = Field(default=None, ge=0)


class GstBill(ORMModel):
    """Schema for GST bill responses."""
    id: int
    customer_id: int
    customer: Optional[CustomerSummary] = None
    vehicle_id: int
    vehicle: Optional[Vehicle] = None
    gstin: Optional[str] = None
    invoice_no: str
    invoice_date: datetime
    items: list[GstBillLine]
    mechanic_charge: float
    total_amount: float
    gst: float
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class GarageSnapshot(CamelModel):
    """Issuing garage details frozen onto a non-GST bill."""
    name: str = Field(min_length=1)
    address: str = ""
    gstin: str = ""
    state: str = ""


class NonGstBillCreate(CamelModel):
    """Schema for creating a non-GST bill."""
    customer_id: int
    vehicle_id: int
    invoice_no: Optional[str] = Field(default=None, min_length=1)
    invoice_date: Optional[UtcDatetime] = None
    item_ids: list[int] = Field(default_factory=list)
    mechanic_charge: float = Field(default=0, ge=0)
    additional_notes: str = ""
    garage: Optional[GarageSnapshot] = None


class NonGstBillUpdate(CamelModel):
    """Schema for updating a non-GST bill. The garage snapshot is immutable."""
    vehicle_id: Optional[int] = None
    invoice_no: Optional[str] = Field(default=None, min_length=1)
    invoice_date: Optional[UtcDatetime] = None
    item_ids: Optional[list[int]] = None
    mechanic_charge: Optional[float] = Field(default=None, ge=0)
    additional_notes: Optional[str] = None


class NonGstBill(ORMModel):
    """Schema for non-GST bill responses."""
    id: int
    customer_id: int
    customer: Optional[CustomerSummary] = None
    vehicle_id: int
    vehicle: Optional[Vehicle] = None
    invoice_no: str
    invoice_date: datetime
    items: list[Item]
    mechanic_charge: float
    total_amount: float
    additional_notes: str
    garage: GarageSnapshot
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class GstBreakdown(CamelModel):
    percent: int
    amount: float


class BillTotals(CamelModel):
    """Totals recomputed from a stored bill."""
    invoice_no: str
    invoice_date: datetime
    customer: str
    total_actual_amount: float
    total_gst: float
    gst_breakdown: list[GstBreakdown] = Field(default_factory=list)
    mechanic_charge: float
    grand_total: float


class BillCount(CamelModel):
    count: int
