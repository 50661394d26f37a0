"""
GST and non-GST bill models.
"""
from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey, JSON, Table
from sqlalchemy.orm import relationship
from garage.database import Base, TimestampMixin


class GstBill(TimestampMixin, Base):
    """GST invoice. Line amounts are priced by the write path, never by callers."""

    __tablename__ = "gst_bills"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id"), nullable=False)
    gstin = Column(String, nullable=True)
    invoice_no = Column(String, unique=True, nullable=False, index=True)
    invoice_date = Column(DateTime(timezone=True), nullable=False)
    mechanic_charge = Column(Float, nullable=False, default=0.0)
    total_amount = Column(Float, nullable=False, default=0.0)
    gst = Column(Float, nullable=False, default=0.0)

    # Relationships
    customer = relationship("Customer", lazy="selectin")
    vehicle = relationship("Vehicle", lazy="selectin")
    items = relationship(
        "GstBillLine",
        back_populates="bill",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="GstBillLine.position",
    )


class GstBillLine(Base):
    """One priced item line of a GST bill."""

    __tablename__ = "gst_bill_lines"

    id = Column(Integer, primary_key=True, index=True)
    bill_id = Column(Integer, ForeignKey("gst_bills.id", ondelete="CASCADE"), nullable=False)
    item_id = Column(Integer, ForeignKey("items.id"), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    quantity = Column(Integer, nullable=False)
    rate = Column(Float, nullable=False)
    gst_percent = Column(Integer, nullable=False)
    actual_amount = Column(Float, nullable=False)
    gst_amount = Column(Float, nullable=False)
    total_amount = Column(Float, nullable=False)

    # Relationships
    bill = relationship("GstBill", back_populates="items")
    item = relationship("Item", lazy="selectin")


non_gst_bill_items = Table(
    "non_gst_bill_items",
    Base.metadata,
    Column("bill_id", Integer, ForeignKey("non_gst_bills.id", ondelete="CASCADE"), primary_key=True),
    Column("item_id", Integer, ForeignKey("items.id"), primary_key=True),
)


class NonGstBill(TimestampMixin, Base):
    """
    Non-GST invoice.

    ``garage`` holds the issuing garage's name, address, gstin and state as
    they were when the bill was created. Later profile edits do not touch it.
    """

    __tablename__ = "non_gst_bills"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id"), nullable=False)
    invoice_no = Column(String, unique=True, nullable=False, index=True)
    invoice_date = Column(DateTime(timezone=True), nullable=False)
    mechanic_charge = Column(Float, nullable=False, default=0.0)
    total_amount = Column(Float, nullable=False, default=0.0)
    additional_notes = Column(String, nullable=False, default="")
    garage = Column(JSON, nullable=False)

    # Relationships
    customer = relationship("Customer", lazy="selectin")
    vehicle = relationship("Vehicle", lazy="selectin")
    items = relationship("Item", secondary=non_gst_bill_items, lazy="selectin", order_by="Item.id")
