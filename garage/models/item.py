"""
Billable item model.
"""
from sqlalchemy import Column, Integer, String, Float
from garage.database import Base, TimestampMixin


class Item(TimestampMixin, Base):
    """Item database model. ``amount`` is always ``quantity * rate``."""

    __tablename__ = "items"

    id = Column(Integer, primary_key=True, index=True)
    description = Column(String, nullable=False)
    hsn_code = Column(String, nullable=False, index=True)
    quantity = Column(Integer, nullable=False, default=1)
    rate = Column(Float, nullable=False)
    gst_percent = Column(Integer, nullable=True)
    amount = Column(Float, nullable=False, default=0.0)
