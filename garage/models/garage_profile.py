"""
Garage profile (branding) model.
"""
from sqlalchemy import Column, Integer, String, Boolean, ForeignKey
from garage.database import Base, TimestampMixin


class GarageProfile(TimestampMixin, Base):
    """The garage's own identity, used on invoices and in the UI."""

    __tablename__ = "garage_profiles"

    id = Column(Integer, primary_key=True, index=True)
    logo = Column(String, nullable=True)
    garage_name = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    email = Column(String, nullable=False)
    address = Column(String, nullable=True)
    city = Column(String, nullable=True)
    state = Column(String, nullable=True)
    zip_code = Column(String, nullable=True)
    footer_message = Column(String, nullable=True)
    enable_gst = Column(Boolean, nullable=False, default=False)
    gst_number = Column(String, nullable=True)
    gst_rate = Column(Integer, nullable=False, default=18)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)

