"""
Customer model for database.
"""
from sqlalchemy import Column, Integer, String, ForeignKey
from sqlalchemy.orm import relationship
from garage.database import Base, TimestampMixin


class Customer(TimestampMixin, Base):
    """Customer database model."""

    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    mobile = Column(String, nullable=False, index=True)
    alternate_number = Column(String, nullable=True)
    email = Column(String, nullable=True, index=True)
    address = Column(String, nullable=True)

    # Relationships
    vehicles = relationship(
        "Vehicle",
        back_populates="customer",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="Vehicle.id",
    )


class Vehicle(Base):
    """A vehicle owned by a customer; always written through its customer."""

    __tablename__ = "vehicles"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="CASCADE"), nullable=False)
    vehicle_number = Column(String, nullable=False, index=True)
    brand = Column(String, nullable=True)
    model = Column(String, nullable=True)
    fuel_type = Column(String, nullable=False)
    vehicle_type = Column(String, nullable=False)
    registration_date = Column(String, nullable=True)
    insurance_expiry = Column(String, nullable=True)

    # Relationships
    customer = relationship("Customer", back_populates="vehicles")
