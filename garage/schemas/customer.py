"""
Pydantic schemas for Customer and its vehicles.
"""
from pydantic import EmailStr, Field, field_validator
from datetime import datetime
from typing import Optional

from garage.schemas.base import CamelModel, ORMModel, blank_to_none


class VehicleBase(CamelModel):
    """Base vehicle schema with common fields."""
    vehicle_number: str = Field(min_length=1)
    brand: Optional[str] = None
    model: Optional[str] = None
    fuel_type: str = Field(min_length=1)
    vehicle_type: str = Field(min_length=1)
    registration_date: Optional[str] = None
    insurance_expiry: Optional[str] = None


class VehicleCreate(VehicleBase):
    """Schema for adding a vehicle to a customer."""
    pass


class VehicleUpdate(VehicleBase):
    """
    Schema for a vehicle inside a customer update.
    Vehicles carrying an ``id`` are updated in place, the rest are added.
    """
    id: Optional[int] = None


class Vehicle(VehicleBase, ORMModel):
    """Schema for vehicle responses."""
    id: int


class CustomerBase(CamelModel):
    """Base customer schema with common fields."""
    name: str = Field(min_length=1)
    mobile: str = Field(min_length=1)
    alternate_number: Optional[str] = None
    email: Optional[EmailStr] = None
    address: Optional[str] = None

    @field_validator("email", mode="before")
    @classmethod
    def blank_email(cls, value):
        return blank_to_none(value)


class CustomerCreate(CustomerBase):
    """Schema for creating a customer."""
    vehicles: list[VehicleCreate] = Field(default_factory=list)


class CustomerUpdate(CamelModel):
    """Schema for updating a customer."""
    name: Optional[str] = Field(default=None, min_length=1)
    mobile: Optional[str] = Field(default=None, min_length=1)
    alternate_number: Optional[str] = None
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    vehicles: Optional[list[VehicleUpdate]] = None

    @field_validator("email", mode="before")
    @classmethod
    def blank_email(cls, value):
        return blank_to_none(value)


class Customer(CustomerBase, ORMModel):
    """Schema for customer responses."""
    id: int
    vehicles: list[Vehicle] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CustomerSummary(ORMModel):
    """Customer reference expanded inside job cards and bills."""
    id: int
    name: str
    mobile: str
    email: Optional[str] = None


class CustomerDue(CamelModel):
    """A customer whose last visit is old enough for a service reminder."""
    customer_id: int
    name: str
    email: Optional[str] = None
    mobile: str
    vehicle_number: str
    last_service_date: datetime
    months_since_last_service: int


class ServiceHistoryEntry(CamelModel):
    """One visit or bill in a customer's service history."""
    id: int
    date: datetime
    type: str
    vehicle_number: Optional[str] = None
    km_reading: Optional[int] = None
    invoice_no: Optional[str] = None
    services: list[str] = Field(default_factory=list)
    total_amount: Optional[float] = None
    mechanic_charge: Optional[float] = None


class ServiceHistory(CamelModel):
    """Job cards and bills of one customer, newest first."""
    job_cards: list[ServiceHistoryEntry]
    gst_bills: list[ServiceHistoryEntry]
    non_gst_bills: list[ServiceHistoryEntry]
