"""
Pydantic schemas for JobCard.
"""
from pydantic import Field, model_validator
from datetime import datetime
from typing import Optional

from garage.models.jobcard import JobStatus, ServiceType
from garage.schemas.base import CamelModel, ORMModel, UtcDatetime
from garage.schemas.customer import CustomerSummary
from garage.schemas.user import UserSummary


class JobCardBase(CamelModel):
    """Base job card schema with common fields."""
    customer_id: int
    vehicle_number: str = Field(min_length=1)
    job_in_date: UtcDatetime
    estimated_delivery: UtcDatetime
    service_type: ServiceType
    status: JobStatus = JobStatus.PENDING
    assigned_mechanic_id: int
    km_in: int = Field(ge=0)
    job_description: Optional[str] = None


class JobCardCreate(JobCardBase):
    """Schema for creating a job card."""

    @model_validator(mode="after")
    def delivery_after_intake(self):
        if self.estimated_delivery < self.job_in_date:
            raise ValueError("estimatedDelivery must not be before jobInDate")
        return self


class JobCardUpdate(CamelModel):
    """Schema for updating a job card. ``reminderSent`` is owned by the reminder job."""
    customer_id: Optional[int] = None
    vehicle_number: Optional[str] = Field(default=None, min_length=1)
    job_in_date: Optional[UtcDatetime] = None
    estimated_delivery: Optional[UtcDatetime] = None
    service_type: Optional[ServiceType] = None
    status: Optional[JobStatus] = None
    assigned_mechanic_id: Optional[int] = None
    km_in: Optional[int] = Field(default=None, ge=0)
    job_description: Optional[str] = None


class JobStatusUpdate(CamelModel):
    status: JobStatus


class JobCard(JobCardBase, ORMModel):
    """Schema for job card responses."""
    id: int
    reminder_sent: bool = False
    customer: Optional[CustomerSummary] = None
    assigned_mechanic: Optional[UserSummary] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
