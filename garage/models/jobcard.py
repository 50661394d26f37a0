"""
Job card model for database.
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship
from garage.database import Base, TimestampMixin
import enum


class ServiceType(str, enum.Enum):
    """Kinds of work a job card can be opened for."""
    GENERAL_SERVICE = "General Service"
    ENGINE_WORK = "Engine Work"
    ELECTRICAL_WORK = "Electrical Work"
    AC_SERVICE = "AC Service"
    OTHER = "Other"


class JobStatus(str, enum.Enum):
    """Job card status enumeration."""
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    CLOSED = "Closed"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class JobCard(TimestampMixin, Base):
    """Job card database model."""

    __tablename__ = "job_cards"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    vehicle_number = Column(String, nullable=False, index=True)
    job_in_date = Column(DateTime(timezone=True), nullable=False, index=True)
    estimated_delivery = Column(DateTime(timezone=True), nullable=False)
    service_type = Column(SQLEnum(ServiceType, values_callable=_enum_values), nullable=False)
    status = Column(
        SQLEnum(JobStatus, values_callable=_enum_values),
        default=JobStatus.PENDING,
        nullable=False,
    )
    assigned_mechanic_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    km_in = Column(Integer, nullable=False)
    job_description = Column(String, nullable=True)
    reminder_sent = Column(Boolean, default=False, nullable=False, index=True)

    # Relationships
    customer = relationship("Customer", lazy="selectin")
    assigned_mechanic = relationship("User", lazy="selectin")
