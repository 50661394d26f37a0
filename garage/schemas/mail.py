"""
Pydantic schemas for ad-hoc customer mail: messages, offers and manual reminders.
"""
from pydantic import EmailStr, Field
from datetime import datetime

from garage.schemas.base import CamelModel


class MailMessage(CamelModel):
    """A free-form message; ``text`` is plain text, line breaks are kept."""
    to: EmailStr
    subject: str = Field(min_length=1)
    text: str = Field(min_length=1)


class OfferMail(CamelModel):
    to: EmailStr
    customer_name: str = Field(min_length=1)
    offer_details: str = Field(min_length=1)


class BulkOffer(CamelModel):
    offer_details: str = Field(min_length=1)


class MailSent(CamelModel):
    message: str


class BulkOfferSummary(CamelModel):
    total_customers: int
    success_count: int
    failure_count: int
    failed_emails: list[str]


class BulkOfferResult(CamelModel):
    message: str
    summary: BulkOfferSummary


class ReminderSent(CamelModel):
    """Result of a manual reminder for one customer."""
    message: str
    vehicle_number: str
    last_service_date: datetime
    months_since_last_service: int
