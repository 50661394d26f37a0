"""
Pydantic schemas for the service reminder job.
"""
from datetime import datetime

from garage.schemas.base import CamelModel


class ReminderRun(CamelModel):
    """Result of one reminder job run."""
    sent: int
    ran_at: datetime
