"""
Periodic service reminders.

A job card whose intake date is at least ``reminder_months`` calendar months
old gets exactly one reminder email. ``JobCard.reminder_sent`` flips to True
only after a successful send, so cards whose customer has no email (or whose
send failed) are picked up again on the next run.
"""
import asyncio
import calendar
import logging
from datetime import datetime, timezone
from typing import Optional, Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from garage.branding import load_branding
from garage.config import get_settings
from garage.database import AsyncSessionLocal
from garage.exceptions import ExternalServiceError
from garage.mailer import REMINDER_SUBJECT, render_reminder_email
from garage.models.jobcard import JobCard

logger = logging.getLogger(__name__)

settings = get_settings()


class MailSender(Protocol):
    async def send(self, to: str, subject: str, html: str) -> None: ...


def months_before(moment: datetime, months: int) -> datetime:
    """
    Same wall-clock time ``months`` calendar months earlier.
    The day is clamped to the target month's length (31 May - 3 months = 28/29 Feb).
    """
    month_index = moment.year * 12 + (moment.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def months_between(earlier: datetime, later: datetime) -> int:
    """Whole calendar months from ``earlier`` to ``later``."""
    months = (later.year - earlier.year) * 12 + (later.month - earlier.month)
    if later.day < earlier.day:
        months -= 1
    return months


async def send_service_reminders(
    db: AsyncSession,
    mailer: MailSender,
    now: Optional[datetime] = None,
    months: Optional[int] = None,
) -> int:
    """Email every due customer once. Returns the number of reminders sent."""
    now = now or datetime.now(timezone.utc)
    cutoff = months_before(now, settings.reminder_months if months is None else months)

    result = await db.execute(
        select(JobCard)
        .where(JobCard.reminder_sent.is_(False), JobCard.job_in_date <= cutoff)
        .order_by(JobCard.job_in_date, JobCard.id)
    )
    due_jobs = result.scalars().all()
    if not due_jobs:
        return 0

    garage = await load_branding(db)
    sent = 0

    for job in due_jobs:
        customer = job.customer
        if customer is None or not customer.email:
            logger.debug("Job card %s skipped: customer has no email", job.id)
            continue

        html = render_reminder_email(
            name=customer.name,
            vehicle_number=job.vehicle_number,
            last_service_date=job.job_in_date,
            garage=garage,
        )
        try:
            await mailer.send(customer.email, REMINDER_SUBJECT, html)
        except ExternalServiceError as exc:
            logger.warning("Reminder for job card %s not sent: %s", job.id, exc.message)
            continue

        job.reminder_sent = True
        await db.commit()
        sent += 1

    logger.info("Service reminders sent: %d of %d due", sent, len(due_jobs))
    return sent


async def reminder_loop(mailer: MailSender, interval_hours: float) -> None:
    """Run the reminder job every ``interval_hours`` until cancelled."""
    while True:
        try:
            async with AsyncSessionLocal() as db:
                await send_service_reminders(db, mailer)
        except Exception:
            # one bad run must not stop the schedule
            logger.exception("Service reminder run failed")
        await asyncio.sleep(interval_hours * 3600)
