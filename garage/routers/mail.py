"""
Ad-hoc customer mail: single messages, offers and bulk offers.
"""
import asyncio
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from garage.auth import require_feature
from garage.branding import load_branding
from garage.config import get_settings
from garage.database import get_db
from garage.exceptions import ExternalServiceError, NotFoundError
from garage.mailer import Mailer, get_mailer, offer_subject, render_message_email, render_offer_email
from garage.models.customer import Customer
from garage.models.user import User
from garage.permissions import CUSTOMER_SERVICE
from garage.schemas.mail import BulkOffer, BulkOfferResult, BulkOfferSummary, MailMessage, MailSent, OfferMail

router = APIRouter(prefix="/mail", tags=["mail"])

settings = get_settings()

logger = logging.getLogger(__name__)


@router.post("/send", response_model=MailSent)
async def send_message(
    payload: MailMessage,
    db: AsyncSession = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
    current_user: User = Depends(require_feature(CUSTOMER_SERVICE)),
):
    """
    Send a free-form message under the garage's letterhead.
    """
    garage = await load_branding(db)
    await mailer.send(payload.to, payload.subject, render_message_email(payload.subject, payload.text, garage))
    return MailSent(message="Email sent successfully")


@router.post("/send-offer", response_model=MailSent)
async def send_offer(
    payload: OfferMail,
    db: AsyncSession = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
    current_user: User = Depends(require_feature(CUSTOMER_SERVICE)),
):
    garage = await load_branding(db)
    html = render_offer_email(payload.customer_name, payload.offer_details, garage)
    await mailer.send(payload.to, offer_subject(garage), html)
    return MailSent(message="Offer sent successfully")


@router.post("/send-bulk-offer", response_model=BulkOfferResult)
async def send_bulk_offer(
    payload: BulkOffer,
    db: AsyncSession = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
    current_user: User = Depends(require_feature(CUSTOMER_SERVICE)),
):
    """
    Send an offer to every customer with an email address.

    Mail goes out in batches of ``mail_batch_size`` with ``mail_batch_delay``
    seconds between batches. A failed recipient is counted and skipped.
    """
    result = await db.execute(
        select(Customer).where(Customer.email.is_not(None), Customer.email != "").order_by(Customer.id)
    )
    customers = result.scalars().all()
    if not customers:
        raise NotFoundError("No customers with email addresses found")

    garage = await load_branding(db)
    subject = offer_subject(garage)
    batch_size = max(settings.mail_batch_size, 1)
    failed: list[str] = []

    for start in range(0, len(customers), batch_size):
        if start:
            await asyncio.sleep(settings.mail_batch_delay)
        for customer in customers[start:start + batch_size]:
            html = render_offer_email(customer.name, payload.offer_details, garage)
            try:
                await mailer.send(customer.email, subject, html)
            except ExternalServiceError as exc:
                logger.warning("Offer to customer %s not sent: %s", customer.id, exc.message)
                failed.append(customer.email)

    logger.info("Bulk offer sent to %d of %d customers", len(customers) - len(failed), len(customers))
    return BulkOfferResult(
        message="Offer sending completed",
        summary=BulkOfferSummary(
            total_customers=len(customers),
            success_count=len(customers) - len(failed),
            failure_count=len(failed),
            failed_emails=failed,
        ),
    )
