"""
Service reminder routes.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import datetime, timezone

from garage.auth import require_feature
from garage.database import get_db
from garage.mailer import Mailer, get_mailer
from garage.models.user import User
from garage.permissions import CUSTOMER_SERVICE
from garage.reminders import send_service_reminders
from garage.schemas.reminder import ReminderRun

router = APIRouter(prefix="/reminders", tags=["reminders"])


@router.post("/run", response_model=ReminderRun)
async def run_reminders(
    db: AsyncSession = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
    current_user: User = Depends(require_feature(CUSTOMER_SERVICE)),
):
    """
    Run the service reminder job now instead of waiting for the schedule.
    """
    ran_at = datetime.now(timezone.utc)
    sent = await send_service_reminders(db, mailer, now=ran_at)
    return ReminderRun(sent=sent, ran_at=ran_at)
