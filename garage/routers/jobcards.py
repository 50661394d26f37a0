"""
Job card routes.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import List, Optional

from garage.database import get_db
from garage.models.customer import Customer
from garage.models.jobcard import JobCard, JobStatus
from garage.models.user import User, UserRole
from garage.schemas.jobcard import JobCard as JobCardSchema, JobCardCreate, JobCardUpdate, JobStatusUpdate
from garage.schemas.base import as_utc
from garage.auth import require_feature
from garage.crud import apply_update, get_or_404, require_fields
from garage.exceptions import NotFoundError, ValidationError
from garage.permissions import JOBCARDS

router = APIRouter(prefix="/jobcards", tags=["jobcards"])


async def _check_references(db: AsyncSession, customer_id: Optional[int], mechanic_id: Optional[int]) -> None:
    if customer_id is not None:
        await get_or_404(db, Customer, customer_id, "Customer")
    if mechanic_id is not None:
        mechanic = await get_or_404(db, User, mechanic_id, "Mechanic")
        if mechanic.role != UserRole.MECHANIC:
            raise ValidationError.for_field("assignedMechanicId", "Assigned user is not a mechanic")


@router.get("/", response_model=List[JobCardSchema])
async def get_job_cards(
    skip: int = 0,
    limit: int = 100,
    status_filter: Optional[JobStatus] = None,
    customer_id: Optional[int] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(JOBCARDS)),
):
    """
    Get all job cards, newest first, with optional status and customer filters.
    Mechanics only see the cards assigned to them.
    """
    query = select(JobCard).order_by(JobCard.created_at.desc(), JobCard.id.desc())

    if status_filter:
        query = query.where(JobCard.status == status_filter)
    if customer_id is not None:
        query = query.where(JobCard.customer_id == customer_id)
    if current_user.role == UserRole.MECHANIC:
        query = query.where(JobCard.assigned_mechanic_id == current_user.id)

    result = await db.execute(query.offset(skip).limit(limit))
    return result.scalars().all()


@router.get("/by-vehicle/{vehicle_number}", response_model=JobCardSchema)
async def get_job_card_by_vehicle(
    vehicle_number: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(JOBCARDS)),
):
    """
    Most recent job card for a vehicle that is not yet closed.
    """
    result = await db.execute(
        select(JobCard)
        .where(JobCard.vehicle_number == vehicle_number, JobCard.status != JobStatus.CLOSED)
        .order_by(JobCard.created_at.desc(), JobCard.id.desc())
        .limit(1)
    )
    job_card = result.scalar_one_or_none()

    if not job_card:
        raise NotFoundError("No active job card found for this vehicle")

    return job_card


@router.get("/{job_card_id}", response_model=JobCardSchema)
async def get_job_card(
    job_card_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(JOBCARDS)),
):
    """
    Get a specific job card by ID.
    """
    return await get_or_404(db, JobCard, job_card_id, "JobCard")


@router.post("/", response_model=JobCardSchema, status_code=status.HTTP_201_CREATED)
async def create_job_card(
    job_card: JobCardCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(JOBCARDS)),
):
    """
    Open a job card for a customer's vehicle.
    """
    await _check_references(db, job_card.customer_id, job_card.assigned_mechanic_id)

    db_job_card = JobCard(**job_card.model_dump(), reminder_sent=False)
    db.add(db_job_card)
    await db.commit()
    await db.refresh(db_job_card)

    return db_job_card


@router.put("/{job_card_id}", response_model=JobCardSchema)
async def update_job_card(
    job_card_id: int,
    job_card_update: JobCardUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(JOBCARDS)),
):
    """
    Update a job card.
    """
    db_job_card = await get_or_404(db, JobCard, job_card_id, "JobCard")
    require_fields(
        job_card_update, "customer_id", "vehicle_number", "job_in_date", "estimated_delivery",
        "service_type", "status", "assigned_mechanic_id", "km_in",
    )
    await _check_references(db, job_card_update.customer_id, job_card_update.assigned_mechanic_id)

    apply_update(db_job_card, job_card_update)
    if as_utc(db_job_card.estimated_delivery) < as_utc(db_job_card.job_in_date):
        raise ValidationError.for_field("estimatedDelivery", "estimatedDelivery must not be before jobInDate")

    await db.commit()
    await db.refresh(db_job_card)

    return db_job_card


@router.patch("/{job_card_id}/status", response_model=JobCardSchema)
async def update_job_card_status(
    job_card_id: int,
    payload: JobStatusUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(JOBCARDS)),
):
    """
    Move a job card to a new status.
    """
    db_job_card = await get_or_404(db, JobCard, job_card_id, "JobCard")

    db_job_card.status = payload.status
    await db.commit()
    await db.refresh(db_job_card)

    return db_job_card


@router.delete("/{job_card_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_job_card(
    job_card_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(JOBCARDS)),
):
    """
    Delete a job card.
    """
    db_job_card = await get_or_404(db, JobCard, job_card_id, "JobCard")

    await db.delete(db_job_card)
    await db.commit()

    return None
