"""
Customer routes, including the customer's vehicles and service history.
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import func, or_, select
from typing import List, Optional
from datetime import datetime, timezone

from garage.config import get_settings
from garage.database import get_db
from garage.models.bill import GstBill, NonGstBill
from garage.models.customer import Customer, Vehicle
from garage.models.jobcard import JobCard
from garage.models.user import User
from garage.schemas.customer import (
    Customer as CustomerSchema, CustomerCreate, CustomerDue, CustomerUpdate,
    ServiceHistory, ServiceHistoryEntry, VehicleUpdate,
)
from garage.auth import require_feature
from garage.branding import load_branding
from garage.crud import apply_update, ensure_unreferenced, get_or_404, require_fields
from garage.exceptions import ConflictError, ValidationError
from garage.mailer import MANUAL_REMINDER_SUBJECT, Mailer, get_mailer, render_manual_reminder_email
from garage.permissions import BILLING, BILLING_HISTORY, CUSTOMER_SERVICE, CUSTOMERS, JOBCARDS
from garage.reminders import months_before, months_between
from garage.schemas.base import as_utc
from garage.schemas.mail import ReminderSent

router = APIRouter(prefix="/customers", tags=["customers"])

settings = get_settings()


async def _vehicle_in_use(db: AsyncSession, vehicle_id: int) -> bool:
    for model in (GstBill, NonGstBill):
        if await db.scalar(select(model.id).where(model.vehicle_id == vehicle_id).limit(1)):
            return True
    return False


async def _replace_vehicles(db: AsyncSession, customer: Customer, vehicles: list[VehicleUpdate]) -> None:
    """
    Make ``customer.vehicles`` match ``vehicles``.
    Entries with an id update that vehicle, entries without one are added,
    and vehicles left out are removed unless a bill refers to them.
    """
    existing = {vehicle.id: vehicle for vehicle in customer.vehicles}
    keep: list[Vehicle] = []

    for index, incoming in enumerate(vehicles):
        data = incoming.model_dump(exclude={"id"})
        if incoming.id is None:
            keep.append(Vehicle(**data))
            continue
        vehicle = existing.get(incoming.id)
        if vehicle is None:
            raise ValidationError.for_field(
                f"vehicles.{index}.id", f"Vehicle {incoming.id} does not belong to this customer"
            )
        for field, value in data.items():
            setattr(vehicle, field, value)
        keep.append(vehicle)

    kept_ids = {vehicle.id for vehicle in keep if vehicle.id is not None}
    for vehicle_id in existing.keys() - kept_ids:
        if await _vehicle_in_use(db, vehicle_id):
            raise ConflictError(f"Vehicle {existing[vehicle_id].vehicle_number} is billed and cannot be removed")

    customer.vehicles = keep


@router.get("/", response_model=List[CustomerSchema])
async def get_customers(
    skip: int = 0,
    limit: int = 100,
    search: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(CUSTOMERS, JOBCARDS, BILLING)),
):
    """
    Get all customers with pagination, optionally matching name, mobile or vehicle number.
    """
    query = select(Customer).order_by(Customer.id)

    if search:
        pattern = f"%{search}%"
        query = query.where(or_(
            Customer.name.ilike(pattern),
            Customer.mobile.ilike(pattern),
            Customer.vehicles.any(Vehicle.vehicle_number.ilike(pattern)),
        ))

    result = await db.execute(query.offset(skip).limit(limit))
    return result.scalars().all()


@router.get("/due-for-service", response_model=List[CustomerDue])
async def get_customers_due_for_service(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(CUSTOMER_SERVICE)),
):
    """
    Customers whose most recent job card is old enough for a service reminder.
    """
    now = datetime.now(timezone.utc)
    cutoff = months_before(now, settings.reminder_months)

    latest = (
        select(JobCard.customer_id, func.max(JobCard.job_in_date).label("last_in"))
        .group_by(JobCard.customer_id)
        .subquery()
    )
    result = await db.execute(
        select(JobCard)
        .join(latest, (JobCard.customer_id == latest.c.customer_id) & (JobCard.job_in_date == latest.c.last_in))
        .where(JobCard.job_in_date <= cutoff)
        .order_by(JobCard.job_in_date)
    )

    due: dict[int, CustomerDue] = {}
    for job in result.scalars().all():
        if job.customer_id in due:
            continue
        due[job.customer_id] = CustomerDue(
            customer_id=job.customer_id,
            name=job.customer.name,
            email=job.customer.email,
            mobile=job.customer.mobile,
            vehicle_number=job.vehicle_number,
            last_service_date=job.job_in_date,
            months_since_last_service=months_between(as_utc(job.job_in_date), now),
        )

    return list(due.values())


@router.get("/with-jobcards", response_model=List[CustomerSchema])
async def get_customers_with_job_cards(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(CUSTOMER_SERVICE, JOBCARDS)),
):
    """
    Customers that have at least one job card.
    """
    has_job = select(JobCard.id).where(JobCard.customer_id == Customer.id).exists()
    result = await db.execute(select(Customer).where(has_job).order_by(Customer.id))
    return result.scalars().all()


@router.get("/{customer_id}", response_model=CustomerSchema)
async def get_customer(
    customer_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(CUSTOMERS, JOBCARDS, BILLING)),
):
    """
    Get a specific customer by ID.
    """
    return await get_or_404(db, Customer, customer_id, "Customer")


@router.get("/{customer_id}/service-history", response_model=ServiceHistory)
async def get_customer_service_history(
    customer_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(CUSTOMER_SERVICE, BILLING_HISTORY)),
):
    """
    Job cards and bills of a customer, newest first.
    """
    await get_or_404(db, Customer, customer_id, "Customer")

    jobs = (await db.execute(
        select(JobCard).where(JobCard.customer_id == customer_id).order_by(JobCard.job_in_date.desc())
    )).scalars().all()
    gst_bills = (await db.execute(
        select(GstBill).where(GstBill.customer_id == customer_id).order_by(GstBill.invoice_date.desc())
    )).scalars().all()
    non_gst_bills = (await db.execute(
        select(NonGstBill).where(NonGstBill.customer_id == customer_id).order_by(NonGstBill.invoice_date.desc())
    )).scalars().all()

    return ServiceHistory(
        job_cards=[
            ServiceHistoryEntry(
                id=job.id,
                date=job.job_in_date,
                type="Job Card",
                vehicle_number=job.vehicle_number,
                km_reading=job.km_in,
                services=[job.service_type.value],
            )
            for job in jobs
        ],
        gst_bills=[
            ServiceHistoryEntry(
                id=bill.id,
                date=bill.invoice_date,
                type="GST Bill",
                vehicle_number=bill.vehicle.vehicle_number if bill.vehicle else None,
                invoice_no=bill.invoice_no,
                services=[
                    f"{line.item.description} ({line.quantity} x {line.rate:g})"
                    for line in bill.items if line.item is not None
                ],
                total_amount=bill.total_amount,
                mechanic_charge=bill.mechanic_charge,
            )
            for bill in gst_bills
        ],
        non_gst_bills=[
            ServiceHistoryEntry(
                id=bill.id,
                date=bill.invoice_date,
                type="Non-GST Bill",
                vehicle_number=bill.vehicle.vehicle_number if bill.vehicle else None,
                invoice_no=bill.invoice_no,
                services=[item.description for item in bill.items],
                total_amount=bill.total_amount,
                mechanic_charge=bill.mechanic_charge,
            )
            for bill in non_gst_bills
        ],
    )


@router.post("/{customer_id}/send-reminder", response_model=ReminderSent)
async def send_customer_reminder(
    customer_id: int,
    db: AsyncSession = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
    current_user: User = Depends(require_feature(CUSTOMER_SERVICE)),
):
    """
    Email one customer a service reminder about their latest job card, now.
    The periodic job's ``reminderSent`` flag is left alone.
    """
    customer = await get_or_404(db, Customer, customer_id, "Customer")
    if not customer.email:
        raise ValidationError.for_field("email", "Customer has no email address")

    last_job = await db.scalar(
        select(JobCard)
        .where(JobCard.customer_id == customer_id)
        .order_by(JobCard.job_in_date.desc(), JobCard.id.desc())
        .limit(1)
    )
    if last_job is None:
        raise ValidationError("No service history found for this customer")

    months = months_between(as_utc(last_job.job_in_date), datetime.now(timezone.utc))
    html = render_manual_reminder_email(
        name=customer.name,
        vehicle_number=last_job.vehicle_number,
        last_service_date=last_job.job_in_date,
        km_in=last_job.km_in,
        months=months,
        garage=await load_branding(db),
    )
    await mailer.send(customer.email, MANUAL_REMINDER_SUBJECT, html)

    return ReminderSent(
        message="Service reminder email sent successfully",
        vehicle_number=last_job.vehicle_number,
        last_service_date=last_job.job_in_date,
        months_since_last_service=months,
    )


@router.post("/", response_model=CustomerSchema, status_code=status.HTTP_201_CREATED)
async def create_customer(
    customer: CustomerCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(CUSTOMERS, JOBCARDS, BILLING)),
):
    """
    Create a new customer together with their vehicles.
    """
    data = customer.model_dump(exclude={"vehicles"})
    db_customer = Customer(**data)
    db_customer.vehicles = [Vehicle(**vehicle.model_dump()) for vehicle in customer.vehicles]

    db.add(db_customer)
    await db.commit()
    await db.refresh(db_customer)

    return db_customer


@router.put("/{customer_id}", response_model=CustomerSchema)
async def update_customer(
    customer_id: int,
    customer_update: CustomerUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(CUSTOMERS)),
):
    """
    Update a customer. When ``vehicles`` is sent it replaces the vehicle list.
    """
    db_customer = await get_or_404(db, Customer, customer_id, "Customer")

    require_fields(customer_update, "name", "mobile")
    apply_update(db_customer, customer_update, exclude={"vehicles"})

    if customer_update.vehicles is not None:
        await _replace_vehicles(db, db_customer, customer_update.vehicles)

    await db.commit()
    await db.refresh(db_customer)

    return db_customer


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_customer(
    customer_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_feature(CUSTOMERS)),
):
    """
    Delete a customer. Customers with job cards or bills cannot be deleted.
    """
    db_customer = await get_or_404(db, Customer, customer_id, "Customer")

    message = "Customer has job cards or bills and cannot be deleted"
    await ensure_unreferenced(db, JobCard, JobCard.customer_id, customer_id, message)
    await ensure_unreferenced(db, GstBill, GstBill.customer_id, customer_id, message)
    await ensure_unreferenced(db, NonGstBill, NonGstBill.customer_id, customer_id, message)

    await db.delete(db_customer)
    await db.commit()

    return None
