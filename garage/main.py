"""
Main FastAPI application entry point.
"""
import asyncio
import logging
from contextlib import asynccontextmanager, suppress
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from garage.config import get_settings
from garage.database import init_db
from garage.exceptions import register_exception_handlers
from garage.mailer import get_mailer
from garage.reminders import reminder_loop
from garage.routers import (
    auth, customers, expense_categories, expenses, garage_profile, gst_bills,
    items, jobcards, mail, mechanics, non_gst_bills, permissions, reminders, users,
)

settings = get_settings()

logger = logging.getLogger("garage")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan events for the application.
    Handles startup and shutdown events.
    """
    # Startup
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Starting %s %s", settings.app_name, settings.app_version)
    await init_db()
    logger.info("Database initialized, API available at %s", settings.api_v1_prefix)

    reminder_task = None
    if settings.reminder_enabled:
        reminder_task = asyncio.create_task(
            reminder_loop(get_mailer(), settings.reminder_interval_hours)
        )
        logger.info("Service reminders scheduled every %s hours", settings.reminder_interval_hours)

    yield

    # Shutdown
    if reminder_task is not None:
        reminder_task.cancel()
        with suppress(asyncio.CancelledError):
            await reminder_task
    logger.info("Shutting down %s", settings.app_name)


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    ## Garage Service Manager API

    Back office for an automobile service garage.

    ### Entities:
    * **Customers**: Customers and their vehicles
    * **Job Cards**: Work orders for vehicles brought in for service
    * **Items**: Billable parts and labour
    * **Bills**: GST and non-GST invoices
    * **Expenses**: Garage expenses and expense categories
    * **Users**: Staff accounts, roles and permissions
    * **Reminders**: Periodic service reminder emails
    * **Mail**: Offers and messages to customers
    """,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include routers
for module in (
    auth, customers, jobcards, mechanics, items, gst_bills, non_gst_bills,
    expenses, expense_categories, users, garage_profile, permissions, reminders, mail,
):
    app.include_router(module.router, prefix=settings.api_v1_prefix)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": f"Welcome to {settings.app_name} API",
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": settings.app_version,
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "garage.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
