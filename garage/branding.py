"""
The garage's letterhead as used in outgoing mail and printed invoices.
"""
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from garage.config import get_settings
from garage.models.garage_profile import GarageProfile


@dataclass(frozen=True)
class Branding:
    name: str
    email: str = ""
    phone: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    gst_number: str = ""
    footer: str = ""

    @property
    def locality(self) -> str:
        """``City, State - ZIP`` with missing parts left out."""
        place = ", ".join(part for part in (self.city, self.state) if part)
        if self.zip_code:
            return f"{place} - {self.zip_code}" if place else self.zip_code
        return place


async def load_branding(db: AsyncSession) -> Branding:
    """Letterhead from the garage profile, or just the app name before one exists."""
    profile = await db.scalar(select(GarageProfile).order_by(GarageProfile.id).limit(1))
    if profile is None:
        return Branding(name=get_settings().app_name)

    return Branding(
        name=profile.garage_name,
        email=profile.email or "",
        phone=profile.phone or "",
        address=profile.address or "",
        city=profile.city or "",
        state=profile.state or "",
        zip_code=profile.zip_code or "",
        gst_number=profile.gst_number or "",
        footer=profile.footer_message or "",
    )
