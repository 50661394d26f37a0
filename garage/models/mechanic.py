"""
Mechanic roster model.
"""
from sqlalchemy import Column, Integer, String
from garage.database import Base, TimestampMixin


class Mechanic(TimestampMixin, Base):
    """Mechanic database model."""

    __tablename__ = "mechanics"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    specialty = Column(String, nullable=False)
