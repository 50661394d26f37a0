"""
User model for database.
"""
from sqlalchemy import Column, Integer, String, Enum as SQLEnum
from garage.database import Base, TimestampMixin
import enum


class UserRole(str, enum.Enum):
    """User role enumeration."""
    ADMIN = "admin"
    MANAGER = "manager"
    STAFF = "staff"
    MECHANIC = "mechanic"
    USER = "user"


class User(TimestampMixin, Base):
    """User database model."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False, index=True)
    hashed_password = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    role = Column(
        SQLEnum(UserRole, values_callable=lambda e: [m.value for m in e]),
        default=UserRole.USER,
        nullable=False,
    )
    profile_picture = Column(String, nullable=True)
