"""
Pydantic schemas for User and Authentication.
"""
import re

from pydantic import BaseModel, EmailStr, Field, field_validator
from datetime import datetime
from typing import Optional

from garage.models.user import UserRole
from garage.schemas.base import CamelModel, ORMModel


def validate_password(password: str) -> str:
    """Validate password strength."""
    if len(password) < 8:
        raise ValueError("Password must be at least 8 characters long")
    if not re.search(r"[A-Z]", password):
        raise ValueError("Password must contain at least one uppercase letter")
    if not re.search(r"[a-z]", password):
        raise ValueError("Password must contain at least one lowercase letter")
    if not re.search(r"\d", password):
        raise ValueError("Password must contain at least one number")
    return password


class UserBase(CamelModel):
    """Base user schema with common fields."""
    full_name: str = Field(min_length=1)
    email: EmailStr
    phone: Optional[str] = None
    role: UserRole = UserRole.USER


class UserCreate(UserBase):
    """Schema for creating a user."""
    password: str

    @field_validator("password")
    @classmethod
    def strong_password(cls, value: str) -> str:
        return validate_password(value)


class UserUpdate(CamelModel):
    """Schema for an admin updating a user."""
    full_name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    role: Optional[UserRole] = None
    password: Optional[str] = None

    @field_validator("password")
    @classmethod
    def strong_password(cls, value: Optional[str]) -> Optional[str]:
        return validate_password(value) if value is not None else value


class ProfileUpdate(CamelModel):
    """Schema for users editing their own profile."""
    full_name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    profile_picture: Optional[str] = None


class PasswordChange(CamelModel):
    """Schema for changing one's own password."""
    current_password: str
    new_password: str

    @field_validator("new_password")
    @classmethod
    def strong_password(cls, value: str) -> str:
        return validate_password(value)


class User(UserBase, ORMModel):
    """Schema for user responses. Never carries the password hash."""
    id: int
    profile_picture: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UserSummary(ORMModel):
    """User reference expanded inside job cards."""
    id: int
    full_name: str
    role: UserRole


class Token(BaseModel):
    """Schema for authentication token."""
    access_token: str
    token_type: str
    user: User


class TokenData(BaseModel):
    """Claims carried by an access token."""
    user_id: int
    role: UserRole


class LoginRequest(BaseModel):
    """Schema for login request."""
    email: EmailStr
    password: str


class AccessList(CamelModel):
    """Features the caller's role may use."""
    role: UserRole
    features: list[str]
