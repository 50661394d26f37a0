"""
Permission and role-permission models.
"""
from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from garage.database import Base, TimestampMixin


class Permission(TimestampMixin, Base):
    """Permission database model."""

    __tablename__ = "permissions"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    description = Column(String, nullable=True)


class RolePermission(TimestampMixin, Base):
    """Links a user role to a permission."""

    __tablename__ = "role_permissions"
    __table_args__ = (UniqueConstraint("role", "permission_id", name="uq_role_permission"),)

    id = Column(Integer, primary_key=True, index=True)
    role = Column(String, nullable=False, index=True)
    permission_id = Column(Integer, ForeignKey("permissions.id", ondelete="CASCADE"), nullable=False)

    # Relationships
    permission = relationship("Permission", lazy="selectin")
