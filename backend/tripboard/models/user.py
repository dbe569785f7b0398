"""
User model for authentication and user management.
"""
from sqlalchemy import Column, String, Enum as SQLEnum
from sqlalchemy.orm import relationship
from tripboard.db.base import BaseModel
import enum


class UserRole(str, enum.Enum):
    """Global user role."""
    ADMIN = "admin"
    MANAGER = "manager"
    MEMBER = "member"
    VIEW_ONLY = "view_only"


class UserStatus(str, enum.Enum):
    """Account approval status."""
    PENDING = "pending"
    ACTIVE = "active"
    REJECTED = "rejected"


class User(BaseModel):
    """User model identified by a unique email."""
    __tablename__ = "users"

    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    role = Column(SQLEnum(UserRole), default=UserRole.MEMBER, nullable=False)
    status = Column(SQLEnum(UserStatus), default=UserStatus.PENDING, nullable=False)

    # Relationships
    trips = relationship("Trip", back_populates="owner", passive_deletes=True)
    shares = relationship("TripShare", back_populates="user", passive_deletes=True)

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE
