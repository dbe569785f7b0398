"""
Pydantic schemas for User entity.
"""
from pydantic import BaseModel, EmailStr
from typing import Optional
from datetime import datetime
from tripboard.models.user import UserRole, UserStatus


class UserBase(BaseModel):
    """Base user schema."""
    email: EmailStr


class UserCreate(UserBase):
    """Schema for user creation."""
    password: str


class UserResponse(UserBase):
    """Schema for user response."""
    id: int
    role: UserRole
    status: UserStatus
    created_at: datetime

    class Config:
        from_attributes = True


class UserLogin(BaseModel):
    """Schema for user login."""
    email: EmailStr
    password: str


class Token(BaseModel):
    """Schema for JWT token response."""
    access_token: str
    token_type: str = "bearer"


class SignupResponse(BaseModel):
    """Signup result: a token for the bootstrap admin, a pending notice otherwise."""
    status: UserStatus
    message: str
    access_token: Optional[str] = None
    token_type: Optional[str] = None


class UserStatusUpdate(BaseModel):
    """Schema for admin status change."""
    status: UserStatus


class UserRoleUpdate(BaseModel):
    """Schema for admin role change."""
    role: UserRole
