"""
User models for authentication and authorization.
"""
from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime
from enum import Enum


class UserRole(str, Enum):
    """User roles in the system."""
    USER = "user"
    ADMIN = "admin"
    MODERATOR = "moderator"
    SUPERADMIN = "superadmin"


# Roles allowed into the admin dashboard
ADMIN_ROLES = {UserRole.ADMIN.value, UserRole.MODERATOR.value, UserRole.SUPERADMIN.value}

# Roles an admin may assign through the dashboard
ASSIGNABLE_ROLES = {UserRole.USER.value, UserRole.ADMIN.value}


class UserBase(BaseModel):
    """Base user model."""
    email: EmailStr
    name: str = Field(..., min_length=1, max_length=100)


class UserCreate(UserBase):
    """Model for creating a new user."""
    password: str = Field(..., min_length=8)


class UserResponse(UserBase):
    """User model for API responses (no password)."""
    id: str
    role: str
    created_at: Optional[datetime] = None

    class Config:
        populate_by_name = True


class User(UserBase):
    """User model for internal use."""
    id: str
    role: str = UserRole.USER.value

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES


class RoleUpdate(BaseModel):
    role: str


class Token(BaseModel):
    """JWT Token model."""
    access_token: str
    token_type: str = "bearer"


class TokenData(BaseModel):
    """Verified identity carried by an access token."""
    user_id: str
    email: Optional[str] = None
    role: Optional[str] = None


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ForgotPasswordResponse(BaseModel):
    message: str
    reset_token: Optional[str] = None  # only exposed in development


class ResetPasswordRequest(BaseModel):
    email: EmailStr
    token: str
    new_password: str = Field(..., min_length=8)
