"""
Pydantic schemas for User requests and responses.

Roles arrive as free-form strings and are mapped onto UserRole by the
service layer, which rejects unknown names with a 400. hashed_password and
verification_code are NEVER part of UserResponse.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from app.models.user import UserRole, UserStatus
from app.schemas.pagination import PageMetadata


class CreateUserRequest(BaseModel):
    """Request body for POST /users (administrative creation)."""
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    role: str = Field(min_length=1, description="USER, MANAGER or SUPERUSER")
    password: str | None = Field(default=None, min_length=8)


class RequestUserRequest(BaseModel):
    """Request body for POST /users/request (self-service signup)."""
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr


class UpdateUserRequest(BaseModel):
    """Request body for PATCH /users/{id}. Omitted fields are left unchanged."""
    name: str | None = Field(default=None, min_length=1, max_length=255)
    role: str | None = Field(default=None, min_length=1)


class ActivateUserRequest(BaseModel):
    """Request body for POST /users/activate."""
    verification_code: str = Field(min_length=1)
    password: str = Field(min_length=8)


class UserResponse(BaseModel):
    """
    Public representation of a User.

    is_manager / is_superuser are derived from role when the row is read;
    they are never stored.
    """
    id: uuid.UUID
    email: str
    name: str
    role: UserRole
    status: UserStatus
    is_manager: bool = False
    is_superuser: bool = False
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class CreateUserResponse(UserResponse):
    """
    Response for POST /users.

    Carries the verification code because delivery is the caller's job.
    """
    verification_code: str


class UserPage(BaseModel):
    """One page of the user directory."""
    data: list[UserResponse]
    metadata: PageMetadata


class MessageResponse(BaseModel):
    """Plain acknowledgement for operations that return no entity."""
    message: str
