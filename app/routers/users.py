"""
Users router — account lifecycle and the user directory.

Endpoints:
  GET    /users                           — Paginated, searchable directory
  GET    /users/{user_id}                 — One user (decorated view)
  POST   /users                           — Create a user directly (admin)
  POST   /users/request                   — Request an account (self-service)
  PATCH  /users/{user_id}/approve         — Approve a pending request
  POST   /users/{user_id}/resend-verification — Reissue the verification code
  POST   /users/activate                  — Set a password with a verification code
  PATCH  /users/{user_id}                 — Update name and/or role
  DELETE /users/{user_id}                 — Delete a user

Routes are thin: they map request bodies onto user_service calls and
service results onto response schemas. Domain errors are rendered by the
handlers in app.exceptions. Literal paths (/request, /activate) are
declared before /{user_id} so they are not captured by the path parameter.
"""

import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db
from app.schemas.pagination import PageOptions, SortField, SortOrder
from app.schemas.user import (
    ActivateUserRequest,
    CreateUserRequest,
    CreateUserResponse,
    MessageResponse,
    RequestUserRequest,
    UpdateUserRequest,
    UserPage,
    UserResponse,
)
from app.services import directory_service, user_service

router = APIRouter()


@router.get(
    "",
    response_model=UserPage,
    summary="List users",
)
async def list_users(
    page: int = Query(1, ge=1),
    take: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    order: SortOrder = Query(SortOrder.ASC),
    sort_by: SortField = Query(SortField.CREATED_AT),
    search: str = Query("", description="Substring of name or email, case-insensitive"),
    db: AsyncSession = Depends(get_db),
):
    """
    Page through users whose name or email contains `search`.

    `metadata.total` counts every match, not just this page.
    """
    page_options = PageOptions(
        page=page, take=take, order=order, sort_by=sort_by, search=search,
    )
    return await user_service.get_users(db, page_options)


@router.post(
    "",
    response_model=CreateUserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a user",
)
async def create_user(
    request: CreateUserRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Create a user without the request/approval step.

    - **role**: USER, MANAGER or SUPERUSER (case-insensitive)
    - **password**: optional; usually set later through activation

    The response includes the verification code for the caller to deliver.
    """
    user, verification_code = await user_service.create_user(
        db=db,
        name=request.name,
        email=request.email,
        role=user_service.parse_role(request.role),
        password=request.password,
    )
    view = directory_service.decorate(user)
    return CreateUserResponse(**view.model_dump(), verification_code=verification_code)


@router.post(
    "/request",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Request an account",
)
async def request_user(
    request: RequestUserRequest,
    db: AsyncSession = Depends(get_db),
):
    """Ask for an account. An administrator must approve it before activation."""
    await user_service.request_user(db=db, name=request.name, email=request.email)
    return MessageResponse(message="request_successfully")


@router.post(
    "/activate",
    response_model=MessageResponse,
    summary="Activate an account",
)
async def activate_user(
    request: ActivateUserRequest,
    db: AsyncSession = Depends(get_db),
):
    """Trade a verification code for a password. Works once per account."""
    await user_service.activate_user(
        db=db,
        verification_code=request.verification_code,
        new_password=request.password,
    )
    return MessageResponse(message="active_successfully")


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    summary="Get a user",
)
async def get_user(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    return await user_service.find_user_by_id(db, user_id)


@router.patch(
    "/{user_id}/approve",
    response_model=MessageResponse,
    summary="Approve an account request",
)
async def approve_user(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    """Move a pending request to IN_ACTIVE and issue its verification code."""
    await user_service.approve_user(db, user_id)
    return MessageResponse(message="user_is_approved")


@router.post(
    "/{user_id}/resend-verification",
    response_model=MessageResponse,
    summary="Resend the verification code",
)
async def resend_verification(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    await user_service.resend_verification(db, user_id)
    return MessageResponse(message="resend_verification_email_success")


@router.patch(
    "/{user_id}",
    response_model=UserResponse,
    summary="Update a user",
)
async def update_user(
    user_id: uuid.UUID,
    request: UpdateUserRequest,
    db: AsyncSession = Depends(get_db),
):
    """Change name and/or role. Status and email cannot be changed here."""
    role = user_service.parse_role(request.role) if request.role is not None else None
    user = await user_service.update_user(db, user_id, name=request.name, role=role)
    return directory_service.decorate(user)


@router.delete(
    "/{user_id}",
    response_model=MessageResponse,
    summary="Delete a user",
)
async def delete_user(
    user_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    """Permanently delete a user together with their carts."""
    await user_service.delete_user(db, user_id)
    return MessageResponse(message="Delete user successfully")
