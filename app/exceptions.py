"""
Custom exception classes and FastAPI exception handlers.

The service layer raises domain-specific errors without importing HTTP
concepts. The handlers registered here translate them into responses with
a consistent JSON body: {"detail": "...", "error_type": "..."}.

Exception hierarchy:
    ShopAPIError (base)
    ├── ConflictError              — 409, uniqueness / duplicate state
    │   ├── DuplicateEmailError
    │   ├── PendingRequestError
    │   └── SuperuserExistsError
    ├── NotFoundError              — 404, missing entity or wrong state
    │   ├── UserNotFoundError
    │   ├── UserRequestNotFoundError
    │   ├── ResendVerificationError
    │   └── CartNotFoundError
    └── BadRequestError            — 400, operation inapplicable to entity
        ├── UserAlreadyActiveError
        ├── InvalidRoleError
        └── CartNotEditableError

The error_type values are stable machine-readable codes; clients should
branch on them rather than on the human-readable detail.
"""

import uuid

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


# ---------------------------------------------------------------------------
# Base exceptions
# ---------------------------------------------------------------------------

class ShopAPIError(Exception):
    """Base exception for all Shop API domain errors."""

    error_type = "error"

    def __init__(self, detail: str = "An error occurred"):
        self.detail = detail
        super().__init__(self.detail)


class ConflictError(ShopAPIError):
    """The request collides with existing state (duplicates)."""

    error_type = "conflict"


class NotFoundError(ShopAPIError):
    """The entity does not exist, or is not in the state the operation needs."""

    error_type = "not_found"


class BadRequestError(ShopAPIError):
    """The entity exists but the operation cannot be applied to it."""

    error_type = "bad_request"


# ---------------------------------------------------------------------------
# Conflict
# ---------------------------------------------------------------------------

class DuplicateEmailError(ConflictError):
    """Raised when an email is already held by a user in any status."""

    error_type = "user_is_existed"

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"User with email {email} already exists")


class PendingRequestError(ConflictError):
    """Raised when an email already has an account request awaiting approval."""

    error_type = "email_has_been_requesting"

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"An account request for {email} is already pending")


class SuperuserExistsError(ConflictError):
    """Raised when a second user would get the SUPERUSER role."""

    error_type = "superuser_is_existed"

    def __init__(self):
        super().__init__("A superuser already exists")


# ---------------------------------------------------------------------------
# Not found
# ---------------------------------------------------------------------------

class UserNotFoundError(NotFoundError):
    error_type = "user_is_not_existed"

    def __init__(self, detail: str = "User does not exist"):
        super().__init__(detail)


class UserRequestNotFoundError(NotFoundError):
    """
    Raised by approval when no REQUEST-status user has the given id.

    Covers both "no such user" and "user is past the request stage".
    """

    error_type = "user_request_is_not_existed"

    def __init__(self, user_id: uuid.UUID):
        self.user_id = user_id
        super().__init__(f"No pending account request for user {user_id}")


class ResendVerificationError(NotFoundError):
    """Raised when no IN_ACTIVE user has the given id."""

    error_type = "resend_email_failed"

    def __init__(self, user_id: uuid.UUID):
        self.user_id = user_id
        super().__init__(f"Cannot resend verification for user {user_id}")


class CartNotFoundError(NotFoundError):
    error_type = "cart_is_not_existed"

    def __init__(self, cart_id: uuid.UUID):
        self.cart_id = cart_id
        super().__init__(f"Cart {cart_id} not found")


# ---------------------------------------------------------------------------
# Bad request
# ---------------------------------------------------------------------------

class UserAlreadyActiveError(BadRequestError):
    """Raised when activating an account that is already ACTIVE."""

    error_type = "user_is_activated"

    def __init__(self):
        super().__init__("User is already activated")


class InvalidRoleError(BadRequestError):
    error_type = "invalid_role"

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Unknown role: {value!r}")


class CartNotEditableError(BadRequestError):
    error_type = "cart_is_not_editable"

    def __init__(self, cart_id: uuid.UUID, status: str):
        self.cart_id = cart_id
        super().__init__(f"Cart {cart_id} is {status} and can no longer be edited")


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

def _error_response(status_code: int, exc: ShopAPIError) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.detail, "error_type": exc.error_type},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register custom exception handlers with the FastAPI application.

    One handler per error kind; the concrete subclass only changes the
    error_type in the body. This is called once during app startup in main.py.
    """

    @app.exception_handler(ConflictError)
    async def conflict_handler(request: Request, exc: ConflictError) -> JSONResponse:
        return _error_response(409, exc)

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
        return _error_response(404, exc)

    @app.exception_handler(BadRequestError)
    async def bad_request_handler(request: Request, exc: BadRequestError) -> JSONResponse:
        return _error_response(400, exc)
