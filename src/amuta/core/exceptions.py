"""Application errors and exception handlers with request_id in responses.

Every domain failure is an ``AppError`` subclass carrying a stable ``code`` and
HTTP status. Route handlers let them propagate; the handlers below render them
as ``{"error", "detail", "request_id"}``.
"""

from typing import Any, ClassVar

from asgi_correlation_id import correlation_id
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.amuta.core.logging import get_logger

logger = get_logger(__name__)


class AppError(Exception):
    """Base class for errors that map to a stable code and HTTP status."""

    code: ClassVar[str] = "SERVER_ERROR"
    status_code: ClassVar[int] = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: ClassVar[str] = "Server error"

    def __init__(self, message: str | None = None, **extra: Any):
        self.message = message or self.default_message
        self.extra = extra
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.code, "detail": self.message, **self.extra}


# --- 401 ---


class AuthRequired(AppError):
    code = "AUTH_REQUIRED"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "User must be logged in"


class Unauthorized(AppError):
    code = "UNAUTHORIZED"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class InvalidCredentials(AppError):
    code = "INVALID_CREDENTIALS"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid email or password"


class InvalidToken(AppError):
    code = "INVALID_TOKEN"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid or expired token"


# --- 403 ---


class PermissionDenied(AppError):
    code = "PERMISSION_DENIED"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You do not have permission to perform this action"


class EmailMismatch(AppError):
    code = "EMAIL_MISMATCH"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You must sign in with the email this invite was sent to"


class OrganizationNotSelected(AppError):
    code = "NO_ORG_SELECTED"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "No organization selected"


class OrganizationInactive(AppError):
    code = "ORG_INACTIVE"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Organization is inactive"


class OrganizationUnavailable(AppError):
    code = "ORG_NOT_FOUND"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Selected organization was not found"


class NoRoleForOrganization(AppError):
    code = "NO_ROLE_FOR_ORG"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You do not have a role in this organization"


class RoleSuspended(AppError):
    code = "ROLE_SUSPENDED"
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Your role in this organization is suspended"


# --- 404 ---


class InviteNotFound(AppError):
    code = "INVITE_NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Invite not found"


class OrganizationNotFound(AppError):
    code = "ORGANIZATION_NOT_FOUND"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Organization not found"


# --- 409 ---


class DuplicateActiveInvite(AppError):
    code = "INVITE_ALREADY_ACTIVE"
    status_code = status.HTTP_409_CONFLICT
    default_message = "An active invitation already exists for this user and organization"


class AlreadyMember(AppError):
    code = "ALREADY_MEMBER"
    status_code = status.HTTP_409_CONFLICT
    default_message = "User already has a role in this organization"


class AccountAlreadyActive(AppError):
    code = "ACCOUNT_ALREADY_ACTIVE"
    status_code = status.HTTP_409_CONFLICT
    default_message = "An account already exists for this email. Sign in to accept the invite."


# --- 410 ---


class InviteCancelled(AppError):
    code = "INVITE_CANCELLED"
    status_code = status.HTTP_410_GONE
    default_message = "Invite was cancelled"


class InviteAlreadyAccepted(AppError):
    code = "INVITE_ALREADY_ACCEPTED"
    status_code = status.HTTP_410_GONE
    default_message = "Invite was already accepted"


class InviteExpired(AppError):
    code = "INVITE_EXPIRED"
    status_code = status.HTTP_410_GONE
    default_message = "Invite expired"


# --- 500 ---


class RoleAssignFailed(AppError):
    code = "ROLE_ASSIGN_FAILED"
    default_message = "Failed to assign role"


class MailSendFailed(AppError):
    code = "MAIL_SEND_FAILED"
    default_message = "Failed to send invite email"


class ProvisioningFailed(AppError):
    code = "PROVISIONING_FAILED"
    default_message = "Failed to create user account"


def setup_exception_handlers(app: FastAPI) -> None:
    """Configure exception handlers that include request_id in responses."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(
                "Request failed",
                error=exc.code,
                detail=exc.message,
                path=request.url.path,
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={**exc.to_dict(), "request_id": correlation_id.get()},
        )

    @app.exception_handler(StarletteHTTPException)
    async def starlette_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "detail": exc.detail,
                "request_id": correlation_id.get(),
            },
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "detail": exc.detail,
                "request_id": correlation_id.get(),
            },
            headers=exc.headers,
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        request_id = correlation_id.get()
        logger.exception(
            "Unhandled exception",
            exc_info=exc,
            request_id=request_id,
            path=request.url.path,
        )
        return JSONResponse(
            status_code=500,
            content={
                "detail": "Internal server error",
                "request_id": request_id,
            },
        )
