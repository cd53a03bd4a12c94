"""Application exception classes and handlers."""

import structlog
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from evolve_support.schemas.response_schema import error_response

logger = structlog.get_logger()


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, code: str, status_code: int = 400) -> None:
        self.message = message
        self.code = code
        self.status_code = status_code
        super().__init__(message)


# --- Bad Request (400) ---


class MessageRequiredError(AppException):
    """Chatbot request without a message."""

    def __init__(self) -> None:
        super().__init__(
            message="Message is required",
            code="MESSAGE_REQUIRED",
            status_code=400,
        )


# --- Authentication (401) ---


class AuthenticationError(AppException):
    """Base authentication error."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message=message, code="AUTHENTICATION_ERROR", status_code=401)


class TokenExpiredError(AppException):
    """Token has expired."""

    def __init__(self) -> None:
        super().__init__(
            message="Token has expired",
            code="TOKEN_EXPIRED",
            status_code=401,
        )


class TokenBlacklistedError(AppException):
    """Token has been revoked."""

    def __init__(self) -> None:
        super().__init__(
            message="Token has been revoked",
            code="TOKEN_BLACKLISTED",
            status_code=401,
        )


class InvalidTokenError(AppException):
    """Token is invalid."""

    def __init__(self) -> None:
        super().__init__(
            message="Invalid token",
            code="INVALID_TOKEN",
            status_code=401,
        )


class InvalidOtpError(AppException):
    """One-time code is wrong, expired, or was never requested."""

    def __init__(self) -> None:
        super().__init__(
            message="Invalid or expired verification code",
            code="INVALID_OTP",
            status_code=401,
        )


# --- Authorization (403) ---


class AuthorizationError(AppException):
    """Insufficient permissions."""

    def __init__(self, message: str = "Insufficient permissions") -> None:
        super().__init__(message=message, code="AUTHORIZATION_ERROR", status_code=403)


# --- Not Found (404) ---


class UserNotFoundError(AppException):
    """User not found."""

    def __init__(self) -> None:
        super().__init__(
            message="User not found",
            code="USER_NOT_FOUND",
            status_code=404,
        )


class SessionNotFoundError(AppException):
    """Chat session does not exist or belongs to another user."""

    def __init__(self) -> None:
        super().__init__(
            message="Chat session not found",
            code="SESSION_NOT_FOUND",
            status_code=404,
        )


class QuestionNotFoundError(AppException):
    """Domain question not found."""

    def __init__(self) -> None:
        super().__init__(
            message="Domain question not found",
            code="QUESTION_NOT_FOUND",
            status_code=404,
        )


# --- Payload Too Large (413) ---


class FileTooLargeError(AppException):
    """Uploaded file exceeds the configured size limit."""

    def __init__(self, max_size_mb: int) -> None:
        super().__init__(
            message=f"File exceeds the {max_size_mb}MB limit",
            code="FILE_TOO_LARGE",
            status_code=413,
        )


# --- Rate Limit (429) ---


class AccountLockedError(AppException):
    """Too many failed verification attempts."""

    def __init__(self) -> None:
        super().__init__(
            message="Too many failed verification attempts. Please try again later.",
            code="ACCOUNT_LOCKED",
            status_code=429,
        )


# --- Server Error (500) ---


class ChatCompletionError(AppException):
    """The language model call did not succeed."""

    def __init__(self) -> None:
        super().__init__(
            message="Failed to get response from AI",
            code="CHAT_COMPLETION_FAILED",
            status_code=500,
        )


class UnexpectedError(AppException):
    """Generic server-side failure with no details exposed."""

    def __init__(self) -> None:
        super().__init__(
            message="An unexpected error occurred",
            code="INTERNAL_ERROR",
            status_code=500,
        )


# --- Exception Handlers ---


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Central exception handler for AppException."""
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(exc.status_code, exc.message, exc.code),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render request validation errors in the common error shape."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    detail = first.get("msg", "Invalid request")
    message = f"{location}: {detail}" if location else detail
    return JSONResponse(
        status_code=422,
        content=error_response(422, message, "VALIDATION_ERROR"),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler so clients always get a JSON error body."""
    logger.exception("Unhandled error", path=request.url.path)
    error = UnexpectedError()
    return JSONResponse(
        status_code=error.status_code,
        content=error_response(error.status_code, error.message, error.code),
    )
