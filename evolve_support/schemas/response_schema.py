"""Response envelopes shared by every JSON endpoint except the chatbot reply."""

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope: ``{status, message, data}``."""

    status: int = 200
    message: str = "Success"
    data: T | None = None


class ErrorResponse(BaseModel):
    """Failure envelope: ``{status, message, code}``; ``code`` is a stable machine key."""

    status: int
    message: str
    code: str


def success_response(data: T, status: int = 200, message: str = "Success") -> dict:
    return {"status": status, "message": message, "data": data}


def error_response(status: int, message: str, code: str) -> dict:
    """Used by the exception handlers, the auth middleware and the rate limiter."""
    return ErrorResponse(status=status, message=message, code=code).model_dump()
