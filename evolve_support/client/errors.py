"""Failure conditions raised or reported by the chat client components."""


class ClientError(Exception):
    """Base client-side failure.

    ``redirect`` names the route a UI should navigate to, when the failure
    means the current screen cannot be shown at all.
    """

    redirect: str | None = None

    def __init__(self, message: str, code: str) -> None:
        self.message = message
        self.code = code
        super().__init__(message)


class ValidationFailed(ClientError):
    """Local input check failed. No network call was made."""

    def __init__(self, message: str) -> None:
        super().__init__(message=message, code="VALIDATION_FAILED")


class UploadFailed(ClientError):
    """Attachment upload failed; the send was aborted."""

    def __init__(self, message: str = "Failed to upload file. Please try again.") -> None:
        super().__init__(message=message, code="UPLOAD_FAILED")


class PersistenceFailed(ClientError):
    """A row could not be written to or removed from the backend."""

    def __init__(self, message: str) -> None:
        super().__init__(message=message, code="PERSISTENCE_FAILED")


class GatewayFailed(ClientError):
    """The chat completion call did not succeed."""

    def __init__(
        self, message: str = "Failed to get response. Please try again."
    ) -> None:
        super().__init__(message=message, code="GATEWAY_FAILED")


class AuthRequired(ClientError):
    """No user is signed in."""

    redirect = "/"

    def __init__(self, message: str = "Please sign in to continue") -> None:
        super().__init__(message=message, code="AUTH_REQUIRED")


class NotFound(ClientError):
    """The session does not exist or belongs to someone else."""

    redirect = "/chat-history"

    def __init__(self, message: str = "Chat session not found") -> None:
        super().__init__(message=message, code="NOT_FOUND")


class ApiError(ClientError):
    """Non-success answer (or transport failure) from the support API."""

    def __init__(self, message: str, code: str, status: int | None = None) -> None:
        self.status = status
        super().__init__(message=message, code=code)

    @property
    def is_not_found(self) -> bool:
        return self.status == 404

    @property
    def is_unauthorized(self) -> bool:
        return self.status == 401
