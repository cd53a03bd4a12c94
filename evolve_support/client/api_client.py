"""httpx implementation of the persistence and chat completion gateways."""

from typing import Any

import httpx
import structlog

from evolve_support.client.errors import ApiError
from evolve_support.client.gateways import ChatCompletionGateway, PersistenceGateway
from evolve_support.client.messages import Attachment
from evolve_support.schemas.auth_schema import (
    LoginResponse,
    OtpRequestResponse,
    UserResponse,
)
from evolve_support.schemas.feedback_schema import FeedbackResponse
from evolve_support.schemas.file_schema import StoredFileResponse
from evolve_support.schemas.question_schema import DomainQuestionResponse
from evolve_support.schemas.session_schema import (
    MessageResponse,
    SessionDetailResponse,
    SessionListResponse,
    SessionResponse,
)

logger = structlog.get_logger()

ADMIN_QUESTIONS = "/api/v1/admin/domain-questions"


class SupportApiClient(PersistenceGateway, ChatCompletionGateway):
    """Talks to the support API over a caller-owned ``httpx.AsyncClient``."""

    def __init__(self, http: httpx.AsyncClient, access_token: str | None = None) -> None:
        self._http = http
        self._access_token = access_token

    @classmethod
    def from_base_url(
        cls, base_url: str, access_token: str | None = None
    ) -> "SupportApiClient":
        return cls(httpx.AsyncClient(base_url=base_url), access_token=access_token)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "SupportApiClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    @property
    def access_token(self) -> str | None:
        return self._access_token

    # --- Transport ---

    async def _send(self, method: str, path: str, **kwargs: Any) -> Any:
        headers = kwargs.pop("headers", {})
        if self._access_token:
            headers["Authorization"] = f"Bearer {self._access_token}"

        try:
            response = await self._http.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("Support API unreachable", method=method, path=path)
            raise ApiError(str(exc) or "Network error", "NETWORK_ERROR") from exc

        if response.is_success:
            return response.json()

        try:
            body = response.json()
        except ValueError:
            body = {}
        message = body.get("message") or response.reason_phrase or "Request failed"
        code = body.get("code") or "HTTP_ERROR"
        logger.warning(
            "Support API call failed",
            method=method,
            path=path,
            status=response.status_code,
            code=code,
        )
        raise ApiError(message, code, status=response.status_code)

    async def _data(self, method: str, path: str, **kwargs: Any) -> Any:
        """Unwrap the ``data`` member of the standard response envelope."""
        body = await self._send(method, path, **kwargs)
        return body.get("data")

    # --- Identity ---

    async def request_otp(self, phone: str) -> OtpRequestResponse:
        data = await self._data("POST", "/api/auth/otp/request", json={"phone": phone})
        return OtpRequestResponse.model_validate(data)

    async def verify_otp(self, phone: str, code: str) -> LoginResponse:
        """Sign in; later calls carry the issued access token."""
        data = await self._data(
            "POST", "/api/auth/otp/verify", json={"phone": phone, "code": code}
        )
        login = LoginResponse.model_validate(data)
        self._access_token = login.tokens.access_token
        return login

    async def sign_out(self) -> None:
        if self._access_token is None:
            return
        try:
            await self._data("POST", "/api/auth/logout", json={})
        finally:
            self._access_token = None

    async def current_user(self) -> UserResponse | None:
        if self._access_token is None:
            return None
        try:
            data = await self._data("GET", "/api/auth/me")
        except ApiError as exc:
            if exc.is_unauthorized:
                return None
            raise
        return UserResponse.model_validate(data)

    # --- Sessions and messages ---

    async def get_session(self, session_id: int) -> SessionDetailResponse | None:
        try:
            data = await self._data("GET", f"/api/v1/sessions/{session_id}")
        except ApiError as exc:
            if exc.is_not_found:
                return None
            raise
        return SessionDetailResponse.model_validate(data)

    async def list_sessions(
        self, cursor: str | None = None, limit: int = 20
    ) -> SessionListResponse:
        params: dict[str, Any] = {"limit": limit}
        if cursor is not None:
            params["cursor"] = cursor
        data = await self._data("GET", "/api/v1/sessions", params=params)
        return SessionListResponse.model_validate(data)

    async def create_session(self) -> SessionResponse:
        data = await self._data("POST", "/api/v1/sessions")
        return SessionResponse.model_validate(data)

    async def rename_session(self, session_id: int, title: str) -> SessionResponse:
        data = await self._data(
            "PATCH", f"/api/v1/sessions/{session_id}/title", json={"title": title}
        )
        return SessionResponse.model_validate(data)

    async def delete_session(self, session_id: int) -> None:
        await self._send("DELETE", f"/api/v1/sessions/{session_id}")

    async def append_message(
        self,
        session_id: int,
        content: str,
        is_user: bool,
        file_url: str | None = None,
        file_name: str | None = None,
    ) -> MessageResponse:
        data = await self._data(
            "POST",
            f"/api/v1/sessions/{session_id}/messages",
            json={
                "content": content,
                "is_user": is_user,
                "file_url": file_url,
                "file_name": file_name,
            },
        )
        return MessageResponse.model_validate(data)

    # --- Storage ---

    async def upload_file(self, attachment: Attachment) -> StoredFileResponse:
        content_type = attachment.content_type or "application/octet-stream"
        data = await self._data(
            "POST",
            "/api/v1/files",
            files={"file": (attachment.file_name, attachment.content, content_type)},
        )
        return StoredFileResponse.model_validate(data)

    # --- Feedback ---

    async def submit_feedback(
        self, original_question: str, chatbot_response: str, user_feedback: str
    ) -> FeedbackResponse:
        data = await self._data(
            "POST",
            "/api/v1/feedback",
            json={
                "original_question": original_question,
                "chatbot_response": chatbot_response,
                "user_feedback": user_feedback,
            },
        )
        return FeedbackResponse.model_validate(data)

    # --- Domain questions ---

    async def list_active_questions(self) -> list[DomainQuestionResponse]:
        data = await self._data("GET", "/api/v1/domain-questions")
        return [DomainQuestionResponse.model_validate(q) for q in data]

    async def list_all_questions(self) -> list[DomainQuestionResponse]:
        data = await self._data("GET", ADMIN_QUESTIONS)
        return [DomainQuestionResponse.model_validate(q) for q in data]

    async def create_question(
        self, question: str, category: str | None, is_active: bool
    ) -> DomainQuestionResponse:
        data = await self._data(
            "POST",
            ADMIN_QUESTIONS,
            json={"question": question, "category": category, "is_active": is_active},
        )
        return DomainQuestionResponse.model_validate(data)

    async def update_question(
        self, question_id: int, question: str, category: str | None, is_active: bool
    ) -> DomainQuestionResponse:
        data = await self._data(
            "PUT",
            f"{ADMIN_QUESTIONS}/{question_id}",
            json={"question": question, "category": category, "is_active": is_active},
        )
        return DomainQuestionResponse.model_validate(data)

    async def set_question_active(
        self, question_id: int, is_active: bool
    ) -> DomainQuestionResponse:
        data = await self._data(
            "PATCH",
            f"{ADMIN_QUESTIONS}/{question_id}/active",
            json={"is_active": is_active},
        )
        return DomainQuestionResponse.model_validate(data)

    async def delete_question(self, question_id: int) -> None:
        await self._send("DELETE", f"{ADMIN_QUESTIONS}/{question_id}")

    # --- Chat completion ---

    async def complete(
        self, message: str, has_file: bool = False, file_name: str | None = None
    ) -> str:
        body = await self._send(
            "POST",
            "/api/v1/chatbot",
            json={"message": message, "hasFile": has_file, "fileName": file_name},
        )
        reply = body.get("response") if isinstance(body, dict) else None
        if not isinstance(reply, str):
            raise ApiError("Malformed chatbot response", "BAD_RESPONSE")
        return reply
