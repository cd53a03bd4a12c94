"""Collaborator interfaces the client components are written against.

Every method raises :class:`~evolve_support.client.errors.ApiError` when the
backend refuses the call or cannot be reached.
"""

from abc import ABC, abstractmethod

from evolve_support.client.messages import Attachment
from evolve_support.schemas.auth_schema import UserResponse
from evolve_support.schemas.feedback_schema import FeedbackResponse
from evolve_support.schemas.file_schema import StoredFileResponse
from evolve_support.schemas.question_schema import DomainQuestionResponse
from evolve_support.schemas.session_schema import (
    MessageResponse,
    SessionDetailResponse,
    SessionListResponse,
    SessionResponse,
)


class PersistenceGateway(ABC):
    """Durable rows, object storage and identity lookup."""

    @abstractmethod
    async def current_user(self) -> UserResponse | None:
        """The signed-in user, or None when nobody is."""

    # --- Sessions and messages ---

    @abstractmethod
    async def get_session(self, session_id: int) -> SessionDetailResponse | None:
        """A session with its messages, or None when absent or not owned."""

    @abstractmethod
    async def list_sessions(
        self, cursor: str | None = None, limit: int = 20
    ) -> SessionListResponse:
        pass

    @abstractmethod
    async def create_session(self) -> SessionResponse:
        pass

    @abstractmethod
    async def rename_session(self, session_id: int, title: str) -> SessionResponse:
        pass

    @abstractmethod
    async def delete_session(self, session_id: int) -> None:
        pass

    @abstractmethod
    async def append_message(
        self,
        session_id: int,
        content: str,
        is_user: bool,
        file_url: str | None = None,
        file_name: str | None = None,
    ) -> MessageResponse:
        """Insert a message and bump the session's last-activity time."""

    # --- Storage ---

    @abstractmethod
    async def upload_file(self, attachment: Attachment) -> StoredFileResponse:
        pass

    # --- Feedback ---

    @abstractmethod
    async def submit_feedback(
        self, original_question: str, chatbot_response: str, user_feedback: str
    ) -> FeedbackResponse:
        pass

    # --- Domain questions ---

    @abstractmethod
    async def list_active_questions(self) -> list[DomainQuestionResponse]:
        pass

    @abstractmethod
    async def list_all_questions(self) -> list[DomainQuestionResponse]:
        pass

    @abstractmethod
    async def create_question(
        self, question: str, category: str | None, is_active: bool
    ) -> DomainQuestionResponse:
        pass

    @abstractmethod
    async def update_question(
        self, question_id: int, question: str, category: str | None, is_active: bool
    ) -> DomainQuestionResponse:
        pass

    @abstractmethod
    async def set_question_active(
        self, question_id: int, is_active: bool
    ) -> DomainQuestionResponse:
        pass

    @abstractmethod
    async def delete_question(self, question_id: int) -> None:
        pass


class ChatCompletionGateway(ABC):
    """Stateless message-in, text-out assistant."""

    @abstractmethod
    async def complete(
        self, message: str, has_file: bool = False, file_name: str | None = None
    ) -> str:
        pass
