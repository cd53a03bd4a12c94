"""Global dependencies for the application."""

from collections.abc import Callable
from functools import lru_cache

from fastapi import Depends, Request
from langchain_anthropic import ChatAnthropic
from langchain_core.language_models import BaseChatModel
from langchain_openai import ChatOpenAI
from pydantic import BaseModel, ConfigDict
from sqlalchemy.ext.asyncio import AsyncSession

from evolve_support.core.config import settings
from evolve_support.core.database import get_async_session
from evolve_support.core.exceptions import AuthenticationError, AuthorizationError
from evolve_support.core.redis import get_redis
from evolve_support.repositories.chat_repo import ChatRepository
from evolve_support.repositories.feedback_repo import FeedbackRepository
from evolve_support.repositories.order_repo import OrderRepository
from evolve_support.repositories.question_repo import QuestionRepository
from evolve_support.repositories.user_repo import UserRepository
from evolve_support.services.auth_service import AuthService
from evolve_support.services.chatbot_service import ChatbotService
from evolve_support.services.feedback_service import FeedbackService
from evolve_support.services.order_service import OrderService
from evolve_support.services.question_service import QuestionService
from evolve_support.services.session_service import SessionService
from evolve_support.services.storage_service import StorageService
from evolve_support.services.token_service import TokenService


@lru_cache
def get_llm() -> BaseChatModel:
    """Get the LLM instance based on the configured provider."""
    llm_config = settings.llm
    match llm_config.provider:
        case "openai":
            return ChatOpenAI(
                model=llm_config.openai_model,
                api_key=llm_config.openai_api_key,
                max_tokens=llm_config.max_tokens,
                temperature=llm_config.temperature,
            )
        case "anthropic":
            return ChatAnthropic(  # type: ignore[call-arg]
                model_name=llm_config.anthropic_model,
                api_key=llm_config.anthropic_api_key,
                max_tokens=llm_config.max_tokens,
                temperature=llm_config.temperature,
            )
        case _:
            raise ValueError(f"Unsupported LLM provider: {llm_config.provider}")


# --- Auth dependencies ---


class CurrentUser(BaseModel):
    """Authenticated user extracted from request state."""

    model_config = ConfigDict(frozen=True)

    id: int
    phone: str
    role: str


def get_token_service() -> TokenService:
    """Get TokenService backed by the active Redis client."""
    return TokenService(get_redis())


def get_user_repository(
    session: AsyncSession = Depends(get_async_session),
) -> UserRepository:
    """Get UserRepository bound to the current session."""
    return UserRepository(session)


def get_chat_repository(
    session: AsyncSession = Depends(get_async_session),
) -> ChatRepository:
    """Get ChatRepository bound to the current session."""
    return ChatRepository(session)


def get_order_repository(
    session: AsyncSession = Depends(get_async_session),
) -> OrderRepository:
    return OrderRepository(session)


def get_question_repository(
    session: AsyncSession = Depends(get_async_session),
) -> QuestionRepository:
    return QuestionRepository(session)


def get_feedback_repository(
    session: AsyncSession = Depends(get_async_session),
) -> FeedbackRepository:
    return FeedbackRepository(session)


def get_auth_service(
    user_repo: UserRepository = Depends(get_user_repository),
    token_service: TokenService = Depends(get_token_service),
    session: AsyncSession = Depends(get_async_session),
) -> AuthService:
    """Get AuthService with all dependencies."""
    return AuthService(
        user_repo=user_repo,
        token_service=token_service,
        session=session,
    )


def get_optional_user(request: Request) -> CurrentUser | None:
    """The authenticated user, or None for anonymous requests."""
    state = getattr(request, "state", None)
    user_id = getattr(state, "user_id", None) if state else None
    if user_id is None:
        return None
    return CurrentUser(
        id=state.user_id,
        phone=state.phone,
        role=state.role,
    )


def get_current_user(request: Request) -> CurrentUser:
    """Extract the authenticated user from middleware-populated state."""
    user = get_optional_user(request)
    if user is None:
        raise AuthenticationError(message="Not authenticated")
    return user


def require_role(*allowed_roles: str) -> Callable[..., CurrentUser]:
    """Dependency factory that enforces role-based access control."""

    def _check(
        current_user: CurrentUser = Depends(get_current_user),
    ) -> CurrentUser:
        if current_user.role not in allowed_roles:
            raise AuthorizationError(
                message=f"Role '{current_user.role}' is not permitted"
            )
        return current_user

    return _check


# --- Service dependencies ---


def get_session_service(
    chat_repo: ChatRepository = Depends(get_chat_repository),
    current_user: CurrentUser = Depends(get_current_user),
) -> SessionService:
    """Get SessionService for the authenticated user."""
    return SessionService(chat_repo=chat_repo, user_id=current_user.id)


def get_chatbot_service(
    llm: BaseChatModel = Depends(get_llm),
    order_repo: OrderRepository = Depends(get_order_repository),
    current_user: CurrentUser | None = Depends(get_optional_user),
) -> ChatbotService:
    """Get ChatbotService; order context is only available to known callers."""
    return ChatbotService(
        llm=llm,
        order_repo=order_repo,
        user_id=current_user.id if current_user else None,
    )


def get_question_service(
    question_repo: QuestionRepository = Depends(get_question_repository),
) -> QuestionService:
    return QuestionService(question_repo)


def get_feedback_service(
    feedback_repo: FeedbackRepository = Depends(get_feedback_repository),
    current_user: CurrentUser = Depends(get_current_user),
) -> FeedbackService:
    return FeedbackService(feedback_repo=feedback_repo, user_id=current_user.id)


def get_order_service(
    order_repo: OrderRepository = Depends(get_order_repository),
    current_user: CurrentUser = Depends(get_current_user),
) -> OrderService:
    return OrderService(order_repo=order_repo, user_id=current_user.id)


def get_storage_service() -> StorageService:
    return StorageService(settings.file_upload)
