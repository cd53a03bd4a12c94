"""Feedback records on chatbot answers."""

import structlog

from evolve_support.repositories.feedback_repo import FeedbackRepository
from evolve_support.schemas.feedback_schema import (
    CreateFeedbackRequest,
    FeedbackResponse,
)

logger = structlog.get_logger()


class FeedbackService:
    """Create and list the current user's feedback records."""

    def __init__(self, feedback_repo: FeedbackRepository, user_id: int) -> None:
        self._feedback_repo = feedback_repo
        self._user_id = user_id

    async def submit(self, request: CreateFeedbackRequest) -> FeedbackResponse:
        """Store feedback as ``pending`` for later review."""
        record = await self._feedback_repo.create(
            user_id=self._user_id,
            original_question=request.original_question,
            chatbot_response=request.chatbot_response,
            user_feedback=request.user_feedback,
        )
        logger.info("Feedback submitted", feedback_id=record.id, user_id=self._user_id)
        return FeedbackResponse.model_validate(record)

    async def list_mine(self) -> list[FeedbackResponse]:
        rows = await self._feedback_repo.find_by_user(self._user_id)
        return [FeedbackResponse.model_validate(r) for r in rows]
