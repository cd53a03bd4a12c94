"""Feedback (user query) repository."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from evolve_support.models.user_query import UserQuery


class FeedbackRepository:
    """Encapsulates feedback record queries."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        user_id: int,
        original_question: str,
        chatbot_response: str,
        user_feedback: str,
    ) -> UserQuery:
        """Insert a feedback record in the ``pending`` state."""
        record = UserQuery(
            user_id=user_id,
            original_question=original_question,
            chatbot_response=chatbot_response,
            user_feedback=user_feedback,
            status="pending",
        )
        self._session.add(record)
        await self._session.flush()
        await self._session.refresh(record)
        return record

    async def find_by_user(self, user_id: int) -> list[UserQuery]:
        """The user's feedback records, newest first."""
        result = await self._session.execute(
            select(UserQuery)
            .where(UserQuery.user_id == user_id)
            .order_by(UserQuery.created_at.desc(), UserQuery.id.desc())
        )
        return list(result.scalars().all())
