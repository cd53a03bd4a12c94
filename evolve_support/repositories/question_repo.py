"""Domain question repository."""

from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from evolve_support.models.domain_question import DomainQuestion


class QuestionRepository:
    """Encapsulates domain question queries."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_active(self) -> list[DomainQuestion]:
        """Active questions in creation order (oldest first)."""
        result = await self._session.execute(
            select(DomainQuestion)
            .where(DomainQuestion.is_active.is_(True))
            .order_by(DomainQuestion.created_at.asc(), DomainQuestion.id.asc())
        )
        return list(result.scalars().all())

    async def find_all(self) -> list[DomainQuestion]:
        """All questions, newest first."""
        result = await self._session.execute(
            select(DomainQuestion).order_by(
                DomainQuestion.created_at.desc(), DomainQuestion.id.desc()
            )
        )
        return list(result.scalars().all())

    async def find_by_id(self, question_id: int) -> DomainQuestion | None:
        """Find a question by primary key."""
        result = await self._session.execute(
            select(DomainQuestion)
            .where(DomainQuestion.id == question_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def create(
        self, question: str, category: str | None, is_active: bool
    ) -> DomainQuestion:
        """Insert a new question."""
        row = DomainQuestion(question=question, category=category, is_active=is_active)
        self._session.add(row)
        await self._session.flush()
        await self._session.refresh(row)
        return row

    async def update(self, question_id: int, **values: Any) -> None:
        """Update selected columns of a question."""
        await self._session.execute(
            update(DomainQuestion)
            .where(DomainQuestion.id == question_id)
            .values(**values)
        )

    async def delete(self, question_id: int) -> None:
        """Hard-delete a question."""
        await self._session.execute(
            delete(DomainQuestion).where(DomainQuestion.id == question_id)
        )
