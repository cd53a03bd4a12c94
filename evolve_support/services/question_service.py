"""Domain question listing and administration."""

import structlog

from evolve_support.core.exceptions import QuestionNotFoundError
from evolve_support.models.domain_question import DomainQuestion
from evolve_support.repositories.question_repo import QuestionRepository
from evolve_support.schemas.question_schema import (
    DomainQuestionResponse,
    QuestionRequest,
)

logger = structlog.get_logger()


class QuestionService:
    """Reads for the chat screens, writes for the admin panel."""

    def __init__(self, question_repo: QuestionRepository) -> None:
        self._question_repo = question_repo

    async def list_active(self) -> list[DomainQuestionResponse]:
        """Active questions, oldest first."""
        rows = await self._question_repo.find_active()
        return [DomainQuestionResponse.model_validate(r) for r in rows]

    async def list_all(self) -> list[DomainQuestionResponse]:
        """Every question, newest first."""
        rows = await self._question_repo.find_all()
        return [DomainQuestionResponse.model_validate(r) for r in rows]

    async def create(self, request: QuestionRequest) -> DomainQuestionResponse:
        row = await self._question_repo.create(
            question=request.question,
            category=request.category,
            is_active=request.is_active,
        )
        logger.info("Domain question created", question_id=row.id)
        return DomainQuestionResponse.model_validate(row)

    async def update(
        self, question_id: int, request: QuestionRequest
    ) -> DomainQuestionResponse:
        await self._get(question_id)
        await self._question_repo.update(
            question_id,
            question=request.question,
            category=request.category,
            is_active=request.is_active,
        )
        logger.info("Domain question updated", question_id=question_id)
        return DomainQuestionResponse.model_validate(await self._get(question_id))

    async def set_active(
        self, question_id: int, is_active: bool
    ) -> DomainQuestionResponse:
        await self._get(question_id)
        await self._question_repo.update(question_id, is_active=is_active)
        logger.info(
            "Domain question toggled", question_id=question_id, is_active=is_active
        )
        return DomainQuestionResponse.model_validate(await self._get(question_id))

    async def delete(self, question_id: int) -> None:
        await self._get(question_id)
        await self._question_repo.delete(question_id)
        logger.info("Domain question deleted", question_id=question_id)

    async def _get(self, question_id: int) -> DomainQuestion:
        row = await self._question_repo.find_by_id(question_id)
        if row is None:
            raise QuestionNotFoundError()
        return row
