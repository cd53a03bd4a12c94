"""Suggested questions for the chat screens."""

import structlog

from evolve_support.client.errors import ApiError
from evolve_support.client.gateways import PersistenceGateway
from evolve_support.schemas.question_schema import DomainQuestionResponse

logger = structlog.get_logger()

LOAD_ERROR = "Failed to load questions"


class QuestionProvider:
    """Reads active domain questions; failures degrade to no suggestions."""

    def __init__(self, persistence: PersistenceGateway) -> None:
        self._persistence = persistence
        self.questions: list[DomainQuestionResponse] = []
        self.is_loading = False
        self.error: str | None = None

    async def list_active_questions(self) -> list[DomainQuestionResponse]:
        self.is_loading = True
        self.error = None
        try:
            self.questions = await self._persistence.list_active_questions()
        except ApiError as exc:
            logger.warning("Loading domain questions failed", code=exc.code)
            self.questions = []
            self.error = LOAD_ERROR
        finally:
            self.is_loading = False
        return self.questions
