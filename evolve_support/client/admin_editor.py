"""Admin panel over domain questions."""

import structlog

from evolve_support.client.errors import (
    ApiError,
    AuthRequired,
    PersistenceFailed,
    ValidationFailed,
)
from evolve_support.client.gateways import PersistenceGateway
from evolve_support.client.notifications import LogNotifier, Notification, Notifier
from evolve_support.client.viewer import Admin, Viewer
from evolve_support.schemas.question_schema import DomainQuestionResponse

logger = structlog.get_logger()

QUESTION_MAX_LENGTH = 500


class AdminQuestionEditor:
    """CRUD over every domain question. Only constructible for admins."""

    def __init__(
        self,
        viewer: Viewer,
        persistence: PersistenceGateway,
        notifier: Notifier | None = None,
    ) -> None:
        if not isinstance(viewer, Admin):
            raise AuthRequired("Administrator access required")
        self._persistence = persistence
        self._notifier = notifier or LogNotifier()
        self.questions: list[DomainQuestionResponse] = []

    async def refresh(self) -> list[DomainQuestionResponse]:
        try:
            self.questions = await self._persistence.list_all_questions()
        except ApiError as exc:
            logger.warning("Loading domain questions failed", code=exc.code)
            raise PersistenceFailed("Failed to fetch domain questions") from exc
        return self.questions

    async def create(
        self, question: str, category: str | None = None, is_active: bool = True
    ) -> None:
        text, category = _clean(question, category)
        try:
            await self._persistence.create_question(text, category, is_active)
        except ApiError as exc:
            logger.warning("Creating domain question failed", code=exc.code)
            raise PersistenceFailed("Failed to save question") from exc
        self._notifier.notify(
            Notification(title="Success", description="Question created successfully")
        )
        await self.refresh()

    async def update(
        self,
        question_id: int,
        question: str,
        category: str | None = None,
        is_active: bool = True,
    ) -> None:
        text, category = _clean(question, category)
        try:
            await self._persistence.update_question(
                question_id, text, category, is_active
            )
        except ApiError as exc:
            logger.warning(
                "Updating domain question failed",
                question_id=question_id,
                code=exc.code,
            )
            raise PersistenceFailed("Failed to save question") from exc
        self._notifier.notify(
            Notification(title="Success", description="Question updated successfully")
        )
        await self.refresh()

    async def toggle_active(self, question_id: int) -> None:
        """Flip the active flag on screen first; restore it if the save fails."""
        index = next(
            (i for i, q in enumerate(self.questions) if q.id == question_id), None
        )
        if index is None:
            raise ValidationFailed("Question not found")

        original = self.questions[index]
        self.questions[index] = original.model_copy(
            update={"is_active": not original.is_active}
        )
        try:
            await self._persistence.set_question_active(
                question_id, not original.is_active
            )
        except ApiError as exc:
            logger.warning(
                "Toggling domain question failed",
                question_id=question_id,
                code=exc.code,
            )
            self.questions[index] = original
            raise PersistenceFailed("Failed to update question status") from exc
        await self.refresh()

    async def delete(self, question_id: int) -> None:
        try:
            await self._persistence.delete_question(question_id)
        except ApiError as exc:
            logger.warning(
                "Deleting domain question failed",
                question_id=question_id,
                code=exc.code,
            )
            raise PersistenceFailed("Failed to delete question") from exc
        self._notifier.notify(
            Notification(title="Success", description="Question deleted successfully")
        )
        await self.refresh()


def _clean(question: str, category: str | None) -> tuple[str, str | None]:
    text = question.strip()
    if not text or len(text) > QUESTION_MAX_LENGTH:
        raise ValidationFailed(
            f"Question must be between 1 and {QUESTION_MAX_LENGTH} characters"
        )
    category = category.strip() if category else None
    return text, category or None
