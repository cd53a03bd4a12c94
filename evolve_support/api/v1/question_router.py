"""Domain question endpoints for the chat screens."""

from typing import Annotated

from fastapi import APIRouter, Depends

from evolve_support.dependencies import get_question_service, require_role
from evolve_support.schemas.question_schema import DomainQuestionResponse
from evolve_support.schemas.response_schema import ApiResponse, success_response
from evolve_support.services.question_service import QuestionService

router = APIRouter(
    prefix="/api/v1/domain-questions",
    tags=["domain-questions"],
    dependencies=[Depends(require_role("user", "admin"))],
)

QuestionServiceDep = Annotated[QuestionService, Depends(get_question_service)]


@router.get("", response_model=ApiResponse[list[DomainQuestionResponse]])
async def list_active_questions(service: QuestionServiceDep) -> dict:
    """Active suggestions, oldest first."""
    result = await service.list_active()
    return success_response(result)
