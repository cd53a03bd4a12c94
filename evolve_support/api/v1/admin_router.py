"""Admin endpoints for managing domain questions."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from evolve_support.dependencies import get_question_service, require_role
from evolve_support.schemas.question_schema import (
    DomainQuestionResponse,
    QuestionRequest,
    ToggleActiveRequest,
)
from evolve_support.schemas.response_schema import ApiResponse, success_response
from evolve_support.services.question_service import QuestionService

router = APIRouter(
    prefix="/api/v1/admin/domain-questions",
    tags=["admin"],
    dependencies=[Depends(require_role("admin"))],
)

QuestionServiceDep = Annotated[QuestionService, Depends(get_question_service)]


@router.get("", response_model=ApiResponse[list[DomainQuestionResponse]])
async def list_questions(service: QuestionServiceDep) -> dict:
    """Every question, newest first."""
    result = await service.list_all()
    return success_response(result)


@router.post(
    "",
    response_model=ApiResponse[DomainQuestionResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_question(
    request: QuestionRequest, service: QuestionServiceDep
) -> dict:
    result = await service.create(request)
    return success_response(result, status=201)


@router.put("/{question_id}", response_model=ApiResponse[DomainQuestionResponse])
async def update_question(
    question_id: int, request: QuestionRequest, service: QuestionServiceDep
) -> dict:
    result = await service.update(question_id, request)
    return success_response(result)


@router.patch(
    "/{question_id}/active", response_model=ApiResponse[DomainQuestionResponse]
)
async def toggle_question(
    question_id: int, request: ToggleActiveRequest, service: QuestionServiceDep
) -> dict:
    """Show or hide a question in the chat suggestions."""
    result = await service.set_active(question_id, request.is_active)
    return success_response(result)


@router.delete("/{question_id}", response_model=ApiResponse[None])
async def delete_question(question_id: int, service: QuestionServiceDep) -> dict:
    await service.delete(question_id)
    return success_response(None, message="Question deleted")
