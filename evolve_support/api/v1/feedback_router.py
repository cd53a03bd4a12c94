"""Feedback (query history) endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from evolve_support.dependencies import get_feedback_service, require_role
from evolve_support.schemas.feedback_schema import (
    CreateFeedbackRequest,
    FeedbackResponse,
)
from evolve_support.schemas.response_schema import ApiResponse, success_response
from evolve_support.services.feedback_service import FeedbackService

router = APIRouter(
    prefix="/api/v1/feedback",
    tags=["feedback"],
    dependencies=[Depends(require_role("user", "admin"))],
)

FeedbackServiceDep = Annotated[FeedbackService, Depends(get_feedback_service)]


@router.post(
    "",
    response_model=ApiResponse[FeedbackResponse],
    status_code=status.HTTP_201_CREATED,
)
async def submit_feedback(
    request: CreateFeedbackRequest, service: FeedbackServiceDep
) -> dict:
    """Record feedback on a chatbot answer."""
    result = await service.submit(request)
    return success_response(result, status=201)


@router.get("", response_model=ApiResponse[list[FeedbackResponse]])
async def list_feedback(service: FeedbackServiceDep) -> dict:
    """The caller's feedback records, newest first."""
    result = await service.list_mine()
    return success_response(result)
