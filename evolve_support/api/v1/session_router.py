"""Chat session API router."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from evolve_support.dependencies import get_session_service, require_role
from evolve_support.schemas.response_schema import ApiResponse, success_response
from evolve_support.schemas.session_schema import (
    CreateMessageRequest,
    MessageResponse,
    SessionDetailResponse,
    SessionListResponse,
    SessionResponse,
    UpdateTitleRequest,
)
from evolve_support.services.session_service import SessionService

router = APIRouter(
    prefix="/api/v1/sessions",
    tags=["sessions"],
    dependencies=[Depends(require_role("user", "admin"))],
)

SessionServiceDep = Annotated[SessionService, Depends(get_session_service)]


@router.get("", response_model=ApiResponse[SessionListResponse])
async def list_sessions(
    service: SessionServiceDep,
    cursor: str | None = Query(default=None),
    limit: int = Query(default=20, ge=1, le=100),
) -> dict:
    """List the current user's sessions with cursor-based pagination."""
    result = await service.list_sessions(limit=limit, cursor=cursor)
    return success_response(result)


@router.post(
    "",
    response_model=ApiResponse[SessionResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_session(service: SessionServiceDep) -> dict:
    """Start a new, empty chat session."""
    result = await service.create_session()
    return success_response(result, status=201)


@router.get("/{session_id}", response_model=ApiResponse[SessionDetailResponse])
async def get_session(session_id: int, service: SessionServiceDep) -> dict:
    """Fetch a session together with its messages."""
    result = await service.get_session(session_id)
    return success_response(result)


@router.patch("/{session_id}/title", response_model=ApiResponse[SessionResponse])
async def update_session_title(
    session_id: int,
    request: UpdateTitleRequest,
    service: SessionServiceDep,
) -> dict:
    """Rename a session."""
    result = await service.rename_session(session_id, request.title)
    return success_response(result, message="Title updated")


@router.delete("/{session_id}", response_model=ApiResponse[None])
async def delete_session(session_id: int, service: SessionServiceDep) -> dict:
    """Delete a session and its messages."""
    await service.delete_session(session_id)
    return success_response(None, message="Session deleted")


@router.post(
    "/{session_id}/messages",
    response_model=ApiResponse[MessageResponse],
    status_code=status.HTTP_201_CREATED,
)
async def append_message(
    session_id: int,
    request: CreateMessageRequest,
    service: SessionServiceDep,
) -> dict:
    """Persist one user or assistant message."""
    result = await service.append_message(session_id, request)
    return success_response(result, status=201)
