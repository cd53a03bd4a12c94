"""Service layer for chat sessions with cursor-based pagination."""

import base64
import json
from datetime import UTC, datetime

import structlog

from evolve_support.core.exceptions import AppException, SessionNotFoundError
from evolve_support.models.chat_session import ChatSession
from evolve_support.repositories.chat_repo import ChatRepository
from evolve_support.schemas.session_schema import (
    CreateMessageRequest,
    MessageResponse,
    SessionDetailResponse,
    SessionListResponse,
    SessionResponse,
    SessionSummary,
)

logger = structlog.get_logger()


def default_session_title(now: datetime | None = None) -> str:
    """Title for a new session, e.g. ``Chat Oct 16, 3:04 PM``."""
    now = now or datetime.now()
    hour = now.hour % 12 or 12
    return f"Chat {now:%b} {now.day}, {hour}:{now:%M} {now:%p}"


def encode_cursor(updated_at: datetime, session_id: int) -> str:
    """Encode pagination cursor as base64url JSON."""
    payload = {"u": updated_at.isoformat(), "i": session_id}
    return base64.urlsafe_b64encode(json.dumps(payload).encode()).decode()


def decode_cursor(cursor: str) -> tuple[datetime, int]:
    """Decode pagination cursor. Raises AppException on invalid input."""
    try:
        raw = base64.urlsafe_b64decode(cursor.encode())
        data = json.loads(raw)
        updated_at = datetime.fromisoformat(data["u"])
        if updated_at.tzinfo is None:
            updated_at = updated_at.replace(tzinfo=UTC)
        session_id = int(data["i"])
        return updated_at, session_id
    except (ValueError, KeyError, TypeError) as exc:
        raise AppException(
            message=f"Invalid cursor: {exc}",
            code="INVALID_CURSOR",
            status_code=400,
        ) from exc


class SessionService:
    """Chat session queries and mutations scoped to one user."""

    def __init__(self, chat_repo: ChatRepository, user_id: int) -> None:
        self._chat_repo = chat_repo
        self._user_id = user_id

    async def _get_owned(self, session_id: int) -> ChatSession:
        # Sessions of other users are reported exactly like missing ones.
        session = await self._chat_repo.find_session_by_id(session_id)
        if session is None or session.user_id != self._user_id:
            raise SessionNotFoundError()
        return session

    async def list_sessions(
        self,
        limit: int = 20,
        cursor: str | None = None,
    ) -> SessionListResponse:
        """Return a page of the user's sessions that contain a user message."""
        cursor_updated_at: datetime | None = None
        cursor_id: int | None = None

        if cursor is not None:
            cursor_updated_at, cursor_id = decode_cursor(cursor)

        rows = await self._chat_repo.find_sessions_by_user(
            user_id=self._user_id,
            limit=limit + 1,
            cursor_updated_at=cursor_updated_at,
            cursor_id=cursor_id,
        )

        has_next = len(rows) > limit
        page_rows = rows[:limit]

        next_cursor: str | None = None
        if has_next and page_rows:
            last = page_rows[-1]
            next_cursor = encode_cursor(last.updated_at, last.id)

        return SessionListResponse(
            sessions=[SessionSummary.model_validate(r) for r in page_rows],
            next_cursor=next_cursor,
            has_next=has_next,
        )

    async def create_session(self, title: str | None = None) -> SessionResponse:
        """Create an empty session with a timestamped default title."""
        session = await self._chat_repo.create_session(
            user_id=self._user_id,
            title=title or default_session_title(),
        )
        logger.info("Chat session created", session_id=session.id, user_id=self._user_id)
        return SessionResponse.model_validate(session)

    async def get_session(self, session_id: int) -> SessionDetailResponse:
        """Return session metadata and its messages in chronological order."""
        session = await self._get_owned(session_id)
        messages = await self._chat_repo.find_messages_by_session_id(session.id)
        return SessionDetailResponse(
            session=SessionResponse.model_validate(session),
            messages=[MessageResponse.model_validate(m) for m in messages],
        )

    async def rename_session(self, session_id: int, title: str) -> SessionResponse:
        """Rename a session owned by the current user."""
        await self._get_owned(session_id)
        await self._chat_repo.update_session_title(session_id, title)
        session = await self._get_owned(session_id)
        return SessionResponse.model_validate(session)

    async def delete_session(self, session_id: int) -> None:
        """Delete a session and all of its messages."""
        await self._get_owned(session_id)
        await self._chat_repo.delete_session(session_id)
        logger.info("Chat session deleted", session_id=session_id, user_id=self._user_id)

    async def append_message(
        self, session_id: int, request: CreateMessageRequest
    ) -> MessageResponse:
        """Persist a message and bump the session's last-activity time."""
        await self._get_owned(session_id)
        message = await self._chat_repo.create_message(
            session_id=session_id,
            is_user=request.is_user,
            content=request.content,
            file_url=request.file_url,
            file_name=request.file_name,
        )
        await self._chat_repo.touch_session(session_id)
        return MessageResponse.model_validate(message)
