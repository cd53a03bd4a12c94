"""Chat repository for session and message database operations."""

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import and_, delete, exists, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from evolve_support.models.chat_message import ChatMessage
from evolve_support.models.chat_session import ChatSession


@dataclass(frozen=True)
class SessionWithPreview:
    """Immutable result object for session list queries."""

    id: int
    title: str
    message_count: int
    last_message: str | None
    created_at: datetime
    updated_at: datetime


class ChatRepository:
    """Encapsulates chat session and message database queries."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_session_by_id(self, session_id: int) -> ChatSession | None:
        """Find a chat session by primary key."""
        result = await self._session.execute(
            select(ChatSession)
            .where(ChatSession.id == session_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def create_session(self, user_id: int, title: str) -> ChatSession:
        """Create a new chat session."""
        session = ChatSession(user_id=user_id, title=title)
        self._session.add(session)
        await self._session.flush()
        await self._session.refresh(session)
        return session

    async def find_messages_by_session_id(self, session_id: int) -> list[ChatMessage]:
        """Retrieve all messages for a session in chronological order."""
        result = await self._session.execute(
            select(ChatMessage)
            .where(ChatMessage.session_id == session_id)
            .order_by(ChatMessage.created_at.asc(), ChatMessage.id.asc())
        )
        return list(result.scalars().all())

    async def create_message(
        self,
        session_id: int,
        is_user: bool,
        content: str,
        file_url: str | None = None,
        file_name: str | None = None,
    ) -> ChatMessage:
        """Create a single chat message."""
        message = ChatMessage(
            session_id=session_id,
            is_user=is_user,
            content=content,
            file_url=file_url,
            file_name=file_name,
        )
        self._session.add(message)
        await self._session.flush()
        await self._session.refresh(message)
        return message

    async def touch_session(self, session_id: int) -> None:
        """Bump the session's updated_at to now."""
        await self._session.execute(
            update(ChatSession)
            .where(ChatSession.id == session_id)
            .values(updated_at=func.now())
        )

    async def find_sessions_by_user(
        self,
        user_id: int,
        limit: int,
        cursor_updated_at: datetime | None = None,
        cursor_id: int | None = None,
    ) -> list[SessionWithPreview]:
        """Fetch user sessions that contain a user message (updated_at DESC, id DESC).

        Returns ``limit`` rows. The caller should request ``limit + 1`` to
        detect whether a next page exists.
        """
        # Correlated scalar subqueries: latest message content and message count
        preview_subq = (
            select(ChatMessage.content)
            .where(ChatMessage.session_id == ChatSession.id)
            .order_by(ChatMessage.created_at.desc(), ChatMessage.id.desc())
            .limit(1)
            .correlate(ChatSession)
            .scalar_subquery()
        )
        count_subq = (
            select(func.count(ChatMessage.id))
            .where(ChatMessage.session_id == ChatSession.id)
            .correlate(ChatSession)
            .scalar_subquery()
        )
        has_user_message = exists().where(
            and_(
                ChatMessage.session_id == ChatSession.id,
                ChatMessage.is_user.is_(True),
            )
        )

        stmt = select(
            ChatSession.id,
            ChatSession.title,
            count_subq.label("message_count"),
            preview_subq.label("last_message"),
            ChatSession.created_at,
            ChatSession.updated_at,
        ).where(ChatSession.user_id == user_id, has_user_message)

        if cursor_updated_at is not None and cursor_id is not None:
            stmt = stmt.where(
                or_(
                    ChatSession.updated_at < cursor_updated_at,
                    and_(
                        ChatSession.updated_at == cursor_updated_at,
                        ChatSession.id < cursor_id,
                    ),
                )
            )

        stmt = stmt.order_by(
            ChatSession.updated_at.desc(),
            ChatSession.id.desc(),
        ).limit(limit)

        result = await self._session.execute(stmt)
        return [
            SessionWithPreview(
                id=row.id,
                title=row.title,
                message_count=row.message_count or 0,
                last_message=row.last_message,
                created_at=row.created_at,
                updated_at=row.updated_at,
            )
            for row in result
        ]

    async def update_session_title(self, session_id: int, title: str) -> None:
        """Update the title of an existing session."""
        await self._session.execute(
            update(ChatSession).where(ChatSession.id == session_id).values(title=title)
        )

    async def delete_session(self, session_id: int) -> None:
        """Hard-delete a session together with all of its messages."""
        await self._session.execute(
            delete(ChatMessage).where(ChatMessage.session_id == session_id)
        )
        await self._session.execute(
            delete(ChatSession).where(ChatSession.id == session_id)
        )
