"""The chat history list."""

from collections.abc import Awaitable, Callable

import structlog

from evolve_support.client.errors import ApiError, AuthRequired, PersistenceFailed
from evolve_support.client.gateways import PersistenceGateway
from evolve_support.client.notifications import LogNotifier, Notification, Notifier
from evolve_support.schemas.session_schema import SessionSummary

logger = structlog.get_logger()

# Asked before a destructive delete; returning False cancels it.
Confirm = Callable[[SessionSummary], Awaitable[bool]]

PAGE_SIZE = 50


class SessionDirectory:
    """In-memory list of the user's sessions, newest activity first."""

    def __init__(
        self,
        persistence: PersistenceGateway,
        notifier: Notifier | None = None,
    ) -> None:
        self._persistence = persistence
        self._notifier = notifier or LogNotifier()
        self.sessions: list[SessionSummary] = []
        self.is_loading = False

    async def refresh(self) -> list[SessionSummary]:
        """Reload every page of the listing."""
        await self._require_user()
        self.is_loading = True
        try:
            sessions: list[SessionSummary] = []
            cursor: str | None = None
            while True:
                page = await self._persistence.list_sessions(
                    cursor=cursor, limit=PAGE_SIZE
                )
                sessions.extend(page.sessions)
                if not page.has_next or page.next_cursor is None:
                    break
                cursor = page.next_cursor
        except ApiError as exc:
            logger.warning("Loading chat sessions failed", code=exc.code)
            raise PersistenceFailed("Failed to load chat sessions") from exc
        finally:
            self.is_loading = False

        self.sessions = sessions
        return sessions

    async def create_session(self) -> int:
        """Create an empty session and return its id for navigation."""
        await self._require_user()
        try:
            session = await self._persistence.create_session()
        except ApiError as exc:
            logger.warning("Creating chat session failed", code=exc.code)
            raise PersistenceFailed("Failed to create new chat session") from exc
        return session.id

    async def delete_session(self, session_id: int, confirm: Confirm) -> bool:
        """Delete after confirmation. Returns False when the user declined."""
        summary = next((s for s in self.sessions if s.id == session_id), None)
        if summary is None:
            raise PersistenceFailed("Chat session not found")
        if not await confirm(summary):
            return False

        try:
            await self._persistence.delete_session(session_id)
        except ApiError as exc:
            logger.warning(
                "Deleting chat session failed", session_id=session_id, code=exc.code
            )
            raise PersistenceFailed("Failed to delete chat session") from exc

        self.sessions = [s for s in self.sessions if s.id != session_id]
        self._notifier.notify(
            Notification(
                title="Chat deleted",
                description="The chat session has been deleted successfully.",
            )
        )
        return True

    async def _require_user(self) -> None:
        try:
            user = await self._persistence.current_user()
        except ApiError as exc:
            raise PersistenceFailed("Failed to load the current user") from exc
        if user is None:
            raise AuthRequired()
