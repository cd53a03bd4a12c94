"""State of one open chat session.

The manager owns the in-memory transcript of a session and coordinates a send:
optional upload, optimistic user entry, persistence, the completion call and
the assistant entry. Sends are serialised, so persisted rows of one session
never interleave.
"""

import asyncio
import contextlib
from collections.abc import AsyncIterator
from dataclasses import dataclass
from datetime import datetime

import structlog

from evolve_support.client.dialogs import Dialog
from evolve_support.client.errors import (
    ApiError,
    AuthRequired,
    GatewayFailed,
    NotFound,
    PersistenceFailed,
    UploadFailed,
    ValidationFailed,
)
from evolve_support.client.gateways import ChatCompletionGateway, PersistenceGateway
from evolve_support.client.messages import (
    FALLBACK_TEXT,
    MAX_ATTACHMENT_BYTES,
    MISSING_QUESTION_TEXT,
    Attachment,
    ChatEntry,
    MessageId,
    PersistedId,
    file_prompt,
    greeting,
    next_local_id,
)
from evolve_support.client.notifications import LogNotifier, Notification, Notifier
from evolve_support.models.chat_session import TITLE_MAX_LENGTH
from evolve_support.schemas.feedback_schema import FEEDBACK_MIN_LENGTH
from evolve_support.schemas.session_schema import SessionResponse

logger = structlog.get_logger()


@dataclass(frozen=True)
class FeedbackTarget:
    """Question/answer pair captured when the feedback dialog opens."""

    message_id: MessageId
    question: str
    response: str


class ConversationManager:
    """Transcript, send pipeline and dialogs of one chat session."""

    def __init__(
        self,
        persistence: PersistenceGateway,
        completion: ChatCompletionGateway,
        notifier: Notifier | None = None,
    ) -> None:
        self._persistence = persistence
        self._completion = completion
        self._notifier = notifier or LogNotifier()
        self._lock = asyncio.Lock()
        # Bumped whenever the view is reloaded or unmounted; a send only renders
        # into the transcript generation it started in.
        self._generation = 0

        self.session: SessionResponse | None = None
        self.messages: list[ChatEntry] = []
        self.draft = ""
        self.pending_attachment: Attachment | None = None
        self.is_awaiting_response = False
        self.suggestions_visible = False
        self.feedback: Dialog[FeedbackTarget] = Dialog()
        self.title_dialog: Dialog[int] = Dialog()

    @property
    def active_feedback_target(self) -> FeedbackTarget | None:
        return self.feedback.target

    # --- Lifecycle ---

    async def initialize(self, session_id: int) -> None:
        """Load a session. Raises AuthRequired or NotFound when it cannot be shown."""
        self._generation += 1
        try:
            user = await self._persistence.current_user()
            if user is None:
                raise AuthRequired()
            detail = await self._persistence.get_session(session_id)
        except ApiError as exc:
            logger.warning(
                "Loading chat session failed", session_id=session_id, code=exc.code
            )
            if exc.is_unauthorized:
                raise AuthRequired() from exc
            raise PersistenceFailed("Failed to load chat session") from exc

        if detail is None:
            logger.info("Chat session not found", session_id=session_id)
            raise NotFound()

        self.session = detail.session
        entries = sorted(
            (ChatEntry.from_response(m) for m in detail.messages),
            key=_chronological,
        )
        if entries:
            self.messages = entries
            self.suggestions_visible = False
        else:
            self.messages = [greeting()]
            self.suggestions_visible = True

        self.draft = ""
        self.pending_attachment = None
        self.feedback.close()
        self.title_dialog.close()

    def detach(self) -> None:
        """The view went away. In-flight replies are still saved, not shown."""
        self._generation += 1

    # --- Sending ---

    def attach(self, attachment: Attachment) -> None:
        """Hold a file for the next send. Files over 10 MB never leave the client."""
        _check_attachment(attachment)
        self.pending_attachment = attachment

    def clear_attachment(self) -> None:
        self.pending_attachment = None

    async def send_message(
        self, text: str | None = None, attachment: Attachment | None = None
    ) -> bool:
        """Send the typed text (or ``text``) and any pending attachment.

        Returns False when there was nothing to send.
        """
        if text is None:
            text = self.draft
        return await self._send(text, attachment or self.pending_attachment)

    async def select_suggestion(self, question: str) -> bool:
        if not self.suggestions_visible:
            raise ValidationFailed("Suggestions are no longer available")
        return await self._send(question, None)

    async def _send(self, text: str, attachment: Attachment | None) -> bool:
        # Hidden for good as soon as anything is sent, even an empty send.
        self.suggestions_visible = False

        content = text.strip()
        if not content and attachment is None:
            return False
        if attachment is not None:
            _check_attachment(attachment)

        session = self._require_session()
        generation = self._generation
        async with self._lock:
            file_url: str | None = None
            file_name: str | None = None
            if attachment is not None:
                try:
                    stored = await self._persistence.upload_file(attachment)
                except ApiError as exc:
                    logger.warning(
                        "Attachment upload failed",
                        session_id=session.id,
                        file_name=attachment.file_name,
                        code=exc.code,
                    )
                    if exc.is_unauthorized:
                        raise AuthRequired() from exc
                    raise UploadFailed() from exc
                file_url, file_name = stored.url, stored.file_name

            user_entry = ChatEntry(
                id=next_local_id(),
                is_user=True,
                content=content,
                file_url=file_url,
                file_name=file_name,
            )
            if self._append(user_entry, generation):
                self.draft = ""
                self.pending_attachment = None
            await self._persist(session.id, user_entry)

            async with self._awaiting():
                reply = await self._complete(
                    content or file_prompt(file_name or ""),
                    has_file=attachment is not None,
                    file_name=file_name,
                )
                assistant_entry = ChatEntry(
                    id=next_local_id(), is_user=False, content=reply
                )
                self._append(assistant_entry, generation)
                await self._persist(session.id, assistant_entry)
        return True

    async def _complete(
        self, prompt: str, has_file: bool, file_name: str | None
    ) -> str:
        try:
            return await self._completion.complete(
                prompt, has_file=has_file, file_name=file_name
            )
        except ApiError as exc:
            logger.warning(
                "Chat completion failed",
                session_id=self.session.id if self.session else None,
                code=exc.code,
            )
            self._notifier.notify(Notification.from_error("Error", GatewayFailed()))
            return FALLBACK_TEXT

    @contextlib.asynccontextmanager
    async def _awaiting(self) -> AsyncIterator[None]:
        self.is_awaiting_response = True
        try:
            yield
        finally:
            self.is_awaiting_response = False

    def _append(self, entry: ChatEntry, generation: int) -> bool:
        """Render an entry unless the view was reloaded or detached since the send began."""
        if generation != self._generation:
            return False
        self.messages.append(entry)
        return True

    async def _persist(self, session_id: int, entry: ChatEntry) -> None:
        """Save an entry and swap its local id for the stored one.

        A failed save keeps the optimistic entry on screen.
        """
        try:
            stored = await self._persistence.append_message(
                session_id,
                content=entry.content,
                is_user=entry.is_user,
                file_url=entry.file_url,
                file_name=entry.file_name,
            )
        except ApiError as exc:
            logger.warning(
                "Saving message failed",
                session_id=session_id,
                is_user=entry.is_user,
                code=exc.code,
            )
            if exc.is_unauthorized:
                raise AuthRequired() from exc
            self._notifier.notify(
                Notification.from_error(
                    "Error", PersistenceFailed("Failed to save message")
                )
            )
            return

        for index, current in enumerate(self.messages):
            if current.id == entry.id:
                self.messages[index] = entry.accepted_as(stored)
                break

    # --- Feedback ---

    def open_feedback(self, message_id: MessageId) -> FeedbackTarget:
        """Open the feedback dialog for an assistant reply."""
        index = self._index_of(message_id)
        if index is None:
            raise ValidationFailed("Message not found")
        entry = self.messages[index]
        if entry.is_user or entry.is_greeting:
            raise ValidationFailed("Feedback is only available for assistant replies")

        question = MISSING_QUESTION_TEXT
        for previous in reversed(self.messages[:index]):
            if previous.is_user:
                question = _question_text(previous)
                break

        target = FeedbackTarget(
            message_id=message_id, question=question, response=entry.content
        )
        self.feedback.open(target)
        return target

    def cancel_feedback(self) -> None:
        self.feedback.close()

    async def submit_feedback(self, text: str) -> None:
        """Save feedback for the captured pair; the dialog stays open on failure."""
        self.feedback.draft = text
        if len(text.strip()) < FEEDBACK_MIN_LENGTH:
            raise ValidationFailed(
                f"Please provide at least {FEEDBACK_MIN_LENGTH} characters of feedback"
            )

        async with self.feedback.submitting() as target:
            try:
                await self._persistence.submit_feedback(
                    original_question=target.question,
                    chatbot_response=target.response,
                    user_feedback=text.strip(),
                )
            except ApiError as exc:
                logger.warning("Saving feedback failed", code=exc.code)
                if exc.is_unauthorized:
                    raise AuthRequired() from exc
                raise PersistenceFailed("Failed to submit feedback") from exc

        self._notifier.notify(
            Notification(
                title="Feedback submitted",
                description="Thank you for your feedback.",
            )
        )

    # --- Title ---

    async def rename_session(self, title: str) -> None:
        session = self._require_session()
        new_title = title.strip()
        if not 1 <= len(new_title) <= TITLE_MAX_LENGTH:
            raise ValidationFailed(
                f"Title must be between 1 and {TITLE_MAX_LENGTH} characters"
            )

        if not self.title_dialog.is_open:
            self.title_dialog.open(session.id)
        self.title_dialog.draft = title

        async with self.title_dialog.submitting():
            try:
                updated = await self._persistence.rename_session(session.id, new_title)
            except ApiError as exc:
                logger.warning(
                    "Renaming session failed", session_id=session.id, code=exc.code
                )
                if exc.is_unauthorized:
                    raise AuthRequired() from exc
                raise PersistenceFailed("Failed to update the chat title.") from exc

        self.session = updated
        self._notifier.notify(
            Notification(
                title="Title updated",
                description="Chat title has been updated successfully.",
            )
        )

    # --- Helpers ---

    def _require_session(self) -> SessionResponse:
        if self.session is None:
            raise ValidationFailed("No chat session is open")
        return self.session

    def _index_of(self, message_id: MessageId) -> int | None:
        for index, entry in enumerate(self.messages):
            if entry.id == message_id:
                return index
        return None


def _chronological(entry: ChatEntry) -> tuple[datetime, int]:
    # Rows written in the same instant fall back to insertion (id) order.
    order = entry.id.value if isinstance(entry.id, PersistedId) else 0
    return entry.created_at, order


def _question_text(entry: ChatEntry) -> str:
    """What the user asked; attachment-only messages stand for their file prompt."""
    if entry.content:
        return entry.content
    if entry.file_name:
        return file_prompt(entry.file_name)
    return MISSING_QUESTION_TEXT


def _check_attachment(attachment: Attachment) -> None:
    if attachment.size > MAX_ATTACHMENT_BYTES:
        raise ValidationFailed("Please select a file smaller than 10MB.")
