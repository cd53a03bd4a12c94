"""Tests for ConversationManager with mocked gateways."""

import asyncio
import itertools
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from evolve_support.client.conversation_manager import ConversationManager
from evolve_support.client.dialogs import DialogState
from evolve_support.client.errors import (
    ApiError,
    AuthRequired,
    NotFound,
    PersistenceFailed,
    UploadFailed,
    ValidationFailed,
)
from evolve_support.client.gateways import ChatCompletionGateway, PersistenceGateway
from evolve_support.client.messages import (
    FALLBACK_TEXT,
    GREETING_TEXT,
    MAX_ATTACHMENT_BYTES,
    MISSING_QUESTION_TEXT,
    WELCOME_ID,
    Attachment,
    ChatEntry,
    LocalId,
    PersistedId,
    file_prompt,
)
from evolve_support.client.notifications import Notification, Notifier
from evolve_support.schemas.auth_schema import UserResponse
from evolve_support.schemas.file_schema import StoredFileResponse
from evolve_support.schemas.session_schema import (
    MessageResponse,
    SessionDetailResponse,
    SessionResponse,
)

NOW = datetime(2026, 5, 1, 12, 0, tzinfo=UTC)
SESSION = SessionResponse(id=7, title="Chat May 1, 12:00 PM", created_at=NOW, updated_at=NOW)
USER = UserResponse(id=1, phone="5550000001", role="user", is_active=True, created_at=NOW)


class RecordingNotifier(Notifier):
    def __init__(self) -> None:
        self.sent: list[Notification] = []

    def notify(self, notification: Notification) -> None:
        self.sent.append(notification)


def _message(
    message_id: int, content: str, is_user: bool, offset: int = 0
) -> MessageResponse:
    return MessageResponse(
        id=message_id,
        session_id=SESSION.id,
        is_user=is_user,
        content=content,
        created_at=NOW + timedelta(seconds=offset),
    )


@pytest.fixture
def persistence() -> AsyncMock:
    gateway = AsyncMock(spec=PersistenceGateway)
    gateway.current_user.return_value = USER
    gateway.get_session.return_value = SessionDetailResponse(session=SESSION, messages=[])
    ids = itertools.count(100)

    async def append_message(
        session_id: int,
        content: str,
        is_user: bool,
        file_url: str | None = None,
        file_name: str | None = None,
    ) -> MessageResponse:
        return MessageResponse(
            id=next(ids),
            session_id=session_id,
            is_user=is_user,
            content=content,
            file_url=file_url,
            file_name=file_name,
            created_at=datetime.now(UTC),
        )

    gateway.append_message.side_effect = append_message
    gateway.upload_file.return_value = StoredFileResponse(
        url="http://test/files/1/1700000000000.png", file_name="photo.png"
    )
    return gateway


@pytest.fixture
def completion() -> AsyncMock:
    gateway = AsyncMock(spec=ChatCompletionGateway)
    gateway.complete.return_value = "Hold the power button for 5 seconds."
    return gateway


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
async def manager(
    persistence: AsyncMock, completion: AsyncMock, notifier: RecordingNotifier
) -> ConversationManager:
    m = ConversationManager(persistence, completion, notifier)
    await m.initialize(SESSION.id)
    return m


class TestInitialize:
    async def test_empty_session_shows_greeting_and_suggestions(
        self, manager: ConversationManager
    ) -> None:
        assert len(manager.messages) == 1
        assert manager.messages[0].id == WELCOME_ID
        assert manager.messages[0].content == GREETING_TEXT
        assert manager.suggestions_visible is True
        assert manager.session == SESSION

    async def test_existing_messages_sorted_without_greeting(
        self, persistence: AsyncMock, completion: AsyncMock
    ) -> None:
        persistence.get_session.return_value = SessionDetailResponse(
            session=SESSION,
            messages=[_message(2, "Answer", False, 5), _message(1, "Question", True)],
        )
        m = ConversationManager(persistence, completion)

        await m.initialize(SESSION.id)

        assert [e.content for e in m.messages] == ["Question", "Answer"]
        assert all(e.is_persisted for e in m.messages)
        assert m.suggestions_visible is False

    async def test_signed_out(
        self, persistence: AsyncMock, completion: AsyncMock
    ) -> None:
        persistence.current_user.return_value = None
        m = ConversationManager(persistence, completion)

        with pytest.raises(AuthRequired) as exc_info:
            await m.initialize(SESSION.id)

        assert exc_info.value.redirect == "/"
        persistence.get_session.assert_not_awaited()

    async def test_missing_or_foreign_session(
        self, persistence: AsyncMock, completion: AsyncMock
    ) -> None:
        persistence.get_session.return_value = None
        m = ConversationManager(persistence, completion)

        with pytest.raises(NotFound) as exc_info:
            await m.initialize(99)

        assert exc_info.value.redirect == "/chat-history"

    async def test_backend_failure(
        self, persistence: AsyncMock, completion: AsyncMock
    ) -> None:
        persistence.get_session.side_effect = ApiError("boom", "INTERNAL_ERROR", 500)
        m = ConversationManager(persistence, completion)

        with pytest.raises(PersistenceFailed):
            await m.initialize(SESSION.id)


class TestSendMessage:
    async def test_empty_send_changes_nothing(
        self,
        manager: ConversationManager,
        persistence: AsyncMock,
        completion: AsyncMock,
    ) -> None:
        before = list(manager.messages)

        sent = await manager.send_message("   ")

        assert sent is False
        assert manager.messages == before
        persistence.append_message.assert_not_awaited()
        completion.complete.assert_not_awaited()

    async def test_first_send_adds_exactly_two_entries(
        self,
        manager: ConversationManager,
        persistence: AsyncMock,
        completion: AsyncMock,
    ) -> None:
        manager.draft = "  My scooter won't turn on  "

        sent = await manager.send_message()

        assert sent is True
        assert manager.suggestions_visible is False
        assert manager.draft == ""
        assert manager.is_awaiting_response is False
        greeting, user_entry, reply = manager.messages
        assert greeting.id == WELCOME_ID
        assert (user_entry.is_user, user_entry.content) == (
            True,
            "My scooter won't turn on",
        )
        assert (reply.is_user, reply.content) == (
            False,
            "Hold the power button for 5 seconds.",
        )
        assert user_entry.is_persisted and reply.is_persisted
        completion.complete.assert_awaited_once_with(
            "My scooter won't turn on", has_file=False, file_name=None
        )
        assert persistence.append_message.await_count == 2

    async def test_completion_failure_appends_fallback(
        self,
        manager: ConversationManager,
        completion: AsyncMock,
        notifier: RecordingNotifier,
    ) -> None:
        completion.complete.side_effect = ApiError("down", "CHAT_COMPLETION_FAILED", 500)

        await manager.send_message("Is it waterproof?")

        assert manager.messages[-2].content == "Is it waterproof?"
        assert manager.messages[-1].content == FALLBACK_TEXT
        assert manager.messages[-1].is_user is False
        assert notifier.sent[-1].variant == "destructive"

    async def test_failed_save_keeps_optimistic_entry(
        self,
        manager: ConversationManager,
        persistence: AsyncMock,
        notifier: RecordingNotifier,
    ) -> None:
        persistence.append_message.side_effect = ApiError("db", "INTERNAL_ERROR", 500)

        await manager.send_message("Hello")

        user_entry = manager.messages[1]
        assert isinstance(user_entry.id, LocalId)
        assert user_entry.content == "Hello"
        assert [n.description for n in notifier.sent].count("Failed to save message") == 2

    async def test_attachment_only_uses_file_prompt(
        self,
        manager: ConversationManager,
        persistence: AsyncMock,
        completion: AsyncMock,
    ) -> None:
        manager.attach(Attachment(file_name="photo.png", content=b"\x89PNG"))

        await manager.send_message("")

        user_entry = manager.messages[1]
        assert user_entry.content == ""
        assert user_entry.file_url == "http://test/files/1/1700000000000.png"
        assert user_entry.file_name == "photo.png"
        assert manager.pending_attachment is None
        prompt = completion.complete.await_args.args[0]
        assert "photo.png" in prompt
        assert completion.complete.await_args.kwargs["has_file"] is True

    async def test_upload_failure_aborts_send(
        self,
        manager: ConversationManager,
        persistence: AsyncMock,
        completion: AsyncMock,
    ) -> None:
        persistence.upload_file.side_effect = ApiError("s3", "INTERNAL_ERROR", 500)
        before = list(manager.messages)

        with pytest.raises(UploadFailed):
            await manager.send_message(
                "See attached", Attachment(file_name="a.pdf", content=b"%PDF")
            )

        assert manager.messages == before
        persistence.append_message.assert_not_awaited()
        completion.complete.assert_not_awaited()

    async def test_oversized_attachment_rejected_locally(
        self, manager: ConversationManager, persistence: AsyncMock
    ) -> None:
        big = Attachment(file_name="video.mp4", content=b"0" * (MAX_ATTACHMENT_BYTES + 1))

        with pytest.raises(ValidationFailed):
            manager.attach(big)

        assert manager.pending_attachment is None
        persistence.upload_file.assert_not_awaited()

    async def test_suggestion_only_while_visible(
        self, manager: ConversationManager, completion: AsyncMock
    ) -> None:
        await manager.select_suggestion("How long does the battery last?")

        completion.complete.assert_awaited_once()
        with pytest.raises(ValidationFailed):
            await manager.select_suggestion("What is the warranty?")

    async def test_detached_view_still_persists(
        self, manager: ConversationManager, persistence: AsyncMock
    ) -> None:
        manager.detach()

        await manager.send_message("Are you there?")

        assert len(manager.messages) == 1
        assert persistence.append_message.await_count == 2


class TestFeedback:
    async def _conversation(self, manager: ConversationManager) -> ChatEntry:
        await manager.send_message("How do I fold it?")
        return manager.messages[-1]

    async def test_open_captures_question_and_answer(
        self, manager: ConversationManager
    ) -> None:
        reply = await self._conversation(manager)

        target = manager.open_feedback(reply.id)

        assert target.question == "How do I fold it?"
        assert target.response == reply.content
        assert manager.feedback.state is DialogState.EDITING

    async def test_only_assistant_replies(self, manager: ConversationManager) -> None:
        await self._conversation(manager)

        with pytest.raises(ValidationFailed):
            manager.open_feedback(manager.messages[1].id)
        with pytest.raises(ValidationFailed):
            manager.open_feedback(WELCOME_ID)
        with pytest.raises(ValidationFailed):
            manager.open_feedback(PersistedId(12345))

    async def test_reply_without_question_uses_placeholder(
        self, persistence: AsyncMock, completion: AsyncMock
    ) -> None:
        persistence.get_session.return_value = SessionDetailResponse(
            session=SESSION, messages=[_message(1, "Orphan answer", False)]
        )
        m = ConversationManager(persistence, completion)
        await m.initialize(SESSION.id)

        target = m.open_feedback(PersistedId(1))

        assert target.question == MISSING_QUESTION_TEXT

    async def test_short_feedback_rejected(
        self, manager: ConversationManager, persistence: AsyncMock
    ) -> None:
        reply = await self._conversation(manager)
        manager.open_feedback(reply.id)

        with pytest.raises(ValidationFailed):
            await manager.submit_feedback("  too short ")

        persistence.submit_feedback.assert_not_awaited()
        assert manager.feedback.is_open

    async def test_submit_saves_and_closes(
        self,
        manager: ConversationManager,
        persistence: AsyncMock,
        notifier: RecordingNotifier,
    ) -> None:
        reply = await self._conversation(manager)
        manager.open_feedback(reply.id)

        await manager.submit_feedback("The folding steps were wrong for my model.")

        persistence.submit_feedback.assert_awaited_once_with(
            original_question="How do I fold it?",
            chatbot_response=reply.content,
            user_feedback="The folding steps were wrong for my model.",
        )
        assert manager.feedback.state is DialogState.CLOSED_ON_SUCCESS
        assert manager.active_feedback_target is None
        assert notifier.sent[-1].title == "Feedback submitted"

    async def test_failed_submit_keeps_dialog_open(
        self, manager: ConversationManager, persistence: AsyncMock
    ) -> None:
        reply = await self._conversation(manager)
        manager.open_feedback(reply.id)
        persistence.submit_feedback.side_effect = ApiError("db", "INTERNAL_ERROR", 500)

        with pytest.raises(PersistenceFailed):
            await manager.submit_feedback("This answer did not help me at all.")

        assert manager.feedback.state is DialogState.EDITING
        assert manager.feedback.draft == "This answer did not help me at all."


class TestRenameSession:
    async def test_rename(
        self,
        manager: ConversationManager,
        persistence: AsyncMock,
        notifier: RecordingNotifier,
    ) -> None:
        renamed = SESSION.model_copy(update={"title": "Battery"})
        persistence.rename_session.return_value = renamed

        await manager.rename_session("  Battery  ")

        persistence.rename_session.assert_awaited_once_with(SESSION.id, "Battery")
        assert manager.session == renamed
        assert manager.title_dialog.state is DialogState.CLOSED_ON_SUCCESS
        assert notifier.sent[-1].title == "Title updated"

    @pytest.mark.parametrize("title", ["   ", "x" * 101])
    async def test_invalid_title(
        self, manager: ConversationManager, persistence: AsyncMock, title: str
    ) -> None:
        with pytest.raises(ValidationFailed):
            await manager.rename_session(title)
        persistence.rename_session.assert_not_awaited()

    async def test_failure_keeps_old_title(
        self, manager: ConversationManager, persistence: AsyncMock
    ) -> None:
        persistence.rename_session.side_effect = ApiError("db", "INTERNAL_ERROR", 500)

        with pytest.raises(PersistenceFailed):
            await manager.rename_session("Battery")

        assert manager.session == SESSION
        assert manager.title_dialog.state is DialogState.EDITING


class TestOrdering:
    async def test_tied_timestamps_fall_back_to_id(
        self, persistence: AsyncMock, completion: AsyncMock
    ) -> None:
        persistence.get_session.return_value = SessionDetailResponse(
            session=SESSION,
            messages=[
                _message(3, "Second answer", False),
                _message(1, "Question", True),
                _message(2, "First answer", False),
            ],
        )
        m = ConversationManager(persistence, completion)

        await m.initialize(SESSION.id)

        assert [e.id for e in m.messages] == [
            PersistedId(1),
            PersistedId(2),
            PersistedId(3),
        ]

    async def test_concurrent_sends_persist_in_turn(
        self,
        manager: ConversationManager,
        persistence: AsyncMock,
        completion: AsyncMock,
    ) -> None:
        async def complete(prompt: str, **_: object) -> str:
            await asyncio.sleep(0)
            return f"reply to {prompt}"

        completion.complete.side_effect = complete

        await asyncio.gather(
            manager.send_message("first"), manager.send_message("second")
        )

        saved = [
            (c.kwargs["is_user"], c.kwargs["content"])
            for c in persistence.append_message.await_args_list
        ]
        assert saved == [
            (True, "first"),
            (False, "reply to first"),
            (True, "second"),
            (False, "reply to second"),
        ]
        assert [e.content for e in manager.messages[1:]] == [
            "first",
            "reply to first",
            "second",
            "reply to second",
        ]


class TestViewSwitch:
    async def test_reply_of_previous_session_not_rendered(
        self, manager: ConversationManager, persistence: AsyncMock, completion: AsyncMock
    ) -> None:
        release = asyncio.Event()

        async def complete(prompt: str, **_: object) -> str:
            await release.wait()
            return "reply for session 7"

        completion.complete.side_effect = complete
        other = SESSION.model_copy(update={"id": 8})

        sending = asyncio.create_task(manager.send_message("Where is my order?"))
        while completion.complete.await_count == 0:
            await asyncio.sleep(0)
        manager.detach()
        persistence.get_session.return_value = SessionDetailResponse(
            session=other, messages=[]
        )
        await manager.initialize(other.id)
        release.set()
        await sending

        assert manager.session == other
        assert [e.content for e in manager.messages] == [GREETING_TEXT]
        saved = [c.args[0] for c in persistence.append_message.await_args_list]
        assert saved == [SESSION.id, SESSION.id]


class TestAttachmentFeedback:
    async def test_attachment_only_question_uses_file_prompt(
        self, manager: ConversationManager, persistence: AsyncMock
    ) -> None:
        await manager.send_message("", Attachment(file_name="photo.png", content=b"png"))
        reply = manager.messages[-1]

        target = manager.open_feedback(reply.id)
        await manager.submit_feedback("The photo shows a cracked deck, not a battery.")

        assert target.question == file_prompt("photo.png")
        assert (
            persistence.submit_feedback.await_args.kwargs["original_question"]
            == file_prompt("photo.png")
        )


def _unauthorized() -> ApiError:
    return ApiError("Token has expired", "TOKEN_EXPIRED", 401)


class TestSignedOutMidSession:
    async def test_upload(
        self, manager: ConversationManager, persistence: AsyncMock
    ) -> None:
        persistence.upload_file.side_effect = _unauthorized()

        with pytest.raises(AuthRequired) as exc_info:
            await manager.send_message("", Attachment(file_name="a.pdf", content=b"%PDF"))

        assert exc_info.value.redirect == "/"

    async def test_message_save(
        self,
        manager: ConversationManager,
        persistence: AsyncMock,
        completion: AsyncMock,
        notifier: RecordingNotifier,
    ) -> None:
        persistence.append_message.side_effect = _unauthorized()

        with pytest.raises(AuthRequired):
            await manager.send_message("Hello")

        completion.complete.assert_not_awaited()
        assert notifier.sent == []
        assert manager.is_awaiting_response is False

    async def test_feedback(
        self, manager: ConversationManager, persistence: AsyncMock
    ) -> None:
        await manager.send_message("How do I fold it?")
        manager.open_feedback(manager.messages[-1].id)
        persistence.submit_feedback.side_effect = _unauthorized()

        with pytest.raises(AuthRequired):
            await manager.submit_feedback("The folding steps were wrong for my model.")

        assert manager.feedback.is_open

    async def test_rename(
        self, manager: ConversationManager, persistence: AsyncMock
    ) -> None:
        persistence.rename_session.side_effect = _unauthorized()

        with pytest.raises(AuthRequired):
            await manager.rename_session("Battery")

        assert manager.session == SESSION

    async def test_initialize(
        self, persistence: AsyncMock, completion: AsyncMock
    ) -> None:
        persistence.current_user.side_effect = _unauthorized()

        with pytest.raises(AuthRequired):
            await ConversationManager(persistence, completion).initialize(SESSION.id)
