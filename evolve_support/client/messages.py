"""In-memory chat transcript entries.

Entries that exist only on this client carry a :class:`LocalId`; entries that
came back from the backend carry a :class:`PersistedId`. The two id spaces
never compare equal, so a transient entry cannot be mistaken for a stored one.
"""

import itertools
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime

from evolve_support.schemas.session_schema import MessageResponse

GREETING_TEXT = (
    "Hi! I'm Evolve, your AI assistant. How can I help you today? "
    "You can ask me anything, upload a file, or choose from the common "
    "questions below."
)

FALLBACK_TEXT = (
    "Sorry, I'm having trouble responding right now. Please try again later "
    "or contact our support team for immediate assistance."
)

MISSING_QUESTION_TEXT = "Previous question not found"

MAX_ATTACHMENT_BYTES = 10 * 1024 * 1024


def file_prompt(file_name: str) -> str:
    """Prompt sent to the assistant when only a file was attached."""
    return f"I've uploaded a file named {file_name}. Can you help me with it?"


@dataclass(frozen=True)
class LocalId:
    token: str


@dataclass(frozen=True)
class PersistedId:
    value: int


MessageId = LocalId | PersistedId

WELCOME_ID = LocalId("welcome")

_local_counter = itertools.count(1)


def next_local_id() -> LocalId:
    """A fresh process-unique id for an optimistic entry."""
    return LocalId(f"local-{next(_local_counter)}")


@dataclass(frozen=True)
class Attachment:
    """A file picked by the user, not yet uploaded."""

    file_name: str
    content: bytes
    content_type: str | None = None

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class ChatEntry:
    """One message of the open session as held in memory."""

    id: MessageId
    is_user: bool
    content: str
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    file_url: str | None = None
    file_name: str | None = None

    @property
    def is_greeting(self) -> bool:
        return self.id == WELCOME_ID

    @property
    def is_persisted(self) -> bool:
        return isinstance(self.id, PersistedId)

    @classmethod
    def from_response(cls, message: MessageResponse) -> "ChatEntry":
        return cls(
            id=PersistedId(message.id),
            is_user=message.is_user,
            content=message.content,
            created_at=message.created_at,
            file_url=message.file_url,
            file_name=message.file_name,
        )

    def accepted_as(self, message: MessageResponse) -> "ChatEntry":
        """This entry re-keyed to the row the backend stored for it."""
        return replace(self, id=PersistedId(message.id), created_at=message.created_at)


def greeting() -> ChatEntry:
    """The synthetic, never-persisted welcome entry of an empty session."""
    return ChatEntry(id=WELCOME_ID, is_user=False, content=GREETING_TEXT)
