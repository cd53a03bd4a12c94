"""Chat session and message API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from evolve_support.models.chat_session import TITLE_MAX_LENGTH


class SessionSummary(BaseModel):
    """Single session entry in the history list."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    title: str
    message_count: int = 0
    last_message: str | None = None
    created_at: datetime
    updated_at: datetime


class SessionListResponse(BaseModel):
    """Paginated session list with cursor metadata."""

    model_config = ConfigDict(frozen=True)

    sessions: list[SessionSummary]
    next_cursor: str | None = None
    has_next: bool = False


class SessionResponse(BaseModel):
    """Session metadata."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    title: str
    created_at: datetime
    updated_at: datetime


class MessageResponse(BaseModel):
    """Single persisted message within a session."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    session_id: int
    is_user: bool
    content: str
    file_url: str | None = None
    file_name: str | None = None
    created_at: datetime


class SessionDetailResponse(BaseModel):
    """A session with all of its messages in chronological order."""

    model_config = ConfigDict(frozen=True)

    session: SessionResponse
    messages: list[MessageResponse]


class UpdateTitleRequest(BaseModel):
    """Request to rename a session."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH)


class CreateMessageRequest(BaseModel):
    """Request to append a message to a session."""

    content: str = Field(default="", max_length=20000)
    is_user: bool
    file_url: str | None = Field(default=None, max_length=1024)
    file_name: str | None = Field(default=None, max_length=255)

    @model_validator(mode="after")
    def require_content_or_file(self) -> "CreateMessageRequest":
        if not self.content.strip() and not self.file_url:
            raise ValueError("Message needs content or an attached file")
        return self
