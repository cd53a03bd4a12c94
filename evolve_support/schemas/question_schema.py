"""Domain question API schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class DomainQuestionResponse(BaseModel):
    """A suggested question."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    question: str
    category: str | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class QuestionRequest(BaseModel):
    """Create or replace a domain question."""

    model_config = ConfigDict(str_strip_whitespace=True)

    question: str = Field(..., min_length=1, max_length=500)
    category: str | None = Field(default=None, max_length=100)
    is_active: bool = True


class ToggleActiveRequest(BaseModel):
    """Set the active flag of a domain question."""

    is_active: bool
