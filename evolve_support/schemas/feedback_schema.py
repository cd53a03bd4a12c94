"""Feedback (user query) API schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

FEEDBACK_MIN_LENGTH = 10

FeedbackStatus = Literal["pending", "reviewed", "resolved"]


class CreateFeedbackRequest(BaseModel):
    """Feedback on one chatbot answer."""

    model_config = ConfigDict(str_strip_whitespace=True)

    original_question: str = Field(..., min_length=1, max_length=20000)
    chatbot_response: str = Field(..., min_length=1, max_length=20000)
    user_feedback: str = Field(
        ...,
        min_length=FEEDBACK_MIN_LENGTH,
        max_length=5000,
        description="At least 10 characters",
    )


class FeedbackResponse(BaseModel):
    """A stored feedback record."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    original_question: str
    chatbot_response: str
    user_feedback: str
    status: FeedbackStatus
    created_at: datetime
    updated_at: datetime
