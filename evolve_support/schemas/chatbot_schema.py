"""Chatbot (chat completion) request and response schemas."""

from pydantic import BaseModel, ConfigDict, Field


class ChatbotRequest(BaseModel):
    """Chat completion request as sent by the chat screens."""

    model_config = ConfigDict(populate_by_name=True)

    # Optional so that a missing message is answered with 400, not 422.
    message: str | None = None
    has_file: bool = Field(default=False, alias="hasFile")
    file_name: str | None = Field(default=None, alias="fileName")


class ChatbotResponse(BaseModel):
    """Generated assistant reply."""

    response: str
