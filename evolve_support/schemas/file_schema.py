"""Uploaded file schemas."""

from pydantic import BaseModel, ConfigDict


class StoredFileResponse(BaseModel):
    """Public location of an uploaded file."""

    model_config = ConfigDict(frozen=True)

    url: str
    file_name: str
