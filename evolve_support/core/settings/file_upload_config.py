"""File upload configuration."""

from pathlib import Path

from pydantic import BaseModel


class FileUploadConfig(BaseModel, frozen=True):
    """File upload and object storage settings."""

    max_file_size_mb: int
    storage_path: Path
    public_base_url: str

    @property
    def max_file_size_bytes(self) -> int:
        """Get maximum file size in bytes."""
        return self.max_file_size_mb * 1024 * 1024

    @property
    def files_url(self) -> str:
        """Base URL under which stored files are publicly served."""
        return f"{self.public_base_url.rstrip('/')}/files"
