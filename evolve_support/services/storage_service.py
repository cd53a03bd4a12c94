"""Object storage for chat attachments on the local filesystem."""

import asyncio
import time
from pathlib import Path, PurePosixPath

import structlog

from evolve_support.core.exceptions import FileTooLargeError
from evolve_support.core.settings import FileUploadConfig
from evolve_support.schemas.file_schema import StoredFileResponse

logger = structlog.get_logger()

DEFAULT_EXTENSION = "bin"


def build_storage_key(user_id: int, file_name: str, now_ms: int | None = None) -> str:
    """Object key ``{user_id}/{epoch_millis}.{ext}`` for an upload."""
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    suffix = PurePosixPath(file_name).suffix.lstrip(".").lower()
    return f"{user_id}/{now_ms}.{suffix or DEFAULT_EXTENSION}"


class StorageService:
    """Stores uploads below the configured root and returns public URLs."""

    def __init__(self, config: FileUploadConfig) -> None:
        self._config = config

    @property
    def root(self) -> Path:
        return self._config.storage_path

    async def store(
        self, user_id: int, file_name: str, content: bytes
    ) -> StoredFileResponse:
        """Write one file. Oversized payloads are rejected before writing."""
        if len(content) > self._config.max_file_size_bytes:
            raise FileTooLargeError(self._config.max_file_size_mb)

        key = build_storage_key(user_id, file_name)
        target = self.root / key

        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._write, target, content)

        logger.info(
            "File stored", user_id=user_id, key=key, size=len(content)
        )
        return StoredFileResponse(
            url=f"{self._config.files_url}/{key}",
            file_name=file_name,
        )

    @staticmethod
    def _write(target: Path, content: bytes) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)
