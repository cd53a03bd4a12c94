"""Attachment upload endpoint."""

from typing import Annotated

from fastapi import APIRouter, Depends, File, UploadFile, status

from evolve_support.core.config import settings
from evolve_support.core.exceptions import FileTooLargeError
from evolve_support.dependencies import (
    CurrentUser,
    get_current_user,
    get_storage_service,
    require_role,
)
from evolve_support.schemas.file_schema import StoredFileResponse
from evolve_support.schemas.response_schema import ApiResponse, success_response
from evolve_support.services.storage_service import StorageService

router = APIRouter(
    prefix="/api/v1/files",
    tags=["files"],
    dependencies=[Depends(require_role("user", "admin"))],
)

StorageServiceDep = Annotated[StorageService, Depends(get_storage_service)]


@router.post(
    "",
    response_model=ApiResponse[StoredFileResponse],
    status_code=status.HTTP_201_CREATED,
)
async def upload_file(
    service: StorageServiceDep,
    file: UploadFile = File(...),
    current_user: CurrentUser = Depends(get_current_user),
) -> dict:
    """Store an attachment and return its public URL."""
    limit = settings.file_upload.max_file_size_bytes
    if file.size is not None and file.size > limit:
        raise FileTooLargeError(settings.file_upload.max_file_size_mb)

    # Read one byte past the limit so oversized streams are still detected.
    content = await file.read(limit + 1)
    result = await service.store(
        user_id=current_user.id,
        file_name=file.filename or "upload",
        content=content,
    )
    return success_response(result, status=201)
