"""
API Router for Document Uploads

Responsibility:
    HTTP interface for uploading application documents before submission.

Contains:
    - POST /files - Multipart upload, returns one URL per file (applicant)

Architecture Notes:
    - Part of API Layer (Presentation)
    - Delegates to ApplicationSubmissionService.upload_files
    - File type and size are not validated; the returned URLs are passed
      back in POST /applications as file_urls
"""

import logging

from fastapi import APIRouter, Depends, File, UploadFile, status
from pydantic import BaseModel, Field

from src.api.container import ReviewPipelineContainer
from src.api.dependencies import get_container, get_current_user
from src.api.schemas.common import ErrorResponse
from src.domain.review.entities.user import User
from src.domain.review.services.role_access_guard import Action

logger = logging.getLogger(__name__)


class UploadedFile(BaseModel):
    filename: str = Field(description="Original filename from user")
    url: str = Field(description="URL to reference in file_urls")
    size_bytes: int = Field(ge=0)


class UploadFilesResponse(BaseModel):
    """
    Response model for successful uploads.

    Attributes:
        files: One entry per uploaded file, in request order
    """

    files: list[UploadedFile]

    model_config = {
        "json_schema_extra": {
            "example": {
                "files": [
                    {
                        "filename": "proposal.pdf",
                        "url": "file:///tmp/review_pipeline/blobs/applications/1718000000000-proposal.pdf",
                        "size_bytes": 48213,
                    }
                ]
            }
        }
    }


router = APIRouter(
    prefix="/files",
    tags=["files"],
    responses={
        401: {"model": ErrorResponse, "description": "Unauthorized - Missing or unknown user"},
        403: {"model": ErrorResponse, "description": "Forbidden - Role not allowed"},
        503: {"model": ErrorResponse, "description": "Service Unavailable - Blob storage failure"},
    },
)


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=UploadFilesResponse,
    summary="Upload application documents (applicant)",
)
async def upload_files(
    files: list[UploadFile] = File(..., description="Documents to attach"),
    user: User = Depends(get_current_user),
    container: ReviewPipelineContainer = Depends(get_container),
) -> UploadFilesResponse:
    container.guard.require_action(user.role, Action.UPLOAD_FILES)

    payloads: list[tuple[str, bytes]] = []
    for upload in files:
        payloads.append((upload.filename or "upload", await upload.read()))

    def log_progress(filename: str, percent: float) -> None:
        logger.debug(f"Upload {filename} by {user.id}: {percent:.0f}%")

    urls = await container.submissions.upload_files(payloads, on_progress=log_progress)
    return UploadFilesResponse(
        files=[
            UploadedFile(filename=name, url=url, size_bytes=len(content))
            for (name, content), url in zip(payloads, urls)
        ]
    )
