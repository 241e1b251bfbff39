"""
ApplicationSubmissionService

Applicant-side write path: upload supporting documents to blob storage and
create the application record in status ``pending``.

Architecture Notes:
    - Part of Application Layer
    - Blob storage is an external collaborator (BlobStorageProtocol); only the
      returned URL strings are kept on the application
    - File format validation is not performed
"""

import logging
import time
from typing import Callable, Iterable, Optional

from src.application.ports.blob_storage import BlobStorageProtocol
from src.domain.review.entities.application import ApplicationStatus
from src.domain.review.entities.user import User
from src.domain.review.repositories.entity_store import Collection, EntityStoreProtocol
from src.domain.review.services.role_access_guard import Action, RoleAccessGuard
from src.domain.review.value_objects.applicant_details import (
    PersonalInfo,
    ProjectDetails,
)
from src.domain.shared.exceptions import NotFoundError

logger = logging.getLogger(__name__)

UploadProgressCallback = Callable[[str, float], None]


class ApplicationSubmissionService:
    """
    Submit applications and their attachments.

    Examples:
        >>> service = ApplicationSubmissionService(store, blob_storage, RoleAccessGuard())
        >>> urls = await service.upload_files([("cv.pdf", pdf_bytes)])
        >>> application_id = await service.submit("u1", personal_info, project_details, urls)
    """

    def __init__(
        self,
        store: EntityStoreProtocol,
        blob_storage: BlobStorageProtocol,
        guard: RoleAccessGuard,
    ) -> None:
        self.store = store
        self.blob_storage = blob_storage
        self.guard = guard

    async def submit(
        self,
        applicant_id: str,
        personal_info: PersonalInfo,
        project_details: ProjectDetails,
        file_urls: Iterable[str] = (),
    ) -> str:
        """
        Create a new application owned by ``applicant_id``.

        The status is always ``pending`` regardless of caller input.

        Returns:
            Store-assigned application id

        Raises:
            NotFoundError: applicant_id has no user profile
            ForbiddenError: The user's role may not submit applications
            StoreUnavailableError: Store I/O failure
        """
        record = await self.store.get_by_id(Collection.USERS, applicant_id)
        if record is None:
            raise NotFoundError(
                f"User {applicant_id} not found",
                collection=Collection.USERS.value,
                entity_id=applicant_id,
            )
        applicant = User.from_dict(record)
        self.guard.require_action(applicant.role, Action.SUBMIT_APPLICATION)

        application_id = await self.store.create(
            Collection.APPLICATIONS,
            {
                "applicant_id": applicant_id,
                "status": ApplicationStatus.PENDING.value,
                "personal_info": personal_info.to_dict(),
                "project_details": project_details.to_dict(),
                "file_urls": list(file_urls),
            },
        )
        logger.info(
            f"Application {application_id} submitted by {applicant_id}: "
            f"'{project_details.title}'"
        )
        return application_id

    async def upload_files(
        self,
        files: Iterable[tuple[str, bytes]],
        on_progress: Optional[UploadProgressCallback] = None,
    ) -> list[str]:
        """
        Upload attachments and return their URLs in input order.

        Each file goes to ``applications/{epoch_millis}-{filename}``.

        Args:
            files: (filename, content) pairs
            on_progress: Called with (filename, percent) as uploads progress

        Raises:
            StoreUnavailableError: Blob storage I/O failure (earlier uploads
                are not rolled back)
        """
        urls: list[str] = []
        for filename, content in files:
            path = self.storage_path(filename)

            def report(percent: float, _name: str = filename) -> None:
                if on_progress is not None:
                    on_progress(_name, percent)

            url = await self.blob_storage.upload(path, content, report)
            logger.info(f"Uploaded {filename} ({len(content)} bytes) to {path}")
            urls.append(url)
        return urls

    @staticmethod
    def storage_path(filename: str, now_ms: Optional[int] = None) -> str:
        """
        Blob path for an uploaded file.

        Examples:
            >>> ApplicationSubmissionService.storage_path("cv.pdf", now_ms=1700000000000)
            'applications/1700000000000-cv.pdf'

        Path separators and NUL bytes in the filename become underscores.
        """
        stamp = now_ms if now_ms is not None else int(time.time() * 1000)
        safe_name = filename.replace("/", "_").replace("\\", "_").replace("\x00", "_")
        return f"applications/{stamp}-{safe_name}"
