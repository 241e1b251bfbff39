"""
Local Blob Storage

Filesystem implementation of BlobStorageProtocol: stores uploaded
application documents under a base directory and returns URLs for them.

Storage Structure:
    Base directory: /tmp/review_pipeline/blobs/ (from env: BLOB_STORAGE_DIR)

    Uploads:
        {base_dir}/applications/{epoch_millis}-{original_filename}

    URLs:
        {BLOB_BASE_URL}/applications/{epoch_millis}-{original_filename}
        (BLOB_BASE_URL defaults to the file:// URI of the base directory)

Business Rules:
    - Paths are relative and may not escape the base directory
    - Files are written in chunks; progress is reported after each chunk and
      always ends at 100
    - Writes go to a .part file renamed on completion, so a failed upload
      leaves no partial blob under the final name

Architecture Notes:
    - Infrastructure Layer (file system operations)
    - Implements Application Layer BlobStorageProtocol
"""

import logging
import os
from pathlib import Path, PurePosixPath
from typing import Optional

from src.application.ports.blob_storage import ProgressCallback
from src.domain.shared.exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024


class LocalBlobStorage:
    """
    Store blobs on the local filesystem.

    Examples:
        >>> storage = LocalBlobStorage(base_dir="/tmp/blobs")
        >>> url = await storage.upload("applications/1-cv.pdf", b"%PDF...", print)
        100.0
        >>> url
        'file:///tmp/blobs/applications/1-cv.pdf'
    """

    def __init__(
        self,
        base_dir: Optional[str] = None,
        base_url: Optional[str] = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        """
        Args:
            base_dir: Root directory (default from env: BLOB_STORAGE_DIR)
            base_url: URL prefix of returned URLs (default from env:
                BLOB_BASE_URL, else file:// URI of base_dir)
            chunk_size: Bytes written between progress reports

        Raises:
            OSError: If base directory cannot be created
        """
        self.base_dir = Path(
            base_dir or os.getenv("BLOB_STORAGE_DIR", "/tmp/review_pipeline/blobs")
        ).resolve()
        self.base_dir.mkdir(parents=True, exist_ok=True)
        self.base_url = (
            base_url or os.getenv("BLOB_BASE_URL") or self.base_dir.as_uri()
        ).rstrip("/")
        self.chunk_size = chunk_size

    def _resolve(self, path: str) -> Path:
        relative = PurePosixPath(path)
        if (
            relative.is_absolute()
            or ".." in relative.parts
            or not relative.parts
            or "\x00" in path
        ):
            raise ValueError(f"Invalid blob path: {path!r}")
        return self.base_dir.joinpath(*relative.parts)

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{PurePosixPath(path).as_posix()}"

    async def upload(
        self,
        path: str,
        data: bytes,
        on_progress: Optional[ProgressCallback] = None,
    ) -> str:
        """
        Write ``data`` to ``path`` under the base directory.

        Raises:
            ValueError: Path is absolute, empty, holds a NUL byte or escapes
                the base directory
            StoreUnavailableError: Filesystem write failed
        """
        target = self._resolve(path)
        partial = target.with_name(target.name + ".part")
        total = len(data)

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with partial.open("wb") as handle:
                written = 0
                for offset in range(0, total, self.chunk_size):
                    chunk = data[offset : offset + self.chunk_size]
                    handle.write(chunk)
                    written += len(chunk)
                    if on_progress is not None and written < total:
                        on_progress(written / total * 100)
            partial.replace(target)

        except OSError as e:
            logger.error(f"Blob upload failed for {path}: {e}")
            partial.unlink(missing_ok=True)
            raise StoreUnavailableError(
                f"Could not store blob {path}", original_error=e
            ) from e

        if on_progress is not None:
            on_progress(100.0)

        logger.info(f"Stored blob {path} ({total} bytes)")
        return self.url_for(path)
