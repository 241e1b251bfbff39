"""
BlobStorage Port

Protocol for the external blob storage the applicant's documents are
uploaded to. The core never reads blobs back: it only keeps the returned URL
strings on the Application record.
"""

from typing import Callable, Optional, Protocol

ProgressCallback = Callable[[float], None]


class BlobStorageProtocol(Protocol):
    """
    Upload bytes, report progress, return a retrievable URL.

    Implemented in Infrastructure Layer:
        - LocalBlobStorage: local filesystem directory

    Error contract:
        I/O failures surface as StoreUnavailableError.
    """

    async def upload(
        self,
        path: str,
        data: bytes,
        on_progress: Optional[ProgressCallback] = None,
    ) -> str:
        """
        Store ``data`` under ``path`` and return its URL.

        Args:
            path: Storage path, e.g. "applications/1718000000000-cv.pdf"
            data: Raw file bytes
            on_progress: Called with the uploaded percentage (0-100), ending at 100

        Returns:
            URL under which the blob can be retrieved
        """
        ...
