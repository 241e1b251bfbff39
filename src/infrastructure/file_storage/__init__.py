"""
File Storage Infrastructure Module

Blob storage for uploaded application documents.

Exports:
    - LocalBlobStorage: Filesystem blob storage (implements BlobStorageProtocol)
"""

from .local_blob_storage import LocalBlobStorage

__all__ = ["LocalBlobStorage"]
