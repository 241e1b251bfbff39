"""
Application Layer Ports (Interfaces)

Contains Protocol definitions for dependency inversion.
Infrastructure Layer implements these protocols.
"""

from src.application.ports.blob_storage import BlobStorageProtocol, ProgressCallback

__all__ = ["BlobStorageProtocol", "ProgressCallback"]
