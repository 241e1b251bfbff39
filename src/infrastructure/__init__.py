"""
Infrastructure Layer - External Dependencies

Implements technical capabilities that support the Domain and Application
Layers: the entity store backends and blob storage.

Architecture:
    - Implements Domain repository interfaces (EntityStoreProtocol)
    - Implements Application Layer protocols (BlobStorageProtocol)
    - Depends on external libraries (redis)
    - No Domain business logic (only technical implementations)

Modules:
    - persistence: In-memory and Redis entity stores
    - file_storage: Local filesystem blob storage

Usage:
    >>> from src.infrastructure import InMemoryEntityStore, LocalBlobStorage
    >>> from src.infrastructure.persistence.redis import RedisEntityStore
"""

from .file_storage import LocalBlobStorage
from .persistence import InMemoryEntityStore, RedisEntityStore, create_redis_client

__all__ = [
    "InMemoryEntityStore",
    "RedisEntityStore",
    "create_redis_client",
    "LocalBlobStorage",
]
