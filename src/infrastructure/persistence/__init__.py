"""
Persistence Infrastructure Module

Entity store implementations.

Exports:
    From memory:
        - InMemoryEntityStore

    From redis:
        - RedisEntityStore
        - create_redis_client
"""

from .memory import InMemoryEntityStore
from .redis import RedisEntityStore, create_redis_client

__all__ = [
    "InMemoryEntityStore",
    "RedisEntityStore",
    "create_redis_client",
]
