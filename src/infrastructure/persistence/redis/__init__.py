"""
Redis Infrastructure Module

Redis-based entity store.

Exports:
    - RedisEntityStore: EntityStoreProtocol over Redis strings, sets and pub/sub
    - create_redis_client: Build a Redis client with PING retry
    - health_check: Check Redis health with PING test
"""

from .connection import create_redis_client, health_check
from .entity_store import RedisEntityStore

__all__ = [
    "RedisEntityStore",
    "create_redis_client",
    "health_check",
]
