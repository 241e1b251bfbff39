"""
In-Memory Persistence Module

Exports:
    - InMemoryEntityStore: Single-process EntityStoreProtocol implementation
"""

from .in_memory_entity_store import InMemoryEntityStore

__all__ = ["InMemoryEntityStore"]
