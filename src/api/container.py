"""
Review Pipeline Container

Composition root: builds the entity store, blob storage and every
application service once per process, and tears them down on shutdown.

Responsibility:
    - Choose the entity store backend (ENTITY_STORE_BACKEND=memory|redis)
    - Wire application services to the store, blob storage and guard
    - Close the store (connections, live queries) on shutdown

Architecture Notes:
    - Part of API Layer (the only layer allowed to know every other layer)
    - Created in the FastAPI lifespan and kept on app.state.container
    - Tests build it directly around an InMemoryEntityStore
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import find_dotenv, load_dotenv

from src.application.ports.blob_storage import BlobStorageProtocol
from src.application.services import (
    ApplicationQueryService,
    ApplicationSubmissionService,
    DataExportService,
    RealtimeFeed,
    ReviewAggregator,
    StatusStateMachine,
    UserDirectoryService,
)
from src.domain.review.repositories.entity_store import EntityStoreProtocol
from src.domain.review.services.role_access_guard import RoleAccessGuard
from src.domain.review.services.stats_calculator import StatsCalculator
from src.infrastructure.file_storage import LocalBlobStorage
from src.infrastructure.persistence.memory import InMemoryEntityStore
from src.infrastructure.persistence.redis import RedisEntityStore, create_redis_client

logger = logging.getLogger(__name__)


@dataclass
class ReviewPipelineContainer:
    """
    Process-wide service graph.

    Examples:
        >>> container = ReviewPipelineContainer.from_env()
        >>> await container.users.create_profile("u1", "a@b.c", "Ada")
        >>> await container.close()
    """

    store: EntityStoreProtocol
    blob_storage: BlobStorageProtocol
    guard: RoleAccessGuard = field(default_factory=RoleAccessGuard)
    stats_calculator: StatsCalculator = field(default_factory=StatsCalculator)

    def __post_init__(self) -> None:
        self.state_machine = StatusStateMachine(self.store, self.guard)
        self.reviews = ReviewAggregator(self.store, self.state_machine)
        self.feed = RealtimeFeed(self.store, self.guard, self.stats_calculator)
        self.submissions = ApplicationSubmissionService(
            self.store, self.blob_storage, self.guard
        )
        self.queries = ApplicationQueryService(
            self.store, self.guard, self.stats_calculator
        )
        self.users = UserDirectoryService(self.store, self.guard)
        self.exports = DataExportService(self.store, self.guard, self.stats_calculator)

    @classmethod
    def from_env(cls, backend: Optional[str] = None) -> "ReviewPipelineContainer":
        """
        Build the container from environment configuration.

        Variables from a .env file in the working directory (or its parents)
        are loaded first; variables already set in the process win.

        Args:
            backend: "memory" or "redis" (default from env:
                ENTITY_STORE_BACKEND or "memory")

        Raises:
            ValueError: Unknown backend name
            StoreUnavailableError: Redis unreachable after retries
        """
        load_dotenv(find_dotenv(usecwd=True))

        backend = (backend or os.getenv("ENTITY_STORE_BACKEND", "memory")).lower()

        store: EntityStoreProtocol
        if backend == "memory":
            store = InMemoryEntityStore()
        elif backend == "redis":
            store = RedisEntityStore(create_redis_client())
        else:
            raise ValueError(
                f"Unknown ENTITY_STORE_BACKEND '{backend}' (expected 'memory' or 'redis')"
            )

        logger.info(f"Review pipeline container created with '{backend}' entity store")
        return cls(store=store, blob_storage=LocalBlobStorage())

    async def close(self) -> None:
        await self.store.close()
        logger.info("Review pipeline container closed")
