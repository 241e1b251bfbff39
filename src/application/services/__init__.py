"""
Application Services

Responsibility:
    Orchestration services that coordinate domain policy with the entity
    store and blob storage.

Contains:
    - StatusStateMachine: validated, conditional status writes
    - ReviewAggregator: review creation + first-review transition
    - RealtimeFeed: live role-filtered application snapshots
    - ApplicationSubmissionService: applicant uploads and submission
    - ApplicationQueryService: role-filtered one-shot reads and stats
    - UserDirectoryService: user profiles and role reassignment
    - DataExportService: admin JSON export

Does NOT contain:
    - Domain business rules (use Domain services)
    - Direct infrastructure calls (use dependency injection)
"""

from src.application.services.application_queries import ApplicationQueryService
from src.application.services.application_submission import (
    ApplicationSubmissionService,
)
from src.application.services.data_export import DataExportService, ExportDocument
from src.application.services.realtime_feed import (
    FeedSnapshot,
    FeedSubscription,
    RealtimeFeed,
)
from src.application.services.review_aggregator import ReviewAggregator
from src.application.services.status_state_machine import StatusStateMachine
from src.application.services.user_directory import UserDirectoryService

__all__ = [
    "ApplicationQueryService",
    "ApplicationSubmissionService",
    "DataExportService",
    "ExportDocument",
    "FeedSnapshot",
    "FeedSubscription",
    "RealtimeFeed",
    "ReviewAggregator",
    "StatusStateMachine",
    "UserDirectoryService",
]
