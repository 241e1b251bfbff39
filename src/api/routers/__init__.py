"""
API Routers Package

Contains all FastAPI routers grouped by functionality.

Architecture Notes:
    - Part of API Layer (Presentation)
    - Routers are thin wrappers around Application Layer services
    - All routers follow dependency injection pattern (get_container,
      get_current_user)

Available Routers:
    - users_router: Profiles and role reassignment
    - applications_router: Submission, listing, status transitions, live feed
    - reviews_router: Review submission and listing
    - files_router: Document uploads
    - dashboard_router: Stats and data export
"""

from .applications import router as applications_router
from .dashboard import router as dashboard_router
from .files import router as files_router
from .reviews import router as reviews_router
from .users import router as users_router

__all__ = [
    "applications_router",
    "dashboard_router",
    "files_router",
    "reviews_router",
    "users_router",
]
