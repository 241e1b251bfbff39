"""
API Layer - FastAPI Presentation Layer

Responsibility:
    HTTP and WebSocket interface for the review pipeline. Handles requests,
    responses and identity resolution. No business logic.

Contains:
    - FastAPI routers (users, applications, reviews, files, dashboard)
    - Request/Response models (Pydantic)
    - Dependency injection setup (container, current user)
    - Middleware configuration (CORS, logging)

Does NOT contain:
    - Business logic (belongs to Domain layer)
    - Orchestration (belongs to Application layer)
    - Store operations (belongs to Infrastructure layer)
"""
