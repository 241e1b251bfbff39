"""
Application Layer - Use Cases and Orchestration

Responsibility:
    Coordinates the flow of data between API and Domain layers.

Contains:
    - Ports (Protocols for external collaborators such as blob storage)
    - Application services (state machine, reviews, live feed, submission,
      user directory, export)
    - Service wiring lives in src/api/container.py (composition root)

Does NOT contain:
    - Domain business rules (belongs to Domain layer)
    - HTTP handling (belongs to API layer)
    - Infrastructure details (belongs to Infrastructure layer)
"""
