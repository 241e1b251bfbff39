"""
Domain Layer Exceptions

Typed failures of the review-workflow engine. Every failure the core can
report to a caller is a DomainException subclass, so Application and API
layers can handle the whole family with a single except clause and map each
concrete type to its own response.

Responsibility:
    - Base exception class for domain errors
    - One exception per failure kind of the review pipeline
    - Carry structured context (status, role, ids) for logging and HTTP mapping

Taxonomy:
    - InvalidTransitionError: illegal status change attempted
    - ForbiddenError: role lacks permission for the requested action
    - InvalidScoreError: review score outside [1, 10] or not an integer
    - NotFoundError: referenced application/review/user id absent
    - StoreUnavailableError: I/O failure from EntityStore or BlobStorage
    - WriteConflictError: conditional store write lost against a concurrent write

None of these are retried by the core. Callers may layer retry around
StoreUnavailableError.
"""

from typing import Any


class DomainException(Exception):
    """
    Base exception for all review pipeline errors.

    Usage:
        - Catch this in Application Layer to handle all domain errors
        - API Layer converts concrete subclasses to HTTP status codes

    Examples:
        >>> raise DomainException("Business rule violation")

        >>> try:
        ...     await state_machine.apply(application, target, role)
        ... except DomainException as e:
        ...     logger.error(f"Domain error: {e}")
    """

    def __init__(self, message: str) -> None:
        """
        Initialize domain exception with error message.

        Args:
            message: Human-readable error description
        """
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        """String representation of the exception."""
        return f"{self.__class__.__name__}: {self.message}"

    def __repr__(self) -> str:
        """Developer-friendly representation."""
        return f"{self.__class__.__name__}(message={self.message!r})"


class InvalidTransitionError(DomainException):
    """
    Raised when an application status change is not an edge of the status graph.

    This exception is raised when:
    - Target status equals the current status
    - Current status is terminal (accepted, rejected)
    - Target status is not reachable (e.g. in-review -> pending)
    - The stored status changed between validation and write

    Examples:
        >>> raise InvalidTransitionError(
        ...     "Cannot move application from accepted to pending",
        ...     current_status="accepted",
        ...     target_status="pending",
        ... )
    """

    def __init__(
        self,
        message: str,
        current_status: str | None = None,
        target_status: str | None = None,
    ) -> None:
        """
        Initialize transition error.

        Args:
            message: Error description
            current_status: Status the application had (optional)
            target_status: Status that was requested (optional)
        """
        self.current_status = current_status
        self.target_status = target_status
        super().__init__(message)


class ForbiddenError(DomainException):
    """
    Raised when the acting role is not allowed to perform an action.

    Examples:
        >>> raise ForbiddenError(
        ...     "Applicants cannot change application status",
        ...     role="applicant",
        ...     action="transition",
        ... )
    """

    def __init__(
        self, message: str, role: str | None = None, action: str | None = None
    ) -> None:
        """
        Initialize permission error.

        Args:
            message: Error description
            role: Role that attempted the action (optional)
            action: Action or view that was denied (optional)
        """
        self.role = role
        self.action = action
        super().__init__(message)


class InvalidScoreError(DomainException):
    """
    Raised when a review score is not an integer in the range [1, 10].

    Examples:
        >>> raise InvalidScoreError("Score must be between 1 and 10, got 11", score=11)
    """

    def __init__(self, message: str, score: Any = None) -> None:
        """
        Initialize score validation error.

        Args:
            message: Error description
            score: Offending score value (optional)
        """
        self.score = score
        super().__init__(message)


class NotFoundError(DomainException):
    """
    Raised when a referenced entity does not exist in the store.

    Examples:
        >>> raise NotFoundError(
        ...     "Application abc123 not found",
        ...     collection="applications",
        ...     entity_id="abc123",
        ... )
    """

    def __init__(
        self,
        message: str,
        collection: str | None = None,
        entity_id: str | None = None,
    ) -> None:
        """
        Initialize not found error.

        Args:
            message: Error description
            collection: Collection that was searched (optional)
            entity_id: Missing identifier (optional)
        """
        self.collection = collection
        self.entity_id = entity_id
        super().__init__(message)


class StoreUnavailableError(DomainException):
    """
    Raised when the entity store or blob storage fails with an I/O error.

    Adapters wrap their driver exceptions (RedisError, OSError) in this type
    so the core never depends on a concrete storage library.

    Examples:
        >>> raise StoreUnavailableError(
        ...     "Entity store unavailable",
        ...     original_error=ConnectionError("Connection refused"),
        ... )
    """

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        """
        Initialize store error.

        Args:
            message: Error description
            original_error: Underlying driver exception (optional)
        """
        self.original_error = original_error

        if original_error:
            detailed_message = (
                f"{message} | Original error: "
                f"{type(original_error).__name__}: {original_error}"
            )
            super().__init__(detailed_message)
        else:
            super().__init__(message)


class WriteConflictError(DomainException):
    """
    Raised by a store when a conditional update's precondition does not hold.

    StatusStateMachine converts this into InvalidTransitionError, since the
    only precondition it writes with is "status is still what I validated".
    """

    def __init__(
        self,
        message: str,
        collection: str | None = None,
        entity_id: str | None = None,
    ) -> None:
        self.collection = collection
        self.entity_id = entity_id
        super().__init__(message)
