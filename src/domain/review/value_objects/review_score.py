"""
ReviewScore Value Object

A reviewer's score for one application: an integer from 1 (weakest) to 10
(strongest).

Architecture Notes:
    - Value Object (immutable, defined by value)
    - Validation happens once, in __post_init__
    - Part of review subdomain, no external dependencies
"""

from dataclasses import dataclass
from typing import Final

from src.domain.shared.exceptions import InvalidScoreError

MIN_SCORE: Final[int] = 1
MAX_SCORE: Final[int] = 10


@dataclass(frozen=True)
class ReviewScore:
    """
    Immutable integer score in [MIN_SCORE, MAX_SCORE].

    bool is rejected even though it subclasses int, and so are floats with an
    integral value: the score is an integer by type, not by coincidence.

    Attributes:
        value: Score between 1 and 10 inclusive

    Examples:
        >>> ReviewScore(7).value
        7
        >>> ReviewScore(11)
        Traceback (most recent call last):
        ...
        InvalidScoreError: InvalidScoreError: Score must be between 1 and 10, got 11
    """

    value: int

    def __post_init__(self) -> None:
        """
        Validate score after initialization.

        Raises:
            InvalidScoreError: If value is not an int or outside [1, 10]
        """
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise InvalidScoreError(
                f"Score must be an integer, got {type(self.value).__name__}",
                score=self.value,
            )

        if not (MIN_SCORE <= self.value <= MAX_SCORE):
            raise InvalidScoreError(
                f"Score must be between {MIN_SCORE} and {MAX_SCORE}, got {self.value}",
                score=self.value,
            )

    def __int__(self) -> int:
        return self.value
