"""Domain errors for meal decisions."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from meshisele.domain.criteria import FilterCriteria


class EmptyCandidatePoolError(ValueError):
    """Raised when no candidate survives filtering."""

    def __init__(self, criteria: FilterCriteria | None = None) -> None:
        super().__init__("No candidates match the selected filters")
        self.criteria = criteria


class InvalidCustomBudgetError(ValueError):
    """Raised when a custom budget range has non-positive or inverted bounds."""

    def __init__(self, min_value: int, max_value: int) -> None:
        super().__init__(
            f"Invalid custom budget: min={min_value} max={max_value}"
        )
        self.min_value = min_value
        self.max_value = max_value


class MalformedRecordError(ValueError):
    """Raised when a stored document cannot be turned into a domain record."""

    def __init__(self, collection: str, reason: str) -> None:
        super().__init__(f"Malformed {collection} record: {reason}")
        self.collection = collection
        self.reason = reason
