"""Global ratings shared across users."""

from dataclasses import dataclass
from typing import Protocol

from meshisele.domain.enums import ResultType
from meshisele.domain.history import GlobalRating, RatingSummary
from meshisele.services.history import average_rating, validate_rating


class RatingRepository(Protocol):
    """Persistence interface for global ratings."""

    def fetch_global_ratings(
        self, item_id: str, item_type: ResultType
    ) -> list[GlobalRating]:
        """Return every user's rating of an item."""

    def save_global_rating(
        self,
        item_id: str,
        item_type: ResultType,
        user_id: str,
        rating: float,
        comment: str | None,
    ) -> None:
        """Create or replace a user's rating of an item."""


@dataclass
class RatingService:
    """Service for recording and summarizing global ratings."""

    repository: RatingRepository

    def rate(
        self,
        item_id: str,
        item_type: ResultType,
        user_id: str,
        rating: float,
        comment: str | None = None,
    ) -> None:
        """Record the user's rating; a later rating replaces the earlier one."""
        validate_rating(rating)
        self.repository.save_global_rating(
            item_id, item_type, user_id, rating, comment
        )

    def summary(self, item_id: str, item_type: ResultType) -> RatingSummary:
        """Return the mean and count of all ratings of an item."""
        ratings = self.repository.fetch_global_ratings(item_id, item_type)
        return average_rating(item_id, item_type, ratings)
