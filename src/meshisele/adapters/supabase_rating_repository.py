"""Supabase repository for global ratings."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from meshisele.adapters.documents import parse_global_rating
from meshisele.domain.enums import ResultType
from meshisele.domain.errors import MalformedRecordError
from meshisele.domain.history import GlobalRating
from meshisele.services.ratings import RatingRepository

_logger = logging.getLogger(__name__)


@dataclass
class SupabaseRatingRepository(RatingRepository):
    """Supabase implementation for ratings shared across users."""

    client: Client

    def fetch_global_ratings(
        self, item_id: str, item_type: ResultType
    ) -> list[GlobalRating]:
        """Return all ratings of an item."""
        response = (
            self.client.table("globalRatings")
            .select("*")
            .eq("itemId", item_id)
            .eq("itemType", item_type.value)
            .execute()
        )
        ratings = []
        for row in response.data or []:
            try:
                ratings.append(parse_global_rating(row))
            except MalformedRecordError as exc:
                _logger.warning("Skipping rating row: %s", exc)
        return ratings

    def save_global_rating(
        self,
        item_id: str,
        item_type: ResultType,
        user_id: str,
        rating: float,
        comment: str | None,
    ) -> None:
        """Upsert the user's rating; one row per user and item."""
        response = (
            self.client.table("globalRatings")
            .upsert(
                {
                    "id": f"{user_id}_{item_id}",
                    "itemId": item_id,
                    "itemType": item_type.value,
                    "userId": user_id,
                    "rating": rating,
                    "comment": comment or "",
                    "timestamp": datetime.now(tz=UTC).isoformat(),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to save global rating")
