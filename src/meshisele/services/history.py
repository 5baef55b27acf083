"""History filtering, aggregation and persistence."""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Protocol, TypeVar

from meshisele.domain.criteria import FilterCriteria
from meshisele.domain.enums import (
    HistoryFilterType,
    HistorySortOption,
    HistoryTab,
    ResultType,
)
from meshisele.domain.history import (
    GlobalRating,
    HistoryEntry,
    HistoryFilter,
    HistoryStats,
    RatingSummary,
)

if TYPE_CHECKING:
    from meshisele.services.ratings import RatingService

_T = TypeVar("_T")

MAX_RATING = 5.0

_logger = logging.getLogger(__name__)


class HistoryRepository(Protocol):
    """Persistence interface for a user's decision history."""

    def fetch_history_entries(self, user_id: str) -> list[HistoryEntry]:
        """Return a user's entries, newest first."""

    def get_history_entry(self, user_id: str, entry_id: str) -> HistoryEntry | None:
        """Return a single entry, if present."""

    def save_history_entry(self, entry: HistoryEntry, user_id: str) -> None:
        """Persist a new entry."""

    def update_history_entry_rating(
        self, entry_id: str, user_id: str, rating: float
    ) -> None:
        """Set the rating of an entry."""

    def update_history_entry_comment(
        self, entry_id: str, user_id: str, comment: str
    ) -> None:
        """Set the user comment of an entry."""

    def delete_history_entry(self, entry_id: str, user_id: str) -> None:
        """Delete a single entry."""

    def clear_all_history(self, user_id: str) -> None:
        """Delete every entry of a user."""


def filter_history(
    entries: Iterable[HistoryEntry], history_filter: HistoryFilter
) -> list[HistoryEntry]:
    """Apply the history filters and return entries in the requested order."""
    selected = [
        entry
        for entry in entries
        if _matches_kind(entry, history_filter.kind)
        and _matches_fields(entry, history_filter)
    ]
    return sort_history(selected, history_filter.sort)


def _matches_kind(entry: HistoryEntry, kind: HistoryFilterType) -> bool:
    if kind is HistoryFilterType.DECIDED:
        return entry.is_decided
    if kind is HistoryFilterType.RECIPES:
        return entry.result_type is ResultType.RECIPE
    if kind is HistoryFilterType.RESTAURANTS:
        return entry.result_type is ResultType.RESTAURANT
    if kind is HistoryFilterType.RATED:
        return entry.rating is not None
    if kind is HistoryFilterType.UNRATED:
        return entry.rating is None
    return True


def _matches_fields(entry: HistoryEntry, history_filter: HistoryFilter) -> bool:
    if history_filter.meal_mode is not None:
        if entry.meal_mode is not history_filter.meal_mode:
            return False
    if history_filter.diet_filter is not None:
        if entry.diet_filter is not history_filter.diet_filter:
            return False
    if history_filter.min_rating is not None:
        if entry.rating is None or entry.rating < history_filter.min_rating:
            return False
    timestamp = _as_utc(entry.timestamp)
    if history_filter.start is not None and timestamp < _as_utc(history_filter.start):
        return False
    if history_filter.end is not None and timestamp > _as_utc(history_filter.end):
        return False
    return True


def _as_utc(value: datetime) -> datetime:
    # Naive bounds from query strings are read as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def sort_history(
    entries: list[HistoryEntry], sort: HistorySortOption
) -> list[HistoryEntry]:
    """Sort entries; rating order puts unrated entries last, newest first on ties."""
    if sort is HistorySortOption.DATE_ASCENDING:
        return sorted(entries, key=lambda entry: entry.timestamp)
    newest_first = sorted(entries, key=lambda entry: entry.timestamp, reverse=True)
    if sort is HistorySortOption.RATING:
        return sorted(
            newest_first,
            key=lambda entry: (
                entry.rating is None,
                -entry.rating if entry.rating is not None else 0.0,
            ),
        )
    return newest_first


def average_rating(
    item_id: str, item_type: ResultType, ratings: Iterable[GlobalRating]
) -> RatingSummary:
    """Return the mean and count of the ratings for one item."""
    values = [
        rating.rating
        for rating in ratings
        if rating.item_id == item_id and rating.item_type is item_type
    ]
    if not values:
        return RatingSummary(mean=0.0, count=0)
    return RatingSummary(mean=sum(values) / len(values), count=len(values))


def entries_for_tab(
    entries: Iterable[HistoryEntry], tab: HistoryTab
) -> list[HistoryEntry]:
    """Partition entries for the cuisine and restaurant tabs."""
    if tab is HistoryTab.CUISINE:
        return [
            entry
            for entry in entries
            if entry.result_type in {ResultType.RECIPE, ResultType.EATING_OUT_MEAL}
        ]
    return [
        entry
        for entry in entries
        if entry.result_type is ResultType.RESTAURANT and entry.is_decided
    ]


def search_history(entries: Iterable[HistoryEntry], query: str) -> list[HistoryEntry]:
    """Case-insensitive search over the selections and result name of entries."""
    entries = list(entries)
    needle = query.strip().lower()
    if not needle:
        return entries
    return [entry for entry in entries if needle in _search_text(entry)]


def _search_text(entry: HistoryEntry) -> str:
    parts = [
        entry.diet_filter.value,
        entry.diet_filter.display_name,
        entry.meal_mode.value,
        entry.meal_mode.display_name,
        entry.result_name,
        *entry.specified_ingredients,
    ]
    if entry.cuisine is not None:
        parts.extend([entry.cuisine.value, entry.cuisine.display_name])
    return "\n".join(parts).lower()


def history_stats(entries: Iterable[HistoryEntry]) -> HistoryStats:
    """Compute the counters shown above the history list."""
    entries = list(entries)
    ratings = [entry.rating for entry in entries if entry.rating is not None]
    diet_counts = Counter(entry.diet_filter for entry in entries)
    cuisine_counts = Counter(
        entry.cuisine for entry in entries if entry.cuisine is not None
    )
    return HistoryStats(
        total_decisions=len(entries),
        recipe_decisions=sum(
            1 for entry in entries if entry.result_type is ResultType.RECIPE
        ),
        restaurant_decisions=sum(
            1 for entry in entries if entry.result_type is ResultType.RESTAURANT
        ),
        average_rating=sum(ratings) / len(ratings) if ratings else 0.0,
        most_used_diet_filter=_most_common(diet_counts),
        most_used_cuisine=_most_common(cuisine_counts),
    )


def _most_common(counts: Counter[_T]) -> _T | None:
    if not counts:
        return None
    return counts.most_common(1)[0][0]


def criteria_from_entry(entry: HistoryEntry) -> FilterCriteria:
    """Rebuild the selections of a past decision so it can be decided again."""
    return FilterCriteria(
        meal_mode=entry.meal_mode,
        is_surprise=entry.is_surprise,
        diet_filter=entry.diet_filter,
        cuisine=entry.cuisine,
        specified_ingredients=frozenset(entry.specified_ingredients),
        excluded_ingredients=frozenset(entry.excluded_ingredients),
        excluded_allergens=frozenset(entry.excluded_allergens),
        servings_count=max(entry.servings_count, 1),
        budget_range=entry.budget_range,
        cook_time_constraint=entry.cook_time_constraint,
    )


def export_history_text(entries: Iterable[HistoryEntry]) -> str:
    """Render entries as a plain-text export."""
    lines = ["MeshiSele History Export", "========================", ""]
    for entry in entries:
        lines.append(f"Date: {entry.timestamp:%Y-%m-%d %H:%M}")
        lines.append(f"Mode: {entry.meal_mode.display_name}")
        lines.append(f"Result: {entry.result_name}")
        lines.append(f"Diet: {entry.diet_filter.value}")
        if entry.cuisine is not None:
            lines.append(f"Cuisine: {entry.cuisine.display_name}")
        if entry.specified_ingredients:
            lines.append(f"Ingredients: {', '.join(entry.specified_ingredients)}")
        if entry.excluded_ingredients:
            lines.append(f"Excluded: {', '.join(entry.excluded_ingredients)}")
        rating = f"{entry.rating:.1f}" if entry.rating is not None else "未評価"
        lines.append(f"Rating: {rating}")
        lines.append("")
    return "\n".join(lines)


@dataclass
class HistoryService:
    """Application service for a user's decision history."""

    repository: HistoryRepository
    rating_service: RatingService | None = None

    def list_entries(
        self,
        user_id: str,
        history_filter: HistoryFilter | None = None,
        tab: HistoryTab | None = None,
        query: str | None = None,
    ) -> list[HistoryEntry]:
        """Return filtered entries for a user."""
        entries = self.repository.fetch_history_entries(user_id)
        if tab is not None:
            entries = entries_for_tab(entries, tab)
        if query:
            entries = search_history(entries, query)
        return filter_history(entries, history_filter or HistoryFilter())

    def stats(self, user_id: str) -> HistoryStats:
        """Return summary counters for a user's history."""
        return history_stats(self.repository.fetch_history_entries(user_id))

    def export_text(self, user_id: str) -> str:
        """Return the user's history as plain text, newest first."""
        return export_history_text(self.repository.fetch_history_entries(user_id))

    def rate_entry(
        self,
        user_id: str,
        entry_id: str,
        rating: float | None = None,
        comment: str | None = None,
    ) -> HistoryEntry:
        """Update the rating and comment of an entry.

        A new rating is also recorded as the user's global rating of the item.

        Raises:
            KeyError: when the entry does not exist.
            ValueError: when the rating is outside 0-5.
        """
        entry = self.repository.get_history_entry(user_id, entry_id)
        if entry is None:
            raise KeyError(entry_id)
        if rating is not None:
            validate_rating(rating)
            self.repository.update_history_entry_rating(entry_id, user_id, rating)
        if comment is not None:
            self.repository.update_history_entry_comment(entry_id, user_id, comment)
        if rating is not None and self.rating_service is not None:
            self.rating_service.rate(
                item_id=entry.result_id,
                item_type=entry.result_type,
                user_id=user_id,
                rating=rating,
                comment=comment if comment is not None else entry.user_comment,
            )
        updated = self.repository.get_history_entry(user_id, entry_id)
        return updated or entry

    def redo_criteria(self, user_id: str, entry_id: str) -> FilterCriteria:
        """Return the selections of a past entry for deciding again."""
        entry = self.repository.get_history_entry(user_id, entry_id)
        if entry is None:
            raise KeyError(entry_id)
        return criteria_from_entry(entry)

    def delete_entry(self, user_id: str, entry_id: str) -> None:
        """Delete one entry. Global ratings are kept."""
        self.repository.delete_history_entry(entry_id, user_id)

    def clear(self, user_id: str) -> None:
        """Delete every entry of a user."""
        self.repository.clear_all_history(user_id)
        _logger.info("Cleared history for user %s", user_id)


def validate_rating(rating: float) -> None:
    """Ratings are stars between 0 and 5 inclusive."""
    if not 0.0 <= rating <= MAX_RATING:
        raise ValueError(f"Rating must be between 0 and 5, got {rating}")
