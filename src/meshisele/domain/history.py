"""Domain models for decision history and ratings."""

from dataclasses import dataclass
from datetime import datetime

from meshisele.domain.enums import (
    BudgetRange,
    CookTimeConstraint,
    Cuisine,
    DietFilter,
    HistoryFilterType,
    HistorySortOption,
    MealMode,
    ResultType,
)


@dataclass(frozen=True)
class HistoryEntry:
    """A finalized decision together with the selections that produced it."""

    id: str
    timestamp: datetime
    meal_mode: MealMode
    diet_filter: DietFilter
    cuisine: Cuisine | None
    is_surprise: bool
    specified_ingredients: tuple[str, ...]
    excluded_ingredients: tuple[str, ...]
    excluded_allergens: tuple[str, ...]
    servings_count: int
    budget_range: BudgetRange
    cook_time_constraint: CookTimeConstraint
    result_type: ResultType
    result_id: str
    result_name: str
    is_decided: bool = True
    rating: float | None = None
    user_comment: str | None = None
    restaurant_categories: tuple[str, ...] | None = None


@dataclass(frozen=True)
class GlobalRating:
    """One user's rating of an item, shared across all users."""

    item_id: str
    item_type: ResultType
    user_id: str
    rating: float
    comment: str | None = None
    timestamp: datetime | None = None

    @property
    def document_id(self) -> str:
        return f"{self.user_id}_{self.item_id}"


@dataclass(frozen=True)
class RatingSummary:
    """Mean rating and count; ``count == 0`` is the unrated signal."""

    mean: float
    count: int

    @property
    def is_rated(self) -> bool:
        return self.count > 0


@dataclass(frozen=True)
class HistoryFilter:
    """Filters and ordering applied to the history list."""

    kind: HistoryFilterType = HistoryFilterType.ALL
    meal_mode: MealMode | None = None
    diet_filter: DietFilter | None = None
    min_rating: float | None = None
    start: datetime | None = None
    end: datetime | None = None
    sort: HistorySortOption = HistorySortOption.DATE_DESCENDING


@dataclass(frozen=True)
class HistoryStats:
    """Summary counters shown above the history list."""

    total_decisions: int
    recipe_decisions: int
    restaurant_decisions: int
    average_rating: float
    most_used_diet_filter: DietFilter | None
    most_used_cuisine: Cuisine | None
