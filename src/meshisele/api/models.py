"""Request and response payloads for the HTTP API."""

from dataclasses import asdict

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from meshisele.adapters.documents import history_entry_document, preferences_document
from meshisele.domain.candidates import Candidate
from meshisele.domain.criteria import FilterCriteria
from meshisele.domain.enums import (
    CookTimeConstraint,
    Cuisine,
    DietFilter,
    MealMode,
    ResultType,
    RestaurantSortOption,
    parse_budget,
)
from meshisele.domain.history import HistoryEntry, HistoryStats, RatingSummary
from meshisele.domain.preferences import UserPreferences
from meshisele.services.decisions import DecisionResult
from meshisele.services.scaling import ScaledRecipe


class _Payload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CriteriaPayload(_Payload):
    """Filter selections as sent by the client."""

    meal_mode: MealMode | None = None
    is_surprise: bool = False
    diet_filter: DietFilter | None = DietFilter.ALL
    cuisine: Cuisine | None = None
    specified_ingredients: list[str] = Field(default_factory=list)
    excluded_ingredients: list[str] = Field(default_factory=list)
    excluded_allergens: list[str] = Field(default_factory=list)
    servings_count: int = Field(default=1, ge=1)
    budget_range: str | None = "noLimit"
    cook_time_constraint: CookTimeConstraint | None = CookTimeConstraint.NO_LIMIT

    def to_criteria(self) -> FilterCriteria:
        """Convert to domain criteria.

        Raises:
            InvalidCustomBudgetError: for a custom budget with invalid bounds.
            ValueError: for an unknown budget encoding.
        """
        budget = None
        if self.budget_range is not None:
            budget = parse_budget(self.budget_range)
            if budget is None:
                raise ValueError(f"Unknown budget range {self.budget_range!r}")
        return FilterCriteria(
            meal_mode=self.meal_mode,
            is_surprise=self.is_surprise,
            diet_filter=self.diet_filter,
            cuisine=self.cuisine,
            specified_ingredients=frozenset(self.specified_ingredients),
            excluded_ingredients=frozenset(self.excluded_ingredients),
            excluded_allergens=frozenset(self.excluded_allergens),
            servings_count=self.servings_count,
            budget_range=budget,
            cook_time_constraint=self.cook_time_constraint,
        )

    @classmethod
    def from_criteria(cls, criteria: FilterCriteria) -> "CriteriaPayload":
        return cls(
            meal_mode=criteria.meal_mode,
            is_surprise=criteria.is_surprise,
            diet_filter=criteria.diet_filter,
            cuisine=criteria.cuisine,
            specified_ingredients=sorted(criteria.specified_ingredients),
            excluded_ingredients=sorted(criteria.excluded_ingredients),
            excluded_allergens=sorted(criteria.excluded_allergens),
            servings_count=criteria.servings_count,
            budget_range=(
                criteria.budget_range.encode() if criteria.budget_range else None
            ),
            cook_time_constraint=criteria.cook_time_constraint,
        )


class FinalizePayload(_Payload):
    criteria: CriteriaPayload
    result_type: ResultType
    result_id: str
    is_decided: bool = True


class RatingPayload(_Payload):
    rating: float = Field(ge=0.0, le=5.0)
    comment: str | None = None


class HistoryUpdatePayload(_Payload):
    rating: float | None = Field(default=None, ge=0.0, le=5.0)
    comment: str | None = None


class RestaurantSearchPayload(_Payload):
    meal_id: str
    criteria: CriteriaPayload
    latitude: float | None = None
    longitude: float | None = None
    sort: RestaurantSortOption = RestaurantSortOption.DISTANCE
    limit: int = Field(default=20, ge=1, le=20)


def candidate_payload(candidate: Candidate) -> dict[str, object]:
    """Serialize a candidate with its result type."""
    return {"resultType": candidate.result_type.value, **asdict(candidate)}


def decision_payload(result: DecisionResult) -> dict[str, object]:
    return {
        "sessionId": result.session_id,
        "candidate": candidate_payload(result.candidate),
        "poolSize": result.pool_size,
        "rerunCount": result.rerun_count,
    }


def scaled_recipe_payload(scaled: ScaledRecipe) -> dict[str, object]:
    return {
        "recipeId": scaled.recipe.id,
        "servings": scaled.servings,
        "ratio": scaled.ratio,
        "ingredients": list(scaled.ingredients),
        "nutrition": asdict(scaled.nutrition),
        "cost": scaled.cost,
    }


def history_payload(entry: HistoryEntry) -> dict[str, object]:
    return history_entry_document(entry)


def stats_payload(stats: HistoryStats) -> dict[str, object]:
    return {
        "totalDecisions": stats.total_decisions,
        "recipeDecisions": stats.recipe_decisions,
        "restaurantDecisions": stats.restaurant_decisions,
        "averageRating": stats.average_rating,
        "mostUsedDietFilter": (
            stats.most_used_diet_filter.value if stats.most_used_diet_filter else None
        ),
        "mostUsedCuisine": (
            stats.most_used_cuisine.value if stats.most_used_cuisine else None
        ),
    }


def rating_summary_payload(summary: RatingSummary) -> dict[str, object]:
    return {"mean": summary.mean, "count": summary.count, "isRated": summary.is_rated}


def preferences_payload(preferences: UserPreferences) -> dict[str, object]:
    return preferences_document(preferences)


def criteria_payload(criteria: FilterCriteria) -> dict[str, object]:
    return CriteriaPayload.from_criteria(criteria).model_dump(
        mode="json", by_alias=True
    )
