"""User default filter selections."""

from dataclasses import dataclass, field

from meshisele.domain.enums import (
    BudgetRange,
    CookTimeConstraint,
    Cuisine,
    DietFilter,
    NoBudgetLimit,
)


@dataclass(frozen=True)
class ModePreferences:
    """Default selections for one meal mode."""

    diet_filter: DietFilter = DietFilter.ALL
    cuisine: Cuisine = Cuisine.ALL
    is_surprise: bool = False
    specified_ingredients: tuple[str, ...] = ()
    excluded_ingredients: tuple[str, ...] = ()
    excluded_allergens: tuple[str, ...] = ()
    budget_range: BudgetRange = field(default_factory=NoBudgetLimit)
    servings_count: int = 1
    cook_time_constraint: CookTimeConstraint = CookTimeConstraint.NO_LIMIT


@dataclass(frozen=True)
class UserPreferences:
    """Defaults kept separately for cooking and eating out."""

    cook: ModePreferences = field(default_factory=ModePreferences)
    eat_out: ModePreferences = field(default_factory=ModePreferences)
