"""Filter selections collected for a single decision."""

from dataclasses import dataclass, field

from meshisele.domain.enums import (
    BudgetRange,
    CookTimeConstraint,
    Cuisine,
    DietFilter,
    MealMode,
    NoBudgetLimit,
)


@dataclass(frozen=True)
class FilterCriteria:
    """User selections that narrow the candidate pool.

    Values left as ``None`` have not been chosen yet. ``cuisine`` is optional
    by nature; ``None`` and ``Cuisine.ALL`` both mean no restriction.
    """

    meal_mode: MealMode | None = None
    is_surprise: bool = False
    diet_filter: DietFilter | None = DietFilter.ALL
    cuisine: Cuisine | None = None
    specified_ingredients: frozenset[str] = field(default_factory=frozenset)
    excluded_ingredients: frozenset[str] = field(default_factory=frozenset)
    excluded_allergens: frozenset[str] = field(default_factory=frozenset)
    servings_count: int = 1
    budget_range: BudgetRange | None = field(default_factory=NoBudgetLimit)
    cook_time_constraint: CookTimeConstraint | None = CookTimeConstraint.NO_LIMIT

    def __post_init__(self) -> None:
        if self.servings_count < 1:
            raise ValueError("servings_count must be a positive integer")

    @property
    def is_ready_to_decide(self) -> bool:
        """Meal mode is chosen and every filter a normal decision needs is set."""
        if self.meal_mode is None:
            return False
        if self.is_surprise:
            return True
        if self.diet_filter is None or self.budget_range is None:
            return False
        if self.meal_mode is MealMode.COOK and self.cook_time_constraint is None:
            return False
        return True

    @property
    def restricts_cuisine(self) -> bool:
        return self.cuisine is not None and self.cuisine is not Cuisine.ALL
