"""User default selections per meal mode."""

from dataclasses import dataclass, replace
from typing import Protocol

from meshisele.domain.criteria import FilterCriteria
from meshisele.domain.enums import (
    CookTimeConstraint,
    Cuisine,
    DietFilter,
    MealMode,
    NoBudgetLimit,
)
from meshisele.domain.preferences import ModePreferences, UserPreferences


class PreferencesRepository(Protocol):
    """Persistence interface for user default preferences."""

    def get_preferences(self, user_id: str) -> UserPreferences | None:
        """Return stored preferences, if the user has any."""

    def save_preferences(self, user_id: str, preferences: UserPreferences) -> None:
        """Persist preferences for a user."""


def criteria_from_preferences(
    preferences: UserPreferences, meal_mode: MealMode
) -> FilterCriteria:
    """Build the starting selections for a meal mode."""
    mode = preferences.cook if meal_mode is MealMode.COOK else preferences.eat_out
    return FilterCriteria(
        meal_mode=meal_mode,
        is_surprise=mode.is_surprise,
        diet_filter=mode.diet_filter,
        cuisine=mode.cuisine,
        specified_ingredients=frozenset(mode.specified_ingredients),
        excluded_ingredients=frozenset(mode.excluded_ingredients),
        excluded_allergens=frozenset(mode.excluded_allergens),
        servings_count=mode.servings_count if meal_mode is MealMode.COOK else 1,
        budget_range=mode.budget_range,
        cook_time_constraint=(
            mode.cook_time_constraint
            if meal_mode is MealMode.COOK
            else CookTimeConstraint.NO_LIMIT
        ),
    )


def mode_preferences_from_criteria(criteria: FilterCriteria) -> ModePreferences:
    """Capture the selections of a criteria object as defaults."""
    return ModePreferences(
        diet_filter=criteria.diet_filter or DietFilter.ALL,
        cuisine=criteria.cuisine or Cuisine.ALL,
        is_surprise=criteria.is_surprise,
        specified_ingredients=tuple(sorted(criteria.specified_ingredients)),
        excluded_ingredients=tuple(sorted(criteria.excluded_ingredients)),
        excluded_allergens=tuple(sorted(criteria.excluded_allergens)),
        budget_range=criteria.budget_range or NoBudgetLimit(),
        servings_count=criteria.servings_count,
        cook_time_constraint=(
            criteria.cook_time_constraint or CookTimeConstraint.NO_LIMIT
        ),
    )


@dataclass
class PreferencesService:
    """Service for reading and updating default selections."""

    repository: PreferencesRepository

    def get(self, user_id: str) -> UserPreferences:
        """Return the user's preferences or the defaults."""
        return self.repository.get_preferences(user_id) or UserPreferences()

    def criteria_for(self, user_id: str, meal_mode: MealMode) -> FilterCriteria:
        """Return starting selections for a mode from the user's defaults."""
        return criteria_from_preferences(self.get(user_id), meal_mode)

    def save_from_criteria(
        self, user_id: str, criteria: FilterCriteria
    ) -> UserPreferences:
        """Store the criteria as defaults for its meal mode only."""
        if criteria.meal_mode is None:
            raise ValueError("Preferences are stored per meal mode")
        current = self.get(user_id)
        mode = mode_preferences_from_criteria(criteria)
        if criteria.meal_mode is MealMode.COOK:
            updated = replace(current, cook=mode)
        else:
            updated = replace(current, eat_out=mode)
        self.repository.save_preferences(user_id, updated)
        return updated

    def reset(self, user_id: str) -> UserPreferences:
        """Restore default preferences for both modes."""
        defaults = UserPreferences()
        self.repository.save_preferences(user_id, defaults)
        return defaults
