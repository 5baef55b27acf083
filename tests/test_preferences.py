"""Tests for default preferences."""

import pytest

from meshisele.adapters.documents import parse_preferences, preferences_document
from meshisele.domain.criteria import FilterCriteria
from meshisele.domain.enums import (
    Between500To1000,
    CookTimeConstraint,
    Cuisine,
    DietFilter,
    MealMode,
    Under500,
)
from meshisele.domain.preferences import ModePreferences, UserPreferences
from meshisele.services.preferences import PreferencesService, criteria_from_preferences
from tests.conftest import InMemoryPreferencesRepository


def test_flat_preferences_migrate_to_both_modes() -> None:
    preferences = parse_preferences(
        {
            "dietFilter": "normal",
            "cuisine": "和食",
            "servingsCount": 3,
            "budgetRange": "500_1000",
            "cookTimeConstraint": "thirty_min",
            "excludedAllergens": ["卵"],
        }
    )

    assert preferences.cook.diet_filter is DietFilter.ALL
    assert preferences.cook.cuisine is Cuisine.WASHOKU
    assert preferences.cook.servings_count == 3  # noqa: PLR2004
    assert preferences.cook.cook_time_constraint is CookTimeConstraint.THIRTY_MIN
    assert preferences.eat_out.budget_range == Between500To1000()
    assert preferences.eat_out.excluded_allergens == ("卵",)
    assert preferences.eat_out.servings_count == 1
    assert preferences.eat_out.cook_time_constraint is CookTimeConstraint.NO_LIMIT


def test_split_fields_win_over_flat_fields() -> None:
    preferences = parse_preferences(
        {
            "cookDietFilter": "healthy",
            "eatOutDietFilter": "vegetarian",
            "dietFilter": "meat",
        }
    )

    assert preferences.cook.diet_filter is DietFilter.HEALTHY
    assert preferences.eat_out.diet_filter is DietFilter.VEGETARIAN


def test_preferences_document_parses_back() -> None:
    preferences = UserPreferences(
        cook=ModePreferences(
            diet_filter=DietFilter.LOW_CARB,
            specified_ingredients=("卵",),
            servings_count=2,
            cook_time_constraint=CookTimeConstraint.TEN_MIN,
        ),
        eat_out=ModePreferences(cuisine=Cuisine.KOREAN, budget_range=Under500()),
    )

    assert parse_preferences(preferences_document(preferences)) == preferences


def test_missing_preferences_are_defaults() -> None:
    assert parse_preferences(None) == UserPreferences()


def test_criteria_for_eat_out_ignores_cook_only_fields() -> None:
    preferences = UserPreferences(
        eat_out=ModePreferences(servings_count=4, diet_filter=DietFilter.HEALTHY)
    )

    criteria = criteria_from_preferences(preferences, MealMode.EAT_OUT)

    assert criteria.meal_mode is MealMode.EAT_OUT
    assert criteria.servings_count == 1
    assert criteria.diet_filter is DietFilter.HEALTHY
    assert criteria.cook_time_constraint is CookTimeConstraint.NO_LIMIT


def test_save_from_criteria_only_touches_its_mode() -> None:
    service = PreferencesService(InMemoryPreferencesRepository())
    service.save_from_criteria(
        "user-1",
        FilterCriteria(meal_mode=MealMode.COOK, diet_filter=DietFilter.MEAT),
    )

    updated = service.save_from_criteria(
        "user-1",
        FilterCriteria(meal_mode=MealMode.EAT_OUT, cuisine=Cuisine.CHUKA),
    )

    assert updated.cook.diet_filter is DietFilter.MEAT
    assert updated.eat_out.cuisine is Cuisine.CHUKA
    assert service.criteria_for("user-1", MealMode.COOK).diet_filter is DietFilter.MEAT


def test_save_requires_meal_mode() -> None:
    service = PreferencesService(InMemoryPreferencesRepository())

    with pytest.raises(ValueError, match="meal mode"):
        service.save_from_criteria("user-1", FilterCriteria())


def test_reset_restores_defaults() -> None:
    service = PreferencesService(InMemoryPreferencesRepository())
    service.save_from_criteria(
        "user-1", FilterCriteria(meal_mode=MealMode.COOK, servings_count=4)
    )

    assert service.reset("user-1") == UserPreferences()
    assert service.get("user-1") == UserPreferences()
