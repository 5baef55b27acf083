"""Tests for history filtering, aggregation and the history service."""

from dataclasses import replace
from datetime import UTC, datetime, timedelta

import pytest

from meshisele.domain.enums import (
    CookTimeConstraint,
    Cuisine,
    CustomBudget,
    DietFilter,
    HistoryFilterType,
    HistorySortOption,
    HistoryTab,
    MealMode,
    NoBudgetLimit,
    ResultType,
)
from meshisele.domain.history import GlobalRating, HistoryEntry, HistoryFilter
from meshisele.services.history import (
    HistoryService,
    average_rating,
    criteria_from_entry,
    entries_for_tab,
    export_history_text,
    filter_history,
    history_stats,
    search_history,
)
from meshisele.services.ratings import RatingService
from tests.conftest import InMemoryHistoryRepository, InMemoryRatingRepository

BASE_TIME = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


def _entry(entry_id: str, hours: int = 0, **overrides) -> HistoryEntry:  # type: ignore[no-untyped-def]
    values = {
        "id": entry_id,
        "timestamp": BASE_TIME + timedelta(hours=hours),
        "meal_mode": MealMode.COOK,
        "diet_filter": DietFilter.ALL,
        "cuisine": None,
        "is_surprise": False,
        "specified_ingredients": (),
        "excluded_ingredients": (),
        "excluded_allergens": (),
        "servings_count": 1,
        "budget_range": NoBudgetLimit(),
        "cook_time_constraint": CookTimeConstraint.NO_LIMIT,
        "result_type": ResultType.RECIPE,
        "result_id": f"recipe-{entry_id}",
        "result_name": f"Recipe {entry_id}",
    }
    values.update(overrides)
    return HistoryEntry(**values)


def test_rating_sort_puts_unrated_last() -> None:
    entries = [
        _entry("a", hours=0, rating=5.0),
        _entry("b", hours=1, rating=4.0),
        _entry("c", hours=2, rating=None),
        _entry("d", hours=3, rating=3.0),
    ]

    result = filter_history(entries, HistoryFilter(sort=HistorySortOption.RATING))

    assert [entry.rating for entry in result] == [5.0, 4.0, 3.0, None]


def test_rating_sort_breaks_ties_by_newest() -> None:
    entries = [_entry("old", hours=0, rating=4.0), _entry("new", hours=5, rating=4.0)]

    result = filter_history(entries, HistoryFilter(sort=HistorySortOption.RATING))

    assert [entry.id for entry in result] == ["new", "old"]


def test_date_sorts() -> None:
    entries = [_entry("a", hours=1), _entry("b", hours=0), _entry("c", hours=2)]

    newest = filter_history(entries, HistoryFilter())
    oldest = filter_history(
        entries, HistoryFilter(sort=HistorySortOption.DATE_ASCENDING)
    )

    assert [entry.id for entry in newest] == ["c", "a", "b"]
    assert [entry.id for entry in oldest] == ["b", "a", "c"]


def test_filter_fields_and_kinds() -> None:
    entries = [
        _entry("a", rating=4.5, diet_filter=DietFilter.HEALTHY),
        _entry("b", hours=1, meal_mode=MealMode.EAT_OUT, rating=2.0),
        _entry("c", hours=2, is_decided=False),
        _entry(
            "d",
            hours=3,
            meal_mode=MealMode.EAT_OUT,
            result_type=ResultType.RESTAURANT,
        ),
    ]

    def ids(history_filter: HistoryFilter) -> list[str]:
        return [entry.id for entry in filter_history(entries, history_filter)]

    assert ids(HistoryFilter(min_rating=3.0)) == ["a"]
    assert ids(HistoryFilter(meal_mode=MealMode.EAT_OUT)) == ["d", "b"]
    assert ids(HistoryFilter(diet_filter=DietFilter.HEALTHY)) == ["a"]
    assert ids(HistoryFilter(kind=HistoryFilterType.RATED)) == ["b", "a"]
    assert ids(HistoryFilter(kind=HistoryFilterType.UNRATED)) == ["d", "c"]
    assert ids(HistoryFilter(kind=HistoryFilterType.DECIDED)) == ["d", "b", "a"]
    assert ids(HistoryFilter(kind=HistoryFilterType.RESTAURANTS)) == ["d"]
    window = HistoryFilter(
        start=BASE_TIME + timedelta(hours=1), end=BASE_TIME + timedelta(hours=2)
    )
    assert ids(window) == ["c", "b"]


def test_naive_window_bounds_are_read_as_utc() -> None:
    entries = [_entry("a"), _entry("b", hours=2)]
    naive_start = datetime(2024, 5, 1, 13, 0)

    result = filter_history(entries, HistoryFilter(start=naive_start))

    assert [entry.id for entry in result] == ["b"]


def test_average_rating_of_unrated_item_is_zero() -> None:
    summary = average_rating("recipe-1", ResultType.RECIPE, [])

    assert summary.mean == 0.0
    assert summary.count == 0
    assert not summary.is_rated


def test_average_rating_only_counts_matching_item() -> None:
    ratings = [
        GlobalRating("recipe-1", ResultType.RECIPE, "u1", 5.0),
        GlobalRating("recipe-1", ResultType.RECIPE, "u2", 3.0),
        GlobalRating("recipe-1", ResultType.EATING_OUT_MEAL, "u3", 1.0),
        GlobalRating("recipe-2", ResultType.RECIPE, "u1", 1.0),
    ]

    summary = average_rating("recipe-1", ResultType.RECIPE, ratings)

    assert summary.mean == 4.0  # noqa: PLR2004
    assert summary.count == 2  # noqa: PLR2004


def test_entries_for_tab() -> None:
    entries = [
        _entry("recipe"),
        _entry("meal", result_type=ResultType.EATING_OUT_MEAL),
        _entry("place", result_type=ResultType.RESTAURANT),
        _entry("browsed", result_type=ResultType.RESTAURANT, is_decided=False),
    ]

    cuisine = entries_for_tab(entries, HistoryTab.CUISINE)
    restaurant = entries_for_tab(entries, HistoryTab.RESTAURANT)

    assert [entry.id for entry in cuisine] == ["recipe", "meal"]
    assert [entry.id for entry in restaurant] == ["place"]


def test_search_matches_names_ingredients_and_labels() -> None:
    entries = [
        _entry("a", result_name="親子丼", specified_ingredients=("鶏肉",)),
        _entry("b", diet_filter=DietFilter.VEGETARIAN, cuisine=Cuisine.ITALIAN),
    ]

    assert [e.id for e in search_history(entries, "鶏肉")] == ["a"]
    assert [e.id for e in search_history(entries, "親子")] == ["a"]
    assert [e.id for e in search_history(entries, "ベジタリアン")] == ["b"]
    assert [e.id for e in search_history(entries, "ITALIAN")] == ["b"]
    assert len(search_history(entries, "  ")) == 2  # noqa: PLR2004


def test_history_stats() -> None:
    entries = [
        _entry("a", rating=4.0, diet_filter=DietFilter.HEALTHY, cuisine=Cuisine.CHUKA),
        _entry("b", rating=2.0, diet_filter=DietFilter.HEALTHY),
        _entry("c", result_type=ResultType.RESTAURANT),
    ]

    stats = history_stats(entries)

    assert stats.total_decisions == 3  # noqa: PLR2004
    assert stats.recipe_decisions == 2  # noqa: PLR2004
    assert stats.restaurant_decisions == 1
    assert stats.average_rating == 3.0  # noqa: PLR2004
    assert stats.most_used_diet_filter is DietFilter.HEALTHY
    assert stats.most_used_cuisine is Cuisine.CHUKA


def test_history_stats_empty() -> None:
    stats = history_stats([])

    assert stats.total_decisions == 0
    assert stats.average_rating == 0.0
    assert stats.most_used_diet_filter is None


def test_criteria_from_entry_restores_selections() -> None:
    entry = _entry(
        "a",
        specified_ingredients=("卵",),
        budget_range=CustomBudget(300, 900),
        servings_count=3,
    )

    criteria = criteria_from_entry(entry)

    assert criteria.meal_mode is MealMode.COOK
    assert criteria.specified_ingredients == frozenset({"卵"})
    assert criteria.budget_range == CustomBudget(300, 900)
    assert criteria.servings_count == 3  # noqa: PLR2004
    assert criteria.is_ready_to_decide


def test_export_text() -> None:
    text = export_history_text([_entry("a", result_name="親子丼", rating=4.0)])

    assert text.startswith("MeshiSele History Export")
    assert "Result: 親子丼" in text
    assert "Rating: 4.0" in text


def test_rate_entry_updates_history_and_global_rating() -> None:
    history_repository = InMemoryHistoryRepository()
    rating_repository = InMemoryRatingRepository()
    service = HistoryService(
        repository=history_repository,
        rating_service=RatingService(rating_repository),
    )
    history_repository.save_history_entry(_entry("a"), "user-1")

    updated = service.rate_entry("user-1", "a", rating=4.0, comment="おいしい")

    assert updated.rating == 4.0  # noqa: PLR2004
    assert updated.user_comment == "おいしい"
    stored = rating_repository.ratings["user-1_recipe-a"]
    assert stored.rating == 4.0  # noqa: PLR2004
    assert stored.comment == "おいしい"


def test_rate_entry_rejects_out_of_range_and_missing() -> None:
    history_repository = InMemoryHistoryRepository()
    service = HistoryService(repository=history_repository)
    history_repository.save_history_entry(_entry("a"), "user-1")

    with pytest.raises(ValueError, match="between 0 and 5"):
        service.rate_entry("user-1", "a", rating=5.5)
    with pytest.raises(KeyError):
        service.rate_entry("user-1", "missing", rating=3.0)


def test_service_list_delete_and_clear() -> None:
    history_repository = InMemoryHistoryRepository()
    service = HistoryService(repository=history_repository)
    for entry in (
        _entry("a"),
        _entry("b", hours=1, result_type=ResultType.RESTAURANT),
        replace(_entry("c", hours=2), result_name="ラーメン"),
    ):
        history_repository.save_history_entry(entry, "user-1")

    assert [e.id for e in service.list_entries("user-1", tab=HistoryTab.CUISINE)] == [
        "c",
        "a",
    ]
    assert [e.id for e in service.list_entries("user-1", query="ラーメン")] == ["c"]

    service.delete_entry("user-1", "a")
    assert [e.id for e in service.list_entries("user-1")] == ["c", "b"]

    service.clear("user-1")
    assert service.list_entries("user-1") == []
    assert service.stats("user-1").total_decisions == 0
