"""Candidate filtering for meal decisions."""

from collections.abc import Callable, Iterable

from meshisele.domain.candidates import Candidate, EatingOutMeal, Recipe, Restaurant
from meshisele.domain.criteria import FilterCriteria
from meshisele.domain.enums import BudgetRange, Cuisine, DietFilter, MealMode

# Representative per-person spend for provider price levels 1-4.
PRICE_LEVEL_YEN = {1: 500, 2: 1000, 3: 3000, 4: 5000}
# Inclusive per-person yen band covered by each price level.
PRICE_LEVEL_BANDS: dict[int, tuple[int | None, int | None]] = {
    1: (None, 500),
    2: (501, 1500),
    3: (1501, 3000),
    4: (3001, None),
}

Predicate = Callable[[Candidate], bool]


def filter_candidates(
    criteria: FilterCriteria, candidates: Iterable[Candidate]
) -> list[Candidate]:
    """Return the candidates that satisfy every active filter, in input order.

    Allergens and budget are always enforced. Surprise mode drops the
    ingredient and cook-time filters to widen the pool.
    """
    predicates = _build_predicates(criteria)
    return [
        candidate
        for candidate in candidates
        if all(predicate(candidate) for predicate in predicates)
    ]


def _build_predicates(criteria: FilterCriteria) -> list[Predicate]:
    predicates: list[Predicate] = [lambda c: _matches_meal_mode(c, criteria.meal_mode)]
    if criteria.diet_filter is not None and criteria.diet_filter is not DietFilter.ALL:
        diet = criteria.diet_filter
        predicates.append(lambda c: _matches_diet(c, diet))
    if criteria.restricts_cuisine and criteria.cuisine is not None:
        cuisine = criteria.cuisine
        predicates.append(lambda c: _matches_cuisine(c, cuisine))
    if not criteria.is_surprise:
        if criteria.meal_mode is MealMode.COOK and criteria.specified_ingredients:
            required = criteria.specified_ingredients
            predicates.append(lambda c: _has_ingredients(c, required))
        if criteria.excluded_ingredients:
            excluded = criteria.excluded_ingredients
            predicates.append(lambda c: not _contains_ingredient(c, excluded))
    if criteria.excluded_allergens:
        allergens = criteria.excluded_allergens
        predicates.append(lambda c: not contains_allergens(c, allergens))
    if criteria.budget_range is not None:
        budget = criteria.budget_range
        predicates.append(lambda c: within_budget(c, budget))
    if not criteria.is_surprise and criteria.meal_mode is MealMode.COOK:
        limit = (
            criteria.cook_time_constraint.max_minutes
            if criteria.cook_time_constraint is not None
            else None
        )
        if limit is not None:
            predicates.append(lambda c: _within_cook_time(c, limit))
    return predicates


def _matches_meal_mode(candidate: Candidate, meal_mode: MealMode | None) -> bool:
    if meal_mode is MealMode.COOK:
        return isinstance(candidate, Recipe)
    if meal_mode is MealMode.EAT_OUT:
        return isinstance(candidate, EatingOutMeal | Restaurant)
    return False


def _matches_diet(candidate: Candidate, diet: DietFilter) -> bool:
    if isinstance(candidate, Restaurant):
        return True
    return diet.value in candidate.diet_tags


def _matches_cuisine(candidate: Candidate, cuisine: Cuisine) -> bool:
    candidate_cuisine = Cuisine.parse(candidate.cuisine)
    if candidate_cuisine is None:
        # Restaurants from the geosearch rarely carry a cuisine.
        return isinstance(candidate, Restaurant)
    return candidate_cuisine is cuisine


def _has_ingredients(candidate: Candidate, required: frozenset[str]) -> bool:
    if not isinstance(candidate, Recipe):
        return True
    return required.issubset(candidate.ingredient_names)


def _contains_ingredient(candidate: Candidate, excluded: frozenset[str]) -> bool:
    if isinstance(candidate, Recipe):
        return not excluded.isdisjoint(candidate.ingredient_names)
    haystack = [candidate.name.lower()]
    if isinstance(candidate, EatingOutMeal):
        haystack.extend(tag.lower() for tag in candidate.diet_tags)
    return any(
        item.lower() in text for item in excluded if item.strip() for text in haystack
    )


def contains_allergens(candidate: Candidate, excluded: Iterable[str]) -> bool:
    """Return True when the candidate declares any of the excluded allergens."""
    if isinstance(candidate, Restaurant):
        return False
    return candidate.allergens.contains_any(excluded)


def estimated_cost(candidate: Candidate) -> float | None:
    """Per-person cost estimate in yen, or ``None`` when unknown."""
    if isinstance(candidate, Recipe):
        return candidate.cost_per_serving
    if isinstance(candidate, EatingOutMeal):
        return candidate.estimated_budget
    if candidate.price_level is None:
        return None
    return PRICE_LEVEL_YEN.get(candidate.price_level)


def within_budget(candidate: Candidate, budget: BudgetRange) -> bool:
    """Check the cost estimate against the inclusive budget bounds."""
    level = candidate.price_level if isinstance(candidate, Restaurant) else None
    if level is not None and level in PRICE_LEVEL_BANDS:
        return price_level_in_budget(level, budget)
    cost = estimated_cost(candidate)
    if cost is None:
        return True
    if budget.min_value is not None and cost < budget.min_value:
        return False
    if budget.max_value is not None and cost > budget.max_value:
        return False
    return True


def _within_cook_time(candidate: Candidate, limit: int) -> bool:
    if not isinstance(candidate, Recipe):
        return True
    return candidate.total_time_minutes <= limit


def price_level_in_budget(level: int, budget: BudgetRange) -> bool:
    """Return True when the price level's yen band overlaps the budget."""
    low, high = PRICE_LEVEL_BANDS[level]
    if budget.max_value is not None and low is not None and low > budget.max_value:
        return False
    if budget.min_value is not None and high is not None and high < budget.min_value:
        return False
    return True
