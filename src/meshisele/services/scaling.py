"""Scaling recipe quantities to a serving count."""

import logging
import math
import re
from dataclasses import dataclass

from meshisele.domain.candidates import Nutrition, Recipe

_NUMBER = re.compile(r"\d+(?:\.\d+)?")

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScaledRecipe:
    """Presentation values of a recipe for a chosen serving count."""

    recipe: Recipe
    servings: int
    ratio: float
    ingredients: tuple[str, ...]
    nutrition: Nutrition
    cost: int


def scale(recipe: Recipe, target_servings: int) -> ScaledRecipe:
    """Scale ingredients, nutrition and cost from the base serving count.

    An unusable ratio (zero, negative or non-finite) leaves every value as
    stored instead of raising.
    """
    ratio = serving_ratio(recipe.base_servings, target_servings)
    if ratio is None or ratio == 1:
        return ScaledRecipe(
            recipe=recipe,
            servings=target_servings,
            ratio=1.0,
            ingredients=recipe.ingredients,
            nutrition=recipe.nutrition,
            cost=recipe.estimated_cost_base,
        )
    return ScaledRecipe(
        recipe=recipe,
        servings=target_servings,
        ratio=ratio,
        ingredients=tuple(
            scale_ingredient_text(line, ratio) for line in recipe.ingredients
        ),
        nutrition=scale_nutrition(recipe.nutrition, ratio),
        cost=scale_cost(recipe.estimated_cost_base, ratio),
    )


def serving_ratio(base_servings: int, target_servings: int) -> float | None:
    """Return target/base, or ``None`` when the ratio cannot be used."""
    try:
        ratio = target_servings / base_servings
    except ZeroDivisionError:
        ratio = math.inf
    if not math.isfinite(ratio) or ratio <= 0:
        _logger.warning(
            "Invalid serving ratio %s/%s, keeping base values",
            target_servings,
            base_servings,
        )
        return None
    return ratio


def scale_nutrition(nutrition: Nutrition, ratio: float) -> Nutrition:
    """Scale every nutrient; whole-number fields truncate, others keep one decimal."""
    return Nutrition(
        calories=math.floor(nutrition.calories * ratio),
        protein=round(nutrition.protein * ratio, 1),
        fat=round(nutrition.fat * ratio, 1),
        carbs=round(nutrition.carbs * ratio, 1),
        fiber=round(nutrition.fiber * ratio, 1),
        sodium=math.floor(nutrition.sodium * ratio),
        cholesterol=math.floor(nutrition.cholesterol * ratio),
        saturated_fat=round(nutrition.saturated_fat * ratio, 1),
    )


def scale_cost(cost: int, ratio: float) -> int:
    """Scale a yen amount, rounding half up to a whole yen."""
    return math.floor(cost * ratio + 0.5)


def scale_ingredient_text(text: str, ratio: float) -> str:
    """Scale every number inside an ingredient line, e.g. ``鶏肉 200g``."""
    return _NUMBER.sub(
        lambda match: _format_quantity(float(match.group()) * ratio), text
    )


def _format_quantity(value: float) -> str:
    value = round(value, 1)
    if value.is_integer():
        return f"{value:.0f}"
    return f"{value:.1f}"
