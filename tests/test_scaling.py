"""Tests for serving-count scaling."""

from meshisele.domain.candidates import Nutrition, Recipe
from meshisele.services.scaling import (
    scale,
    scale_cost,
    scale_ingredient_text,
    scale_nutrition,
    serving_ratio,
)


def _recipe(**overrides) -> Recipe:  # type: ignore[no-untyped-def]
    values = {
        "id": "curry",
        "title": "カレー",
        "ingredients": ("じゃがいも 2個", "牛肉 300g", "カレールー 4片"),
        "base_servings": 4,
        "estimated_cost_base": 800,
        "nutrition": Nutrition(
            calories=2401,
            protein=60.4,
            fat=80.0,
            carbs=300.0,
            fiber=12.2,
            sodium=4003,
            cholesterol=150,
            saturated_fat=30.0,
        ),
    }
    values.update(overrides)
    return Recipe(**values)


def test_scale_down_to_one_serving() -> None:
    scaled = scale(_recipe(), 1)

    assert scaled.ratio == 0.25  # noqa: PLR2004
    assert scaled.cost == 200  # noqa: PLR2004
    assert scaled.ingredients == ("じゃがいも 0.5個", "牛肉 75g", "カレールー 1片")
    assert scaled.nutrition.calories == 600  # noqa: PLR2004
    assert scaled.nutrition.protein == 15.1  # noqa: PLR2004
    assert scaled.nutrition.sodium == 1000  # noqa: PLR2004


def test_scale_to_base_servings_is_identity() -> None:
    recipe = _recipe()

    scaled = scale(recipe, recipe.base_servings)

    assert scaled.ratio == 1.0
    assert scaled.ingredients == recipe.ingredients
    assert scaled.nutrition == recipe.nutrition
    assert scaled.cost == recipe.estimated_cost_base


def test_scale_up() -> None:
    scaled = scale(_recipe(base_servings=2), 3)

    assert scaled.cost == 1200  # noqa: PLR2004
    assert scaled.ingredients[1] == "牛肉 450g"


def test_invalid_ratio_keeps_base_values() -> None:
    recipe = _recipe()

    assert serving_ratio(0, 2) is None
    assert serving_ratio(4, 0) is None
    assert serving_ratio(4, -1) is None
    scaled = scale(recipe, 0)
    assert scaled.cost == recipe.estimated_cost_base
    assert scaled.ingredients == recipe.ingredients


def test_scale_cost_rounds_half_up() -> None:
    assert scale_cost(250, 0.5) == 125  # noqa: PLR2004
    assert scale_cost(5, 0.5) == 3  # noqa: PLR2004
    assert scale_cost(7, 0.5) == 4  # noqa: PLR2004


def test_scale_nutrition_floors_whole_number_fields() -> None:
    scaled = scale_nutrition(Nutrition(calories=99, fiber=1.25, cholesterol=3), 0.5)

    assert scaled.calories == 49  # noqa: PLR2004
    assert scaled.cholesterol == 1
    assert scaled.fiber == 0.6  # noqa: PLR2004


def test_ingredient_without_number_is_unchanged() -> None:
    assert scale_ingredient_text("塩 少々", 2.0) == "塩 少々"
    assert scale_ingredient_text("卵 1.5個", 2.0) == "卵 3個"


def test_ingredient_with_several_numbers_scales_each() -> None:
    assert scale_ingredient_text("卵 2個 + 牛乳 1.5カップ", 2.0) == "卵 4個 + 牛乳 3カップ"


def test_near_whole_quantity_renders_without_decimal() -> None:
    assert scale_ingredient_text("米 3合", 0.9999999) == "米 3合"
