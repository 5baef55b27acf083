"""Schema-validated conversion between stored documents and domain records.

Documents keep the camelCase field names of the original data set. A field
with a missing or unusable value falls back to its default and the anomaly is
logged; only a document without an id is rejected.
"""

import logging
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from meshisele.domain.candidates import (
    Allergens,
    Coordinate,
    EatingOutMeal,
    Nutrition,
    Recipe,
    Restaurant,
)
from meshisele.domain.enums import (
    CookTimeConstraint,
    Cuisine,
    DietFilter,
    MealMode,
    ResultType,
    decode_budget,
)
from meshisele.domain.errors import MalformedRecordError
from meshisele.domain.history import GlobalRating, HistoryEntry
from meshisele.domain.preferences import ModePreferences, UserPreferences

_logger = logging.getLogger(__name__)

_Model = TypeVar("_Model", bound=BaseModel)


class _Document(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )


class AllergensDocument(_Document):
    mandatory: list[str] = Field(default_factory=list)
    recommended: list[str] = Field(default_factory=list)


class NutritionDocument(_Document):
    calories: int = 0
    protein: float = 0.0
    fat: float = 0.0
    carbs: float = 0.0
    fiber: float = 0.0
    sodium: int = 0
    cholesterol: int = 0
    saturated_fat: float = 0.0


class RecipeDocument(_Document):
    id: str
    title: str = "Unknown Recipe"
    ingredients: list[str] = Field(default_factory=list)
    instructions: list[str] = Field(default_factory=list)
    ingredient_tags: list[str] = Field(default_factory=list)
    total_time: int = 0
    servings: int = 1
    diet_tags: list[str] = Field(default_factory=lambda: ["all"])
    estimated_cost: int = 0
    nutrition: dict[str, object] | None = None
    allergens: dict[str, object] | None = None
    cuisine: str = "和食"
    popularity_count: int = 0
    image_url: str | None = Field(default=None, alias="imageURL")
    created_at: datetime | None = None
    updated_at: datetime | None = None


class EatingOutMealDocument(_Document):
    id: str
    name: str = ""
    description: str = ""
    cuisine: str = "other"
    diet_tags: list[str] = Field(default_factory=list)
    estimated_budget: int = 1000
    popularity_count: int = 0
    emoji: str = "🍽️"
    search_keywords: list[str] = Field(default_factory=list)
    allergens: dict[str, object] | None = None


class CoordinateDocument(_Document):
    latitude: float = 0.0
    longitude: float = 0.0


class RestaurantDocument(_Document):
    id: str
    name: str = ""
    address: str = ""
    phone_number: str | None = None
    website: str | None = None
    rating: float | None = None
    cuisine: str | None = None
    price_level: int | None = None
    coordinate: dict[str, object] | None = None
    distance: float | None = None
    image_url: str | None = Field(default=None, alias="imageURL")
    is_open: bool | None = None
    opening_hours: list[str] = Field(default_factory=list)
    popularity_count: int = 0
    place_id: str | None = None
    categories: list[str] = Field(default_factory=list)
    google_review_count: int | None = None


class HistoryEntryDocument(_Document):
    id: str
    timestamp: datetime | None = None
    meal_mode: str = "cook"
    diet_filter: str = "all"
    cuisine: str | None = None
    is_surprise: bool = False
    specified_ingredients: list[str] = Field(default_factory=list)
    excluded_ingredients: list[str] = Field(default_factory=list)
    excluded_allergens: list[str] = Field(default_factory=list)
    servings_count: int = 1
    budget_range: str = "no_limit"
    cook_time_constraint: str = "no_time_limit"
    result_type: str = "recipe"
    result_id: str = ""
    result_name: str = ""
    rating: float | None = None
    user_comment: str | None = None
    is_decided: bool = False
    restaurant_categories: list[str] | None = None


class GlobalRatingDocument(_Document):
    item_id: str
    item_type: str
    user_id: str
    rating: float = 0.0
    comment: str | None = None
    timestamp: datetime | None = None


class PreferencesDocument(_Document):
    cook_diet_filter: str | None = None
    cook_cuisine: str | None = None
    cook_is_surprise: bool | None = None
    cook_specified_ingredients: list[str] | None = None
    cook_excluded_ingredients: list[str] | None = None
    cook_excluded_allergens: list[str] | None = None
    cook_servings_count: int | None = None
    cook_budget_range: str | None = None
    cook_cook_time_constraint: str | None = None
    eat_out_diet_filter: str | None = None
    eat_out_cuisine: str | None = None
    eat_out_is_surprise: bool | None = None
    eat_out_specified_ingredients: list[str] | None = None
    eat_out_excluded_ingredients: list[str] | None = None
    eat_out_excluded_allergens: list[str] | None = None
    eat_out_budget_range: str | None = None
    # Flat fields written before the cook / eat-out split.
    diet_filter: str | None = None
    cuisine: str | None = None
    is_surprise: bool | None = None
    specified_ingredients: list[str] | None = None
    excluded_ingredients: list[str] | None = None
    excluded_allergens: list[str] | None = None
    servings_count: int | None = None
    budget_range: str | None = None
    cook_time_constraint: str | None = None


def validate_document(
    model: type[_Model], data: object, collection: str, *, require_id: bool = True
) -> _Model:
    """Validate a document, dropping unusable fields so defaults apply.

    Raises:
        MalformedRecordError: when the document is not a mapping or has no id.
    """
    if not isinstance(data, Mapping):
        raise MalformedRecordError(collection, "document is not a mapping")
    payload = {key: value for key, value in data.items() if value is not None}
    if require_id:
        if not payload.get("id"):
            raise MalformedRecordError(collection, "missing id")
        payload["id"] = str(payload["id"])
    while True:
        try:
            return model.model_validate(payload)
        except ValidationError as exc:
            invalid = {
                error["loc"][0]
                for error in exc.errors()
                if error["loc"] and error["loc"][0] in payload
            }
            if not invalid:
                raise MalformedRecordError(collection, str(exc)) from exc
            _logger.warning(
                "Using defaults for invalid %s fields %s on %s",
                collection,
                sorted(str(key) for key in invalid),
                payload.get("id", "<no id>"),
            )
            for key in invalid:
                payload.pop(key)


def parse_allergens(data: object, owner: str) -> Allergens:
    if data is None:
        _logger.warning("Missing allergens on %s", owner)
        return Allergens()
    document = validate_document(
        AllergensDocument, data, "allergens", require_id=False
    )
    return Allergens(
        mandatory=tuple(document.mandatory),
        recommended=tuple(document.recommended),
    )


def parse_nutrition(data: object, owner: str) -> Nutrition:
    if data is None:
        _logger.warning("Missing nutrition on %s", owner)
        return Nutrition()
    document = validate_document(
        NutritionDocument, data, "nutrition", require_id=False
    )
    return Nutrition(**document.model_dump())


def parse_recipe(data: object) -> Recipe:
    """Build a recipe from a stored document."""
    document = validate_document(RecipeDocument, data, "recipes")
    owner = f"recipe {document.id}"
    return Recipe(
        id=document.id,
        title=document.title,
        ingredients=tuple(document.ingredients),
        instructions=tuple(document.instructions),
        ingredient_tags=tuple(document.ingredient_tags),
        total_time_minutes=max(document.total_time, 0),
        base_servings=max(document.servings, 1),
        diet_tags=tuple(document.diet_tags),
        estimated_cost_base=max(document.estimated_cost, 0),
        nutrition=parse_nutrition(document.nutrition, owner),
        allergens=parse_allergens(document.allergens, owner),
        cuisine=document.cuisine,
        popularity_count=max(document.popularity_count, 0),
        image_url=document.image_url,
        created_at=document.created_at,
        updated_at=document.updated_at,
    )


def parse_eating_out_meal(data: object) -> EatingOutMeal:
    """Build an eating-out meal from a stored document."""
    document = validate_document(EatingOutMealDocument, data, "eatingOutMeals")
    return EatingOutMeal(
        id=document.id,
        name=document.name,
        description=document.description,
        cuisine=document.cuisine,
        diet_tags=tuple(document.diet_tags),
        estimated_budget=max(document.estimated_budget, 0),
        allergens=parse_allergens(
            document.allergens, f"eating-out meal {document.id}"
        ),
        search_keywords=tuple(document.search_keywords) or (document.name,),
        emoji=document.emoji,
        popularity_count=max(document.popularity_count, 0),
    )


def parse_restaurant(data: object) -> Restaurant:
    """Build a restaurant from a stored document."""
    document = validate_document(RestaurantDocument, data, "restaurants")
    coordinate = validate_document(
        CoordinateDocument, document.coordinate or {}, "coordinate", require_id=False
    )
    price_level = document.price_level
    if price_level is not None and not 1 <= price_level <= 4:  # noqa: PLR2004
        price_level = None
    return Restaurant(
        id=document.id,
        name=document.name,
        coordinate=Coordinate(
            latitude=coordinate.latitude, longitude=coordinate.longitude
        ),
        address=document.address,
        distance_meters=document.distance,
        rating=document.rating,
        price_level=price_level,
        categories=tuple(document.categories),
        cuisine=document.cuisine,
        popularity_count=max(document.popularity_count, 0),
        phone_number=document.phone_number,
        website=document.website,
        image_url=document.image_url,
        is_open=document.is_open,
        opening_hours=tuple(document.opening_hours),
        place_id=document.place_id,
        review_count=document.google_review_count,
    )


def parse_history_entry(data: object) -> HistoryEntry:
    """Build a history entry from a stored document."""
    document = validate_document(HistoryEntryDocument, data, "history")
    try:
        meal_mode = MealMode(document.meal_mode)
    except ValueError:
        _logger.warning(
            "Unknown meal mode %r on history %s", document.meal_mode, document.id
        )
        meal_mode = MealMode.COOK
    try:
        result_type = ResultType(document.result_type)
    except ValueError:
        _logger.warning(
            "Unknown result type %r on history %s", document.result_type, document.id
        )
        result_type = ResultType.RECIPE
    return HistoryEntry(
        id=document.id,
        timestamp=_aware(document.timestamp) or datetime.now(tz=UTC),
        meal_mode=meal_mode,
        diet_filter=DietFilter.parse(document.diet_filter),
        cuisine=Cuisine.parse(document.cuisine),
        is_surprise=document.is_surprise,
        specified_ingredients=tuple(document.specified_ingredients),
        excluded_ingredients=tuple(document.excluded_ingredients),
        excluded_allergens=tuple(document.excluded_allergens),
        servings_count=max(document.servings_count, 1),
        budget_range=decode_budget(document.budget_range),
        cook_time_constraint=CookTimeConstraint.parse(document.cook_time_constraint),
        result_type=result_type,
        result_id=document.result_id,
        result_name=document.result_name,
        is_decided=document.is_decided,
        rating=document.rating,
        user_comment=document.user_comment,
        restaurant_categories=(
            tuple(document.restaurant_categories)
            if document.restaurant_categories is not None
            else None
        ),
    )


def history_entry_document(entry: HistoryEntry) -> dict[str, object]:
    """Serialize an entry; optional fields are only written when set."""
    document: dict[str, object] = {
        "id": entry.id,
        "timestamp": entry.timestamp.isoformat(),
        "mealMode": entry.meal_mode.value,
        "dietFilter": entry.diet_filter.value,
        "isSurprise": entry.is_surprise,
        "specifiedIngredients": list(entry.specified_ingredients),
        "excludedIngredients": list(entry.excluded_ingredients),
        "excludedAllergens": list(entry.excluded_allergens),
        "servingsCount": entry.servings_count,
        "budgetRange": entry.budget_range.encode(),
        "cookTimeConstraint": entry.cook_time_constraint.value,
        "resultType": entry.result_type.value,
        "resultId": entry.result_id,
        "resultName": entry.result_name,
        "isDecided": entry.is_decided,
    }
    if entry.cuisine is not None:
        document["cuisine"] = entry.cuisine.value
    if entry.rating is not None:
        document["rating"] = entry.rating
    if entry.user_comment is not None:
        document["userComment"] = entry.user_comment
    if entry.restaurant_categories is not None:
        document["restaurantCategories"] = list(entry.restaurant_categories)
    return document


def parse_global_rating(data: object) -> GlobalRating:
    """Build a global rating from a stored document."""
    document = validate_document(
        GlobalRatingDocument, data, "globalRatings", require_id=False
    )
    try:
        item_type = ResultType(document.item_type)
    except ValueError as exc:
        raise MalformedRecordError(
            "globalRatings", f"unknown item type {document.item_type!r}"
        ) from exc
    return GlobalRating(
        item_id=document.item_id,
        item_type=item_type,
        user_id=document.user_id,
        rating=document.rating,
        comment=document.comment,
        timestamp=_aware(document.timestamp),
    )


def parse_preferences(data: object) -> UserPreferences:
    """Build preferences, migrating the flat fields of older documents."""
    if data is None:
        return UserPreferences()
    document = validate_document(
        PreferencesDocument, data, "defaultPreferences", require_id=False
    )
    return UserPreferences(
        cook=_mode_preferences(document, "cook"),
        eat_out=_mode_preferences(document, "eat_out"),
    )


def _mode_preferences(document: PreferencesDocument, prefix: str) -> ModePreferences:
    def value(name: str) -> object:
        current = getattr(document, f"{prefix}_{name}", None)
        return current if current is not None else getattr(document, name)

    servings = value("servings_count") if prefix == "cook" else None
    cook_time = value("cook_time_constraint") if prefix == "cook" else None
    return ModePreferences(
        diet_filter=DietFilter.parse(value("diet_filter")),
        cuisine=Cuisine.parse(value("cuisine")) or Cuisine.ALL,
        is_surprise=bool(value("is_surprise")),
        specified_ingredients=tuple(value("specified_ingredients") or ()),
        excluded_ingredients=tuple(value("excluded_ingredients") or ()),
        excluded_allergens=tuple(value("excluded_allergens") or ()),
        budget_range=decode_budget(value("budget_range")),
        servings_count=max(servings if isinstance(servings, int) else 1, 1),
        cook_time_constraint=CookTimeConstraint.parse(cook_time),
    )


def preferences_document(preferences: UserPreferences) -> dict[str, object]:
    """Serialize preferences with the split cook / eat-out field names."""
    cook, eat_out = preferences.cook, preferences.eat_out
    return {
        "cookDietFilter": cook.diet_filter.value,
        "cookCuisine": cook.cuisine.value,
        "cookIsSurprise": cook.is_surprise,
        "cookSpecifiedIngredients": list(cook.specified_ingredients),
        "cookExcludedIngredients": list(cook.excluded_ingredients),
        "cookExcludedAllergens": list(cook.excluded_allergens),
        "cookServingsCount": cook.servings_count,
        "cookBudgetRange": cook.budget_range.encode(),
        "cookCookTimeConstraint": cook.cook_time_constraint.value,
        "eatOutDietFilter": eat_out.diet_filter.value,
        "eatOutCuisine": eat_out.cuisine.value,
        "eatOutIsSurprise": eat_out.is_surprise,
        "eatOutSpecifiedIngredients": list(eat_out.specified_ingredients),
        "eatOutExcludedIngredients": list(eat_out.excluded_ingredients),
        "eatOutExcludedAllergens": list(eat_out.excluded_allergens),
        "eatOutBudgetRange": eat_out.budget_range.encode(),
    }


def _aware(value: datetime | None) -> datetime | None:
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)
