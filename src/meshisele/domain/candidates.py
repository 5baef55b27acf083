"""Candidate records a decision can resolve to."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime

from meshisele.domain.enums import ResultType


@dataclass(frozen=True)
class Allergens:
    """Allergen labelling split into mandatory and recommended declarations."""

    mandatory: tuple[str, ...] = ()
    recommended: tuple[str, ...] = ()

    def contains_any(self, excluded: Iterable[str]) -> bool:
        """Return True when any excluded allergen is declared in either list."""
        declared = set(self.mandatory) | set(self.recommended)
        return any(allergen in declared for allergen in excluded)


@dataclass(frozen=True)
class Nutrition:
    """Nutrition facts for a recipe's base serving count."""

    calories: int = 0
    protein: float = 0.0
    fat: float = 0.0
    carbs: float = 0.0
    fiber: float = 0.0
    sodium: int = 0
    cholesterol: int = 0
    saturated_fat: float = 0.0


@dataclass(frozen=True)
class Coordinate:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class Recipe:
    """A recipe to cook at home."""

    id: str
    title: str
    ingredients: tuple[str, ...] = ()
    instructions: tuple[str, ...] = ()
    ingredient_tags: tuple[str, ...] = ()
    total_time_minutes: int = 0
    base_servings: int = 1
    diet_tags: tuple[str, ...] = ("all",)
    estimated_cost_base: int = 0
    nutrition: Nutrition = field(default_factory=Nutrition)
    allergens: Allergens = field(default_factory=Allergens)
    cuisine: str = "和食"
    popularity_count: int = 0
    image_url: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    result_type = ResultType.RECIPE

    @property
    def name(self) -> str:
        return self.title

    @property
    def ingredient_names(self) -> tuple[str, ...]:
        """Controlled ingredient vocabulary, preferring tags over raw lines."""
        return self.ingredient_tags or self.ingredients

    @property
    def cost_per_serving(self) -> float:
        """Estimated cost for a single serving, unrounded."""
        return self.estimated_cost_base / max(self.base_servings, 1)


@dataclass(frozen=True)
class EatingOutMeal:
    """A dish to go and eat, later resolved to concrete restaurants."""

    id: str
    name: str
    cuisine: str = "other"
    diet_tags: tuple[str, ...] = ()
    estimated_budget: int = 1000
    allergens: Allergens = field(default_factory=Allergens)
    search_keywords: tuple[str, ...] = ()
    description: str = ""
    emoji: str = "🍽️"
    popularity_count: int = 0

    result_type = ResultType.EATING_OUT_MEAL

    @property
    def keywords(self) -> tuple[str, ...]:
        """Search keywords, falling back to the meal name."""
        return self.search_keywords or (self.name,)


@dataclass(frozen=True)
class Restaurant:
    """A concrete place to eat, usually returned by a geosearch."""

    id: str
    name: str
    coordinate: Coordinate
    address: str = ""
    distance_meters: float | None = None
    rating: float | None = None
    price_level: int | None = None
    categories: tuple[str, ...] = ()
    cuisine: str | None = None
    popularity_count: int = 0
    phone_number: str | None = None
    website: str | None = None
    image_url: str | None = None
    is_open: bool | None = None
    opening_hours: tuple[str, ...] = ()
    place_id: str | None = None
    review_count: int | None = None

    result_type = ResultType.RESTAURANT

    @property
    def is_valid(self) -> bool:
        """A restaurant needs an id, a name and a non-zero coordinate."""
        return bool(
            self.id.strip()
            and self.name.strip()
            and self.coordinate.latitude != 0
            and self.coordinate.longitude != 0
        )


Candidate = Recipe | EatingOutMeal | Restaurant

