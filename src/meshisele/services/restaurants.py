"""Restaurant search for a decided eating-out meal."""

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass, replace

from meshisele.adapters.places_client import PlacesClient
from meshisele.domain.candidates import Coordinate, EatingOutMeal, Restaurant
from meshisele.domain.criteria import FilterCriteria
from meshisele.domain.enums import (
    BudgetRange,
    Cuisine,
    MealMode,
    RestaurantSortOption,
)
from meshisele.services.filters import filter_candidates, price_level_in_budget

TOKYO = Coordinate(latitude=35.6762, longitude=139.6503)
DEFAULT_RADIUS_M = 10000
EARTH_RADIUS_M = 6_371_000

_PRICE_LEVELS = {
    "PRICE_LEVEL_INEXPENSIVE": 1,
    "PRICE_LEVEL_MODERATE": 2,
    "PRICE_LEVEL_EXPENSIVE": 3,
    "PRICE_LEVEL_VERY_EXPENSIVE": 4,
}

_logger = logging.getLogger(__name__)


def budget_price_levels(budget: BudgetRange) -> list[str] | None:
    """Translate a budget to provider price levels; ``None`` means any level."""
    if budget.min_value is None and budget.max_value is None:
        return None
    return [
        name
        for name, level in _PRICE_LEVELS.items()
        if price_level_in_budget(level, budget)
    ]


def build_text_query(meal: EatingOutMeal) -> str:
    """Combine the meal name with its cuisine unless they repeat each other."""
    parts = [meal.name]
    cuisine = Cuisine.parse(meal.cuisine)
    if cuisine is not None and cuisine not in {Cuisine.ALL, Cuisine.OTHER}:
        label = cuisine.display_name
        if label.lower() != meal.name.lower():
            parts.append(label)
    parts.append("restaurant")
    return " ".join(parts)


def build_search_payload(
    query: str,
    budget: BudgetRange | None,
    origin: Coordinate | None,
    radius_m: int,
    page_size: int = 20,
) -> dict[str, object]:
    """Build the text-search request body."""
    center = origin or TOKYO
    payload: dict[str, object] = {
        "textQuery": query,
        "pageSize": page_size,
        "locationBias": {
            "circle": {
                "center": {
                    "latitude": center.latitude,
                    "longitude": center.longitude,
                },
                "radius": float(radius_m if origin else DEFAULT_RADIUS_M),
            }
        },
        "includedType": "restaurant",
        "minRating": 3.0,
        "strictTypeFiltering": True,
        "rankPreference": "RELEVANCE",
        "languageCode": "ja",
    }
    levels = budget_price_levels(budget) if budget is not None else None
    if levels:
        payload["priceLevels"] = levels
    return payload


def parse_place(
    place: dict[str, object], origin: Coordinate | None
) -> Restaurant | None:
    """Convert one provider place into a restaurant, or ``None`` if unusable."""
    location = place.get("location")
    if not isinstance(location, dict):
        return None
    display_name = place.get("displayName")
    name = display_name.get("text", "") if isinstance(display_name, dict) else ""
    coordinate = Coordinate(
        latitude=float(location.get("latitude", 0.0)),
        longitude=float(location.get("longitude", 0.0)),
    )
    opening_hours = place.get("currentOpeningHours")
    rating = place.get("rating")
    review_count = place.get("userRatingCount")
    restaurant = Restaurant(
        id=str(place.get("id", "")),
        name=str(name),
        coordinate=coordinate,
        address=str(place.get("formattedAddress") or ""),
        distance_meters=distance_m(origin, coordinate) if origin else None,
        rating=float(rating) if rating is not None else None,
        price_level=_PRICE_LEVELS.get(str(place.get("priceLevel"))),
        categories=tuple(place.get("types") or ()),
        phone_number=place.get("internationalPhoneNumber"),
        website=place.get("websiteUri"),
        is_open=(
            opening_hours.get("openNow") if isinstance(opening_hours, dict) else None
        ),
        place_id=str(place.get("id", "")) or None,
        review_count=int(review_count) if review_count is not None else None,
    )
    if not restaurant.is_valid:
        return None
    return restaurant


def distance_m(origin: Coordinate, target: Coordinate) -> float:
    """Great-circle distance in meters."""
    lat1, lat2 = math.radians(origin.latitude), math.radians(target.latitude)
    d_lat = lat2 - lat1
    d_lon = math.radians(target.longitude - origin.longitude)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    )
    return 2 * EARTH_RADIUS_M * math.asin(math.sqrt(a))


def sort_restaurants(
    restaurants: Iterable[Restaurant], option: RestaurantSortOption
) -> list[Restaurant]:
    """Sort results; missing distances and ratings go last."""
    items = list(restaurants)
    if option is RestaurantSortOption.DISTANCE:
        return sorted(
            items,
            key=lambda r: (r.distance_meters is None, r.distance_meters or 0.0),
        )
    if option is RestaurantSortOption.RATING:
        return sorted(items, key=lambda r: (r.rating is None, -(r.rating or 0.0)))
    return sorted(items, key=lambda r: r.name)


@dataclass
class RestaurantSearchService:
    """Finds restaurants serving a decided eating-out meal."""

    client: PlacesClient
    search_radius_m: int = 5000

    async def search_for_meal(
        self,
        meal: EatingOutMeal,
        criteria: FilterCriteria,
        origin: Coordinate | None = None,
        sort: RestaurantSortOption = RestaurantSortOption.DISTANCE,
        limit: int = 20,
    ) -> list[Restaurant]:
        """Search nearby restaurants for a meal and apply the user's filters."""
        query = build_text_query(meal)
        payload = build_search_payload(
            query, criteria.budget_range, origin, self.search_radius_m, limit
        )
        try:
            data = await self.client.search_text(payload)
        except Exception:
            _logger.warning("Restaurant search failed for %r", query)
            raise
        places = data.get("places") or []
        restaurants = [
            restaurant
            for place in places
            if isinstance(place, dict)
            and (restaurant := parse_place(place, origin)) is not None
        ]
        # Searches run for the chosen meal, so the cuisine filter is already met.
        relaxed = replace(criteria, meal_mode=MealMode.EAT_OUT, cuisine=None)
        matched = [
            restaurant
            for restaurant in filter_candidates(relaxed, restaurants)
            if isinstance(restaurant, Restaurant)
        ]
        _logger.info(
            "Restaurant search %r: %s places, %s kept", query, len(places), len(matched)
        )
        return sort_restaurants(matched, sort)[:limit]
