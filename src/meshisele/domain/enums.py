"""Filter selections and their storage encodings."""

import logging
from dataclasses import dataclass
from enum import Enum

from meshisele.domain.errors import InvalidCustomBudgetError

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Label:
    """Display metadata for a selectable option."""

    display_name: str
    emoji: str


class MealMode(Enum):
    """Whether the user cooks at home or eats out."""

    COOK = "cook"
    EAT_OUT = "eatOut"

    @property
    def display_name(self) -> str:
        return _MEAL_MODE_LABELS[self].display_name

    @property
    def emoji(self) -> str:
        return _MEAL_MODE_LABELS[self].emoji


class DietFilter(Enum):
    """Diet restriction selectable on the home screen."""

    ALL = "all"
    HEALTHY = "healthy"
    VEGETARIAN = "vegetarian"
    LOW_CARB = "lowCarb"
    GLUTEN_FREE = "glutenFree"
    MEAT = "meat"

    @property
    def display_name(self) -> str:
        return _DIET_LABELS[self].display_name

    @property
    def emoji(self) -> str:
        return _DIET_LABELS[self].emoji

    @classmethod
    def parse(cls, raw: object, default: "DietFilter | None" = None) -> "DietFilter":
        """Parse a stored diet value, mapping the legacy ``normal`` to ``all``."""
        if raw == "normal":
            return cls.ALL
        try:
            return cls(raw)
        except ValueError:
            return default or cls.ALL


class Cuisine(Enum):
    """Cuisine category of a recipe or meal."""

    ALL = "all"
    WASHOKU = "washoku"
    YOSHOKU = "yoshoku"
    CHUKA = "chuka"
    ITALIAN = "italian"
    KOREAN = "korean"
    FRENCH = "french"
    OTHER = "other"

    @property
    def display_name(self) -> str:
        return _CUISINE_LABELS[self].display_name

    @property
    def emoji(self) -> str:
        return _CUISINE_LABELS[self].emoji

    @classmethod
    def parse(cls, raw: object) -> "Cuisine | None":
        """Parse a raw value or Japanese display name.

        Empty values return ``None``. Anything that is not one of the main
        cuisines is treated as ``OTHER``.
        """
        if not isinstance(raw, str) or not raw.strip():
            return None
        value = raw.strip()
        try:
            return cls(value)
        except ValueError:
            pass
        for cuisine, label in _CUISINE_LABELS.items():
            if label.display_name == value:
                return cuisine
        return cls.OTHER


class CookTimeConstraint(Enum):
    """Upper bound on a recipe's total cooking time."""

    TEN_MIN = "tenMin"
    THIRTY_MIN = "thirtyMin"
    SIXTY_MIN = "sixtyMin"
    NO_LIMIT = "noLimit"

    @property
    def max_minutes(self) -> int | None:
        return _COOK_TIME_MINUTES[self]

    @property
    def display_name(self) -> str:
        return _COOK_TIME_LABELS[self].display_name

    @property
    def emoji(self) -> str:
        return _COOK_TIME_LABELS[self].emoji

    @classmethod
    def parse(cls, raw: object) -> "CookTimeConstraint":
        """Parse a stored value, accepting the legacy snake_case encodings."""
        if isinstance(raw, str):
            raw = _LEGACY_COOK_TIME.get(raw, raw)
        try:
            return cls(raw)
        except ValueError:
            return cls.NO_LIMIT


class HistorySortOption(Enum):
    """Sort order for the history list."""

    DATE_DESCENDING = "dateDescending"
    DATE_ASCENDING = "dateAscending"
    RATING = "rating"


class HistoryFilterType(Enum):
    """Quick filters of the history list."""

    ALL = "all"
    DECIDED = "decided"
    RECIPES = "recipes"
    RESTAURANTS = "restaurants"
    RATED = "rated"
    UNRATED = "unrated"


class ResultType(Enum):
    """Kind of candidate a decision resolved to."""

    RECIPE = "recipe"
    EATING_OUT_MEAL = "eatingOutMeal"
    RESTAURANT = "restaurant"


class HistoryTab(Enum):
    """Tabs of the history view."""

    CUISINE = "cuisine"
    RESTAURANT = "restaurant"


class RestaurantSortOption(Enum):
    """Sort order for restaurant search results."""

    DISTANCE = "distance"
    RATING = "rating"
    NAME = "name"


_MEAL_MODE_LABELS = {
    MealMode.COOK: Label("料理する", "🍳"),
    MealMode.EAT_OUT: Label("外食", "🍽️"),
}

_DIET_LABELS = {
    DietFilter.ALL: Label("すべて", "🍽️"),
    DietFilter.HEALTHY: Label("ヘルシー", "🥗"),
    DietFilter.VEGETARIAN: Label("ベジタリアン", "🌱"),
    DietFilter.LOW_CARB: Label("低糖質", "🥬"),
    DietFilter.GLUTEN_FREE: Label("グルテンフリー", "🌾"),
    DietFilter.MEAT: Label("肉食", "🥩"),
}

_CUISINE_LABELS = {
    Cuisine.ALL: Label("すべて", "🍽️"),
    Cuisine.WASHOKU: Label("和食", "🍱"),
    Cuisine.YOSHOKU: Label("洋食", "🍝"),
    Cuisine.CHUKA: Label("中華", "🥟"),
    Cuisine.ITALIAN: Label("イタリアン", "🍕"),
    Cuisine.KOREAN: Label("韓国", "🇰🇷"),
    Cuisine.FRENCH: Label("フレンチ", "🇫🇷"),
    Cuisine.OTHER: Label("その他", "🍴"),
}

_COOK_TIME_LABELS = {
    CookTimeConstraint.TEN_MIN: Label("10分以内", "⚡"),
    CookTimeConstraint.THIRTY_MIN: Label("30分以内", "⏰"),
    CookTimeConstraint.SIXTY_MIN: Label("60分以内", "🕐"),
    CookTimeConstraint.NO_LIMIT: Label("指定なし", "♾️"),
}

_COOK_TIME_MINUTES = {
    CookTimeConstraint.TEN_MIN: 10,
    CookTimeConstraint.THIRTY_MIN: 30,
    CookTimeConstraint.SIXTY_MIN: 60,
    CookTimeConstraint.NO_LIMIT: None,
}

_LEGACY_COOK_TIME = {
    "ten_min": "tenMin",
    "thirty_min": "thirtyMin",
    "sixty_min": "sixtyMin",
    "no_time_limit": "noLimit",
}


@dataclass(frozen=True)
class Under500:
    """Up to 500 yen."""

    min_value = None
    max_value = 500
    display_name = "¥500以下"
    emoji = "💰"

    def encode(self) -> str:
        return "under500"


@dataclass(frozen=True)
class Between500To1000:
    """500 to 1000 yen."""

    min_value = 500
    max_value = 1000
    display_name = "¥500〜¥1000"
    emoji = "💴"

    def encode(self) -> str:
        return "between500_1000"


@dataclass(frozen=True)
class Between1000To1500:
    """1000 to 1500 yen."""

    min_value = 1000
    max_value = 1500
    display_name = "¥1000〜¥1500"
    emoji = "💵"

    def encode(self) -> str:
        return "between1000_1500"


@dataclass(frozen=True)
class CustomBudget:
    """User-entered yen range, both bounds inclusive."""

    min_value: int
    max_value: int

    def __post_init__(self) -> None:
        if self.min_value <= 0 or self.max_value <= 0:
            raise InvalidCustomBudgetError(self.min_value, self.max_value)
        if self.min_value > self.max_value:
            raise InvalidCustomBudgetError(self.min_value, self.max_value)

    @property
    def display_name(self) -> str:
        return f"¥{self.min_value}〜¥{self.max_value}"

    @property
    def emoji(self) -> str:
        return "💳"

    def encode(self) -> str:
        return f"custom_{self.min_value}_{self.max_value}"


@dataclass(frozen=True)
class NoBudgetLimit:
    """No budget restriction."""

    min_value = None
    max_value = None
    display_name = "指定なし"
    emoji = "✨"

    def encode(self) -> str:
        return "noLimit"


BudgetRange = (
    Under500 | Between500To1000 | Between1000To1500 | CustomBudget | NoBudgetLimit
)

BUDGET_PRESETS: tuple[BudgetRange, ...] = (
    Under500(),
    Between500To1000(),
    Between1000To1500(),
    NoBudgetLimit(),
)

_BUDGET_BY_CODE: dict[str, BudgetRange] = {
    "under500": Under500(),
    "under_500": Under500(),
    "between500_1000": Between500To1000(),
    "500_1000": Between500To1000(),
    "between1000_1500": Between1000To1500(),
    "1000_1500": Between1000To1500(),
    "noLimit": NoBudgetLimit(),
    "no_limit": NoBudgetLimit(),
}


def parse_budget(raw: object) -> BudgetRange | None:
    """Parse a stored budget string, returning ``None`` for unknown values.

    Raises:
        InvalidCustomBudgetError: when a ``custom_<min>_<max>`` string carries
            bounds that do not form a valid range.
    """
    if not isinstance(raw, str):
        return None
    preset = _BUDGET_BY_CODE.get(raw)
    if preset is not None:
        return preset
    if not raw.startswith("custom_"):
        return None
    parts = raw.split("_")
    if len(parts) != 3:  # noqa: PLR2004
        return None
    try:
        min_value, max_value = int(parts[1]), int(parts[2])
    except ValueError:
        return None
    return CustomBudget(min_value=min_value, max_value=max_value)


def decode_budget(raw: object) -> BudgetRange:
    """Parse a stored budget string, falling back to no limit."""
    try:
        budget = parse_budget(raw)
    except InvalidCustomBudgetError as exc:
        _logger.warning("Ignoring stored budget %r: %s", raw, exc)
        return NoBudgetLimit()
    if budget is None:
        if raw not in (None, ""):
            _logger.warning("Unknown budget encoding %r, using no limit", raw)
        return NoBudgetLimit()
    return budget
