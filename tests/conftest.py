"""Shared test fixtures."""

from dataclasses import dataclass, field, replace

import pytest

from meshisele.adapters.places_client import PlacesClient
from meshisele.config import Settings
from meshisele.containers import AppContainer
from meshisele.domain.candidates import (
    Allergens,
    Candidate,
    EatingOutMeal,
    Nutrition,
    Recipe,
)
from meshisele.domain.enums import DietFilter, ResultType
from meshisele.domain.history import GlobalRating, HistoryEntry
from meshisele.domain.preferences import UserPreferences
from meshisele.services.decisions import CandidateRepository, DecisionService
from meshisele.services.history import HistoryRepository, HistoryService
from meshisele.services.pool_cache import InMemoryPoolCache
from meshisele.services.preferences import PreferencesRepository, PreferencesService
from meshisele.services.ratings import RatingRepository, RatingService
from meshisele.services.restaurants import RestaurantSearchService


@dataclass
class InMemoryCandidateRepository(CandidateRepository):
    """In-memory candidate catalogue for tests."""

    candidates: dict[ResultType, list[Candidate]] = field(default_factory=dict)
    popularity_calls: list[tuple[ResultType, str]] = field(default_factory=list)

    def fetch_candidates(
        self, result_type: ResultType, diet_filter: DietFilter | None = None
    ) -> list[Candidate]:
        items = list(self.candidates.get(result_type, []))
        if diet_filter is None:
            return items
        return [
            item
            for item in items
            if getattr(item, "diet_tags", None) is None
            or diet_filter.value in item.diet_tags
        ]

    def get_candidate(
        self, result_type: ResultType, candidate_id: str
    ) -> Candidate | None:
        for item in self.candidates.get(result_type, []):
            if item.id == candidate_id:
                return item
        return None

    def increment_popularity(self, result_type: ResultType, candidate_id: str) -> int:
        self.popularity_calls.append((result_type, candidate_id))
        items = self.candidates.get(result_type, [])
        for index, item in enumerate(items):
            if item.id == candidate_id:
                updated = replace(item, popularity_count=item.popularity_count + 1)
                items[index] = updated
                return updated.popularity_count
        return 0


@dataclass
class InMemoryHistoryRepository(HistoryRepository):
    """In-memory history store for tests."""

    entries: dict[str, list[HistoryEntry]] = field(default_factory=dict)

    def fetch_history_entries(self, user_id: str) -> list[HistoryEntry]:
        return sorted(
            self.entries.get(user_id, []),
            key=lambda entry: entry.timestamp,
            reverse=True,
        )

    def get_history_entry(self, user_id: str, entry_id: str) -> HistoryEntry | None:
        for entry in self.entries.get(user_id, []):
            if entry.id == entry_id:
                return entry
        return None

    def save_history_entry(self, entry: HistoryEntry, user_id: str) -> None:
        self.entries.setdefault(user_id, []).append(entry)

    def update_history_entry_rating(
        self, entry_id: str, user_id: str, rating: float
    ) -> None:
        self._replace(user_id, entry_id, rating=rating)

    def update_history_entry_comment(
        self, entry_id: str, user_id: str, comment: str
    ) -> None:
        self._replace(user_id, entry_id, user_comment=comment)

    def delete_history_entry(self, entry_id: str, user_id: str) -> None:
        self.entries[user_id] = [
            entry for entry in self.entries.get(user_id, []) if entry.id != entry_id
        ]

    def clear_all_history(self, user_id: str) -> None:
        self.entries.pop(user_id, None)

    def _replace(self, user_id: str, entry_id: str, **changes: object) -> None:
        self.entries[user_id] = [
            replace(entry, **changes) if entry.id == entry_id else entry
            for entry in self.entries.get(user_id, [])
        ]


@dataclass
class InMemoryRatingRepository(RatingRepository):
    """In-memory global ratings keyed like the stored documents."""

    ratings: dict[str, GlobalRating] = field(default_factory=dict)

    def fetch_global_ratings(
        self, item_id: str, item_type: ResultType
    ) -> list[GlobalRating]:
        return [
            rating
            for rating in self.ratings.values()
            if rating.item_id == item_id and rating.item_type is item_type
        ]

    def save_global_rating(
        self,
        item_id: str,
        item_type: ResultType,
        user_id: str,
        rating: float,
        comment: str | None,
    ) -> None:
        record = GlobalRating(
            item_id=item_id,
            item_type=item_type,
            user_id=user_id,
            rating=rating,
            comment=comment,
        )
        self.ratings[record.document_id] = record


@dataclass
class InMemoryPreferencesRepository(PreferencesRepository):
    """In-memory preferences for tests."""

    preferences: dict[str, UserPreferences] = field(default_factory=dict)

    def get_preferences(self, user_id: str) -> UserPreferences | None:
        return self.preferences.get(user_id)

    def save_preferences(self, user_id: str, preferences: UserPreferences) -> None:
        self.preferences[user_id] = preferences


@dataclass
class FakePlacesClient(PlacesClient):
    """Places client returning a canned response and recording payloads."""

    response: dict[str, object] = field(default_factory=lambda: {"places": []})
    payloads: list[dict[str, object]] = field(default_factory=list)
    error: Exception | None = None

    async def search_text(self, payload: dict[str, object]) -> dict[str, object]:
        self.payloads.append(payload)
        if self.error is not None:
            raise self.error
        return self.response


@dataclass
class SequenceRandom:
    """Deterministic random source cycling through fixed picks."""

    picks: list[int]
    calls: int = 0

    def randrange(self, stop: int) -> int:
        value = self.picks[self.calls % len(self.picks)]
        self.calls += 1
        return value % stop


def make_recipes() -> list[Recipe]:
    return [
        Recipe(
            id="oyakodon",
            title="親子丼",
            ingredients=("鶏肉 200g", "卵 2個", "玉ねぎ 1/2個"),
            ingredient_tags=("鶏肉", "卵", "玉ねぎ"),
            total_time_minutes=20,
            base_servings=2,
            diet_tags=("all", "healthy"),
            estimated_cost_base=800,
            nutrition=Nutrition(calories=650, protein=40.0, fat=20.0, carbs=70.0),
            allergens=Allergens(mandatory=("卵",), recommended=("鶏肉",)),
            cuisine="和食",
        ),
        Recipe(
            id="veggie-curry",
            title="野菜カレー",
            ingredients=("じゃがいも 2個", "にんじん 1本", "玉ねぎ 1個"),
            ingredient_tags=("じゃがいも", "にんじん", "玉ねぎ"),
            total_time_minutes=45,
            base_servings=4,
            diet_tags=("all", "vegetarian"),
            estimated_cost_base=1200,
            allergens=Allergens(mandatory=("小麦",)),
            cuisine="洋食",
        ),
        Recipe(
            id="mapo-tofu",
            title="麻婆豆腐",
            ingredients=("豆腐 1丁", "豚ひき肉 150g"),
            ingredient_tags=("豆腐", "豚ひき肉"),
            total_time_minutes=15,
            base_servings=2,
            diet_tags=("all", "meat"),
            estimated_cost_base=1400,
            allergens=Allergens(mandatory=("大豆",)),
            cuisine="中華",
        ),
    ]


def make_meals() -> list[EatingOutMeal]:
    return [
        EatingOutMeal(
            id="ramen",
            name="ラーメン",
            cuisine="chuka",
            diet_tags=("all",),
            estimated_budget=900,
            allergens=Allergens(mandatory=("小麦", "卵")),
        ),
        EatingOutMeal(
            id="sushi",
            name="寿司",
            cuisine="washoku",
            diet_tags=("all", "healthy"),
            estimated_budget=2500,
        ),
        EatingOutMeal(
            id="salad-bowl",
            name="サラダボウル",
            cuisine="other",
            diet_tags=("all", "healthy", "vegetarian"),
            estimated_budget=1200,
        ),
    ]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key",
        places_api_key="places-key",
    )


@pytest.fixture
def candidate_repository() -> InMemoryCandidateRepository:
    return InMemoryCandidateRepository(
        candidates={
            ResultType.RECIPE: make_recipes(),
            ResultType.EATING_OUT_MEAL: make_meals(),
        }
    )


@pytest.fixture
def history_repository() -> InMemoryHistoryRepository:
    return InMemoryHistoryRepository()


@pytest.fixture
def places_client() -> FakePlacesClient:
    return FakePlacesClient()


@pytest.fixture
def container(
    settings: Settings,
    candidate_repository: InMemoryCandidateRepository,
    history_repository: InMemoryHistoryRepository,
    places_client: FakePlacesClient,
) -> AppContainer:
    rating_service = RatingService(InMemoryRatingRepository())
    decision_service = DecisionService(
        candidate_repository=candidate_repository,
        history_repository=history_repository,
        pool_cache=InMemoryPoolCache(),
        rng=SequenceRandom([0]),
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        candidate_repository=candidate_repository,
        decision_service=decision_service,
        history_service=HistoryService(
            repository=history_repository, rating_service=rating_service
        ),
        rating_service=rating_service,
        preferences_service=PreferencesService(InMemoryPreferencesRepository()),
        restaurant_search_service=RestaurantSearchService(client=places_client),
        close_resources=close_resources,
    )
