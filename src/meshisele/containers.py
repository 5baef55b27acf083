"""Dependency container wiring for the application."""

import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from meshisele.adapters.places_client import HttpxPlacesClient
from meshisele.adapters.supabase_candidate_repository import (
    SupabaseCandidateRepository,
)
from meshisele.adapters.supabase_history_repository import (
    SupabaseHistoryRepository,
)
from meshisele.adapters.supabase_rating_repository import SupabaseRatingRepository
from meshisele.adapters.supabase_user_repository import SupabaseUserRepository
from meshisele.config import Settings, parse_seed
from meshisele.services.decisions import CandidateRepository, DecisionService
from meshisele.services.history import HistoryService
from meshisele.services.pool_cache import InMemoryPoolCache
from meshisele.services.preferences import PreferencesService
from meshisele.services.ratings import RatingService
from meshisele.services.restaurants import RestaurantSearchService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    candidate_repository: CandidateRepository
    decision_service: DecisionService
    history_service: HistoryService
    rating_service: RatingService
    preferences_service: PreferencesService
    restaurant_search_service: RestaurantSearchService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    candidate_repository = SupabaseCandidateRepository(supabase_client)
    history_repository = SupabaseHistoryRepository(supabase_client)
    rating_service = RatingService(SupabaseRatingRepository(supabase_client))
    preferences_service = PreferencesService(SupabaseUserRepository(supabase_client))
    decision_service = DecisionService(
        candidate_repository=candidate_repository,
        history_repository=history_repository,
        pool_cache=InMemoryPoolCache(),
        rng=random.Random(parse_seed(resolved_settings.decision_seed)),
        pool_ttl_seconds=resolved_settings.decision_pool_ttl_seconds,
    )
    history_service = HistoryService(
        repository=history_repository,
        rating_service=rating_service,
    )
    places_client = HttpxPlacesClient.create(
        api_key=resolved_settings.places_api_key,
        base_url=resolved_settings.places_base_url,
    )
    restaurant_search_service = RestaurantSearchService(
        client=places_client,
        search_radius_m=resolved_settings.default_search_radius_m,
    )

    async def close_resources() -> None:
        await places_client.close()

    return AppContainer(
        settings=resolved_settings,
        candidate_repository=candidate_repository,
        decision_service=decision_service,
        history_service=history_service,
        rating_service=rating_service,
        preferences_service=preferences_service,
        restaurant_search_service=restaurant_search_service,
        close_resources=close_resources,
    )
