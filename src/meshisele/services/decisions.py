"""Picking one candidate out of the filtered pool and recording the decision."""

import logging
import random
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Protocol
from uuid import uuid4

from meshisele.domain.candidates import Candidate, Recipe, Restaurant
from meshisele.domain.criteria import FilterCriteria
from meshisele.domain.enums import (
    CookTimeConstraint,
    DietFilter,
    MealMode,
    NoBudgetLimit,
    ResultType,
)
from meshisele.domain.errors import EmptyCandidatePoolError
from meshisele.domain.history import HistoryEntry
from meshisele.services.filters import filter_candidates
from meshisele.services.history import HistoryRepository
from meshisele.services.pool_cache import DecisionPool, PoolCache

_logger = logging.getLogger(__name__)


class RandomSource(Protocol):
    """Uniform integer source; ``random.Random`` satisfies it."""

    def randrange(self, stop: int) -> int:
        """Return an integer in ``[0, stop)``."""


class CandidateRepository(Protocol):
    """Read access to stored candidates plus the popularity counter."""

    def fetch_candidates(
        self, result_type: ResultType, diet_filter: DietFilter | None = None
    ) -> list[Candidate]:
        """Return all candidates of a type, optionally pre-filtered by diet tag."""

    def get_candidate(
        self, result_type: ResultType, candidate_id: str
    ) -> Candidate | None:
        """Return one candidate by id, if present."""

    def increment_popularity(self, result_type: ResultType, candidate_id: str) -> int:
        """Add one to the candidate's popularity and return the new count."""


def decide(filtered: Sequence[Candidate], rng: RandomSource) -> Candidate:
    """Pick one candidate uniformly at random.

    Popularity is informational and does not weight the pick.

    Raises:
        EmptyCandidatePoolError: when there is nothing to pick from.
    """
    if not filtered:
        raise EmptyCandidatePoolError()
    return filtered[rng.randrange(len(filtered))]


def build_history_entry(
    criteria: FilterCriteria,
    candidate: Candidate,
    decided_at: datetime,
    *,
    entry_id: str | None = None,
    is_decided: bool = True,
) -> HistoryEntry:
    """Snapshot the selections and the chosen candidate as a history entry."""
    if criteria.meal_mode is None:
        raise ValueError("A history entry needs a meal mode")
    categories = (
        candidate.categories if isinstance(candidate, Restaurant) else None
    )
    return HistoryEntry(
        id=entry_id or str(uuid4()),
        timestamp=decided_at,
        meal_mode=criteria.meal_mode,
        diet_filter=criteria.diet_filter or DietFilter.ALL,
        cuisine=criteria.cuisine,
        is_surprise=criteria.is_surprise,
        specified_ingredients=tuple(sorted(criteria.specified_ingredients)),
        excluded_ingredients=tuple(sorted(criteria.excluded_ingredients)),
        excluded_allergens=tuple(sorted(criteria.excluded_allergens)),
        servings_count=criteria.servings_count,
        budget_range=criteria.budget_range or NoBudgetLimit(),
        cook_time_constraint=(
            criteria.cook_time_constraint or CookTimeConstraint.NO_LIMIT
        ),
        result_type=candidate.result_type,
        result_id=candidate.id,
        result_name=candidate.name,
        is_decided=is_decided,
        restaurant_categories=categories,
    )


@dataclass(frozen=True)
class DecisionResult:
    """A picked candidate and the session that can re-pick from the same pool."""

    session_id: str
    candidate: Candidate
    pool_size: int
    rerun_count: int = 0


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


def _new_id() -> str:
    return str(uuid4())


@dataclass
class DecisionService:
    """Runs a decision from fetched candidates through to the saved history entry."""

    candidate_repository: CandidateRepository
    history_repository: HistoryRepository
    pool_cache: PoolCache
    rng: RandomSource = field(default_factory=random.Random)
    pool_ttl_seconds: int = 900
    clock: Callable[[], datetime] = _utcnow
    id_factory: Callable[[], str] = _new_id

    def start(self, criteria: FilterCriteria) -> DecisionResult:
        """Filter a fresh pool for the criteria and pick from it.

        Raises:
            ValueError: when the criteria are not ready to decide.
            EmptyCandidatePoolError: when nothing matches.
        """
        if not criteria.is_ready_to_decide:
            raise ValueError("Choose a meal mode and filters before deciding")
        candidates = self._fetch_pool(criteria)
        filtered = filter_candidates(criteria, candidates)
        if not filtered:
            _logger.warning(
                "No candidates matched: mode=%s fetched=%s",
                criteria.meal_mode,
                len(candidates),
            )
            raise EmptyCandidatePoolError(criteria)
        pool = DecisionPool(
            session_id=self.id_factory(),
            criteria=criteria,
            candidates=tuple(filtered),
        )
        self.pool_cache.put(pool, ttl_seconds=self.pool_ttl_seconds)
        candidate = decide(pool.candidates, self.rng)
        _logger.info(
            "Decided %s from %s candidates", candidate.id, len(pool.candidates)
        )
        return DecisionResult(
            session_id=pool.session_id,
            candidate=candidate,
            pool_size=len(pool.candidates),
        )

    def rerun(self, session_id: str) -> DecisionResult:
        """Pick again from the pool of an earlier decision.

        The previous pick is not excluded, so the same candidate can repeat.

        Raises:
            KeyError: when the session is unknown or expired.
        """
        pool = self.pool_cache.get(session_id)
        if pool is None:
            raise KeyError(session_id)
        pool = replace(pool, rerun_count=pool.rerun_count + 1)
        self.pool_cache.put(pool, ttl_seconds=self.pool_ttl_seconds)
        candidate = decide(pool.candidates, self.rng)
        return DecisionResult(
            session_id=pool.session_id,
            candidate=candidate,
            pool_size=len(pool.candidates),
            rerun_count=pool.rerun_count,
        )

    def criteria_for(self, session_id: str) -> FilterCriteria | None:
        """Return the criteria an active session was started with."""
        pool = self.pool_cache.get(session_id)
        return pool.criteria if pool else None

    def finalize(
        self,
        user_id: str,
        criteria: FilterCriteria,
        candidate: Candidate,
        *,
        is_decided: bool = True,
    ) -> HistoryEntry:
        """Save the decision to history and bump the candidate's popularity."""
        entry = build_history_entry(
            criteria,
            candidate,
            self.clock(),
            entry_id=self.id_factory(),
            is_decided=is_decided,
        )
        self.history_repository.save_history_entry(entry, user_id)
        if is_decided and isinstance(candidate, Recipe):
            count = self.candidate_repository.increment_popularity(
                ResultType.RECIPE, candidate.id
            )
            _logger.info("Recipe %s popularity is now %s", candidate.id, count)
        return entry

    def finalize_by_id(
        self,
        user_id: str,
        criteria: FilterCriteria,
        result_type: ResultType,
        result_id: str,
        *,
        is_decided: bool = True,
    ) -> HistoryEntry:
        """Finalize a stored candidate looked up by type and id.

        Raises:
            KeyError: when the candidate does not exist.
        """
        candidate = self.candidate_repository.get_candidate(result_type, result_id)
        if candidate is None:
            raise KeyError(result_id)
        return self.finalize(user_id, criteria, candidate, is_decided=is_decided)

    def _fetch_pool(self, criteria: FilterCriteria) -> list[Candidate]:
        diet = criteria.diet_filter
        pushed_diet = diet if diet is not None and diet is not DietFilter.ALL else None
        if criteria.meal_mode is MealMode.COOK:
            return self.candidate_repository.fetch_candidates(
                ResultType.RECIPE, pushed_diet
            )
        return self.candidate_repository.fetch_candidates(
            ResultType.EATING_OUT_MEAL, pushed_diet
        )
