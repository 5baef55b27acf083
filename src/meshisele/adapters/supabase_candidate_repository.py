"""Supabase repository for recipes, eating-out meals and restaurants."""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from supabase import Client

from meshisele.adapters.documents import (
    parse_eating_out_meal,
    parse_recipe,
    parse_restaurant,
)
from meshisele.domain.candidates import Candidate
from meshisele.domain.enums import DietFilter, ResultType
from meshisele.domain.errors import MalformedRecordError
from meshisele.services.decisions import CandidateRepository

_TABLES = {
    ResultType.RECIPE: "recipes",
    ResultType.EATING_OUT_MEAL: "eatingOutMeals",
    ResultType.RESTAURANT: "restaurants",
}

_PARSERS: dict[ResultType, Callable[[object], Candidate]] = {
    ResultType.RECIPE: parse_recipe,
    ResultType.EATING_OUT_MEAL: parse_eating_out_meal,
    ResultType.RESTAURANT: parse_restaurant,
}

_logger = logging.getLogger(__name__)


@dataclass
class SupabaseCandidateRepository(CandidateRepository):
    """Supabase-backed candidate catalogue."""

    client: Client

    def fetch_candidates(
        self, result_type: ResultType, diet_filter: DietFilter | None = None
    ) -> list[Candidate]:
        """Return every candidate of a type, skipping unreadable rows."""
        query = self.client.table(_TABLES[result_type]).select("*")
        if diet_filter is not None and result_type is not ResultType.RESTAURANT:
            query = query.contains("dietTags", [diet_filter.value])
        response = query.execute()
        return _parse_rows(result_type, response.data or [])

    def get_candidate(
        self, result_type: ResultType, candidate_id: str
    ) -> Candidate | None:
        """Return one candidate by id, if present."""
        response = (
            self.client.table(_TABLES[result_type])
            .select("*")
            .eq("id", candidate_id)
            .limit(1)
            .execute()
        )
        candidates = _parse_rows(result_type, response.data or [])
        return candidates[0] if candidates else None

    def increment_popularity(self, result_type: ResultType, candidate_id: str) -> int:
        """Increment the popularity counter of a candidate."""
        table = _TABLES[result_type]
        response = (
            self.client.table(table)
            .select("popularityCount")
            .eq("id", candidate_id)
            .limit(1)
            .execute()
        )
        current = 0
        if response.data:
            current = int(response.data[0].get("popularityCount") or 0)
        updated = current + 1
        self.client.table(table).update({"popularityCount": updated}).eq(
            "id", candidate_id
        ).execute()
        return updated


def _parse_rows(
    result_type: ResultType, rows: list[dict[str, object]]
) -> list[Candidate]:
    parser = _PARSERS[result_type]
    candidates: list[Candidate] = []
    for row in rows:
        try:
            candidates.append(parser(row))
        except MalformedRecordError as exc:
            _logger.warning("Skipping %s row: %s", result_type.value, exc)
    return candidates
