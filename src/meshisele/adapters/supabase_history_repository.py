"""Supabase repository for decision history."""

import logging
from dataclasses import dataclass

from supabase import Client

from meshisele.adapters.documents import history_entry_document, parse_history_entry
from meshisele.domain.errors import MalformedRecordError
from meshisele.domain.history import HistoryEntry
from meshisele.services.history import HistoryRepository

_logger = logging.getLogger(__name__)


@dataclass
class SupabaseHistoryRepository(HistoryRepository):
    """Supabase implementation of a user's history."""

    client: Client

    def fetch_history_entries(self, user_id: str) -> list[HistoryEntry]:
        """Return a user's entries, newest first."""
        response = (
            self.client.table("history")
            .select("*")
            .eq("userId", user_id)
            .order("timestamp", desc=True)
            .execute()
        )
        entries = []
        for row in response.data or []:
            try:
                entries.append(parse_history_entry(row))
            except MalformedRecordError as exc:
                _logger.warning("Skipping history row: %s", exc)
        return entries

    def get_history_entry(self, user_id: str, entry_id: str) -> HistoryEntry | None:
        """Return a single entry, if present."""
        response = (
            self.client.table("history")
            .select("*")
            .eq("userId", user_id)
            .eq("id", entry_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return parse_history_entry(response.data[0])

    def save_history_entry(self, entry: HistoryEntry, user_id: str) -> None:
        """Insert a new entry."""
        response = (
            self.client.table("history")
            .insert({**history_entry_document(entry), "userId": user_id})
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to save history entry")

    def update_history_entry_rating(
        self, entry_id: str, user_id: str, rating: float
    ) -> None:
        """Set the rating of an entry."""
        self._update(entry_id, user_id, {"rating": rating})

    def update_history_entry_comment(
        self, entry_id: str, user_id: str, comment: str
    ) -> None:
        """Set the user comment of an entry."""
        self._update(entry_id, user_id, {"userComment": comment})

    def delete_history_entry(self, entry_id: str, user_id: str) -> None:
        """Delete a single entry."""
        self.client.table("history").delete().eq("userId", user_id).eq(
            "id", entry_id
        ).execute()

    def clear_all_history(self, user_id: str) -> None:
        """Delete every entry of a user."""
        self.client.table("history").delete().eq("userId", user_id).execute()

    def _update(self, entry_id: str, user_id: str, payload: dict[str, object]) -> None:
        response = (
            self.client.table("history")
            .update(payload)
            .eq("userId", user_id)
            .eq("id", entry_id)
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to update history entry")
