"""Supabase repository for user default preferences."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from meshisele.adapters.documents import parse_preferences, preferences_document
from meshisele.domain.preferences import UserPreferences
from meshisele.services.preferences import PreferencesRepository


@dataclass
class SupabaseUserRepository(PreferencesRepository):
    """Supabase implementation for the user profile's preferences."""

    client: Client

    def get_preferences(self, user_id: str) -> UserPreferences | None:
        """Return stored preferences, if the user has a profile."""
        response = (
            self.client.table("users")
            .select("defaultPreferences")
            .eq("id", user_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return parse_preferences(response.data[0].get("defaultPreferences"))

    def save_preferences(self, user_id: str, preferences: UserPreferences) -> None:
        """Write preferences, creating the profile row when missing."""
        self.client.table("users").upsert(
            {
                "id": user_id,
                "defaultPreferences": preferences_document(preferences),
                "updatedAt": datetime.now(tz=UTC).isoformat(),
            }
        ).execute()
