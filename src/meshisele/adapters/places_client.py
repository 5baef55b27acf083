"""Google Places (New) text-search client."""

from dataclasses import dataclass
from typing import Protocol

import httpx

FIELD_MASK = ",".join(
    [
        "places.id",
        "places.displayName",
        "places.formattedAddress",
        "places.location",
        "places.rating",
        "places.userRatingCount",
        "places.priceLevel",
        "places.types",
        "places.businessStatus",
        "places.currentOpeningHours",
        "places.websiteUri",
        "places.internationalPhoneNumber",
    ]
)


class PlacesClient(Protocol):
    """Interface for the external restaurant geosearch."""

    async def search_text(self, payload: dict[str, object]) -> dict[str, object]:
        """Run a text search and return the raw API data."""


@dataclass
class HttpxPlacesClient(PlacesClient):
    """HTTPX-backed Places client."""

    api_key: str
    base_url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, api_key: str, base_url: str) -> "HttpxPlacesClient":
        """Create a Places client with a managed httpx session."""
        return cls(api_key=api_key, base_url=base_url, http_client=httpx.AsyncClient())

    async def search_text(self, payload: dict[str, object]) -> dict[str, object]:
        """Search places by free text with an optional location bias."""
        response = await self.http_client.post(
            f"{self.base_url}/places:searchText",
            headers={
                "X-Goog-Api-Key": self.api_key,
                "X-Goog-FieldMask": FIELD_MASK,
            },
            json=payload,
            timeout=15,
        )
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
