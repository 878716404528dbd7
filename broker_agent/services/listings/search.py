"""Property search against the Tokko Broker listings API."""

import json
from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from broker_agent.core.config import ListingsConfig, settings
from broker_agent.core.exceptions import ProviderRejected, ProviderTransportError
from broker_agent.models import (
    DataSource,
    OperationType,
    Property,
    PropertySearchFilter,
    PropertySearchResult,
)
from broker_agent.services.listings.fallback import search_fallback

logger = structlog.get_logger()

PROVIDER_NAME = "tokko"

# Provider-side codes
OPERATION_CODES = {OperationType.SALE: 1, OperationType.RENT: 2}
PROPERTY_TYPE_CODES = [1, 2, 3]  # apartment, house, land/office
UNBOUNDED_PRICE = 999_999_999

PLACEHOLDER_IMAGE = "https://via.placeholder.com/400x300?text=No+Image"
UNTITLED = "Propiedad sin título"
UNKNOWN_LOCATION = "Ubicación desconocida"


def _number(value: Any) -> float:
    """Coerce a provider value to a number, 0 when missing or malformed."""
    if value is None or value == "":
        return 0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0


def _text(value: Any, default: str) -> str:
    """Coerce a provider value to text, the default when missing."""
    if value is None or value == "":
        return default
    return value if isinstance(value, str) else str(value)


def _first(items: Any) -> dict[str, Any]:
    if isinstance(items, list) and items and isinstance(items[0], dict):
        return items[0]
    return {}


class PropertySearchService:
    """Searches listings and maps provider records into Property objects.

    Without an API key the search is served from a local dataset, which is a
    development fallback and not an error.
    """

    def __init__(
        self,
        config: ListingsConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config or settings.listings
        self._client = client

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.config.timeout_seconds)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def search(
        self,
        search_filter: PropertySearchFilter,
        api_key: str | None = None,
    ) -> PropertySearchResult:
        """Search properties matching the filter.

        Args:
            search_filter: Criteria, every field optional
            api_key: Tenant's listings API key; blank means not connected

        Returns:
            PropertySearchResult tagged with where the data came from

        Raises:
            ProviderRejected: Provider answered with a non-success status
            ProviderTransportError: Provider unreachable or timed out
        """
        if not api_key or not api_key.strip():
            properties = search_fallback(search_filter)
            logger.info(
                "Listings API key not configured, using fallback dataset",
                results=len(properties),
            )
            return PropertySearchResult(properties=properties, source=DataSource.MOCK)

        params = self.build_query(search_filter, api_key)
        url = f"{self.config.base_url.rstrip('/')}/property/search"

        try:
            response = await self._get_client().get(
                url,
                params=params,
                headers={"Accept": "application/json"},
                timeout=self.config.timeout_seconds,
            )
        except httpx.TransportError as e:
            logger.error("Listings request failed", provider=PROVIDER_NAME, error=repr(e))
            raise ProviderTransportError(PROVIDER_NAME, e) from e

        if not response.is_success:
            logger.warning(
                "Listings provider rejected request",
                provider=PROVIDER_NAME,
                status_code=response.status_code,
            )
            raise ProviderRejected(PROVIDER_NAME, response.status_code, response.text)

        try:
            data = response.json()
        except ValueError:
            raise ProviderRejected(PROVIDER_NAME, response.status_code, response.text[:500])

        records = data.get("objects") if isinstance(data, dict) else None
        if not isinstance(records, list):
            return PropertySearchResult(properties=[], source=DataSource.LIVE)

        operation = search_filter.operation_type or OperationType.SALE
        properties: list[Property] = []
        for record in records:
            if not isinstance(record, dict):
                continue
            try:
                properties.append(self.map_record(record, operation))
            except (ValidationError, TypeError, ValueError, OverflowError) as e:
                logger.warning(
                    "Skipping unmappable listing",
                    provider=PROVIDER_NAME,
                    record_id=repr(record.get("id")),
                    error=str(e),
                )

        logger.info(
            "Listings search completed",
            provider=PROVIDER_NAME,
            results=len(properties),
        )
        return PropertySearchResult(properties=properties, source=DataSource.LIVE)

    def build_query(self, search_filter: PropertySearchFilter, api_key: str) -> dict[str, str]:
        """Build query parameters for the provider search endpoint."""
        operation = search_filter.operation_type or OperationType.SALE
        search_data = {
            "current_localization_id": 0,
            "price_from": 0,
            "price_to": (
                search_filter.max_price
                if search_filter.max_price is not None
                else UNBOUNDED_PRICE
            ),
            "operation_types": [OPERATION_CODES[operation]],
            "property_types": PROPERTY_TYPE_CODES,
            "filters": (
                [{"field": "location", "value": search_filter.location}]
                if search_filter.location
                else []
            ),
            "with_custom_tags": [],
        }
        return {
            "key": api_key,
            "lang": self.config.language,
            "format": "json",
            "limit": str(self.config.page_size),
            "offset": "0",
            "data": json.dumps(search_data),
        }

    @staticmethod
    def map_record(record: dict[str, Any], operation: OperationType) -> Property:
        """Map a raw provider record into a Property.

        Never fails on missing optional fields; text fields of the wrong type
        are coerced with str().
        """
        price_info = _first(_first(record.get("operations")).get("prices"))
        location = record.get("location") or {}
        producer = record.get("producer") or {}
        property_id = int(_number(record.get("id")))

        return Property(
            id=property_id,
            title=_text(record.get("publication_title") or record.get("address"), UNTITLED),
            price=_number(price_info.get("price")),
            currency=_text(price_info.get("currency"), "USD"),
            location=_text(location.get("name") if isinstance(location, dict) else None, UNKNOWN_LOCATION),
            bedrooms=int(_number(record.get("suite_amount")) or _number(record.get("room_amount"))),
            bathrooms=int(_number(record.get("bathroom_amount"))),
            image_url=_text(_first(record.get("photos")).get("image"), PLACEHOLDER_IMAGE),
            link=_text(
                producer.get("web_url") if isinstance(producer, dict) else None,
                f"https://www.tokkobroker.com/p/{property_id}",
            ),
            operation=operation,
        )


# Singleton instance
_search_service: PropertySearchService | None = None


def get_search_service() -> PropertySearchService:
    """Get or create the property search service singleton."""
    global _search_service
    if _search_service is None:
        _search_service = PropertySearchService()
    return _search_service
