"""Listings service - property search with a local fallback dataset."""

from broker_agent.services.listings.fallback import FALLBACK_PROPERTIES, search_fallback
from broker_agent.services.listings.search import PropertySearchService, get_search_service

__all__ = [
    "FALLBACK_PROPERTIES",
    "PropertySearchService",
    "get_search_service",
    "search_fallback",
]
