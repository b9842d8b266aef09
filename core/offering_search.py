#!/usr/bin/env python3
"""
Offering Search - filter the service/product catalog.

Only active, available offerings are eligible. Every other filter is
optional and applied only when present; string matching is case-insensitive
substring containment and list filters (features, tags) are any-of.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Iterable
import logging

from database.models import Offering, OfferingStatus, ProviderProfile
from database.repository import MarketplaceRepository

logger = logging.getLogger(__name__)

SearchResult = Tuple[Offering, ProviderProfile]


@dataclass
class SearchFilters:
    term: Optional[str] = None
    category: Optional[str] = None
    max_price: Optional[float] = None
    offering_type: Optional[str] = None  # "service" | "product"
    delivery_time: Optional[str] = None
    features: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    location: Optional[str] = None
    is_available: Optional[bool] = None


def _contains(haystack: Optional[str], needle: str) -> bool:
    return needle.lower() in (haystack or '').lower()


def _shares_any(values: Iterable[str], wanted: Iterable[str]) -> bool:
    values = list(values or [])
    return any(any(_contains(value, w) for value in values) for w in wanted)


def is_eligible(offering: Offering) -> bool:
    return offering.status == OfferingStatus.ACTIVE.value and bool(offering.is_available)


def matches_filters(offering: Offering, filters: SearchFilters) -> bool:
    """True when an eligible offering passes every filter that is set."""
    if not is_eligible(offering):
        return False

    if filters.term:
        searchable = [offering.name, offering.description, offering.category] + list(offering.tags or [])
        if not any(_contains(text, filters.term) for text in searchable):
            return False

    if filters.category and not _contains(offering.category, filters.category):
        return False

    # Compared against the minimum price only
    if filters.max_price is not None and float(offering.min_price or 0) > filters.max_price:
        return False

    if filters.offering_type and offering.offering_type != filters.offering_type:
        return False

    if filters.delivery_time and not _contains(offering.delivery_time, filters.delivery_time):
        return False

    if filters.features and not _shares_any(offering.features, filters.features):
        return False

    if filters.tags and not _shares_any(offering.tags, filters.tags):
        return False

    if filters.location and not _contains(offering.availability_location, filters.location):
        return False

    if filters.is_available is not None and bool(offering.is_available) != filters.is_available:
        return False

    return True


def sort_key(offering: Offering, term: Optional[str]):
    """Exact name match, then name containing the term, then alphabetical."""
    name = (offering.name or '').lower()
    if not term:
        return (0, name)
    term = term.lower()
    if name == term:
        rank = 0
    elif term in name:
        rank = 1
    else:
        rank = 2
    return (rank, name)


def filter_offerings(
    candidates: Iterable[Offering],
    filters: Optional[SearchFilters] = None
) -> List[Offering]:
    filters = filters or SearchFilters()
    matched = [o for o in candidates if matches_filters(o, filters)]
    matched.sort(key=lambda o: sort_key(o, filters.term))
    return matched


class OfferingSearch:
    """Runs SearchFilters against the offering collection."""

    def __init__(self, repo: MarketplaceRepository):
        self.repo = repo

    def search(self, filters: Optional[SearchFilters] = None, **kwargs) -> List[SearchResult]:
        """
        Search offerings. Accepts a SearchFilters or its fields as keywords.

        Returns (offering, provider) pairs; offerings whose provider cannot
        be resolved are skipped.
        """
        if filters is None:
            filters = SearchFilters(**kwargs)

        results = []
        for offering in filter_offerings(self.repo.offerings.get_active(), filters):
            provider = offering.provider
            if provider is None:
                logger.warning(f"Offering {offering.id} has no provider profile, skipping")
                continue
            results.append((offering, provider))

        logger.debug(f"Offering search returned {len(results)} results for {filters}")
        return results
