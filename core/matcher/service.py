#!/usr/bin/env python3
"""
Smart Matching Service - offering-level ranking for a requester.

Pipeline:
1. Resolve the requester's needs profile (needs, service types, budget,
   industry, size class, location)
2. Offering Search, twice: services pre-filtered by max budget and location,
   products pre-filtered by max budget only (term/category left empty to
   maximize recall)
3. Score every candidate on five dimensions and take the weighted sum
4. Drop candidates below `min_score`, sort the rest descending

Never raises for a well-typed requester id: an unresolvable profile yields
an empty list.
"""

import asyncio
from typing import List, Optional
import logging

import numpy as np

from core.config_loader import SmartMatchingConfig
from core.matcher.compatibility import (
    calculate_needs_compatibility,
    calculate_budget_compatibility,
    calculate_location_compatibility,
    calculate_industry_compatibility,
    calculate_size_compatibility,
)
from core.matcher.models import RequesterNeeds, CompatibilityBreakdown, RankedResult
from core.offering_search import OfferingSearch, SearchFilters
from core.utils import clamp
from database.models import Offering, OfferingType, RequesterProfile
from database.repository import MarketplaceRepository

logger = logging.getLogger(__name__)

REASON_TEXT = {
    'needs': "Matches your specific needs",
    'budget': "Fits your budget",
    'location': "Conveniently located",
    'industry': "Relevant for your industry",
    'size': "Right-sized for your company",
}


class SmartMatchingService:
    """Rank services and products against a requester's needs profile."""

    def __init__(
        self,
        repo: MarketplaceRepository,
        search: Optional[OfferingSearch] = None,
        config: Optional[SmartMatchingConfig] = None,
        latency_seconds: float = 0.0
    ):
        self.repo = repo
        self.search = search or OfferingSearch(repo)
        self.config = config or SmartMatchingConfig()
        self.latency_seconds = latency_seconds

        w = self.config.weights
        self.weights = np.array([w.needs, w.budget, w.location, w.industry, w.size], dtype=np.float64)

    def resolve_needs(self, user_id: str) -> Optional[RequesterNeeds]:
        """
        Build the needs profile for a requester user id (or profile id).

        Returns None when no requester profile can be resolved.
        """
        profile = self.repo.requesters.get_by_user_id(user_id)
        if profile is None:
            profile = self.repo.requesters.get_by_id(user_id)
        if profile is None:
            logger.info(f"No requester profile for {user_id}")
            return None
        return self.needs_from_profile(profile)

    def needs_from_profile(self, profile: RequesterProfile) -> RequesterNeeds:
        budget_min = profile.budget_min
        budget_max = profile.budget_max
        if budget_min is None or budget_max is None or (not budget_min and not budget_max):
            budget_min = self.config.default_budget_min
            budget_max = self.config.default_budget_max

        return RequesterNeeds(
            service_types=list(profile.service_types or []),
            needs=list(profile.needs or []),
            budget_min=float(budget_min),
            budget_max=float(budget_max),
            industry=profile.industry or '',
            size=profile.size or 'micro',
            location=profile.location or '',
        )

    def score_offering(self, needs: RequesterNeeds, offering: Offering) -> CompatibilityBreakdown:
        price_min = float(offering.min_price or 0)
        price_max = float(offering.max_price if offering.max_price is not None else price_min)
        if offering.offering_type == OfferingType.PRODUCT.value:
            price_max = price_min

        return CompatibilityBreakdown(
            needs=calculate_needs_compatibility(
                needs.needs, list(offering.features or []) + offering.details
            ),
            budget=calculate_budget_compatibility(
                needs.budget_min, needs.budget_max, price_min, price_max
            ),
            location=calculate_location_compatibility(
                needs.location, offering.availability_location or ''
            ),
            industry=calculate_industry_compatibility(
                needs.industry, offering.category or '', self.config.industry_mapping
            ),
            size=calculate_size_compatibility(
                needs.size,
                price_min,
                price_max,
                self.config.size_multipliers,
                default_multiplier=self.config.default_size_multiplier,
                tolerance=self.config.size_tolerance,
                match_score=self.config.size_match_score,
                mismatch_score=self.config.size_mismatch_score,
            ),
        )

    def weighted_score(self, compatibility: CompatibilityBreakdown) -> float:
        vector = np.clip(np.array(compatibility.as_vector(), dtype=np.float64), 0.0, 1.0)
        return clamp(float(vector @ self.weights), 0.0, 1.0)

    def reasons_for(self, compatibility: CompatibilityBreakdown) -> List[str]:
        return [
            REASON_TEXT[name]
            for name in CompatibilityBreakdown.DIMENSIONS
            if getattr(compatibility, name) > self.config.reason_threshold
        ]

    def rank(self, needs: RequesterNeeds, candidates: List[tuple]) -> List[RankedResult]:
        results = []
        for offering, provider in candidates:
            compatibility = self.score_offering(needs, offering)
            score = self.weighted_score(compatibility)
            if score < self.config.min_score:
                continue
            results.append(RankedResult(
                offering=offering,
                provider=provider,
                match_score=score,
                reasons=self.reasons_for(compatibility),
                compatibility=compatibility,
            ))

        results.sort(key=lambda r: r.match_score, reverse=True)
        return results

    def gather_candidates(self, needs: RequesterNeeds) -> List[tuple]:
        services = self.search.search(SearchFilters(
            max_price=needs.budget_max,
            offering_type=OfferingType.SERVICE.value,
            location=needs.location or None,
        ))
        products = self.search.search(SearchFilters(
            max_price=needs.budget_max,
            offering_type=OfferingType.PRODUCT.value,
        ))
        return services + products

    async def find_smart_matches(self, user_id: str) -> List[RankedResult]:
        """Ranked offerings for a requester; empty when nothing resolves."""
        if self.latency_seconds:
            await asyncio.sleep(self.latency_seconds)

        try:
            needs = self.resolve_needs(user_id)
            if needs is None:
                return []
            results = self.rank(needs, self.gather_candidates(needs))
        except Exception as e:
            logger.error(f"Smart matching failed for {user_id}: {e}", exc_info=True)
            return []

        logger.info(f"Smart matching for {user_id}: {len(results)} results")
        return results

    async def get_personalized_recommendations(
        self,
        user_id: str,
        limit: Optional[int] = None
    ) -> List[RankedResult]:
        limit = self.config.recommendations_limit if limit is None else limit
        matches = await self.find_smart_matches(user_id)
        return matches[:limit]
