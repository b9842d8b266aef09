#!/usr/bin/env python3
"""
Coarse Compatibility Scoring - requester profile vs provider profile (0-100).

Weighted sum of five independently computed factors, each clamped to its
ceiling before summation:

- needs coverage (0-40): share of requester needs matching a provider service
- budget fit (0-25): requester budget midpoint vs provider price midpoints
- provider rating (0-20): (rating / 5) * 20
- location (0-10): exact city match or containment
- review volume (0-5): tiered by review count

Reasons are evaluated separately and may disagree with the score, since
their thresholds differ (e.g. "same city" requires an exact match while the
location factor also credits containment).
"""

import math
from typing import List, Optional, Any
import logging

import numpy as np

from core.config_loader import CoarseScoringConfig
from core.utils import any_contains_either, clamp

logger = logging.getLogger(__name__)


def matching_needs(requester: Any, provider: Any) -> List[str]:
    """Requester needs that substring-match (either way) any provider service name."""
    services = provider.services or []
    return [need for need in (requester.needs or []) if any_contains_either(need, services)]


def calculate_needs_points(requester: Any, provider: Any, config: CoarseScoringConfig) -> float:
    """
    Needs coverage scaled to `needs_max`.

    A requester with no declared needs earns 0; the points are not
    redistributed to other factors.
    """
    needs = requester.needs or []
    if not needs:
        return 0.0
    coverage = len(matching_needs(requester, provider)) / len(needs)
    return clamp(coverage * config.needs_max, 0.0, config.needs_max)


def budget_midpoint(requester: Any) -> Optional[float]:
    if requester.budget_min is None or requester.budget_max is None:
        return None
    return (float(requester.budget_min) + float(requester.budget_max)) / 2


def price_midpoint(provider: Any) -> Optional[float]:
    """Mean of the midpoints of every provider price entry, None when unpriced."""
    pricing = provider.pricing or []
    if not pricing:
        return None
    midpoints = [
        (float(entry.get('min_price') or 0) + float(entry.get('max_price') or 0)) / 2
        for entry in pricing
    ]
    return float(np.mean(midpoints))


def within_budget_band(requester: Any, provider: Any, config: CoarseScoringConfig) -> bool:
    requester_mid = budget_midpoint(requester)
    provider_mid = price_midpoint(provider)
    if requester_mid is None or provider_mid is None:
        return False
    return (
        requester_mid >= provider_mid * config.budget_band_low and
        requester_mid <= provider_mid * config.budget_band_high
    )


def calculate_budget_points(requester: Any, provider: Any, config: CoarseScoringConfig) -> float:
    """
    Budget fit tiers.

    Only a requester midpoint below the provider's expectation is penalized
    tier-wise. A provider without price entries contributes 0.
    """
    requester_mid = budget_midpoint(requester)
    provider_mid = price_midpoint(provider)
    if requester_mid is None or provider_mid is None:
        return 0.0

    if within_budget_band(requester, provider, config):
        points = config.budget_max
    elif requester_mid >= provider_mid * config.budget_tier_mid:
        points = config.budget_tier_mid_points
    elif requester_mid >= provider_mid * config.budget_tier_low:
        points = config.budget_tier_low_points
    else:
        points = 0.0

    return clamp(points, 0.0, config.budget_max)


def calculate_rating_points(provider: Any, config: CoarseScoringConfig) -> float:
    rating = float(provider.rating or 0.0)
    return clamp((rating / 5) * config.rating_max, 0.0, config.rating_max)


def calculate_location_points(requester: Any, provider: Any, config: CoarseScoringConfig) -> float:
    requester_loc = (requester.location or '').lower()
    provider_loc = (provider.location or '').lower()

    if requester_loc == provider_loc:
        return config.location_max
    if requester_loc in provider_loc or provider_loc in requester_loc:
        return clamp(config.location_partial_points, 0.0, config.location_max)
    return 0.0


def calculate_review_points(provider: Any, config: CoarseScoringConfig) -> float:
    review_count = int(provider.review_count or 0)
    for threshold in sorted(config.review_tiers, reverse=True):
        if review_count >= threshold:
            return clamp(config.review_tiers[threshold], 0.0, config.reviews_max)
    return 0.0


def score_match(requester: Any, provider: Any, config: Optional[CoarseScoringConfig] = None) -> int:
    """
    Coarse compatibility score in [0, 100].

    Rounds half up, matching how scores were shown to users.
    """
    config = config or CoarseScoringConfig()

    score = (
        calculate_needs_points(requester, provider, config) +
        calculate_budget_points(requester, provider, config) +
        calculate_rating_points(provider, config) +
        calculate_location_points(requester, provider, config) +
        calculate_review_points(provider, config)
    )

    return int(clamp(math.floor(score + 0.5), 0, 100))


def match_reasons(requester: Any, provider: Any, config: Optional[CoarseScoringConfig] = None) -> List[str]:
    """Human-readable explanations whose own conditions hold."""
    config = config or CoarseScoringConfig()
    reasons = []

    matched = matching_needs(requester, provider)
    if matched:
        reasons.append(f"Offers {len(matched)} of the services you need: {', '.join(matched)}")

    rating = float(provider.rating or 0.0)
    if rating >= config.excellent_rating:
        reasons.append(f"Excellent rating ({rating}/5) with {provider.review_count or 0} reviews")

    if (requester.location or "").lower() == (provider.location or "").lower():
        reasons.append("Located in the same city")

    if within_budget_band(requester, provider, config):
        reasons.append("Prices within your budget range")

    return reasons
