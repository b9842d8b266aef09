#!/usr/bin/env python3
"""
Compatibility dimensions - per-offering subscores in [0, 1].

Each function is pure and degrades to a neutral or floor value instead of
raising on empty or degenerate input.
"""
from typing import Dict, List, Optional
import logging

from core.utils import any_contains_either, clamp

logger = logging.getLogger(__name__)

NEUTRAL = 0.5


def calculate_needs_compatibility(needs: List[str], offering_info: List[str]) -> float:
    """
    Fraction of declared needs found among the offering's features and
    requirements/specifications. Neutral 0.5 when no needs are declared.
    """
    if not needs:
        return NEUTRAL
    info = list(offering_info or [])
    found = sum(1 for need in needs if any_contains_either(need, info))
    return min(found / len(needs), 1.0)


def calculate_budget_compatibility(
    budget_min: float,
    budget_max: float,
    price_min: float,
    price_max: float
) -> float:
    """
    1.0 when the price interval lies inside the budget, overlap ratio when
    they overlap, otherwise a linear falloff by distance from the nearest
    budget edge relative to the budget width (floored at 0).
    """
    if price_min >= budget_min and price_max <= budget_max:
        return 1.0

    if price_min <= budget_max and price_max >= budget_min:
        overlap = min(price_max, budget_max) - max(price_min, budget_min)
        price_range = price_max - price_min
        if price_range <= 0:
            return 0.0
        return clamp(overlap / price_range, 0.0, 1.0)

    budget_range = budget_max - budget_min
    if budget_range <= 0:
        return 0.0

    if price_min > budget_max:
        difference = price_min - budget_max
    else:
        difference = budget_min - price_max
    return max(0.0, 1 - difference / budget_range)


def _segment(location: str, index: int) -> Optional[str]:
    parts = location.split(',')
    if len(parts) <= index:
        return None
    return parts[index].strip() or None


def calculate_location_compatibility(requester_location: str, offering_location: str) -> float:
    """
    exact 1.0, containment 0.8, same region (2nd comma segment) 0.6,
    same country (3rd segment) 0.4, otherwise 0.2. Neutral when either is empty.
    """
    if not requester_location or not offering_location:
        return NEUTRAL

    user_loc = requester_location.lower()
    offering_loc = offering_location.lower()

    if user_loc == offering_loc:
        return 1.0
    if user_loc in offering_loc or offering_loc in user_loc:
        return 0.8

    user_region, offering_region = _segment(user_loc, 1), _segment(offering_loc, 1)
    if user_region and offering_region and user_region == offering_region:
        return 0.6

    user_country, offering_country = _segment(user_loc, 2), _segment(offering_loc, 2)
    if user_country and offering_country and user_country == offering_country:
        return 0.4

    return 0.2


def calculate_industry_compatibility(
    industry: str,
    category: str,
    industry_mapping: Dict[str, List[str]]
) -> float:
    """
    0.9 when the category is curated as relevant for the industry, 0.7 when
    the two strings overlap, otherwise 0.3. Neutral when either is empty.
    """
    if not industry or not category:
        return NEUTRAL

    industry = industry.lower()
    category = category.lower()

    relevant = industry_mapping.get(industry, [])
    if any(cat.lower() in category for cat in relevant):
        return 0.9

    if category in industry or industry in category:
        return 0.7

    return 0.3


def calculate_size_compatibility(
    size: str,
    price_min: float,
    price_max: float,
    multipliers: Dict[str, float],
    default_multiplier: float = 0.5,
    tolerance: float = 0.5,
    match_score: float = 1.0,
    mismatch_score: float = 0.6
) -> float:
    """
    Compare the offering's average price with the price a company of this
    size is expected to pay (average * size multiplier).
    """
    multiplier = multipliers.get((size or '').lower(), default_multiplier)
    average_price = (price_min + price_max) / 2
    expected_price = average_price * multiplier

    if expected_price <= 0:
        return mismatch_score

    if abs(average_price - expected_price) / expected_price < tolerance:
        return match_score
    return mismatch_score
