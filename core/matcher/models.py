#!/usr/bin/env python3
"""
Matcher Models - Data structures for smart matching.
"""

from dataclasses import dataclass, field, asdict
from typing import List, Dict, Optional

from database.models import Offering, ProviderProfile


@dataclass
class RequesterNeeds:
    """Needs profile resolved from a requester profile."""
    service_types: List[str] = field(default_factory=list)
    needs: List[str] = field(default_factory=list)
    budget_min: float = 0.0
    budget_max: float = 100000.0
    industry: str = ''
    size: str = 'micro'
    location: str = ''


@dataclass
class CompatibilityBreakdown:
    """Per-dimension scores, each in [0, 1]."""
    needs: float = 0.0
    budget: float = 0.0
    location: float = 0.0
    industry: float = 0.0
    size: float = 0.0

    DIMENSIONS = ('needs', 'budget', 'location', 'industry', 'size')

    def as_vector(self) -> List[float]:
        return [getattr(self, name) for name in self.DIMENSIONS]

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass
class RankedResult:
    """One smart match: an offering, its provider and why it ranked."""
    offering: Offering
    provider: ProviderProfile
    match_score: float
    reasons: List[str] = field(default_factory=list)
    compatibility: CompatibilityBreakdown = field(default_factory=CompatibilityBreakdown)

    @property
    def is_product(self) -> bool:
        return self.offering.offering_type == 'product'

    def to_dict(self) -> Dict[str, Optional[object]]:
        return {
            'offering_id': self.offering.id,
            'offering_name': self.offering.name,
            'offering_type': self.offering.offering_type,
            'provider_id': self.provider.id,
            'provider_name': self.provider.company_name,
            'match_score': round(self.match_score, 4),
            'reasons': list(self.reasons),
            'compatibility': self.compatibility.to_dict(),
        }
