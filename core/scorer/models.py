#!/usr/bin/env python3
"""
Scoring Models - Data structures for coarse scoring results.
"""

from typing import List, Dict
from dataclasses import dataclass, field

from database.models import MatchRecord, ProviderProfile


@dataclass
class ScoredProviderMatch:
    """Coarse match of one provider against a requester."""
    provider: ProviderProfile
    score: int = 0
    reasons: List[str] = field(default_factory=list)
    components: Dict[str, float] = field(default_factory=dict)
    record: MatchRecord = None

    def to_dict(self) -> Dict:
        return {
            'provider_id': self.provider.id,
            'provider_name': self.provider.company_name,
            'score': self.score,
            'reasons': list(self.reasons),
            'components': dict(self.components),
            'match_id': self.record.id if self.record is not None else None,
        }
