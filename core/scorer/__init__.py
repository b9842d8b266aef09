#!/usr/bin/env python3
"""
Scoring Module - coarse requester/provider compatibility (0-100).

Public API:
- score_match / match_reasons: pure scoring functions
- ScoringService: ranks every provider and persists MatchRecords
- ScoredProviderMatch: dataclass for scored provider results

- coarse.py: factor calculations and the weighted sum
- models.py: Data structures (ScoredProviderMatch)
- service.py: ScoringService orchestrator
"""

from core.scorer.coarse import score_match, match_reasons
from core.scorer.models import ScoredProviderMatch
from core.scorer.service import ScoringService

__all__ = ['score_match', 'match_reasons', 'ScoringService', 'ScoredProviderMatch']
