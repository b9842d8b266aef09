#!/usr/bin/env python3
"""
Scoring Service - coarse requester/provider matching.

Scores every provider profile against a requester profile, keeps matches
above the configured minimum, persists them as MatchRecords and returns
them sorted by score (highest first).
"""

import asyncio
from typing import List, Optional
import logging

from core.config_loader import CoarseScoringConfig
from core.scorer.coarse import (
    score_match,
    match_reasons,
    calculate_needs_points,
    calculate_budget_points,
    calculate_rating_points,
    calculate_location_points,
    calculate_review_points,
)
from core.scorer.models import ScoredProviderMatch
from database.models import RequesterProfile
from database.repository import MarketplaceRepository

logger = logging.getLogger(__name__)


class ScoringService:
    """Coarse matching over the provider catalog."""

    def __init__(
        self,
        repo: MarketplaceRepository,
        config: Optional[CoarseScoringConfig] = None,
        latency_seconds: float = 0.0
    ):
        self.repo = repo
        self.config = config or CoarseScoringConfig()
        self.latency_seconds = latency_seconds

    def score_provider(self, requester: RequesterProfile, provider) -> ScoredProviderMatch:
        components = {
            'needs': calculate_needs_points(requester, provider, self.config),
            'budget': calculate_budget_points(requester, provider, self.config),
            'rating': calculate_rating_points(provider, self.config),
            'location': calculate_location_points(requester, provider, self.config),
            'reviews': calculate_review_points(provider, self.config),
        }
        return ScoredProviderMatch(
            provider=provider,
            score=score_match(requester, provider, self.config),
            reasons=match_reasons(requester, provider, self.config),
            components=components,
        )

    async def find_matches(self, requester: RequesterProfile, persist: bool = True) -> List[ScoredProviderMatch]:
        """
        Rank all providers for a requester.

        Only scores strictly above `min_match_score` are kept. With `persist`
        the surviving pairs are upserted as MatchRecords (status untouched).
        """
        if self.latency_seconds:
            await asyncio.sleep(self.latency_seconds)

        results = []
        for provider in self.repo.providers.get_all():
            scored = self.score_provider(requester, provider)
            if scored.score > self.config.min_match_score:
                results.append(scored)

        results.sort(key=lambda m: m.score, reverse=True)

        if persist and results:
            try:
                for scored in results:
                    scored.record = self.repo.matches.upsert_match(
                        requester_id=requester.id,
                        provider_id=scored.provider.id,
                        score=scored.score,
                        reasons=scored.reasons,
                    )
                self.repo.commit()
            except Exception:
                self.repo.rollback()
                raise

        logger.info(
            f"Found {len(results)} provider matches for requester {requester.id} "
            f"(min score {self.config.min_match_score})"
        )
        return results
