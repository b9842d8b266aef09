import logging
from typing import List, Optional
from sqlalchemy import select

from database.models import MatchRecord
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class MatchRepository(BaseRepository):
    model = MatchRecord
    id_prefix = "match"

    def get_existing_match(self, requester_id: str, provider_id: str) -> Optional[MatchRecord]:
        stmt = select(MatchRecord).where(
            MatchRecord.requester_id == requester_id,
            MatchRecord.provider_id == provider_id
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def upsert_match(
        self,
        requester_id: str,
        provider_id: str,
        score: int,
        reasons: List[str]
    ) -> MatchRecord:
        """Refresh score/reasons of an existing pairing, keeping its status."""
        existing = self.get_existing_match(requester_id, provider_id)
        if existing:
            existing.score = score
            existing.reasons = list(reasons)
            self.db.flush()
            return existing
        return self.create(
            requester_id=requester_id,
            provider_id=provider_id,
            score=score,
            reasons=list(reasons)
        )

    def get_matches_for_requester(
        self,
        requester_id: str,
        min_score: Optional[int] = None
    ) -> List[MatchRecord]:
        stmt = select(MatchRecord).where(MatchRecord.requester_id == requester_id)
        if min_score is not None:
            stmt = stmt.where(MatchRecord.score > min_score)
        stmt = stmt.order_by(MatchRecord.score.desc())
        return list(self.db.execute(stmt).scalars().all())
