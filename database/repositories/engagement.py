import logging
from typing import List, Optional
from sqlalchemy import select, or_

from database.models import Engagement, Rating
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class EngagementRepository(BaseRepository):
    model = Engagement
    id_prefix = "engagement"

    def get_by_conversation_id(self, conversation_id: str) -> Optional[Engagement]:
        stmt = select(Engagement).where(
            Engagement.conversation_id == conversation_id
        ).order_by(Engagement.created_at, Engagement.id)
        return self.db.execute(stmt).scalars().first()

    def get_by_user_id(self, user_id: str) -> List[Engagement]:
        stmt = select(Engagement).where(
            or_(Engagement.requester_id == user_id, Engagement.provider_id == user_id)
        ).order_by(Engagement.created_at.desc(), Engagement.id)
        return list(self.db.execute(stmt).scalars().all())


class RatingRepository(BaseRepository):
    model = Rating
    id_prefix = "rating"

    def exists_for(self, from_user_id: str, engagement_id: str) -> bool:
        stmt = select(Rating.id).where(
            Rating.from_user_id == from_user_id,
            Rating.engagement_id == engagement_id
        )
        return self.db.execute(stmt).first() is not None

    def get_by_user_id(self, user_id: str) -> List[Rating]:
        stmt = select(Rating).where(
            or_(Rating.from_user_id == user_id, Rating.to_user_id == user_id)
        ).order_by(Rating.created_at.desc(), Rating.id)
        return list(self.db.execute(stmt).scalars().all())
