from sqlalchemy import Column, Text, DateTime, Float, Integer, UniqueConstraint, Index

from core.utils import utcnow
from .base import Base
from .enums import EngagementStatus


class Engagement(Base):
    """
    Tracked transaction between the two parties of a conversation.

    Joined to its conversation by `conversation_id` only; neither record
    owns the other.
    """
    __tablename__ = 'engagements'

    id = Column(Text, primary_key=True)
    conversation_id = Column(Text, nullable=False)
    requester_id = Column(Text, nullable=False)
    provider_id = Column(Text, nullable=False)
    quote_id = Column(Text, nullable=True)

    status = Column(Text, nullable=False, default=EngagementStatus.PENDING.value)
    total_amount = Column(Float, nullable=False, default=0.0)
    currency = Column(Text, nullable=False, default='MXN')

    start_date = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    end_date = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index('idx_engagements_conversation', 'conversation_id'),
        Index('idx_engagements_requester', 'requester_id'),
        Index('idx_engagements_provider', 'provider_id'),
        Index('idx_engagements_status', 'status'),
    )


class Rating(Base):
    """
    Review left by one party about the other once an engagement completed.
    """
    __tablename__ = 'ratings'

    id = Column(Text, primary_key=True)
    from_user_id = Column(Text, nullable=False)
    to_user_id = Column(Text, nullable=False)
    engagement_id = Column(Text, nullable=False)

    score = Column(Integer, nullable=False)  # 1-5
    comment = Column(Text, default='')

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        UniqueConstraint('from_user_id', 'engagement_id', name='uq_rating_from_engagement'),
        Index('idx_ratings_to_user', 'to_user_id'),
    )
