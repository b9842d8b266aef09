from sqlalchemy import Column, Text, DateTime, Integer, JSON, UniqueConstraint, Index

from core.utils import utcnow
from .base import Base
from .enums import MatchStatus


class MatchRecord(Base):
    """
    Coarse requester/provider pairing with its score and reasons.

    Derived data: recomputed on every find_matches run. `status` is advisory.
    """
    __tablename__ = 'match_records'

    id = Column(Text, primary_key=True)
    requester_id = Column(Text, nullable=False)
    provider_id = Column(Text, nullable=False)

    score = Column(Integer, nullable=False, default=0)
    reasons = Column(JSON, default=list)
    status = Column(Text, nullable=False, default=MatchStatus.PENDING.value)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        UniqueConstraint('requester_id', 'provider_id', name='uq_match_requester_provider'),
        Index('idx_match_records_score', 'score'),
    )
