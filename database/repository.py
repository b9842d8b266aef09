import logging

from sqlalchemy.orm import Session

from database.repositories import (
    UserRepository,
    RequesterProfileRepository,
    ProviderProfileRepository,
    OfferingRepository,
    MatchRepository,
    ConversationRepository,
    MessageRepository,
    EngagementRepository,
    RatingRepository,
)

logger = logging.getLogger(__name__)


class MarketplaceRepository:
    """Record store facade: one repository per entity collection, one Session.

    Services depend on this facade (or on the individual repositories it
    exposes) instead of a global store, so tests can inject a session bound
    to any engine.
    """

    def __init__(self, db: Session):
        self.db = db
        self.users = UserRepository(db)
        self.requesters = RequesterProfileRepository(db)
        self.providers = ProviderProfileRepository(db)
        self.offerings = OfferingRepository(db)
        self.matches = MatchRepository(db)
        self.conversations = ConversationRepository(db)
        self.messages = MessageRepository(db)
        self.engagements = EngagementRepository(db)
        self.ratings = RatingRepository(db)

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
