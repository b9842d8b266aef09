from database.repositories.base import BaseRepository
from database.repositories.user import UserRepository
from database.repositories.profile import RequesterProfileRepository, ProviderProfileRepository
from database.repositories.offering import OfferingRepository
from database.repositories.match import MatchRepository
from database.repositories.conversation import ConversationRepository, MessageRepository
from database.repositories.engagement import EngagementRepository, RatingRepository

__all__ = [
    'BaseRepository',
    'UserRepository',
    'RequesterProfileRepository',
    'ProviderProfileRepository',
    'OfferingRepository',
    'MatchRepository',
    'ConversationRepository',
    'MessageRepository',
    'EngagementRepository',
    'RatingRepository',
]
