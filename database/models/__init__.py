from .base import Base
from .enums import (
    UserRole, CompanySize, OfferingType, OfferingStatus, MatchStatus,
    ConversationStatus, MessageType, QuoteStatus, EngagementStatus,
)
from .user import User
from .profile import RequesterProfile, ProviderProfile
from .offering import Offering
from .match import MatchRecord
from .conversation import Conversation, ConversationMessage
from .engagement import Engagement, Rating

__all__ = [
    'Base',
    'UserRole',
    'CompanySize',
    'OfferingType',
    'OfferingStatus',
    'MatchStatus',
    'ConversationStatus',
    'MessageType',
    'QuoteStatus',
    'EngagementStatus',
    'User',
    'RequesterProfile',
    'ProviderProfile',
    'Offering',
    'MatchRecord',
    'Conversation',
    'ConversationMessage',
    'Engagement',
    'Rating',
]
