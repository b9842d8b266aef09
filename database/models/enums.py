from enum import Enum


class UserRole(str, Enum):
    REQUESTER = "requester"
    PROVIDER = "provider"


class CompanySize(str, Enum):
    MICRO = "micro"
    SMALL = "small"
    MEDIUM = "medium"


class OfferingType(str, Enum):
    SERVICE = "service"
    PRODUCT = "product"


class OfferingStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class MatchStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    COMPLETED = "completed"


class ConversationStatus(str, Enum):
    ACTIVE = "active"
    CLOSED = "closed"
    DELETED = "deleted"


class MessageType(str, Enum):
    TEXT = "text"
    QUOTE = "quote"
    FILE = "file"


class QuoteStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class EngagementStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
