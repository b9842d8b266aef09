#!/usr/bin/env python3
"""
Custom exceptions for the marketplace service layer.

Scoring and search never raise these; lifecycle operations raise them for
the primary action only. Every exception carries a generic, retryable
message that callers can show to end users as-is.
"""

GENERIC_USER_MESSAGE = "Something went wrong. Please try again."


class MarketplaceException(Exception):
    """Base exception for service layer errors."""

    user_message = GENERIC_USER_MESSAGE


class NotFoundException(MarketplaceException):
    """Raised when a referenced record does not exist."""
    pass


class EngagementNotFoundException(NotFoundException):
    """Raised when an engagement is not found."""
    pass


class ProfileNotFoundException(NotFoundException):
    """Raised when a requester or provider profile cannot be resolved."""
    pass


class OfferingNotFoundException(NotFoundException):
    """Raised when a service or product is not found."""
    pass


class ConversationClosedException(MarketplaceException):
    """Raised when sending into a conversation that is no longer active."""
    pass


class InvalidStatusTransitionException(MarketplaceException):
    """Raised when a requested status change is not allowed."""

    def __init__(self, current: str, requested: str, entity: str = "engagement"):
        self.current = current
        self.requested = requested
        self.entity = entity
        super().__init__(f"Cannot move {entity} from '{current}' to '{requested}'")


class RatingNotAllowedException(MarketplaceException):
    """Raised when a rating is attempted on an ineligible engagement."""
    pass


class InvalidRatingException(MarketplaceException):
    """Raised when a rating value is outside 1-5."""
    pass


class DuplicateQuoteException(MarketplaceException):
    """Raised when a quote id is already used by another message."""
    pass
