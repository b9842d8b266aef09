from sqlalchemy import Column, Text, DateTime, Integer, JSON, ForeignKey, UniqueConstraint, Index
from sqlalchemy.orm import relationship

from core.utils import utcnow
from .base import Base
from .enums import ConversationStatus, MessageType


class Conversation(Base):
    """
    Conversation between a requester and a provider about one match/offering.

    At most one conversation exists per (requester_id, match_id).
    Close metadata is populated only when the conversation is closed.
    """
    __tablename__ = 'conversations'

    id = Column(Text, primary_key=True)
    requester_id = Column(Text, nullable=False)
    provider_id = Column(Text, nullable=False)
    match_id = Column(Text, nullable=False)

    status = Column(Text, nullable=False, default=ConversationStatus.ACTIVE.value)

    # Denormalized pointer to the most recent message
    last_message_id = Column(Text, nullable=True)
    last_message_at = Column(DateTime(timezone=True), nullable=True)

    closed_at = Column(DateTime(timezone=True), nullable=True)
    close_reason = Column(Text, nullable=True)
    close_comment = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    messages = relationship(
        "ConversationMessage",
        back_populates="conversation",
        cascade="all, delete-orphan",
        order_by="ConversationMessage.position",
    )

    __table_args__ = (
        UniqueConstraint('requester_id', 'match_id', name='uq_conversation_requester_match'),
        Index('idx_conversations_requester', 'requester_id'),
        Index('idx_conversations_provider', 'provider_id'),
    )

    @property
    def is_active(self) -> bool:
        return self.status == ConversationStatus.ACTIVE.value


class ConversationMessage(Base):
    """
    Append-only message. `quote` is set only when message_type == 'quote',
    and its status is the only field ever updated in place.
    """
    __tablename__ = 'conversation_messages'

    id = Column(Text, primary_key=True)
    conversation_id = Column(Text, ForeignKey('conversations.id', ondelete='CASCADE'), nullable=False)
    position = Column(Integer, nullable=False, default=0)  # creation order within the conversation

    sender_id = Column(Text, nullable=False)
    content = Column(Text, nullable=False, default='')
    message_type = Column(Text, nullable=False, default=MessageType.TEXT.value)
    quote = Column(JSON, nullable=True)
    quote_id = Column(Text, nullable=True)  # copy of quote["id"] for lookups

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    conversation = relationship("Conversation", back_populates="messages")

    __table_args__ = (
        Index('idx_messages_conversation', 'conversation_id', 'position'),
        Index('idx_messages_quote', 'quote_id'),
    )
