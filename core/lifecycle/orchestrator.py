#!/usr/bin/env python3
"""
Lifecycle Orchestrator - Conversation -> Quote -> Engagement -> Rating.

Owns every state change of the transactional lifecycle and the side effects
that keep the records consistent:
- creating a conversation appends a system welcome message and auto-creates
  a pending Engagement (failure logged, never surfaced)
- sending into an unknown conversation id repairs it by creating one
- closing a conversation completes its Engagement
- rating is allowed once per user and completed engagement

Each public operation awaits a simulated I/O latency. Primary writes are
committed atomically (rolled back and re-raised on failure); secondary
effects run in their own commit and only log on failure. Events are
published after the commit they describe.
"""

import asyncio
import contextlib
import logging
from collections import defaultdict
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple, Union

from sqlalchemy.exc import IntegrityError

from core.config_loader import LifecycleConfig
from core.exceptions import (
    ConversationClosedException,
    DuplicateQuoteException,
    EngagementNotFoundException,
    InvalidRatingException,
    InvalidStatusTransitionException,
    MarketplaceException,
    RatingNotAllowedException,
)
from core.lifecycle.models import Quote, can_transition
from core.utils import utcnow
from database.models import (
    Conversation,
    ConversationMessage,
    ConversationStatus,
    Engagement,
    EngagementStatus,
    MessageType,
    QuoteStatus,
    Rating,
)
from database.repository import MarketplaceRepository
from notification.events import EventBus, EventType

logger = logging.getLogger(__name__)


class LifecycleOrchestrator:
    """Guarded state transitions over the marketplace record store."""

    def __init__(
        self,
        repo: MarketplaceRepository,
        config: Optional[LifecycleConfig] = None,
        events: Optional[EventBus] = None
    ):
        self.repo = repo
        self.config = config or LifecycleConfig()
        self.events = events or EventBus()
        # One lock per (requester_id, match_id), or per repaired id, serializes check-then-create
        self._conversation_locks: Dict[Tuple[str, str], asyncio.Lock] = {}
        self._lock_users: Dict[Tuple[str, str], int] = defaultdict(int)

    async def _simulate_latency(self) -> None:
        if self.config.latency_seconds > 0:
            await asyncio.sleep(self.config.latency_seconds)

    # ------------------------------------------------------------------
    # Conversations
    # ------------------------------------------------------------------

    async def create_conversation(
        self,
        requester_id: str,
        provider_id: str,
        match_id: str
    ) -> Conversation:
        """
        Get or create the conversation for (requester_id, match_id).

        Returns:
            The existing conversation when one is already open for this
            match, otherwise a new one with its welcome message.
        """
        conversation, _ = await self._open_conversation(requester_id, provider_id, match_id)
        return conversation

    async def _open_conversation(
        self,
        requester_id: str,
        provider_id: str,
        match_id: str,
        conversation_id: Optional[str] = None
    ) -> Tuple[Conversation, bool]:
        # A repaired id is claimed by whichever sender arrives first
        key = ("id", conversation_id) if conversation_id else (requester_id, match_id)
        async with self._conversation_lock(key):
            existing = self._find_conversation(requester_id, match_id, conversation_id)
            if existing is not None:
                logger.info(f"Reusing conversation {existing.id} for match {match_id}")
                return existing, False

            await self._simulate_latency()

            conversation = self._insert_conversation(requester_id, provider_id, match_id, conversation_id)
            if conversation is None:
                # Lost the insert to a concurrent writer; the unique constraint kept one row
                existing = self._find_conversation(requester_id, match_id, conversation_id)
                if existing is None:
                    raise MarketplaceException(
                        f"Conversation for match {match_id} could not be created"
                    )
                return existing, False

        self.events.emit(
            EventType.CONVERSATION_CREATED,
            conversation_id=conversation.id,
            requester_id=requester_id,
            provider_id=provider_id,
            match_id=match_id,
        )
        self._auto_create_engagement(conversation)
        return conversation, True

    @contextlib.asynccontextmanager
    async def _conversation_lock(self, key: Tuple[str, str]):
        """Per-key lock, dropped once no caller holds or waits on it."""
        lock = self._conversation_locks.setdefault(key, asyncio.Lock())
        self._lock_users[key] += 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[key] -= 1
            if not self._lock_users[key]:
                del self._lock_users[key]
                del self._conversation_locks[key]

    def _find_conversation(
        self,
        requester_id: str,
        match_id: str,
        conversation_id: Optional[str] = None
    ) -> Optional[Conversation]:
        if conversation_id:
            conversation = self.repo.conversations.get_by_id(conversation_id)
            if conversation is not None:
                return conversation
        return self.repo.conversations.find_by_requester_and_match(requester_id, match_id)

    def _insert_conversation(
        self,
        requester_id: str,
        provider_id: str,
        match_id: str,
        conversation_id: Optional[str] = None
    ) -> Optional[Conversation]:
        fields = dict(
            requester_id=requester_id,
            provider_id=provider_id,
            match_id=match_id,
            status=ConversationStatus.ACTIVE.value,
        )
        if conversation_id:
            fields['id'] = conversation_id

        try:
            conversation = self.repo.conversations.create(**fields)
            welcome = self.repo.messages.append(
                conversation.id,
                sender_id=self.config.system_sender_id,
                content=self.config.welcome_message,
                message_type=MessageType.TEXT.value,
            )
            conversation.last_message_id = welcome.id
            conversation.last_message_at = welcome.created_at
            self.repo.commit()
        except IntegrityError as e:
            self.repo.rollback()
            logger.warning(f"Duplicate conversation for ({requester_id}, {match_id}): {e.orig}")
            return None
        except Exception:
            self.repo.rollback()
            raise

        logger.info(f"Created conversation {conversation.id} ({requester_id} -> {provider_id})")
        return conversation

    def _auto_create_engagement(self, conversation: Conversation) -> Optional[Engagement]:
        try:
            engagement = self.repo.engagements.create(
                conversation_id=conversation.id,
                requester_id=conversation.requester_id,
                provider_id=conversation.provider_id,
                status=EngagementStatus.PENDING.value,
                total_amount=0.0,
                currency=self.config.default_currency,
                start_date=utcnow(),
            )
            self.repo.commit()
        except Exception as e:
            self.repo.rollback()
            logger.error(
                f"Engagement auto-creation failed for conversation {conversation.id}: {e}",
                exc_info=True
            )
            return None

        self.events.emit(
            EventType.ENGAGEMENT_CREATED,
            engagement_id=engagement.id,
            conversation_id=conversation.id,
        )
        return engagement

    async def send_message(
        self,
        conversation_id: str,
        sender_id: str,
        content: str,
        message_type: str = MessageType.TEXT.value,
        quote: Optional[Union[Quote, Dict[str, Any]]] = None
    ) -> ConversationMessage:
        """
        Append a message, repairing an unknown conversation id first.

        Validation runs before an unknown id is repaired, so a rejected
        message leaves no conversation behind.

        Raises:
            ConversationClosedException: conversation is closed or deleted
            DuplicateQuoteException: quote id already used by another message
            MarketplaceException: unknown message type, or a quote message
                without a quote
        """
        try:
            message_type = MessageType(message_type).value
        except ValueError:
            raise MarketplaceException(f"Unknown message type '{message_type}'")

        if quote is not None:
            if isinstance(quote, dict):
                quote = Quote(**quote)
            self._ensure_quote_id_unused(quote.id)
            message_type = MessageType.QUOTE.value
        elif message_type == MessageType.QUOTE.value:
            raise MarketplaceException("Quote messages require a quote")

        await self._simulate_latency()

        conversation = self.repo.conversations.get_by_id(conversation_id)
        if conversation is None:
            logger.warning(f"Conversation {conversation_id} not found, creating it for {sender_id}")
            conversation, _ = await self._open_conversation(
                sender_id,
                self.config.unknown_provider_id,
                conversation_id,
                conversation_id=conversation_id,
            )

        if not conversation.is_active:
            raise ConversationClosedException(
                f"Conversation {conversation.id} is {conversation.status}"
            )

        if quote is not None:
            # Another send may have used the id while we awaited
            self._ensure_quote_id_unused(quote.id)

        try:
            message = self.repo.messages.append(
                conversation.id,
                sender_id=sender_id,
                content=content,
                message_type=message_type,
                quote=quote.to_record() if quote is not None else None,
            )
            conversation.last_message_id = message.id
            conversation.last_message_at = message.created_at
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        self.events.emit(
            EventType.MESSAGE_CREATED,
            conversation_id=conversation.id,
            message_id=message.id,
            sender_id=sender_id,
            message_type=message_type,
        )
        return message

    def _ensure_quote_id_unused(self, quote_id: str) -> None:
        if self.repo.messages.find_by_quote_id(quote_id) is not None:
            raise DuplicateQuoteException(f"Quote id {quote_id} is already in use")

    def build_quote(
        self,
        service_name: str,
        price: float,
        description: str = "",
        terms: str = "",
        currency: Optional[str] = None
    ) -> Quote:
        return Quote.build(
            service_name=service_name,
            price=price,
            description=description,
            currency=currency or self.config.default_currency,
            terms=terms,
            validity_days=self.config.quote_validity_days,
        )

    async def send_quote(
        self,
        conversation_id: str,
        sender_id: str,
        service_name: str,
        price: float,
        description: str = "",
        terms: str = "",
        currency: Optional[str] = None
    ) -> ConversationMessage:
        quote = self.build_quote(service_name, price, description, terms, currency)
        content = f"Quote for {service_name}: {quote.price:.2f} {quote.currency}"
        return await self.send_message(
            conversation_id, sender_id, content, MessageType.QUOTE.value, quote
        )

    async def respond_to_quote(
        self,
        quote_id: str,
        status: str,
        conversation_id: Optional[str] = None
    ) -> Optional[ConversationMessage]:
        """
        Flip a pending quote to accepted or rejected.

        Looks the quote up in one conversation when `conversation_id` is
        given, otherwise across all of them. Unknown ids and quotes that
        were already answered are left untouched.
        """
        if status not in (QuoteStatus.ACCEPTED.value, QuoteStatus.REJECTED.value):
            raise InvalidStatusTransitionException(QuoteStatus.PENDING.value, status, entity="quote")

        await self._simulate_latency()

        message = self.repo.messages.find_by_quote_id(quote_id, conversation_id)
        if message is None:
            logger.info(f"Quote {quote_id} not found, nothing to update")
            return None

        current = message.quote.get('status', QuoteStatus.PENDING.value)
        if current != QuoteStatus.PENDING.value:
            logger.warning(f"Quote {quote_id} already {current}, ignoring '{status}'")
            return message

        try:
            message.quote = {**message.quote, 'status': status}
            if status == QuoteStatus.ACCEPTED.value and self.config.sync_engagement_amount_on_accept:
                self._apply_quote_to_engagement(message)
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        self.events.emit(
            EventType.QUOTE_RESPONDED,
            quote_id=quote_id,
            conversation_id=message.conversation_id,
            status=status,
        )
        return message

    def _apply_quote_to_engagement(self, message: ConversationMessage) -> None:
        engagement = self.repo.engagements.get_by_conversation_id(message.conversation_id)
        if engagement is None:
            logger.info(f"No engagement for conversation {message.conversation_id}")
            return
        engagement.total_amount = float(message.quote.get('price', 0.0))
        engagement.currency = message.quote.get('currency') or engagement.currency
        engagement.quote_id = message.quote_id

    async def close_conversation(
        self,
        conversation_id: str,
        reason: str = "",
        comment: str = ""
    ) -> Optional[Conversation]:
        """
        Close a conversation and complete its engagement.

        The engagement is forced to completed whatever its current state.
        A missing conversation or engagement is logged, not raised.
        """
        await self._simulate_latency()

        conversation = self.repo.conversations.get_by_id(conversation_id)
        if conversation is None:
            logger.warning(f"Cannot close unknown conversation {conversation_id}")
            return None
        if not conversation.is_active:
            logger.info(f"Conversation {conversation_id} already {conversation.status}")
            return conversation

        closed_at = utcnow()
        try:
            conversation.status = ConversationStatus.CLOSED.value
            conversation.closed_at = closed_at
            conversation.close_reason = reason
            conversation.close_comment = comment
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        self.events.emit(
            EventType.CONVERSATION_CLOSED,
            conversation_id=conversation_id,
            reason=reason,
        )
        self._complete_engagement_for(conversation_id, closed_at)
        return conversation

    def _complete_engagement_for(self, conversation_id: str, end_date: datetime) -> None:
        try:
            engagement = self.repo.engagements.get_by_conversation_id(conversation_id)
            if engagement is None:
                logger.info(f"No engagement to complete for conversation {conversation_id}")
                return
            previous = engagement.status
            engagement.status = EngagementStatus.COMPLETED.value
            engagement.end_date = end_date
            self.repo.commit()
        except Exception as e:
            self.repo.rollback()
            logger.error(f"Failed to complete engagement for {conversation_id}: {e}", exc_info=True)
            return

        self.events.emit(
            EventType.ENGAGEMENT_STATUS_CHANGED,
            engagement_id=engagement.id,
            previous=previous,
            status=engagement.status,
        )

    async def delete_conversation(self, conversation_id: str) -> bool:
        """Soft delete: the record and its messages stay readable by id."""
        await self._simulate_latency()

        conversation = self.repo.conversations.get_by_id(conversation_id)
        if conversation is None:
            logger.warning(f"Cannot delete unknown conversation {conversation_id}")
            return False

        try:
            conversation.status = ConversationStatus.DELETED.value
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        self.events.emit(EventType.CONVERSATION_DELETED, conversation_id=conversation_id)
        return True

    async def list_conversations(self, user_id: str) -> List[Conversation]:
        await self._simulate_latency()
        return self.repo.conversations.get_by_user_id(user_id)

    async def get_conversation(self, conversation_id: str) -> Optional[Conversation]:
        await self._simulate_latency()
        return self.repo.conversations.get_by_id(conversation_id)

    async def get_messages(self, conversation_id: str) -> List[ConversationMessage]:
        await self._simulate_latency()
        return self.repo.messages.get_by_conversation_id(conversation_id)

    # ------------------------------------------------------------------
    # Engagements
    # ------------------------------------------------------------------

    async def create_engagement(
        self,
        conversation_id: str,
        requester_id: str,
        provider_id: str,
        quote_id: Optional[str] = None,
        total_amount: float = 0.0,
        currency: Optional[str] = None,
        start_date: Optional[datetime] = None
    ) -> Engagement:
        await self._simulate_latency()

        try:
            engagement = self.repo.engagements.create(
                conversation_id=conversation_id,
                requester_id=requester_id,
                provider_id=provider_id,
                quote_id=quote_id,
                status=EngagementStatus.PENDING.value,
                total_amount=float(total_amount),
                currency=currency or self.config.default_currency,
                start_date=start_date or utcnow(),
            )
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        self.events.emit(
            EventType.ENGAGEMENT_CREATED,
            engagement_id=engagement.id,
            conversation_id=conversation_id,
        )
        return engagement

    async def update_engagement_status(
        self,
        engagement_id: str,
        status: str,
        end_date: Optional[datetime] = None
    ) -> Engagement:
        """
        Move an engagement along pending -> in_progress -> completed, or to
        cancelled from any non-terminal state. `end_date` is stored as given.

        Raises:
            EngagementNotFoundException: unknown engagement id
            InvalidStatusTransitionException: transition not allowed
        """
        await self._simulate_latency()

        engagement = self.repo.engagements.get_by_id(engagement_id)
        if engagement is None:
            raise EngagementNotFoundException(f"Engagement {engagement_id} not found")

        previous = engagement.status
        if not can_transition(previous, status):
            raise InvalidStatusTransitionException(previous, status)

        try:
            engagement.status = status
            if end_date is not None:
                engagement.end_date = end_date
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        self.events.emit(
            EventType.ENGAGEMENT_STATUS_CHANGED,
            engagement_id=engagement_id,
            previous=previous,
            status=status,
        )
        return engagement

    async def list_engagements(self, user_id: str) -> List[Engagement]:
        await self._simulate_latency()
        return self.repo.engagements.get_by_user_id(user_id)

    async def get_engagement(self, engagement_id: str) -> Optional[Engagement]:
        await self._simulate_latency()
        return self.repo.engagements.get_by_id(engagement_id)

    # ------------------------------------------------------------------
    # Ratings
    # ------------------------------------------------------------------

    async def create_rating(
        self,
        from_user_id: str,
        to_user_id: str,
        engagement_id: str,
        score: int,
        comment: str = ""
    ) -> Rating:
        """
        Rate the other party of a completed engagement.

        Raises:
            InvalidRatingException: score is not an integer in 1-5
            RatingNotAllowedException: engagement missing, not completed, or
                already rated by `from_user_id`
        """
        if isinstance(score, bool) or not isinstance(score, int) or not 1 <= score <= 5:
            raise InvalidRatingException(f"Rating must be an integer between 1 and 5, got {score!r}")

        await self._simulate_latency()

        engagement = self.repo.engagements.get_by_id(engagement_id)
        if engagement is None:
            raise RatingNotAllowedException(f"Engagement {engagement_id} not found")
        if engagement.status != EngagementStatus.COMPLETED.value:
            raise RatingNotAllowedException(
                f"Engagement {engagement_id} is {engagement.status}, not completed"
            )
        if self.repo.ratings.exists_for(from_user_id, engagement_id):
            raise RatingNotAllowedException(
                f"User {from_user_id} already rated engagement {engagement_id}"
            )

        try:
            rating = self.repo.ratings.create(
                from_user_id=from_user_id,
                to_user_id=to_user_id,
                engagement_id=engagement_id,
                score=score,
                comment=comment or '',
            )
            self._fold_into_provider_rating(to_user_id, score)
            self.repo.commit()
        except IntegrityError:
            self.repo.rollback()
            raise RatingNotAllowedException(
                f"User {from_user_id} already rated engagement {engagement_id}"
            )
        except Exception:
            self.repo.rollback()
            raise

        self.events.emit(
            EventType.RATING_CREATED,
            rating_id=rating.id,
            engagement_id=engagement_id,
            to_user_id=to_user_id,
            score=score,
        )
        return rating

    def _fold_into_provider_rating(self, user_id: str, score: int) -> None:
        provider = self.repo.providers.get_by_user_id(user_id)
        if provider is None:
            return
        count = provider.review_count or 0
        total = (provider.rating or 0.0) * count + score
        provider.review_count = count + 1
        provider.rating = round(total / provider.review_count, 2)

    async def list_ratings(self, user_id: str) -> List[Rating]:
        await self._simulate_latency()
        return self.repo.ratings.get_by_user_id(user_id)
