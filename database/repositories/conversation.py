import logging
from typing import List, Optional
from sqlalchemy import select, func, or_

from database.models import Conversation, ConversationMessage, ConversationStatus
from database.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class ConversationRepository(BaseRepository):
    model = Conversation
    id_prefix = "conversation"

    def find_by_requester_and_match(self, requester_id: str, match_id: str) -> Optional[Conversation]:
        stmt = select(Conversation).where(
            Conversation.requester_id == requester_id,
            Conversation.match_id == match_id
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def get_by_user_id(self, user_id: str, include_deleted: bool = False) -> List[Conversation]:
        stmt = select(Conversation).where(
            or_(Conversation.requester_id == user_id, Conversation.provider_id == user_id)
        )
        if not include_deleted:
            stmt = stmt.where(Conversation.status != ConversationStatus.DELETED.value)
        stmt = stmt.order_by(Conversation.updated_at.desc(), Conversation.id)
        return list(self.db.execute(stmt).scalars().all())


class MessageRepository(BaseRepository):
    model = ConversationMessage
    id_prefix = "message"

    def get_by_conversation_id(self, conversation_id: str) -> List[ConversationMessage]:
        stmt = select(ConversationMessage).where(
            ConversationMessage.conversation_id == conversation_id
        ).order_by(ConversationMessage.position)
        return list(self.db.execute(stmt).scalars().all())

    def next_position(self, conversation_id: str) -> int:
        stmt = select(func.count()).select_from(ConversationMessage).where(
            ConversationMessage.conversation_id == conversation_id
        )
        return int(self.db.execute(stmt).scalar_one())

    def append(self, conversation_id: str, **fields) -> ConversationMessage:
        if fields.get('quote'):
            fields.setdefault('quote_id', fields['quote'].get('id'))
        return self.create(
            conversation_id=conversation_id,
            position=self.next_position(conversation_id),
            **fields
        )

    def find_by_quote_id(
        self,
        quote_id: str,
        conversation_id: Optional[str] = None
    ) -> Optional[ConversationMessage]:
        """First message (in creation order) embedding the quote.

        Scoped to one conversation when `conversation_id` is given,
        otherwise scans every conversation.
        """
        stmt = select(ConversationMessage).where(ConversationMessage.quote_id == quote_id)
        if conversation_id is not None:
            stmt = stmt.where(ConversationMessage.conversation_id == conversation_id)
        stmt = stmt.order_by(ConversationMessage.created_at, ConversationMessage.position)
        return self.db.execute(stmt).scalars().first()
