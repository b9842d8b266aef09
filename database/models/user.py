from sqlalchemy import Column, Text, DateTime, Index

from core.utils import utcnow
from .base import Base
from .enums import UserRole


class User(Base):
    """
    Marketplace account. The role decides which profile the user owns.
    """
    __tablename__ = 'users'

    id = Column(Text, primary_key=True)
    email = Column(Text, nullable=False, unique=True)
    name = Column(Text, nullable=False)
    role = Column(Text, nullable=False, default=UserRole.REQUESTER.value)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index('idx_users_role', 'role'),
    )

    @property
    def is_provider(self) -> bool:
        return self.role == UserRole.PROVIDER.value
