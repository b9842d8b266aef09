from sqlalchemy import Column, Text, DateTime, Float, Integer, JSON, Index
from sqlalchemy.orm import relationship

from core.utils import utcnow
from .base import Base
from .enums import CompanySize, OfferingType


class RequesterProfile(Base):
    """
    Small-business buyer profile: what it needs, where it is, what it can spend.
    """
    __tablename__ = 'requester_profiles'

    id = Column(Text, primary_key=True)
    user_id = Column(Text, nullable=False, unique=True)
    company_name = Column(Text, nullable=False, default='')
    industry = Column(Text, default='')
    size = Column(Text, default=CompanySize.MICRO.value)  # micro|small|medium
    location = Column(Text, default='')
    description = Column(Text, default='')

    needs = Column(JSON, default=list)  # free-text needs
    service_types = Column(JSON, default=list)  # structured service types

    budget_min = Column(Float, default=0.0)
    budget_max = Column(Float, default=0.0)

    contact_info = Column(JSON, default=dict)  # {"phone": ..., "address": ...}

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index('idx_requester_profiles_user', 'user_id'),
    )


class ProviderProfile(Base):
    """
    Vendor profile.

    `services`, `capabilities` and `pricing` are a denormalized summary of the
    published offerings, merged append-only on every publish. `rating` and
    `review_count` are derived from received ratings.
    """
    __tablename__ = 'provider_profiles'

    id = Column(Text, primary_key=True)
    user_id = Column(Text, nullable=False, unique=True)
    company_name = Column(Text, nullable=False, default='')
    location = Column(Text, default='')
    description = Column(Text, default='')

    services = Column(JSON, default=list)  # service names
    capabilities = Column(JSON, default=list)  # capability tags
    pricing = Column(JSON, default=list)  # [{"service", "min_price", "max_price", "unit"}]

    contact_info = Column(JSON, default=dict)

    rating = Column(Float, default=0.0)  # 0-5
    review_count = Column(Integer, default=0)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    offerings = relationship("Offering", back_populates="provider", cascade="all, delete-orphan")

    __table_args__ = (
        Index('idx_provider_profiles_user', 'user_id'),
    )

    @property
    def offered_services(self):
        return [o for o in self.offerings if o.offering_type == OfferingType.SERVICE.value]

    @property
    def offered_products(self):
        return [o for o in self.offerings if o.offering_type == OfferingType.PRODUCT.value]
