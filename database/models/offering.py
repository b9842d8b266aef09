from sqlalchemy import Column, Text, DateTime, Float, Boolean, JSON, ForeignKey, Index
from sqlalchemy.orm import relationship

from core.utils import utcnow
from .base import Base
from .enums import OfferingStatus, OfferingType


class Offering(Base):
    """
    A Service or Product published by exactly one provider.

    Services carry a price range and `requirements`; products carry a single
    price (stored as min_price == max_price) and `specifications`.
    """
    __tablename__ = 'offerings'

    id = Column(Text, primary_key=True)
    provider_id = Column(Text, ForeignKey('provider_profiles.id', ondelete='CASCADE'), nullable=False)
    offering_type = Column(Text, nullable=False, default=OfferingType.SERVICE.value)

    name = Column(Text, nullable=False)
    description = Column(Text, default='')
    category = Column(Text, default='')

    min_price = Column(Float, default=0.0)
    max_price = Column(Float, default=0.0)
    currency = Column(Text, default='MXN')
    unit = Column(Text, default='')
    delivery_time = Column(Text, default='')

    features = Column(JSON, default=list)
    requirements = Column(JSON, default=list)
    specifications = Column(JSON, default=list)
    tags = Column(JSON, default=list)

    is_available = Column(Boolean, nullable=False, default=True)
    availability_location = Column(Text, default='')

    status = Column(Text, nullable=False, default=OfferingStatus.ACTIVE.value)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    provider = relationship("ProviderProfile", back_populates="offerings")

    __table_args__ = (
        Index('idx_offerings_provider', 'provider_id'),
        Index('idx_offerings_type', 'offering_type'),
        Index('idx_offerings_status', 'status'),
    )

    @property
    def price(self) -> float:
        """Single price of a product."""
        return self.min_price

    @property
    def details(self):
        """Requirements for services, specifications for products."""
        if self.offering_type == OfferingType.PRODUCT.value:
            return list(self.specifications or [])
        return list(self.requirements or [])
