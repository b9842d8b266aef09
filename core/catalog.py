#!/usr/bin/env python3
"""
Catalog Service - publishing services and products.

Publishing an offering also merges it into the provider profile summary
used by coarse scoring: the offering name joins `services`, its features
join `capabilities`, and its price entry replaces the one with the same
name or is appended.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

from core.exceptions import OfferingNotFoundException, ProfileNotFoundException
from core.utils import merge_unique
from database.models import Offering, OfferingStatus, OfferingType, ProviderProfile
from database.repository import MarketplaceRepository
from notification.events import EventBus, EventType

logger = logging.getLogger(__name__)

NEW_PROVIDER_RATING = 4.0

# Columns callers may change through update_offering
UPDATABLE_FIELDS = {
    'name', 'description', 'category', 'min_price', 'max_price', 'currency',
    'unit', 'delivery_time', 'features', 'requirements', 'specifications',
    'tags', 'is_available', 'availability_location', 'status',
}


class ServiceDraft(BaseModel):
    """Input for publishing a service."""
    name: str = Field(..., min_length=1, description="Service name")
    description: str = ""
    category: str = ""
    min_price: float = Field(0.0, ge=0, description="Lower end of the price range")
    max_price: float = Field(0.0, ge=0, description="Upper end of the price range")
    currency: str = "MXN"
    unit: str = ""
    delivery_time: str = ""
    features: List[str] = Field(default_factory=list)
    requirements: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    availability_location: str = ""
    is_available: bool = True


class ProductDraft(BaseModel):
    """Input for publishing a product."""
    name: str = Field(..., min_length=1, description="Product name")
    description: str = ""
    category: str = ""
    price: float = Field(0.0, ge=0, description="Single unit price")
    currency: str = "MXN"
    unit: str = ""
    delivery_time: str = ""
    features: List[str] = Field(default_factory=list)
    specifications: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    availability_location: str = ""
    is_available: bool = True


class CatalogService:
    """Create, update and delete offerings on behalf of provider users."""

    def __init__(
        self,
        repo: MarketplaceRepository,
        events: Optional[EventBus] = None,
        latency_seconds: float = 0.0
    ):
        self.repo = repo
        self.events = events or EventBus()
        self.latency_seconds = latency_seconds

    async def _simulate_latency(self) -> None:
        if self.latency_seconds > 0:
            await asyncio.sleep(self.latency_seconds)

    def resolve_provider(self, user_id: str) -> ProviderProfile:
        """
        Provider profile for a user, creating a basic one for provider users.

        Raises:
            ProfileNotFoundException: no profile and the user is not a provider
        """
        provider = self.repo.providers.get_by_user_id(user_id)
        if provider is not None:
            return provider

        user = self.repo.users.get_by_id(user_id)
        if user is None or not user.is_provider:
            logger.warning(f"User not found or not a provider: {user_id}")
            raise ProfileNotFoundException(f"No provider profile for user {user_id}")

        provider = self.repo.providers.create(
            user_id=user_id,
            company_name=user.name,
            description=f"Provider profile for {user.name}",
            services=[],
            capabilities=[],
            pricing=[],
            rating=NEW_PROVIDER_RATING,
            review_count=0,
        )
        logger.info(f"Created provider profile {provider.id} for user {user_id}")
        return provider

    @staticmethod
    def merge_into_profile(provider: ProviderProfile, offering: Offering) -> None:
        provider.services = merge_unique(provider.services, [offering.name])
        provider.capabilities = merge_unique(provider.capabilities, offering.features or [])

        entry = {
            'service': offering.name,
            'min_price': offering.min_price,
            'max_price': offering.max_price,
            'unit': offering.unit or '',
        }
        pricing = [dict(p) for p in (provider.pricing or [])]
        for index, existing in enumerate(pricing):
            if existing.get('service') == offering.name:
                pricing[index] = entry
                break
        else:
            pricing.append(entry)
        provider.pricing = pricing

    def _publish(self, user_id: str, fields: Dict[str, Any]) -> Offering:
        try:
            provider = self.resolve_provider(user_id)
            offering = self.repo.offerings.create(provider_id=provider.id, **fields)
            self.merge_into_profile(provider, offering)
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        logger.info(f"Published {offering.offering_type} '{offering.name}' for {user_id}")
        self.events.emit(
            EventType.OFFERING_PUBLISHED,
            offering_id=offering.id,
            offering_type=offering.offering_type,
            provider_id=offering.provider_id,
        )
        return offering

    async def create_service(self, user_id: str, draft: Union[ServiceDraft, Dict[str, Any]]) -> Offering:
        if isinstance(draft, dict):
            draft = ServiceDraft(**draft)
        await self._simulate_latency()

        fields = draft.model_dump()
        fields['offering_type'] = OfferingType.SERVICE.value
        fields['max_price'] = max(draft.max_price, draft.min_price)
        return self._publish(user_id, fields)

    async def create_product(self, user_id: str, draft: Union[ProductDraft, Dict[str, Any]]) -> Offering:
        if isinstance(draft, dict):
            draft = ProductDraft(**draft)
        await self._simulate_latency()

        fields = draft.model_dump(exclude={'price'})
        fields['offering_type'] = OfferingType.PRODUCT.value
        fields['min_price'] = draft.price
        fields['max_price'] = draft.price
        return self._publish(user_id, fields)

    async def update_offering(self, offering_id: str, **updates: Any) -> Offering:
        """
        Raises:
            OfferingNotFoundException: unknown offering id
        """
        await self._simulate_latency()

        offering = self.repo.offerings.get_by_id(offering_id)
        if offering is None:
            raise OfferingNotFoundException(f"Offering {offering_id} not found")

        unknown = set(updates) - UPDATABLE_FIELDS
        if unknown:
            logger.warning(f"Ignoring non-updatable fields for {offering_id}: {sorted(unknown)}")
        allowed = {k: v for k, v in updates.items() if k in UPDATABLE_FIELDS}
        if 'status' in allowed:
            allowed['status'] = OfferingStatus(allowed['status']).value

        try:
            self.repo.offerings.update(offering_id, **allowed)
            if offering.offering_type == OfferingType.PRODUCT.value and 'min_price' in allowed:
                offering.max_price = offering.min_price
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise
        return offering

    async def delete_offering(self, offering_id: str) -> bool:
        await self._simulate_latency()

        try:
            deleted = self.repo.offerings.delete(offering_id)
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        if not deleted:
            logger.info(f"Offering {offering_id} not found, nothing deleted")
        return deleted

    async def list_offerings_for_user(
        self,
        user_id: str,
        offering_type: Optional[str] = None
    ) -> List[Offering]:
        await self._simulate_latency()
        return self.repo.offerings.get_by_user_id(user_id, offering_type)
