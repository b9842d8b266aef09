from typing import List, Optional
from sqlalchemy import select

from core.utils import generate_id
from database.models import Offering, OfferingStatus, ProviderProfile
from database.repositories.base import BaseRepository


class OfferingRepository(BaseRepository):
    model = Offering
    id_prefix = "offering"

    def create(self, **fields) -> Offering:
        # ids read "service_..." or "product_..."
        if not fields.get('id'):
            fields['id'] = generate_id(fields.get('offering_type') or self.id_prefix)
        return super().create(**fields)

    def get_by_type(self, offering_type: Optional[str] = None) -> List[Offering]:
        stmt = select(Offering)
        if offering_type:
            stmt = stmt.where(Offering.offering_type == offering_type)
        stmt = stmt.order_by(Offering.created_at, Offering.id)
        return list(self.db.execute(stmt).scalars().all())

    def get_active(self, offering_type: Optional[str] = None) -> List[Offering]:
        stmt = select(Offering).where(
            Offering.status == OfferingStatus.ACTIVE.value,
            Offering.is_available.is_(True),
        )
        if offering_type:
            stmt = stmt.where(Offering.offering_type == offering_type)
        return list(self.db.execute(stmt).scalars().all())

    def get_by_user_id(self, user_id: str, offering_type: Optional[str] = None) -> List[Offering]:
        stmt = select(Offering).join(ProviderProfile).where(ProviderProfile.user_id == user_id)
        if offering_type:
            stmt = stmt.where(Offering.offering_type == offering_type)
        stmt = stmt.order_by(Offering.created_at, Offering.id)
        return list(self.db.execute(stmt).scalars().all())
