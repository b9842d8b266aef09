from typing import Optional
from sqlalchemy import select

from database.models import RequesterProfile, ProviderProfile
from database.repositories.base import BaseRepository


class RequesterProfileRepository(BaseRepository):
    model = RequesterProfile
    id_prefix = "requester"

    def get_by_user_id(self, user_id: str) -> Optional[RequesterProfile]:
        stmt = select(RequesterProfile).where(RequesterProfile.user_id == user_id)
        return self.db.execute(stmt).scalar_one_or_none()


class ProviderProfileRepository(BaseRepository):
    model = ProviderProfile
    id_prefix = "provider"

    def get_by_user_id(self, user_id: str) -> Optional[ProviderProfile]:
        stmt = select(ProviderProfile).where(ProviderProfile.user_id == user_id)
        return self.db.execute(stmt).scalar_one_or_none()
