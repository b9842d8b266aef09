import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from core.utils import generate_id

logger = logging.getLogger(__name__)


class BaseRepository:
    """Generic get-all/get-by-id/create/update/delete over one entity collection.

    Subclasses set `model` and `id_prefix`; ids are generated as
    ``<id_prefix>_<timestamp>_<random>`` unless the caller supplies one.
    """
    model = None
    id_prefix = "record"

    def __init__(self, db: Session):
        self.db = db

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()

    def get_all(self) -> List[Any]:
        stmt = select(self.model).order_by(self.model.created_at, self.model.id)
        return list(self.db.execute(stmt).scalars().all())

    def get_by_id(self, record_id: Any) -> Optional[Any]:
        if record_id is None:
            return None
        return self.db.get(self.model, record_id)

    def create(self, **fields: Any) -> Any:
        fields.setdefault('id', generate_id(self.id_prefix))
        record = self.model(**fields)
        self.db.add(record)
        self.db.flush()
        return record

    def update(self, record_id: Any, **updates: Any) -> Optional[Any]:
        record = self.get_by_id(record_id)
        if record is None:
            return None
        self._apply(record, updates)
        self.db.flush()
        return record

    def delete(self, record_id: Any) -> bool:
        record = self.get_by_id(record_id)
        if record is None:
            return False
        self.db.delete(record)
        self.db.flush()
        return True

    def _apply(self, record: Any, updates: Dict[str, Any]) -> None:
        for key, value in updates.items():
            if not hasattr(record, key):
                logger.warning(f"Ignoring unknown field '{key}' for {self.model.__name__}")
                continue
            setattr(record, key, value)
