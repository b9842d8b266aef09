import logging

from sqlalchemy.engine import Engine

from database.models import Base

logger = logging.getLogger(__name__)


def init_db(bind: Engine = None) -> None:
    """Create every marketplace table that does not exist yet."""
    if bind is None:
        from database.database import engine as bind
    logger.info(f"Creating tables on {bind.url}")
    Base.metadata.create_all(bind)
