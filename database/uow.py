import contextlib
import logging

from database.database import SessionLocal
from database.repository import MarketplaceRepository

logger = logging.getLogger(__name__)


@contextlib.contextmanager
def marketplace_uow(session_factory=SessionLocal):
    """Per-unit-of-work transaction scope.

    Yields a MarketplaceRepository bound to a fresh Session. Commits on
    success, rolls back on exception, always closes.

    Usage:
        with marketplace_uow() as repo:
            profile = repo.requesters.get_by_user_id(user_id)
            # perform operations...
        # commit happens automatically on successful exit
    """
    session = session_factory()
    try:
        repo = MarketplaceRepository(session)
        yield repo
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
