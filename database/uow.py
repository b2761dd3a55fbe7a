import contextlib
import logging
from typing import Callable, Iterator, Optional

from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], Session]


@contextlib.contextmanager
def quality_uow(session_factory: Optional[SessionFactory] = None) -> Iterator[Session]:
    """Per-unit-of-work transaction scope.

    Yields a fresh Session from session_factory (the module-level SessionLocal
    when omitted). Commits on success, rolls back on exception, always closes.
    Each call gets its own Session, so worker threads never share one.

    Usage:
        with quality_uow(factory) as session:
            repo = QualityMetricsRepository(session)
            repo.upsert(...)
        # commit happens automatically on successful exit
    """
    if session_factory is None:
        from database.database import SessionLocal
        session_factory = SessionLocal

    session = session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
