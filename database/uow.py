import contextlib
import logging
from typing import Callable, Optional

from sqlalchemy.orm import Session

from database.repository import QARepository

logger = logging.getLogger(__name__)


@contextlib.contextmanager
def qa_uow(session_factory: Optional[Callable[[], Session]] = None):
    """Per-unit-of-work transaction scope.

    Yields a QARepository bound to a fresh Session. Commits on success,
    rolls back on exception, always closes.

    Usage:
        with qa_uow() as repo:
            answer = repo.answers.get_answer(answer_id)
            # perform operations...
        # commit happens automatically on successful exit
    """
    if session_factory is None:
        from database.database import SessionLocal
        session_factory = SessionLocal

    session = session_factory()
    try:
        repo = QARepository(session)
        yield repo
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
