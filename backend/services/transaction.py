"""Unit-of-work support for multi-statement writes."""

import logging
from collections.abc import Callable
from typing import Protocol, TypeVar

from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

T = TypeVar("T")

_UNIT_OF_WORK_FLAG = "unit_of_work_active"


class NestedTransactionError(RuntimeError):
    """A unit of work was started on a session that is already running one."""


class Transactioner(Protocol):
    """Runs a unit of work atomically."""

    def transact(self, db: Session, work: Callable[[Session], T]) -> T:
        ...


class SessionTransactioner:
    """Transactioner backed by the request's SQLAlchemy session.

    ``work`` receives the session and must pass it to every store call.
    When ``work`` returns, the session is committed; if it raises, the
    session is rolled back and the exception propagates, so none of the
    writes made inside the unit become visible.
    """

    def transact(self, db: Session, work: Callable[[Session], T]) -> T:
        if db.info.get(_UNIT_OF_WORK_FLAG):
            raise NestedTransactionError(
                "A unit of work is already active on this session"
            )

        db.info[_UNIT_OF_WORK_FLAG] = True
        try:
            result = work(db)
            db.commit()
        except Exception:
            db.rollback()
            logger.debug("Unit of work rolled back", exc_info=True)
            raise
        finally:
            db.info.pop(_UNIT_OF_WORK_FLAG, None)
        return result
