from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import Session


@contextmanager
def unit_of_work(session: Session) -> Iterator[Session]:
    """
    Context manager that treats the enclosed block as one transaction on the
    given Session: COMMIT when the block exits normally, ROLLBACK on any
    exception (the exception is re-raised).
    Usage:
        with unit_of_work(db):
            ... DB work ...
    """
    try:
        yield session
        session.commit()
    except BaseException:
        session.rollback()
        raise
