from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import Session


@contextmanager
def smart_transaction(session: Session) -> Iterator:
    """
    Context manager that commits the block's work on the given Session, or
    rolls it back if the block raises.
    If the session already autobegan a transaction (e.g. it was used for a read
    earlier in the request) that transaction is the one committed; otherwise a
    fresh one is started with begin().
    Usage:
        with smart_transaction(db):
            ... DB work ...
    """
    if not session.in_transaction():
        with session.begin():
            yield
        return
    try:
        yield
        session.commit()
    except Exception:
        session.rollback()
        raise
