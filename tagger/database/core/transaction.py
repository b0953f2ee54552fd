# tagger/database/core/transaction.py
from __future__ import annotations

from contextlib import contextmanager
from typing import Callable, Iterator

from sqlalchemy.orm import Session


@contextmanager
def transactional(factory: Callable[[], Session]) -> Iterator[Session]:
    """
    One Session, one transaction: COMMIT on normal exit, ROLLBACK if an
    exception bubbles out, and the session is closed either way.
    """
    with factory() as db:
        with db.begin():
            yield db
