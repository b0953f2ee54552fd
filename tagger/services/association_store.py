# tagger/services/association_store.py
from __future__ import annotations

from typing import Callable, Optional, Set

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from tagger.common.logging import get_logger
from tagger.database.core.transaction import transactional
from tagger.database.repos.file_tag_repo import SqlAlchemyFileTagRepo
from tagger.domain.entities.links.file_tag_link import FileTagLink
from tagger.domain.errors import ConstraintConflict, ReferentialViolation
from tagger.domain.ports.associations import AssociationStorePort

logger = get_logger(__name__)

# sqlite: "database is locked"/"busy"; postgres: serialization_failure, deadlock_detected
_RETRYABLE_SQLSTATES = {"40001", "40P01"}


def is_retryable_error(exc: OperationalError) -> bool:
    """Lock timeouts and serialization failures: the same write may succeed if retried."""
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate in _RETRYABLE_SQLSTATES:
        return True
    msg = str(orig).lower()
    return "locked" in msg or "busy" in msg


def classify_failed_add(repo: SqlAlchemyFileTagRepo, file_id: int, tag_id: int, exc: IntegrityError) -> None:
    """
    Work out what a rejected insert of (file_id, tag_id) meant. `repo` must sit
    on a transaction that is still usable (a fresh one, or one whose savepoint
    was rolled back).

    Returns normally when the pair is present (another writer added it first);
    raises ReferentialViolation when the file or tag is gone, and
    ConstraintConflict otherwise.
    """
    if repo.exists(file_id, tag_id):
        logger.debug("(%s, %s) added concurrently; treating as done", file_id, tag_id)
        return
    try:
        repo.require_entities(file_id, tag_id)
    except ReferentialViolation as rv:
        logger.warning("rejected tag after concurrent delete: %s", rv)
        raise rv from exc
    logger.warning("conflict adding (%s, %s): %s", file_id, tag_id, exc.orig)
    raise ConstraintConflict(
        f"could not add ({file_id}, {tag_id}): {exc.orig}", file_id=file_id, tag_id=tag_id
    ) from exc


class AssociationStore(AssociationStorePort):
    """
    The set of (file_id, tag_id) pairings.

    Each call runs in its own Session and transaction; no lock is held
    between calls. Engine-level failures are translated here:
      - duplicate pair from a concurrent add  -> treated as success
      - file/tag deleted under a concurrent add -> ReferentialViolation
      - anything else the engine refused       -> ConstraintConflict (retryable)
    """

    def __init__(self, session_factory: Optional[Callable[[], Session]] = None) -> None:
        if session_factory is None:
            from tagger.database.core.main import SessionLocal
            session_factory = SessionLocal
        self._session_factory = session_factory

    def _tx(self):
        return transactional(self._session_factory)

    # -------- mutations --------

    def add(self, file_id: int, tag_id: int) -> FileTagLink:
        try:
            with self._tx() as db:
                return SqlAlchemyFileTagRepo(db).add(file_id, tag_id)
        except ReferentialViolation as exc:
            logger.warning("rejected tag: %s", exc)
            raise
        except IntegrityError as exc:
            # The losing transaction has been rolled back; look again with a fresh one.
            self._classify_failed_add(file_id, tag_id, exc)
            return FileTagLink(file_id=file_id, tag_id=tag_id)
        except OperationalError as exc:
            if is_retryable_error(exc):
                logger.warning("conflict adding (%s, %s): %s", file_id, tag_id, exc.orig)
                raise ConstraintConflict(
                    f"could not add ({file_id}, {tag_id}): {exc.orig}", file_id=file_id, tag_id=tag_id
                ) from exc
            raise

    def _classify_failed_add(self, file_id: int, tag_id: int, exc: IntegrityError) -> None:
        with self._tx() as db:
            classify_failed_add(SqlAlchemyFileTagRepo(db), file_id, tag_id, exc)

    def remove(self, file_id: int, tag_id: int) -> None:
        try:
            with self._tx() as db:
                SqlAlchemyFileTagRepo(db).remove(file_id, tag_id)
        except OperationalError as exc:
            if is_retryable_error(exc):
                raise ConstraintConflict(
                    f"could not remove ({file_id}, {tag_id}): {exc.orig}", file_id=file_id, tag_id=tag_id
                ) from exc
            raise

    # -------- queries --------

    def tags_for_file(self, file_id: int) -> Set[int]:
        with self._tx() as db:
            return SqlAlchemyFileTagRepo(db).tags_for_file(file_id)

    def files_for_tag(self, tag_id: int) -> Set[int]:
        with self._tx() as db:
            return SqlAlchemyFileTagRepo(db).files_for_tag(tag_id)

    def exists(self, file_id: int, tag_id: int) -> bool:
        with self._tx() as db:
            return SqlAlchemyFileTagRepo(db).exists(file_id, tag_id)

    def count(self, file_id: Optional[int] = None, tag_id: Optional[int] = None) -> int:
        with self._tx() as db:
            return SqlAlchemyFileTagRepo(db).count(file_id=file_id, tag_id=tag_id)
