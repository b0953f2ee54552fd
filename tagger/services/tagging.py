# tagger/services/tagging.py
from __future__ import annotations

from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from tagger.common.logging import get_logger
from tagger.database.core.transaction import transactional
from tagger.database.repos._mapping import to_domain_file, to_domain_tag
from tagger.database.repos.file_repo import SqlAlchemyFileRepo
from tagger.database.repos.tag_repo import SqlAlchemyTagRepo
from tagger.database.repos.file_tag_repo import SqlAlchemyFileTagRepo
from tagger.domain.entities.file import File
from tagger.domain.entities.tag import Tag
from tagger.domain.entities.links.file_tag_link import FileTagLink
from tagger.domain.errors import DuplicateEntity, EntityNotFound
from tagger.services.association_store import AssociationStore

logger = get_logger(__name__)


class TaggingService:
    """
    Name-based workflows on top of the repos: track a file, tag it by tag
    name, search by tag. Entities are created on demand the way the command
    line did it ("File wasn't being tracked, tracking it now...").

    Each public call is one transaction, except tag_file which creates the
    entities first and then goes through AssociationStore.add so that it gets
    the same concurrent-write handling as every other add.
    """

    def __init__(self, session_factory: Optional[Callable[[], Session]] = None) -> None:
        if session_factory is None:
            from tagger.database.core.main import SessionLocal
            session_factory = SessionLocal
        self._session_factory = session_factory
        self.store = AssociationStore(session_factory)

    def _tx(self):
        return transactional(self._session_factory)

    # -------- entities --------

    def track_file(self, filename: str) -> File:
        try:
            with self._tx() as db:
                repo = SqlAlchemyFileRepo(db)
                row = repo.get_by_filename(filename)
                if row is None:
                    logger.info("file wasn't being tracked, tracking it now: %s", filename)
                    row = repo.create(filename)
                return to_domain_file(row)
        except DuplicateEntity:
            # a concurrent track_file won; its row is committed by now
            found = self.get_file(filename)
            if found is None:
                raise
            return found

    def get_file(self, filename: str) -> Optional[File]:
        with self._tx() as db:
            row = SqlAlchemyFileRepo(db).get_by_filename(filename)
            return to_domain_file(row) if row else None

    def ensure_tag(self, name: str) -> Tag:
        try:
            with self._tx() as db:
                repo = SqlAlchemyTagRepo(db)
                row = repo.get_by_name(name)
                if row is None:
                    logger.info("tag didn't exist, making it now: %s", name)
                    row = repo.create(name)
                return to_domain_tag(row)
        except DuplicateEntity:
            found = self.get_tag(name)
            if found is None:
                raise
            return found

    def get_tag(self, name: str) -> Optional[Tag]:
        with self._tx() as db:
            row = SqlAlchemyTagRepo(db).get_by_name(name)
            return to_domain_tag(row) if row else None

    def forget_file(self, filename: str) -> None:
        with self._tx() as db:
            repo = SqlAlchemyFileRepo(db)
            row = repo.get_by_filename(filename)
            if row is None:
                raise EntityNotFound("file", filename)
            repo.delete(row.id)

    def delete_tag(self, name: str) -> None:
        with self._tx() as db:
            repo = SqlAlchemyTagRepo(db)
            row = repo.get_by_name(name)
            if row is None:
                raise EntityNotFound("tag", name)
            repo.delete(row.id)

    # -------- associations --------

    def tag_file(self, filename: str, tag_name: str) -> FileTagLink:
        f = self.track_file(filename)
        t = self.ensure_tag(tag_name)
        return self.store.add(f.id, t.id)

    def untag_file(self, filename: str, tag_name: str) -> None:
        f = self.get_file(filename)
        t = self.get_tag(tag_name)
        if f is None or t is None:
            return
        self.store.remove(f.id, t.id)

    def search(self, tag_name: str) -> List[File]:
        with self._tx() as db:
            tag = SqlAlchemyTagRepo(db).get_by_name(tag_name)
            if tag is None:
                raise EntityNotFound("tag", tag_name)
            rows = SqlAlchemyFileTagRepo(db).file_rows_for_tag(tag.id)
            return [to_domain_file(r) for r in rows]

    def tags_of(self, filename: str) -> List[Tag]:
        with self._tx() as db:
            f = SqlAlchemyFileRepo(db).get_by_filename(filename)
            if f is None:
                return []
            rows = SqlAlchemyFileTagRepo(db).tag_rows_for_file(f.id)
            return [to_domain_tag(r) for r in rows]
