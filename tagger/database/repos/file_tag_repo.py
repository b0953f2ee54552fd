# tagger/database/repos/file_tag_repo.py
from __future__ import annotations

from typing import List, Set

from sqlalchemy import select, func, and_, insert, delete as sa_delete
from sqlalchemy.orm import Session

from tagger.common.logging import get_logger
from tagger.database.models.file import File as DBFile
from tagger.database.models.tag import Tag as DBTag
from tagger.database.models.file_tag import FileTag as DBFileTag
from tagger.domain.entities.links.file_tag_link import FileTagLink
from tagger.domain.errors import ReferentialViolation

logger = get_logger(__name__)


class SqlAlchemyFileTagRepo:
    """
    Session-scoped operations on the file_tags join table.

    Uniqueness and referential validity are enforced by the table itself
    (composite PK + two FKs); the existence checks below only let the common
    failure surface as ReferentialViolation instead of a driver error.
    The repo never commits: an IntegrityError from a concurrent writer
    propagates out of add() and is classified by AssociationStore.
    """

    def __init__(self, session: Session) -> None:
        self.db = session

    # -------- integrity helpers --------

    def require_entities(self, file_id: int, tag_id: int) -> None:
        if self.db.get(DBFile, file_id) is None:
            raise ReferentialViolation(file_id=file_id, tag_id=tag_id, missing="file")
        if self.db.get(DBTag, tag_id) is None:
            raise ReferentialViolation(file_id=file_id, tag_id=tag_id, missing="tag")

    # -------- mutations --------

    def add(self, file_id: int, tag_id: int) -> FileTagLink:
        self.require_entities(file_id, tag_id)

        if self.exists(file_id, tag_id):
            return FileTagLink(file_id=file_id, tag_id=tag_id)

        # Core insert: a duplicate from a concurrent writer fails here as IntegrityError
        self.db.execute(insert(DBFileTag).values(file_id=file_id, tag_id=tag_id))
        logger.debug("tagged file %s with tag %s", file_id, tag_id)
        return FileTagLink(file_id=file_id, tag_id=tag_id)

    def remove(self, file_id: int, tag_id: int) -> bool:
        res = self.db.execute(
            sa_delete(DBFileTag).where(
                and_(DBFileTag.file_id == file_id, DBFileTag.tag_id == tag_id)
            )
        )
        removed = (res.rowcount or 0) > 0
        if removed:
            logger.debug("untagged file %s from tag %s", file_id, tag_id)
        return removed

    # -------- queries --------

    def exists(self, file_id: int, tag_id: int) -> bool:
        stmt = (
            select(func.count())
            .select_from(DBFileTag)
            .where(and_(DBFileTag.file_id == file_id, DBFileTag.tag_id == tag_id))
        )
        return (self.db.execute(stmt).scalar_one() or 0) > 0

    def tags_for_file(self, file_id: int) -> Set[int]:
        stmt = select(DBFileTag.tag_id).where(DBFileTag.file_id == file_id)
        return set(self.db.execute(stmt).scalars().all())

    def files_for_tag(self, tag_id: int) -> Set[int]:
        stmt = select(DBFileTag.file_id).where(DBFileTag.tag_id == tag_id)
        return set(self.db.execute(stmt).scalars().all())

    def count(self, file_id: int | None = None, tag_id: int | None = None) -> int:
        stmt = select(func.count()).select_from(DBFileTag)
        if file_id is not None:
            stmt = stmt.where(DBFileTag.file_id == file_id)
        if tag_id is not None:
            stmt = stmt.where(DBFileTag.tag_id == tag_id)
        return int(self.db.execute(stmt).scalar_one() or 0)

    def list_links(self) -> List[FileTagLink]:
        stmt = select(DBFileTag.file_id, DBFileTag.tag_id).order_by(
            DBFileTag.file_id.asc(), DBFileTag.tag_id.asc()
        )
        return [FileTagLink(file_id=f, tag_id=t) for f, t in self.db.execute(stmt).all()]

    # -------- joined rows --------

    def file_rows_for_tag(self, tag_id: int) -> List[DBFile]:
        stmt = (
            select(DBFile)
            .join(DBFileTag, DBFileTag.file_id == DBFile.id)
            .where(DBFileTag.tag_id == tag_id)
            .order_by(DBFile.filename.asc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def tag_rows_for_file(self, file_id: int) -> List[DBTag]:
        stmt = (
            select(DBTag)
            .join(DBFileTag, DBFileTag.tag_id == DBTag.id)
            .where(DBFileTag.file_id == file_id)
            .order_by(DBTag.name.asc())
        )
        return list(self.db.execute(stmt).scalars().all())
