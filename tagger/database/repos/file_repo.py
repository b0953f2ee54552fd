# tagger/database/repos/file_repo.py
from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy import select, delete as sa_delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tagger.database.models.file import File as DBFile
from tagger.domain.errors import DuplicateEntity


class SqlAlchemyFileRepo:
    """
    Files are owned here only so that file_tags has something to reference.
    The repo never commits; callers own the transaction.
    """

    def __init__(self, session: Session) -> None:
        self.db = session

    def get(self, file_id: int) -> Optional[DBFile]:
        return self.db.get(DBFile, file_id)

    def get_by_filename(self, filename: str) -> Optional[DBFile]:
        stmt = select(DBFile).where(DBFile.filename == filename).limit(1)
        return self.db.execute(stmt).scalars().first()

    def list_all(self) -> List[DBFile]:
        stmt = select(DBFile).order_by(DBFile.filename.asc())
        return list(self.db.execute(stmt).scalars().all())

    def list_under(self, prefix: str) -> List[DBFile]:
        """Files whose filename starts with `prefix` (a directory path ending in '/')."""
        escaped = prefix.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        stmt = (
            select(DBFile)
            .where(DBFile.filename.like(f"{escaped}%", escape="\\"))
            .order_by(DBFile.filename.asc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def create(self, filename: str) -> DBFile:
        if self.get_by_filename(filename) is not None:
            raise DuplicateEntity("file", filename)
        obj = DBFile(filename=filename)
        self.db.add(obj)
        try:
            self.db.flush()  # ensure id
        except IntegrityError as exc:
            # another transaction inserted the same filename after our check
            raise DuplicateEntity("file", filename) from exc
        return obj

    def delete(self, file_id: int) -> bool:
        """Delete the file; its file_tags rows go with it (ON DELETE CASCADE)."""
        res = self.db.execute(sa_delete(DBFile).where(DBFile.id == file_id))
        return (res.rowcount or 0) > 0

    def mark_seen(self, file_ids: Iterable[int], when: datetime) -> None:
        for fid in file_ids:
            obj = self.get(fid)
            if obj is None:
                continue
            obj.last_seen_at = when
            obj.orphaned_at = None

    def mark_orphaned(self, file_ids: Iterable[int], when: datetime) -> None:
        for fid in file_ids:
            obj = self.get(fid)
            if obj is None or obj.orphaned_at is not None:
                continue
            obj.orphaned_at = when
