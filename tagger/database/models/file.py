# tagger/database/models/file.py
from __future__ import annotations

from datetime import datetime
from typing import Optional, List, TYPE_CHECKING

from sqlalchemy import DateTime, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tagger.database.core.main import Base
from tagger.database.core.timestamped import TimestampedObject
from tagger.database.models._tables import _t

if TYPE_CHECKING:
    from .tag import Tag


class File(TimestampedObject, Base):
    __tablename__ = "files"
    __table_args__ = (
        UniqueConstraint("filename", name="uq_files_filename"),
    )

    filename: Mapped[str] = mapped_column(Text, nullable=False)
    last_seen_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    orphaned_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    # read-only; file_tags rows go away with the file through ON DELETE CASCADE
    tags: Mapped[List["Tag"]] = relationship(
        "Tag",
        secondary=lambda: _t("file_tags"),
        viewonly=True,
    )

    def __repr__(self) -> str:
        return f"<File id={self.id} filename={self.filename!r}>"
