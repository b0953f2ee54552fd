# tagger/database/models/file_tag.py
from __future__ import annotations

from sqlalchemy import ForeignKey, Index, Integer
from sqlalchemy.orm import Mapped, mapped_column

from tagger.database.core.main import Base


class FileTag(Base):
    """
    Association table for File <-> Tag (M:M).
    The composite primary key is the identity of the pairing (no surrogate id);
    both sides cascade on delete.
    """
    __tablename__ = "file_tags"
    __table_args__ = (
        Index("ix_file_tags_tag_id", "tag_id"),
    )

    file_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("files.id", ondelete="CASCADE"),
        primary_key=True,
        nullable=False,
    )
    tag_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("tags.id", ondelete="CASCADE"),
        primary_key=True,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<FileTag file_id={self.file_id} tag_id={self.tag_id}>"
