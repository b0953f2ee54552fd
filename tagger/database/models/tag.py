# tagger/database/models/tag.py
from __future__ import annotations

from typing import List, TYPE_CHECKING

from sqlalchemy import String, UniqueConstraint, Index, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tagger.database.core.main import Base
from tagger.database.core.timestamped import TimestampedObject
from tagger.database.models._tables import _t

if TYPE_CHECKING:
    from .file import File


class Tag(TimestampedObject, Base):
    __tablename__ = "tags"
    __table_args__ = (
        UniqueConstraint("slug", name="uq_tags_slug"),
    )

    name: Mapped[str] = mapped_column(String(128), nullable=False)
    slug: Mapped[str] = mapped_column(String(128), nullable=False)  # slugify(name), computed at app layer

    files: Mapped[List["File"]] = relationship(
        "File",
        secondary=lambda: _t("file_tags"),
        viewonly=True,
    )

    def __repr__(self) -> str:
        return f"<Tag id={self.id} name={self.name!r}>"


Index("ix_tags_name_lower", func.lower(Tag.name))
