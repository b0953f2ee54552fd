from __future__ import annotations
from typing import Optional, List

from sqlalchemy import select, delete as sa_delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tagger.database.models.tag import Tag
from tagger.common.naming.slugger import slugify
from tagger.domain.errors import DuplicateEntity


class SqlAlchemyTagRepo:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get(self, tag_id: int) -> Optional[Tag]:
        return self.db.get(Tag, tag_id)

    def get_by_name(self, name: str) -> Optional[Tag]:
        """
        Tags are matched on their slug, so 'Holiday Photos' and 'holiday_photos'
        are the same tag.
        """
        slug = slugify(name)
        if not slug:
            return None
        stmt = select(Tag).where(Tag.slug == slug).limit(1)
        return self.db.execute(stmt).scalars().first()

    def list_all(self) -> List[Tag]:
        stmt = select(Tag).order_by(Tag.slug.asc())
        return list(self.db.execute(stmt).scalars().all())

    def create(self, name: str) -> Tag:
        name = (name or "").strip()
        slug = slugify(name)
        if not slug:
            raise ValueError("Tag name must contain at least one letter or digit")
        if self.get_by_name(name) is not None:
            raise DuplicateEntity("tag", slug)
        t = Tag(name=name, slug=slug)
        self.db.add(t)
        try:
            self.db.flush()
        except IntegrityError as exc:
            raise DuplicateEntity("tag", slug) from exc
        return t

    def delete(self, tag_id: int) -> bool:
        """Delete the tag; its file_tags rows go with it (ON DELETE CASCADE)."""
        res = self.db.execute(sa_delete(Tag).where(Tag.id == tag_id))
        return (res.rowcount or 0) > 0
