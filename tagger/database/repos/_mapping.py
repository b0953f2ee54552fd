# tagger/database/repos/_mapping.py
from __future__ import annotations
from tagger.database.models.file import File as DBFile
from tagger.database.models.tag import Tag as DBTag
from tagger.domain.entities.file import File as DomainFile
from tagger.domain.entities.tag import Tag as DomainTag


def to_domain_file(row: DBFile) -> DomainFile:
    return DomainFile(
        id=row.id,
        filename=row.filename,
        last_seen_at=row.last_seen_at,
        orphaned_at=row.orphaned_at,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def to_domain_tag(row: DBTag) -> DomainTag:
    return DomainTag(
        id=row.id,
        name=row.name,
        slug=row.slug,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )