from __future__ import annotations
from typing import Protocol, Set

from tagger.domain.entities.links.file_tag_link import FileTagLink


class AssociationStorePort(Protocol):
    """Set of (file_id, tag_id) pairings with uniqueness and referential integrity."""

    def add(self, file_id: int, tag_id: int) -> FileTagLink: ...

    def remove(self, file_id: int, tag_id: int) -> None: ...

    def tags_for_file(self, file_id: int) -> Set[int]: ...

    def files_for_tag(self, tag_id: int) -> Set[int]: ...

    def exists(self, file_id: int, tag_id: int) -> bool: ...
