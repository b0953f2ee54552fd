# tagger/domain/entities/links/file_tag_link.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class FileTagLink:
    """
    Join entity connecting a File and a Tag.
    The pair is the whole identity; the DB enforces that it is unique.
    """
    file_id: int
    tag_id: int

    def as_key(self) -> Tuple[int, int]:
        return (self.file_id, self.tag_id)
