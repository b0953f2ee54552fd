# tagger/domain/entities/file.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class File:
    """
    A tracked file. `filename` is the path as it was registered; the scanner
    registers resolved absolute POSIX paths.
    """
    id: int
    filename: str
    last_seen_at: Optional[datetime] = None
    orphaned_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_orphaned(self) -> bool:
        return self.orphaned_at is not None
