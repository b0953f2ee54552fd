# tagger/domain/dataclasses/reports.py
from __future__ import annotations

from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple


# ---------------------------------------------------------------------------
# Base report (shared fields + utilities)
# ---------------------------------------------------------------------------
@dataclass
class BaseReport:
    """Common report base:
    - timing: started_at / finished_at
    - error capture: error_details
    - helpers: start(), stop(), add_error(), as_dict()
    """
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    # Each tuple is (path, message)
    error_details: List[Tuple[str, str]] = field(default_factory=list)

    def start(self) -> None:
        if self.started_at is None:
            self.started_at = datetime.now()

    def stop(self) -> None:
        self.finished_at = datetime.now()

    def add_error(self, subject: str, message: str) -> None:
        self.error_details.append((subject, message))

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ---------------------------------------------------------------------------
# Directory scan report
# ---------------------------------------------------------------------------
@dataclass
class ScanReport(BaseReport):
    planned: int = 0      # files found on disk
    added: int = 0        # newly tracked
    seen: int = 0         # already tracked, last_seen_at refreshed
    restored: int = 0     # were orphaned, found again
    orphaned: int = 0     # tracked under the root but missing on disk
    errors: int = 0

    def merge(self, other: "ScanReport") -> "ScanReport":
        self.planned += other.planned
        self.added += other.added
        self.seen += other.seen
        self.restored += other.restored
        self.orphaned += other.orphaned
        self.errors += other.errors
        self.error_details.extend(other.error_details)
        # prefer earliest start and latest finish
        if self.started_at is None or (other.started_at and other.started_at < self.started_at):
            self.started_at = other.started_at
        if other.finished_at and (self.finished_at is None or other.finished_at > self.finished_at):
            self.finished_at = other.finished_at
        return self
