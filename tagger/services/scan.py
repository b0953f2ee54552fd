from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Iterable, Iterator, List, Optional

from sqlalchemy.orm import Session

from tagger.common.logging import get_logger
from tagger.common.settings import get_settings
from tagger.database.core.transaction import transactional
from tagger.database.repos.file_repo import SqlAlchemyFileRepo
from tagger.domain.dataclasses.reports import ScanReport

logger = get_logger(__name__)


def _is_hidden(path: Path, root: Path) -> bool:
    return any(part.startswith(".") for part in path.relative_to(root).parts)


def iter_files(root: Path, *, recursive: bool = True, include_hidden: bool = False) -> Iterator[Path]:
    """Regular files under `root`, resolved, in a stable order."""
    candidates = root.rglob("*") if recursive else root.iterdir()
    for p in sorted(candidates):
        if not p.is_file():
            continue
        if not include_hidden and _is_hidden(p, root):
            continue
        yield p.resolve()


class ScanService:
    """
    Reconcile tracked files with what is on disk under a directory:
      - files not yet tracked are added
      - tracked files found get last_seen_at (and lose orphaned_at)
      - tracked files under the root that are gone get orphaned_at
    Associations are never touched; an orphaned file keeps its tags.
    """

    def __init__(self, session_factory: Optional[Callable[[], Session]] = None) -> None:
        if session_factory is None:
            from tagger.database.core.main import SessionLocal
            session_factory = SessionLocal
        self._session_factory = session_factory
        self.cfg = get_settings()

    def scan(
        self,
        root: Path | str | None = None,
        *,
        recursive: Optional[bool] = None,
        include_hidden: Optional[bool] = None,
    ) -> ScanReport:
        root = root if root is not None else self.cfg.scan.root
        if root is None:
            raise ValueError("No scan root given and SCAN__ROOT is not configured")
        root_path = Path(root).expanduser().resolve()
        if not root_path.is_dir():
            raise ValueError(f"Scan root is not a directory: {root_path}")
        recursive = self.cfg.scan.recursive if recursive is None else recursive
        include_hidden = self.cfg.scan.include_hidden if include_hidden is None else include_hidden

        rpt = ScanReport()
        rpt.start()
        now = datetime.now(timezone.utc)

        # two symlinks may resolve to the same file
        found: List[str] = list(dict.fromkeys(
            p.as_posix() for p in iter_files(root_path, recursive=recursive, include_hidden=include_hidden)
        ))
        rpt.planned = len(found)

        with transactional(self._session_factory) as db:
            repo = SqlAlchemyFileRepo(db)
            prefix = root_path.as_posix().rstrip("/") + "/"
            tracked = {f.filename: f for f in repo.list_under(prefix)}

            seen_ids: List[int] = []
            for name in found:
                # symlinks may resolve outside the root
                row = tracked.get(name) or repo.get_by_filename(name)
                if row is None:
                    row = repo.create(name)
                    rpt.added += 1
                elif row.orphaned_at is not None:
                    rpt.restored += 1
                else:
                    rpt.seen += 1
                seen_ids.append(row.id)
            repo.mark_seen(seen_ids, now)

            found_set = set(found)
            gone = [
                f.id for name, f in tracked.items()
                if name not in found_set and f.orphaned_at is None
                and (recursive or "/" not in name[len(prefix):])
                and (include_hidden or not _is_hidden(Path(name), root_path))
            ]
            repo.mark_orphaned(gone, now)
            rpt.orphaned = len(gone)

        rpt.stop()
        logger.info(
            "scan %s: planned=%d added=%d seen=%d restored=%d orphaned=%d",
            root_path, rpt.planned, rpt.added, rpt.seen, rpt.restored, rpt.orphaned,
        )
        return rpt

    def scan_many(self, roots: Iterable[Path | str], **kwargs) -> ScanReport:
        total = ScanReport()
        for r in roots:
            try:
                total.merge(self.scan(r, **kwargs))
            except ValueError as exc:
                total.errors += 1
                total.add_error(str(r), str(exc))
        return total
