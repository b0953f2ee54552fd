# tagger/domain/errors.py
from __future__ import annotations

from typing import Optional


class TaggerError(Exception):
    """Base class for every error raised by tagger."""


class ReferentialViolation(TaggerError):
    """
    An association was requested for a file or tag that does not exist.
    `missing` is "file" or "tag" (the file is checked first).
    """

    def __init__(self, *, file_id: int, tag_id: int, missing: str) -> None:
        self.file_id = file_id
        self.tag_id = tag_id
        self.missing = missing
        ident = file_id if missing == "file" else tag_id
        super().__init__(f"{missing} {ident} does not exist (file_id={file_id}, tag_id={tag_id})")


class ConstraintConflict(TaggerError):
    """
    The storage engine rejected a write it could not apply atomically
    (unclassified integrity error, lock or serialization failure).
    Nothing was written; the caller may retry.
    """
    retryable = True

    def __init__(self, message: str, *, file_id: Optional[int] = None, tag_id: Optional[int] = None) -> None:
        self.file_id = file_id
        self.tag_id = tag_id
        super().__init__(message)


class DuplicateEntity(TaggerError):
    """A file with the same filename, or a tag with the same slug, already exists."""

    def __init__(self, kind: str, key: str) -> None:
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} already exists: {key!r}")


class EntityNotFound(TaggerError):
    def __init__(self, kind: str, key: object) -> None:
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} not found: {key!r}")
