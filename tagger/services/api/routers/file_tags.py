from __future__ import annotations

from http import HTTPStatus

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from tagger.common.logging import get_logger
from tagger.common.settings import get_settings
from tagger.database.repos.file_tag_repo import SqlAlchemyFileTagRepo
from tagger.domain.errors import ConstraintConflict, ReferentialViolation
from tagger.services.association_store import classify_failed_add, is_retryable_error
from tagger.services.api.deps import transactional_session
from tagger.services.schemas.file_tags import (
    FileTagAttach, FileTagRead, FileTagsRead, TagFilesRead, FileTagExists,
)

cfg = get_settings()
logger = get_logger(__name__)

router = APIRouter(prefix=cfg.api.prefix, tags=["file-tags"])


def _not_found(exc: ReferentialViolation) -> HTTPException:
    detail = "File not found" if exc.missing == "file" else "Tag not found"
    return HTTPException(status_code=HTTPStatus.NOT_FOUND, detail=detail)


@router.post("/files/{file_id}/tags", response_model=FileTagRead, status_code=HTTPStatus.CREATED)
def attach_tag_to_file(
    file_id: int,
    payload: FileTagAttach,
    db: Session = Depends(transactional_session),
) -> FileTagRead:
    tag_id = payload.tag_id
    repo = SqlAlchemyFileTagRepo(db)
    try:
        # savepoint: a rejected insert leaves the request transaction usable for classification
        with db.begin_nested():
            repo.add(file_id, tag_id)
    except ReferentialViolation as exc:
        raise _not_found(exc)
    except IntegrityError as exc:
        try:
            classify_failed_add(repo, file_id, tag_id, exc)
        except ReferentialViolation as rv:
            raise _not_found(rv)
        except ConstraintConflict:
            raise HTTPException(status_code=HTTPStatus.CONFLICT, detail="Conflicting concurrent change, retry")
    except OperationalError as exc:
        if not is_retryable_error(exc):
            raise
        logger.warning("conflict tagging file %s with %s: %s", file_id, tag_id, exc.orig)
        raise HTTPException(status_code=HTTPStatus.CONFLICT, detail="Database busy, retry")
    return FileTagRead(file_id=file_id, tag_id=tag_id)


@router.get("/files/{file_id}/tags", response_model=FileTagsRead)
def list_tags_for_file(
    file_id: int,
    db: Session = Depends(transactional_session),
) -> FileTagsRead:
    ids = SqlAlchemyFileTagRepo(db).tags_for_file(file_id)
    return FileTagsRead(file_id=file_id, tag_ids=sorted(ids))


@router.get("/tags/{tag_id}/files", response_model=TagFilesRead)
def list_files_for_tag(
    tag_id: int,
    db: Session = Depends(transactional_session),
) -> TagFilesRead:
    ids = SqlAlchemyFileTagRepo(db).files_for_tag(tag_id)
    return TagFilesRead(tag_id=tag_id, file_ids=sorted(ids))


@router.get("/files/{file_id}/tags/{tag_id}", response_model=FileTagExists)
def file_has_tag(
    file_id: int,
    tag_id: int,
    db: Session = Depends(transactional_session),
) -> FileTagExists:
    present = SqlAlchemyFileTagRepo(db).exists(file_id, tag_id)
    return FileTagExists(file_id=file_id, tag_id=tag_id, exists=present)


@router.delete("/files/{file_id}/tags/{tag_id}", status_code=HTTPStatus.NO_CONTENT)
def detach_tag_from_file(
    file_id: int,
    tag_id: int,
    db: Session = Depends(transactional_session),
) -> None:
    # idempotent: removing an absent pairing is not an error
    SqlAlchemyFileTagRepo(db).remove(file_id, tag_id)
    return None
