# tagger/services/api/routers/files.py
from __future__ import annotations

from http import HTTPStatus
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from tagger.common.settings import get_settings
from tagger.database.models.file import File as DBFile
from tagger.database.repos.file_repo import SqlAlchemyFileRepo
from tagger.domain.errors import DuplicateEntity
from tagger.services.api.deps import transactional_session
from tagger.services.schemas.files import FileCreate, FileRead

cfg = get_settings()
router = APIRouter(prefix=f"{cfg.api.prefix}/files", tags=["files"])


def _file_or_404(db: Session, file_id: int) -> DBFile:
    obj = SqlAlchemyFileRepo(db).get(file_id)
    if not obj:
        raise HTTPException(status_code=HTTPStatus.NOT_FOUND, detail="File not found")
    return obj


@router.get("", response_model=List[FileRead])
def list_files(
    filename: Optional[str] = Query(None, description="Exact filename lookup"),
    db: Session = Depends(transactional_session),
) -> List[FileRead]:
    repo = SqlAlchemyFileRepo(db)
    if filename:
        row = repo.get_by_filename(filename)
        rows = [row] if row else []
    else:
        rows = repo.list_all()
    return [FileRead.model_validate(r) for r in rows]


@router.post("", response_model=FileRead, status_code=HTTPStatus.CREATED)
def create_file(
    payload: FileCreate,
    db: Session = Depends(transactional_session),
) -> FileRead:
    try:
        obj = SqlAlchemyFileRepo(db).create(payload.filename)
    except DuplicateEntity as exc:
        raise HTTPException(status_code=HTTPStatus.CONFLICT, detail=str(exc))
    db.refresh(obj)
    return FileRead.model_validate(obj)


@router.get("/{file_id}", response_model=FileRead)
def get_file(
    file_id: int,
    db: Session = Depends(transactional_session),
) -> FileRead:
    return FileRead.model_validate(_file_or_404(db, file_id))


@router.delete("/{file_id}", status_code=HTTPStatus.NO_CONTENT)
def delete_file(
    file_id: int,
    db: Session = Depends(transactional_session),
) -> None:
    # associations cascade in the database
    if not SqlAlchemyFileRepo(db).delete(file_id):
        raise HTTPException(status_code=HTTPStatus.NOT_FOUND, detail="File not found")
    return None
