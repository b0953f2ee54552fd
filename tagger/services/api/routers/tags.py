# tagger/services/api/routers/tags.py
from __future__ import annotations

from http import HTTPStatus
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from tagger.common.settings import get_settings
from tagger.database.models.tag import Tag as DBTag
from tagger.database.repos.tag_repo import SqlAlchemyTagRepo
from tagger.domain.errors import DuplicateEntity
from tagger.services.api.deps import transactional_session
from tagger.services.schemas.tags import TagCreate, TagRead

cfg = get_settings()
router = APIRouter(prefix=f"{cfg.api.prefix}/tags", tags=["tags"])


def _tag_or_404(db: Session, tag_id: int) -> DBTag:
    obj = SqlAlchemyTagRepo(db).get(tag_id)
    if not obj:
        raise HTTPException(status_code=HTTPStatus.NOT_FOUND, detail="Tag not found")
    return obj


@router.get("", response_model=List[TagRead])
def list_tags(
    name: Optional[str] = Query(None, description="Lookup by name (slug match)"),
    db: Session = Depends(transactional_session),
) -> List[TagRead]:
    repo = SqlAlchemyTagRepo(db)
    if name:
        row = repo.get_by_name(name)
        rows = [row] if row else []
    else:
        rows = repo.list_all()
    return [TagRead.model_validate(r) for r in rows]


@router.post("", response_model=TagRead, status_code=HTTPStatus.CREATED)
def create_tag(
    payload: TagCreate,
    db: Session = Depends(transactional_session),
) -> TagRead:
    try:
        obj = SqlAlchemyTagRepo(db).create(payload.name)
    except DuplicateEntity as exc:
        raise HTTPException(status_code=HTTPStatus.CONFLICT, detail=str(exc))
    except ValueError as exc:
        raise HTTPException(status_code=HTTPStatus.UNPROCESSABLE_ENTITY, detail=str(exc))
    db.refresh(obj)
    return TagRead.model_validate(obj)


@router.get("/{tag_id}", response_model=TagRead)
def get_tag(
    tag_id: int,
    db: Session = Depends(transactional_session),
) -> TagRead:
    return TagRead.model_validate(_tag_or_404(db, tag_id))


@router.delete("/{tag_id}", status_code=HTTPStatus.NO_CONTENT)
def delete_tag(
    tag_id: int,
    db: Session = Depends(transactional_session),
) -> None:
    if not SqlAlchemyTagRepo(db).delete(tag_id):
        raise HTTPException(status_code=HTTPStatus.NOT_FOUND, detail="Tag not found")
    return None
