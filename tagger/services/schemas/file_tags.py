from __future__ import annotations
from typing import List
from pydantic import BaseModel


class FileTagAttach(BaseModel):
    tag_id: int


class FileTagRead(BaseModel):
    file_id: int
    tag_id: int


class FileTagsRead(BaseModel):
    file_id: int
    tag_ids: List[int]


class TagFilesRead(BaseModel):
    tag_id: int
    file_ids: List[int]


class FileTagExists(BaseModel):
    file_id: int
    tag_id: int
    exists: bool
