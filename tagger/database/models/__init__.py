# tagger/database/models/__init__.py

from tagger.database.core.main import Base
from tagger.database.models.file import File
from tagger.database.models.tag import Tag
from tagger.database.models.file_tag import FileTag

__all__ = [
    "Base",
    "File",
    "Tag",
    "FileTag",
]
