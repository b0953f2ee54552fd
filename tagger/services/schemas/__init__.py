from tagger.services.schemas.files import (
    FileCreate,
    FileRead,
)
from tagger.services.schemas.tags import (
    TagCreate,
    TagRead,
)
from tagger.services.schemas.file_tags import (
    FileTagAttach,
    FileTagRead,
    FileTagsRead,
    TagFilesRead,
    FileTagExists,
)
__all__ = [
    "FileCreate",
    "FileRead",
    "TagCreate",
    "TagRead",
    "FileTagAttach",
    "FileTagRead",
    "FileTagsRead",
    "TagFilesRead",
    "FileTagExists",
]
