# tagger/common/naming/slugger.py
from __future__ import annotations

import re
import unicodedata

_slug_re = re.compile(r"[^a-z0-9]+")
_slug_re_unicode = re.compile(r"[\s_]+")


def slugify(text: str, *, max_len: int = 128, allow_unicode: bool = True) -> str:
    """
    Deterministic, human-readable slug used as the identity of a tag name:
      - lowercases
      - NFKC normalize (unicode) or NFKD + strip to ASCII
      - collapse separators to single '-'
      - trim leading/trailing '-'
      - truncate to `max_len`
      - returns '' if nothing remains

    Examples:
      "Exterior Color" -> "exterior-color"
      "  Funny__Name!! " -> "funny-name!!" (unicode) / "funny-name" (ascii)
      "Éxämple" (ascii) -> "example"
      "车辆颜色" -> "车辆颜色"
    """
    if text is None:
        return ""

    value = str(text).strip().lower()

    if allow_unicode:
        # Keep unicode letters and punctuation; only whitespace/underscores become dashes
        value = unicodedata.normalize("NFKC", value)
        value = _slug_re_unicode.sub("-", value)
        value = re.sub(r"-{2,}", "-", value).strip("-")
    else:
        value = unicodedata.normalize("NFKD", value)
        value = value.encode("ascii", "ignore").decode("ascii")
        value = _slug_re.sub("-", value).strip("-")

    if max_len > 0 and len(value) > max_len:
        value = value[:max_len].rstrip("-")

    return value
