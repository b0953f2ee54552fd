from typing import List


def csv_to_list(v: str | List[str] | None) -> List[str]:
    """Accept 'a, b,c' from the environment as well as a real list."""
    if v is None:
        return []
    if isinstance(v, (list, tuple)):
        return [str(s).strip() for s in v if s and str(s).strip()]
    return [s.strip() for s in str(v).split(",") if s.strip()]
