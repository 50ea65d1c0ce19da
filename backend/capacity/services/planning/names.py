import re
import unicodedata
from typing import Any, Iterable

_WS_RE = re.compile(r"\s+")


def normalize_name(name: Any) -> str:
    """Matching key for engineer names: case-folded, no diacritics, single spaces.

    Never use it for display.
    """
    if name is None:
        return ""
    s = unicodedata.normalize("NFKD", str(name))
    s = "".join(ch for ch in s if not unicodedata.combining(ch))
    return _WS_RE.sub(" ", s).strip().casefold()


def slugify(name: Any) -> str:
    return normalize_name(name).replace(" ", "-")


def name_index(engineers: Iterable[Any]) -> dict[str, Any]:
    """Normalized display name and slug -> engineer. First one wins on clashes."""
    out: dict[str, Any] = {}
    for e in engineers:
        for raw in (getattr(e, "display_name", None), getattr(e, "slug", None)):
            key = normalize_name(raw)
            if key and key not in out:
                out[key] = e
    return out
