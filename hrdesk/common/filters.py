"""Case-insensitive substring search across model columns.

``apply_search`` runs in SQL, ``matches_search`` over rows the client has
already fetched. Both treat the term literally: ``%`` and ``_`` are not
wildcards.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

from sqlalchemy import Select, or_
from sqlalchemy.orm import InstrumentedAttribute

LIKE_ESCAPE = "\\"


def escape_like(term: str) -> str:
    """Escape LIKE metacharacters so *term* matches itself."""
    return (
        term.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def apply_search(
    query: Select,
    model: Any,
    search: Optional[str],
    columns: Sequence[str],
) -> Select:
    """
    Keep rows where any of *columns* contains *search*.

    Blank or missing terms leave the query untouched. NULL columns never
    match.
    """
    if not search or not search.strip():
        return query

    pattern = f"%{escape_like(search.strip())}%"
    conds = []
    for name in columns:
        col = _get_column(model, name)
        if col is not None:
            conds.append(col.ilike(pattern, escape=LIKE_ESCAPE))

    if not conds:
        return query
    return query.where(or_(*conds))


def matches_search(term: Optional[str], *values: Optional[str]) -> bool:
    if not term or not term.strip():
        return True
    needle = term.strip().lower()
    return any(v is not None and needle in v.lower() for v in values)


# ── Internal helper ─────────────────────────────────────────────────

def _get_column(model: Any, name: str) -> Optional[InstrumentedAttribute]:
    return getattr(model, name, None)
