"""Apply a ``CursorPageRequest`` to a SQLAlchemy ``Select``."""
from datetime import datetime

from sqlalchemy import Select

from app.pagination import CursorPageRequest


def apply_cursor(stmt: Select, key, tiebreak, request: CursorPageRequest[datetime]) -> Select:
    """
    Restrict *stmt* to rows strictly past the cursor and fetch
    ``request.query_limit`` of them.

    Forward requests walk *key* ascending.  Anything else walks it
    descending so the rows nearest the cursor come first; the caller
    reverses them once trimmed.
    """
    if request.is_forward():
        if request.cursor is not None:
            stmt = stmt.where(key > request.cursor)
        stmt = stmt.order_by(key.asc(), tiebreak.asc())
    else:
        if request.cursor is not None:
            stmt = stmt.where(key < request.cursor)
        stmt = stmt.order_by(key.desc(), tiebreak.desc())
    return stmt.limit(request.query_limit)
