"""
Pagination primitives shared by every list-returning query.

Two schemes are supported:

- Offset paging (``PageRequest`` -> ``Page``) for classic numbered pages
  where the caller also wants a total count.
- Cursor paging (``CursorPageRequest`` -> ``CursorPage``) which never
  counts rows.  Readers fetch ``query_limit`` (= ``limit + 1``) records
  ordered along the requested direction; the single extra record only
  signals that more data exists and is trimmed before anything is
  returned.

Everything here is an immutable value object or a pure function, so a
single instance can be shared freely between concurrent requests.
"""
from __future__ import annotations

import enum
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Generic, Protocol, Sequence, TypeVar, runtime_checkable

from app.exceptions import NullValueError, ParseError

T = TypeVar("T")
K = TypeVar("K")

MIN_LIMIT = 1
DEFAULT_LIMIT = 20
MAX_LIMIT = 1000

DEFAULT_PAGE_LIMIT = 20
MAX_PAGE_LIMIT = 100

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_MILLISECOND = timedelta(milliseconds=1)
_INTEGER_RE = re.compile(r"-?[0-9]+")
# Sign plus 19 digits; anything longer cannot name a representable datetime.
_MAX_TOKEN_LENGTH = 20


class Direction(str, enum.Enum):
    NEXT = "NEXT"
    PREV = "PREV"


# ---------------------------------------------------------------------------
# Cursors
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Cursor(ABC, Generic[K]):
    """
    Opaque resume point wrapping a single ordering key.

    Subclasses define the string encoding.  ``encode()`` is the only form
    a cursor ever takes outside the process; the raw key never crosses
    the API boundary.
    """

    value: K | None

    @abstractmethod
    def encode(self) -> str: ...

    @classmethod
    @abstractmethod
    def decode(cls, token: str | None) -> K | None: ...

    def __str__(self) -> str:
        return self.encode()


def as_utc(value: datetime) -> datetime:
    """Return *value* as an aware UTC datetime; naive values are read as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class TimestampCursor(Cursor[datetime]):
    """
    Cursor over a point in time, encoded as integer epoch milliseconds.

    Values are normalised to UTC on construction so two cursors for the
    same instant compare equal whatever timezone they were built in.
    """

    def __post_init__(self) -> None:
        if self.value is not None:
            object.__setattr__(self, "value", as_utc(self.value))

    def encode(self) -> str:
        if self.value is None:
            raise NullValueError("cannot encode a cursor without a value")
        return str((self.value - EPOCH) // _MILLISECOND)

    @classmethod
    def decode(cls, token: str | None) -> datetime | None:
        if token is None:
            return None
        if len(token) > _MAX_TOKEN_LENGTH or not _INTEGER_RE.fullmatch(token):
            raise ParseError(f"invalid cursor: {token!r}")
        try:
            return EPOCH + timedelta(milliseconds=int(token))
        except (OverflowError, ValueError) as exc:
            raise ParseError(f"cursor out of range: {token!r}") from exc


@runtime_checkable
class HasCursor(Protocol):
    """Anything a cursor page can hold: it knows its own resume point."""

    @property
    def cursor(self) -> Cursor: ...


C = TypeVar("C", bound=HasCursor)


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PageRequest:
    """Offset/limit pair for numbered pages."""

    offset: int = 0
    limit: int = DEFAULT_PAGE_LIMIT

    def __post_init__(self) -> None:
        offset = self.offset if self.offset is not None and self.offset > 0 else 0
        limit = self.limit
        if limit is None or limit <= 0:
            limit = DEFAULT_PAGE_LIMIT
        elif limit > MAX_PAGE_LIMIT:
            limit = MAX_PAGE_LIMIT
        object.__setattr__(self, "offset", offset)
        object.__setattr__(self, "limit", limit)


@dataclass(frozen=True)
class CursorPageRequest(Generic[K]):
    """
    Direction-aware cursor page request.

    ``cursor`` is exclusive: the record carrying that key is never part
    of the page.  ``limit`` always ends up within ``[MIN_LIMIT,
    MAX_LIMIT]``; missing or non-positive values fall back to
    ``DEFAULT_LIMIT`` and oversized ones are capped.

    ``direction`` may be ``None``.  An absent direction is *not* forward,
    so readers order it like ``PREV``, but the resulting page reports
    neither ``has_next`` nor ``has_previous``.
    """

    cursor: K | None = None
    limit: int = DEFAULT_LIMIT
    direction: Direction | None = None

    def __post_init__(self) -> None:
        limit = self.limit
        if limit is None or limit < MIN_LIMIT:
            limit = DEFAULT_LIMIT
        elif limit > MAX_LIMIT:
            limit = MAX_LIMIT
        object.__setattr__(self, "limit", limit)

    @property
    def query_limit(self) -> int:
        return self.limit + 1

    def is_forward(self) -> bool:
        return self.direction is Direction.NEXT

    @classmethod
    def from_token(
        cls,
        token: str | None,
        limit: int | None = DEFAULT_LIMIT,
        direction: Direction | None = None,
    ) -> CursorPageRequest[datetime]:
        """Build a timestamp-keyed request from a wire cursor token."""
        return cls(TimestampCursor.decode(token), limit, direction)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Page(Generic[T]):
    """Offset-paged result.  ``total_count`` is supplied, never recomputed."""

    items: list[T] = field(default_factory=list)
    total_count: int = 0


@dataclass(frozen=True)
class CursorPage(Generic[C]):
    """
    Cursor-paged result.

    ``items`` are always in forward key order, whichever direction was
    requested.  ``has_next`` and ``has_previous`` derive from the single
    ``has_extra`` flag, so at most one of them is ever true.
    """

    items: list[C] = field(default_factory=list)
    direction: Direction | None = None
    has_extra: bool = False

    @property
    def has_next(self) -> bool:
        return self.has_extra and self.direction is Direction.NEXT

    @property
    def has_previous(self) -> bool:
        return self.has_extra and self.direction is Direction.PREV

    @property
    def start_cursor(self) -> Cursor | None:
        return self.items[0].cursor if self.items else None

    @property
    def end_cursor(self) -> Cursor | None:
        return self.items[-1].cursor if self.items else None

    @classmethod
    def empty(cls, direction: Direction | None = None) -> CursorPage[C]:
        return cls([], direction, False)


def trim_extra(raw: Sequence[T], request: CursorPageRequest) -> tuple[list[T], bool]:
    """
    Drop the over-fetched probe record, if any.

    Returns the trimmed items (still in fetch order) and whether the
    probe was present.  Items need no cursor, so readers can trim bare
    IDs before loading the records behind them.
    """
    items = list(raw)
    has_extra = len(items) > request.limit
    if has_extra:
        del items[request.limit:]
    return items, has_extra


def wrap_cursor_page(
    items: Sequence[C], request: CursorPageRequest, has_extra: bool
) -> CursorPage[C]:
    """Put already-trimmed *items* into forward order and wrap them."""
    ordered = list(items)
    if not request.is_forward():
        ordered.reverse()
    return CursorPage(ordered, request.direction, has_extra)


def build_cursor_page(raw: Sequence[C], request: CursorPageRequest) -> CursorPage[C]:
    """Trim, reorder and wrap a raw ``query_limit`` fetch."""
    items, has_extra = trim_extra(raw, request)
    return wrap_cursor_page(items, request, has_extra)
