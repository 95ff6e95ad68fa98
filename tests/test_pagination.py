"""
Pagination value objects and the trim / reorder / wrap algorithm.

Pure functions only; no database involved.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import pytest

from app.exceptions import NullValueError, ParseError
from app.pagination import (
    DEFAULT_LIMIT,
    MAX_LIMIT,
    MAX_PAGE_LIMIT,
    Cursor,
    CursorPage,
    CursorPageRequest,
    Direction,
    HasCursor,
    Page,
    PageRequest,
    TimestampCursor,
    build_cursor_page,
    trim_extra,
)

T0 = datetime(2022, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class Item:
    name: str
    at: datetime

    @property
    def cursor(self) -> TimestampCursor:
        return TimestampCursor(self.at)


def _items(*minutes: int) -> list[Item]:
    return [Item(f"item-{m}", T0 + timedelta(minutes=m)) for m in minutes]


# ---------------------------------------------------------------------------
# TimestampCursor
# ---------------------------------------------------------------------------

def test_cursor_encodes_epoch_milliseconds():
    assert TimestampCursor(datetime(2022, 1, 1, tzinfo=timezone.utc)).encode() == "1640995200000"
    assert str(TimestampCursor(T0)) == "1640995200000"


def test_cursor_decode_valid_tokens():
    assert TimestampCursor.decode("1640995200000") == T0
    assert TimestampCursor.decode("0") == datetime(1970, 1, 1, tzinfo=timezone.utc)
    assert TimestampCursor.decode("-1000") == datetime(1969, 12, 31, 23, 59, 59, tzinfo=timezone.utc)


def test_cursor_decode_returns_utc():
    decoded = TimestampCursor.decode("1640995200123")
    assert decoded.tzinfo == timezone.utc
    assert decoded.microsecond == 123000


def test_cursor_decode_none_means_no_cursor():
    assert TimestampCursor.decode(None) is None


@pytest.mark.parametrize(
    "token",
    [
        "",
        "   ",
        "invalid-timestamp",
        "1640995200.123",
        " 12",
        "1_000",
        "+5",
        "9223372036854775807",
        "9" * 21,
        "-" + "9" * 20,
        "9" * 5000,
        "\u0661\u0662\u0663",
    ],
    ids=lambda token: repr(token) if len(token) < 25 else f"{len(token)}-digits",
)
def test_cursor_decode_rejects_malformed_tokens(token):
    with pytest.raises(ParseError):
        TimestampCursor.decode(token)


def test_parse_error_is_a_value_error():
    with pytest.raises(ValueError):
        TimestampCursor.decode("nope")


def test_cursor_encode_without_value_fails():
    with pytest.raises(NullValueError):
        TimestampCursor(None).encode()


def test_cursor_round_trip_normalises_timezone():
    tokyo = timezone(timedelta(hours=9))
    original = datetime(2023, 6, 1, 9, 30, 15, 456789, tzinfo=tokyo)
    decoded = TimestampCursor.decode(TimestampCursor(original).encode())
    assert decoded.tzinfo == timezone.utc
    assert decoded == original.replace(microsecond=456000)


def test_cursor_treats_naive_values_as_utc():
    naive = datetime(2022, 1, 1)
    assert TimestampCursor(naive) == TimestampCursor(T0)
    assert TimestampCursor(naive).encode() == "1640995200000"


def test_cursor_value_equality():
    assert TimestampCursor(T0) == TimestampCursor(T0)
    assert TimestampCursor(T0) != TimestampCursor(T0 + timedelta(seconds=100))
    assert hash(TimestampCursor(T0)) == hash(TimestampCursor(T0))


def test_cursor_base_is_abstract():
    with pytest.raises(TypeError):
        Cursor(T0)


def test_cursor_decode_accepts_longest_valid_token():
    # Year 9999 is the last instant a datetime can hold.
    last = datetime(9999, 12, 31, 23, 59, 59, 999000, tzinfo=timezone.utc)
    token = TimestampCursor(last).encode()
    assert TimestampCursor.decode(token) == last


# ---------------------------------------------------------------------------
# CursorPageRequest
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "requested, expected",
    [(-5, 20), (0, 20), (None, 20), (1, 1), (50, 50), (1000, 1000), (1001, 1000), (2000, 1000)],
)
def test_cursor_request_limit_normalisation(requested, expected):
    request = CursorPageRequest(None, requested, Direction.NEXT)
    assert request.limit == expected
    assert request.query_limit == expected + 1
    assert 1 <= request.limit <= MAX_LIMIT


def test_cursor_request_defaults():
    request = CursorPageRequest()
    assert request.cursor is None
    assert request.limit == DEFAULT_LIMIT
    assert request.direction is None


def test_cursor_request_is_forward_only_for_next():
    assert CursorPageRequest("c", 10, Direction.NEXT).is_forward() is True
    assert CursorPageRequest("c", 10, Direction.PREV).is_forward() is False
    assert CursorPageRequest("c", 10, None).is_forward() is False


def test_cursor_request_value_equality():
    assert CursorPageRequest("c1", 10, Direction.NEXT) == CursorPageRequest("c1", 10, Direction.NEXT)
    assert CursorPageRequest("c1", 10, Direction.NEXT) != CursorPageRequest("c2", 10, Direction.NEXT)
    assert CursorPageRequest("c1", 10, Direction.NEXT) != CursorPageRequest("c1", 20, Direction.NEXT)
    assert CursorPageRequest("c1", 10, Direction.NEXT) != CursorPageRequest("c1", 10, Direction.PREV)
    assert CursorPageRequest(None, 10, None) == CursorPageRequest(None, 10, None)
    # Normalised limits compare equal.
    assert CursorPageRequest(None, -1, None) == CursorPageRequest(None, 20, None)


def test_cursor_request_is_immutable():
    request = CursorPageRequest(None, 10, Direction.NEXT)
    with pytest.raises(AttributeError):
        request.limit = 5


def test_cursor_request_from_token():
    request = CursorPageRequest.from_token("1640995200000", 5, Direction.PREV)
    assert request == CursorPageRequest(T0, 5, Direction.PREV)
    assert CursorPageRequest.from_token(None).cursor is None
    with pytest.raises(ParseError):
        CursorPageRequest.from_token("yesterday")


# ---------------------------------------------------------------------------
# PageRequest / Page
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "offset, limit, expected",
    [
        (10, 50, (10, 50)),
        (-5, 30, (0, 30)),
        (10, 0, (10, 20)),
        (10, -5, (10, 20)),
        (10, 150, (10, MAX_PAGE_LIMIT)),
        (0, 100, (0, 100)),
        (0, 101, (0, 100)),
        (0, 1, (0, 1)),
    ],
)
def test_page_request_bounds(offset, limit, expected):
    page = PageRequest(offset, limit)
    assert (page.offset, page.limit) == expected


def test_page_request_defaults_and_equality():
    assert PageRequest() == PageRequest(0, 20)
    assert PageRequest(10, 20) != PageRequest(15, 20)
    assert "15" in repr(PageRequest(15, 30)) and "30" in repr(PageRequest(15, 30))


def test_page_keeps_supplied_total():
    page = Page(["a"], 42)
    assert page.items == ["a"]
    assert page.total_count == 42


# ---------------------------------------------------------------------------
# CursorPage
# ---------------------------------------------------------------------------

def test_cursor_page_flags_follow_direction():
    items = _items(1)
    assert CursorPage(items, Direction.NEXT, True).has_next is True
    assert CursorPage(items, Direction.NEXT, True).has_previous is False
    assert CursorPage(items, Direction.PREV, True).has_previous is True
    assert CursorPage(items, Direction.PREV, True).has_next is False
    assert CursorPage(items, None, True).has_next is False
    assert CursorPage(items, None, True).has_previous is False


@pytest.mark.parametrize("direction", [Direction.NEXT, Direction.PREV, None])
@pytest.mark.parametrize("has_extra", [True, False])
def test_cursor_page_flags_are_mutually_exclusive(direction, has_extra):
    page = CursorPage(_items(1, 2), direction, has_extra)
    assert not (page.has_next and page.has_previous)


def test_cursor_page_items_must_expose_a_cursor():
    (bound,) = (p.__bound__ for p in CursorPage.__parameters__)
    assert bound is HasCursor
    assert isinstance(_items(1)[0], HasCursor)
    assert not isinstance(42, HasCursor)


def test_cursor_page_cursors():
    items = _items(1, 2, 3)
    page = CursorPage(items, Direction.NEXT, False)
    assert page.start_cursor == items[0].cursor
    assert page.end_cursor == items[-1].cursor
    assert page.start_cursor != page.end_cursor


def test_cursor_page_single_item_cursors_are_equal():
    page = CursorPage(_items(1), Direction.NEXT, False)
    assert page.start_cursor == page.end_cursor


def test_cursor_page_empty_cursors_are_none():
    page = CursorPage.empty(Direction.NEXT)
    assert page.items == []
    assert page.start_cursor is None
    assert page.end_cursor is None
    assert not page.has_next and not page.has_previous


# ---------------------------------------------------------------------------
# build_cursor_page
# ---------------------------------------------------------------------------

def test_build_next_page_with_extra_drops_last():
    raw = _items(1, 2, 3)
    page = build_cursor_page(raw, CursorPageRequest(None, 2, Direction.NEXT))
    assert page.items == raw[:2]
    assert page.has_extra is True
    assert page.has_next is True
    assert page.has_previous is False


@pytest.mark.parametrize("direction", [Direction.NEXT, Direction.PREV, None])
def test_build_page_without_extra_has_no_flags(direction):
    page = build_cursor_page(_items(1, 2), CursorPageRequest(None, 2, direction))
    assert len(page.items) == 2
    assert page.has_extra is False
    assert page.has_next is False
    assert page.has_previous is False


def test_build_prev_page_reverses_into_forward_order():
    # A backward fetch arrives nearest-to-cursor first.
    raw = _items(5, 4, 3)
    page = build_cursor_page(raw, CursorPageRequest(T0, 2, Direction.PREV))
    assert [i.name for i in page.items] == ["item-4", "item-5"]
    assert page.has_previous is True
    assert page.start_cursor == raw[1].cursor
    assert page.end_cursor == raw[0].cursor


def test_build_prev_page_without_extra_is_full_reverse():
    raw = _items(3, 2, 1)
    page = build_cursor_page(raw, CursorPageRequest(T0, 5, Direction.PREV))
    assert page.items == list(reversed(raw))
    assert page.has_previous is False


def test_build_page_with_absent_direction_reverses_like_prev():
    raw = _items(3, 2, 1)
    page = build_cursor_page(raw, CursorPageRequest(None, 2, None))
    assert [i.name for i in page.items] == ["item-2", "item-3"]
    assert page.has_extra is True
    assert not page.has_next and not page.has_previous


def test_build_page_from_empty_fetch():
    page = build_cursor_page([], CursorPageRequest(None, 10, Direction.NEXT))
    assert page == CursorPage([], Direction.NEXT, False)


def test_build_page_is_idempotent():
    raw = _items(1, 2, 3)
    request = CursorPageRequest(None, 2, Direction.NEXT)
    assert build_cursor_page(raw, request) == build_cursor_page(raw, request)


def test_trim_extra_leaves_input_untouched():
    raw = _items(1, 2, 3)
    items, has_extra = trim_extra(raw, CursorPageRequest(None, 2, Direction.NEXT))
    assert len(items) == 2 and has_extra is True
    assert len(raw) == 3
