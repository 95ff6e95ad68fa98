from fastapi import Depends, Header, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.pagination import (
    DEFAULT_LIMIT,
    DEFAULT_PAGE_LIMIT,
    CursorPageRequest,
    Direction,
    PageRequest,
)
from app.services.article_query_service import ArticleQueryService
from app.services.article_read_service import ArticleReadService
from app.services.comment_query_service import CommentQueryService
from app.services.comment_read_service import CommentReadService
from app.services.favorite_read_service import ArticleFavoritesReadService
from app.services.profile_query_service import ProfileQueryService
from app.services.relationship_read_service import UserRelationshipReadService
from app.services.user_read_service import UserReadService

# ---------------------------------------------------------------------------
# Viewer identity
# ---------------------------------------------------------------------------


async def get_viewer_id(x_viewer_id: int | None = Header(None)) -> int | None:
    """
    Current viewer, or None for anonymous access.

    Authentication happens upstream; the gateway forwards the resolved
    user id in ``X-Viewer-Id``.
    """
    return x_viewer_id


async def require_viewer_id(viewer_id: int | None = Depends(get_viewer_id)) -> int:
    if viewer_id is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    return viewer_id


# ---------------------------------------------------------------------------
# Paging parameters
# ---------------------------------------------------------------------------


class OffsetParams:
    """
    ``offset``/``limit`` query parameters for numbered pages.

    Values are passed through unvalidated; ``PageRequest`` clamps them
    (negative offset -> 0, bad limit -> default, oversized -> max).
    """

    def __init__(
        self,
        offset: int = Query(0, description="Number of items to skip."),
        limit: int = Query(DEFAULT_PAGE_LIMIT, description="Page size (max 100)."),
    ) -> None:
        self.page = PageRequest(offset, limit)


class CursorParams:
    """
    ``cursor``/``limit``/``direction`` query parameters for cursor pages.

    ``cursor`` is an opaque token taken from ``page_info``; a malformed one
    surfaces as a ``ParseError`` (400).
    """

    def __init__(
        self,
        cursor: str | None = Query(None, description="Opaque cursor from a previous page."),
        limit: int = Query(DEFAULT_LIMIT, description="Page size (max 1000)."),
        direction: Direction | None = Query(
            None, description="NEXT pages forward from the cursor, PREV backward."
        ),
    ) -> None:
        self.request = CursorPageRequest.from_token(cursor, limit, direction)


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------


def get_article_query_service(db: AsyncSession = Depends(get_db)) -> ArticleQueryService:
    return ArticleQueryService(
        ArticleReadService(db),
        ArticleFavoritesReadService(db),
        UserRelationshipReadService(db),
    )


def get_comment_query_service(db: AsyncSession = Depends(get_db)) -> CommentQueryService:
    return CommentQueryService(CommentReadService(db), UserRelationshipReadService(db))


def get_profile_query_service(db: AsyncSession = Depends(get_db)) -> ProfileQueryService:
    return ProfileQueryService(UserReadService(db), UserRelationshipReadService(db))
