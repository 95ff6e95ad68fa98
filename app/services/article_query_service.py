"""
Article query service: assembles annotated article pages.

Every list operation follows the same steps:

1. Resolve the scope (filters, or the viewer's followed authors).  A
   viewer who follows nobody gets an empty page without the article
   reader ever being queried.
2. Fetch ``query_limit`` records (cursor paging) or one offset page.
3. Trim the over-fetched probe record, then annotate exactly the
   remaining records with batch lookups: favorite counts, the viewer's
   favorites and the authors the viewer follows.  Anonymous requests skip
   the lookups and every annotation keeps its false/zero default.
4. Reverse backward pages into forward order and wrap them.
"""
import logging
from datetime import datetime

from app.exceptions import InvalidArgumentError
from app.pagination import (
    CursorPage,
    CursorPageRequest,
    Page,
    PageRequest,
    trim_extra,
    wrap_cursor_page,
)
from app.schemas import ArticleData
from app.services.protocols import ArticleReader, FavoriteReader, RelationshipReader

logger = logging.getLogger(__name__)


class ArticleQueryService:
    def __init__(
        self,
        articles: ArticleReader,
        favorites: FavoriteReader,
        relationships: RelationshipReader,
    ) -> None:
        self.articles = articles
        self.favorites = favorites
        self.relationships = relationships

    # ------------------------------------------------------------------
    # Single articles
    # ------------------------------------------------------------------

    async def find_by_id(self, article_id: int, viewer_id: int | None = None) -> ArticleData | None:
        article = await self.articles.find_by_id(article_id)
        if article is None:
            return None
        return await self._annotate_one(article, viewer_id)

    async def find_by_slug(self, slug: str, viewer_id: int | None = None) -> ArticleData | None:
        article = await self.articles.find_by_slug(slug)
        if article is None:
            return None
        return await self._annotate_one(article, viewer_id)

    # ------------------------------------------------------------------
    # Lists
    # ------------------------------------------------------------------

    async def find_recent_articles(
        self,
        tag: str | None,
        author: str | None,
        favorited_by: str | None,
        page: PageRequest,
        viewer_id: int | None = None,
    ) -> Page[ArticleData]:
        article_ids = await self.articles.query_article_ids(tag, author, favorited_by, page)
        total = await self.articles.count_articles(tag, author, favorited_by)
        if not article_ids:
            return Page([], total)
        records = await self.articles.find_articles(article_ids)
        return Page(await self._annotate(records, viewer_id), total)

    async def find_recent_articles_with_cursor(
        self,
        tag: str | None,
        author: str | None,
        favorited_by: str | None,
        request: CursorPageRequest[datetime],
        viewer_id: int | None = None,
    ) -> CursorPage[ArticleData]:
        raw_ids = await self.articles.find_article_ids_with_cursor(tag, author, favorited_by, request)
        if not raw_ids:
            return CursorPage.empty(request.direction)
        article_ids, has_extra = trim_extra(raw_ids, request)
        records = await self.articles.find_articles(article_ids)
        annotated = await self._annotate(records, viewer_id)
        return wrap_cursor_page(annotated, request, has_extra)

    async def find_user_feed(self, viewer_id: int | None, page: PageRequest) -> Page[ArticleData]:
        followed = await self._followed_authors(viewer_id)
        if not followed:
            return Page([], 0)
        records = await self.articles.find_articles_of_authors(followed, page)
        total = await self.articles.count_feed_size(followed)
        return Page(await self._annotate(records, viewer_id), total)

    async def find_user_feed_with_cursor(
        self, viewer_id: int | None, request: CursorPageRequest[datetime]
    ) -> CursorPage[ArticleData]:
        followed = await self._followed_authors(viewer_id)
        if not followed:
            return CursorPage.empty(request.direction)
        raw = await self.articles.find_articles_of_authors_with_cursor(followed, request)
        records, has_extra = trim_extra(raw, request)
        annotated = await self._annotate(records, viewer_id)
        return wrap_cursor_page(annotated, request, has_extra)

    # ------------------------------------------------------------------
    # Annotation
    # ------------------------------------------------------------------

    async def _followed_authors(self, viewer_id: int | None) -> set[int]:
        if viewer_id is None:
            raise InvalidArgumentError("a viewer is required to read a feed")
        followed = await self.relationships.followed_users(viewer_id)
        if not followed:
            logger.debug("Viewer %s follows nobody; feed is empty", viewer_id)
        return followed

    async def _annotate(
        self, records: list[ArticleData], viewer_id: int | None
    ) -> list[ArticleData]:
        if not records or viewer_id is None:
            return records

        article_ids = {a.id for a in records}
        author_ids = {a.profile.id for a in records}
        counts = await self.favorites.articles_favorite_count(article_ids)
        favorited = await self.favorites.user_favorites(article_ids, viewer_id)
        following = await self.relationships.following_authors(viewer_id, author_ids)

        return [
            _merge(a, counts.get(a.id, 0), a.id in favorited, a.profile.id in following, viewer_id)
            for a in records
        ]

    async def _annotate_one(self, article: ArticleData, viewer_id: int | None) -> ArticleData:
        if viewer_id is None:
            return article
        return _merge(
            article,
            await self.favorites.article_favorite_count(article.id),
            await self.favorites.is_user_favorite(viewer_id, article.id),
            await self.relationships.is_user_following(viewer_id, article.profile.id),
            viewer_id,
        )


def _merge(
    article: ArticleData, count: int, favorited: bool, following: bool, viewer_id: int
) -> ArticleData:
    profile = article.profile.model_copy(
        update={"following": following and article.profile.id != viewer_id}
    )
    return article.model_copy(
        update={"favorites_count": count, "favorited": favorited, "profile": profile}
    )
