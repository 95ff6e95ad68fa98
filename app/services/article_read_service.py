"""
Article read service: read-only projection of articles into ``ArticleData``.

Records come back un-annotated (``favorited=False``, ``favorites_count=0``,
``profile.following=False``); ``ArticleQueryService`` merges the
viewer-dependent fields in afterwards.
"""
from collections.abc import Collection
from datetime import datetime

from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload, selectinload

from app.models import Article, ArticleFavorite, Tag, User, article_tags
from app.pagination import CursorPageRequest, PageRequest
from app.schemas import ArticleData, ProfileData
from app.services.cursor_query import apply_cursor


def to_profile_data(user: User) -> ProfileData:
    return ProfileData(id=user.id, username=user.username, bio=user.bio, image=user.image)


def to_article_data(article: Article) -> ArticleData:
    return ArticleData(
        id=article.id,
        slug=article.slug,
        title=article.title,
        description=article.description,
        body=article.body,
        created_at=article.created_at,
        updated_at=article.updated_at,
        tag_list=sorted(t.name for t in article.tags),
        profile=to_profile_data(article.author),
    )


def _filter_conditions(tag: str | None, author: str | None, favorited_by: str | None) -> list:
    """WHERE clauses for the optional tag / author / favoriter filters."""
    conditions = []
    if tag:
        conditions.append(
            Article.id.in_(
                select(article_tags.c.article_id)
                .join(Tag, Tag.id == article_tags.c.tag_id)
                .where(Tag.name == tag)
            )
        )
    if author:
        conditions.append(Article.user_id.in_(select(User.id).where(User.username == author)))
    if favorited_by:
        conditions.append(
            Article.id.in_(
                select(ArticleFavorite.article_id)
                .join(User, User.id == ArticleFavorite.user_id)
                .where(User.username == favorited_by)
            )
        )
    return conditions


class ArticleReadService:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    def _select_articles(self):
        # populate_existing: rows a command already loaded in this session carry
        # noload placeholders for author and tags.
        return (
            select(Article)
            .options(joinedload(Article.author), selectinload(Article.tags))
            .execution_options(populate_existing=True)
        )

    async def _fetch(self, stmt) -> list[ArticleData]:
        result = await self.db.execute(stmt)
        return [to_article_data(a) for a in result.unique().scalars().all()]

    async def find_by_id(self, article_id: int) -> ArticleData | None:
        found = await self._fetch(self._select_articles().where(Article.id == article_id))
        return found[0] if found else None

    async def find_by_slug(self, slug: str) -> ArticleData | None:
        found = await self._fetch(self._select_articles().where(Article.slug == slug))
        return found[0] if found else None

    async def query_article_ids(
        self, tag: str | None, author: str | None, favorited_by: str | None, page: PageRequest
    ) -> list[int]:
        stmt = (
            select(Article.id)
            .where(*_filter_conditions(tag, author, favorited_by))
            .order_by(desc(Article.created_at), desc(Article.id))
            .offset(page.offset)
            .limit(page.limit)
        )
        return list((await self.db.execute(stmt)).scalars().all())

    async def count_articles(
        self, tag: str | None, author: str | None, favorited_by: str | None
    ) -> int:
        stmt = (
            select(func.count())
            .select_from(Article)
            .where(*_filter_conditions(tag, author, favorited_by))
        )
        return (await self.db.execute(stmt)).scalar_one()

    async def find_article_ids_with_cursor(
        self,
        tag: str | None,
        author: str | None,
        favorited_by: str | None,
        request: CursorPageRequest[datetime],
    ) -> list[int]:
        stmt = select(Article.id).where(*_filter_conditions(tag, author, favorited_by))
        stmt = apply_cursor(stmt, Article.created_at, Article.id, request)
        return list((await self.db.execute(stmt)).scalars().all())

    async def find_articles(self, article_ids: list[int]) -> list[ArticleData]:
        """Load *article_ids* in one query, returned in the order given."""
        if not article_ids:
            return []
        found = await self._fetch(self._select_articles().where(Article.id.in_(article_ids)))
        by_id = {a.id: a for a in found}
        return [by_id[i] for i in article_ids if i in by_id]

    async def find_articles_of_authors(
        self, author_ids: Collection[int], page: PageRequest
    ) -> list[ArticleData]:
        stmt = (
            self._select_articles()
            .where(Article.user_id.in_(list(author_ids)))
            .order_by(desc(Article.created_at), desc(Article.id))
            .offset(page.offset)
            .limit(page.limit)
        )
        return await self._fetch(stmt)

    async def find_articles_of_authors_with_cursor(
        self, author_ids: Collection[int], request: CursorPageRequest[datetime]
    ) -> list[ArticleData]:
        stmt = self._select_articles().where(Article.user_id.in_(list(author_ids)))
        return await self._fetch(apply_cursor(stmt, Article.created_at, Article.id, request))

    async def count_feed_size(self, author_ids: Collection[int]) -> int:
        stmt = (
            select(func.count())
            .select_from(Article)
            .where(Article.user_id.in_(list(author_ids)))
        )
        return (await self.db.execute(stmt)).scalar_one()
