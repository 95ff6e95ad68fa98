"""
Favorite read service: batch lookups over ``article_favorites``.

The batch methods take the whole set of IDs on a page and answer in a
single statement each, so annotating a page never costs more than a
constant number of round-trips.
"""
from collections.abc import Collection

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import ArticleFavorite


class ArticleFavoritesReadService:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def articles_favorite_count(self, article_ids: Collection[int]) -> dict[int, int]:
        """Favorite count per article; articles nobody favorited are absent."""
        if not article_ids:
            return {}
        stmt = (
            select(ArticleFavorite.article_id, func.count())
            .where(ArticleFavorite.article_id.in_(list(article_ids)))
            .group_by(ArticleFavorite.article_id)
        )
        result = await self.db.execute(stmt)
        return {article_id: count for article_id, count in result.all()}

    async def user_favorites(self, article_ids: Collection[int], viewer_id: int) -> set[int]:
        """Subset of *article_ids* the viewer has favorited."""
        if not article_ids:
            return set()
        stmt = select(ArticleFavorite.article_id).where(
            ArticleFavorite.user_id == viewer_id,
            ArticleFavorite.article_id.in_(list(article_ids)),
        )
        return set((await self.db.execute(stmt)).scalars().all())

    async def article_favorite_count(self, article_id: int) -> int:
        stmt = (
            select(func.count())
            .select_from(ArticleFavorite)
            .where(ArticleFavorite.article_id == article_id)
        )
        return (await self.db.execute(stmt)).scalar_one()

    async def is_user_favorite(self, viewer_id: int, article_id: int) -> bool:
        stmt = select(ArticleFavorite.article_id).where(
            ArticleFavorite.user_id == viewer_id,
            ArticleFavorite.article_id == article_id,
        )
        return (await self.db.execute(stmt)).first() is not None
