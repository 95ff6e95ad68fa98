from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.cache import TAGS_KEY, cache
from app.config import settings
from app.models import Tag, article_tags


class TagsQueryService:
    """Names of all tags in use, served cache-aside from Redis."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def all_tags(self) -> list[str]:
        cached = await cache.get(TAGS_KEY)
        if cached is not None:
            return cached

        stmt = (
            select(Tag.name)
            .where(Tag.id.in_(select(article_tags.c.tag_id)))
            .order_by(Tag.name)
        )
        tags = list((await self.db.execute(stmt)).scalars().all())
        await cache.set(TAGS_KEY, tags, ttl=settings.CACHE_TTL_TAGS)
        return tags
