"""
Article command service: writes for the Article aggregate.

Functions flush but never commit; the ``get_db`` dependency owns the
transaction.  Reads go through ``ArticleQueryService`` so that responses
carry the viewer's annotations.

Only the author may update or delete an article.  Every write that can
change which tags are in use drops the cached tag list.
"""
import logging
import re
import time

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.cache import cache
from app.exceptions import ForbiddenError, NotFoundError
from app.models import Article, ArticleFavorite, Comment, Tag, article_tags, utcnow
from app.schemas import ArticleCreate, ArticleUpdate

logger = logging.getLogger(__name__)

_SLUG_STRIP_RE = re.compile(r"[^\w\s-]")
_SLUG_SPACE_RE = re.compile(r"[\s_]+")
_SLUG_DASH_RE = re.compile(r"-+")


def slugify(text: str) -> str:
    """Return a URL-safe, lowercase slug derived from *text*."""
    text = _SLUG_STRIP_RE.sub("", text.lower().strip())
    text = _SLUG_SPACE_RE.sub("-", text)
    return _SLUG_DASH_RE.sub("-", text).strip("-")


async def _unique_slug(db: AsyncSession, title: str, exclude_id: int | None = None) -> str:
    slug = slugify(title)
    q = select(Article.id).where(Article.slug == slug)
    if exclude_id is not None:
        q = q.where(Article.id != exclude_id)
    if (await db.execute(q)).first() is not None:
        slug = f"{slug}-{time.time_ns() // 1000}"
    return slug


async def _resolve_tags(db: AsyncSession, tag_names: list[str]) -> list[Tag]:
    """Tag rows for *tag_names*, creating the missing ones."""
    tags: list[Tag] = []
    for name in dict.fromkeys(n.strip() for n in tag_names if n.strip()):
        tag = (await db.execute(select(Tag).where(Tag.name == name))).scalar_one_or_none()
        if tag is None:
            tag = Tag(name=name)
            db.add(tag)
            await db.flush()
        tags.append(tag)
    return tags


async def get_article_by_slug(db: AsyncSession, slug: str) -> Article:
    article = (await db.execute(select(Article).where(Article.slug == slug))).scalar_one_or_none()
    if article is None:
        raise NotFoundError("Article")
    return article


async def _get_owned_article(db: AsyncSession, slug: str, viewer_id: int) -> Article:
    article = await get_article_by_slug(db, slug)
    if article.user_id != viewer_id:
        raise ForbiddenError("only the author can modify this article")
    return article


# ---------------------------------------------------------------------------
# Public service functions
# ---------------------------------------------------------------------------

async def create_article(db: AsyncSession, author_id: int, data: ArticleCreate) -> int:
    """Create an article by *author_id* and return its id."""
    article = Article(
        slug=await _unique_slug(db, data.title),
        title=data.title,
        description=data.description,
        body=data.body,
        user_id=author_id,
    )
    if data.tag_list:
        article.tags.extend(await _resolve_tags(db, data.tag_list))

    db.add(article)
    await db.flush()
    await cache.invalidate_tags()
    logger.info("Article %d created by user %d", article.id, author_id)
    return article.id


async def update_article(db: AsyncSession, slug: str, viewer_id: int, data: ArticleUpdate) -> int:
    """Apply the fields set in *data*; a new title also regenerates the slug."""
    article = await _get_owned_article(db, slug, viewer_id)

    update_data = data.model_dump(exclude_unset=True, exclude_none=True)
    for field, value in update_data.items():
        setattr(article, field, value)
    if "title" in update_data:
        article.slug = await _unique_slug(db, update_data["title"], exclude_id=article.id)
    article.updated_at = utcnow()

    await db.flush()
    return article.id


async def delete_article(db: AsyncSession, slug: str, viewer_id: int) -> None:
    article = await _get_owned_article(db, slug, viewer_id)
    article_id = article.id

    # Dependent rows are removed explicitly; SQLite does not enforce ON DELETE.
    await db.execute(delete(Comment).where(Comment.article_id == article_id))
    await db.execute(delete(ArticleFavorite).where(ArticleFavorite.article_id == article_id))
    await db.execute(delete(article_tags).where(article_tags.c.article_id == article_id))
    await db.execute(delete(Article).where(Article.id == article_id))
    await cache.invalidate_tags()
    logger.info("Article %d deleted by user %d", article_id, viewer_id)


async def favorite_article(db: AsyncSession, slug: str, viewer_id: int) -> int:
    """Favorite the article; favoriting twice is a no-op."""
    article = await get_article_by_slug(db, slug)
    if await db.get(ArticleFavorite, (article.id, viewer_id)) is None:
        db.add(ArticleFavorite(article_id=article.id, user_id=viewer_id))
        await db.flush()
    return article.id


async def unfavorite_article(db: AsyncSession, slug: str, viewer_id: int) -> int:
    article = await get_article_by_slug(db, slug)
    favorite = await db.get(ArticleFavorite, (article.id, viewer_id))
    if favorite is not None:
        await db.delete(favorite)
        await db.flush()
    return article.id
